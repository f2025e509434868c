"""Evidence assembly services."""
