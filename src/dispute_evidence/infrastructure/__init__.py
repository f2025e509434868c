"""Infrastructure adapters (chain RPC, cache)."""
