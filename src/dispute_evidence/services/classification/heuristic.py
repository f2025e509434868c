"""Best-effort structural decoding for logs no schema family recognizes."""

import logging

from web3 import Web3

from dispute_evidence.infrastructure.blockchain.types import RawLog
from dispute_evidence.services.classification.schemas import (
    DecodedParam,
    HeuristicEvent,
    HeuristicPattern,
)

logger = logging.getLogger(__name__)

WORD_HEX_LENGTH = 64  # 32 bytes
ADDRESS_PADDING = "0" * 24  # high-order 12 bytes of an address word


class HeuristicDecoder:
    """Guesses the shape of unknown events.

    Topics whose high 12 bytes are zero are read as addresses; data words are
    read as uint256. Anything that does not fit is kept as an opaque value, so
    decoding never fails.
    """

    def decode_topic(self, topic: str) -> DecodedParam:
        """Address if the word is a zero-padded 20-byte value, else bytes32."""
        try:
            word = topic[2:] if topic.startswith("0x") else topic
            if len(word) == WORD_HEX_LENGTH and word[:24] == ADDRESS_PADDING:
                return DecodedParam(
                    type="address", value=Web3.to_checksum_address("0x" + word[24:])
                )
        except Exception as e:
            logger.debug(f"Topic {topic} is not an address: {e}")
        return DecodedParam(type="bytes32", value=topic)

    def decode_data(self, data: str) -> list[DecodedParam]:
        """Split data into 32-byte words, each uint256 when it parses."""
        payload = data[2:] if data.startswith("0x") else data
        params = []
        for start in range(0, len(payload), WORD_HEX_LENGTH):
            chunk = payload[start : start + WORD_HEX_LENGTH]
            if len(chunk) == WORD_HEX_LENGTH:
                try:
                    params.append(DecodedParam(type="uint256", value=str(int(chunk, 16))))
                    continue
                except ValueError:
                    pass
            params.append(DecodedParam(type="bytes", value="0x" + chunk))
        return params

    def decode(self, log: RawLog) -> HeuristicEvent:
        """Decode a log that matched no schema. Never raises."""
        indexed = [self.decode_topic(topic) for topic in log.topics[1:]]
        non_indexed = self.decode_data(log.data or "0x")

        pattern = HeuristicPattern.UNKNOWN
        from_address = to_address = amount = None

        address_count = sum(1 for p in indexed if p.type == "address")
        if len(indexed) >= 2 and indexed[0].type == "address" and indexed[1].type == "address":
            pattern = HeuristicPattern.TRANSFER
            from_address = indexed[0].value
            to_address = indexed[1].value
            amount = next((p.value for p in non_indexed if p.type == "uint256"), None)
        elif address_count == 1:
            pattern = HeuristicPattern.SINGLE_ADDRESS

        return HeuristicEvent(
            type=pattern,
            event_signature=log.selector or "0x",
            from_address=from_address,
            to_address=to_address,
            amount=amount,
            indexed_params=tuple(indexed),
            non_indexed_params=tuple(non_indexed),
            log_index=log.log_index,
            raw_data=log.data or "0x",
        )
