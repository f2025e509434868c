"""Tests for schema registry, heuristic decoder and log classifier."""

import pytest
from web3 import Web3

from dispute_evidence.infrastructure.blockchain.types import RawLog
from dispute_evidence.services.classification import (
    ContractType,
    EventKind,
    EvidenceBundle,
    HeuristicDecoder,
    HeuristicPattern,
    LogClassifier,
    SchemaRegistry,
)
from helpers import (
    ALICE,
    BOB,
    PARTIAL_TRANSFER,
    TOKEN_MINTED,
    TOKEN_TRANSFER_FAILED,
    TRANSFER,
    TRANSFER_FAILED,
    abi_data,
    address_topic,
    erc20_transfer_log,
    erc721_transfer_log,
    make_log,
    token_minted_log,
    transfer_failed_log,
    uint_topic,
)

UNKNOWN_SELECTOR = "0x" + "ab" * 32


class TestSchemaRegistry:
    """Tests for SchemaRegistry."""

    def test_default_priority_order(self):
        """Test families are ordered ERC20, ERC721, DisputeContract."""
        registry = SchemaRegistry()

        assert [f.contract_type for f in registry] == [
            ContractType.ERC20,
            ContractType.ERC721,
            ContractType.DISPUTE_CONTRACT,
        ]

    def test_dispute_family_has_five_events(self):
        """Test dispute contract family registers its five event kinds."""
        family = SchemaRegistry().get(ContractType.DISPUTE_CONTRACT)

        names = {d.name for d in family.definitions}
        assert names == {
            "Transfer",
            "TransferFailed",
            "PartialTransfer",
            "TokenMinted",
            "TokenTransferFailed",
        }

    def test_selectors_match_keccak_of_signature(self):
        """Test selectors are keccak256 of the canonical signature."""
        registry = SchemaRegistry()

        assert registry.selector_for(ContractType.ERC20, "Transfer") == TRANSFER
        assert (
            registry.selector_for(ContractType.DISPUTE_CONTRACT, "TransferFailed")
            == TRANSFER_FAILED
        )

    def test_signature_rendering(self):
        """Test definition signature string."""
        family = SchemaRegistry().get(ContractType.DISPUTE_CONTRACT)
        minted = next(d for d in family.definitions if d.name == "TokenMinted")

        assert minted.signature == "TokenMinted(address,uint256)"
        assert [p.name for p in minted.indexed_params] == ["to"]

    def test_selector_for_unknown_event(self):
        """Test unknown event lookup raises KeyError."""
        with pytest.raises(KeyError):
            SchemaRegistry().selector_for(ContractType.ERC20, "Approval")

    def test_try_decode_returns_none_on_selector_miss(self):
        """Test family decoder returns None for foreign selectors."""
        family = SchemaRegistry().get(ContractType.ERC20)

        assert family.try_decode(make_log([UNKNOWN_SELECTOR])) is None


class TestLogClassifier:
    """Tests for LogClassifier."""

    def test_transfer_failed_scenario(self):
        """Test TransferFailed decodes to a failure record."""
        bundle = LogClassifier().classify([transfer_failed_log()])

        assert len(bundle.failures) == 1
        failure = bundle.failures[0]
        assert failure.type == "TransferFailed"
        assert failure.kind == EventKind.FAILURE
        assert failure.from_address == Web3.to_checksum_address(ALICE)
        assert failure.to_address == Web3.to_checksum_address(BOB)
        assert failure.amount == "1500"
        assert failure.reason == "Amount too high: exceeds 1000"
        assert bundle.contract_type == ContractType.DISPUTE_CONTRACT
        assert bundle.transfers == ()
        assert bundle.unknown_events == ()

    def test_failure_serializes_with_contract_field_names(self):
        """Test failure record dumps with from/to keys."""
        bundle = LogClassifier().classify([transfer_failed_log()])

        dumped = bundle.model_dump(by_alias=True, exclude_none=True)
        record = dumped["failures"][0]

        assert record["type"] == "TransferFailed"
        assert record["from"] == Web3.to_checksum_address(ALICE)
        assert record["to"] == Web3.to_checksum_address(BOB)
        assert record["amount"] == "1500"
        assert "partialTransfers" in dumped
        assert "unknownEvents" in dumped
        assert dumped["contractType"] == "DisputeContract"

    def test_erc20_transfer(self):
        """Test fungible Transfer is classified as ERC20."""
        bundle = LogClassifier().classify([erc20_transfer_log(amount=42)])

        assert len(bundle.transfers) == 1
        transfer = bundle.transfers[0]
        assert transfer.type == "ERC20"
        assert transfer.family == ContractType.ERC20
        assert transfer.amount == "42"
        assert transfer.token_id is None
        assert bundle.contract_type == ContractType.ERC20

    def test_erc721_transfer(self):
        """Test indexed tokenId Transfer falls through ERC20 to ERC721."""
        bundle = LogClassifier().classify([erc721_transfer_log(token_id=7)])

        assert len(bundle.transfers) == 1
        transfer = bundle.transfers[0]
        assert transfer.type == "ERC721"
        assert transfer.token_id == "7"
        assert transfer.amount is None
        assert bundle.contract_type == ContractType.ERC721

    def test_dispute_transfer_claimed_by_erc20_first(self):
        """Test a layout shared by two families goes to the first in priority."""
        log = make_log(
            [TRANSFER, address_topic(ALICE), address_topic(BOB)],
            abi_data(["uint256"], [5]),
        )

        event = LogClassifier().classify_log(log)

        assert event.family == ContractType.ERC20

    def test_token_minted_goes_to_transfers(self):
        """Test TokenMinted is a mint routed into transfers."""
        bundle = LogClassifier().classify([token_minted_log(token_id=3)])

        assert len(bundle.transfers) == 1
        mint = bundle.transfers[0]
        assert mint.kind == EventKind.MINT
        assert mint.type == "TokenMinted"
        assert mint.token_id == "3"
        assert mint.from_address is None
        assert mint.to_address == Web3.to_checksum_address(BOB)

    def test_partial_transfer(self):
        """Test PartialTransfer decodes requested and sent."""
        log = make_log(
            [PARTIAL_TRANSFER, address_topic(ALICE), address_topic(BOB)],
            abi_data(["uint256", "uint256"], [1000, 400]),
        )

        bundle = LogClassifier().classify([log])

        assert len(bundle.partial_transfers) == 1
        partial = bundle.partial_transfers[0]
        assert partial.requested == "1000"
        assert partial.sent == "400"
        assert partial.kind == EventKind.PARTIAL_TRANSFER

    def test_token_transfer_failed(self):
        """Test TokenTransferFailed is a failure with token id."""
        log = make_log(
            [TOKEN_TRANSFER_FAILED, address_topic(ALICE), address_topic(BOB)],
            abi_data(["uint256", "string"], [9, "Not owner"]),
        )

        bundle = LogClassifier().classify([log])

        assert bundle.failures[0].type == "TokenTransferFailed"
        assert bundle.failures[0].token_id == "9"
        assert bundle.failures[0].reason == "Not owner"

    def test_one_event_per_log(self):
        """Test each log yields exactly one event in exactly one sequence."""
        logs = [
            erc20_transfer_log(log_index=0),
            transfer_failed_log(log_index=1),
            make_log([UNKNOWN_SELECTOR], log_index=2),
        ]

        bundle = LogClassifier().classify(logs)

        assert bundle.event_count == 3
        assert [e.log_index for e in bundle.transfers] == [0]
        assert [e.log_index for e in bundle.failures] == [1]
        assert [e.log_index for e in bundle.unknown_events] == [2]

    def test_contract_type_sticks_to_first_family(self):
        """Test later logs from another family do not overwrite contract type."""
        logs = [token_minted_log(log_index=0), erc20_transfer_log(log_index=1)]

        bundle = LogClassifier().classify(logs)

        assert bundle.contract_type == ContractType.DISPUTE_CONTRACT
        assert len(bundle.transfers) == 2

    def test_heuristic_only_sets_unknown(self):
        """Test heuristic decoding alone sets the Unknown contract type."""
        bundle = LogClassifier().classify([make_log([UNKNOWN_SELECTOR])])

        assert bundle.contract_type == ContractType.UNKNOWN
        assert len(bundle.unknown_events) == 1

    def test_schema_match_upgrades_heuristic_placeholder(self):
        """Test a schema family replaces the Unknown placeholder."""
        logs = [make_log([UNKNOWN_SELECTOR], log_index=0), erc20_transfer_log(log_index=1)]

        bundle = LogClassifier().classify(logs)

        assert bundle.contract_type == ContractType.ERC20

    def test_empty_logs(self):
        """Test no logs gives an empty bundle without contract type."""
        bundle = LogClassifier().classify([])

        assert bundle.contract_type is None
        assert bundle.event_count == 0

    def test_anonymous_log_skipped(self):
        """Test logs without topics are ignored."""
        bundle = LogClassifier().classify([make_log([], "0x" + "00" * 32)])

        assert bundle.event_count == 0
        assert bundle.contract_type is None

    def test_malformed_known_selector_falls_back_to_heuristics(self):
        """Test a Transfer selector with missing data decodes heuristically."""
        log = make_log([TRANSFER, address_topic(ALICE), address_topic(BOB)])

        bundle = LogClassifier().classify([log])

        assert bundle.transfers == ()
        assert len(bundle.unknown_events) == 1
        event = bundle.unknown_events[0]
        assert event.type == HeuristicPattern.TRANSFER
        assert event.amount is None

    def test_bundle_is_frozen(self):
        """Test bundles cannot be mutated after classification."""
        bundle = LogClassifier().classify([erc20_transfer_log()])

        with pytest.raises(Exception):
            bundle.contract_type = ContractType.ERC721

    def test_bundle_contract_info_is_read_only(self):
        """Test contract metadata cannot be changed in place."""
        info = {"symbol": "TKN"}
        bundle = EvidenceBundle(contract_info=info)

        with pytest.raises(TypeError):
            bundle.contract_info["symbol"] = "EVIL"

        info["symbol"] = "EVIL"
        assert bundle.contract_info == {"symbol": "TKN"}

    def test_read_only_contract_info_serializes(self):
        """Test read-only metadata still dumps as a JSON object."""
        bundle = EvidenceBundle(contract_info={"decimals": 18})

        restored = EvidenceBundle.model_validate_json(bundle.model_dump_json(by_alias=True))

        assert bundle.model_dump(by_alias=True)["contractInfo"] == {"decimals": 18}
        assert restored.contract_info == {"decimals": 18}


class TestHeuristicDecoder:
    """Tests for HeuristicDecoder."""

    def test_transfer_shaped_event(self):
        """Test two leading address topics produce a transfer pattern."""
        log = make_log(
            [UNKNOWN_SELECTOR, address_topic(ALICE), address_topic(BOB)],
            abi_data(["uint256", "uint256"], [250, 1]),
            log_index=4,
        )

        event = HeuristicDecoder().decode(log)

        assert event.type == HeuristicPattern.TRANSFER
        assert event.kind == EventKind.UNKNOWN
        assert event.event_signature == UNKNOWN_SELECTOR
        assert event.from_address == Web3.to_checksum_address(ALICE)
        assert event.to_address == Web3.to_checksum_address(BOB)
        assert event.amount == "250"
        assert [p.type for p in event.non_indexed_params] == ["uint256", "uint256"]
        assert event.log_index == 4

    def test_single_address_event(self):
        """Test one address topic tags a single-address pattern."""
        log = make_log([UNKNOWN_SELECTOR, address_topic(ALICE), "0x" + "ff" * 32])

        event = HeuristicDecoder().decode(log)

        assert event.type == HeuristicPattern.SINGLE_ADDRESS
        assert event.from_address is None
        assert event.to_address is None
        assert [p.type for p in event.indexed_params] == ["address", "bytes32"]

    def test_non_address_topics_are_unknown(self):
        """Test topics with non-zero high bytes stay opaque."""
        opaque = "0x" + "ff" * 32
        event = HeuristicDecoder().decode(make_log([UNKNOWN_SELECTOR, opaque, opaque]))

        assert event.type == HeuristicPattern.UNKNOWN
        assert event.indexed_params[0].value == opaque
        assert event.from_address is None

    def test_selector_only(self):
        """Test an event with only a selector is Unknown."""
        event = HeuristicDecoder().decode(make_log([UNKNOWN_SELECTOR]))

        assert event.type == HeuristicPattern.UNKNOWN
        assert event.indexed_params == ()
        assert event.non_indexed_params == ()

    def test_amount_from_first_integer_chunk(self):
        """Test amount skips opaque chunks."""
        data = "0x" + "zz" * 32 + (77).to_bytes(32, "big").hex()
        log = make_log([UNKNOWN_SELECTOR, address_topic(ALICE), address_topic(BOB)], data)

        event = HeuristicDecoder().decode(log)

        assert [p.type for p in event.non_indexed_params] == ["bytes", "uint256"]
        assert event.amount == "77"

    def test_trailing_partial_chunk_kept_opaque(self):
        """Test a short trailing chunk becomes an opaque bytes value."""
        params = HeuristicDecoder().decode_data("0x" + "00" * 31 + "05" + "abcd")

        assert params[0].type == "uint256"
        assert params[0].value == "5"
        assert params[1].type == "bytes"
        assert params[1].value == "0xabcd"

    def test_malformed_topic_never_raises(self):
        """Test garbage topics degrade to opaque values."""
        log = make_log([UNKNOWN_SELECTOR, "0x" + "0" * 24 + "zz" * 20, "0x12"], "0xnothex")

        event = HeuristicDecoder().decode(log)

        assert [p.type for p in event.indexed_params] == ["bytes32", "bytes32"]
        assert event.type == HeuristicPattern.UNKNOWN

    def test_zero_padded_uint_reads_as_address(self):
        """Test small integers in topics are indistinguishable from addresses."""
        param = HeuristicDecoder().decode_topic(uint_topic(5))

        assert param.type == "address"

    def test_mint_shaped_event_from_zero_address(self):
        """Test the zero address counts as an address topic."""
        zero = "0x" + "00" * 32
        event = HeuristicDecoder().decode(
            make_log([UNKNOWN_SELECTOR, zero, address_topic(BOB)])
        )

        assert event.type == HeuristicPattern.TRANSFER
        assert event.from_address == "0x0000000000000000000000000000000000000000"


class TestRawLog:
    """Tests for RawLog normalization."""

    def test_from_rpc_bytes(self):
        """Test bytes topics and data become lowercase hex."""
        log = RawLog.from_rpc(
            {
                "address": "0xAbC0000000000000000000000000000000000001",
                "topics": [bytes.fromhex("AB" * 32)],
                "data": bytes.fromhex("00" * 31 + "01"),
                "logIndex": 3,
                "transactionIndex": 1,
                "blockNumber": 12,
            }
        )

        assert log.topics == ("0x" + "ab" * 32,)
        assert log.data == "0x" + "00" * 31 + "01"
        assert log.log_index == 3
        assert log.block_number == 12
        assert log.selector == "0x" + "ab" * 32

    def test_from_rpc_hex_strings(self):
        """Test hex-string quantities are parsed."""
        log = RawLog.from_rpc({"topics": ["AB" * 32], "data": "0x", "logIndex": "0x2"})

        assert log.topics == ("0x" + "ab" * 32,)
        assert log.log_index == 2
        assert log.selector is not None
