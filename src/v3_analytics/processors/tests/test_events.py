"""
Tests for typed events and decoding from log dicts.
"""

import pytest

from ..events import EVENT_TYPES, MintEvent, SwapEvent, event_from_dict


def swap_dict(**overrides):
    data = {
        "event": "Swap",
        "chain_id": 1,
        "src_address": "0xPOOL",
        "block_number": "17000000",
        "block_timestamp": "1700000000",
        "transaction_hash": "0xABC",
        "log_index": "7",
        "transaction_from": "0xSENDER",
        "sender": "0xROUTER",
        "recipient": "0xUSER",
        "amount0": "-1000",
        "amount1": "2000",
        "sqrt_price_x96": str(2**96),
        "liquidity": "123",
        "tick": "-5",
    }
    data.update(overrides)
    return data


class TestEventFromDict:

    def test_builds_typed_event(self):
        event = event_from_dict(swap_dict())

        assert isinstance(event, SwapEvent)
        assert event.amount0 == -1000
        assert event.sqrt_price_x96 == 2**96
        assert event.tick == -5
        assert event.sort_key == (17_000_000, 7)

    def test_addresses_are_lower_cased(self):
        event = event_from_dict(swap_dict())

        assert event.src_address == "0xpool"
        assert event.transaction_hash == "0xabc"
        assert event.transaction_from == "0xsender"
        assert (event.sender, event.recipient) == ("0xrouter", "0xuser")

    def test_unknown_event(self):
        with pytest.raises(ValueError, match="Unknown event type"):
            event_from_dict(swap_dict(event="Flash"))

    def test_missing_field(self):
        data = swap_dict()
        del data["liquidity"]

        with pytest.raises(ValueError, match="missing field 'liquidity'"):
            event_from_dict(data)

    def test_registry_covers_all_events(self):
        assert set(EVENT_TYPES) == {"PoolCreated", "Initialize", "Mint", "Burn", "Swap", "Collect"}
        assert EVENT_TYPES["Mint"] is MintEvent
