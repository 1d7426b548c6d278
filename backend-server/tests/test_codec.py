"""
Tests for message encoding and the storage key scheme.
"""

import random

import pytest
from pydantic import ValidationError

from streams_api.core.exceptions import MalformedMessage
from streams_api.domain import codec
from streams_api.domain.models.message import Message


class TestKey:
    """Test key(topic, offset)."""

    def test_layout(self):
        assert codec.key("orders", 7) == "topics/orders/00000000000000000007.json"
        assert codec.topic_prefix("orders") == "topics/orders/"

    def test_fixed_width(self):
        assert len(codec.key("t", 1)) == len(codec.key("t", codec.MAX_OFFSET))

    def test_lexicographic_order_matches_offsets(self):
        rng = random.Random(7)
        offsets = [0, 1, 9, 10, 99, 100, 10**19, codec.MAX_OFFSET]
        offsets += [rng.randrange(0, 10**20) for _ in range(200)]
        for a in offsets[:40]:
            for b in offsets:
                assert (a < b) == (codec.key("t", a) < codec.key("t", b))

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            codec.key("t", -1)
        with pytest.raises(ValueError):
            codec.key("t", 10**20)
        with pytest.raises(TypeError):
            codec.key("t", True)

    def test_offset_of(self):
        assert codec.offset_of(codec.key("orders", 42)) == 42
        with pytest.raises(ValueError):
            codec.offset_of("topics/orders/readme.txt")
        with pytest.raises(ValueError):
            codec.offset_of("topics/orders/42.json")


class TestEncodeDecode:
    """Test encode/decode."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"id": 1, "tags": ["a", "b"], "nested": {"x": [1, 2.5, None, True]}},
            "plain string",
            42,
            3.25,
            None,
            [],
        ],
    )
    def test_round_trip(self, payload):
        m = Message(offset=3, payload=payload, timestamp=1_700_000_000_000)
        assert codec.decode(codec.encode(m)) == m

    def test_encoded_is_json_object(self):
        data = codec.encode(Message(offset=1, payload={"id": 1}, timestamp=5))
        assert data.startswith(b"{")
        assert b'"offset":1' in data

    @pytest.mark.parametrize(
        "raw",
        [
            b"",
            b"{not json",
            b"[]",
            b'{"payload": 1, "timestamp": 5}',
            b'{"offset": 1, "timestamp": 5}',
            b'{"offset": "1", "payload": 1, "timestamp": 5}',
            b'{"offset": 1.5, "payload": 1, "timestamp": 5}',
            b'{"offset": 1, "payload": 1, "timestamp": "now"}',
            b'{"offset": 0, "payload": 1, "timestamp": 5}',
            b'{"offset": -3, "payload": 1, "timestamp": 5}',
            b"\xff\xfe",
        ],
    )
    def test_malformed(self, raw):
        with pytest.raises(MalformedMessage) as exc_info:
            codec.decode(raw, storage_key="topics/t/x.json")
        assert exc_info.value.key == "topics/t/x.json"


class TestMessage:
    """Test Message validation."""

    @pytest.mark.parametrize("offset", [0, -1])
    def test_offsets_start_at_one(self, offset):
        with pytest.raises(ValidationError):
            Message(offset=offset, payload=1, timestamp=5)

    @pytest.mark.parametrize("payload", [float("nan"), {"x": [float("inf")]}, [1, -float("inf")]])
    def test_non_finite_payload_rejected(self, payload):
        with pytest.raises(ValidationError):
            Message(offset=1, payload=payload, timestamp=5)
