# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Tests for the MessagePack encoder adapter."""

import struct

import msgpack
import pytest

from pyarp.builder import MsgpackArrayBuilder, MsgpackObjectBuilder
from pyarp.encoder import MsgpackEncoder, default_encoder, encode
from pyarp.instructions import Instruction, InstructionType


class TestScalars:
    """Tests for scalar encoding."""

    def test_float32_uses_single_precision(self) -> None:
        """Test that FLOAT32 values are packed as 32-bit floats."""
        data = encode(MsgpackArrayBuilder().put(1.5, InstructionType.FLOAT32))
        # fixarray(1), float32 marker, big-endian payload
        assert data == b"\x91\xca" + struct.pack(">f", 1.5)

    def test_float64_uses_double_precision(self) -> None:
        """Test that FLOAT64 values are packed as 64-bit floats."""
        data = encode(MsgpackArrayBuilder().put(1.5))
        assert data == b"\x91\xcb" + struct.pack(">d", 1.5)

    def test_int_as_float(self) -> None:
        """Test that an int tagged as float is written as float."""
        data = encode(MsgpackArrayBuilder().put(2, InstructionType.FLOAT64))
        assert msgpack.unpackb(data) == [2.0]
        assert isinstance(msgpack.unpackb(data)[0], float)

    def test_bytes_use_bin_type(self) -> None:
        """Test that bytes are written as bin, not str."""
        data = encode(MsgpackArrayBuilder().put(b"\xff\x00"))
        assert data == b"\x91\xc4\x02\xff\x00"

    def test_int64(self) -> None:
        """Test that 64-bit integers survive encoding."""
        value = 2**62
        assert msgpack.unpackb(encode(MsgpackArrayBuilder().put(value))) == [value]

    def test_none_with_type_tag(self) -> None:
        """Test that a tagged None is written as nil."""
        data = encode(MsgpackObjectBuilder().put("n", None, InstructionType.INT32))
        assert msgpack.unpackb(data) == {"n": None}


class TestStructure:
    """Tests for headers and nesting."""

    def test_map_header_counts_instructions(self) -> None:
        """Test that the map header equals the number of puts."""
        data = encode(MsgpackObjectBuilder().put("a", 1).put("b", 2))
        assert data[0] == 0x82

    def test_empty_array(self) -> None:
        """Test encoding of an empty array."""
        assert encode(MsgpackArrayBuilder()) == b"\x90"

    def test_nested_depth_first(self) -> None:
        """Test that nested builders are written before the parent continues."""
        builder = (MsgpackObjectBuilder()
            .put("first", MsgpackObjectBuilder().put("x", MsgpackArrayBuilder().put(1).put(2)))
            .put("second", "after"))
        assert msgpack.unpackb(encode(builder)) == {"first": {"x": [1, 2]}, "second": "after"}

    def test_payload_list(self) -> None:
        """Test encoding of a list of builders."""
        items = [MsgpackObjectBuilder().put("id", str(i)) for i in range(3)]
        data = encode(MsgpackObjectBuilder().put("items", items))
        assert msgpack.unpackb(data) == {"items": [{"id": "0"}, {"id": "1"}, {"id": "2"}]}
        assert all(item.consumed for item in items)

    def test_encode_instructions(self) -> None:
        """Test encoding a bare instruction sequence."""
        encoder = MsgpackEncoder()
        instructions = [
            Instruction(InstructionType.STRING, "v", key="k"),
            Instruction(InstructionType.NIL, key="n"),
        ]
        assert msgpack.unpackb(encoder.encode_instructions(instructions, is_map=True)) == {"k": "v", "n": None}

    def test_consume_uses_default_encoder(self) -> None:
        """Test that consume() and encode() agree."""
        a = MsgpackObjectBuilder().put("id", "1").put("flag", True)
        b = MsgpackObjectBuilder().put("id", "1").put("flag", True)
        assert a.consume() == encode(b)

    def test_consume_encodes_its_instructions(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that consume() hands its instruction snapshot to encode_instructions()."""
        calls = []
        original = default_encoder.encode_instructions

        def recording(instructions, is_map):
            calls.append((tuple(instructions), is_map))
            return original(instructions, is_map)

        monkeypatch.setattr(default_encoder, "encode_instructions", recording)
        data = MsgpackArrayBuilder().put("a").consume()

        assert msgpack.unpackb(data) == ["a"]
        assert calls == [((Instruction(InstructionType.STRING, "a"),), False)]
