# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
MessagePack encoder adapter.

This module is the only place that touches raw bytes. It walks a builder's
instructions and drives the ``msgpack`` packer:

- Map builders:   [map header (n)] then n x ([key][value])
- Array builders: [array header (n)] then n x [value]
- Nested builders are written depth-first, before the parent continues
- A None value is written as nil whatever its type tag
- FLOAT32 values use single precision, everything else msgpack's defaults
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Iterable

import msgpack

from .exceptions import EncoderError
from .instructions import Instruction, InstructionType

if TYPE_CHECKING:
    from .builder import MsgpackBuilder


class _Writer:
    """Packers and output buffer of a single encode call."""

    def __init__(self) -> None:
        self.out = io.BytesIO()
        self.packer = msgpack.Packer(use_bin_type=True)
        self.single = msgpack.Packer(use_bin_type=True, use_single_float=True)


class MsgpackEncoder:
    """
    Encodes builders to MessagePack bytes.

    The encoder itself holds no state, so one instance may be shared by
    threads that each consume their own builders.

    Example:
        >>> encoder = MsgpackEncoder()
        >>> data = encoder.encode(MsgpackArrayBuilder().put(1).put("two"))
        >>> msgpack.unpackb(data)
        [1, 'two']
    """

    def encode(self, builder: MsgpackBuilder) -> bytes:
        """
        Consume a builder and return its encoding.

        Raises:
            BuilderConsumedError: If the builder (or a nested one) was consumed before.
            EncoderError: If the packer rejects a value.
        """
        return self.encode_instructions(builder.take(), builder.is_map)

    def encode_instructions(self, instructions: Iterable[Instruction], is_map: bool) -> bytes:
        """
        Encode an instruction sequence as a map or array.

        Nested builders in the sequence are consumed as they are written.
        """
        writer = _Writer()
        self._write_instructions(writer, tuple(instructions), is_map)
        return writer.out.getvalue()

    def _write_builder(self, writer: _Writer, builder: MsgpackBuilder) -> None:
        self._write_instructions(writer, builder.take(), builder.is_map)

    def _write_instructions(self, writer: _Writer, instructions: tuple[Instruction, ...], is_map: bool) -> None:
        packer = writer.packer
        try:
            if is_map:
                writer.out.write(packer.pack_map_header(len(instructions)))
            else:
                writer.out.write(packer.pack_array_header(len(instructions)))
            for instruction in instructions:
                if is_map:
                    writer.out.write(packer.pack(instruction.key))
                self._write_value(writer, instruction)
        except (OverflowError, TypeError, ValueError) as e:
            raise EncoderError(f"MessagePack encoding failed: {e}") from e

    def _write_value(self, writer: _Writer, instruction: Instruction) -> None:
        kind = instruction.kind
        value = instruction.value

        if value is None:
            writer.out.write(writer.packer.pack(None))
        elif kind is InstructionType.PAYLOAD:
            self._write_builder(writer, value)
        elif kind is InstructionType.PAYLOAD_LIST:
            writer.out.write(writer.packer.pack_array_header(len(value)))
            for nested in value:
                self._write_builder(writer, nested)
        elif kind is InstructionType.FLOAT32:
            writer.out.write(writer.single.pack(float(value)))
        elif kind is InstructionType.FLOAT64:
            writer.out.write(writer.packer.pack(float(value)))
        else:
            writer.out.write(writer.packer.pack(value))


default_encoder = MsgpackEncoder()


def encode(builder: MsgpackBuilder) -> bytes:
    """Consume a builder with the default encoder."""
    return default_encoder.encode(builder)
