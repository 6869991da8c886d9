# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Typed instructions queued by builders.

An instruction is one (key, type, value) unit of deferred builder state.
The type tag decides how the encoder writes the value; a value of None is
always written as a MessagePack nil, whatever the tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import ConversionError
from .protocol import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN

if TYPE_CHECKING:
    from .builder import MsgpackBuilder


class InstructionType(Enum):
    """Type tag of a queued value."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOL = "bool"
    BYTES = "bytes"
    PAYLOAD = "payload"
    PAYLOAD_LIST = "payload_list"
    NIL = "nil"


@dataclass(frozen=True)
class Instruction:
    """A single queued value. Map builders set ``key``; array builders don't."""

    kind: InstructionType
    value: Any = None
    key: str | None = None


def infer_type(value: Any) -> InstructionType:
    """
    Derive the instruction type of a Python value.

    Raises:
        TypeError: If the value has no wire representation.
    """
    from .builder import MsgpackBuilder

    if value is None:
        return InstructionType.NIL
    # bool is a subclass of int
    if isinstance(value, bool):
        return InstructionType.BOOL
    if isinstance(value, int):
        if INT32_MIN <= value <= INT32_MAX:
            return InstructionType.INT32
        return InstructionType.INT64
    if isinstance(value, float):
        return InstructionType.FLOAT64
    if isinstance(value, str):
        return InstructionType.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return InstructionType.BYTES
    if isinstance(value, MsgpackBuilder):
        return InstructionType.PAYLOAD
    if isinstance(value, (list, tuple)) and all(isinstance(v, MsgpackBuilder) for v in value):
        return InstructionType.PAYLOAD_LIST
    raise TypeError(f"Unsupported value type for builder: {type(value).__name__}")


def make_instruction(
    value: Any,
    kind: InstructionType | None = None,
    key: str | None = None,
) -> Instruction:
    """
    Create a validated instruction.

    Args:
        value: Value to queue (None queues a wire null).
        kind: Explicit type tag; inferred from the value if omitted.
        key: Map key, or None inside arrays.

    Raises:
        TypeError: If the value doesn't match the type tag.
        ValueError: If an integer is out of range for its tag.
        ConversionError: If a string cannot be encoded as UTF-8.
    """
    if kind is None:
        kind = infer_type(value)
    if value is not None:
        _check(kind, value)
        if kind is InstructionType.BYTES:
            value = bytes(value)
        elif kind is InstructionType.PAYLOAD_LIST:
            value = tuple(value)
    return Instruction(kind=kind, value=value, key=key)


def _check(kind: InstructionType, value: Any) -> None:
    from .builder import MsgpackBuilder

    if kind in (InstructionType.INT32, InstructionType.INT64):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{kind.value} expects int, got {type(value).__name__}")
        low, high = (INT32_MIN, INT32_MAX) if kind is InstructionType.INT32 else (INT64_MIN, INT64_MAX)
        if not low <= value <= high:
            raise ValueError(f"Value {value} out of range for {kind.value}")
    elif kind in (InstructionType.FLOAT32, InstructionType.FLOAT64):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{kind.value} expects float, got {type(value).__name__}")
    elif kind is InstructionType.STRING:
        if not isinstance(value, str):
            raise TypeError(f"string expects str, got {type(value).__name__}")
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            raise ConversionError.unknown_value("string content (not encodable as UTF-8)", value) from None
    elif kind is InstructionType.BOOL and not isinstance(value, bool):
        raise TypeError(f"bool expects bool, got {type(value).__name__}")
    elif kind is InstructionType.BYTES and not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"bytes expects bytes, got {type(value).__name__}")
    elif kind is InstructionType.PAYLOAD and not isinstance(value, MsgpackBuilder):
        raise TypeError(f"payload expects a builder, got {type(value).__name__}")
    elif kind is InstructionType.PAYLOAD_LIST:
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, MsgpackBuilder) for v in value):
            raise TypeError("payload_list expects a list of builders")
    elif kind is InstructionType.NIL:
        raise TypeError("nil instructions carry no value")
