# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Lazy, order-preserving MessagePack builders.

Builders queue typed instructions and defer all encoding until consume()
is called. This lets a converter assemble a structure top-down while some
of its values (a quote, a thumbnail) are resolved later:

    >>> builder = MsgpackObjectBuilder()
    >>> builder.put("id", "42").maybe_put("caption", None)
    >>> builder.put("events", MsgpackArrayBuilder().put(1).put(2))
    >>> payload = builder.consume()

A builder may be consumed exactly once, and a builder nested inside
another is consumed together with its parent. Builders are not thread-safe:
populate and consume an instance on a single thread.
"""

from __future__ import annotations

from typing import Any, ClassVar

from .exceptions import BuilderConsumedError
from .instructions import Instruction, InstructionType, make_instruction


class MsgpackBuilder:
    """Ordered, append-only instruction list shared by map and array builders."""

    is_map: ClassVar[bool] = False

    def __init__(self) -> None:
        self._instructions: list[Instruction] = []
        self._consumed = False

    @property
    def instructions(self) -> tuple[Instruction, ...]:
        """Snapshot of the queued instructions in insertion order."""
        return tuple(self._instructions)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def is_empty(self) -> bool:
        return not self._instructions

    def __len__(self) -> int:
        return len(self._instructions)

    def _append(self, instruction: Instruction) -> None:
        if self._consumed:
            raise BuilderConsumedError()
        self._instructions.append(instruction)

    def take(self) -> tuple[Instruction, ...]:
        """
        Mark the builder as consumed and hand out its instructions.

        Raises:
            BuilderConsumedError: If the builder was consumed before.
        """
        if self._consumed:
            raise BuilderConsumedError()
        self._consumed = True
        return tuple(self._instructions)

    def consume(self) -> bytes:
        """
        Encode the builder (and every nested builder) to MessagePack.

        Raises:
            BuilderConsumedError: If the builder was consumed before.
        """
        from .encoder import default_encoder

        return default_encoder.encode_instructions(self.take(), self.is_map)

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else f"{len(self._instructions)} instructions"
        return f"{type(self).__name__}({state})"


class MsgpackObjectBuilder(MsgpackBuilder):
    """Builder for a MessagePack map. Every instruction carries a string key."""

    is_map = True

    def put(self, key: str, value: Any, kind: InstructionType | None = None) -> MsgpackObjectBuilder:
        """
        Append a key/value pair. A value of None is written as nil.

        Args:
            key: Protocol key literal.
            value: Value to write.
            kind: Explicit type tag (e.g. FLOAT32); inferred if omitted.
        """
        self._append(make_instruction(value, kind, key))
        return self

    def maybe_put(self, key: str, value: Any, kind: InstructionType | None = None) -> MsgpackObjectBuilder:
        """Append a key/value pair only if the value is not None."""
        if value is not None:
            self.put(key, value, kind)
        return self

    def put_null(self, key: str) -> MsgpackObjectBuilder:
        """Append a key whose value must be present but nil."""
        self._append(Instruction(kind=InstructionType.NIL, key=key))
        return self


class MsgpackArrayBuilder(MsgpackBuilder):
    """Builder for a MessagePack array."""

    def put(self, value: Any, kind: InstructionType | None = None) -> MsgpackArrayBuilder:
        """Append an element. A value of None is written as nil."""
        self._append(make_instruction(value, kind))
        return self

    def maybe_put(self, value: Any, kind: InstructionType | None = None) -> MsgpackArrayBuilder:
        """Append an element only if it is not None."""
        if value is not None:
            self.put(value, kind)
        return self

    def put_null(self) -> MsgpackArrayBuilder:
        self._append(Instruction(kind=InstructionType.NIL))
        return self

    def extend(self, values: Any, kind: InstructionType | None = None) -> MsgpackArrayBuilder:
        """Append every element of an iterable in order."""
        for value in values:
            self.put(value, kind)
        return self
