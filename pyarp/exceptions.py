# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Custom exceptions for the pyarp projection layer.

Every recoverable failure raised while converting a domain object is a
ConversionError, so the transport boundary can turn it into a failure
response with a single except clause:

    try:
        payload = converter.contact(contact).consume()
    except ConversionError as e:
        respond_with_error(str(e))

Two defects live outside that hierarchy on purpose: consuming a builder
twice (BuilderConsumedError) and a fault inside the MessagePack encoder
(EncoderError). Both indicate a bug in the caller or in this package and
should never be translated into a protocol response.
"""

from __future__ import annotations

from typing import Any, TypeVar

T = TypeVar("T")


class ARPError(Exception):
    """
    Base exception for all recoverable pyarp errors.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        self.hint = hint
        if hint:
            message = f"{message}\n\n  Hint: {hint}"
        super().__init__(message)


class ConversionError(ARPError):
    """
    Raised when a domain object cannot be projected onto the wire.

    Common causes:
    - A backing service is not available
    - A required field of the domain object is absent
    - An enumeration value is outside the protocol's vocabulary
    - A (type, id) receiver reference cannot be resolved

    The cause is part of the message only; callers are not expected to
    branch on it.
    """

    @classmethod
    def service_unavailable(cls, name: str) -> ConversionError:
        return cls(
            f"Service not available: {name}",
            hint="Pass the service in the Services bundle given to the converter",
        )

    @classmethod
    def missing_field(cls, entity: str, field: str) -> ConversionError:
        return cls(f"Required field '{field}' of {entity} is absent")

    @classmethod
    def unknown_value(cls, domain: str, value: Any) -> ConversionError:
        return cls(f"Unknown {domain}: {value!r}")

    @classmethod
    def unknown_receiver(cls, receiver_type: str, receiver_id: str | None = None) -> ConversionError:
        if receiver_id is None:
            return cls(f"Unknown receiver type: {receiver_type}")
        return cls(f"Receiver '{receiver_id}' of type '{receiver_type}' not found")


class BuilderConsumedError(RuntimeError):
    """
    Raised when consume() is called a second time on the same builder.

    A builder describes a structure that must appear on the wire exactly
    once. This is a programming error, not a conversion failure.
    """

    def __init__(self) -> None:
        super().__init__("Builder has already been consumed")


class EncoderError(RuntimeError):
    """
    Raised when the MessagePack encoder fails on its in-memory buffer.

    The destination is always memory, so this can only be caused by a value
    that slipped past the put-time validation.
    """


def require(value: T | None, entity: str, field: str) -> T:
    """
    Return a required domain value or raise ConversionError.

    This is the one accessor through which converters read fields that the
    protocol needs to be present.
    """
    if value is None:
        raise ConversionError.missing_field(entity, field)
    return value
