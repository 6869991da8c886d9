# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Domain enumeration to wire value converters.

Every converter is total over its declared domain and fails closed: a value
outside it raises ConversionError instead of producing a guessed default.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, TypeVar

from .exceptions import ConversionError
from .protocol import ProtocolGeneration
from .types import (
    DisconnectReason,
    IdentityType,
    MessageState,
    MessageType,
    RejectReason,
    VerificationLevel,
    VoipStatus,
)

V = TypeVar("V")

# Message states
STATE_DELIVERED = "delivered"
STATE_READ = "read"
STATE_SEND_FAILED = "send-failed"
STATE_SENT = "sent"
STATE_SENDING = "sending"
STATE_PENDING = "pending"
STATE_USER_ACK = "user-ack"
STATE_USER_DEC = "user-dec"

_MESSAGE_STATES: dict[MessageState, str] = {
    MessageState.DELIVERED: STATE_DELIVERED,
    MessageState.READ: STATE_READ,
    MessageState.CONSUMED: STATE_READ,
    MessageState.USERACK: STATE_READ,
    MessageState.USERDEC: STATE_READ,
    MessageState.SENDFAILED: STATE_SEND_FAILED,
    MessageState.FS_KEY_MISMATCH: STATE_SEND_FAILED,
    MessageState.SENT: STATE_SENT,
    MessageState.SENDING: STATE_SENDING,
    MessageState.PENDING: STATE_PENDING,
    MessageState.TRANSCODING: STATE_PENDING,
    MessageState.UPLOADING: STATE_PENDING,
}

# Legacy clients still render acknowledgements as message states
_LEGACY_MESSAGE_STATES: dict[MessageState, str] = {
    **_MESSAGE_STATES,
    MessageState.USERACK: STATE_USER_ACK,
    MessageState.USERDEC: STATE_USER_DEC,
}

# Message types
TYPE_TEXT = "text"

_MESSAGE_TYPES: dict[MessageType, str] = {
    MessageType.TEXT: TYPE_TEXT,
    MessageType.IMAGE: "image",
    MessageType.VIDEO: "video",
    MessageType.VOICEMESSAGE: "audio",
    MessageType.LOCATION: "location",
    MessageType.STATUS: "status",
    MessageType.BALLOT: "ballot",
    MessageType.FILE: "file",
    MessageType.VOIP_STATUS: "voipStatus",
}

_VERIFICATION_LEVELS: dict[VerificationLevel, int] = {
    VerificationLevel.UNVERIFIED: 1,
    VerificationLevel.SERVER_VERIFIED: 2,
    VerificationLevel.FULLY_VERIFIED: 3,
}

_REJECT_REASONS: dict[RejectReason, int] = {
    RejectReason.UNKNOWN: 0,
    RejectReason.BUSY: 1,
    RejectReason.TIMEOUT: 2,
    RejectReason.REJECTED: 3,
    RejectReason.DISABLED: 4,
    RejectReason.OFF_HOURS: 5,
}

_VOIP_STATUSES: dict[VoipStatus, int] = {
    VoipStatus.MISSED: 1,
    VoipStatus.FINISHED: 2,
    VoipStatus.REJECTED: 3,
    VoipStatus.ABORTED: 4,
}

_DISCONNECT_REASONS: dict[DisconnectReason, str] = {
    DisconnectReason.SESSION_STOPPED: "stop",
    DisconnectReason.SESSION_DELETED: "delete",
    DisconnectReason.WEBCLIENT_DISABLED: "disable",
    DisconnectReason.SESSION_REPLACED: "replace",
    DisconnectReason.OUT_OF_MEMORY: "outOfMemory",
    DisconnectReason.ERROR: "error",
}

_IDENTITY_TYPES: dict[IdentityType, int] = {
    IdentityType.NORMAL: 0,
    IdentityType.WORK: 1,
}


def _lookup(table: Mapping[Any, V], value: Any, domain: str, enum_type: type[Enum]) -> V:
    # str-valued enums compare equal to their raw strings; insist on the member
    if not isinstance(value, enum_type) or value not in table:
        raise ConversionError.unknown_value(domain, value)
    return table[value]


def message_state(state: MessageState, generation: ProtocolGeneration = ProtocolGeneration.CURRENT) -> str:
    """
    Fold a stored message state into its wire bucket.

    LEGACY keeps USERACK/USERDEC as distinct states; CURRENT reports them as
    read, since acknowledgements travel as emoji reactions.
    """
    table = _LEGACY_MESSAGE_STATES if generation is ProtocolGeneration.LEGACY else _MESSAGE_STATES
    return _lookup(table, state, "message state", MessageState)


def message_type(message_type: MessageType) -> str:
    return _lookup(_MESSAGE_TYPES, message_type, "message type", MessageType)


def verification_level(level: VerificationLevel) -> int:
    return _lookup(_VERIFICATION_LEVELS, level, "verification level", VerificationLevel)


def reject_reason(reason: RejectReason) -> int:
    return _lookup(_REJECT_REASONS, reason, "reject reason", RejectReason)


def voip_status(status: VoipStatus) -> int:
    return _lookup(_VOIP_STATUSES, status, "voip status", VoipStatus)


def disconnect_reason(reason: DisconnectReason) -> str:
    return _lookup(_DISCONNECT_REASONS, reason, "disconnect reason", DisconnectReason)


def identity_type(value: IdentityType) -> int:
    return _lookup(_IDENTITY_TYPES, value, "identity type", IdentityType)


def color(argb: int) -> str:
    """Format the RGB part of an ARGB color as ``#RRGGBB``."""
    return f"#{argb & 0xFFFFFF:06X}"


def as_utc(value: datetime) -> datetime:
    """
    The same instant in UTC.

    Naive datetimes are taken to be UTC already, never host local time, so
    a snapshot encodes the same on every host.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def timestamp(value: datetime) -> int:
    """Seconds since the epoch."""
    return int(as_utc(value).timestamp())


def timestamp_ms(value: datetime) -> int:
    """Milliseconds since the epoch, without float rounding."""
    value = as_utc(value)
    return int(value.replace(microsecond=0).timestamp()) * 1000 + value.microsecond // 1000


def null_if_empty(value: str | None) -> str | None:
    """Map an empty string to None so it is omitted by maybe_put()."""
    if value == "":
        return None
    return value
