# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Domain model snapshots consumed by the converters.

These mirror the application's storage models closely enough to be filled
from them directly. They are plain mutable dataclasses: the application
owns them, converters only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum


class MessageType(str, Enum):
    """Stored message type."""

    TEXT = "TEXT"
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    VOICEMESSAGE = "VOICEMESSAGE"
    LOCATION = "LOCATION"
    CONTACT = "CONTACT"
    STATUS = "STATUS"
    BALLOT = "BALLOT"
    FILE = "FILE"
    VOIP_STATUS = "VOIP_STATUS"
    DATE_SEPARATOR = "DATE_SEPARATOR"
    GROUP_CALL_STATUS = "GROUP_CALL_STATUS"
    FORWARD_SECURITY_STATUS = "FORWARD_SECURITY_STATUS"
    GROUP_STATUS = "GROUP_STATUS"


class MessageState(str, Enum):
    """Stored delivery state of a message."""

    PENDING = "PENDING"
    TRANSCODING = "TRANSCODING"
    UPLOADING = "UPLOADING"
    SENDING = "SENDING"
    SENDFAILED = "SENDFAILED"
    SENT = "SENT"
    DELIVERED = "DELIVERED"
    READ = "READ"
    USERACK = "USERACK"
    USERDEC = "USERDEC"
    CONSUMED = "CONSUMED"
    FS_KEY_MISMATCH = "FS_KEY_MISMATCH"


class VerificationLevel(str, Enum):
    UNVERIFIED = "UNVERIFIED"
    SERVER_VERIFIED = "SERVER_VERIFIED"
    FULLY_VERIFIED = "FULLY_VERIFIED"


class IdentityState(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    INVALID = "INVALID"


class IdentityType(str, Enum):
    NORMAL = "NORMAL"
    WORK = "WORK"


class RenderingType(IntEnum):
    """How a file message asks to be displayed."""

    DEFAULT = 0
    MEDIA = 1
    STICKER = 2


class VoipStatus(str, Enum):
    MISSED = "MISSED"
    FINISHED = "FINISHED"
    REJECTED = "REJECTED"
    ABORTED = "ABORTED"


class RejectReason(str, Enum):
    UNKNOWN = "UNKNOWN"
    BUSY = "BUSY"
    TIMEOUT = "TIMEOUT"
    REJECTED = "REJECTED"
    DISABLED = "DISABLED"
    OFF_HOURS = "OFF_HOURS"


class DisconnectReason(str, Enum):
    """Why a remote client session was closed."""

    SESSION_STOPPED = "SESSION_STOPPED"
    SESSION_DELETED = "SESSION_DELETED"
    WEBCLIENT_DISABLED = "WEBCLIENT_DISABLED"
    SESSION_REPLACED = "SESSION_REPLACED"
    OUT_OF_MEMORY = "OUT_OF_MEMORY"
    ERROR = "ERROR"


class GroupCallState(str, Enum):
    STARTED = "STARTED"
    ENDED = "ENDED"


# =============================================================================
# Receivers
# =============================================================================

@dataclass
class ContactModel:
    """A contact identified by its 8-character identity."""

    identity: str
    public_key: bytes = b""
    first_name: str | None = None
    last_name: str | None = None
    public_nickname: str | None = None
    verification_level: VerificationLevel = VerificationLevel.UNVERIFIED
    state: IdentityState = IdentityState.ACTIVE
    identity_type: IdentityType = IdentityType.NORMAL
    is_work: bool = False
    is_hidden: bool = False
    feature_mask: int = 0
    color_light: int = 0
    linked_system_contact: str | None = None

    @property
    def is_gateway(self) -> bool:
        return self.identity.startswith("*")


@dataclass
class SystemContactDetails:
    """Phone numbers and e-mail addresses of a linked address book entry."""

    phone_numbers: list[tuple[str, str]] = field(default_factory=list)
    emails: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class GroupModel:
    id: int
    name: str | None = None
    creator_identity: str | None = None
    created_at: datetime | None = None
    color_light: int = 0


@dataclass
class DistributionListModel:
    id: int
    name: str | None = None
    color_light: int = 0


@dataclass
class ConversationModel:
    """A chat with a contact, group or distribution list."""

    receiver: ContactModel | GroupModel | DistributionListModel
    position: int = 0
    message_count: int = 0
    unread_count: int = 0
    latest_message: MessageModel | None = None


# =============================================================================
# Message data
# =============================================================================

@dataclass
class FileData:
    mime_type: str | None = None
    file_name: str | None = None
    file_size: int = 0
    caption: str | None = None
    rendering_type: RenderingType = RenderingType.DEFAULT
    duration_seconds: int = 0
    thumbnail_mime_type: str | None = None


@dataclass
class VideoData:
    duration: int = 0
    video_size: int = 0

    @classmethod
    def from_file_data(cls, data: FileData) -> VideoData:
        return cls(duration=data.duration_seconds, video_size=data.file_size)


@dataclass
class AudioData:
    duration: int = 0

    @classmethod
    def from_file_data(cls, data: FileData) -> AudioData:
        return cls(duration=data.duration_seconds)


@dataclass
class LocationData:
    latitude: float
    longitude: float
    accuracy: float = 0.0
    address: str | None = None
    poi: str | None = None


@dataclass
class VoipStatusData:
    status: VoipStatus
    duration: int | None = None
    reason: RejectReason | None = None


@dataclass
class GroupStatusData:
    status_type: str


@dataclass
class GroupCallStatusData:
    state: GroupCallState
    caller_identity: str | None = None


@dataclass
class ForwardSecurityStatusData:
    status_type: str


@dataclass(frozen=True)
class EmojiReaction:
    """One identity's reaction to a message."""

    sender_identity: str
    emoji_sequence: str
    reacted_at: datetime | None = None


# =============================================================================
# Messages
# =============================================================================

@dataclass
class MessageModel:
    """
    A stored message in a one-to-one conversation.

    Group and distribution list messages use the subclasses below, which
    add the id of the conversation they belong to.
    """

    id: int
    type: MessageType
    identity: str | None = None
    is_outbox: bool = False
    is_status_message: bool = False
    is_first_unread_marker: bool = False
    is_read: bool = False
    body: str | None = None
    caption: str | None = None
    state: MessageState | None = None
    api_message_id: str | None = None
    quoted_message_id: str | None = None
    created_at: datetime | None = None
    posted_at: datetime | None = None
    modified_at: datetime | None = None
    edited_at: datetime | None = None
    file_data: FileData | None = None
    video_data: VideoData | None = None
    audio_data: AudioData | None = None
    location_data: LocationData | None = None
    voip_status_data: VoipStatusData | None = None
    group_status_data: GroupStatusData | None = None
    group_call_status_data: GroupCallStatusData | None = None
    forward_security_status_data: ForwardSecurityStatusData | None = None


@dataclass
class GroupMessageModel(MessageModel):
    group_id: int = 0


@dataclass
class DistributionListMessageModel(MessageModel):
    distribution_list_id: int = 0


# =============================================================================
# Notification settings
# =============================================================================

@dataclass
class DoNotDisturb:
    """Per-conversation do-not-disturb override."""

    # None: muted indefinitely
    until: datetime | None = None
    mention_only: bool = False
