# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
App Remote Protocol (ARP) constants.

The remote client decodes every payload produced by this package as a
MessagePack map or array. The exact key literals are the compatibility
surface; they are declared next to the converter that writes them. This
module holds the values shared across converters:

    +----------------------+-------------------------------------------+
    | DetailLevel          | how much of a message is serialized       |
    | ProtocolGeneration   | emoji reactions vs. legacy ack/dec states |
    | ImageFormat          | encodings of avatars and thumbnails       |
    +----------------------+-------------------------------------------+
"""

from __future__ import annotations

from enum import Enum, IntEnum

# Thumbnail bounds
SIZE_THUMBNAIL_MAX_PX: int = 350
SIZE_PREVIEW_MAX_PX: int = 50

# Avatar bounds
SIZE_AVATAR_LORES_MAX_PX: int = 48
SIZE_AVATAR_HIRES_MAX_PX: int = 512

# Image qualities (0-100)
QUALITY_THUMBNAIL: int = 60
QUALITY_AVATAR_LORES: int = 60
QUALITY_AVATAR_HIRES: int = 100

# Signed 32-bit range of the Int32 instruction
INT32_MIN: int = -(2**31)
INT32_MAX: int = 2**31 - 1
INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1

# Reaction sequences understood by legacy clients
ACK_EMOJI: str = "\U0001F44D"
DEC_EMOJI: str = "\U0001F44E"


class DetailLevel(IntEnum):
    """Verbosity of a message conversion. Selected per call, never transmitted."""

    # id, type, sortKey, isOutbox, isStatus
    MINIMAL = 0
    # everything except the quote sub-object
    NO_QUOTE = 1
    FULL = 2


class ProtocolGeneration(str, Enum):
    """
    Reaction representation spoken by the remote client.

    CURRENT clients receive bucketed ``emojiReactions``. LEGACY clients only
    know thumbs up/down and receive them folded into ``reactions`` (groups)
    or the message ``state`` (direct messages).
    """

    CURRENT = "current"
    LEGACY = "legacy"


class ImageFormat(str, Enum):
    """Image encodings announced to the remote client."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"


FORMAT_THUMBNAIL: ImageFormat = ImageFormat.JPEG
FORMAT_AVATAR: ImageFormat = ImageFormat.PNG
