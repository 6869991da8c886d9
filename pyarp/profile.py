# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Profile converter: the user's own identity as shown on the remote client."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import values
from .builder import MsgpackObjectBuilder
from .exceptions import require
from .thumbnails import bitmap_to_bytes, released

if TYPE_CHECKING:
    from .services import Services

IDENTITY = "identity"
PUBLIC_KEY = "publicKey"
PUBLIC_NICKNAME = "publicNickname"
AVATAR = "avatar"


def convert(services: Services, send_avatar: bool = False) -> MsgpackObjectBuilder:
    """
    Convert the user's profile.

    Args:
        services: Collaborators and configuration.
        send_avatar: Include the high resolution avatar, if one is set.
    """
    user = services.user
    identity = require(user.identity, "profile", "identity")
    public_key = require(user.public_key, "profile", "public_key")

    builder = MsgpackObjectBuilder()
    builder.put(IDENTITY, identity)
    builder.put(PUBLIC_KEY, public_key)
    builder.maybe_put(PUBLIC_NICKNAME, values.null_if_empty(user.public_nickname))

    if send_avatar:
        builder.maybe_put(AVATAR, get_avatar(services))
    return builder


def get_avatar(services: Services) -> bytes | None:
    config = services.config
    bitmap = services.user.get_avatar(high_resolution=True)
    if bitmap is None:
        return None
    with released(bitmap):
        return bitmap_to_bytes(bitmap, config.avatar_format, config.avatar_quality_hires)
