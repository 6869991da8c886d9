# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Conversation converter.

A conversation entry in the remote client's chat list. The latest message
is included without its quote and without a thumbnail to keep the list
cheap to build.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import message as message_converter
from . import notification_settings
from . import receivers as receiver
from .builder import MsgpackBuilder, MsgpackObjectBuilder
from .protocol import DetailLevel
from .receivers import ModelWrapper

if TYPE_CHECKING:
    from .services import Services
    from .types import ConversationModel

POSITION = "position"
MESSAGE_COUNT = "messageCount"
UNREAD_COUNT = "unreadCount"
LATEST_MESSAGE = "latestMessage"
NOTIFICATIONS = "notifications"
IS_STARRED = "isStarred"
IS_UNREAD = "isUnread"
AVATAR = "avatar"


def convert_all(
    conversations: list[ConversationModel],
    services: Services,
    send_avatar: bool = False,
) -> list[MsgpackBuilder]:
    return [convert(conversation, services, send_avatar) for conversation in conversations]


def convert(
    conversation: ConversationModel,
    services: Services,
    send_avatar: bool = False,
    avatar_max_px: int | None = None,
) -> MsgpackObjectBuilder:
    """
    Convert a conversation.

    Args:
        conversation: Conversation to convert.
        services: Collaborators and configuration.
        send_avatar: Include the receiver's low resolution avatar.
        avatar_max_px: Bound of that avatar; the configured low-res bound
            if omitted.

    Raises:
        ConversionError: If the conversation has no receiver or a required
            service is missing.
    """
    wrapper = ModelWrapper.from_conversation(conversation)
    tags = services.conversation_tags

    builder = MsgpackObjectBuilder()
    builder.put(receiver.TYPE, wrapper.type.value)
    builder.put(receiver.ID, wrapper.id)
    builder.put(POSITION, conversation.position)
    builder.put(MESSAGE_COUNT, conversation.message_count)
    builder.put(UNREAD_COUNT, conversation.unread_count)

    latest = conversation.latest_message
    if latest is not None:
        builder.put(LATEST_MESSAGE, message_converter.convert(
            latest, wrapper, services, send_thumbnail=False, detail=DetailLevel.NO_QUOTE,
        ))

    builder.put(NOTIFICATIONS, notification_settings.convert(wrapper, services))
    builder.put(IS_STARRED, tags.is_pinned(conversation))
    builder.put(IS_UNREAD, tags.is_marked_unread(conversation))

    if send_avatar:
        builder.maybe_put(AVATAR, wrapper.avatar(services, high_resolution=False, max_size=avatar_max_px))
    return builder
