# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Message converter.

A message is serialized at one of three detail levels:

- MINIMAL:  id, type, sortKey, isOutbox, isStatus
- NO_QUOTE: everything except the quote sub-object; a v1 quote is still
            stripped from the body
- FULL:     adds the quote, whose quoted message is serialized at NO_QUOTE

The wire type is the *virtual* type of a message: file messages that are
meant to be rendered as media are announced as images, videos or audio.
Group status, group call status and forward security status messages are
sent as plain text status messages.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from . import mime
from . import values
from .builder import MsgpackArrayBuilder, MsgpackBuilder, MsgpackObjectBuilder
from .exceptions import ConversionError, require
from .instructions import InstructionType
from .protocol import DetailLevel
from .quotes import QuoteContent, get_quote_content
from .reactions import (
    bucket_reactions,
    buckets_to_builder,
    legacy_direct_state,
    legacy_reactions_builder,
)
from .thumbnails import bitmap_to_bytes, released, resize_proportionally
from .types import (
    AudioData,
    FileData,
    GroupCallState,
    GroupMessageModel,
    LocationData,
    MessageModel,
    MessageState,
    MessageType,
    RenderingType,
    VideoData,
    VoipStatusData,
)

if TYPE_CHECKING:
    from .receivers import ModelWrapper
    from .services import Services

logger = logging.getLogger(__name__)

ID = "id"
TYPE = "type"
BODY = "body"
QUOTE = "quote"
QUOTE_IDENTITY = "identity"
QUOTE_TEXT = "text"
QUOTE_MESSAGE = "message"
IS_OUTBOX = "isOutbox"
IS_STATUS = "isStatus"
PARTNER_ID = "partnerId"
STATE = "state"
REACTIONS = "reactions"
EMOJI_REACTIONS = "emojiReactions"
DATE = "date"
LAST_EDITED_AT = "lastEditedAt"
EVENTS = "events"
SORT_KEY = "sortKey"
THUMBNAIL = "thumbnail"
THUMBNAIL_SIZE_WIDTH = "width"
THUMBNAIL_SIZE_HEIGHT = "height"
THUMBNAIL_PREVIEW = "preview"
CAPTION = "caption"
STATUS_TYPE = "statusType"
IS_UNREAD = "unread"

DATA_FILE = "file"
DATA_AUDIO = "audio"
DATA_VIDEO = "video"
DATA_LOCATION = "location"
DATA_VOIP_STATUS = "voip"
DATA_AUDIO_DURATION = "duration"
DATA_VIDEO_DURATION = "duration"
DATA_VIDEO_SIZE = "size"
DATA_FILE_NAME = "name"
DATA_FILE_SIZE = "size"
DATA_FILE_MIME_TYPE = "type"
DATA_FILE_IN_APP_MESSAGE = "inApp"
DATA_LOCATION_LATITUDE = "lat"
DATA_LOCATION_LONGITUDE = "lon"
DATA_LOCATION_ACCURACY = "accuracy"
DATA_LOCATION_ADDRESS = "address"
DATA_LOCATION_DESCRIPTION = "description"
DATA_VOIP_STATUS_STATUS = "status"
DATA_VOIP_STATUS_DURATION = "duration"
DATA_VOIP_STATUS_REASON = "reason"

EVENT_TYPE = "type"
EVENT_DATE = "date"
EVENT_CREATED = "created"
EVENT_SENT = "sent"
EVENT_MODIFIED = "modified"

STATUS_TYPE_TEXT = "text"
STATUS_TYPE_FIRST_UNREAD = "firstUnreadMessage"

_BODY_TYPES = (MessageType.TEXT, MessageType.STATUS, MessageType.BALLOT)
_THUMBNAIL_TYPES = (MessageType.IMAGE, MessageType.VIDEO, MessageType.FILE)


def convert_all(
    messages: list[MessageModel],
    receiver: ModelWrapper,
    services: Services,
    send_thumbnail: bool = False,
) -> list[MsgpackBuilder]:
    """Convert a page of messages (newest first in storage) oldest first, at FULL detail."""
    return [
        convert(message, receiver, services, send_thumbnail, DetailLevel.FULL)
        for message in reversed(messages)
    ]


def resolve_virtual_type(message: MessageModel) -> MessageType:
    """
    Wire-visible type of a message.

    File messages rendered as media become IMAGE (GIFs excluded), VOICEMESSAGE
    or VIDEO; stickers become IMAGE if they are a supported image (GIFs
    included). SVGs are never images.
    """
    stored = message.type
    if stored is not MessageType.FILE:
        return stored

    data = require(message.file_data, "file message", "file_data")
    media_type = data.mime_type
    if data.rendering_type == RenderingType.MEDIA:
        if mime.is_supported_image(media_type) and not mime.is_gif(media_type):
            return MessageType.IMAGE
        if mime.is_audio(media_type):
            return MessageType.VOICEMESSAGE
        if mime.is_video(media_type):
            return MessageType.VIDEO
    elif data.rendering_type == RenderingType.STICKER:
        if mime.is_supported_image(media_type):
            return MessageType.IMAGE
    return MessageType.FILE


def convert(
    message: MessageModel,
    receiver: ModelWrapper | None,
    services: Services,
    send_thumbnail: bool = False,
    detail: DetailLevel | int = DetailLevel.FULL,
) -> MsgpackObjectBuilder:
    """
    Convert a message.

    Args:
        message: Message to convert.
        receiver: Conversation the message belongs to. Required at FULL
            detail if the message quotes another one.
        services: Collaborators and configuration.
        send_thumbnail: Include an encoded thumbnail preview.
        detail: DetailLevel (or its integer value).

    Raises:
        ConversionError: If a required field or service is missing, or the
            message type has no wire representation.
    """
    try:
        detail = DetailLevel(detail)
    except ValueError:
        raise ConversionError.unknown_value("detail level", detail) from None

    message_id = require(message.id, "message", "id")
    require(message.type, "message", "type")
    virtual_type = resolve_virtual_type(message)

    if virtual_type is MessageType.GROUP_STATUS:
        require(message.group_status_data, "group status message", "group_status_data")
        return _convert_status(message, message.identity, services)

    if isinstance(message, GroupMessageModel) and virtual_type is MessageType.GROUP_CALL_STATUS:
        data = require(message.group_call_status_data, "group call status message", "group_call_status_data")
        if data.state is GroupCallState.STARTED:
            partner = data.caller_identity
        else:
            partner = services.user.identity
        return _convert_status(message, partner, services)

    if virtual_type is MessageType.FORWARD_SECURITY_STATUS:
        require(message.forward_security_status_data, "forward security status message", "forward_security_status_data")
        return _convert_status(message, message.identity, services)

    builder = MsgpackObjectBuilder()
    builder.put(ID, str(message_id))
    builder.put(TYPE, values.message_type(virtual_type))
    builder.put(SORT_KEY, message_id)
    builder.put(IS_OUTBOX, message.is_outbox)
    builder.put(IS_STATUS, message.is_status_message)

    if detail is DetailLevel.MINIMAL:
        return builder

    # Needed even without a quote sub-object: v1 quotes are stripped from the body
    quote = get_quote_content(message, receiver, services, resolve=detail is DetailLevel.FULL)
    if quote is not None:
        builder.put(BODY, quote.body_text)
        if detail is DetailLevel.FULL:
            builder.put(QUOTE, convert_quote(quote, receiver, services))
    else:
        builder.put(BODY, get_body(message))

    builder.put(PARTNER_ID, message.identity)
    builder.put(IS_UNREAD, is_unread(message))

    _put_state_and_reactions(builder, message, services)
    _maybe_put_date(builder, message)
    if message.edited_at is not None:
        builder.put(LAST_EDITED_AT, values.timestamp(message.edited_at))
    _maybe_put_events(builder, message)
    _maybe_put_caption(builder, message)
    _maybe_put_status_type(builder, message)
    if send_thumbnail:
        _maybe_put_thumbnail(builder, message, services)

    stored_type = message.type
    if stored_type is MessageType.VIDEO:
        _maybe_put_video(builder, message.video_data)
    elif stored_type is MessageType.VOICEMESSAGE:
        _maybe_put_audio(builder, message.audio_data)
    elif stored_type is MessageType.FILE:
        file_data = message.file_data
        if virtual_type is MessageType.IMAGE:
            # Covered by type and thumbnail
            pass
        elif virtual_type is MessageType.VIDEO:
            _maybe_put_video(builder, VideoData.from_file_data(file_data))
        elif virtual_type is MessageType.VOICEMESSAGE:
            _maybe_put_audio(builder, AudioData.from_file_data(file_data))
        else:
            _maybe_put_file(builder, message, file_data, services)
    elif stored_type is MessageType.LOCATION:
        _maybe_put_location(builder, message.location_data)
    elif stored_type is MessageType.VOIP_STATUS:
        _maybe_put_voip_status(builder, message.voip_status_data)

    return builder


def convert_quote(quote: QuoteContent, receiver: ModelWrapper | None, services: Services) -> MsgpackObjectBuilder:
    builder = MsgpackObjectBuilder()
    builder.maybe_put(QUOTE_IDENTITY, quote.identity)
    builder.put(QUOTE_TEXT, quote.quoted_text)
    if quote.quoted_message is not None:
        # NO_QUOTE stops quote chains from recursing
        builder.put(QUOTE_MESSAGE, convert(quote.quoted_message, receiver, services, False, DetailLevel.NO_QUOTE))
    return builder


def _convert_status(message: MessageModel, partner_id: str | None, services: Services) -> MsgpackObjectBuilder:
    view = services.messages.get_view_element(message)
    builder = (MsgpackObjectBuilder()
        .put(ID, str(message.id))
        .put(TYPE, values.TYPE_TEXT)
        .put(SORT_KEY, message.id)
        .put(IS_OUTBOX, message.is_outbox)
        .put(IS_STATUS, True)
        .put(PARTNER_ID, partner_id)
        .put(BODY, view.text)
        .put(IS_UNREAD, False)
        .put(STATUS_TYPE, STATUS_TYPE_TEXT)
        .put(STATE, values.STATE_DELIVERED))
    _maybe_put_date(builder, message)
    _maybe_put_events(builder, message)
    return builder


def get_body(message: MessageModel) -> str | None:
    """Body of text, status and ballot messages. Other bodies are fetched on demand."""
    if message.type in _BODY_TYPES:
        return message.body
    return None


def is_unread(message: MessageModel) -> bool:
    return not message.is_outbox and not message.is_status_message and not message.is_read


def _put_state_and_reactions(builder: MsgpackObjectBuilder, message: MessageModel, services: Services) -> None:
    config = services.config
    state = message.state
    events = services.reactions.get_reactions_by_message(message)

    if config.is_legacy:
        if isinstance(message, GroupMessageModel):
            # Legacy clients can't show group acknowledgements as a state
            if state in (MessageState.USERACK, MessageState.USERDEC):
                state = MessageState.DELIVERED
            builder.maybe_put(REACTIONS, legacy_reactions_builder(events))
        else:
            reactor = message.identity if message.is_outbox else services.user.identity
            override = legacy_direct_state(events, reactor)
            if override is not None:
                state = override
    else:
        buckets = bucket_reactions(events)
        if buckets:
            builder.put(EMOJI_REACTIONS, buckets_to_builder(buckets))

    if state is not None:
        builder.put(STATE, values.message_state(state, config.generation))


def _display_date(message: MessageModel) -> datetime | None:
    if message.is_outbox and message.modified_at is not None:
        return message.modified_at
    return message.posted_at


def _maybe_put_date(builder: MsgpackObjectBuilder, message: MessageModel) -> None:
    date = _display_date(message)
    if date is not None:
        builder.put(DATE, values.timestamp(date))


def _maybe_put_events(builder: MsgpackObjectBuilder, message: MessageModel) -> None:
    events = MsgpackArrayBuilder()
    for event_type, date in (
        (EVENT_CREATED, message.created_at),
        (EVENT_SENT, message.posted_at),
        (EVENT_MODIFIED, message.modified_at),
    ):
        if date is not None:
            events.put(MsgpackObjectBuilder()
                .put(EVENT_TYPE, event_type)
                .put(EVENT_DATE, values.timestamp(date)))

    if not events.is_empty():
        builder.put(EVENTS, events)


def _maybe_put_caption(builder: MsgpackObjectBuilder, message: MessageModel) -> None:
    if message.type is MessageType.LOCATION:
        return
    caption = values.null_if_empty(message.caption)
    if caption is None and message.type is MessageType.FILE and message.file_data is not None:
        # File messages keep their caption in the file data
        caption = values.null_if_empty(message.file_data.caption)
    builder.maybe_put(CAPTION, caption)


def _maybe_put_status_type(builder: MsgpackObjectBuilder, message: MessageModel) -> None:
    if message.is_status_message:
        builder.put(STATUS_TYPE, STATUS_TYPE_FIRST_UNREAD if message.is_first_unread_marker else STATUS_TYPE_TEXT)


def _maybe_put_thumbnail(builder: MsgpackObjectBuilder, message: MessageModel, services: Services) -> None:
    if message.type not in _THUMBNAIL_TYPES:
        return

    config = services.config
    try:
        bitmap = services.files.get_message_thumbnail_bitmap(message)
        if bitmap is None:
            return
        with released(bitmap):
            size = resize_proportionally(bitmap.width, bitmap.height, config.thumbnail_max_px)
            preview = bitmap_to_bytes(bitmap, config.thumbnail_format, config.thumbnail_quality, config.preview_max_px)
    except OSError as e:
        raise ConversionError(f"Thumbnail of message {message.id} could not be loaded: {e}") from e

    logger.debug("Thumbnail of message %s: %dx%d, %d preview bytes", message.id, size.width, size.height, len(preview))
    builder.put(THUMBNAIL, MsgpackObjectBuilder()
        .put(THUMBNAIL_SIZE_WIDTH, size.width)
        .put(THUMBNAIL_SIZE_HEIGHT, size.height)
        .put(THUMBNAIL_PREVIEW, preview))


def _maybe_put_video(builder: MsgpackObjectBuilder, video_data: VideoData | None) -> None:
    if video_data is not None:
        builder.put(DATA_VIDEO, MsgpackObjectBuilder()
            .put(DATA_VIDEO_DURATION, video_data.duration)
            .maybe_put(DATA_VIDEO_SIZE, video_data.video_size or None))


def _maybe_put_audio(builder: MsgpackObjectBuilder, audio_data: AudioData | None) -> None:
    if audio_data is not None:
        builder.put(DATA_AUDIO, MsgpackObjectBuilder().put(DATA_AUDIO_DURATION, audio_data.duration))


def synthesize_file_name(message: MessageModel, prefix: str) -> str:
    """Name for a file message that was sent without one."""
    date = message.created_at or message.posted_at
    if date is None:
        return f"{prefix}-{message.id}"
    return f"{prefix}-{values.as_utc(date):%Y%m%d-%H%M%S}-{message.id}"


def _maybe_put_file(
    builder: MsgpackObjectBuilder,
    message: MessageModel,
    file_data: FileData | None,
    services: Services,
) -> None:
    if file_data is None:
        return
    mime_type = file_data.mime_type
    # The remote client needs a name even if the sender didn't provide one
    file_name = file_data.file_name or synthesize_file_name(message, services.config.file_name_prefix)
    file_name = mime.fix_file_name(file_name, mime_type)

    builder.put(DATA_FILE, MsgpackObjectBuilder()
        .put(DATA_FILE_NAME, file_name)
        .put(DATA_FILE_SIZE, file_data.file_size)
        .put(DATA_FILE_MIME_TYPE, mime_type)
        .put(DATA_FILE_IN_APP_MESSAGE, file_data.rendering_type == RenderingType.MEDIA))


def _maybe_put_location(builder: MsgpackObjectBuilder, location_data: LocationData | None) -> None:
    if location_data is not None:
        builder.put(DATA_LOCATION, MsgpackObjectBuilder()
            .put(DATA_LOCATION_LATITUDE, location_data.latitude, InstructionType.FLOAT64)
            .put(DATA_LOCATION_LONGITUDE, location_data.longitude, InstructionType.FLOAT64)
            .put(DATA_LOCATION_ACCURACY, location_data.accuracy, InstructionType.FLOAT64)
            .maybe_put(DATA_LOCATION_ADDRESS, values.null_if_empty(location_data.address))
            .put(DATA_LOCATION_DESCRIPTION, location_data.poi))


def _maybe_put_voip_status(builder: MsgpackObjectBuilder, voip_data: VoipStatusData | None) -> None:
    if voip_data is not None:
        reason = values.reject_reason(voip_data.reason) if voip_data.reason is not None else None
        builder.put(DATA_VOIP_STATUS, MsgpackObjectBuilder()
            .put(DATA_VOIP_STATUS_STATUS, values.voip_status(voip_data.status))
            .put(DATA_VOIP_STATUS_DURATION, voip_data.duration, InstructionType.INT32)
            .put(DATA_VOIP_STATUS_REASON, reason, InstructionType.INT32))
