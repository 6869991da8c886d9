# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Quote extraction.

Two quote formats exist in stored messages:

v1: the quote is inlined at the top of the body::

    > ABCDEFGH: Quoted text
    > Quoted text ctd.

    Body text

v2: the message references the quoted message by its API message id and
the body contains only the reply.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import ConversionError
from .receivers import ReceiverType
from .types import DistributionListMessageModel, GroupMessageModel, MessageModel

if TYPE_CHECKING:
    from .receivers import ModelWrapper
    from .services import Services

QUOTE_PREFIX = "> "

_QUOTE_V1 = re.compile(r"\A> ([A-Z0-9*]{8}): (.*?)^(?!> ).+", re.DOTALL | re.MULTILINE)


@dataclass
class QuoteContent:
    quoted_text: str
    body_text: str
    identity: str | None = None
    quoted_message_id: str | None = None
    quoted_message: MessageModel | None = None


def is_quote_v1(body: str | None) -> bool:
    return (
        body is not None
        and len(body) > 10
        and body.startswith(QUOTE_PREFIX)
        and body[10] == ":"
        and "\n" in body
    )


def parse_quote_v1(text: str) -> QuoteContent | None:
    """
    Split a v1 quote off a body.

    The quote ends at the first line that doesn't start with ``"> "``; that
    line and everything after it is the body.
    """
    match = _QUOTE_V1.search(text)
    if match is None:
        return None
    identity, quoted_raw = match.group(1), match.group(2)
    body_text = text[match.end(2):].strip()
    quoted_text = quoted_raw.replace("\n" + QUOTE_PREFIX, "\n").strip()
    return QuoteContent(quoted_text=quoted_text, body_text=body_text, identity=identity)


def _same_conversation(message: MessageModel, quoted: MessageModel, receiver: ModelWrapper) -> bool:
    if receiver.type is ReceiverType.CONTACT:
        return quoted.identity == message.identity
    if receiver.type is ReceiverType.GROUP:
        return (
            isinstance(message, GroupMessageModel)
            and isinstance(quoted, GroupMessageModel)
            and quoted.group_id == message.group_id
        )
    return (
        isinstance(message, DistributionListMessageModel)
        and isinstance(quoted, DistributionListMessageModel)
        and quoted.distribution_list_id == message.distribution_list_id
    )


def extract_quote_v2(message: MessageModel, receiver: ModelWrapper, services: Services) -> QuoteContent:
    """
    Resolve the message a v2 quote refers to.

    A quoted message outside the message's own conversation is reported as
    not found; a message that no longer exists as deleted.
    """
    quoted_message_id = message.quoted_message_id
    body_text = message.body or ""
    config = services.config

    quoted = services.messages.get_message_by_api_message_id(quoted_message_id, receiver)
    if quoted is None:
        placeholder = config.quote_deleted_text
    elif not _same_conversation(message, quoted, receiver):
        placeholder = config.quote_not_found_text
    else:
        view = services.messages.get_view_element(quoted)
        identity = services.user.identity if quoted.is_outbox else quoted.identity
        quoted_text = view.text or view.placeholder or ""
        return QuoteContent(
            quoted_text=quoted_text,
            body_text=body_text,
            identity=identity,
            quoted_message_id=quoted_message_id,
            quoted_message=quoted,
        )

    return QuoteContent(quoted_text=placeholder, body_text=body_text, quoted_message_id=quoted_message_id)


def get_quote_content(
    message: MessageModel,
    receiver: ModelWrapper | None,
    services: Services,
    resolve: bool = True,
) -> QuoteContent | None:
    """
    Quote of a message, or None if it doesn't quote anything.

    With ``resolve=False`` v2 quotes are not looked up and None is returned
    for them; their body never contains the quote anyway.

    Raises:
        ConversionError: If a v2 quote must be resolved without a receiver.
    """
    if message.quoted_message_id:
        if not resolve:
            return None
        if receiver is None:
            raise ConversionError.missing_field("message", "receiver")
        return extract_quote_v2(message, receiver, services)
    if message.body:
        return parse_quote_v1(message.body)
    return None
