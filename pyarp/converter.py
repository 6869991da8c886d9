# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Converter facade.

Binds a Services bundle once and exposes one method per entity kind, so the
transport layer does not have to thread the bundle through every call:

    >>> converter = Converter(services)
    >>> payload = converter.encode(converter.contact(contact))
    >>> history = [converter.encode(b) for b in converter.messages(page, receiver)]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import client_info as client_info_converter
from . import contact as contact_converter
from . import conversation as conversation_converter
from . import distribution_list as distribution_list_converter
from . import group as group_converter
from . import message as message_converter
from . import notification_settings as notification_settings_converter
from . import profile as profile_converter
from . import receivers
from .builder import MsgpackBuilder, MsgpackObjectBuilder
from .protocol import DetailLevel
from .receivers import ModelWrapper, ReceiverType

if TYPE_CHECKING:
    from .models import ClientInfo, ConverterConfig
    from .services import Services
    from .types import (
        ContactModel,
        ConversationModel,
        DistributionListModel,
        GroupModel,
        MessageModel,
    )


class Converter:
    """
    Entry point of the projection layer.

    Every method returns a builder (or a list of builders) that has not been
    consumed yet; encode() turns one into bytes. All methods raise
    ConversionError on recoverable failures.
    """

    def __init__(self, services: Services) -> None:
        self._services = services

    @property
    def services(self) -> Services:
        return self._services

    @property
    def config(self) -> ConverterConfig:
        return self._services.config

    # =========================================================================
    # Receivers
    # =========================================================================

    def receiver(self, receiver_type: str | ReceiverType, receiver_id: str) -> ModelWrapper:
        """Resolve a (type, id) address received from the remote client."""
        return ModelWrapper.lookup(receiver_type, receiver_id, self._services)

    def receiver_arguments(self, wrapper: ModelWrapper) -> MsgpackObjectBuilder:
        return receivers.get_arguments(wrapper)

    def contact(self, contact: ContactModel) -> MsgpackObjectBuilder:
        return contact_converter.convert(contact, self._services)

    def contacts(self, contacts: list[ContactModel]) -> list[MsgpackBuilder]:
        return contact_converter.convert_all(contacts, self._services)

    def contact_details(self, contact: ContactModel) -> MsgpackObjectBuilder:
        return contact_converter.convert_details(contact, self._services)

    def group(self, group: GroupModel) -> MsgpackObjectBuilder:
        return group_converter.convert(group, self._services)

    def groups(self, groups: list[GroupModel]) -> list[MsgpackBuilder]:
        return group_converter.convert_all(groups, self._services)

    def distribution_list(self, distribution_list: DistributionListModel) -> MsgpackObjectBuilder:
        return distribution_list_converter.convert(distribution_list, self._services)

    def distribution_lists(self, distribution_lists: list[DistributionListModel]) -> list[MsgpackBuilder]:
        return distribution_list_converter.convert_all(distribution_lists, self._services)

    # =========================================================================
    # Conversations and messages
    # =========================================================================

    def conversation(self, conversation: ConversationModel, send_avatar: bool = False) -> MsgpackObjectBuilder:
        return conversation_converter.convert(conversation, self._services, send_avatar)

    def conversations(self, conversations: list[ConversationModel], send_avatar: bool = False) -> list[MsgpackBuilder]:
        return conversation_converter.convert_all(conversations, self._services, send_avatar)

    def notification_settings(self, wrapper: ModelWrapper) -> MsgpackObjectBuilder:
        return notification_settings_converter.convert(wrapper, self._services)

    def message(
        self,
        message: MessageModel,
        receiver: ModelWrapper | None,
        send_thumbnail: bool = False,
        detail: DetailLevel | int = DetailLevel.FULL,
    ) -> MsgpackObjectBuilder:
        return message_converter.convert(message, receiver, self._services, send_thumbnail, detail)

    def messages(
        self,
        messages: list[MessageModel],
        receiver: ModelWrapper,
        send_thumbnail: bool = False,
    ) -> list[MsgpackBuilder]:
        """Convert a page of messages, newest first in storage, oldest first on the wire."""
        return message_converter.convert_all(messages, receiver, self._services, send_thumbnail)

    # =========================================================================
    # User and device
    # =========================================================================

    def profile(self, send_avatar: bool = False) -> MsgpackObjectBuilder:
        return profile_converter.convert(self._services, send_avatar)

    def client_info(self, info: ClientInfo) -> MsgpackObjectBuilder:
        return client_info_converter.convert(info)

    @staticmethod
    def encode(builder: MsgpackBuilder) -> bytes:
        """Consume a builder. A builder can only be encoded once."""
        return builder.consume()
