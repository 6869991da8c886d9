# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Receiver addressing.

A receiver is a contact, a group or a distribution list, addressed on the
wire by a (type, id) pair:

    +--------------------+------------------+-------------------------+
    | type               | id               | model                   |
    +--------------------+------------------+-------------------------+
    | "contact"          | identity         | ContactModel            |
    | "group"            | database id      | GroupModel              |
    | "distributionList" | database id      | DistributionListModel   |
    +--------------------+------------------+-------------------------+

ModelWrapper resolves a pair to its model and back.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import TYPE_CHECKING, Union

from .builder import MsgpackObjectBuilder
from .exceptions import ConversionError
from .thumbnails import bitmap_to_bytes, released
from .types import ContactModel, ConversationModel, DistributionListModel, GroupModel
from . import values

if TYPE_CHECKING:
    from .services import Bitmap, MessageReceiver, Services

ReceiverModel = Union[ContactModel, GroupModel, DistributionListModel]

# Keys shared by every receiver structure
ID = "id"
TYPE = "type"
DISPLAY_NAME = "displayName"
COLOR = "color"
DISABLED = "disabled"
LOCKED = "locked"
VISIBLE = "visible"
ACCESS = "access"
CAN_DELETE = "canDelete"
CAN_CHANGE_MEMBERS = "canChangeMembers"
MEMBERS = "members"


class ReceiverType(str, Enum):
    """Closed set of receiver kinds."""

    CONTACT = "contact"
    GROUP = "group"
    DISTRIBUTION_LIST = "distributionList"

    @classmethod
    def parse(cls, value: str) -> ReceiverType:
        """
        Parse a wire type literal.

        Raises:
            ConversionError: If the literal is not a receiver type.
        """
        for member in cls:
            if member.value == value:
                return member
        raise ConversionError.unknown_receiver(str(value))

    @classmethod
    def of(cls, model: ReceiverModel) -> ReceiverType:
        if isinstance(model, ContactModel):
            return cls.CONTACT
        if isinstance(model, GroupModel):
            return cls.GROUP
        if isinstance(model, DistributionListModel):
            return cls.DISTRIBUTION_LIST
        raise ConversionError.unknown_receiver(type(model).__name__)


_NUMERIC_ID = re.compile(r"0|-?[1-9][0-9]*", re.ASCII)


def _parse_numeric_id(receiver_type: ReceiverType, receiver_id: str) -> int:
    # Only the canonical decimal form, so the id sent back matches the one received
    if not isinstance(receiver_id, str) or not _NUMERIC_ID.fullmatch(receiver_id):
        raise ConversionError(f"Invalid {receiver_type.value} id: {receiver_id!r}")
    return int(receiver_id)


class ModelWrapper:
    """
    A receiver model together with its wire address.

    Construct it from a model (always succeeds) or from a wire address with
    lookup() (fails if the type is unknown or nothing is found).
    """

    def __init__(self, receiver_type: ReceiverType, receiver_id: str, model: ReceiverModel | None) -> None:
        self._type = receiver_type
        self._id = receiver_id
        self._model = model

    @classmethod
    def from_contact(cls, contact: ContactModel) -> ModelWrapper:
        return cls(ReceiverType.CONTACT, contact.identity, contact)

    @classmethod
    def from_group(cls, group: GroupModel) -> ModelWrapper:
        return cls(ReceiverType.GROUP, str(group.id), group)

    @classmethod
    def from_removed_group(cls, group_id: int) -> ModelWrapper:
        """Address a group whose model no longer exists."""
        return cls(ReceiverType.GROUP, str(group_id), None)

    @classmethod
    def from_distribution_list(cls, distribution_list: DistributionListModel) -> ModelWrapper:
        return cls(ReceiverType.DISTRIBUTION_LIST, str(distribution_list.id), distribution_list)

    @classmethod
    def from_model(cls, model: ReceiverModel) -> ModelWrapper:
        receiver_type = ReceiverType.of(model)
        if receiver_type is ReceiverType.CONTACT:
            return cls.from_contact(model)
        if receiver_type is ReceiverType.GROUP:
            return cls.from_group(model)
        return cls.from_distribution_list(model)

    @classmethod
    def from_conversation(cls, conversation: ConversationModel) -> ModelWrapper:
        if conversation.receiver is None:
            raise ConversionError.missing_field("conversation", "receiver")
        return cls.from_model(conversation.receiver)

    @classmethod
    def lookup(cls, receiver_type: str | ReceiverType, receiver_id: str, services: Services) -> ModelWrapper:
        """
        Resolve a wire address to its model.

        Raises:
            ConversionError: If the type is unknown, the id malformed or the
                receiver does not exist.
        """
        if not isinstance(receiver_type, ReceiverType):
            receiver_type = ReceiverType.parse(receiver_type)

        model: ReceiverModel | None
        if receiver_type is ReceiverType.CONTACT:
            model = services.contacts.get_by_identity(receiver_id)
        elif receiver_type is ReceiverType.GROUP:
            model = services.groups.get_by_id(_parse_numeric_id(receiver_type, receiver_id))
        else:
            model = services.distribution_lists.get_by_id(_parse_numeric_id(receiver_type, receiver_id))

        if model is None:
            raise ConversionError.unknown_receiver(receiver_type.value, receiver_id)
        return cls.from_model(model)

    @property
    def id(self) -> str:
        return self._id

    @property
    def type(self) -> ReceiverType:
        return self._type

    @property
    def model(self) -> ReceiverModel:
        if self._model is None:
            raise ConversionError.missing_field(f"{self._type.value} {self._id}", "model")
        return self._model

    @property
    def unique_id(self) -> str:
        """Key of this receiver in per-conversation settings (hidden, muted, ...)."""
        return f"{self._type.value}-{self._id}"

    @property
    def color(self) -> str:
        return values.color(self.model.color_light)

    def receiver(self, services: Services) -> MessageReceiver:
        """
        Create the application's receiver handle.

        Raises:
            ConversionError: If the service cannot create one.
        """
        model = self.model
        if self._type is ReceiverType.CONTACT:
            receiver = services.contacts.create_receiver(model)
        elif self._type is ReceiverType.GROUP:
            receiver = services.groups.create_receiver(model)
        else:
            receiver = services.distribution_lists.create_receiver(model)

        if receiver is None:
            raise ConversionError(f"Receiver '{self._id}' of type '{self._type.value}' could not be created")
        return receiver

    def avatar(self, services: Services, high_resolution: bool, max_size: int | None = None) -> bytes | None:
        """
        Encoded avatar, or None if the receiver has none.

        Low resolution avatars are the notification avatars, downscaled to
        max_size (or the configured low-res bound).
        """
        config = services.config
        bitmap: Bitmap | None
        if not high_resolution:
            bitmap = self.receiver(services).get_notification_avatar()
            if max_size is None:
                max_size = config.avatar_lores_max_px
        else:
            model = self.model
            if self._type is ReceiverType.CONTACT:
                bitmap = services.contacts.get_avatar(model, True)
            elif self._type is ReceiverType.GROUP:
                bitmap = services.groups.get_avatar(model, True)
            else:
                bitmap = services.distribution_lists.get_avatar(model, True)

        if bitmap is None:
            # e.g. distribution lists have no notification avatar
            return None

        quality = config.avatar_quality_hires if high_resolution else config.avatar_quality_lores
        with released(bitmap):
            return bitmap_to_bytes(bitmap, config.avatar_format, quality, max_size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModelWrapper):
            return NotImplemented
        return (self._type, self._id) == (other._type, other._id)

    def __hash__(self) -> int:
        return hash((self._type, self._id))

    def __repr__(self) -> str:
        return f"ModelWrapper(type={self._type.value!r}, id={self._id!r})"


def get_arguments(wrapper: ModelWrapper) -> MsgpackObjectBuilder:
    """Argument envelope addressing a receiver."""
    return MsgpackObjectBuilder().put(TYPE, wrapper.type.value).put(ID, wrapper.id)


def is_visible(services: Services, is_locked: bool) -> bool:
    """Locked chats are only listed while private chats aren't hidden."""
    return not is_locked or not services.preferences.is_private_chats_hidden()
