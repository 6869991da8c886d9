# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Group converter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import contact as contact_converter
from . import receivers as receiver
from . import values
from .builder import MsgpackArrayBuilder, MsgpackBuilder, MsgpackObjectBuilder
from .exceptions import require
from .receivers import ModelWrapper

if TYPE_CHECKING:
    from .services import Services
    from .types import GroupModel

ADMINISTRATOR = "administrator"
CREATED_AT = "createdAt"
CAN_CHANGE_AVATAR = "canChangeAvatar"
CAN_CHANGE_NAME = "canChangeName"
CAN_LEAVE = "canLeave"
CAN_SYNC = "canSync"


def convert_all(groups: list[GroupModel], services: Services) -> list[MsgpackBuilder]:
    return [convert(group, services) for group in groups]


def convert(group: GroupModel, services: Services) -> MsgpackObjectBuilder:
    """
    Convert a group to its receiver structure.

    Only the creator administrates a group, and only while still a member.
    A group the user left can always be deleted.
    """
    group_id = require(group.id, "group", "id")
    groups = services.groups

    wrapper = ModelWrapper.from_group(group)
    members = groups.get_member_identities(group)
    is_creator = groups.is_group_creator(group)
    is_member = groups.is_group_member(group)
    is_locked = services.hidden_chats.has(wrapper.unique_id)
    administers = is_creator and is_member

    builder = MsgpackObjectBuilder()
    builder.put(receiver.ID, str(group_id))
    builder.put(receiver.DISPLAY_NAME, get_name(group, members, services))
    builder.put(receiver.COLOR, wrapper.color)
    builder.put(receiver.DISABLED, not is_member)
    builder.maybe_put(CREATED_AT, values.timestamp(group.created_at) if group.created_at else None)
    builder.put(receiver.MEMBERS, MsgpackArrayBuilder().extend(members))
    builder.maybe_put(ADMINISTRATOR, group.creator_identity)
    builder.put(receiver.LOCKED, is_locked)
    builder.put(receiver.VISIBLE, receiver.is_visible(services, is_locked))

    builder.put(receiver.ACCESS, MsgpackObjectBuilder()
        .put(receiver.CAN_DELETE, is_creator or not is_member)
        .put(CAN_CHANGE_AVATAR, administers)
        .put(CAN_CHANGE_NAME, administers)
        .put(receiver.CAN_CHANGE_MEMBERS, administers)
        .put(CAN_LEAVE, is_member and not is_creator)
        .put(CAN_SYNC, administers))
    return builder


def get_arguments(group: GroupModel) -> MsgpackObjectBuilder:
    return receiver.get_arguments(ModelWrapper.from_group(group))


def get_name(group: GroupModel, members: list[str], services: Services) -> str:
    """The group name, or the members' names if it has none."""
    name = values.null_if_empty(group.name)
    if name is not None:
        return name
    names = []
    for identity in members:
        member = services.contacts.get_by_identity(identity)
        names.append(contact_converter.get_name(member) if member is not None else identity)
    return ", ".join(names)
