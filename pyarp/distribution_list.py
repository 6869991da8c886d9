# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Distribution list converter."""

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
    from .types import DistributionListModel


def convert_all(distribution_lists: list[DistributionListModel], services: Services) -> list[MsgpackBuilder]:
    return [convert(distribution_list, services) for distribution_list in distribution_lists]


def convert(distribution_list: DistributionListModel, services: Services) -> MsgpackObjectBuilder:
    list_id = require(distribution_list.id, "distribution list", "id")
    wrapper = ModelWrapper.from_distribution_list(distribution_list)
    members = services.distribution_lists.get_member_identities(distribution_list)
    is_locked = services.hidden_chats.has(wrapper.unique_id)

    builder = MsgpackObjectBuilder()
    builder.put(receiver.ID, str(list_id))
    builder.put(receiver.DISPLAY_NAME, get_name(distribution_list, members, services))
    builder.put(receiver.COLOR, wrapper.color)
    builder.put(receiver.MEMBERS, MsgpackArrayBuilder().extend(members))
    builder.put(receiver.LOCKED, is_locked)
    builder.put(receiver.VISIBLE, receiver.is_visible(services, is_locked))

    # Distribution lists are owned by the user alone
    builder.put(receiver.ACCESS, MsgpackObjectBuilder()
        .put(receiver.CAN_DELETE, True)
        .put(receiver.CAN_CHANGE_MEMBERS, True))
    return builder


def get_arguments(distribution_list: DistributionListModel) -> MsgpackObjectBuilder:
    return receiver.get_arguments(ModelWrapper.from_distribution_list(distribution_list))


def get_name(distribution_list: DistributionListModel, members: list[str], services: Services) -> str:
    name = values.null_if_empty(distribution_list.name)
    if name is not None:
        return name
    names = []
    for identity in members:
        member = services.contacts.get_by_identity(identity)
        names.append(contact_converter.get_name(member) if member is not None else identity)
    return ", ".join(names)
