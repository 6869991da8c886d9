# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Contact converter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import receivers as receiver
from . import values
from .builder import MsgpackArrayBuilder, MsgpackBuilder, MsgpackObjectBuilder
from .exceptions import require
from .receivers import ModelWrapper

if TYPE_CHECKING:
    from .services import Services
    from .types import ContactModel

PUBLIC_NICKNAME = "publicNickname"
VERIFICATION_LEVEL = "verificationLevel"
STATE = "state"
HIDDEN = "hidden"
FEATURE_MASK = "featureMask"
PUBLIC_KEY = "publicKey"
FIRST_NAME = "firstName"
LAST_NAME = "lastName"
IS_WORK = "isWork"
IDENTITY_TYPE = "identityType"
IS_BLOCKED = "isBlocked"

CAN_CHANGE_AVATAR = "canChangeAvatar"
CAN_CHANGE_FIRST_NAME = "canChangeFirstName"
CAN_CHANGE_LAST_NAME = "canChangeLastName"

SYSTEM_CONTACT = "systemContact"
SYSTEM_CONTACT_EMAILS = "emails"
SYSTEM_CONTACT_EMAIL = "address"
SYSTEM_CONTACT_LABEL = "label"
SYSTEM_CONTACT_PHONE_NUMBERS = "phoneNumbers"
SYSTEM_CONTACT_PHONE_NUMBER = "number"


def convert_all(contacts: list[ContactModel], services: Services) -> list[MsgpackBuilder]:
    return [convert(contact, services) for contact in contacts]


def convert(contact: ContactModel, services: Services) -> MsgpackObjectBuilder:
    """
    Convert a contact to its receiver structure.

    Raises:
        ConversionError: If a required field or service is missing.
    """
    identity = require(contact.identity, "contact", "identity")
    public_key = require(contact.public_key, "contact", "public_key")
    state = require(contact.state, "contact", "state")
    level = require(contact.verification_level, "contact", "verification_level")
    config = services.config

    wrapper = ModelWrapper.from_contact(contact)
    is_locked = services.hidden_chats.has(wrapper.unique_id)

    builder = MsgpackObjectBuilder()
    builder.put(receiver.ID, identity)
    builder.put(receiver.DISPLAY_NAME, get_name(contact))
    builder.put(receiver.COLOR, wrapper.color)
    builder.maybe_put(FIRST_NAME, values.null_if_empty(contact.first_name))
    builder.maybe_put(LAST_NAME, values.null_if_empty(contact.last_name))
    builder.maybe_put(PUBLIC_NICKNAME, values.null_if_empty(contact.public_nickname))
    builder.put(VERIFICATION_LEVEL, values.verification_level(level))
    builder.put(STATE, state.value)
    builder.put(HIDDEN, contact.is_hidden)
    builder.put(IS_WORK, config.is_work_build and contact.is_work)
    builder.put(PUBLIC_KEY, public_key)
    builder.put(IDENTITY_TYPE, values.identity_type(contact.identity_type))
    builder.put(IS_BLOCKED, services.contacts.is_blocked(identity))
    builder.put(FEATURE_MASK, contact.feature_mask)
    builder.put(receiver.LOCKED, is_locked)
    builder.put(receiver.VISIBLE, receiver.is_visible(services, is_locked))

    builder.put(receiver.ACCESS, MsgpackObjectBuilder()
        .put(receiver.CAN_DELETE, services.contacts.can_delete(identity))
        .put(CAN_CHANGE_AVATAR, can_change_avatar(contact, services))
        .put(CAN_CHANGE_FIRST_NAME, can_change_name(contact, services))
        .put(CAN_CHANGE_LAST_NAME, can_change_name(contact, services)))
    return builder


def convert_details(contact: ContactModel, services: Services) -> MsgpackObjectBuilder:
    """Address book details (phone numbers, e-mails) of a linked contact."""
    phone_numbers = MsgpackArrayBuilder()
    emails = MsgpackArrayBuilder()

    if contact.linked_system_contact is not None:
        details = services.contacts.get_system_contact_details(contact)
        if details is not None:
            for label, number in details.phone_numbers:
                phone_numbers.put(MsgpackObjectBuilder()
                    .put(SYSTEM_CONTACT_LABEL, label)
                    .put(SYSTEM_CONTACT_PHONE_NUMBER, number))
            for label, address in details.emails:
                emails.put(MsgpackObjectBuilder()
                    .put(SYSTEM_CONTACT_LABEL, label)
                    .put(SYSTEM_CONTACT_EMAIL, address))

    return MsgpackObjectBuilder().put(SYSTEM_CONTACT, MsgpackObjectBuilder()
        .put(SYSTEM_CONTACT_PHONE_NUMBERS, phone_numbers)
        .put(SYSTEM_CONTACT_EMAILS, emails))


def get_arguments(contact: ContactModel) -> MsgpackObjectBuilder:
    return MsgpackObjectBuilder().put(receiver.ID, require(contact.identity, "contact", "identity"))


def get_name(contact: ContactModel) -> str:
    """Full name, else ``~nickname``, else the identity."""
    parts = [p.strip() for p in (contact.first_name, contact.last_name) if p and p.strip()]
    if parts:
        return " ".join(parts)
    nickname = values.null_if_empty(contact.public_nickname)
    if nickname is not None and nickname != contact.identity:
        return f"~{nickname}"
    return contact.identity


def _is_synced(contact: ContactModel, services: Services) -> bool:
    return contact.linked_system_contact is not None and services.preferences.is_sync_contacts()


def can_change_avatar(contact: ContactModel, services: Services) -> bool:
    # Gateway avatars are set by the gateway, synced ones by the address book
    return not contact.is_gateway and not _is_synced(contact, services)


def can_change_name(contact: ContactModel, services: Services) -> bool:
    return not _is_synced(contact, services)
