# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Shared fixtures: in-memory collaborator services and a tracking bitmap."""

from __future__ import annotations

from typing import Any, Callable

import msgpack
import pytest

from pyarp.builder import MsgpackBuilder
from pyarp.models import ConverterConfig
from pyarp.protocol import ImageFormat
from pyarp.receivers import ModelWrapper
from pyarp.services import (
    Bitmap,
    ContactService,
    ConversationTagService,
    DistributionListService,
    EmojiReactionRepository,
    FileService,
    GroupService,
    HiddenChatService,
    MessageReceiver,
    MessageService,
    NotificationSettingsService,
    PreferenceService,
    Services,
    UserService,
    ViewElement,
)
from pyarp.thumbnails import resize_proportionally
from pyarp.types import (
    ContactModel,
    ConversationModel,
    DistributionListModel,
    DoNotDisturb,
    EmojiReaction,
    GroupModel,
    MessageModel,
    SystemContactDetails,
)

USER_IDENTITY = "MYIDENTY"
USER_PUBLIC_KEY = bytes(range(32))


class FakeBitmap(Bitmap):
    """Bitmap that records every copy made from it and whether it was recycled."""

    def __init__(self, width: int, height: int, created: list[FakeBitmap] | None = None) -> None:
        self._width = width
        self._height = height
        self.recycled = False
        self.created = created if created is not None else []
        self.created.append(self)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def resize(self, max_px: int) -> Bitmap:
        size = resize_proportionally(self._width, self._height, max_px)
        if (size.width, size.height) == (self._width, self._height):
            return self
        return FakeBitmap(size.width, size.height, self.created)

    def compress(self, image_format: ImageFormat, quality: int) -> bytes:
        assert not self.recycled, "compress() after recycle()"
        return f"{image_format.value}:{quality}:{self._width}x{self._height}".encode()

    def recycle(self) -> None:
        self.recycled = True

    @property
    def all_recycled(self) -> bool:
        return all(bitmap.recycled for bitmap in self.created)


class FakeReceiver(MessageReceiver):
    def __init__(self, avatar: Bitmap | None = None) -> None:
        self.avatar = avatar

    def get_notification_avatar(self) -> Bitmap | None:
        return self.avatar


class FakeContactService(ContactService):
    def __init__(self) -> None:
        self.contacts: dict[str, ContactModel] = {}
        self.blocked: set[str] = set()
        self.undeletable: set[str] = set()
        self.avatars: dict[str, Bitmap] = {}
        self.notification_avatars: dict[str, Bitmap] = {}
        self.system_details: dict[str, SystemContactDetails] = {}

    def add(self, contact: ContactModel) -> ContactModel:
        self.contacts[contact.identity] = contact
        return contact

    def get_by_identity(self, identity: str) -> ContactModel | None:
        return self.contacts.get(identity)

    def create_receiver(self, contact: ContactModel) -> MessageReceiver | None:
        return FakeReceiver(self.notification_avatars.get(contact.identity))

    def get_avatar(self, contact: ContactModel, high_resolution: bool) -> Bitmap | None:
        return self.avatars.get(contact.identity)

    def is_blocked(self, identity: str) -> bool:
        return identity in self.blocked

    def can_delete(self, identity: str) -> bool:
        return identity not in self.undeletable

    def get_system_contact_details(self, contact: ContactModel) -> SystemContactDetails | None:
        return self.system_details.get(contact.identity)


class FakeGroupService(GroupService):
    def __init__(self) -> None:
        self.groups: dict[int, GroupModel] = {}
        self.members: dict[int, list[str]] = {}
        self.created_by_user: set[int] = set()
        self.left: set[int] = set()
        self.avatars: dict[int, Bitmap] = {}
        self.notification_avatars: dict[int, Bitmap] = {}

    def add(self, group: GroupModel, members: list[str], created_by_user: bool = False) -> GroupModel:
        self.groups[group.id] = group
        self.members[group.id] = members
        if created_by_user:
            self.created_by_user.add(group.id)
        return group

    def get_by_id(self, group_id: int) -> GroupModel | None:
        return self.groups.get(group_id)

    def create_receiver(self, group: GroupModel) -> MessageReceiver | None:
        return FakeReceiver(self.notification_avatars.get(group.id))

    def get_avatar(self, group: GroupModel, high_resolution: bool) -> Bitmap | None:
        return self.avatars.get(group.id)

    def get_member_identities(self, group: GroupModel) -> list[str]:
        return list(self.members.get(group.id, []))

    def is_group_creator(self, group: GroupModel) -> bool:
        return group.id in self.created_by_user

    def is_group_member(self, group: GroupModel) -> bool:
        return group.id not in self.left


class FakeDistributionListService(DistributionListService):
    def __init__(self) -> None:
        self.lists: dict[int, DistributionListModel] = {}
        self.members: dict[int, list[str]] = {}

    def add(self, distribution_list: DistributionListModel, members: list[str]) -> DistributionListModel:
        self.lists[distribution_list.id] = distribution_list
        self.members[distribution_list.id] = members
        return distribution_list

    def get_by_id(self, list_id: int) -> DistributionListModel | None:
        return self.lists.get(list_id)

    def create_receiver(self, distribution_list: DistributionListModel) -> MessageReceiver | None:
        # Distribution lists have no notification avatar
        return FakeReceiver(None)

    def get_avatar(self, distribution_list: DistributionListModel, high_resolution: bool) -> Bitmap | None:
        return None

    def get_member_identities(self, distribution_list: DistributionListModel) -> list[str]:
        return list(self.members.get(distribution_list.id, []))


class FakeConversationTagService(ConversationTagService):
    def __init__(self) -> None:
        self.pinned: set[str] = set()
        self.marked_unread: set[str] = set()

    def is_pinned(self, conversation: ConversationModel) -> bool:
        return ModelWrapper.from_conversation(conversation).unique_id in self.pinned

    def is_marked_unread(self, conversation: ConversationModel) -> bool:
        return ModelWrapper.from_conversation(conversation).unique_id in self.marked_unread


class FakeHiddenChatService(HiddenChatService):
    def __init__(self) -> None:
        self.hidden: set[str] = set()

    def has(self, unique_id: str) -> bool:
        return unique_id in self.hidden


class FakePreferenceService(PreferenceService):
    def __init__(self) -> None:
        self.private_chats_hidden = False
        self.sync_contacts = False

    def is_private_chats_hidden(self) -> bool:
        return self.private_chats_hidden

    def is_sync_contacts(self) -> bool:
        return self.sync_contacts


class FakeFileService(FileService):
    def __init__(self) -> None:
        self.thumbnails: dict[int, Bitmap] = {}
        self.error: Exception | None = None

    def get_message_thumbnail_bitmap(self, message: MessageModel) -> Bitmap | None:
        if self.error is not None:
            raise self.error
        return self.thumbnails.get(message.id)


class FakeNotificationSettingsService(NotificationSettingsService):
    def __init__(self) -> None:
        self.muted: set[str] = set()
        self.dnd: dict[str, DoNotDisturb] = {}

    def is_sound_muted(self, unique_id: str) -> bool:
        return unique_id in self.muted

    def get_do_not_disturb(self, unique_id: str) -> DoNotDisturb | None:
        return self.dnd.get(unique_id)


class FakeReactionRepository(EmojiReactionRepository):
    def __init__(self) -> None:
        self.reactions: dict[int, list[EmojiReaction]] = {}

    def get_reactions_by_message(self, message: MessageModel) -> list[EmojiReaction]:
        return list(self.reactions.get(message.id, []))


class FakeMessageService(MessageService):
    def __init__(self) -> None:
        self.by_api_id: dict[str, MessageModel] = {}
        self.views: dict[int, ViewElement] = {}

    def add(self, message: MessageModel) -> MessageModel:
        if message.api_message_id is not None:
            self.by_api_id[message.api_message_id] = message
        return message

    def get_message_by_api_message_id(self, api_message_id: str, receiver: ModelWrapper) -> MessageModel | None:
        return self.by_api_id.get(api_message_id)

    def get_view_element(self, message: MessageModel) -> ViewElement:
        return self.views.get(message.id, ViewElement(text=message.body))


class FakeUserService(UserService):
    def __init__(self) -> None:
        self.nickname: str | None = "Me"
        self.avatar: Bitmap | None = None

    @property
    def identity(self) -> str:
        return USER_IDENTITY

    @property
    def public_key(self) -> bytes:
        return USER_PUBLIC_KEY

    @property
    def public_nickname(self) -> str | None:
        return self.nickname

    def get_avatar(self, high_resolution: bool) -> Bitmap | None:
        return self.avatar


class FakeEnvironment:
    """All fake collaborators, configurable by the test before building Services."""

    def __init__(self) -> None:
        self.contacts = FakeContactService()
        self.groups = FakeGroupService()
        self.distribution_lists = FakeDistributionListService()
        self.conversation_tags = FakeConversationTagService()
        self.hidden_chats = FakeHiddenChatService()
        self.preferences = FakePreferenceService()
        self.files = FakeFileService()
        self.notification_settings = FakeNotificationSettingsService()
        self.reactions = FakeReactionRepository()
        self.messages = FakeMessageService()
        self.user = FakeUserService()

    def services(self, config: ConverterConfig | None = None) -> Services:
        return Services(
            contacts=self.contacts,
            groups=self.groups,
            distribution_lists=self.distribution_lists,
            conversation_tags=self.conversation_tags,
            hidden_chats=self.hidden_chats,
            preferences=self.preferences,
            files=self.files,
            notification_settings=self.notification_settings,
            reactions=self.reactions,
            messages=self.messages,
            user=self.user,
            config=config,
        )


@pytest.fixture
def env() -> FakeEnvironment:
    return FakeEnvironment()


@pytest.fixture
def services(env: FakeEnvironment) -> Services:
    return env.services()


@pytest.fixture
def legacy_services(env: FakeEnvironment) -> Services:
    return env.services(ConverterConfig(generation="legacy"))


@pytest.fixture
def echo() -> ContactModel:
    return ContactModel(
        identity="ECHOECHO",
        public_key=b"\x02" * 32,
        first_name="Echo",
        last_name="Test",
        color_light=0xFF336699,
    )


@pytest.fixture
def decode() -> Callable[[MsgpackBuilder], Any]:
    """Consume a builder and decode it back into Python values."""

    def _decode(builder: MsgpackBuilder) -> Any:
        return msgpack.unpackb(builder.consume(), raw=False)

    return _decode
