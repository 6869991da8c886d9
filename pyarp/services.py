# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Collaborator interfaces consumed by the converters.

The application implements these on top of its own storage and platform
code and hands them to the converters in a Services bundle. Converters only
read through them; none of these calls may block on the network.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .exceptions import ConversionError
from .models import ConverterConfig

if TYPE_CHECKING:
    from .protocol import ImageFormat
    from .receivers import ModelWrapper
    from .types import (
        ContactModel,
        ConversationModel,
        DistributionListModel,
        DoNotDisturb,
        EmojiReaction,
        GroupModel,
        MessageModel,
        SystemContactDetails,
    )


class Bitmap(ABC):
    """
    A decoded image owned by whoever obtained it.

    The owner must call recycle() once done, whether encoding succeeded or
    not; see thumbnails.released().
    """

    @property
    @abstractmethod
    def width(self) -> int:
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        pass

    @abstractmethod
    def resize(self, max_px: int) -> Bitmap:
        """Return a proportionally downscaled copy bounded by max_px (or self)."""

    @abstractmethod
    def compress(self, image_format: ImageFormat, quality: int) -> bytes:
        pass

    @abstractmethod
    def recycle(self) -> None:
        pass


class MessageReceiver(ABC):
    """Handle the application uses to address a contact, group or list."""

    @abstractmethod
    def get_notification_avatar(self) -> Bitmap | None:
        pass


class ContactService(ABC):
    @abstractmethod
    def get_by_identity(self, identity: str) -> ContactModel | None:
        pass

    @abstractmethod
    def create_receiver(self, contact: ContactModel) -> MessageReceiver | None:
        pass

    @abstractmethod
    def get_avatar(self, contact: ContactModel, high_resolution: bool) -> Bitmap | None:
        pass

    @abstractmethod
    def is_blocked(self, identity: str) -> bool:
        pass

    @abstractmethod
    def can_delete(self, identity: str) -> bool:
        pass

    def get_system_contact_details(self, contact: ContactModel) -> SystemContactDetails | None:
        """Address book details of a linked contact, if readable."""
        return None


class GroupService(ABC):
    @abstractmethod
    def get_by_id(self, group_id: int) -> GroupModel | None:
        pass

    @abstractmethod
    def create_receiver(self, group: GroupModel) -> MessageReceiver | None:
        pass

    @abstractmethod
    def get_avatar(self, group: GroupModel, high_resolution: bool) -> Bitmap | None:
        pass

    @abstractmethod
    def get_member_identities(self, group: GroupModel) -> list[str]:
        pass

    @abstractmethod
    def is_group_creator(self, group: GroupModel) -> bool:
        pass

    @abstractmethod
    def is_group_member(self, group: GroupModel) -> bool:
        pass


class DistributionListService(ABC):
    @abstractmethod
    def get_by_id(self, list_id: int) -> DistributionListModel | None:
        pass

    @abstractmethod
    def create_receiver(self, distribution_list: DistributionListModel) -> MessageReceiver | None:
        pass

    @abstractmethod
    def get_avatar(self, distribution_list: DistributionListModel, high_resolution: bool) -> Bitmap | None:
        pass

    @abstractmethod
    def get_member_identities(self, distribution_list: DistributionListModel) -> list[str]:
        pass


class ConversationTagService(ABC):
    @abstractmethod
    def is_pinned(self, conversation: ConversationModel) -> bool:
        pass

    @abstractmethod
    def is_marked_unread(self, conversation: ConversationModel) -> bool:
        pass


class HiddenChatService(ABC):
    """Set of conversations the user locked as private chats."""

    @abstractmethod
    def has(self, unique_id: str) -> bool:
        pass


class PreferenceService(ABC):
    @abstractmethod
    def is_private_chats_hidden(self) -> bool:
        pass

    def is_sync_contacts(self) -> bool:
        return False


class FileService(ABC):
    @abstractmethod
    def get_message_thumbnail_bitmap(self, message: MessageModel) -> Bitmap | None:
        pass


class NotificationSettingsService(ABC):
    """Per-conversation ringtone and do-not-disturb overrides."""

    @abstractmethod
    def is_sound_muted(self, unique_id: str) -> bool:
        pass

    @abstractmethod
    def get_do_not_disturb(self, unique_id: str) -> DoNotDisturb | None:
        pass


class EmojiReactionRepository(ABC):
    @abstractmethod
    def get_reactions_by_message(self, message: MessageModel) -> list[EmojiReaction]:
        pass


@dataclass(frozen=True)
class ViewElement:
    """Rendered, human readable representation of a message."""

    text: str | None = None
    placeholder: str | None = None


class MessageService(ABC):
    @abstractmethod
    def get_message_by_api_message_id(self, api_message_id: str, receiver: ModelWrapper) -> MessageModel | None:
        pass

    @abstractmethod
    def get_view_element(self, message: MessageModel) -> ViewElement:
        pass


class UserService(ABC):
    """The local user's own identity."""

    @property
    @abstractmethod
    def identity(self) -> str:
        pass

    @property
    @abstractmethod
    def public_key(self) -> bytes:
        pass

    @property
    def public_nickname(self) -> str | None:
        return None

    def get_avatar(self, high_resolution: bool) -> Bitmap | None:
        return None


class Services:
    """
    Capability bundle passed explicitly to every converter call.

    Only the services a conversion actually touches need to be present;
    accessing a missing one raises ConversionError.

    Example:
        >>> services = Services(contacts=my_contacts, preferences=my_prefs)
        >>> builder = contact.convert(model, services)
    """

    def __init__(
        self,
        *,
        contacts: ContactService | None = None,
        groups: GroupService | None = None,
        distribution_lists: DistributionListService | None = None,
        conversation_tags: ConversationTagService | None = None,
        hidden_chats: HiddenChatService | None = None,
        preferences: PreferenceService | None = None,
        files: FileService | None = None,
        notification_settings: NotificationSettingsService | None = None,
        reactions: EmojiReactionRepository | None = None,
        messages: MessageService | None = None,
        user: UserService | None = None,
        config: ConverterConfig | None = None,
    ) -> None:
        self._services: dict[str, Any] = {
            "contacts": contacts,
            "groups": groups,
            "distribution_lists": distribution_lists,
            "conversation_tags": conversation_tags,
            "hidden_chats": hidden_chats,
            "preferences": preferences,
            "files": files,
            "notification_settings": notification_settings,
            "reactions": reactions,
            "messages": messages,
            "user": user,
        }
        self.config = config or ConverterConfig()

    def _get(self, name: str) -> Any:
        service = self._services[name]
        if service is None:
            raise ConversionError.service_unavailable(name)
        return service

    @property
    def contacts(self) -> ContactService:
        return self._get("contacts")

    @property
    def groups(self) -> GroupService:
        return self._get("groups")

    @property
    def distribution_lists(self) -> DistributionListService:
        return self._get("distribution_lists")

    @property
    def conversation_tags(self) -> ConversationTagService:
        return self._get("conversation_tags")

    @property
    def hidden_chats(self) -> HiddenChatService:
        return self._get("hidden_chats")

    @property
    def preferences(self) -> PreferenceService:
        return self._get("preferences")

    @property
    def files(self) -> FileService:
        return self._get("files")

    @property
    def notification_settings(self) -> NotificationSettingsService:
        return self._get("notification_settings")

    @property
    def reactions(self) -> EmojiReactionRepository:
        return self._get("reactions")

    @property
    def messages(self) -> MessageService:
        return self._get("messages")

    @property
    def user(self) -> UserService:
        return self._get("user")

    def with_config(self, config: ConverterConfig) -> Services:
        """Return a copy of the bundle using another configuration."""
        return Services(**self._services, config=config)
