"""
demo_services.py - In-memory collaborators shared by the examples

A real application implements the service interfaces on top of its
database and platform code. These keep everything in dictionaries.
"""

from pyarp import (
    ContactModel,
    ContactService,
    ConversationTagService,
    EmojiReactionRepository,
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


class NoAvatarReceiver(MessageReceiver):
    def get_notification_avatar(self):
        return None


class Contacts(ContactService):
    def __init__(self, *contacts):
        self.by_identity = {c.identity: c for c in contacts}

    def get_by_identity(self, identity):
        return self.by_identity.get(identity)

    def create_receiver(self, contact):
        return NoAvatarReceiver()

    def get_avatar(self, contact, high_resolution):
        return None

    def is_blocked(self, identity):
        return False

    def can_delete(self, identity):
        return True


class Groups(GroupService):
    def __init__(self, members):
        self.members = members
        self.by_id = {}

    def get_by_id(self, group_id):
        return self.by_id.get(group_id)

    def create_receiver(self, group):
        return NoAvatarReceiver()

    def get_avatar(self, group, high_resolution):
        return None

    def get_member_identities(self, group):
        return self.members.get(group.id, [])

    def is_group_creator(self, group):
        return group.creator_identity == "MYIDENTY"

    def is_group_member(self, group):
        return True


class NoTags(ConversationTagService):
    def is_pinned(self, conversation):
        return False

    def is_marked_unread(self, conversation):
        return False


class NoHiddenChats(HiddenChatService):
    def has(self, unique_id):
        return False


class Preferences(PreferenceService):
    def is_private_chats_hidden(self):
        return False


class DefaultNotifications(NotificationSettingsService):
    def is_sound_muted(self, unique_id):
        return False

    def get_do_not_disturb(self, unique_id):
        return None


class Reactions(EmojiReactionRepository):
    def __init__(self):
        self.by_message = {}

    def get_reactions_by_message(self, message):
        return self.by_message.get(message.id, [])


class Messages(MessageService):
    def __init__(self, *messages):
        self.by_api_id = {m.api_message_id: m for m in messages if m.api_message_id}

    def get_message_by_api_message_id(self, api_message_id, receiver):
        return self.by_api_id.get(api_message_id)

    def get_view_element(self, message):
        return ViewElement(text=message.body)


class User(UserService):
    @property
    def identity(self):
        return "MYIDENTY"

    @property
    def public_key(self):
        return bytes(32)


ECHO = ContactModel(identity="ECHOECHO", public_key=bytes(32), first_name="Echo", color_light=0xFF2196F3)


def build_services(messages=(), reactions=None, config=None):
    reaction_repository = Reactions()
    reaction_repository.by_message.update(reactions or {})
    return Services(
        contacts=Contacts(ECHO),
        groups=Groups({}),
        conversation_tags=NoTags(),
        hidden_chats=NoHiddenChats(),
        preferences=Preferences(),
        notification_settings=DefaultNotifications(),
        reactions=reaction_repository,
        messages=Messages(*messages),
        user=User(),
        config=config,
    )
