# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
PyARP - App Remote Protocol projection layer.

Turns the messenger's domain model into the MessagePack payloads spoken with
a remote (web/desktop) client:
- Lazy, order-preserving map and array builders
- Converters for contacts, groups, distribution lists, conversations,
  messages, notification settings, the user profile and client info
- Virtual message types, quote extraction and reaction aggregation
- Thumbnail and avatar encoding with guaranteed bitmap release
- Reactive bulk conversion with fail or skip-and-report policies

Quick Start:
    >>> from pyarp import Converter, Services
    >>>
    >>> converter = Converter(Services(contacts=contacts, hidden_chats=hidden,
    ...                                preferences=prefs))
    >>> payload = converter.encode(converter.contact(contact))

Builders:
    >>> from pyarp import MsgpackObjectBuilder, MsgpackArrayBuilder
    >>>
    >>> builder = MsgpackObjectBuilder().put("id", "42").maybe_put("caption", None)
    >>> builder.put("events", MsgpackArrayBuilder().put(1).put(2))
    >>> data = builder.consume()  # a second consume() raises

Message History:
    >>> receiver = converter.receiver("contact", "ECHOECHO")
    >>> payloads = [converter.encode(b) for b in converter.messages(page, receiver)]

Error Handling:
    >>> from pyarp import ConversionError
    >>>
    >>> try:
    ...     converter.encode(converter.group(group))
    ... except ConversionError as e:
    ...     print(f"Cannot convert: {e}")
"""

from .builder import MsgpackArrayBuilder, MsgpackBuilder, MsgpackObjectBuilder
from .converter import Converter
from .encoder import MsgpackEncoder, encode
from .exceptions import (
    ARPError,
    BuilderConsumedError,
    ConversionError,
    EncoderError,
    require,
)
from .instructions import Instruction, InstructionType
from .models import (
    ClientCapabilities,
    ClientConfiguration,
    ClientInfo,
    ConverterConfig,
)
from .protocol import DetailLevel, ImageFormat, ProtocolGeneration
from .reactions import ReactionBucket, bucket_reactions, legacy_reactions
from .reactive import FailurePolicy, ReactiveConverter, from_messages
from .receivers import ModelWrapper, ReceiverType
from .services import (
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
from .types import (
    AudioData,
    ContactModel,
    ConversationModel,
    DistributionListMessageModel,
    DistributionListModel,
    DoNotDisturb,
    EmojiReaction,
    FileData,
    GroupMessageModel,
    GroupModel,
    LocationData,
    MessageModel,
    MessageState,
    MessageType,
    RenderingType,
    VideoData,
    VoipStatusData,
)

__version__ = "0.1.0"
__author__ = "Firefly Software Solutions Inc."
__license__ = "Apache-2.0"

__all__ = [
    # Builders
    "MsgpackBuilder",
    "MsgpackObjectBuilder",
    "MsgpackArrayBuilder",
    "Instruction",
    "InstructionType",
    # Encoder
    "MsgpackEncoder",
    "encode",
    # Facade
    "Converter",
    "ModelWrapper",
    "ReceiverType",
    # Reactive
    "ReactiveConverter",
    "FailurePolicy",
    "from_messages",
    # Reactions
    "ReactionBucket",
    "bucket_reactions",
    "legacy_reactions",
    # Protocol
    "DetailLevel",
    "ImageFormat",
    "ProtocolGeneration",
    # Configuration (Pydantic models)
    "ConverterConfig",
    "ClientInfo",
    "ClientConfiguration",
    "ClientCapabilities",
    # Services
    "Services",
    "Bitmap",
    "MessageReceiver",
    "ContactService",
    "GroupService",
    "DistributionListService",
    "ConversationTagService",
    "HiddenChatService",
    "PreferenceService",
    "FileService",
    "NotificationSettingsService",
    "EmojiReactionRepository",
    "MessageService",
    "UserService",
    "ViewElement",
    # Domain types
    "ContactModel",
    "GroupModel",
    "DistributionListModel",
    "ConversationModel",
    "MessageModel",
    "GroupMessageModel",
    "DistributionListMessageModel",
    "MessageType",
    "MessageState",
    "RenderingType",
    "FileData",
    "VideoData",
    "AudioData",
    "LocationData",
    "VoipStatusData",
    "EmojiReaction",
    "DoNotDisturb",
    # Exceptions
    "ARPError",
    "ConversionError",
    "BuilderConsumedError",
    "EncoderError",
    "require",
]
