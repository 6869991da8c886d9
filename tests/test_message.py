# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Tests for the message converter."""

from datetime import datetime, timedelta, timezone

import pytest

from pyarp import message
from pyarp.exceptions import ConversionError
from pyarp.protocol import ACK_EMOJI, DEC_EMOJI, DetailLevel
from pyarp.receivers import ModelWrapper
from pyarp.services import Services, ViewElement
from pyarp.types import (
    ContactModel,
    EmojiReaction,
    FileData,
    ForwardSecurityStatusData,
    GroupCallState,
    GroupCallStatusData,
    GroupMessageModel,
    GroupModel,
    GroupStatusData,
    LocationData,
    MessageModel,
    MessageState,
    MessageType,
    RejectReason,
    RenderingType,
    VideoData,
    VoipStatus,
    VoipStatusData,
)

from conftest import FakeBitmap, FakeEnvironment

T = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
TS = 1704164645


def text_message(message_id: int = 1, **kwargs) -> MessageModel:
    defaults = dict(
        id=message_id,
        type=MessageType.TEXT,
        identity="ECHOECHO",
        body="hello",
        state=MessageState.DELIVERED,
        created_at=T,
        posted_at=T,
    )
    defaults.update(kwargs)
    return MessageModel(**defaults)


def file_message(data: FileData, message_id: int = 1, **kwargs) -> MessageModel:
    return MessageModel(
        id=message_id, type=MessageType.FILE, identity="ECHOECHO", file_data=data,
        state=MessageState.DELIVERED, created_at=T, posted_at=T, **kwargs,
    )


@pytest.fixture
def receiver(echo: ContactModel) -> ModelWrapper:
    return ModelWrapper.from_contact(echo)


class TestTextMessage:
    """Tests for plain text messages at every detail level."""

    def test_full(self, services: Services, receiver: ModelWrapper, decode) -> None:
        data = decode(message.convert(text_message(), receiver, services))
        assert data == {
            "id": "1",
            "type": "text",
            "sortKey": 1,
            "isOutbox": False,
            "isStatus": False,
            "body": "hello",
            "partnerId": "ECHOECHO",
            "unread": True,
            "state": "delivered",
            "date": TS,
            "events": [{"type": "created", "date": TS}, {"type": "sent", "date": TS}],
        }

    def test_minimal(self, services: Services, receiver: ModelWrapper, decode) -> None:
        data = decode(message.convert(text_message(), receiver, services, detail=DetailLevel.MINIMAL))
        assert data == {"id": "1", "type": "text", "sortKey": 1, "isOutbox": False, "isStatus": False}

    def test_minimal_needs_no_services(self, receiver: ModelWrapper, decode) -> None:
        """Test that MINIMAL touches no collaborator."""
        data = decode(message.convert(text_message(), receiver, Services(), detail=0))
        assert data["id"] == "1"

    def test_invalid_detail(self, services: Services, receiver: ModelWrapper) -> None:
        with pytest.raises(ConversionError, match="detail level"):
            message.convert(text_message(), receiver, services, detail=5)

    def test_outbox_date_is_modified(self, services: Services, receiver: ModelWrapper, decode) -> None:
        modified = T + timedelta(seconds=30)
        msg = text_message(is_outbox=True, is_read=False, modified_at=modified, state=MessageState.SENT)
        data = decode(message.convert(msg, receiver, services))
        assert data["date"] == TS + 30
        assert data["unread"] is False
        assert data["state"] == "sent"
        assert data["events"][-1] == {"type": "modified", "date": TS + 30}

    def test_last_edited(self, services: Services, receiver: ModelWrapper, decode) -> None:
        data = decode(message.convert(text_message(edited_at=T + timedelta(minutes=1)), receiver, services))
        assert data["lastEditedAt"] == TS + 60

    def test_body_may_be_null(self, services: Services, receiver: ModelWrapper, decode) -> None:
        data = decode(message.convert(text_message(body=None), receiver, services))
        assert "body" in data
        assert data["body"] is None

    def test_first_unread_marker(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = text_message(type=MessageType.STATUS, is_status_message=True, is_first_unread_marker=True)
        data = decode(message.convert(msg, receiver, services))
        assert data["type"] == "status"
        assert data["statusType"] == "firstUnreadMessage"
        assert data["unread"] is False

    def test_missing_id(self, services: Services, receiver: ModelWrapper) -> None:
        with pytest.raises(ConversionError, match="'id' of message"):
            message.convert(text_message(message_id=None), receiver, services)  # type: ignore[arg-type]

    def test_unknown_type(self, services: Services, receiver: ModelWrapper) -> None:
        with pytest.raises(ConversionError, match="Unknown message type"):
            message.convert(text_message(type=MessageType.CONTACT), receiver, services)

    def test_determinism(self, services: Services, receiver: ModelWrapper) -> None:
        """Test that converting the same snapshot twice is byte-identical."""
        msg = text_message()
        first = message.convert(msg, receiver, services).consume()
        second = message.convert(msg, receiver, services).consume()
        assert first == second


class TestQuotes:
    """Tests for quotes inside messages."""

    def test_v1_stripped_at_no_quote(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = text_message(body="> ECHOECHO: question?\n\nanswer")
        data = decode(message.convert(msg, receiver, services, detail=DetailLevel.NO_QUOTE))
        assert data["body"] == "answer"
        assert "quote" not in data

    def test_v1_full(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = text_message(body="> ECHOECHO: question?\n\nanswer")
        data = decode(message.convert(msg, receiver, services))
        assert data["quote"] == {"identity": "ECHOECHO", "text": "question?"}

    def test_v2_full(self, env: FakeEnvironment, services: Services, receiver: ModelWrapper, decode) -> None:
        env.messages.add(text_message(message_id=1, body="original", api_message_id="aaaa"))
        reply = text_message(message_id=2, body="reply", quoted_message_id="aaaa")

        data = decode(message.convert(reply, receiver, services))

        assert data["body"] == "reply"
        quote = data["quote"]
        assert quote["identity"] == "ECHOECHO"
        assert quote["text"] == "original"
        assert quote["message"]["id"] == "1"
        assert quote["message"]["body"] == "original"
        assert "quote" not in quote["message"]

    def test_v2_not_resolved_at_no_quote(self, receiver: ModelWrapper, env: FakeEnvironment, decode) -> None:
        """Test that NO_QUOTE doesn't need the message service for v2 quotes."""
        services = Services(reactions=env.reactions, user=env.user)
        reply = text_message(body="reply", quoted_message_id="aaaa")
        data = decode(message.convert(reply, receiver, services, detail=DetailLevel.NO_QUOTE))
        assert data["body"] == "reply"

    def test_v2_deleted(self, services: Services, receiver: ModelWrapper, decode) -> None:
        reply = text_message(body="reply", quoted_message_id="gone")
        data = decode(message.convert(reply, receiver, services))
        assert data["quote"] == {"text": "The quoted message has been deleted"}


class TestStatusMessages:
    """Tests for messages sent as plain text status messages."""

    def test_group_status(self, env: FakeEnvironment, services: Services, decode) -> None:
        msg = GroupMessageModel(
            id=3, type=MessageType.GROUP_STATUS, identity="ECHOECHO", is_status_message=True,
            group_status_data=GroupStatusData("member_added"), posted_at=T, group_id=1,
        )
        env.messages.views[3] = ViewElement(text="Echo was added")
        data = decode(message.convert(msg, ModelWrapper.from_group(GroupModel(id=1)), services))
        assert data == {
            "id": "3",
            "type": "text",
            "sortKey": 3,
            "isOutbox": False,
            "isStatus": True,
            "partnerId": "ECHOECHO",
            "body": "Echo was added",
            "unread": False,
            "statusType": "text",
            "state": "delivered",
            "date": TS,
            "events": [{"type": "sent", "date": TS}],
        }

    @pytest.mark.parametrize("state,partner", [
        (GroupCallState.STARTED, "ECHOECHO"),
        (GroupCallState.ENDED, "MYIDENTY"),
    ])
    def test_group_call_status(self, services: Services, state: GroupCallState, partner: str, decode) -> None:
        msg = GroupMessageModel(
            id=4, type=MessageType.GROUP_CALL_STATUS, is_status_message=True,
            group_call_status_data=GroupCallStatusData(state, "ECHOECHO"), group_id=1,
        )
        data = decode(message.convert(msg, ModelWrapper.from_group(GroupModel(id=1)), services))
        assert data["partnerId"] == partner
        assert data["isStatus"] is True

    def test_group_call_status_outside_group(self, services: Services, receiver: ModelWrapper) -> None:
        msg = MessageModel(
            id=4, type=MessageType.GROUP_CALL_STATUS,
            group_call_status_data=GroupCallStatusData(GroupCallState.STARTED, "ECHOECHO"),
        )
        with pytest.raises(ConversionError):
            message.convert(msg, receiver, services)

    def test_forward_security_status(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = MessageModel(
            id=5, type=MessageType.FORWARD_SECURITY_STATUS, identity="ECHOECHO", body="Session reset",
            forward_security_status_data=ForwardSecurityStatusData("reset"),
        )
        data = decode(message.convert(msg, receiver, services))
        assert data["type"] == "text"
        assert data["body"] == "Session reset"
        assert "date" not in data

    def test_status_without_data(self, services: Services, receiver: ModelWrapper) -> None:
        msg = MessageModel(id=5, type=MessageType.FORWARD_SECURITY_STATUS)
        with pytest.raises(ConversionError, match="forward_security_status_data"):
            message.convert(msg, receiver, services)


class TestVirtualType:
    """Tests for file messages announced as media."""

    @pytest.mark.parametrize("mime_type,rendering,expected", [
        ("image/jpeg", RenderingType.MEDIA, MessageType.IMAGE),
        ("image/png", RenderingType.MEDIA, MessageType.IMAGE),
        ("audio/ogg", RenderingType.STICKER, MessageType.FILE),
        ("image/gif", RenderingType.MEDIA, MessageType.FILE),
        ("image/gif", RenderingType.STICKER, MessageType.IMAGE),
        ("image/svg+xml", RenderingType.MEDIA, MessageType.FILE),
        ("image/svg+xml", RenderingType.STICKER, MessageType.FILE),
        ("audio/aac", RenderingType.MEDIA, MessageType.VOICEMESSAGE),
        ("video/mp4", RenderingType.MEDIA, MessageType.VIDEO),
        ("video/mp4", RenderingType.STICKER, MessageType.FILE),
        ("image/jpeg", RenderingType.DEFAULT, MessageType.FILE),
    ])
    def test_resolve(self, mime_type: str, rendering: RenderingType, expected: MessageType) -> None:
        msg = file_message(FileData(mime_type=mime_type, rendering_type=rendering))
        assert message.resolve_virtual_type(msg) is expected

    def test_non_file_unchanged(self) -> None:
        assert message.resolve_virtual_type(text_message()) is MessageType.TEXT

    def test_file_without_data(self) -> None:
        with pytest.raises(ConversionError, match="file_data"):
            message.resolve_virtual_type(MessageModel(id=1, type=MessageType.FILE))


class TestMediaData:
    """Tests for the type specific sub-objects."""

    def test_media_image_has_no_sub_object(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = file_message(FileData(mime_type="image/jpeg", rendering_type=RenderingType.MEDIA, caption="Look"))
        data = decode(message.convert(msg, receiver, services))
        assert data["type"] == "image"
        assert data["caption"] == "Look"
        assert "file" not in data
        assert data["body"] is None

    def test_media_audio(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = file_message(FileData(mime_type="audio/aac", rendering_type=RenderingType.MEDIA, duration_seconds=12))
        data = decode(message.convert(msg, receiver, services))
        assert data["type"] == "audio"
        assert data["audio"] == {"duration": 12}
        assert "file" not in data

    def test_media_video(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = file_message(FileData(
            mime_type="video/mp4", rendering_type=RenderingType.MEDIA, duration_seconds=9, file_size=5000,
        ))
        data = decode(message.convert(msg, receiver, services))
        assert data["type"] == "video"
        assert data["video"] == {"duration": 9, "size": 5000}

    def test_stored_video(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = text_message(type=MessageType.VIDEO, body=None, video_data=VideoData(duration=30))
        assert decode(message.convert(msg, receiver, services))["video"] == {"duration": 30}

    def test_file(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = file_message(
            FileData(mime_type="application/pdf", file_name="report", file_size=1234, caption="Q3"),
            message_id=7,
        )
        data = decode(message.convert(msg, receiver, services))
        assert data["type"] == "file"
        assert data["caption"] == "Q3"
        assert data["file"] == {"name": "report.pdf", "size": 1234, "type": "application/pdf", "inApp": False}

    def test_file_name_synthesized(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = file_message(FileData(mime_type="application/pdf", file_size=1), message_id=7)
        data = decode(message.convert(msg, receiver, services))
        assert data["file"]["name"] == "file-20240102-030405-7.pdf"

    def test_file_name_date_in_utc(self) -> None:
        """Test that the synthesized name uses the UTC date of the message."""
        local = datetime(2024, 1, 2, 4, 4, 5, tzinfo=timezone(timedelta(hours=1)))
        naive = datetime(2024, 1, 2, 3, 4, 5)
        for date in (local, naive):
            msg = MessageModel(id=7, type=MessageType.FILE, created_at=date)
            assert message.synthesize_file_name(msg, "file") == "file-20240102-030405-7"

    def test_caption_prefers_message(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = file_message(FileData(mime_type="application/pdf", caption="file caption"), caption="own caption")
        assert decode(message.convert(msg, receiver, services))["caption"] == "own caption"

    def test_location(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = text_message(
            type=MessageType.LOCATION, body=None, caption="ignored",
            location_data=LocationData(47.5, 8.25, 10.0, address="Street 1"),
        )
        data = decode(message.convert(msg, receiver, services))
        assert data["location"] == {
            "lat": 47.5, "lon": 8.25, "accuracy": 10.0, "address": "Street 1", "description": None,
        }
        assert "caption" not in data

    def test_voip_status(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = text_message(
            type=MessageType.VOIP_STATUS, body=None,
            voip_status_data=VoipStatusData(VoipStatus.REJECTED, reason=RejectReason.BUSY),
        )
        data = decode(message.convert(msg, receiver, services))
        assert data["type"] == "voipStatus"
        assert data["voip"] == {"status": 3, "duration": None, "reason": 1}

    def test_voip_finished(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = text_message(type=MessageType.VOIP_STATUS, voip_status_data=VoipStatusData(VoipStatus.FINISHED, 65))
        assert decode(message.convert(msg, receiver, services))["voip"] == {"status": 2, "duration": 65, "reason": None}


class TestThumbnails:
    """Tests for thumbnail previews."""

    def test_thumbnail(self, env: FakeEnvironment, services: Services, receiver: ModelWrapper, decode) -> None:
        bitmap = FakeBitmap(700, 350)
        env.files.thumbnails[1] = bitmap
        msg = text_message(type=MessageType.IMAGE, body=None)

        data = decode(message.convert(msg, receiver, services, send_thumbnail=True))

        assert data["thumbnail"] == {"width": 350, "height": 175, "preview": b"jpeg:60:50x25"}
        assert bitmap.all_recycled

    def test_opt_in(self, env: FakeEnvironment, services: Services, receiver: ModelWrapper, decode) -> None:
        env.files.thumbnails[1] = FakeBitmap(10, 10)
        msg = text_message(type=MessageType.IMAGE, body=None)
        assert "thumbnail" not in decode(message.convert(msg, receiver, services))

    def test_no_thumbnail_for_text(self, env: FakeEnvironment, services: Services, receiver: ModelWrapper, decode) -> None:
        env.files.thumbnails[1] = FakeBitmap(10, 10)
        assert "thumbnail" not in decode(message.convert(text_message(), receiver, services, send_thumbnail=True))

    def test_missing_thumbnail(self, services: Services, receiver: ModelWrapper, decode) -> None:
        msg = text_message(type=MessageType.IMAGE, body=None)
        assert "thumbnail" not in decode(message.convert(msg, receiver, services, send_thumbnail=True))

    def test_load_failure(self, env: FakeEnvironment, services: Services, receiver: ModelWrapper) -> None:
        env.files.error = OSError("unreadable")
        msg = text_message(type=MessageType.IMAGE, body=None)
        with pytest.raises(ConversionError, match="could not be loaded"):
            message.convert(msg, receiver, services, send_thumbnail=True)

    def test_bitmap_released_on_failure(self, env: FakeEnvironment, services: Services, receiver: ModelWrapper) -> None:
        class BrokenBitmap(FakeBitmap):
            def compress(self, image_format, quality):
                raise OSError("codec failure")

        bitmap = BrokenBitmap(20, 20)
        env.files.thumbnails[1] = bitmap
        msg = text_message(type=MessageType.IMAGE, body=None)
        with pytest.raises(ConversionError):
            message.convert(msg, receiver, services, send_thumbnail=True)
        assert bitmap.all_recycled


class TestReactions:
    """Tests for reactions per protocol generation."""

    def test_current(self, env: FakeEnvironment, services: Services, receiver: ModelWrapper, decode) -> None:
        env.reactions.reactions[1] = [
            EmojiReaction("ECHOECHO", ACK_EMOJI),
            EmojiReaction("MYIDENTY", ACK_EMOJI),
        ]
        msg = text_message(state=MessageState.USERACK)
        data = decode(message.convert(msg, receiver, services))
        assert data["emojiReactions"] == [{"reaction": ACK_EMOJI, "identities": ["ECHOECHO", "MYIDENTY"]}]
        assert data["state"] == "read"
        assert "reactions" not in data

    def test_current_without_reactions(self, services: Services, receiver: ModelWrapper, decode) -> None:
        assert "emojiReactions" not in decode(message.convert(text_message(), receiver, services))

    def test_legacy_group(self, env: FakeEnvironment, legacy_services: Services, decode) -> None:
        env.reactions.reactions[1] = [
            EmojiReaction("ECHOECHO", ACK_EMOJI),
            EmojiReaction("OTHER123", DEC_EMOJI),
        ]
        msg = GroupMessageModel(
            id=1, type=MessageType.TEXT, identity="ECHOECHO", body="hi", state=MessageState.USERACK, group_id=1,
        )
        data = decode(message.convert(msg, ModelWrapper.from_group(GroupModel(id=1)), legacy_services))
        assert data["state"] == "delivered"
        assert data["reactions"] == {"ack": ["ECHOECHO"], "dec": ["OTHER123"]}
        assert "emojiReactions" not in data

    def test_legacy_group_without_reactions(self, legacy_services: Services, decode) -> None:
        """Test that a legacy group message nobody reacted to has no reactions object."""
        msg = GroupMessageModel(
            id=1, type=MessageType.TEXT, identity="ECHOECHO", body="hi", state=MessageState.DELIVERED, group_id=1,
        )
        data = decode(message.convert(msg, ModelWrapper.from_group(GroupModel(id=1)), legacy_services))
        assert data["state"] == "delivered"
        assert "reactions" not in data

    def test_legacy_direct_outbox(self, env: FakeEnvironment, legacy_services: Services, receiver: ModelWrapper, decode) -> None:
        """Test that the partner's reaction becomes the state of an outgoing message."""
        env.reactions.reactions[1] = [EmojiReaction("ECHOECHO", DEC_EMOJI)]
        msg = text_message(is_outbox=True, state=MessageState.DELIVERED)
        data = decode(message.convert(msg, receiver, legacy_services))
        assert data["state"] == "user-dec"
        assert "reactions" not in data

    def test_legacy_direct_inbox(self, env: FakeEnvironment, legacy_services: Services, receiver: ModelWrapper, decode) -> None:
        """Test that only the user's own reaction counts for incoming messages."""
        env.reactions.reactions[1] = [EmojiReaction("ECHOECHO", ACK_EMOJI)]
        data = decode(message.convert(text_message(), receiver, legacy_services))
        assert data["state"] == "delivered"
        env.reactions.reactions[1].append(EmojiReaction("MYIDENTY", ACK_EMOJI))
        data = decode(message.convert(text_message(), receiver, legacy_services))
        assert data["state"] == "user-ack"


class TestConvertAll:
    """Tests for bulk message conversion."""

    def test_oldest_first(self, services: Services, receiver: ModelWrapper, decode) -> None:
        page = [text_message(3), text_message(2), text_message(1)]
        builders = message.convert_all(page, receiver, services)
        assert [decode(b)["id"] for b in builders] == ["1", "2", "3"]

    def test_failure_propagates(self, services: Services, receiver: ModelWrapper) -> None:
        page = [text_message(2), text_message(1, type=MessageType.CONTACT)]
        with pytest.raises(ConversionError):
            message.convert_all(page, receiver, services)
