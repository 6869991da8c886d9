#!/usr/bin/env python3
"""
02_message_history.py - Message History and Reactions

Converts a page of messages the way the remote client requests them:
oldest first, at FULL detail, with quotes and reactions.

What this example demonstrates:
- Converter.messages() for a storage page (newest first)
- v2 quotes resolved to the quoted message
- Emoji reactions for CURRENT clients, ack/dec states for LEGACY clients

Run with:
    python 02_message_history.py
"""

from datetime import datetime, timedelta, timezone

import msgpack

from pyarp import (
    Converter,
    ConverterConfig,
    EmojiReaction,
    MessageModel,
    MessageState,
    MessageType,
    ModelWrapper,
    ProtocolGeneration,
)

from demo_services import ECHO, build_services


def main():
    now = datetime.now(timezone.utc)
    question = MessageModel(
        id=1, type=MessageType.TEXT, identity="ECHOECHO", body="Lunch at noon?",
        api_message_id="a1b2c3d4", state=MessageState.READ, posted_at=now - timedelta(minutes=5),
    )
    answer = MessageModel(
        id=2, type=MessageType.TEXT, identity="ECHOECHO", is_outbox=True, body="Sure!",
        quoted_message_id="a1b2c3d4", state=MessageState.DELIVERED, posted_at=now,
    )
    reactions = {2: [EmojiReaction("ECHOECHO", "\U0001F44D")]}
    receiver = ModelWrapper.from_contact(ECHO)

    for generation in ProtocolGeneration:
        services = build_services([question, answer], reactions, ConverterConfig(generation=generation))
        converter = Converter(services)

        print(f"=== {generation.value} client ===")
        # Storage pages are newest first
        for builder in converter.messages([answer, question], receiver):
            data = msgpack.unpackb(converter.encode(builder))
            quote = data.get("quote")
            print(f"  #{data['id']} {data['state']:<10} {data['body']!r}")
            if quote:
                print(f"      quoting {quote['identity']}: {quote['text']!r}")
            if "emojiReactions" in data:
                print(f"      reactions: {data['emojiReactions']}")


if __name__ == "__main__":
    main()
