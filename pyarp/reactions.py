# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Reaction aggregation.

The reaction repository returns one event per (identity, emoji). Current
clients receive them grouped into buckets:

    [{"reaction": "👍", "identities": ["ALICE123", "BOB45678"]}, ...]

Legacy clients only understand thumbs up/down ("ack"/"dec"), one per
identity. Events are expected in the order they happened; a later event
overrides an earlier one of the same identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .builder import MsgpackArrayBuilder, MsgpackObjectBuilder
from .protocol import ACK_EMOJI, DEC_EMOJI
from .types import EmojiReaction, MessageState

REACTION = "reaction"
IDENTITIES = "identities"
ACK = "ack"
DEC = "dec"


@dataclass(frozen=True)
class ReactionBucket:
    """All identities that reacted with the same emoji."""

    reaction: str
    identities: tuple[str, ...]

    def to_builder(self) -> MsgpackObjectBuilder:
        return (MsgpackObjectBuilder()
            .put(REACTION, self.reaction)
            .put(IDENTITIES, MsgpackArrayBuilder().extend(self.identities)))


def bucket_reactions(events: Iterable[EmojiReaction]) -> list[ReactionBucket]:
    """
    Group reaction events by emoji.

    Buckets and the identities within them keep first-seen order; duplicate
    identities are dropped and no bucket is empty.
    """
    buckets: dict[str, dict[str, None]] = {}
    for event in events:
        if not event.emoji_sequence or not event.sender_identity:
            continue
        buckets.setdefault(event.emoji_sequence, {})[event.sender_identity] = None
    return [ReactionBucket(reaction, tuple(identities)) for reaction, identities in buckets.items() if identities]


def buckets_to_builder(buckets: Iterable[ReactionBucket]) -> MsgpackArrayBuilder:
    array = MsgpackArrayBuilder()
    for bucket in buckets:
        array.put(bucket.to_builder())
    return array


def _legacy_states(events: Iterable[EmojiReaction]) -> dict[str, MessageState]:
    states: dict[str, MessageState] = {}
    for event in events:
        if event.emoji_sequence == ACK_EMOJI:
            states[event.sender_identity] = MessageState.USERACK
        elif event.emoji_sequence == DEC_EMOJI:
            states[event.sender_identity] = MessageState.USERDEC
    return states


def legacy_reactions(events: Iterable[EmojiReaction]) -> tuple[list[str], list[str]]:
    """Identities that acknowledged and declined, for legacy group messages."""
    states = _legacy_states(events)
    acks = [identity for identity, state in states.items() if state is MessageState.USERACK]
    decs = [identity for identity, state in states.items() if state is MessageState.USERDEC]
    return acks, decs


def legacy_reactions_builder(events: Iterable[EmojiReaction]) -> MsgpackObjectBuilder | None:
    """The reactions sub-object of a legacy group message, or None without acks or decs."""
    acks, decs = legacy_reactions(events)
    if not acks and not decs:
        return None
    return (MsgpackObjectBuilder()
        .put(ACK, MsgpackArrayBuilder().extend(acks))
        .put(DEC, MsgpackArrayBuilder().extend(decs)))


def legacy_direct_state(events: Iterable[EmojiReaction], reactor_identity: str | None) -> MessageState | None:
    """
    Acknowledgement state of a one-to-one message, or None if there is none.

    Only the reaction of ``reactor_identity`` counts: the partner's for
    outgoing messages, the user's own for incoming ones.
    """
    if reactor_identity is None:
        return None
    return _legacy_states(events).get(reactor_identity)
