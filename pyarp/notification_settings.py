# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Per-conversation notification settings converter.

    {
        "sound": {"mode": "default" | "muted"},
        "dnd":   {"mode": "off" | "on" | "until", "until"?: ms, "mentionOnly"?: bool}
    }
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from . import values
from .builder import MsgpackObjectBuilder
from .receivers import ReceiverType

if TYPE_CHECKING:
    from .receivers import ModelWrapper
    from .services import Services

SOUND = "sound"
DND = "dnd"
MODE = "mode"
UNTIL = "until"
MENTION_ONLY = "mentionOnly"

SOUND_DEFAULT = "default"
SOUND_MUTED = "muted"
DND_OFF = "off"
DND_ON = "on"
DND_UNTIL = "until"


def convert(wrapper: ModelWrapper, services: Services) -> MsgpackObjectBuilder:
    settings = services.notification_settings
    unique_id = wrapper.unique_id

    sound = MsgpackObjectBuilder().put(
        MODE, SOUND_MUTED if settings.is_sound_muted(unique_id) else SOUND_DEFAULT
    )

    dnd = MsgpackObjectBuilder()
    override = settings.get_do_not_disturb(unique_id)
    if override is None:
        dnd.put(MODE, DND_OFF)
    else:
        if override.until is None:
            dnd.put(MODE, DND_ON)
        else:
            dnd.put(MODE, DND_UNTIL)
            dnd.put(UNTIL, values.timestamp_ms(override.until))
        # Mentions only exist in groups
        if wrapper.type is ReceiverType.GROUP:
            dnd.put(MENTION_ONLY, override.mention_only)

    return MsgpackObjectBuilder().put(SOUND, sound).put(DND, dnd)
