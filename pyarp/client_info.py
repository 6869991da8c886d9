# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Client info converter.

Announces the device, the app build and the limits the remote client has to
respect:

    +------------------+-----------------------------------------------+
    | Key              | Content                                       |
    +------------------+-----------------------------------------------+
    | device           | Device model                                  |
    | os               | Always "android"                              |
    | osVersion        | OS release                                    |
    | appVersion       | App version string                            |
    | isWork           | Work build                                    |
    | pushToken        | Push token, omitted if not registered         |
    | configuration    | Settings mirrored by the remote client        |
    | capabilities     | Limits and supported image formats            |
    +------------------+-----------------------------------------------+
"""

from __future__ import annotations

from .builder import MsgpackObjectBuilder
from .models import ClientInfo

OS_ANDROID = "android"

DEVICE = "device"
OS = "os"
OS_VERSION = "osVersion"
APP_VERSION = "appVersion"
IS_WORK = "isWork"
PUSH_TOKEN = "pushToken"
CONFIGURATION = "configuration"
CAPABILITIES = "capabilities"

VOIP_ENABLED = "voipEnabled"
VOIP_FORCE_TURN = "voipForceTurn"
LARGE_SINGLE_EMOJI = "largeSingleEmoji"
SHOW_INACTIVE_IDS = "showInactiveIDs"

MAX_GROUP_SIZE = "maxGroupSize"
MAX_FILE_SIZE = "maxFileSize"
DISTRIBUTION_LISTS = "distributionLists"
IMAGE_FORMAT = "imageFormat"
IMAGE_FORMAT_AVATAR = "avatar"
IMAGE_FORMAT_THUMBNAIL = "thumbnail"


def convert(info: ClientInfo) -> MsgpackObjectBuilder:
    configuration = info.configuration
    capabilities = info.capabilities

    return (MsgpackObjectBuilder()
        .put(DEVICE, info.device)
        .put(OS, OS_ANDROID)
        .put(OS_VERSION, info.os_version)
        .put(APP_VERSION, info.app_version)
        .put(IS_WORK, info.is_work)
        .maybe_put(PUSH_TOKEN, info.push_token)
        .put(CONFIGURATION, MsgpackObjectBuilder()
            .put(VOIP_ENABLED, configuration.voip_enabled)
            .put(VOIP_FORCE_TURN, configuration.voip_force_turn)
            .put(LARGE_SINGLE_EMOJI, configuration.large_single_emoji)
            .put(SHOW_INACTIVE_IDS, configuration.show_inactive_ids))
        .put(CAPABILITIES, MsgpackObjectBuilder()
            .put(MAX_GROUP_SIZE, capabilities.max_group_size)
            .put(MAX_FILE_SIZE, capabilities.max_file_size)
            .put(DISTRIBUTION_LISTS, capabilities.distribution_lists)
            .put(IMAGE_FORMAT, MsgpackObjectBuilder()
                .put(IMAGE_FORMAT_AVATAR, capabilities.avatar_format.mime_type)
                .put(IMAGE_FORMAT_THUMBNAIL, capabilities.thumbnail_format.mime_type))))
