# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Pydantic models for pyarp.

Provides validated configuration for the converters and the device/app
metadata announced to the remote client.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .protocol import (
    FORMAT_AVATAR,
    FORMAT_THUMBNAIL,
    QUALITY_AVATAR_HIRES,
    QUALITY_AVATAR_LORES,
    QUALITY_THUMBNAIL,
    SIZE_AVATAR_LORES_MAX_PX,
    SIZE_PREVIEW_MAX_PX,
    SIZE_THUMBNAIL_MAX_PX,
    ImageFormat,
    ProtocolGeneration,
)


# ============================================================================
# Configuration Models
# ============================================================================


class ConverterConfig(BaseModel):
    """Configuration shared by all converters."""

    model_config = ConfigDict(validate_assignment=True)

    generation: ProtocolGeneration = ProtocolGeneration.CURRENT

    # Thumbnails
    thumbnail_max_px: int = Field(default=SIZE_THUMBNAIL_MAX_PX, ge=1, le=4096)
    preview_max_px: int = Field(default=SIZE_PREVIEW_MAX_PX, ge=1, le=4096)
    thumbnail_format: ImageFormat = FORMAT_THUMBNAIL
    thumbnail_quality: int = Field(default=QUALITY_THUMBNAIL, ge=0, le=100)

    # Avatars
    avatar_format: ImageFormat = FORMAT_AVATAR
    avatar_quality_hires: int = Field(default=QUALITY_AVATAR_HIRES, ge=0, le=100)
    avatar_quality_lores: int = Field(default=QUALITY_AVATAR_LORES, ge=0, le=100)
    avatar_lores_max_px: int = Field(default=SIZE_AVATAR_LORES_MAX_PX, ge=1, le=4096)

    # Build flavour
    is_work_build: bool = False

    # Texts substituted for unresolvable quotes
    quote_not_found_text: str = "Quoted message not found"
    quote_deleted_text: str = "The quoted message has been deleted"

    # Prefix of file names synthesized for unnamed files
    file_name_prefix: str = Field(default="file", min_length=1)

    @field_validator("file_name_prefix")
    @classmethod
    def validate_file_name_prefix(cls, v: str) -> str:
        if "/" in v or "\\" in v:
            raise ValueError("File name prefix must not contain path separators")
        return v

    @property
    def is_legacy(self) -> bool:
        return self.generation is ProtocolGeneration.LEGACY


# ============================================================================
# Client Info Models
# ============================================================================


class ClientConfiguration(BaseModel):
    """User-facing settings the remote client mirrors."""

    model_config = ConfigDict(frozen=True)

    voip_enabled: bool = True
    voip_force_turn: bool = False
    large_single_emoji: bool = True
    show_inactive_ids: bool = True


class ClientCapabilities(BaseModel):
    """Limits and features of the app the remote client must respect."""

    model_config = ConfigDict(frozen=True)

    max_group_size: int = Field(default=256, ge=1)
    max_file_size: int = Field(default=100 * 1024 * 1024, ge=0)
    distribution_lists: bool = True
    avatar_format: ImageFormat = FORMAT_AVATAR
    thumbnail_format: ImageFormat = FORMAT_THUMBNAIL


class ClientInfo(BaseModel):
    """Device and app metadata sent when a remote session starts."""

    model_config = ConfigDict(frozen=True)

    device: str = Field(min_length=1, description="Device model, e.g. 'Pixel 8'")
    os_version: str
    app_version: str
    is_work: bool = False
    push_token: str | None = None
    configuration: ClientConfiguration = Field(default_factory=ClientConfiguration)
    capabilities: ClientCapabilities = Field(default_factory=ClientCapabilities)

    @field_validator("push_token")
    @classmethod
    def validate_push_token(cls, v: str | None) -> str | None:
        # An empty token means "not registered"
        if v is not None and not v.strip():
            return None
        return v
