# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Media type predicates and file name fix-ups."""

from __future__ import annotations

import mimetypes

# Built-in table only: the host's mime.types files must not change the output
_mime_types = mimetypes.MimeTypes()

MIME_GIF = "image/gif"
MIME_SVG = "image/svg+xml"


def _base(mime_type: str | None) -> str:
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def is_image(mime_type: str | None) -> bool:
    return _base(mime_type).startswith("image/")


def is_gif(mime_type: str | None) -> bool:
    return _base(mime_type) == MIME_GIF


def is_svg(mime_type: str | None) -> bool:
    return _base(mime_type) == MIME_SVG


def is_supported_image(mime_type: str | None) -> bool:
    """Images the remote client can render inline (anything but vector images)."""
    return is_image(mime_type) and not is_svg(mime_type)


def is_audio(mime_type: str | None) -> bool:
    return _base(mime_type).startswith("audio/")


def is_video(mime_type: str | None) -> bool:
    return _base(mime_type).startswith("video/")


def extension_for(mime_type: str | None) -> str | None:
    """
    File extension (without dot) for a media type, or None if unknown.

    ``image/jpeg`` always yields ``jpg``.
    """
    base = _base(mime_type)
    if not base:
        return None
    extension = _mime_types.guess_extension(base, strict=False)
    if extension is None:
        return None
    extension = extension.lstrip(".")
    if extension in ("jpeg", "jpe"):
        return "jpg"
    return extension


def fix_file_name(file_name: str, mime_type: str | None) -> str:
    """Append an extension derived from the media type to names without one."""
    if mime_type is None or "." in file_name:
        return file_name
    extension = extension_for(mime_type)
    if extension is None:
        return file_name
    return f"{file_name}.{extension}"
