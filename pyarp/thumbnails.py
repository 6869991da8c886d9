# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Bitmap sizing and release helpers for thumbnails and avatars."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from .protocol import ImageFormat
    from .services import Bitmap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Size:
    width: int
    height: int


def resize_proportionally(width: int, height: int, max_px: int) -> Size:
    """
    Bound (width, height) by max_px on the longer side, keeping the ratio.

    Images that already fit are returned unchanged; no side shrinks below 1.
    """
    if width <= max_px and height <= max_px:
        return Size(width, height)
    if width >= height:
        return Size(max_px, max(1, height * max_px // width))
    return Size(max(1, width * max_px // height), max_px)


@contextmanager
def released(*bitmaps: Bitmap | None) -> Iterator[None]:
    """
    Recycle the given bitmaps when the block exits, however it exits.

    Bitmaps registered later can be recycled by nesting another block.
    """
    try:
        yield
    finally:
        for bitmap in bitmaps:
            if bitmap is not None:
                bitmap.recycle()


def bitmap_to_bytes(bitmap: Bitmap, image_format: ImageFormat, quality: int, max_px: int | None = None) -> bytes:
    """
    Encode a bitmap, optionally downscaled to max_px first.

    The caller keeps ownership of ``bitmap``; a downscaled copy made here is
    released before returning.
    """
    if max_px is None:
        return bitmap.compress(image_format, quality)
    scaled = bitmap.resize(max_px)
    if scaled is bitmap:
        return bitmap.compress(image_format, quality)
    with released(scaled):
        logger.debug("Downscaled %dx%d bitmap to %dx%d", bitmap.width, bitmap.height, scaled.width, scaled.height)
        return scaled.compress(image_format, quality)
