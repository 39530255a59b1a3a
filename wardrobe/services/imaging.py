"""
Wardrobe Imaging Utilities
Handles upload validation, decoding to RGBA and downscaling.
"""
import io
from typing import Optional

import cv2
import numpy as np
from fastapi import HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError

from wardrobe.config import config
from wardrobe.services.colors.errors import ImageUnreadableError


def _max_bytes() -> int:
    return config.MAX_FILE_MB * 1024 * 1024


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate uploaded file metadata before reading it.

    Args:
        file: FastAPI UploadFile object

    Raises:
        HTTPException: 413 for oversized files, 415 for unsupported formats
    """
    # file.size is None for some clients; read_image checks again after reading
    if getattr(file, "size", None) and file.size > _max_bytes():
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    if file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    if file.filename:
        ext = file.filename.lower().rsplit('.', 1)[-1] if '.' in file.filename else ''
        if f".{ext}" not in config.SUPPORTED_EXTENSIONS:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file extension. Supported: {', '.join(sorted(config.SUPPORTED_EXTENSIONS))}"
            )


def validate_magic_bytes(file_bytes: bytes) -> str:
    """
    Check the file signature against the supported image formats.

    Returns:
        Detected MIME type

    Raises:
        ImageUnreadableError: If the bytes are not a JPEG, PNG or WebP image
    """
    if len(file_bytes) < 12:
        raise ImageUnreadableError("File too small or corrupt")

    if file_bytes.startswith(b'\xff\xd8\xff'):
        return "image/jpeg"
    if file_bytes.startswith(b'\x89PNG\r\n\x1a\n'):
        return "image/png"
    if file_bytes[:4] == b'RIFF' and file_bytes[8:12] == b'WEBP':
        return "image/webp"

    raise ImageUnreadableError("Invalid image file. Magic bytes don't match supported formats.")


def decode_image_bytes(file_bytes: bytes) -> np.ndarray:
    """
    Decode image bytes into an (H, W, 4) uint8 RGBA array.

    Images without an alpha channel come back fully opaque.

    Raises:
        ImageUnreadableError: If the bytes cannot be decoded
    """
    validate_magic_bytes(file_bytes)

    try:
        pil_image = Image.open(io.BytesIO(file_bytes))
        pil_image.load()
        if pil_image.mode != 'RGBA':
            pil_image = pil_image.convert('RGBA')
        rgba = np.array(pil_image, dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise ImageUnreadableError(f"Failed to decode image: {e}") from e

    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise ImageUnreadableError(f"Unexpected decoded shape {rgba.shape}")

    return rgba


async def read_image(file: UploadFile) -> np.ndarray:
    """
    Read an upload and decode it to RGBA.

    Raises:
        HTTPException: 413 if the body exceeds the size limit
        ImageUnreadableError: If the bytes are not a decodable image
    """
    file_bytes = await file.read()

    if len(file_bytes) > _max_bytes():
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    return decode_image_bytes(file_bytes)


def resize_long_edge(rgba: np.ndarray, max_edge: Optional[int] = None) -> np.ndarray:
    """
    Downscale so the longest edge is at most max_edge pixels.

    Nearest-neighbour sampling keeps every output pixel an exact input color,
    so bucket counts shrink proportionally without inventing blended colors.

    Args:
        rgba: Input image (H, W, 4)
        max_edge: Maximum edge size (default from config)

    Returns:
        The input unchanged when already small enough, else a resized copy
    """
    if max_edge is None:
        max_edge = config.MAX_EDGE

    height, width = rgba.shape[:2]
    current_max = max(height, width)

    if current_max <= max_edge:
        return rgba

    scale = max_edge / current_max
    new_width = max(1, int(width * scale))
    new_height = max(1, int(height * scale))

    return cv2.resize(rgba, (new_width, new_height), interpolation=cv2.INTER_NEAREST)
