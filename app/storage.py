# app/storage.py
"""Listing photo storage.

Images go to Cloudinary when credentials are configured and to the local
upload directory otherwise. Callers only ever keep the returned reference.
"""
import os
import secrets
from typing import Tuple

import cloudinary
import cloudinary.uploader

from . import config
from .errors import InternalError, ValidationError
from .utils import logger

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
_EXT_BY_CONTENT_TYPE = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


def cloudinary_enabled() -> bool:
    return bool(
        config.CLOUDINARY_URL
        or (config.CLOUDINARY_CLOUD_NAME and config.CLOUDINARY_API_KEY and config.CLOUDINARY_API_SECRET)
    )


def _image_extension(filename: str, content_type: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext in ALLOWED_EXTENSIONS:
        return ext
    ext = _EXT_BY_CONTENT_TYPE.get((content_type or "").lower())
    if ext:
        return ext
    raise ValidationError("Only jpg, jpeg, png or webp images are allowed")


def _upload_to_cloudinary(raw: bytes, filename: str) -> Tuple[str, str]:
    if not config.CLOUDINARY_URL:
        cloudinary.config(
            cloud_name=config.CLOUDINARY_CLOUD_NAME,
            api_key=config.CLOUDINARY_API_KEY,
            api_secret=config.CLOUDINARY_API_SECRET,
            secure=True,
        )
    try:
        res = cloudinary.uploader.upload(
            raw,
            folder=config.CLOUDINARY_FOLDER,
            resource_type="image",
            transformation=[{"width": 1200, "crop": "limit"}],
        )
    except Exception as e:
        logger.exception("Cloudinary upload failed filename=%r", filename)
        raise InternalError(f"Image upload failed: {str(e)[:200]}")
    return res["secure_url"], res["public_id"]


def _save_locally(raw: bytes, ext: str) -> Tuple[str, str]:
    os.makedirs(config.UPLOAD_DIR, exist_ok=True)
    name = f"{secrets.token_hex(12)}{ext}"
    try:
        with open(os.path.join(config.UPLOAD_DIR, name), "wb") as fh:
            fh.write(raw)
    except OSError as e:
        logger.exception("Failed writing upload %s", name)
        raise InternalError("Failed to save upload") from e
    return f"/uploads/{name}", ""


def save_image(raw: bytes, filename: str = "", content_type: str = "") -> Tuple[str, str]:
    """Store an uploaded image and return `(url_or_path, public_id)`."""
    if not raw:
        raise ValidationError("Empty upload")
    if len(raw) > config.MAX_UPLOAD_BYTES:
        raise ValidationError("Image is too large")
    ext = _image_extension(filename, content_type)
    if cloudinary_enabled():
        ref = _upload_to_cloudinary(raw, filename)
    else:
        ref = _save_locally(raw, ext)
    logger.info("Stored image %r as %s", filename, ref[0])
    return ref
