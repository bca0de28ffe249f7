# app/core/storage.py

import uuid
from supabase import create_client, Client
from fastapi import UploadFile, HTTPException
from loguru import logger

from app.core.config import settings

# Init Client (Graceful Failure)
try:
    supabase: Client | None = (
        create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        if settings.SUPABASE_URL and settings.SUPABASE_KEY else None
    )
except Exception as e:
    logger.warning(f"Supabase init failed: {e}")
    supabase = None

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def max_photo_bytes() -> int:
    return settings.MAX_PHOTO_SIZE_MB * 1024 * 1024


def build_photo_path(user_id: uuid.UUID, content_type: str) -> str:
    """`{user_id}/{uuid}.{ext}`; the client's filename is never used."""
    return f"{user_id}/{uuid.uuid4()}.{ALLOWED_IMAGE_TYPES[content_type]}"


async def upload_student_photo(file: UploadFile, user_id: uuid.UUID) -> str:
    """
    Uploads a registration photo to Supabase Storage.
    - Validates MIME type (JPEG / PNG / WebP).
    - Enforces MAX_PHOTO_SIZE_MB.
    - Returns the public URL.
    """
    # 1. Type Validation
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(400, "Only JPEG, PNG or WebP images are allowed.")

    # 2. Size Validation
    file_content = await file.read()
    if not file_content:
        raise HTTPException(400, "Uploaded file is empty.")

    if len(file_content) > max_photo_bytes():
        raise HTTPException(400, f"File too large. Maximum size is {settings.MAX_PHOTO_SIZE_MB}MB.")

    await file.seek(0)

    if not supabase:
        logger.error("Supabase credentials missing; cannot store photo")
        raise HTTPException(500, "Storage service unavailable.")

    file_path = build_photo_path(user_id, file.content_type)
    bucket = supabase.storage.from_(settings.STORAGE_BUCKET)

    try:
        bucket.upload(
            path=file_path,
            file=file_content,
            file_options={"content-type": file.content_type, "upsert": "true"}
        )
        public_url = bucket.get_public_url(file_path)
    except Exception as e:
        logger.error(f"Storage upload error for {file_path}: {e}")
        raise HTTPException(500, "Failed to upload photo to cloud storage.")

    logger.info(f"Photo stored at {settings.STORAGE_BUCKET}/{file_path}")
    return public_url
