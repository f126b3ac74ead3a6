import io
import logging
import os
from datetime import datetime, timezone
from functools import lru_cache

import boto3
from PIL import Image

from app import config

logger = logging.getLogger(__name__)

FOLDER = "items"
EXTERNAL_PREFIXES = ("http://", "https://", "data:")


@lru_cache(maxsize=1)
def get_s3_client():
    return boto3.client(
        service_name="s3",
        endpoint_url=f"https://{config.CLOUDFLARE_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=config.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
        region_name="auto",
    )


def is_stored_key(ref: str) -> bool:
    """Item images are either keys in our bucket or external URLs."""
    return bool(ref) and not ref.startswith(EXTERNAL_PREFIXES)


def compress_image(data: bytes, max_width=1400, quality=80):
    img = Image.open(io.BytesIO(data))
    img = img.convert("RGB")

    # Resize while keeping aspect ratio
    w, h = img.size
    if w > max_width:
        new_height = int(h * (max_width / w))
        img = img.resize((max_width, new_height), Image.LANCZOS)

    buffer = io.BytesIO()

    try:
        img.save(buffer, format="WEBP", quality=quality, method=6)
        ext = "webp"
    except (OSError, KeyError) as e:
        logger.warning("WebP encoding failed, falling back to JPEG: %s", e)

        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality, optimize=True)
        ext = "jpg"

    buffer.seek(0)
    return buffer, ext


def upload_to_s3(buffer: io.BytesIO, ext: str, original_name: str):
    base = os.path.splitext(os.path.basename(original_name or "image"))[0]

    ts = int(datetime.now(timezone.utc).timestamp())
    key = f"{FOLDER}/{base}-{ts}.{ext}"

    get_s3_client().upload_fileobj(buffer, config.R2_BUCKET, key)

    return key


def generate_signed_url(ref: str, expires_in=3600):
    if not is_stored_key(ref):
        return ref

    try:
        return get_s3_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": config.R2_BUCKET, "Key": ref},
            ExpiresIn=expires_in,
        )
    except Exception:
        logger.exception("Error generating signed URL for %s", ref)
        return None


def delete_s3_object(ref: str):
    if not is_stored_key(ref):
        return

    try:
        get_s3_client().delete_object(Bucket=config.R2_BUCKET, Key=ref)
    except Exception:
        logger.exception("Error deleting S3 object %s", ref)


def get_image_urls(refs: list) -> list:
    return [generate_signed_url(ref) for ref in refs or []]
