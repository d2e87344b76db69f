# biling/helper/media_uploader.py
import logging
from typing import List

import cloudinary
import cloudinary.api
import cloudinary.uploader
from fastapi.concurrency import run_in_threadpool

from biling.core.config import settings
from biling.errors import UpstreamError
from biling.helper.image_optimizer import optimize_image

logger = logging.getLogger(__name__)


def cloudinary_enabled() -> bool:
    return bool(
        settings.CLOUDINARY_CLOUD_NAME
        and settings.CLOUDINARY_API_KEY
        and settings.CLOUDINARY_API_SECRET
    )


if cloudinary_enabled():
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET.get_secret_value(),
        secure=True,
    )


def post_folder(post_id: int) -> str:
    return f"posts/{post_id}"


async def upload_many(files, folder: str) -> List[str]:
    """Upload every file under ``folder`` and return their URLs in upload order."""
    if not cloudinary_enabled():
        raise UpstreamError("Image storage is not configured", reason="storage_not_configured")

    max_side = settings.IMAGE_MAX_SIZE
    urls = []
    for index, file in enumerate(files, start=1):
        optimized = await optimize_image(file, max_size=(max_side, max_side), quality=settings.IMAGE_QUALITY)
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload, optimized, folder=folder, resource_type="image")
        except Exception as e:
            logger.exception("Cloudinary upload failed folder=%s file=%d/%d", folder, index, len(files))
            raise UpstreamError(f"Failed to upload image: {str(e)[:200]}") from e

        url = result.get("secure_url")
        if not url:
            raise UpstreamError("Image storage did not return a URL")
        urls.append(url)

    logger.info("Uploaded %d image(s) to %s", len(urls), folder)
    return urls


def delete_folder(folder: str) -> bool:
    """Remove whatever was uploaded under ``folder``. Returns False if that failed."""
    try:
        cloudinary.api.delete_resources_by_prefix(f"{folder}/")
    except Exception:
        logger.exception("Could not clean up uploaded images under %s", folder)
        return False
    return True
