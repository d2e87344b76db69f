from PIL import Image, UnidentifiedImageError
import io
import subprocess
import tempfile
import os

from fastapi.concurrency import run_in_threadpool

from biling.errors import InvalidValueError


async def optimize_image(file, max_size=(1024, 1024), quality=85):
    """
    Optimizes an uploaded post image by resizing, converting to JPEG, and compressing it.
    HEIC photos from phones are converted with the `heif-convert` command-line tool first.

    :param file: An UploadFile (or anything with an async ``read``) holding the image data.
    :param max_size: Maximum width and height of the stored image.
    :param quality: JPEG quality of the compressed image (1-95).
    :return: A BytesIO holding the optimized JPEG.
    :raises InvalidValueError: when the payload is not a readable image.
    """

    img_data = await file.read()
    if not img_data:
        raise InvalidValueError("Uploaded image is empty", reason="invalid_image")

    # heif-convert and Pillow block, so keep them off the event loop
    return await run_in_threadpool(
        _optimize_bytes, img_data, getattr(file, "filename", ""), max_size, quality)


def _optimize_bytes(img_data, filename, max_size, quality):
    with tempfile.NamedTemporaryFile(delete=False) as temp_in:
        temp_in.write(img_data)
        temp_in_path = temp_in.name

    with tempfile.NamedTemporaryFile(suffix=".jpg", delete=False) as temp_out:
        temp_out_path = temp_out.name

    try:
        # heif-convert only succeeds for HEIC/HEIF; anything else falls back to Pillow
        subprocess.run(['heif-convert', temp_in_path, temp_out_path], check=True, capture_output=True)
        image = Image.open(temp_out_path)
        image.load()
    except (subprocess.CalledProcessError, FileNotFoundError, UnidentifiedImageError):
        try:
            image = Image.open(io.BytesIO(img_data))
            image.load()
        except (UnidentifiedImageError, OSError):
            raise InvalidValueError(
                f"Cannot identify image file {filename!r}",
                reason="invalid_image",
            )
    finally:
        os.unlink(temp_in_path)
        if os.path.exists(temp_out_path):
            os.unlink(temp_out_path)

    image.thumbnail(max_size)

    # JPEG has no alpha channel
    if image.mode in ("RGBA", "P", "LA"):
        image = image.convert("RGB")

    optimized = io.BytesIO()
    image.save(optimized, format='JPEG', quality=quality)
    optimized.seek(0)

    return optimized
