"""Image preparation for canvas uploads: size checks, downsampling and JPEG re-encoding."""

import base64
import io
import logging
from dataclasses import dataclass
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

import config
from errors import ImageDecodeError, ImageTooSmallError

logger = logging.getLogger(__name__)

# Print artwork exceeds Pillow's default decompression-bomb limit
Image.MAX_IMAGE_PIXELS = config.MAX_IMAGE_PIXELS


@dataclass
class PreparedImage:
    content: bytes      # JPEG bytes
    filename: str       # original name with a .jpg extension
    width: int
    height: int
    original_filename: str = ""

    @property
    def preview(self) -> str:
        return build_preview(self.content)


def target_dimensions(
    width: int,
    height: int,
    target: int = config.TARGET_IMAGE_SIZE,
    minimum: int = config.MIN_IMAGE_SIZE,
) -> Tuple[int, int]:
    """Output dimensions for a source image.

    Raises ImageTooSmallError when either side is under ``minimum``. Images
    with both sides under ``target`` keep their size; anything else is scaled
    so the longer side equals ``target`` and the shorter side keeps the ratio.
    """
    if width < minimum or height < minimum:
        raise ImageTooSmallError(width, height, minimum)

    if width < target and height < target:
        return width, height

    if width > height:
        return target, round(height * target / width)
    if height > width:
        return round(width * target / height), target
    return target, target


def _open(image_bytes: bytes, filename: str = "") -> Image.Image:
    try:
        return Image.open(io.BytesIO(image_bytes))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.warning("Cannot decode image %s: %s", filename or "<upload>", e)
        raise ImageDecodeError(filename) from e


def _replace(old: Image.Image, new: Image.Image, source: Image.Image) -> Image.Image:
    if old is not source:
        old.close()
    return new


def jpeg_filename(filename: str) -> str:
    stem = filename.rsplit(".", 1)[0] if "." in filename else filename
    return f"{stem or 'image'}.jpg"


def prepare_image(
    image_bytes: bytes,
    filename: str,
    target: int = config.TARGET_IMAGE_SIZE,
    minimum: int = config.MIN_IMAGE_SIZE,
    quality: int = config.JPEG_QUALITY,
) -> PreparedImage:
    """Validate, downsample and re-encode an image as JPEG.

    The decoded image (and any intermediate copy) is closed before returning,
    whether encoding succeeded or not.
    """
    with _open(image_bytes, filename) as img:
        working = img
        try:
            # EXIF orientation is applied here; the re-encoded JPEG carries no EXIF
            working = ImageOps.exif_transpose(img) or img
            src_w, src_h = working.size
            width, height = target_dimensions(src_w, src_h, target=target, minimum=minimum)

            if working.mode != "RGB":
                working = _replace(working, working.convert("RGB"), img)
            if (width, height) != (src_w, src_h):
                working = _replace(working, working.resize((width, height), Image.LANCZOS), img)

            buf = io.BytesIO()
            working.save(buf, format="JPEG", quality=quality, optimize=True)
        except OSError as e:
            raise ImageDecodeError(filename) from e
        finally:
            if working is not img:
                working.close()

    logger.info(
        "Prepared %s: %dx%d -> %dx%d (%d bytes)",
        filename, src_w, src_h, width, height, buf.tell(),
    )
    return PreparedImage(
        content=buf.getvalue(),
        filename=jpeg_filename(filename),
        width=width,
        height=height,
        original_filename=filename,
    )


def build_preview(jpeg_bytes: bytes) -> str:
    """Data URL suitable for an <img src=...> preview."""
    return "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode("utf-8")


def to_upload_payload(image: PreparedImage) -> dict:
    """Body for Printify's image upload endpoint."""
    return {
        "file_name": image.filename,
        "contents": base64.b64encode(image.content).decode("utf-8"),
    }


def sample_color(image_bytes: bytes, x: int, y: int) -> str:
    """Hex colour (#rrggbb) of the pixel at (x, y), clamped to the image bounds."""
    with _open(image_bytes) as img:
        w, h = img.size
        px = min(max(int(x), 0), w - 1)
        py = min(max(int(y), 0), h - 1)
        with img.convert("RGB") as rgb:
            r, g, b = rgb.getpixel((px, py))
    return f"#{r:02x}{g:02x}{b:02x}"
