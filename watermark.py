# watermark.py - burns the "re-print only" notice into the uploaded card photo
import io
import logging
import datetime
from typing import List, Optional
from PIL import Image, ImageDraw, ImageFont, ImageOps, UnidentifiedImageError
from config import LOCAL_TZ, WATERMARK_FONT_PATH, WATERMARK_SITE

logger = logging.getLogger("reprint-watermark")

TEXT_COLOR = (255, 0, 0, 102)  # red, 40% opacity
ANGLE = 20  # degrees counter-clockwise
JPEG_QUALITY = 90
# tlwg fonts carry Thai glyphs; the rest only render the Latin and digit parts
FALLBACK_FONTS = ["Garuda-Bold.ttf", "Loma-Bold.ttf", "tahomabd.ttf", "DejaVuSans-Bold.ttf", "arialbd.ttf"]


class InvalidImageError(ValueError):
    pass


def thai_date(now: datetime.datetime) -> str:
    """d/m/yyyy in the Buddhist era, e.g. 19/10/2569."""
    local = now.astimezone(LOCAL_TZ) if now.tzinfo else now
    return f"{local.day}/{local.month}/{local.year + 543}"


def watermark_lines(now: datetime.datetime, site: str = WATERMARK_SITE) -> List[str]:
    return [
        "ใช้สำหรับ RE-PRINT บัตรจอดรถ",
        f"ที่{site} เท่านั้น",
        f"วันที่ {thai_date(now)}",
    ]


def _load_font(size: int, font_path: Optional[str]):
    candidates = ([font_path] if font_path else []) + FALLBACK_FONTS
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    logger.warning("No TrueType font found (tried %s); using Pillow default font", candidates)
    return ImageFont.load_default(size=size)


def apply_watermark(image_bytes: bytes, now=None, site: str = WATERMARK_SITE,
                    font_path: Optional[str] = WATERMARK_FONT_PATH) -> bytes:
    """Overlay the three notice lines, centred and tilted, and return JPEG bytes.

    The output keeps the input's pixel dimensions (after EXIF orientation).
    Raises InvalidImageError if Pillow cannot read the input.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)
    try:
        image = Image.open(io.BytesIO(image_bytes))
        image = ImageOps.exif_transpose(image)
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise InvalidImageError(f"Unreadable image: {e}") from e

    image = image.convert("RGBA")
    width, height = image.size
    font_size = max(12, width // 20)
    font = _load_font(font_size, font_path)

    overlay = Image.new("RGBA", image.size, (255, 255, 255, 0))
    draw = ImageDraw.Draw(overlay)
    # the browser preview spaces lines 30px at ~27px type
    line_gap = round(font_size * 1.1)
    lines = watermark_lines(now, site)
    cx, cy = width / 2, height / 2
    for i, line in enumerate(lines):
        left, top, right, bottom = draw.textbbox((0, 0), line, font=font)
        x = cx - (right - left) / 2 - left
        y = cy + (i - 1) * line_gap - (bottom - top) / 2 - top
        draw.text((x, y), line, fill=TEXT_COLOR, font=font)

    overlay = overlay.rotate(ANGLE, resample=Image.Resampling.BICUBIC, center=(cx, cy))
    result = Image.alpha_composite(image, overlay).convert("RGB")

    out = io.BytesIO()
    result.save(out, format="JPEG", quality=JPEG_QUALITY)
    return out.getvalue()
