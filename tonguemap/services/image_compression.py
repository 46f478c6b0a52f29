"""
Görsel sıkıştırma (Pillow): en-boy oranı korunarak sınırlı boyuta küçültme ve JPEG'e yeniden kodlama.
Canlı analiz yolunda 1 MB üstü fotoğraflar modele gönderilmeden önce buradan geçer.
"""
import base64
import binascii
import io
import logging
import math
import re

from PIL import Image, UnidentifiedImageError

from tonguemap.core.config import settings
from tonguemap.core.errors import APIError

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_OPTIONS = {"max_width": 1200, "max_height": 1200, "quality": 0.85, "format": "JPEG"}
_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
_MIME_BY_FORMAT = {"JPEG": "image/jpeg", "PNG": "image/png", "WEBP": "image/webp"}


def compress_image(
    data: bytes,
    max_width: int = 1200,
    max_height: int = 1200,
    quality: float = 0.85,
    format: str = "JPEG",
) -> dict:
    """Görseli küçültüp yeniden kodlar. Dönen sözlük: data_url, data, original_size, compressed_size."""
    fmt = format.upper()
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise APIError("Invalid image data", status_code=400) from e

    width, height = img.size
    if width > max_width or height > max_height:
        ratio = min(max_width / width, max_height / height)
        width = max(1, round(width * ratio))
        height = max(1, round(height * ratio))
        img = img.resize((width, height), Image.LANCZOS)

    if fmt == "JPEG":
        # Şeffaf alanlar beyaz zemine boyanır
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[3])
        img = background

    out = io.BytesIO()
    save_kwargs = {"optimize": True}
    if fmt in ("JPEG", "WEBP"):
        save_kwargs["quality"] = int(round(quality * 100))
    img.save(out, fmt, **save_kwargs)
    compressed = out.getvalue()
    mime = _MIME_BY_FORMAT.get(fmt, "image/jpeg")
    return {
        "data_url": f"data:{mime};base64,{base64.b64encode(compressed).decode('ascii')}",
        "data": compressed,
        "original_size": len(data),
        "compressed_size": len(compressed),
    }


def format_file_size(size: int) -> str:
    if size == 0:
        return "0 Bytes"
    i = min(int(math.floor(math.log(size) / math.log(1024))), len(_SIZE_UNITS) - 1)
    value = round(size / (1024**i), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[i]}"


def needs_compression(size: int, max_mb: float = 1) -> bool:
    return size > max_mb * 1024 * 1024


def get_optimal_compression_options(size: int) -> dict:
    """Dosya boyutuna göre: büyük dosyada daha agresif sıkıştırma."""
    size_mb = size / (1024 * 1024)
    if size_mb > 5:
        return {"max_width": 1024, "max_height": 1024, "quality": 0.75, "format": "JPEG"}
    if size_mb > 2:
        return {"max_width": 1200, "max_height": 1200, "quality": 0.8, "format": "JPEG"}
    return {"max_width": 1400, "max_height": 1400, "quality": 0.9, "format": "JPEG"}


def get_connection_compression_options(size: int, connection_type: str | None = None) -> dict:
    """Yavaş bağlantılarda (2g/3g) daha küçük çıktı."""
    if connection_type in ("2g", "slow-2g"):
        return {"max_width": 800, "max_height": 800, "quality": 0.7, "format": "JPEG"}
    if connection_type == "3g":
        return {"max_width": 1024, "max_height": 1024, "quality": 0.8, "format": "JPEG"}
    return get_optimal_compression_options(size)


def validate_image(content_type: str | None, size: int) -> tuple[bool, str | None]:
    if not (content_type or "").startswith("image/"):
        return False, "Please select a valid image file (JPG, PNG, etc.)"
    if size > MAX_UPLOAD_BYTES:
        return False, "Image size should be less than 10MB"
    return True, None


def decode_data_url(url: str) -> bytes:
    """data:image/...;base64, önekini atıp ham baytları döner."""
    payload = DATA_URL_PREFIX.sub("", (url or "").strip(), count=1)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise APIError("Invalid image data", status_code=400) from e


def prepare_image_for_model(data_url: str) -> str:
    """Modele gidecek JPEG data URL'i; boyut sınırı aşılırsa 400, 1 MB üstü sıkıştırılır."""
    raw = decode_data_url(data_url)
    max_bytes = settings.upload_max_mb * 1024 * 1024
    if len(raw) > max_bytes:
        raise APIError(f"Image size should be less than {settings.upload_max_mb}MB", status_code=400)
    if not needs_compression(len(raw)):
        return f"data:image/jpeg;base64,{base64.b64encode(raw).decode('ascii')}"
    result = compress_image(raw, **get_optimal_compression_options(len(raw)))
    logger.info(
        "Image compressed for analysis: %s -> %s",
        format_file_size(result["original_size"]),
        format_file_size(result["compressed_size"]),
    )
    return result["data_url"]
