from typing import Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"]


def sniff_content_type(data: Optional[bytes]) -> str:
    """Guess an image MIME type from the leading magic bytes."""
    if not data:
        return DEFAULT_CONTENT_TYPE
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"GIF87a") or data.startswith(b"GIF89a"):
        return "image/gif"
    # RIFF....WEBP
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return DEFAULT_CONTENT_TYPE


def resolve_content_type(stored: Optional[str], data: Optional[bytes]) -> str:
    """Use the stored content type when present, else sniff it."""
    if stored and stored.strip():
        return stored.strip()
    return sniff_content_type(data)
