import os
import io
import base64
import mimetypes
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple
from PIL import Image

# image extensions we can name a mime type for without decoding
ALLOWED_EXT = {".jpg", ".jpeg", ".png", ".webp", ".gif"}

FALLBACK_MIME = "application/octet-stream"


@dataclass
class ImagePreview:
    filename: str
    content_type: str
    data_url: str
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _safe_ext(filename: str) -> str:
    _, ext = os.path.splitext(filename or "")
    return ext.lower()


def _probe(contents: bytes) -> Tuple[Optional[str], Optional[int], Optional[int]]:
    """Return (mime, width, height) if Pillow can identify the bytes."""
    try:
        with Image.open(io.BytesIO(contents)) as im:
            return im.get_format_mimetype(), im.width, im.height
    except Exception:
        # unreadable, truncated or decompression-bomb sized: no dimensions
        return None, None, None


def guess_content_type(filename: str, contents: bytes, declared: Optional[str] = None) -> str:
    """
    Declared type wins; otherwise ask Pillow, then the file extension.
    """
    if declared:
        return declared
    mime, _, _ = _probe(contents)
    if mime:
        return mime
    ext = _safe_ext(filename)
    if ext in ALLOWED_EXT:
        return mimetypes.types_map.get(ext, "image/jpeg")
    return FALLBACK_MIME


def to_data_url(contents: bytes, content_type: str) -> str:
    payload = base64.b64encode(contents).decode("ascii")
    return f"data:{content_type};base64,{payload}"


def build_preview(filename: str, contents: bytes, content_type: Optional[str] = None) -> ImagePreview:
    """
    Turn raw file bytes into a displayable preview (a data: URL, like a browser's
    FileReader.readAsDataURL). Non-image files still get a preview; width/height
    are only filled in when Pillow can decode the bytes.
    """
    mime, width, height = _probe(contents)
    ctype = content_type or mime or guess_content_type(filename, contents)
    return ImagePreview(
        filename=filename,
        content_type=ctype,
        data_url=to_data_url(contents, ctype),
        width=width,
        height=height,
    )
