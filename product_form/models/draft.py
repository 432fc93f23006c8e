# product_form/models/draft.py
from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Optional, Dict, Any


class ImageFile:
    """
    A locally selected file. Holds the bytes in memory; subclasses may read
    them from elsewhere by overriding `read()`.
    """

    def __init__(self, filename: str, data: bytes = b"", content_type: Optional[str] = None,
                 size: Optional[int] = None):
        self.filename = filename or "upload"
        self.content_type = content_type or None
        self._data = data or b""
        self.size = int(size) if size is not None else len(self._data)

    async def read(self) -> bytes:
        return self._data

    def describe(self) -> Dict[str, Any]:
        return {"filename": self.filename, "content_type": self.content_type, "size": self.size}

    def __repr__(self) -> str:
        return f"ImageFile(filename={self.filename!r}, size={self.size})"


@dataclass
class ProductDraft:
    """
    The in-progress product record. Starts empty, is edited field by field
    and is cleared in place after a successful submission.
    """
    name: Any = ""
    price: Any = 0
    category: Any = ""
    description: Any = ""
    image: Optional[ImageFile] = None

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "ProductDraft":
        draft = cls()
        for key, value in (d or {}).items():
            draft.set(key, value)
        return draft

    def set(self, name: str, value: Any) -> None:
        if name not in self.field_names():
            raise KeyError(f"Unknown field: {name}")
        setattr(self, name, value)

    def clear(self) -> None:
        empty = ProductDraft()
        for name in self.field_names():
            setattr(self, name, getattr(empty, name))

    def is_empty(self) -> bool:
        return self == ProductDraft()

    def to_dict(self) -> Dict[str, Any]:
        # keep the ImageFile reference itself; callers decide how to render it
        return {name: getattr(self, name) for name in self.field_names()}
