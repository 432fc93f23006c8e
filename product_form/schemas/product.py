# product_form/schemas/product.py
"""
Declarative validation for a product draft.

`ProductSubmission` holds the rules; `validate_draft()` runs them and turns
pydantic's error list into one human readable message per failing field.
"""
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from product_form.config import settings
from product_form.models.draft import ImageFile, ProductDraft

CATEGORIES: Dict[str, str] = {
    "electronics": "Electronics",
    "clothing": "Clothing",
    "books": "Books",
    "home": "Home & Garden",
}

# one message per field, used for every built-in constraint failure
MESSAGES: Dict[str, str] = {
    "name": "Product name must be at least 3 characters",
    "price": "Price must be a positive number",
    "category": "Please select a category",
    "description": "Description must be at least 10 characters",
    "image": "Max image size is 5MB",
}

# (field, pydantic error type) overrides
TYPE_MESSAGES: Dict[tuple, str] = {
    ("price", "float_parsing"): "Price must be a number",
    ("price", "float_type"): "Price must be a number",
    ("image", "is_instance_of"): "Image must be a file",
}


class FieldError(ValueError):
    """A single failing field and the message to show next to it."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(field={self.field!r}, message={self.message!r})"


class OversizedImageError(FieldError):
    def __init__(self, message: str = MESSAGES["image"]):
        super().__init__("image", message)


class DraftInvalid(Exception):
    """Raised by build_submission when one or more fields fail."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__(", ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = dict(errors)

    def field_errors(self) -> List[FieldError]:
        out: List[FieldError] = []
        for field, message in self.errors.items():
            if field == "image" and message == MESSAGES["image"]:
                out.append(OversizedImageError(message))
            else:
                out.append(FieldError(field, message))
        return out


class ProductSubmission(BaseModel):
    """A validated product record, as handed to the submit sink."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str = Field(..., min_length=3)
    price: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    description: str = Field(..., min_length=10)
    image: Optional[ImageFile] = None

    @field_validator("category")
    @classmethod
    def category_is_known(cls, v: str) -> str:
        if v not in CATEGORIES:
            raise FieldError("category", "Please select a valid category")
        return v

    @field_validator("image")
    @classmethod
    def image_within_limit(cls, v: Optional[ImageFile]) -> Optional[ImageFile]:
        if v is not None and v.size > settings.MAX_IMAGE_BYTES:
            raise OversizedImageError()
        return v

    def summary(self) -> Dict[str, Any]:
        """Loggable/serializable view; the image is described, never dumped."""
        out = self.model_dump(exclude={"image"})
        out["image"] = self.image.describe() if self.image is not None else None
        return out


DraftLike = Union[ProductDraft, Mapping[str, Any]]


def _as_mapping(draft: DraftLike) -> Dict[str, Any]:
    if isinstance(draft, ProductDraft):
        return draft.to_dict()
    return dict(draft or {})


def _message_for(err: Dict[str, Any]) -> tuple:
    loc = err.get("loc") or ()
    field = str(loc[0]) if loc else "__root__"
    raised = (err.get("ctx") or {}).get("error")
    if isinstance(raised, FieldError):
        return raised.field, raised.message
    override = TYPE_MESSAGES.get((field, err.get("type")))
    if override:
        return field, override
    return field, MESSAGES.get(field, err.get("msg") or "Invalid value")


def _collect(exc: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field, message = _message_for(err)
        # first failure per field wins
        errors.setdefault(field, message)
    return errors


def build_submission(draft: DraftLike) -> ProductSubmission:
    """Validate and return the submission, or raise DraftInvalid."""
    try:
        return ProductSubmission.model_validate(_as_mapping(draft))
    except ValidationError as exc:
        raise DraftInvalid(_collect(exc)) from exc


def validate_draft(draft: DraftLike) -> Dict[str, str]:
    """
    Return {} when the draft is submittable, else a mapping of field name to
    message with an entry for every failing field.
    """
    try:
        build_submission(draft)
    except DraftInvalid as exc:
        return exc.errors
    return {}


def validate_field(draft: DraftLike, field: str) -> Optional[str]:
    """Message for a single field, or None when that field passes."""
    return validate_draft(draft).get(field)


FIELDS: List[Dict[str, Any]] = [
    {"id": "name", "label": "Product Name", "type": "text", "required": True,
     "placeholder": "Enter product name"},
    {"id": "price", "label": "Price", "type": "number", "required": True,
     "placeholder": "Enter price"},
    {"id": "category", "label": "Category", "type": "select", "required": True,
     "placeholder": "Select a category",
     "options": [{"value": k, "label": v} for k, v in CATEGORIES.items()]},
    {"id": "description", "label": "Description", "type": "textarea", "required": True,
     "placeholder": "Enter product description", "rows": 4},
    {"id": "image", "label": "Product Image", "type": "file", "required": False,
     "help": "Upload an image of your product (max 5MB)"},
]


def field_definitions() -> List[Dict[str, Any]]:
    defs = [dict(f) for f in FIELDS]
    for d in defs:
        if d["id"] == "image":
            d["accept"] = settings.IMAGE_ACCEPT
            d["max_bytes"] = settings.MAX_IMAGE_BYTES
    return defs
