from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional, Union


class DraftUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    # raw form input; "" or text is kept and reported at submit time
    price: Optional[Union[float, str]] = None
    category: Optional[str] = None
    description: Optional[str] = None


class ImageOut(BaseModel):
    filename: str
    content_type: Optional[str]
    size: int


class PreviewOut(BaseModel):
    filename: str
    content_type: str
    data_url: str
    width: Optional[int] = None
    height: Optional[int] = None


class NotificationOut(BaseModel):
    kind: str
    message: str


class FormStateOut(BaseModel):
    values: Dict[str, Any]
    image: Optional[ImageOut]
    errors: Dict[str, str]
    is_submitting: bool
    preview: Optional[PreviewOut]
    notifications: List[NotificationOut]


class ImageSelectedOut(BaseModel):
    ok: bool
    image: ImageOut
    preview: Optional[PreviewOut]


class SubmitOut(BaseModel):
    ok: bool
    status: str
    message: Optional[str] = None
    result: Any = None


class FieldsOut(BaseModel):
    fields: List[Dict[str, Any]]
    categories: Dict[str, str]
