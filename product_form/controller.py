# product_form/controller.py
"""
The form controller: owns the draft, the inline errors, the image preview and
the idle/in-flight submission state. Everything runs on one event loop; the
controller is the only thing that mutates its state.

Usage:
    form = FormController()
    form.set_field("name", "Desk Lamp")
    await form.select_image(ImageFile("lamp.jpg", data))
    outcome = await form.submit()
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from product_form.config import settings
from product_form.core.state_machine import IDLE, IN_FLIGHT, StateMachine
from product_form.models.draft import ImageFile, ProductDraft
from product_form.schemas.product import DraftInvalid, build_submission, validate_field
from product_form.services.image_handler import ImageHandler
from product_form.services.notifications import Notifier
from product_form.services.submission import SimulatedSink, SubmissionError, SubmitSink, send_to_sink
from product_form.utils.images import ImagePreview

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Product submitted successfully!"

SUBMITTED = "submitted"
INVALID = "invalid"
BUSY = "busy"
FAILED = "failed"


@dataclass
class SubmitOutcome:
    status: str
    errors: Dict[str, str] = field(default_factory=dict)
    result: Any = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SUBMITTED


# --- commands -------------------------------------------------------------

@dataclass
class SetField:
    name: str
    value: Any


@dataclass
class SelectImage:
    blob: ImageFile


@dataclass
class ClearImage:
    pass


@dataclass
class Submit:
    pass


@dataclass
class Reset:
    pass


class FormController:
    def __init__(self, sink: Optional[SubmitSink] = None, notifier: Optional[Notifier] = None):
        self.draft = ProductDraft()
        self.errors: Dict[str, str] = {}
        self.sink: SubmitSink = sink or SimulatedSink()
        self.notifier = notifier or Notifier()
        self.images = ImageHandler(self.draft)
        self.state = StateMachine(IDLE, history_limit=settings.STATE_HISTORY_LIMIT)
        # after the first submit attempt, edits re-validate the edited field
        self.submit_attempted = False

    @property
    def is_submitting(self) -> bool:
        return self.state.state == IN_FLIGHT

    @property
    def image_preview(self) -> Optional[ImagePreview]:
        return self.images.preview

    # --- field edits --------------------------------------------------

    def _revalidate(self, name: str) -> None:
        if not self.submit_attempted:
            return
        message = validate_field(self.draft, name)
        if message:
            self.errors[name] = message
        else:
            self.errors.pop(name, None)

    def set_field(self, name: str, value: Any) -> None:
        """Raises KeyError for names that are not draft fields."""
        if name == "image":
            raise KeyError("Use select_image/clear_image for the image field")
        self.draft.set(name, value)
        self._revalidate(name)

    def update(self, **values: Any) -> None:
        for name, value in values.items():
            self.set_field(name, value)

    async def select_image(self, blob: ImageFile) -> Optional[ImagePreview]:
        # size is only checked on submit, selecting never adds an error
        return await self.images.select_image(blob)

    def clear_image(self) -> None:
        self.images.clear_image()
        self.errors.pop("image", None)

    # --- submission ---------------------------------------------------

    def reset(self) -> bool:
        """Empty the form. Ignored (returns False) while a submission is in flight."""
        if self.is_submitting:
            return False
        self._clear()
        return True

    def _clear(self) -> None:
        self.images.clear_image()
        self.draft.clear()
        self.errors = {}
        self.submit_attempted = False

    async def submit(self) -> SubmitOutcome:
        if self.is_submitting:
            logger.debug("Submit ignored: a submission is already in flight")
            return SubmitOutcome(status=BUSY, message="A submission is already in progress")

        self.submit_attempted = True
        try:
            submission = build_submission(self.draft)
        except DraftInvalid as e:
            self.errors = dict(e.errors)
            logger.info("Submit rejected, invalid fields: %s", sorted(self.errors))
            return SubmitOutcome(status=INVALID, errors=dict(self.errors))

        self.errors = {}
        self.state.apply(IN_FLIGHT, meta={"name": submission.name})
        try:
            result = await send_to_sink(self.sink, submission)
        except SubmissionError as e:
            self.state.apply(IDLE, meta={"outcome": FAILED})
            self.notifier.error(str(e))
            # keep what the user typed so they can retry
            return SubmitOutcome(status=FAILED, message=str(e))
        except BaseException:
            # cancelled mid-flight: never leave the form stuck in flight
            self.state.apply(IDLE, meta={"outcome": "cancelled"})
            raise

        self.state.apply(IDLE, meta={"outcome": SUBMITTED})
        self.notifier.success(SUCCESS_MESSAGE)
        self._clear()
        return SubmitOutcome(status=SUBMITTED, result=result, message=SUCCESS_MESSAGE)

    # --- command dispatch ---------------------------------------------

    async def handle(self, command: Any) -> Any:
        if isinstance(command, SetField):
            return self.set_field(command.name, command.value)
        if isinstance(command, SelectImage):
            return await self.select_image(command.blob)
        if isinstance(command, ClearImage):
            return self.clear_image()
        if isinstance(command, Submit):
            return await self.submit()
        if isinstance(command, Reset):
            return self.reset()
        raise TypeError(f"Unknown command: {command!r}")

    async def close(self) -> None:
        await self.images.close()

    def snapshot(self) -> Dict[str, Any]:
        values = self.draft.to_dict()
        image = values.pop("image")
        return {
            "values": values,
            "image": image.describe() if image is not None else None,
            "errors": dict(self.errors),
            "is_submitting": self.is_submitting,
            "preview": self.image_preview.to_dict() if self.image_preview else None,
            "notifications": [n.to_dict() for n in self.notifier.active()],
        }
