import os
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict

from product_form.config import settings
from product_form.schemas.product import ProductSubmission

logger = logging.getLogger(__name__)

SubmitSink = Callable[[ProductSubmission], Awaitable[Any]]


class SubmissionError(Exception):
    pass


class SimulatedSink:
    """
    Stand-in for a product API: waits SUBMIT_DELAY_SECONDS, logs the values
    and always succeeds.
    Returns: {"ok": True, "submission_id": str}
    """

    def __init__(self):
        self.calls = 0

    async def __call__(self, submission: ProductSubmission) -> Dict[str, Any]:
        self.calls += 1
        await asyncio.sleep(max(settings.SUBMIT_DELAY_SECONDS, 0))
        logger.info("Product submitted: %s", submission.summary())
        return {"ok": True, "submission_id": f"sub_{os.urandom(6).hex()}"}


async def send_to_sink(sink: SubmitSink, submission: ProductSubmission) -> Any:
    """
    Call `sink` with a timeout. Any failure (exception or timeout) comes back
    as SubmissionError so callers only have one thing to handle.
    """
    try:
        return await asyncio.wait_for(sink(submission), timeout=settings.SUBMIT_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as e:
        raise SubmissionError("Submission timed out, please try again") from e
    except SubmissionError:
        raise
    except Exception as e:
        logger.exception("Submit sink failed")
        raise SubmissionError(f"Submission failed: {e}") from e
