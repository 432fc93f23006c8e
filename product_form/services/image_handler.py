import asyncio
import logging
from typing import Optional, Set

from product_form.config import settings
from product_form.models.draft import ImageFile, ProductDraft
from product_form.utils.images import ImagePreview, build_preview

logger = logging.getLogger(__name__)


class ImageHandler:
    """
    Keeps the draft's image field and its preview in step.

    Every selection or clear bumps `generation`; a read that finishes for an
    older generation is dropped, so the most recently selected file always
    ends up previewed no matter how the reads interleave.
    """

    def __init__(self, draft: ProductDraft):
        self.draft = draft
        self.preview: Optional[ImagePreview] = None
        self.generation = 0
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending_reads(self) -> int:
        return len(self._pending)

    async def _read(self, blob: ImageFile) -> ImagePreview:
        contents = await blob.read()
        return build_preview(blob.filename, contents, blob.content_type)

    async def select_image(self, blob: ImageFile) -> Optional[ImagePreview]:
        """
        Store `blob` on the draft and derive its preview once the bytes are read.
        Returns the preview if it was applied, None if a later selection or a
        clear superseded this one (or the read failed).
        """
        self.generation += 1
        token = self.generation
        self.draft.image = blob

        task = asyncio.ensure_future(
            asyncio.wait_for(self._read(blob), timeout=settings.IMAGE_READ_TIMEOUT_SECONDS)
        )
        self._pending.add(task)
        preview: Optional[ImagePreview] = None
        try:
            preview = await task
        except asyncio.TimeoutError:
            logger.warning("Timed out reading image %s", blob.filename)
        except OSError as e:
            logger.warning("Could not read image %s: %s", blob.filename, e)
        finally:
            self._pending.discard(task)

        if token != self.generation:
            logger.debug("Discarding stale preview for %s (generation %s < %s)",
                         blob.filename, token, self.generation)
            return None
        # a failed read still replaces the previous file's preview
        self.preview = preview
        return preview

    def clear_image(self) -> None:
        """Remove image and preview. Safe to call repeatedly."""
        if self.draft.image is not None or self.preview is not None:
            self.generation += 1
        self.draft.image = None
        self.preview = None

    async def close(self) -> None:
        """Cancel reads still in progress, e.g. when the form is torn down."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._pending.clear()
