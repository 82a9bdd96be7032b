"""Upload processor: uploads a document's local images and rewrites their links."""

import functools
import logging
import time
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

from one_picgo.core.discovery import ReferenceScanner, resolve_path
from one_picgo.core.models import (
    ImageReference,
    PathResolutionError,
    Replacement,
    UploadOutcome,
    UploadSession,
)
from one_picgo.core.upload import UploadAttemptExecutor, with_retry
from one_picgo.transforms.images import ImageTransform, empty_alt

if TYPE_CHECKING:
    from one_picgo.host import DocumentHost

logger = logging.getLogger(__name__)

NOTHING_TO_UPLOAD = "No local images to upload"
NOTHING_FOUND = "No local images found"


def apply_replacements(text: str, replacements: Sequence[Replacement]) -> str:
    """Apply a batch of replacements to the text they were computed against.

    Spans refer to the original text, so edits are spliced from the end
    backwards. The batch is validated first; nothing is applied if any span
    is out of range or overlaps another.

    Args:
        text: Original document text
        replacements: Edits with spans into text

    Returns:
        The edited text

    Raises:
        ValueError: On an invalid or overlapping span
    """
    ordered = sorted(replacements, key=lambda r: r.span)
    previous_end = 0
    for replacement in ordered:
        start, end = replacement.span
        if start < 0 or end > len(text) or start > end:
            raise ValueError(f"Span {replacement.span} outside document of length {len(text)}")
        if start < previous_end:
            raise ValueError(f"Span {replacement.span} overlaps a previous replacement")
        previous_end = end

    result = text
    for replacement in reversed(ordered):
        start, end = replacement.span
        result = result[:start] + replacement.new_text + result[end:]
    return result


class ReplacementApplier:
    """Hands the collected replacements to the host as one edit."""

    def apply(self, host: "DocumentHost", replacements: List[Replacement]) -> bool:
        """Apply replacements in a single batch.

        Args:
            host: Document host to edit
            replacements: All replacements of the session

        Returns:
            True if the host applied the batch, False if there was nothing
            to apply or the host refused it
        """
        if not replacements:
            return False

        applied = host.apply_batch_edit(list(replacements))
        if not applied:
            logger.error("Host rejected batch of %d replacements", len(replacements))
            host.show_error("Failed to replace image links in the document")
        return applied


class UploadProcessor:
    """Uploads every local image of a document and rewrites the links.

    References are processed one at a time, in document order. Each upload
    is retried up to max_retries times, and every reference is followed by
    a pause of upload_interval milliseconds to throttle the image host.
    All edits are applied together once every reference has been processed.
    """

    def __init__(
        self,
        executor: UploadAttemptExecutor,
        upload_interval: int = 2000,
        max_retries: int = 3,
        replacement_transform: Optional[ImageTransform] = None,
        applier: Optional[ReplacementApplier] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize UploadProcessor.

        Args:
            executor: Performs single upload attempts
            upload_interval: Pause after each reference and between retries (ms)
            max_retries: Attempts per reference before giving up
            replacement_transform: Builds the new Markdown for an uploaded image
                                   (default: `![](url)`)
            applier: Applies the final batch of edits
            sleep: Sleep function, replaceable in tests
        """
        self.executor = executor
        self.upload_interval = upload_interval
        self.max_retries = max_retries
        self.replacement_transform = replacement_transform or empty_alt()
        self.applier = applier or ReplacementApplier()
        self.sleep = sleep

    def run(self, host: "DocumentHost") -> UploadSession:
        """Upload all local images of the host's document.

        Args:
            host: Document host supplying text and receiving edits

        Returns:
            The finished session with counts and applied replacements
        """
        text = host.get_document_text()
        document_dir = host.get_document_directory()
        document_base = host.get_document_base_name()

        references = ReferenceScanner(text).local_references()
        session = UploadSession(total_images=len(references))

        if session.total_images == 0:
            host.show_info(NOTHING_TO_UPLOAD)
            return session

        logger.info("Uploading %d image(s) from %s", session.total_images, document_base)

        for reference in references:
            outcome = self._upload_reference(reference, document_dir, document_base)
            if outcome.ok:
                session.record_success(Replacement(
                    span=reference.span,
                    new_text=self.replacement_transform(reference, outcome.remote_url),
                ))
                host.report_progress(
                    100 / session.total_images,
                    f"Uploaded {session.uploaded_count}/{session.total_images}",
                )
            else:
                session.record_failure(reference.raw_path, outcome.reason)
                logger.info("Giving up on %s: %s", reference.raw_path, outcome.reason)
                host.show_error(f"Failed to upload image: {reference.raw_path} ({outcome.reason})")

            self.sleep(self.upload_interval / 1000)

        self.applier.apply(host, session.replacements)
        host.show_info(self.summary(session))
        return session

    def _upload_reference(
        self,
        reference: ImageReference,
        document_dir: str,
        document_base: str,
    ) -> UploadOutcome:
        try:
            resolved = resolve_path(reference.raw_path, document_dir)
        except PathResolutionError as e:
            # Deterministic, so not retried
            return UploadOutcome.failure(str(e))

        logger.debug("Uploading %s as %s", reference.raw_path, resolved)
        attempt = functools.partial(self.executor.attempt, resolved, document_base)
        return with_retry(attempt, self.max_retries, self.upload_interval, sleep=self.sleep)

    @staticmethod
    def summary(session: UploadSession) -> str:
        """Build the end-of-run message for a session."""
        if session.uploaded_count or session.failed_count:
            return (
                f"Image upload finished: {session.uploaded_count} uploaded, "
                f"{session.failed_count} failed"
            )
        return NOTHING_FOUND
