"""Single upload attempts and the retry loop around them."""

import logging
import os
import re
import shutil
import tempfile
import time
import uuid
from pathlib import Path
from typing import Callable, Optional

import tenacity

from one_picgo.core.models import UploadOutcome
from one_picgo.uploaders.base import Uploader

logger = logging.getLogger(__name__)

# Field of an uploader result item holding the remote URL
URL_FIELD = "imgUrl"

# Characters not allowed in file names on common filesystems
UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def _safe(name: str) -> str:
    return UNSAFE_CHARS.sub('_', name)


def staging_name(
    document_base: str,
    source_path: str,
    now: Optional[float] = None,
    token: Optional[str] = None,
) -> str:
    """Build a collision-resistant file name for a staging copy.

    Format: {document}_{image}_{timestamp_ms}_{random_hex}{ext}

    Args:
        document_base: Base name of the Markdown document (no extension)
        source_path: Path of the image being uploaded
        now: Timestamp in seconds (defaults to the current time)
        token: Random hex suffix (defaults to a fresh uuid4 fragment)

    Returns:
        File name without directory
    """
    source = Path(source_path)
    millis = int((time.time() if now is None else now) * 1000)
    token = token or uuid.uuid4().hex[:8]
    return f"{_safe(document_base)}_{_safe(source.stem)}_{millis}_{token}{source.suffix}"


def remote_url_from(result) -> Optional[str]:
    """Extract the remote URL from an uploader result, or None if malformed."""
    if not isinstance(result, (list, tuple)) or not result:
        return None
    first = result[0]
    if not isinstance(first, dict):
        return None
    url = first.get(URL_FIELD)
    if not isinstance(url, str) or not url.strip():
        return None
    return url.strip()


class UploadAttemptExecutor:
    """Performs one upload attempt for one image.

    The image is copied to a uniquely named staging file, handed to the
    uploader, and the staging file is removed again whatever happens.
    """

    def __init__(
        self,
        uploader: Uploader,
        staging_dir: Optional[str] = None,
        use_staging: bool = True,
    ):
        """Initialize UploadAttemptExecutor.

        Args:
            uploader: Backend that turns local paths into remote URLs
            staging_dir: Directory for staging copies (default: system temp dir)
            use_staging: If False, upload the source file directly
        """
        self.uploader = uploader
        self.staging_dir = staging_dir
        self.use_staging = use_staging

    def attempt(self, resolved_path: str, document_base: str) -> UploadOutcome:
        """Upload one image once.

        Args:
            resolved_path: Absolute path of the image
            document_base: Base name of the document the image belongs to

        Returns:
            Success with the remote URL, or Failure with a reason
        """
        if not os.path.isfile(resolved_path):
            return UploadOutcome.failure(f"File not found: {resolved_path}")

        if not self.use_staging:
            return self._upload(resolved_path)

        staging_dir = self.staging_dir or tempfile.gettempdir()
        staging_path = os.path.join(staging_dir, staging_name(document_base, resolved_path))
        try:
            try:
                shutil.copyfile(resolved_path, staging_path)
            except OSError as e:
                return UploadOutcome.failure(f"Could not stage {resolved_path}: {e}")
            return self._upload(staging_path)
        finally:
            self._remove(staging_path)

    def _upload(self, path: str) -> UploadOutcome:
        try:
            result = self.uploader.upload([path])
        except Exception as e:
            return UploadOutcome.failure(f"Uploader error: {e}")

        url = remote_url_from(result)
        if url is None:
            return UploadOutcome.failure(f"Unexpected uploader response: {result!r}")
        return UploadOutcome.success(url)

    def _remove(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove staging file %s: %s", path, e)


def with_retry(
    attempt: Callable[[], UploadOutcome],
    max_retries: int,
    delay_ms: int,
    sleep: Callable[[float], None] = time.sleep,
) -> UploadOutcome:
    """Run an upload attempt until it succeeds or the attempts run out.

    Args:
        attempt: Zero-argument callable performing one attempt
        max_retries: Maximum number of attempts (at least one is made)
        delay_ms: Delay between failed attempts in milliseconds
        sleep: Sleep function, replaceable in tests

    Returns:
        The first Success, or the last Failure; attempts records how many
        calls were made
    """
    limit = max(1, max_retries)
    attempts = []

    def log_failure(retry_state: tenacity.RetryCallState) -> None:
        logger.warning(
            "Upload attempt %d/%d failed: %s",
            retry_state.attempt_number, limit, retry_state.outcome.result().reason,
        )

    def give_up(retry_state: tenacity.RetryCallState) -> UploadOutcome:
        last = retry_state.outcome.result()
        return UploadOutcome(ok=False, reason=last.reason, attempts=retry_state.attempt_number)

    retrying = tenacity.Retrying(
        sleep=sleep,
        stop=tenacity.stop_after_attempt(limit),
        wait=tenacity.wait_fixed(delay_ms / 1000),
        retry=tenacity.retry_if_result(lambda outcome: not outcome.ok),
        before=lambda retry_state: attempts.append(retry_state.attempt_number),
        before_sleep=log_failure,
        retry_error_callback=give_up,
    )
    outcome = retrying(attempt)
    if outcome.ok:
        return UploadOutcome(ok=True, remote_url=outcome.remote_url, attempts=attempts[-1])
    return outcome
