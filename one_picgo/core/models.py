"""Data models for one-picgo."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

Span = Tuple[int, int]


class OnePicGoError(Exception):
    """Base class for errors raised by one-picgo."""


class ConfigError(OnePicGoError):
    """Invalid or unreadable configuration."""


class PathResolutionError(OnePicGoError):
    """An image path could not be turned into a filesystem path."""


class UploadError(OnePicGoError):
    """The uploader backend rejected an upload."""


@dataclass(frozen=True)
class ImageReference:
    """One `![alt](path)` occurrence in a document.

    Two references to the same path are still distinct: their spans differ.
    """
    raw_path: str
    span: Span
    alt_text: str = ""
    is_remote: bool = False

    @property
    def start(self) -> int:
        return self.span[0]

    @property
    def end(self) -> int:
        return self.span[1]


@dataclass(frozen=True)
class UploadOutcome:
    """Result of uploading one image: either a remote URL or a failure reason."""
    ok: bool
    remote_url: Optional[str] = None
    reason: Optional[str] = None
    attempts: int = 1

    @classmethod
    def success(cls, remote_url: str) -> "UploadOutcome":
        return cls(ok=True, remote_url=remote_url)

    @classmethod
    def failure(cls, reason: str) -> "UploadOutcome":
        return cls(ok=False, reason=reason)


@dataclass(frozen=True)
class Replacement:
    """New text for a span of the original document snapshot."""
    span: Span
    new_text: str


@dataclass
class UploadSession:
    """Counters and pending edits for one upload run.

    total_images is fixed when the session is created. Only the processor
    mutates a session, through record_success() and record_failure().
    """
    total_images: int
    uploaded_count: int = 0
    failed_count: int = 0
    replacements: List[Replacement] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    def record_success(self, replacement: Replacement) -> None:
        self.replacements.append(replacement)
        self.uploaded_count += 1

    def record_failure(self, raw_path: str, reason: str) -> None:
        self.failures.append((raw_path, reason))
        self.failed_count += 1
