"""Core components for one-picgo."""

from one_picgo.core.models import (
    ConfigError,
    ImageReference,
    OnePicGoError,
    PathResolutionError,
    Replacement,
    UploadError,
    UploadOutcome,
    UploadSession,
)
from one_picgo.core.discovery import ReferenceScanner, is_remote, resolve_path
from one_picgo.core.upload import UploadAttemptExecutor, staging_name, with_retry
from one_picgo.core.processor import ReplacementApplier, UploadProcessor, apply_replacements

__all__ = [
    "ConfigError",
    "ImageReference",
    "OnePicGoError",
    "PathResolutionError",
    "Replacement",
    "UploadError",
    "UploadOutcome",
    "UploadSession",
    "ReferenceScanner",
    "is_remote",
    "resolve_path",
    "UploadAttemptExecutor",
    "staging_name",
    "with_retry",
    "ReplacementApplier",
    "UploadProcessor",
    "apply_replacements",
]
