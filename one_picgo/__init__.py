"""
one-picgo - Upload local images of Markdown documents to an image host

Scans a Markdown document for local image references, uploads each one
through PicGo and rewrites the document to point at the remote URLs, with:
- Staging copies under collision-free names
- Bounded retries and paced uploads
- One atomic batch of link replacements
"""

__version__ = "0.1.0"

from one_picgo.core.models import ImageReference, OnePicGoError, Replacement, UploadOutcome, UploadSession
from one_picgo.core.discovery import ReferenceScanner, resolve_path
from one_picgo.core.upload import UploadAttemptExecutor, with_retry
from one_picgo.core.processor import ReplacementApplier, UploadProcessor
from one_picgo.config import UploaderConfig, load_config
from one_picgo.host import DocumentHost, FileDocumentHost
from one_picgo.uploaders import PicGoServerUploader, Uploader

__all__ = [
    "ImageReference",
    "OnePicGoError",
    "Replacement",
    "UploadOutcome",
    "UploadSession",
    "ReferenceScanner",
    "resolve_path",
    "UploadAttemptExecutor",
    "with_retry",
    "ReplacementApplier",
    "UploadProcessor",
    "UploaderConfig",
    "load_config",
    "DocumentHost",
    "FileDocumentHost",
    "PicGoServerUploader",
    "Uploader",
]
