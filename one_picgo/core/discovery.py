"""Image reference discovery and path resolution for Markdown documents."""

import os
import re
from typing import Iterator, List
from urllib.parse import unquote

from one_picgo.core.models import ImageReference, PathResolutionError

# Pattern for Markdown images: ![alt](path), non-greedy, single line
IMAGE_PATTERN = re.compile(r'!\[(.*?)\]\((.*?)\)')

REMOTE_PATTERN = re.compile(r'^\s*https?://', re.IGNORECASE)


def is_remote(path: str) -> bool:
    """Check whether an image path already points at an http(s) URL."""
    return REMOTE_PATTERN.match(path) is not None


class ReferenceScanner:
    """Finds image references in a snapshot of document text."""

    def __init__(self, text: str):
        """Initialize ReferenceScanner.

        Args:
            text: Document text; offsets of every reference refer to it
        """
        self.text = text

    def scan(self) -> Iterator[ImageReference]:
        """Yield every image reference in order of appearance.

        Remote references are included with is_remote set. Each call starts
        a new pass over the text.
        """
        for match in IMAGE_PATTERN.finditer(self.text):
            raw_path = match.group(2)
            yield ImageReference(
                raw_path=raw_path,
                span=match.span(),
                alt_text=match.group(1),
                is_remote=is_remote(raw_path),
            )

    def local_references(self) -> List[ImageReference]:
        """Return the references that still point at local files."""
        return [ref for ref in self.scan() if not ref.is_remote]


def resolve_path(raw_path: str, document_dir: str) -> str:
    """Turn an image path from a document into an absolute filesystem path.

    Relative paths are taken relative to the document's directory. The
    result is percent-decoded and uses forward slashes only.

    Args:
        raw_path: Path exactly as written inside the parentheses
        document_dir: Directory containing the document

    Returns:
        Decoded absolute path

    Raises:
        PathResolutionError: If the path contains invalid percent-escapes
    """
    path = raw_path.strip()
    if not os.path.isabs(path):
        path = os.path.join(document_dir, path)

    try:
        decoded = unquote(path, errors='strict')
    except UnicodeDecodeError as e:
        raise PathResolutionError(f"Malformed percent-encoding in {raw_path!r}: {e}") from e

    return os.path.normpath(decoded).replace('\\', '/')
