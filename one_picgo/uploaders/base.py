"""Uploader contract."""

from typing import Any, Dict, List, Protocol


class Uploader(Protocol):
    """Anything that uploads local files and reports their remote URLs.

    upload() returns one dict per uploaded file carrying the remote URL under
    "imgUrl". It may raise, or return an empty or malformed list; callers
    treat all of these as a failed upload.
    """

    def upload(self, paths: List[str]) -> List[Dict[str, Any]]:
        ...
