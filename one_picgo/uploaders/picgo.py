"""Uploader backed by a running PicGo HTTP server."""

import logging
from typing import Any, Dict, List

import requests

from one_picgo.core.models import UploadError

logger = logging.getLogger(__name__)

DEFAULT_PICGO_URL = "http://127.0.0.1:36677/upload"


class PicGoServerUploader:
    """Uploads files through the PicGo server's /upload endpoint.

    The server answers {"success": true, "result": [url, ...]}; results are
    returned as [{"imgUrl": url}, ...] to match the PicGo API.
    """

    def __init__(self, url: str = DEFAULT_PICGO_URL, timeout: float = 30, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def upload(self, paths: List[str]) -> List[Dict[str, Any]]:
        logger.debug("POST %s %s", self.url, paths)
        try:
            response = self.session.post(self.url, json={"list": list(paths)}, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise UploadError(f"PicGo server request failed: {e}") from e
        except ValueError as e:
            raise UploadError(f"PicGo server returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or not payload.get("success"):
            message = payload.get("message") if isinstance(payload, dict) else None
            raise UploadError(f"PicGo upload failed: {message or payload!r}")

        return [{"imgUrl": url} for url in payload.get("result") or [] if isinstance(url, str)]
