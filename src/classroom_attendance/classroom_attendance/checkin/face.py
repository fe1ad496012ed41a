from __future__ import annotations

import logging
from typing import Protocol

import requests

logger = logging.getLogger(__name__)


class FaceVerifier(Protocol):
    """Opaque pass/fail oracle: does the photo show this student?"""

    def verify(self, *, image_base64: str, username: str) -> bool:
        raise NotImplementedError


def strip_data_url(image_base64: str) -> str:
    """Drop a `data:image/jpeg;base64,` prefix if the browser sent one."""

    if image_base64.startswith("data:") and "," in image_base64:
        return image_base64.split(",", 1)[1]
    return image_base64


class HttpFaceVerifier(FaceVerifier):
    """Calls the face recognition service: POST {image_base64} -> {"name": ...}.

    Any transport or decoding problem counts as a failed verification.
    """

    def __init__(self, url: str, *, timeout: float = 10.0, http: requests.Session | None = None):
        self._url = url
        self._timeout = float(timeout)
        self._http = http or requests.Session()

    def verify(self, *, image_base64: str, username: str) -> bool:
        try:
            response = self._http.post(
                self._url,
                json={"image_base64": strip_data_url(image_base64)},
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("Face verification request failed: %s", e)
            return False

        if not response.ok:
            logger.error("Face verification API error: %s %s", response.status_code, response.reason)
            return False

        try:
            data = response.json()
        except ValueError:
            logger.error("Face verification API returned a non-JSON body")
            return False

        return isinstance(data, dict) and data.get("name") == username
