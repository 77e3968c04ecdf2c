import logging
import os
from typing import Optional

import requests

from mailcraft.errors import ImageSearchError

logger = logging.getLogger(__name__)

UNSPLASH_BASE_URL = os.getenv("UNSPLASH_BASE_URL", "https://api.unsplash.com").strip()
UNSPLASH_TIMEOUT_S = float(os.getenv("UNSPLASH_TIMEOUT_S", "10"))


class UnsplashImageSearch:
    """Resolves a free-text query to the first matching Unsplash photo.

    Expected JSON shape of ``GET /search/photos``:
      {"results": [{"urls": {"regular": "<url>"}}, ...]}
    """

    def __init__(
        self,
        access_key: Optional[str] = None,
        base_url: str = UNSPLASH_BASE_URL,
        timeout_s: float = UNSPLASH_TIMEOUT_S,
    ):
        self.access_key = access_key if access_key is not None else os.getenv("UNSPLASH_ACCESS_KEY", "")
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    def search(self, query: str) -> str:
        try:
            resp = requests.get(
                f"{self.base_url}/search/photos",
                params={"query": query, "client_id": self.access_key},
                timeout=self.timeout_s,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Unsplash search failed for %r: %s", query, e)
            raise ImageSearchError(f"Image search failed: {e}") from e

        try:
            url = payload["results"][0]["urls"]["regular"]
        except (KeyError, IndexError, TypeError) as e:
            raise ImageSearchError(f"No image found for query: {query}") from e

        logger.info("Unsplash search %r -> %s", query, url)
        return url
