import asyncio
import logging
import os
from pathlib import Path
from typing import List

import requests

from mailcraft.errors import TemplateNotFound, UpstreamFailure
from mailcraft.models import CustomTemplate
from storage.template_store import CustomTemplateStore

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "public" / "templates"
TEMPLATES_DIR = Path(os.getenv("TEMPLATES_DIR", str(DEFAULT_TEMPLATES_DIR)))
TEMPLATE_FETCH_TIMEOUT_S = float(os.getenv("TEMPLATE_FETCH_TIMEOUT_S", "10"))

BUILTIN_TEMPLATES = (
    "EBooks.html",
    "Elephants.html",
    "Fashion Gallery.html",
    "Flash Sale.html",
    "Grand Opening.html",
    "Outdoors.html",
    "Sports Equipment.html",
)


class TemplateCatalog:
    def __init__(self, custom_store: CustomTemplateStore, templates_dir: Path = TEMPLATES_DIR):
        self.custom_store = custom_store
        self.templates_dir = Path(templates_dir)

    def list_templates(self) -> List[str]:
        return list(BUILTIN_TEMPLATES)

    async def list_all(self, user_id: str) -> List[str]:
        """Built-in names followed by the user's uploads, duplicates included."""
        custom = await self.custom_store.list_for_user(user_id)
        return self.list_templates() + [t.name for t in custom]

    async def add_custom(self, user_id: str, name: str, url: str) -> CustomTemplate:
        template = await self.custom_store.add(user_id, CustomTemplate(name=name, url=url))
        logger.info(f"Custom template {name!r} recorded for user {user_id}")
        return template

    async def get_template_html(self, user_id: str, name: str) -> str:
        for custom in await self.custom_store.list_for_user(user_id):
            if custom.name == name:
                return await asyncio.to_thread(self._fetch_remote, custom.url)

        if name not in BUILTIN_TEMPLATES:
            raise TemplateNotFound(name)

        path = self.templates_dir / name
        if not path.is_file():
            logger.error(f"Built-in template missing on disk: {path}")
            raise TemplateNotFound(name)
        return path.read_text(encoding="utf-8")

    def _fetch_remote(self, url: str) -> str:
        try:
            resp = requests.get(url, timeout=TEMPLATE_FETCH_TIMEOUT_S)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Error fetching custom template {url}: {e}")
            raise UpstreamFailure(f"Could not fetch template: {e}") from e
        return resp.text
