# app/storage/object_store.py

"""
Object store over a local directory.

Objects are addressed by a relative key such as
``assessment-uploads/<assessment>/<question>-<ms>-<name>``; public URLs are
``{PUBLIC_BASE_URL}{FILES_URL_PREFIX}/<key>`` and ``app.main`` serves the
directory under that prefix.
"""

import logging
import os
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional
from urllib.parse import quote, unquote, urlparse

from app.core.config import settings
from app.core.errors import StorageError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class LocalObjectStore:
    def __init__(self, root: str, public_base_url: str, url_prefix: str = "/files"):
        self.root = Path(root).resolve()
        self.public_base_url = public_base_url.rstrip("/")
        self.url_prefix = "/" + url_prefix.strip("/")
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageError(f"Invalid object key: {key}")
        return path

    def upload(
        self,
        key: str,
        stream: BinaryIO,
        on_progress: Optional[Callable[[int, int], Any]] = None,
        total: Optional[int] = None,
    ) -> str:
        """Copy ``stream`` into the store, reporting bytes transferred."""
        target = self._resolve(key)
        target.parent.mkdir(parents=True, exist_ok=True)

        if total is None:
            try:
                current = stream.tell()
                stream.seek(0, os.SEEK_END)
                total = stream.tell() - current
                stream.seek(current)
            except (AttributeError, OSError):
                total = 0

        transferred = 0
        partial = target.with_name(target.name + ".part")
        try:
            with open(partial, "wb") as out:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    out.write(chunk)
                    transferred += len(chunk)
                    if on_progress is not None:
                        on_progress(transferred, total or transferred)
            partial.replace(target)
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise StorageError(str(exc))

        logger.info("Stored %s (%d bytes)", key, transferred)
        return key

    def public_url(self, key: str) -> str:
        if not self._resolve(key).exists():
            raise StorageError(f"Object not found: {key}")
        return f"{self.public_base_url}{self.url_prefix}/{quote(key)}"

    def key_from_url(self, url: str) -> Optional[str]:
        path = unquote(urlparse(url).path)
        prefix = self.url_prefix + "/"
        if not path.startswith(prefix):
            return None
        return path[len(prefix):]

    def delete(self, key: str) -> None:
        path = self._resolve(key)
        if not path.exists():
            raise StorageError(f"Object not found: {key}")
        path.unlink()

    def delete_by_url(self, url: str) -> None:
        key = self.key_from_url(url)
        if key is None:
            raise StorageError(f"Not a stored object URL: {url}")
        self.delete(key)


_store: Optional[LocalObjectStore] = None


def get_object_store() -> LocalObjectStore:
    global _store
    if _store is None:
        _store = LocalObjectStore(
            settings.STORAGE_DIR,
            settings.PUBLIC_BASE_URL,
            settings.FILES_URL_PREFIX,
        )
    return _store
