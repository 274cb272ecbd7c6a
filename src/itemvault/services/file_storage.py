"""Attachment storage.

Learn: Item routes never touch the filesystem directly. They hand the
uploaded bytes to a FileStorage and keep the reference it returns, so
the backend (local disk today) can be swapped without touching the
routes or the item service. Contents are never inspected.
"""

import asyncio
import re
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

logger = structlog.get_logger()

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class FileStorage(ABC):
    """Store bytes, return a reference clients can resolve."""

    @abstractmethod
    async def save(self, filename: str, content: bytes) -> str:
        ...

    @abstractmethod
    async def delete(self, ref: str) -> None:
        """Remove a stored attachment. Unknown references are ignored."""


def _write_new(path: Path, content: bytes) -> None:
    # "xb" fails on an existing file instead of replacing it
    with open(path, "xb") as fh:
        fh.write(content)


class LocalFileStorage(FileStorage):
    """Writes attachments into a directory served at /<url_prefix>/.

    Stored names are "<epoch millis>_<random hex>_<original name>". The
    random part keeps two uploads of "image.jpg" in the same millisecond
    apart and makes stored names impossible to guess. The returned
    reference is also the URL path of the file.
    """

    def __init__(self, root: str | Path, url_prefix: str = "uploads"):
        self.root = Path(root)
        self.url_prefix = url_prefix.strip("/")

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    @staticmethod
    def safe_name(filename: str) -> str:
        # Drop any client-supplied directory part before sanitizing
        base = Path(filename.replace("\\", "/")).name
        cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
        return cleaned or "upload"

    def _stored_name(self, filename: str) -> str:
        millis = int(time.time() * 1000)
        return f"{millis}_{uuid.uuid4().hex[:16]}_{self.safe_name(filename)}"

    async def save(self, filename: str, content: bytes) -> str:
        stored = self._stored_name(filename)
        target = self.ensure_root() / stored
        await asyncio.to_thread(_write_new, target, content)
        logger.info("attachment.stored", name=stored, size=len(content))
        return f"{self.url_prefix}/{stored}"

    async def delete(self, ref: str) -> None:
        prefix = f"{self.url_prefix}/"
        if not ref.startswith(prefix):
            return
        name = ref[len(prefix):]
        if not name or name != Path(name).name:
            return
        await asyncio.to_thread((self.root / name).unlink, missing_ok=True)
        logger.info("attachment.deleted", name=name)
