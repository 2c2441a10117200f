"""Filesystem storage for uploaded photos and spreadsheets.

Files live in one static-served directory and are named by upload time in
epoch milliseconds plus the original extension.
"""
from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


def is_absolute_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


class UploadStorage:
    def __init__(self, root: str | Path, *, public_path: str = "/uploads", clock: Callable[[], float] = time.time):
        self._root = Path(root)
        self._public_path = "/" + public_path.strip("/")
        self._clock = clock
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def public_path(self) -> str:
        return self._public_path

    def reserve(self, original_name: str) -> str:
        """Claim a fresh ``<epoch-ms><ext>`` name by creating the empty file.

        O_EXCL makes the claim atomic, so concurrent uploads in the same
        millisecond end up with different names.
        """
        ext = Path(secure_filename(original_name or "")).suffix.lower()
        stamp = int(self._clock() * 1000)
        while True:
            name = f"{stamp}{ext}"
            try:
                fd = os.open(self._root / name, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                stamp += 1
                continue
            os.close(fd)
            return name

    def save(self, upload: FileStorage) -> str:
        """Persist an upload and return its stored filename."""
        name = self.reserve(upload.filename or "")
        try:
            upload.save(str(self._root / name))
        except Exception:
            self.remove(name)
            raise
        logger.debug("Stored upload %r as %s", upload.filename, name)
        return name

    def path_for(self, filename: str) -> Path:
        # Only the final path component is honoured; stored names never contain directories.
        return self._root / Path(filename).name

    def resolve_existing(self, filename: Optional[str]) -> Optional[Path]:
        if not filename or is_absolute_url(filename):
            return None
        path = self.path_for(filename)
        return path if path.is_file() else None

    def public_url(self, filename: Optional[str], base_url: str) -> Optional[str]:
        if not filename:
            return None
        if is_absolute_url(filename):
            return filename
        return f"{base_url.rstrip('/')}{self._public_path}/{Path(filename).name}"

    def remove(self, filename: Optional[str]) -> bool:
        """Best-effort delete of a stored file. Never raises."""
        if not filename or is_absolute_url(filename):
            return False
        return self.discard(self.path_for(filename))

    def discard(self, path: str | Path) -> bool:
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)
            return False
