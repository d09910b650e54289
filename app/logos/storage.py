"""Filesystem blob storage for logo renditions.

Layout under ``LOGOS_DIR``:
    svg/{id}.svg    vector rendition
    png/{id}.png    raster rendition
    temp/           per-upload staging directories
"""

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from app.config import get_settings

logger = logging.getLogger(__name__)

SVG = "svg"
PNG = "png"
NAMESPACES = (SVG, PNG)


class LogoStorage:
    """Two namespaces of files addressed by asset id."""

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root)

    def ensure_dirs(self) -> None:
        for name in (*NAMESPACES, "temp"):
            (self.root / name).mkdir(parents=True, exist_ok=True)

    def path_for(self, namespace: str, asset_id: str) -> Path:
        if namespace not in NAMESPACES:
            raise ValueError(f"Unknown namespace: {namespace}")
        return self.root / namespace / f"{asset_id}.{namespace}"

    def exists(self, namespace: str, asset_id: str) -> bool:
        return self.path_for(namespace, asset_id).is_file()

    def remove(self, namespace: str, asset_id: str) -> bool:
        """Delete one rendition. Returns False if there was nothing to delete."""
        try:
            self.path_for(namespace, asset_id).unlink()
            return True
        except FileNotFoundError:
            return False

    def remove_all(self, asset_id: str) -> None:
        """Best-effort removal of every rendition of ``asset_id``."""
        for namespace in NAMESPACES:
            try:
                self.remove(namespace, asset_id)
            except OSError as e:
                logger.warning(f"[LOGOS] Could not remove {namespace} for {asset_id}: {e}")

    def commit(self, asset_id: str, files: dict[str, Path]) -> None:
        """Replace every rendition of ``asset_id`` with ``files`` (namespace -> path).

        Renditions of a kind missing from ``files`` are removed.
        """
        for namespace in NAMESPACES:
            target = self.path_for(namespace, asset_id)
            target.parent.mkdir(parents=True, exist_ok=True)
            source = files.get(namespace)
            if source is None:
                target.unlink(missing_ok=True)
            else:
                shutil.move(str(source), str(target))

    @contextmanager
    def staging(self) -> Iterator[Path]:
        """Scratch directory under ``temp/``, removed on every exit path."""
        temp_dir = self.root / "temp"
        temp_dir.mkdir(parents=True, exist_ok=True)
        path = Path(tempfile.mkdtemp(dir=temp_dir))
        try:
            yield path
        finally:
            shutil.rmtree(path, ignore_errors=True)


@lru_cache()
def get_logo_storage() -> LogoStorage:
    """Process-wide storage rooted at ``LOGOS_DIR``."""
    return LogoStorage(get_settings().LOGOS_DIR)
