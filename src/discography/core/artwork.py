"""Artwork sources and the embedded-JPEG cache."""

import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from PIL import Image

from ..exceptions import MissingSourceError
from ..models.config import WorkspaceConfig

logger = logging.getLogger(__name__)


class ArtworkStore:
    """Resolve artwork names to PNG sources and cached JPEG renditions."""

    def __init__(self, config: WorkspaceConfig):
        self.config = config
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def resolve_name(self, name: Optional[str]) -> str:
        return name if name is not None else self.config.encoding.fallback_artwork

    def source_path(self, name: Optional[str]) -> Path:
        """PNG source for an artwork name."""
        path = self.config.images_dir / f"{self.resolve_name(name)}.png"
        if not path.exists():
            raise MissingSourceError(f"Artwork source does not exist: {path}")
        return path

    def jpeg_path(self, name: Optional[str]) -> Path:
        """Cached JPEG rendition, created on first use."""
        resolved = self.resolve_name(name)
        destination = self.config.artwork_cache_dir / f"{resolved}.jpg"

        with self._lock_for(resolved):
            if destination.exists():
                return destination

            source = self.source_path(resolved)
            size = self.config.encoding.artwork_size
            logger.info(f"Resizing artwork {resolved} to fit {size}x{size}")
            destination.parent.mkdir(parents=True, exist_ok=True)
            partial = destination.with_name(f"{destination.stem}.partial.jpg")

            with Image.open(source) as img:
                img = img.convert("RGB")
                img.thumbnail((size, size), Image.Resampling.LANCZOS)
                img.save(partial, "JPEG", quality=90)
            partial.replace(destination)
            return destination

    def jpeg_bytes(self, name: Optional[str]) -> bytes:
        return self.jpeg_path(name).read_bytes()

    def _lock_for(self, name: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(name, threading.Lock())
