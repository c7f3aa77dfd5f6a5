"""Artifact store for recorded audio."""

import asyncio
import logging
import shutil
from pathlib import Path, PurePosixPath
from typing import Protocol

from nolook.config import settings
from nolook.schemas.events import StorageEvent
from nolook.utils.exceptions import DownloadError

logger = logging.getLogger(__name__)


class ArtifactStore(Protocol):
    """Durable object storage addressed by '/'-delimited object names."""

    async def upload(self, name: str, data: bytes, content_type: str) -> StorageEvent: ...

    async def download(self, name: str, destination: Path) -> None: ...

    async def exists(self, name: str) -> bool: ...

    async def delete(self, name: str) -> bool: ...


class LocalArtifactStore:
    """Artifact store kept in a directory on the local filesystem."""

    def __init__(self, root: str | Path | None = None):
        """
        Initialize the store.

        Args:
            root: Directory holding the objects (default from settings)
        """
        self.root = Path(root or settings.storage_dir)

    def _resolve(self, name: str) -> Path:
        """Map an object name to a file under the root, refusing escapes."""
        parts = PurePosixPath(name).parts
        if not parts or name.startswith("/") or any(p in ("..", ".") for p in parts):
            raise ValueError(f"Invalid object name: {name!r}")
        return self.root.joinpath(*parts)

    async def upload(self, name: str, data: bytes, content_type: str) -> StorageEvent:
        """
        Write an object and return its finalize event.

        Args:
            name: Object name
            data: Object bytes
            content_type: Media type recorded in the finalize event

        Returns:
            StorageEvent announcing the completed object
        """
        path = self._resolve(name)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write beside the target and rename, so readers never see a partial object
        partial = path.with_name(path.name + ".partial")
        await asyncio.to_thread(partial.write_bytes, data)
        partial.replace(path)

        logger.info(f"Stored {name} ({len(data)} bytes, {content_type})")
        return StorageEvent(name=name, content_type=content_type)

    async def download(self, name: str, destination: Path) -> None:
        """
        Copy an object to a local file.

        Raises:
            DownloadError: If the object is missing or unreadable
        """
        try:
            source = self._resolve(name)
        except ValueError as e:
            raise DownloadError(str(e)) from e

        if not source.is_file():
            raise DownloadError(f"Artifact not found: {name}")

        try:
            await asyncio.to_thread(shutil.copyfile, source, destination)
        except OSError as e:
            raise DownloadError(f"Failed to read artifact {name}: {e}") from e

    async def exists(self, name: str) -> bool:
        try:
            return self._resolve(name).is_file()
        except ValueError:
            return False

    async def delete(self, name: str) -> bool:
        try:
            path = self._resolve(name)
        except ValueError:
            return False
        if not path.is_file():
            return False
        path.unlink()
        logger.info(f"Deleted artifact {name}")
        return True
