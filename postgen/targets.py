"""
Delivery back-ends: native share targets and download sinks.

A ShareTarget hands all files to an OS share surface in one request.
A DownloadSink saves files one at a time through a transient handle that
is released after each download.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .exceptions import DeliveryError

logger = logging.getLogger(__name__)


class ShareCancelled(Exception):
    """The user dismissed the share sheet. Not an error."""


@dataclass(frozen=True)
class ShareFile:
    """A file offered to a share target."""
    filename: str
    data: bytes
    mime_type: str = "image/png"


class ShareTarget(ABC):
    """
    Abstract base class for native share surfaces.

    ``share`` raises ShareCancelled when the user backs out; any other
    exception counts as a failed share.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Target name for logging."""
        pass

    @abstractmethod
    def can_share(self, files: List[ShareFile]) -> bool:
        """Check if the target accepts all of these files in one request."""
        pass

    @abstractmethod
    async def share(self, files: List[ShareFile], title: str, text: str) -> None:
        """
        Open one share request for all files and wait for it to finish.

        Args:
            files: Files to share, in order
            title: Share sheet title
            text: Descriptive text shown with the files
        """
        pass


class UnsupportedShareTarget(ShareTarget):
    """Host with no multi-file share capability."""

    @property
    def name(self) -> str:
        return "unsupported"

    def can_share(self, files: List[ShareFile]) -> bool:
        return False

    async def share(self, files: List[ShareFile], title: str, text: str) -> None:
        raise RuntimeError("Native share is not available on this host")


@dataclass
class DownloadHandle:
    """Transient, releasable reference to one file's bytes."""
    filename: str
    path: Path


class DownloadSink(ABC):
    """Abstract base class for per-file download back-ends."""

    @abstractmethod
    async def materialize(self, data: bytes, filename: str) -> DownloadHandle:
        """Create a transient handle holding the file bytes."""
        pass

    @abstractmethod
    async def trigger(self, handle: DownloadHandle) -> str:
        """Start the download for a handle. Returns where the file landed."""
        pass

    @abstractmethod
    async def release(self, handle: DownloadHandle) -> None:
        """Free the transient handle. Must be safe after trigger or on failure."""
        pass


class DirectoryDownloadSink(DownloadSink):
    """
    Saves downloads into a directory.

    Each file is first written to a hidden temp file (the handle), then
    moved into place under its final name. Existing files are never
    overwritten: ``name.png`` becomes ``name (1).png`` and so on.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    async def materialize(self, data: bytes, filename: str) -> DownloadHandle:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".postgen-", suffix=".part", dir=self.directory)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            raise DeliveryError(f"Could not stage {filename}: {e}", filename) from e
        return DownloadHandle(filename=filename, path=Path(tmp_name))

    async def trigger(self, handle: DownloadHandle) -> str:
        destination = _unique_path(self.directory / handle.filename)
        try:
            os.replace(handle.path, destination)
        except OSError as e:
            raise DeliveryError(f"Could not save {handle.filename}: {e}", handle.filename) from e
        logger.info(f"Downloaded {destination}")
        return str(destination)

    async def release(self, handle: DownloadHandle) -> None:
        handle.path.unlink(missing_ok=True)


def _unique_path(path: Path) -> Path:
    if not path.exists():
        return path
    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem} ({counter}){path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1
