"""Storage — the awaited write capability at the end of the pipeline."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol

from mews._errors import ExportError


class Storage(Protocol):
    """Persists rendered content at a destination path."""

    async def write(self, destination: Path, content: str, encoding: str = "utf-8") -> int: ...


class FileSystemStorage:
    """Write output files to disk, creating parent directories as needed.

    The blocking write runs in a worker thread so concurrent units of a
    batch keep interleaving while files are written.

    """

    __slots__ = ()

    async def write(self, destination: Path, content: str, encoding: str = "utf-8") -> int:
        """Write *content* to *destination* and return the number of bytes written.

        Raises:
            ExportError: If the file cannot be written.

        """
        return await asyncio.to_thread(self._write, Path(destination), content, encoding)

    @staticmethod
    def _write(destination: Path, content: str, encoding: str) -> int:
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            data = content.encode(encoding)
            destination.write_bytes(data)
        except (OSError, LookupError, UnicodeEncodeError) as exc:
            msg = f"Failed to write {destination}: {exc}"
            raise ExportError(msg) from exc
        return len(data)
