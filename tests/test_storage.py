"""Tests for mews.storage — filesystem writes."""

from pathlib import Path

import pytest

from mews._errors import ExportError
from mews.storage import FileSystemStorage


class TestFileSystemStorage:
    """FileSystemStorage writes files off the event loop."""

    @pytest.mark.asyncio
    async def test_writes_content(self, tmp_path: Path) -> None:
        destination = tmp_path / "index.html"
        size = await FileSystemStorage().write(destination, "<h1>Hi</h1>")
        assert destination.read_text() == "<h1>Hi</h1>"
        assert size == len("<h1>Hi</h1>")

    @pytest.mark.asyncio
    async def test_creates_parent_dirs(self, tmp_path: Path) -> None:
        destination = tmp_path / "blog" / "first" / "index.html"
        await FileSystemStorage().write(destination, "x")
        assert destination.is_file()

    @pytest.mark.asyncio
    async def test_encoding(self, tmp_path: Path) -> None:
        destination = tmp_path / "page.html"
        size = await FileSystemStorage().write(destination, "café", "latin-1")
        assert destination.read_bytes() == "café".encode("latin-1")
        assert size == 4

    @pytest.mark.asyncio
    async def test_overwrites(self, tmp_path: Path) -> None:
        destination = tmp_path / "a.html"
        destination.write_text("old")
        await FileSystemStorage().write(destination, "new")
        assert destination.read_text() == "new"

    @pytest.mark.asyncio
    async def test_unencodable_content(self, tmp_path: Path) -> None:
        with pytest.raises(ExportError, match="Failed to write"):
            await FileSystemStorage().write(tmp_path / "a.html", "snow ☃", "ascii")

    @pytest.mark.asyncio
    async def test_unknown_encoding(self, tmp_path: Path) -> None:
        with pytest.raises(ExportError):
            await FileSystemStorage().write(tmp_path / "a.html", "x", "no-such-codec")

    @pytest.mark.asyncio
    async def test_parent_is_a_file(self, tmp_path: Path) -> None:
        (tmp_path / "blog").write_text("not a dir")
        with pytest.raises(ExportError):
            await FileSystemStorage().write(tmp_path / "blog" / "index.html", "x")
