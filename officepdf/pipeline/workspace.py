"""Request scoped working directory handing out output paths."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from tempfile import TemporaryDirectory

from ..core.utils import get_logger

LOGGER = get_logger("officepdf.workspace")


def _logical_name(name: str) -> str:
    candidate = Path(name).name
    if not candidate or candidate != name or candidate in {".", ".."}:
        raise ValueError(f"Invalid file name: {name!r}")
    return candidate


class RequestWorkspace:
    """Temporary directory owning every file of a single request.

    Generated names are uuid4 based so concurrent workspaces, even when they
    share a parent directory, never collide.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        if root is not None:
            Path(root).mkdir(parents=True, exist_ok=True)
        self._temp_dir = TemporaryDirectory(prefix="officepdf-", dir=root)
        self.directory = Path(self._temp_dir.name)
        self.inputs_dir = self.directory / "inputs"
        self.inputs_dir.mkdir()

    def __enter__(self) -> "RequestWorkspace":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()

    def add_input(self, filename: str, data: bytes) -> Path:
        """Store an uploaded document under its own (base) name."""

        path = self.inputs_dir / _logical_name(Path(filename).name)
        if path.exists():
            raise ValueError(f"Duplicate input file name: {path.name}")
        path.write_bytes(data)
        return path

    def generate_path(self, extension: str) -> Path:
        if extension and not extension.startswith("."):
            extension = f".{extension}"
        return self.directory / f"{uuid.uuid4().hex}{extension}"

    def rename(self, path: Path, logical_name: str) -> Path:
        target = self.directory / _logical_name(logical_name)
        os.replace(path, target)
        LOGGER.debug("Renamed %s to %s", path.name, target.name)
        return target

    def cleanup(self) -> None:
        self._temp_dir.cleanup()


__all__ = ["RequestWorkspace"]
