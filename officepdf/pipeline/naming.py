"""Naming of multi-file results delivered as an archive."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from .errors import NamingFailure
from .interfaces import PathAllocator


def output_name(input_path: Path, suffix: str) -> str:
    """``document.docx`` with suffix ``.pdf`` becomes ``document.docx.pdf``."""

    return f"{Path(input_path).name}{suffix}"


def rename_outputs(
    allocator: PathAllocator,
    outputs: Sequence[Path],
    inputs: Sequence[Path],
    suffix: str,
) -> list[Path]:
    """Rename each output after its source document, keeping the order.

    Either every output is renamed or :class:`NamingFailure` is raised.
    """

    if len(outputs) != len(inputs):
        raise ValueError(
            f"Cannot name {len(outputs)} output(s) after {len(inputs)} input(s)"
        )

    names = [output_name(input_path, suffix) for input_path in inputs]
    seen: set[str] = set()
    for output_path, name in zip(outputs, names):
        if name in seen:
            raise NamingFailure(output_path, ValueError(f"duplicate output name {name!r}"))
        seen.add(name)

    renamed: list[Path] = []
    for output_path, name in zip(outputs, names):
        try:
            renamed.append(allocator.rename(output_path, name))
        except Exception as exc:
            raise NamingFailure(output_path, exc) from exc
    return renamed


__all__ = ["output_name", "rename_outputs"]
