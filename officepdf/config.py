"""Environment driven configuration for :mod:`officepdf`."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping

from .core.utils import which

LIBREOFFICE_EXECUTABLES = ("soffice", "libreoffice")
GHOSTSCRIPT_EXECUTABLES = ("gs", "gswin64c", "gswin32c")
DEFAULT_PDF_ENGINES = ("pypdf", "ghostscript", "libreoffice")
KNOWN_PDF_ENGINES = frozenset(DEFAULT_PDF_ENGINES)


@dataclass(frozen=True)
class Settings:
    """Runtime settings shared by the HTTP application and the CLI."""

    libreoffice_bin: str | None = None
    ghostscript_bin: str | None = None
    conversion_timeout: float = 300.0
    work_dir: Path | None = None
    pdf_engines: tuple[str, ...] = DEFAULT_PDF_ENGINES
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        timeout_raw = env.get("OFFICEPDF_CONVERSION_TIMEOUT", "300")
        try:
            timeout = float(timeout_raw)
        except ValueError as exc:
            raise ValueError(
                f"OFFICEPDF_CONVERSION_TIMEOUT must be a number, got {timeout_raw!r}"
            ) from exc
        if timeout <= 0:
            raise ValueError("OFFICEPDF_CONVERSION_TIMEOUT must be positive")

        engines_raw = env.get("OFFICEPDF_PDF_ENGINES")
        if engines_raw:
            engines = tuple(name.strip().lower() for name in engines_raw.split(",") if name.strip())
            unknown = [name for name in engines if name not in KNOWN_PDF_ENGINES]
            if unknown:
                raise ValueError(f"OFFICEPDF_PDF_ENGINES contains unknown engines: {', '.join(unknown)}")
        else:
            engines = DEFAULT_PDF_ENGINES

        work_dir_raw = env.get("OFFICEPDF_WORK_DIR")

        return cls(
            libreoffice_bin=env.get("OFFICEPDF_LIBREOFFICE_BIN") or which(LIBREOFFICE_EXECUTABLES),
            ghostscript_bin=env.get("OFFICEPDF_GHOSTSCRIPT_BIN") or which(GHOSTSCRIPT_EXECUTABLES),
            conversion_timeout=timeout,
            work_dir=Path(work_dir_raw).expanduser() if work_dir_raw else None,
            pdf_engines=engines,
            log_level=env.get("OFFICEPDF_LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


__all__ = ["Settings", "get_settings", "DEFAULT_PDF_ENGINES"]
