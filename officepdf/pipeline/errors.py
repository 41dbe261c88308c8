"""Failures surfaced by the pipeline coordinator.

The set is closed: every error leaving :class:`PipelineCoordinator` is one
of :class:`ClientInputError`, :class:`StageFailure` or
:class:`NamingFailure`. Transports map the first to a client error and the
other two to an internal error.
"""

from __future__ import annotations

from pathlib import Path

from ..exceptions import OfficePdfError
from .models import Stage


class PipelineError(OfficePdfError):
    """Base class for coordinator failures."""

    client_error = False


class ClientInputError(PipelineError):
    """The request's own parameters are not supported by the converter."""

    client_error = True

    def __init__(self, detail: str, *, value: object, file: Path | None = None) -> None:
        self.detail = detail
        self.value = value
        self.file = file
        super().__init__(detail)


class StageFailure(PipelineError):
    """A collaborator failed for a reason not attributable to the caller."""

    def __init__(self, stage: Stage, cause: BaseException, *, file: Path | None = None) -> None:
        self.stage = stage
        self.file = file
        self.cause = cause
        location = f" ({file.name})" if file is not None else ""
        super().__init__(f"{stage.value} failed{location}: {cause}")


class NamingFailure(PipelineError):
    """Renaming the final outputs failed after all stages succeeded."""

    def __init__(self, file: Path, cause: BaseException) -> None:
        self.stage = Stage.RENAME
        self.file = file
        self.cause = cause
        super().__init__(f"rename output path {file.name}: {cause}")


__all__ = [
    "ClientInputError",
    "NamingFailure",
    "PipelineError",
    "StageFailure",
]
