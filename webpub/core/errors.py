
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from webpub.core.models import BuildResult, GitResult, PublishSummary


class PublishError(RuntimeError):
    """Base class for failures that abort the publish pipeline.

    Attributes:
        step (str | None): Pipeline step that failed.
        result (GitResult | BuildResult | None): Subprocess result behind the failure.
        summary (PublishSummary | None): Run summary, attached once the error
            leaves the pipeline.
    """
    kind = "publish_error"
    exit_code = 1

    def __init__(
        self,
        message: str,
        step: str | None = None,
        result: GitResult | BuildResult | None = None,
    ) -> None:
        super().__init__(message)
        self.step = step
        self.result = result
        self.summary: PublishSummary | None = None


class ToolchainFailure(PublishError):
    """Raised when the compiler is unavailable or the build fails."""
    kind = "toolchain"
    exit_code = 3


class RepositoryStateFailure(PublishError):
    """Raised when the working tree cannot be moved or updated as required."""
    kind = "repository_state"
    exit_code = 4


class IOFailure(PublishError):
    """Raised when the artifact cannot be copied into the working tree."""
    kind = "io"
    exit_code = 5


class RemoteFailure(PublishError):
    """Raised when the remote rejects the push or cannot be reached."""
    kind = "remote"
    exit_code = 6
