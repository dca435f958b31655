
from __future__ import annotations

from typing import Protocol

from webpub.core.models import BuildRequest, BuildResult


class Builder(Protocol):
    """Compiler boundary that produces the publishable artifact."""
    def build(self, request: BuildRequest) -> BuildResult:
        """Compile the artifact described by the request.

        Args:
            request (BuildRequest): Target, profile and output layout.

        Returns:
            BuildResult: Normalized outcome. Failures are reported through
                `ok`/`blocked_reason`, not raised.
        """
        ...
