
from __future__ import annotations

from typing import Protocol

from webpub.core.models import PublishSummary


class RunLog(Protocol):
    """Persistence boundary for per-run step records."""
    def write(self, summary: PublishSummary) -> dict:
        """Persist a run summary and return artifact locations.

        Args:
            summary (PublishSummary): Summary produced by the pipeline,
                including step records.

        Returns:
            dict: Paths for the step log and summary (empty when nothing is written).
        """
        ...
