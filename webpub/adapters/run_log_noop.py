
from __future__ import annotations

from dataclasses import dataclass

from webpub.core.models import PublishSummary


@dataclass
class NoopRunLog:
    def write(self, summary: PublishSummary) -> dict:
        """Discard the run summary; used with --no-run-log and in tests."""
        return {}
