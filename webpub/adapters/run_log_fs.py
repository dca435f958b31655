
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from webpub.core.models import PublishSummary
from webpub.core.redaction import redact_data


def default_run_dir() -> Path:
    return Path.home() / ".cache" / "webpub" / "runs"


@dataclass
class FileSystemRunLog:
    base_dir: str | None = None

    def write(self, summary: PublishSummary) -> dict:
        """Persist step records and the run summary to the filesystem.

        Notes:
            The log lives outside the working tree so that writing it never
            dirties either branch. Records are redacted before writing.
        """
        base = Path(self.base_dir) if self.base_dir else default_run_dir()
        run_dir = base / summary.run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        steps_path = run_dir / "steps.jsonl"
        summary_path = run_dir / "summary.json"

        with steps_path.open("w", encoding="utf-8") as handle:
            for record in summary.steps:
                payload = dict(record.__dict__)
                payload["run_id"] = summary.run_id
                handle.write(json.dumps(redact_data(payload), sort_keys=True) + "\n")

        summary_path.write_text(
            json.dumps(redact_data(summary.to_dict()), indent=2, sort_keys=True),
            encoding="utf-8",
        )

        return {
            "steps": str(steps_path),
            "summary": str(summary_path),
        }
