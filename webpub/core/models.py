
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class PipelineState(str, Enum):
    """States entered by the publish pipeline, in order."""
    ON_DEV = "on_dev"
    BUILT = "built"
    ON_PUBLISH = "on_publish"
    STAGED = "staged"
    COMMITTED = "committed"
    PUBLISHED = "published"
    RESTORED = "restored"


@dataclass
class Artifact:
    """Compiled binary produced by the builder."""
    source_path: str
    published_path: str
    size_bytes: int = 0
    sha256: str | None = None


@dataclass
class BuildRequest:
    """Structured cargo invocation used by builder adapters."""
    crate_name: str
    target: str
    profile: str
    target_dir: str
    published_path: str


@dataclass
class BuildResult:
    """Normalized build response used by the pipeline."""
    ok: bool
    blocked_reason: str | None
    artifact: Artifact | None = None
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0


@dataclass
class GitResult:
    """Outcome of a single git invocation."""
    ok: bool
    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        return self.stdout.strip()

    def describe(self) -> str:
        detail = self.stderr.strip() or self.stdout.strip()
        cmd = " ".join(self.command)
        if detail:
            return f"`{cmd}` exited {self.returncode}: {detail}"
        return f"`{cmd}` exited {self.returncode}"


@dataclass
class StepRecord:
    """One pipeline step as recorded in the run log."""
    name: str
    status: str
    timestamp: str
    detail: str | None = None
    duration_ms: int = 0


@dataclass
class PublishSummary:
    """Result of a pipeline run, successful or not."""
    run_id: str
    development_branch: str | None
    publish_branch: str
    remote: str
    dry_run: bool
    state: PipelineState = PipelineState.ON_DEV
    steps: list[StepRecord] = field(default_factory=list)
    artifact: Artifact | None = None
    published_commit: str | None = None
    error_kind: str | None = None
    error: str | None = None
    run_log: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    def step(self, name: str) -> StepRecord | None:
        for record in self.steps:
            if record.name == name:
                return record
        return None

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "development_branch": self.development_branch,
            "publish_branch": self.publish_branch,
            "remote": self.remote,
            "dry_run": self.dry_run,
            "state": self.state.value,
            "steps": [dict(record.__dict__) for record in self.steps],
            "artifact": dict(self.artifact.__dict__) if self.artifact else None,
            "published_commit": self.published_commit,
            "error_kind": self.error_kind,
            "error": self.error,
        }
