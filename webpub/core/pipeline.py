
from __future__ import annotations

import logging
import shutil
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from webpub.core.config import PublishConfig
from webpub.core.errors import (
    IOFailure,
    PublishError,
    RemoteFailure,
    RepositoryStateFailure,
    ToolchainFailure,
)
from webpub.core.models import (
    Artifact,
    BuildRequest,
    PipelineState,
    PublishSummary,
    StepRecord,
)
from webpub.ports.builder import Builder
from webpub.ports.repository import Repository
from webpub.ports.run_log import RunLog


logger = logging.getLogger(__name__)

STEP_PREFLIGHT = "preflight"
STEP_BUILD = "build"
STEP_SWITCH = "switch"
STEP_STAGE = "stage"
STEP_COMMIT = "commit"
STEP_PUBLISH = "publish"
STEP_RESTORE = "restore"

MUTATING_STEPS = (STEP_SWITCH, STEP_STAGE, STEP_COMMIT, STEP_PUBLISH, STEP_RESTORE)


class PublishPipeline:
    def __init__(
        self,
        builder: Builder,
        repository: Repository,
        run_log: RunLog,
        config: PublishConfig | None = None,
    ) -> None:
        self.builder = builder
        self.repository = repository
        self.run_log = run_log
        self.config = config or PublishConfig()

    def run(self, dry_run: bool = False) -> PublishSummary:
        """Build the artifact and publish it as the single commit of the publishing branch.

        Args:
            dry_run (bool): When True, runs the preflight and the build only
                and records every repository step as skipped.

        Returns:
            PublishSummary: Step records, final state and published commit.

        Raises:
            PublishError: The typed failure of the first step that failed.
                The run summary is attached as `error.summary`.

        Notes:
            Steps short-circuit on the first failure. Once the publishing
            branch is checked out, the development branch is restored on
            every exit path, including KeyboardInterrupt.
        """
        summary = PublishSummary(
            run_id=new_run_id(),
            development_branch=None,
            publish_branch=self.config.publish_branch,
            remote=self.config.remote,
            dry_run=dry_run,
        )
        try:
            self._execute(summary)
        except PublishError as exc:
            summary.error_kind = exc.kind
            summary.error = str(exc)
            exc.summary = summary
            logger.error("Publish failed at %s: %s", exc.step or "unknown step", exc)
            raise
        except KeyboardInterrupt:
            summary.error_kind = "interrupted"
            summary.error = "interrupted"
            logger.warning("Publish interrupted in state %s", summary.state.value)
            raise
        finally:
            self._persist(summary)

        logger.info(
            "Published %s to %s/%s at %s",
            self.config.published_path,
            self.config.remote,
            self.config.publish_branch,
            summary.published_commit or "unknown commit",
        )
        return summary

    def _execute(self, summary: PublishSummary) -> None:
        development_branch = self._preflight(summary)
        artifact = self._build(summary)
        if summary.dry_run:
            for name in MUTATING_STEPS:
                summary.steps.append(
                    StepRecord(name=name, status="skipped", timestamp=_now(), detail="dry_run")
                )
            logger.info("Dry run: built %s, repository left untouched", artifact.source_path)
            return

        with self._on_publish_branch(summary, development_branch):
            self._stage(summary, artifact)
            self._commit(summary)
            self._publish(summary)

    def _preflight(self, summary: PublishSummary) -> str:
        publish_branch = self.config.publish_branch
        with self._step(summary, STEP_PREFLIGHT) as record:
            current = self.repository.current_branch()
            if not current.ok:
                raise RepositoryStateFailure(
                    f"Cannot determine the current branch (detached HEAD?): {current.describe()}",
                    result=current,
                )
            development_branch = current.output
            summary.development_branch = development_branch
            expected = self.config.development_branch
            if expected and development_branch != expected:
                raise RepositoryStateFailure(
                    f"Expected to start on {expected}, found {development_branch}"
                )
            if development_branch == publish_branch:
                raise RepositoryStateFailure(
                    f"Already on publishing branch {publish_branch}; check out the development branch first"
                )
            if not self.repository.branch_exists(publish_branch):
                raise RepositoryStateFailure(f"Publishing branch {publish_branch} does not exist locally")
            staged = self.repository.staged_paths()
            if not staged.ok:
                raise RepositoryStateFailure(f"Cannot read the index: {staged.describe()}", result=staged)
            if staged.output:
                paths = ", ".join(staged.output.splitlines())
                raise RepositoryStateFailure(
                    f"Staged changes on {development_branch} would be committed to {publish_branch}: {paths}; "
                    "commit or unstage them first",
                    result=staged,
                )
            record.detail = development_branch
        return development_branch

    def _build(self, summary: PublishSummary) -> Artifact:
        request = BuildRequest(
            crate_name=self.config.crate_name,
            target=self.config.target,
            profile=self.config.profile,
            target_dir=str(self.config.resolved_target_dir(self.repository.root)),
            published_path=self.config.published_path,
        )
        with self._step(summary, STEP_BUILD) as record:
            result = self.builder.build(request)
            if not result.ok or result.artifact is None:
                detail = (result.stderr or result.stdout).strip()
                message = f"Build failed ({result.blocked_reason or 'no artifact'})"
                if detail:
                    message = f"{message}: {detail}"
                raise ToolchainFailure(message, result=result)
            record.detail = f"{result.artifact.source_path} sha256={result.artifact.sha256}"
        summary.artifact = result.artifact
        summary.state = PipelineState.BUILT
        return result.artifact

    @contextmanager
    def _on_publish_branch(self, summary: PublishSummary, development_branch: str) -> Iterator[None]:
        publish_branch = self.config.publish_branch
        try:
            with self._step(summary, STEP_SWITCH) as record:
                result = self.repository.checkout(publish_branch)
                if not result.ok:
                    raise RepositoryStateFailure(
                        f"Cannot switch to {publish_branch}: {result.describe()}",
                        result=result,
                    )
                record.detail = publish_branch
        except KeyboardInterrupt:
            # git may have switched before the interrupt arrived
            current = self.repository.current_branch()
            if not current.ok or current.output != development_branch:
                self._restore(summary, development_branch, strict=False)
            raise
        summary.state = PipelineState.ON_PUBLISH
        try:
            yield
        except BaseException:
            self._restore(summary, development_branch, strict=False)
            raise
        self._restore(summary, development_branch, strict=True)

    def _stage(self, summary: PublishSummary, artifact: Artifact) -> None:
        destination = Path(self.repository.root) / artifact.published_path
        with self._step(summary, STEP_STAGE) as record:
            try:
                shutil.copyfile(artifact.source_path, destination)
            except OSError as exc:
                raise IOFailure(f"Cannot copy {artifact.source_path} to {destination}: {exc}") from exc
            result = self.repository.stage_file(artifact.published_path)
            if not result.ok:
                raise RepositoryStateFailure(
                    f"Cannot stage {artifact.published_path}: {result.describe()}",
                    result=result,
                )
            record.detail = artifact.published_path
        summary.state = PipelineState.STAGED

    def _commit(self, summary: PublishSummary) -> None:
        published_path = self.config.published_path
        with self._step(summary, STEP_COMMIT) as record:
            staged = self.repository.staged_paths()
            if not staged.ok:
                raise RepositoryStateFailure(
                    f"Cannot read the {self.config.publish_branch} index: {staged.describe()}",
                    result=staged,
                )
            unexpected = [path for path in staged.output.splitlines() if path != published_path]
            if unexpected:
                raise RepositoryStateFailure(
                    f"Refusing to amend {self.config.publish_branch}: unrelated staged paths {', '.join(unexpected)}",
                    result=staged,
                )
            if not staged.output:
                record.status = "skipped"
                record.detail = "artifact unchanged"
                logger.info("Artifact unchanged; keeping the existing %s commit", self.config.publish_branch)
            else:
                result = self.repository.amend_commit(self.config.commit_message)
                if not result.ok:
                    raise RepositoryStateFailure(
                        f"Cannot amend the {self.config.publish_branch} commit: {result.describe()}",
                        result=result,
                    )
                record.detail = self.config.commit_message
        summary.state = PipelineState.COMMITTED

    def _publish(self, summary: PublishSummary) -> None:
        remote = self.config.remote
        branch = self.config.publish_branch
        with self._step(summary, STEP_PUBLISH) as record:
            result = self.repository.push_force(remote, branch)
            if not result.ok:
                raise RemoteFailure(
                    f"Cannot push {branch} to {remote}: {result.describe()}",
                    result=result,
                )
            record.detail = f"{remote}/{branch}"
        head = self.repository.head_commit()
        if head.ok:
            summary.published_commit = head.output
        summary.state = PipelineState.PUBLISHED

    def _restore(self, summary: PublishSummary, development_branch: str, strict: bool) -> None:
        try:
            with self._step(summary, STEP_RESTORE) as record:
                result = self.repository.checkout(development_branch)
                if not result.ok:
                    raise RepositoryStateFailure(
                        f"Cannot return to {development_branch}; working tree left on "
                        f"{self.config.publish_branch}: {result.describe()}",
                        result=result,
                    )
                record.detail = development_branch
        except RepositoryStateFailure as exc:
            if strict:
                raise
            logger.error("%s", exc)
            return
        summary.state = PipelineState.RESTORED

    @contextmanager
    def _step(self, summary: PublishSummary, name: str) -> Iterator[StepRecord]:
        start = time.time()
        record = StepRecord(name=name, status="success", timestamp=_now())
        logger.debug("Step %s started", name)
        try:
            yield record
        except BaseException as exc:
            record.status = "failed"
            record.detail = str(exc) or type(exc).__name__
            if isinstance(exc, PublishError) and exc.step is None:
                exc.step = name
            raise
        finally:
            record.duration_ms = int((time.time() - start) * 1000)
            summary.steps.append(record)
            logger.debug("Step %s %s in %sms", name, record.status, record.duration_ms)

    def _persist(self, summary: PublishSummary) -> None:
        try:
            summary.run_log = self.run_log.write(summary)
        except OSError as exc:
            logger.warning("Unable to write run log for %s: %s", summary.run_id, exc)


def new_run_id() -> str:
    now = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"{now}-{uuid.uuid4().hex[:8]}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
