
from __future__ import annotations

import logging
import subprocess

from webpub.core.models import GitResult
from webpub.core.redaction import redact_text


logger = logging.getLogger(__name__)

_TAIL = 2000


class GitCliRepository:
    """Repository port backed by the `git` executable.

    Each method runs one git command in the repository root and reports the
    outcome as a GitResult. A nonzero exit is returned, never raised, so the
    pipeline alone decides which failures abort a run.
    """
    def __init__(self, root: str, git_path: str = "git") -> None:
        self.root = root
        self.git_path = git_path

    def current_branch(self) -> GitResult:
        # symbolic-ref exits nonzero on a detached HEAD
        return self._run("symbolic-ref", "--quiet", "--short", "HEAD")

    def branch_exists(self, branch: str) -> bool:
        return self._run("show-ref", "--verify", "--quiet", f"refs/heads/{branch}").ok

    def checkout(self, branch: str) -> GitResult:
        return self._run("checkout", branch)

    def stage_file(self, path: str) -> GitResult:
        # the artifact is often covered by a *.wasm ignore rule
        return self._run("add", "--force", "--", path)

    def staged_paths(self) -> GitResult:
        # one path per line in stdout; an empty listing means a clean index
        return self._run("diff", "--cached", "--name-only")

    def amend_commit(self, message: str) -> GitResult:
        return self._run("commit", "--amend", "-m", message)

    def push_force(self, remote: str, branch: str) -> GitResult:
        return self._run("push", "--set-upstream", remote, branch, "--force")

    def head_commit(self) -> GitResult:
        return self._run("rev-parse", "HEAD")

    def _run(self, *args: str) -> GitResult:
        cmd = [self.git_path, *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.root,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            return GitResult(ok=False, command=["git", *args], returncode=-1, stderr=str(exc))

        stdout = redact_text(proc.stdout[-_TAIL:]) if proc.stdout else ""
        stderr = redact_text(proc.stderr[-_TAIL:]) if proc.stderr else ""
        return GitResult(
            ok=proc.returncode == 0,
            command=["git", *args],
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
        )
