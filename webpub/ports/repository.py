
from __future__ import annotations

from typing import Protocol

from webpub.core.models import GitResult


class Repository(Protocol):
    """Working tree boundary.

    Every operation returns a GitResult; implementations do not raise on a
    failed git invocation.
    """
    root: str

    def current_branch(self) -> GitResult:
        """Return the checked-out branch name in `stdout`; fails on detached HEAD."""
        ...

    def branch_exists(self, branch: str) -> bool:
        ...

    def checkout(self, branch: str) -> GitResult:
        ...

    def stage_file(self, path: str) -> GitResult:
        """Stage a path relative to the repository root."""
        ...

    def staged_paths(self) -> GitResult:
        """List paths that differ between the index and HEAD, one per line in `stdout`."""
        ...

    def amend_commit(self, message: str) -> GitResult:
        """Replace the tip commit of the current branch with the staged tree."""
        ...

    def push_force(self, remote: str, branch: str) -> GitResult:
        """Overwrite the remote branch with the local one and track it."""
        ...

    def head_commit(self) -> GitResult:
        ...
