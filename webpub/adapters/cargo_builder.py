
from __future__ import annotations

import hashlib
import logging
import subprocess
import time
from pathlib import Path

from webpub.core.models import Artifact, BuildRequest, BuildResult
from webpub.core.redaction import redact_text


logger = logging.getLogger(__name__)

_TAIL = 2000


class CargoBuilder:
    """Run `cargo build` for a fixed target/profile and locate the output artifact.

    A nonzero cargo exit is a failure even when an older artifact is still on
    disk, so a stale build is never handed to the stager.
    """
    def __init__(self, cargo_path: str, repo_root: str) -> None:
        self.cargo_path = cargo_path
        self.repo_root = repo_root

    def command(self, request: BuildRequest) -> list[str]:
        cmd = [self.cargo_path, "build", "--target", request.target]
        if request.profile == "release":
            cmd.append("--release")
        elif request.profile != "dev":
            cmd.extend(["--profile", request.profile])
        cmd.extend(["--target-dir", request.target_dir])
        return cmd

    def build(self, request: BuildRequest) -> BuildResult:
        """Execute cargo and translate its exit status into a BuildResult.

        Args:
            request (BuildRequest): Target triple, profile and output layout.

        Returns:
            BuildResult: Artifact metadata on success, otherwise a blocked
                reason with the tail of cargo's output.

        Notes:
            Subprocess errors are not raised; the pipeline decides how a
            failed build aborts the run.
        """
        start = time.time()
        cmd = self.command(request)
        logger.info("Building %s for %s (%s)", request.crate_name, request.target, request.profile)
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.repo_root,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            return BuildResult(
                ok=False,
                blocked_reason="toolchain_unavailable",
                stderr=str(exc),
                duration_ms=_elapsed_ms(start),
            )

        stdout = redact_text(proc.stdout[-_TAIL:]) if proc.stdout else ""
        stderr = redact_text(proc.stderr[-_TAIL:]) if proc.stderr else ""
        if proc.returncode != 0:
            return BuildResult(
                ok=False,
                blocked_reason="build_error",
                returncode=proc.returncode,
                stdout=stdout,
                stderr=stderr,
                duration_ms=_elapsed_ms(start),
            )

        output = artifact_path(request)
        if not output.is_file():
            return BuildResult(
                ok=False,
                blocked_reason="artifact_missing",
                returncode=proc.returncode,
                stdout=stdout,
                stderr=stderr,
                duration_ms=_elapsed_ms(start),
            )

        payload = output.read_bytes()
        artifact = Artifact(
            source_path=str(output),
            published_path=request.published_path,
            size_bytes=len(payload),
            sha256=hashlib.sha256(payload).hexdigest(),
        )
        return BuildResult(
            ok=True,
            blocked_reason=None,
            artifact=artifact,
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            duration_ms=_elapsed_ms(start),
        )


def artifact_path(request: BuildRequest) -> Path:
    # cargo names the dev profile directory "debug"
    profile_dir = "debug" if request.profile == "dev" else request.profile
    return Path(request.target_dir) / request.target / profile_dir / f"{request.crate_name}.wasm"


def _elapsed_ms(start: float) -> int:
    return int((time.time() - start) * 1000)
