import shutil
import subprocess
import sys

from dataclasses import dataclass
from pathlib import Path

import pytest


WASM_BYTES = b"\x00asm\x01\x00\x00\x00solsys-build-1"

FAKE_CARGO = """#!/bin/sh
if [ -n "$FAKE_CARGO_FAIL" ]; then
  echo "error[E0425]: cannot find value" >&2
  exit 101
fi
while [ $# -gt 0 ]; do
  case "$1" in
    --target-dir) shift; dir="$1" ;;
    --target) shift; triple="$1" ;;
  esac
  shift
done
mkdir -p "$dir/$triple/release"
cat "$FAKE_CARGO_OUTPUT" > "$dir/$triple/release/solsys.wasm"
"""


def git(cwd: Path, *args: str) -> str:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout.strip()


def git_bytes(cwd: Path, *args: str) -> bytes:
    return subprocess.run(["git", *args], cwd=str(cwd), capture_output=True, check=True).stdout


@dataclass
class GitFixture:
    work: Path
    remote: Path
    cargo: Path
    wasm_source: Path

    def set_wasm(self, payload: bytes) -> None:
        self.wasm_source.write_bytes(payload)


requires_git = pytest.mark.skipif(
    shutil.which("git") is None or sys.platform.startswith("win"),
    reason="git and a POSIX shell are required",
)


@pytest.fixture
def git_project(tmp_path, monkeypatch) -> GitFixture:
    """A `master` checkout plus a single-commit `web` branch pushed to a bare remote."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "webpub tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "tests@example.invalid")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "webpub tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "tests@example.invalid")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / "gitconfig"))
    monkeypatch.delenv("CARGO_TARGET_DIR", raising=False)

    remote = tmp_path / "remote.git"
    work = tmp_path / "work"
    work.mkdir()
    git(tmp_path, "init", "--bare", str(remote))
    git(work, "init")
    git(work, "symbolic-ref", "HEAD", "refs/heads/master")
    (work / ".gitignore").write_text("target/\n", encoding="utf-8")
    (work / "README.md").write_text("solsys\n", encoding="utf-8")
    git(work, "add", ".gitignore", "README.md")
    git(work, "commit", "-m", "initial")
    git(work, "branch", "web")
    git(work, "remote", "add", "origin", str(remote))
    git(work, "push", "origin", "master", "web")

    cargo = tmp_path / "bin" / "cargo"
    cargo.parent.mkdir()
    cargo.write_text(FAKE_CARGO, encoding="utf-8")
    cargo.chmod(0o755)

    wasm_source = tmp_path / "build-output.wasm"
    wasm_source.write_bytes(WASM_BYTES)
    monkeypatch.setenv("FAKE_CARGO_OUTPUT", str(wasm_source))
    monkeypatch.delenv("FAKE_CARGO_FAIL", raising=False)
    return GitFixture(work=work, remote=remote, cargo=cargo, wasm_source=wasm_source)
