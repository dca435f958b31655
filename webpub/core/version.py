from __future__ import annotations

import subprocess
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path


DISTRIBUTION = "webpub"


def get_webpub_version() -> str:
    """Installed distribution version, else a `git describe` of the source checkout."""
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return _describe_source_checkout() or "dev"


def _describe_source_checkout() -> str | None:
    source_root = Path(__file__).resolve().parents[2]
    try:
        described = subprocess.check_output(
            ["git", "describe", "--tags", "--dirty", "--always"],
            cwd=str(source_root),
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
    except (OSError, subprocess.SubprocessError):
        return None
    if not described:
        return None
    return described[1:] if described.startswith("v") else described
