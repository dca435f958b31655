
from __future__ import annotations

import os
import shutil
import sys

from dataclasses import dataclass
from pathlib import Path

from webpub.core.errors import ToolchainFailure


KNOWN_TOOLS = {"cargo", "git"}
ENV_OVERRIDES = {"cargo": "WEBPUB_CARGO", "git": "WEBPUB_GIT"}


class ToolResolutionError(ToolchainFailure):
    """Raised when a required executable cannot be resolved."""


@dataclass(frozen=True)
class ResolvedTool:
    tool_name: str
    path: str
    source: str


def resolve_tool_path(tool_name: str, explicit_path: str | None = None) -> ResolvedTool:
    """Resolve a runnable executable for an external collaborator.

    Resolution order:
    1. Explicit CLI path override
    2. Environment override (WEBPUB_CARGO / WEBPUB_GIT)
    3. PATH lookup
    4. rustup install location ($CARGO_HOME/bin, ~/.cargo/bin), cargo only
    """
    if tool_name not in KNOWN_TOOLS:
        raise ValueError(f"Unsupported tool: {tool_name}")

    binary_name = _binary_name(tool_name)
    searched: list[str] = []

    if explicit_path:
        path = Path(explicit_path)
        searched.append(str(path))
        if _is_runnable(path):
            return ResolvedTool(tool_name=tool_name, path=str(path.resolve()), source="explicit")
        raise ToolResolutionError(f"Tool path not runnable: {path}", step="resolve")

    env_value = os.environ.get(ENV_OVERRIDES[tool_name])
    if env_value:
        path = Path(env_value)
        searched.append(str(path))
        if _is_runnable(path):
            return ResolvedTool(tool_name=tool_name, path=str(path.resolve()), source="env")

    on_path = shutil.which(binary_name)
    searched.append("PATH")
    if on_path:
        return ResolvedTool(tool_name=tool_name, path=on_path, source="path")

    if tool_name == "cargo":
        rustup_bin = _cargo_home() / "bin" / binary_name
        searched.append(str(rustup_bin))
        if _is_runnable(rustup_bin):
            return ResolvedTool(tool_name=tool_name, path=str(rustup_bin.resolve()), source="cargo-home")

    searched_str = ", ".join(searched)
    raise ToolResolutionError(
        f"Unable to locate {tool_name}. searched=[{searched_str}]. "
        f"Install it, pass --{tool_name}-path, or set {ENV_OVERRIDES[tool_name]}.",
        step="resolve",
    )


def _binary_name(tool_name: str) -> str:
    if sys.platform.startswith("win"):
        return f"{tool_name}.exe"
    return tool_name


def _cargo_home() -> Path:
    value = os.environ.get("CARGO_HOME")
    if value:
        return Path(value)
    return Path.home() / ".cargo"


def _is_runnable(path: Path) -> bool:
    if not path.exists() or not path.is_file():
        return False
    if sys.platform.startswith("win"):
        return True
    return os.access(path, os.X_OK)
