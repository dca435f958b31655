
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml


DEFAULT_CONFIG_NAMES = ("webpub.yaml", "webpub.yml", "webpub.json")


@dataclass
class PublishConfig:
    crate_name: str = "solsys"
    target: str = "wasm32-unknown-unknown"
    profile: str = "release"
    publish_branch: str = "web"
    development_branch: str | None = None
    remote: str = "origin"
    commit_message: str = "web"
    published_path: str = "solsys.wasm"
    target_dir: str | None = None
    run_dir: str | None = None

    @staticmethod
    def from_file(path: str) -> "PublishConfig":
        ext = Path(path).suffix.lower()
        with open(path, "r", encoding="utf-8") as handle:
            if ext in {".yaml", ".yml"}:
                data = yaml.safe_load(handle)
            elif ext == ".json":
                data = json.load(handle)
            else:
                raise ValueError(f"Unsupported config file extension: {ext}")

        return PublishConfig.from_dict(data or {})

    @staticmethod
    def from_dict(data: dict) -> "PublishConfig":
        if not isinstance(data, dict):
            raise ValueError("Config root must be a mapping")
        defaults = PublishConfig()
        crate_name = str(data.get("crate_name", defaults.crate_name))
        return PublishConfig(
            crate_name=crate_name,
            target=str(data.get("target", defaults.target)),
            profile=str(data.get("profile", defaults.profile)),
            publish_branch=str(data.get("publish_branch", defaults.publish_branch)),
            development_branch=data.get("development_branch"),
            remote=str(data.get("remote", defaults.remote)),
            commit_message=str(data.get("commit_message", defaults.commit_message)),
            published_path=str(data.get("published_path", f"{crate_name}.wasm")),
            target_dir=data.get("target_dir"),
            run_dir=data.get("run_dir"),
        )

    @staticmethod
    def discover(repo_root: str) -> "PublishConfig":
        """Load the first webpub config found at the repository root, else defaults."""
        for name in DEFAULT_CONFIG_NAMES:
            candidate = Path(repo_root) / name
            if candidate.is_file():
                return PublishConfig.from_file(str(candidate))
        return PublishConfig()

    def resolved_target_dir(self, repo_root: str) -> Path:
        """Cargo output root, honouring CARGO_TARGET_DIR when not configured."""
        value = self.target_dir or os.environ.get("CARGO_TARGET_DIR") or "target"
        path = Path(value)
        if not path.is_absolute():
            path = Path(repo_root) / path
        return path

    def snapshot(self) -> dict:
        return {
            "crate_name": self.crate_name,
            "target": self.target,
            "profile": self.profile,
            "publish_branch": self.publish_branch,
            "development_branch": self.development_branch,
            "remote": self.remote,
            "commit_message": self.commit_message,
            "published_path": self.published_path,
            "target_dir": self.target_dir,
            "run_dir": self.run_dir,
        }
