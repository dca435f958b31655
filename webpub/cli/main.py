from __future__ import annotations

"""webpub command-line interface entrypoint."""

import argparse
import json
import logging
import os
import sys

from pathlib import Path

import yaml

from webpub.adapters.cargo_builder import CargoBuilder
from webpub.adapters.git_cli import GitCliRepository
from webpub.adapters.run_log_fs import FileSystemRunLog
from webpub.adapters.run_log_noop import NoopRunLog
from webpub.core.config import PublishConfig
from webpub.core.errors import PublishError
from webpub.core.pipeline import PublishPipeline
from webpub.core.tool_resolver import ToolResolutionError, resolve_tool_path
from webpub.core.version import get_webpub_version


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean from the environment with a safe default.

    Notes:
        CLI flags can still override this; env values only provide a baseline
        for convenience in automation.
    """
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes"}


def _parse_bool(value: str | None) -> bool:
    """Parse optional boolean flags that allow an implicit True value."""
    if value is None:
        return True
    return value.lower() in {"1", "true", "yes"}


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _load_config(args: argparse.Namespace, repo_root: str) -> PublishConfig:
    if args.config:
        return PublishConfig.from_file(args.config)
    return PublishConfig.discover(repo_root)


def publish_command(args: argparse.Namespace) -> int:
    """Build the artifact and publish it to the publishing branch."""
    _configure_logging(args.verbose)
    repo_root = str(Path(args.repo).resolve())
    try:
        config = _load_config(args, repo_root)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return 2

    try:
        cargo = resolve_tool_path("cargo", args.cargo_path)
        git = resolve_tool_path("git", args.git_path)
    except ToolResolutionError as exc:
        print(str(exc), file=sys.stderr)
        return exc.exit_code

    run_log = NoopRunLog() if args.no_run_log else FileSystemRunLog(base_dir=args.run_dir or config.run_dir)
    pipeline = PublishPipeline(
        builder=CargoBuilder(cargo.path, repo_root),
        repository=GitCliRepository(repo_root, git.path),
        run_log=run_log,
        config=config,
    )
    try:
        summary = pipeline.run(dry_run=args.dry_run)
    except PublishError as exc:
        state = exc.summary.state.value if exc.summary else "unknown"
        print(f"Publish failed ({exc.kind}) at {exc.step}: {exc} [state={state}]", file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        print("Publish interrupted", file=sys.stderr)
        return 130

    mode = "Dry run complete" if summary.dry_run else "Publish complete"
    print(
        f"{mode}: "
        f"run_id={summary.run_id} branch={summary.publish_branch} "
        f"commit={summary.published_commit or '-'} restored_to={summary.development_branch} "
        f"state={summary.state.value} log={summary.run_log.get('summary', '-')}"
    )
    return 0


def config_command(args: argparse.Namespace) -> int:
    """Print the resolved configuration as JSON."""
    repo_root = str(Path(args.repo).resolve())
    try:
        config = _load_config(args, repo_root)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(config.snapshot(), indent=2, sort_keys=True))
    return 0


def main() -> int:
    """CLI entrypoint and command registration."""
    parser = argparse.ArgumentParser(prog="webpub")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_webpub_version()}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    publish_parser = subparsers.add_parser("publish", help="Build and publish the wasm artifact")
    publish_parser.add_argument("--config", default=None, help="Path to webpub.yaml (defaults to repo root)")
    publish_parser.add_argument("--repo", default=".", help="Repository root")
    publish_parser.add_argument(
        "--dry-run",
        nargs="?",
        const=True,
        default=_env_bool("WEBPUB_DRY_RUN", False),
        type=_parse_bool,
        help="Build only, leave the repository untouched (true/false)",
    )
    publish_parser.add_argument("--cargo-path", default=None, help="Path to the cargo executable")
    publish_parser.add_argument("--git-path", default=None, help="Path to the git executable")
    publish_parser.add_argument("--run-dir", default=None, help="Directory for run logs")
    publish_parser.add_argument("--no-run-log", action="store_true", help="Do not persist run logs")
    publish_parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    publish_parser.set_defaults(func=publish_command)

    config_parser = subparsers.add_parser("config", help="Show the resolved configuration")
    config_parser.add_argument("--config", default=None, help="Path to webpub.yaml (defaults to repo root)")
    config_parser.add_argument("--repo", default=".", help="Repository root")
    config_parser.set_defaults(func=config_command)

    args = parser.parse_args()
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
