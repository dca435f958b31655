import json

import pytest

from webpub.core.config import PublishConfig


def test_defaults_match_publishing_constants() -> None:
    config = PublishConfig()

    assert config.target == "wasm32-unknown-unknown"
    assert config.profile == "release"
    assert config.publish_branch == "web"
    assert config.remote == "origin"
    assert config.commit_message == "web"
    assert config.published_path == "solsys.wasm"
    assert config.development_branch is None


def test_from_yaml_derives_published_path_from_crate(tmp_path) -> None:
    path = tmp_path / "webpub.yaml"
    path.write_text(
        """
crate_name: orbits
publish_branch: gh-pages
development_branch: main
""",
        encoding="utf-8",
    )

    config = PublishConfig.from_file(str(path))

    assert config.crate_name == "orbits"
    assert config.published_path == "orbits.wasm"
    assert config.publish_branch == "gh-pages"
    assert config.development_branch == "main"
    assert config.commit_message == "web"


def test_from_json(tmp_path) -> None:
    path = tmp_path / "webpub.json"
    path.write_text(json.dumps({"remote": "upstream", "published_path": "dist/app.wasm"}), encoding="utf-8")

    config = PublishConfig.from_file(str(path))

    assert config.remote == "upstream"
    assert config.published_path == "dist/app.wasm"


def test_empty_yaml_uses_defaults(tmp_path) -> None:
    path = tmp_path / "webpub.yml"
    path.write_text("", encoding="utf-8")

    assert PublishConfig.from_file(str(path)) == PublishConfig()


def test_unsupported_extension_is_rejected(tmp_path) -> None:
    path = tmp_path / "webpub.toml"
    path.write_text("crate_name = 'x'\n", encoding="utf-8")

    with pytest.raises(ValueError):
        PublishConfig.from_file(str(path))


def test_non_mapping_root_is_rejected(tmp_path) -> None:
    path = tmp_path / "webpub.yaml"
    path.write_text("- web\n- master\n", encoding="utf-8")

    with pytest.raises(ValueError):
        PublishConfig.from_file(str(path))


def test_discover_prefers_repo_root_file(tmp_path) -> None:
    (tmp_path / "webpub.yaml").write_text("remote: mirror\n", encoding="utf-8")

    assert PublishConfig.discover(str(tmp_path)).remote == "mirror"
    assert PublishConfig.discover(str(tmp_path / "elsewhere")) == PublishConfig()


def test_target_dir_honours_cargo_target_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CARGO_TARGET_DIR", str(tmp_path / "shared-target"))

    assert PublishConfig().resolved_target_dir(str(tmp_path / "repo")) == tmp_path / "shared-target"
    configured = PublishConfig(target_dir="build")
    assert configured.resolved_target_dir(str(tmp_path / "repo")) == tmp_path / "repo" / "build"


def test_target_dir_defaults_to_repo_target(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("CARGO_TARGET_DIR", raising=False)

    assert PublishConfig().resolved_target_dir(str(tmp_path)) == tmp_path / "target"
