"""Tests for configuration loading."""

from prcheck_core.config import load_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["check_name"] == "prcheck"
    assert config["stale_after_minutes"] == 10
    assert config["integrated_label"] == "integrated"
    assert config["issue_repo"] is None
    assert config["store"] == "github"
    assert config["rules"] == []


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".prcheck.yml"
    cfg.write_text("check_name: jcheck\nstale_after_minutes: 30\n")
    config = load_config(config_path=str(cfg))
    assert config["check_name"] == "jcheck"
    assert config["stale_after_minutes"] == 30


def test_rules_loaded(tmp_path):
    cfg = tmp_path / ".prcheck.yml"
    cfg.write_text("rules:\n  - make check\n  - ./gradlew test\n")
    config = load_config(config_path=str(cfg))
    assert config["rules"] == ["make check", "./gradlew test"]


def test_default_rules_not_shared_between_loads(tmp_path):
    first = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    first["rules"].append("make check")
    second = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert second["rules"] == []


def test_empty_config_file(tmp_path):
    cfg = tmp_path / ".prcheck.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["check_name"] == "prcheck"


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".prcheck.yml"
    cfg.write_text("store: sqlite\n")
    config = load_config(config_path=str(cfg), cli_overrides={"store": "github"})
    assert config["store"] == "github"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".prcheck.yml"
    cfg.write_text("store: sqlite\n")
    config = load_config(config_path=str(cfg), cli_overrides={"store": None})
    assert config["store"] == "sqlite"


def test_env_token_loaded(monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] == "gh-token"


def test_env_token_missing(monkeypatch, tmp_path):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] is None
