from __future__ import annotations

import copy

import pytest

from markrec.config import (
    DEFAULT_CONFIG,
    ConfigError,
    load_config,
    load_settings,
)

FULL_TOML = """
[user]
id = "alice"
cookie = "bid=abc"

[result]
media_type = "book"
sort = "rate"
min_mention = 2
min_score = 7.5

[http]
max_concurrency = 8
"""


def _config(**result) -> dict:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg["user"].update(id="alice", cookie="bid=abc")
    cfg["result"].update(result)
    return cfg


# ---------- load_config ----------


def test_load_config_merges_file_over_defaults(tmp_path):
    path = tmp_path / "markrec.toml"
    path.write_text(FULL_TOML, encoding="utf-8")

    cfg = load_config(path)
    assert cfg["user"] == {"id": "alice", "cookie": "bid=abc"}
    assert cfg["result"]["media_type"] == "book"
    assert cfg["result"]["min_score"] == 7.5
    assert cfg["http"]["max_concurrency"] == 8
    # untouched defaults survive the merge
    assert cfg["http"]["user_agent"] == DEFAULT_CONFIG["http"]["user_agent"]


def test_load_config_does_not_mutate_defaults(tmp_path):
    path = tmp_path / "markrec.toml"
    path.write_text(FULL_TOML, encoding="utf-8")
    load_config(path)
    assert DEFAULT_CONFIG["user"]["id"] == ""
    assert DEFAULT_CONFIG["result"]["media_type"] == "movie"


def test_load_config_finds_markrec_toml_in_cwd(tmp_path, monkeypatch):
    (tmp_path / "markrec.toml").write_text(FULL_TOML, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert load_config()["user"]["id"] == "alice"


def test_load_config_reads_tool_table_from_pyproject(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "x"\n\n[tool.markrec.user]\nid = "bob"\ncookie = "c"\n',
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    cfg = load_config()
    assert cfg["user"] == {"id": "bob", "cookie": "c"}


def test_load_config_ignores_pyproject_without_tool_table(tmp_path, monkeypatch):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert load_config() == DEFAULT_CONFIG


def test_load_config_defaults_when_nothing_found(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config() == DEFAULT_CONFIG


def test_load_config_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "nope.toml")


def test_load_config_invalid_toml(tmp_path):
    path = tmp_path / "markrec.toml"
    path.write_text("[user\nid = ", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to load"):
        load_config(path)


# ---------- load_settings ----------


def test_load_settings_from_config():
    s = load_settings(_config(media_type="Book", sort="rate", min_mention=1, min_score=8))
    assert s.user_id == "alice"
    assert s.cookie == "bid=abc"
    assert s.media_type == "book"
    assert s.sort_by == "rate"
    assert s.min_mention == 1
    assert s.min_score == 8.0
    assert s.max_concurrency == 0


def test_command_line_values_override_config():
    s = load_settings(_config(), user_id="carol", cookie="fresh")
    assert (s.user_id, s.cookie) == ("carol", "fresh")


def test_empty_command_line_values_do_not_override():
    s = load_settings(_config(), user_id="", cookie=None)
    assert (s.user_id, s.cookie) == ("alice", "bid=abc")


def test_listing_url():
    s = load_settings(_config(media_type="movie"))
    assert s.listing_url(30) == (
        "https://movie.douban.com/people/alice/collect"
        "?sort=time&start=30&filter=all&mode=list&tags_sort=count"
    )


@pytest.mark.parametrize(
    "mutate, message",
    [
        (lambda c: c["user"].update(id=""), "id or cookie is empty"),
        (lambda c: c["user"].update(cookie=""), "id or cookie is empty"),
        (lambda c: c["result"].update(media_type="music"), "media type"),
        (lambda c: c["result"].update(min_mention=-1), "min_mention"),
        (lambda c: c["result"].update(min_score=-0.5), "min_score"),
        (lambda c: c["result"].update(min_score="high"), "Invalid config value"),
        (lambda c: c["result"].update(min_score=True), "min_score must be a number"),
        (lambda c: c["result"].update(min_mention=1.9), "min_mention must be an integer"),
        (lambda c: c["result"].update(min_mention=True), "min_mention must be an integer"),
        (lambda c: c["result"].update(min_mention="2"), "min_mention must be an integer"),
        (lambda c: c["http"].update(max_concurrency=2.5), "max_concurrency must be an integer"),
        (lambda c: c["http"].update(timeout="slow"), "timeout must be a number"),
        (lambda c: c["http"].update(max_concurrency=-2), "max_concurrency"),
    ],
)
def test_invalid_settings_raise_config_error(mutate, message):
    cfg = _config()
    mutate(cfg)
    with pytest.raises(ConfigError, match=message):
        load_settings(cfg)
