"""Tests for the command line interface."""

import json

import pytest

from conftest import make_snapshot
from copilot_catalog.cli import build_parser, main


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    """A config pointing at a local checkout holding the fixture snapshot."""
    for name in ("ACP_REPOS_JSON", "ACP_METADATA_URL", "CATALOG_LOCAL_PATH"):
        monkeypatch.delenv(name, raising=False)
    checkout = tmp_path / "checkout"
    checkout.mkdir()
    (checkout / "metadata.json").write_text(json.dumps(make_snapshot()), encoding="utf-8")
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"localPath": str(checkout), "bundledPath": None}), encoding="utf-8")
    return str(path)


def run(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


class TestParser:
    """Test argument parsing."""
    
    def test_defaults_to_server(self):
        args = build_parser().parse_args([])
        
        assert args.command is None
    
    def test_search_options(self):
        args = build_parser().parse_args(["search", "python", "--type", "agent", "-l", "5"])
        
        assert (args.query, args.type, args.limit) == ("python", "agent", 5)


class TestCommands:
    """Test catalog commands against a local checkout."""
    
    def test_version(self, capsys):
        assert run(["--version"]) == 0
        assert "copilot-catalog v" in capsys.readouterr().out
    
    def test_search_json(self, config_file, capsys):
        assert run(["--json", "--config", config_file, "search", "python"]) == 0
        
        data = json.loads(capsys.readouterr().out)
        assert data["count"] == 2
        assert [item["name"] for item in data["items"]] == ["python-expert", "python-style"]
    
    def test_explore_text(self, config_file, capsys):
        assert run(["--config", config_file, "explore", "skills"]) == 0
        
        out = capsys.readouterr().out
        assert "Available skills:" in out
        assert "webapp-testing" in out
        assert "python-expert" not in out
    
    def test_get_item(self, config_file, capsys):
        assert run(["--config", config_file, "get", "collection", "testing-kit"]) == 0
        
        out = capsys.readouterr().out
        assert "Items (2):" in out
        assert "collections/testing-kit.collection.yml" in out
    
    def test_get_missing(self, config_file, capsys):
        assert run(["--config", config_file, "get", "agent", "ghost"]) == 1
        assert "Not found" in capsys.readouterr().err
    
    def test_unknown_type(self, config_file, capsys):
        assert run(["--config", config_file, "get", "widget", "x"]) == 2
        assert "Unknown content type" in capsys.readouterr().err
    
    def test_recommend(self, config_file, capsys):
        assert run(["--json", "--config", config_file, "recommend", "review react components"]) == 0
        
        data = json.loads(capsys.readouterr().out)
        assert data[0]["name"] == "react-reviewer"
    
    def test_refresh(self, config_file, capsys):
        assert run(["--json", "--config", config_file, "refresh"]) == 0
        
        data = json.loads(capsys.readouterr().out)
        assert data["count"] == 9
        assert data["source"] == "repository"
