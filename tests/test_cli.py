import json
import logging

import pytest
from click.testing import CliRunner

from reviewtui import __version__
from reviewtui.main import cli


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for h in root.handlers:
        if h not in saved_handlers:
            h.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def write_config(tmp_path, monkeypatch, **values):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps(values))
    monkeypatch.setenv("REVIEWTUI_CONFIG", str(path))
    return path


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == f"reviewtui {__version__}"


def test_help():
    result = CliRunner().invoke(cli, ["-h"])
    assert result.exit_code == 0
    assert "--repo-path" in result.output


def test_unusable_data_dir(tmp_path, monkeypatch):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    write_config(tmp_path, monkeypatch, data_dir=str(blocker))
    result = CliRunner().invoke(cli, ["-r", str(tmp_path)])
    assert result.exit_code == 1
    assert "cannot create data directory" in result.output


def test_unopenable_database(tmp_path, monkeypatch, restore_logging):
    data = tmp_path / "data"
    (data / "reviewtui.db").mkdir(parents=True)
    write_config(tmp_path, monkeypatch, data_dir=str(data))
    result = CliRunner().invoke(cli, ["-r", str(tmp_path)])
    assert result.exit_code == 1
    assert "Error: cannot open database" in result.output
    assert "cannot open database" in (data / "reviewtui.log").read_text()
