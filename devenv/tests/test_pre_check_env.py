from pathlib import Path

import pytest

from devenv.core.core_config import load_config
from devenv.dispatch.dispatcher import dispatch
from devenv.pre import pre_check_env
from devenv.pre.pre_check_env import check_local_files, check_tools, run_checks


@pytest.fixture
def all_tools(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(pre_check_env.shutil, "which", lambda name: f"/usr/bin/{name}")


def test_missing_tools_are_reported(workspace: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(pre_check_env.shutil, "which", lambda name: None if name == "git" else name)
    problems = check_tools(load_config())
    assert problems == ["executable introuvable dans PATH: git"]


def test_uncloneable_repo_and_missing_template(workspace: Path):
    problems = check_local_files(load_config(overrides=[f"project_root={workspace}"]))
    # database.yml.sample will come with the api clone, .env.sample will not
    assert any("repo 'api'" in p for p in problems)
    assert any(".env.sample" in p for p in problems)
    assert not any("database.yml.sample" in p for p in problems)


def test_ready_environment(workspace: Path, all_tools, capsys):
    for name in ("api", "front"):
        (workspace / name).mkdir()
    (workspace / ".env").write_text("", encoding="utf-8")
    (workspace / "api" / "config").mkdir()
    (workspace / "api" / "config" / "database.yml.sample").write_text("", encoding="utf-8")

    assert run_checks(load_config(overrides=[f"project_root={workspace}"])) is True
    assert "[OK]" in capsys.readouterr().out


def test_check_command_exit_status(workspace: Path, all_tools, capsys):
    assert dispatch(["check"]) == 1
    assert "[check] MISSING" in capsys.readouterr().out
