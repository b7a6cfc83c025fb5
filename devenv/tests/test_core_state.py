from pathlib import Path

from devenv.core.core_config import load_config
from devenv.core.core_exec import ExecContext
from devenv.core.core_state import InitLock, clear_stale_pids, ensure_local_files


def test_init_lock_roundtrip(tmp_path: Path):
    lock = InitLock(tmp_path / "tmp" / "docker-init.lock")
    assert not lock.is_set()
    lock.set()
    assert lock.is_set()
    lock.set()
    assert lock.is_set()
    lock.clear()
    assert not lock.is_set()
    lock.clear()
    assert not lock.is_set()


def test_init_lock_dry_run_touches_nothing(tmp_path: Path):
    path = tmp_path / "tmp" / "docker-init.lock"
    InitLock(path, dry_run=True).set()
    assert not path.exists()

    path.parent.mkdir()
    path.touch()
    InitLock(path, dry_run=True).clear()
    assert path.exists()


def test_samples_are_copied_only_when_missing(ctx, workspace: Path):
    (workspace / ".env.sample").write_text("NEW=1\n", encoding="utf-8")
    (workspace / ".env").write_text("KEEP=1\n", encoding="utf-8")
    db_sample = workspace / "api" / "config" / "database.yml.sample"
    db_sample.parent.mkdir(parents=True)
    db_sample.write_text("development: {}\n", encoding="utf-8")

    assert ensure_local_files(ctx) == 0

    assert (workspace / ".env").read_text(encoding="utf-8") == "KEEP=1\n"
    assert (workspace / "api" / "config" / "database.yml").read_text(encoding="utf-8") == "development: {}\n"


def test_repos_are_cloned_only_when_missing(workspace: Path, recorder):
    (workspace / "api").mkdir()
    config = load_config(
        overrides=[f"project_root={workspace}"],
    )
    config.repos[0].url = "git@example.org:team/api.git"
    config.repos[1].url = "git@example.org:team/front.git"
    ctx = ExecContext(config=config)

    assert ensure_local_files(ctx) == 0
    assert recorder.calls == [
        ["git", "clone", "git@example.org:team/front.git", str(workspace.resolve() / "front")]
    ]


def test_failed_clone_stops_local_setup(workspace: Path, recorder):
    (workspace / ".env.sample").write_text("A=1\n", encoding="utf-8")
    config = load_config(overrides=[f"project_root={workspace}"])
    config.repos[0].url = "git@example.org:team/api.git"
    recorder.fail_on("clone", 128)

    assert ensure_local_files(ExecContext(config=config)) == 128
    assert not (workspace / ".env").exists()


def test_clear_stale_pids(ctx):
    pids = ctx.config.stale_pids
    pids.directory.mkdir(parents=True)
    pids.pid_file.write_text("99", encoding="utf-8")
    (pids.directory / "sidekiq.pid").write_text("100", encoding="utf-8")

    removed = clear_stale_pids(ctx)

    assert removed == [pids.pid_file, pids.directory]
    assert not pids.directory.exists()
    assert clear_stale_pids(ctx) == []


def test_clear_stale_pids_dry_run(workspace: Path, recorder):
    config = load_config(overrides=[f"project_root={workspace}"])
    ctx = ExecContext(config=config, dry_run=True)
    config.stale_pids.directory.mkdir(parents=True)
    config.stale_pids.pid_file.write_text("1", encoding="utf-8")

    assert len(clear_stale_pids(ctx)) == 2
    assert config.stale_pids.pid_file.exists()


def test_relative_project_root_clones_inside_it(workspace: Path, recorder):
    app = workspace / "app"
    (app / "api").mkdir(parents=True)
    config = load_config(overrides=["project_root=app"])
    config.repos[1].url = "git@example.org:team/front.git"
    ctx = ExecContext(config=config)

    assert ensure_local_files(ctx) == 0
    assert recorder.calls == [
        ["git", "clone", "git@example.org:team/front.git", str(app.resolve() / "front")]
    ]
    assert recorder.cwds == [str(app.resolve())]

    # Une fois le clone présent, init ne le relance pas
    (app / "front").mkdir()
    recorder.calls.clear()
    assert ensure_local_files(ctx) == 0
    assert recorder.calls == []
