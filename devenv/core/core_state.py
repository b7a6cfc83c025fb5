# devenv/core/core_state.py
"""Filesystem state of the dev stack: init lock, local checkouts, stale PIDs.

Every helper here is idempotent and only ever acts when its target is
absent (or, for PID cleanup, present).
"""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING, List

from devenv.core.core_utils import log

if TYPE_CHECKING:  # pragma: no cover
    from devenv.core.core_exec import ExecContext


class InitLock:
    """First-time setup marker persisted as the existence of a file."""

    def __init__(self, path: Path, dry_run: bool = False) -> None:
        self.path = Path(path)
        self.dry_run = dry_run

    def is_set(self) -> bool:
        return self.path.exists()

    def set(self) -> None:
        if self.dry_run:
            log("devenv", "dry-run", f"touch {self.path}")
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch()

    def clear(self) -> None:
        if self.dry_run:
            log("devenv", "dry-run", f"rm -f {self.path}")
            return
        self.path.unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"InitLock({str(self.path)!r}, set={self.is_set()})"


def ensure_local_files(ctx: "ExecContext") -> int:
    """Clone missing repositories and copy missing sample configs.

    Existing targets are never touched. Returns the exit code of the first
    failing clone, or 0.
    """
    config = ctx.config

    for repo in config.repos:
        if repo.path.exists():
            continue
        if not repo.url:
            log("devenv", "init", f"{repo.path} absent et aucune url configurée pour '{repo.name}', ignoré")
            continue
        log("devenv", "init", f"clonage de {repo.url} -> {repo.path}")
        code = ctx.git(["clone", repo.url, str(repo.path)])
        if code != 0:
            return code

    for sample in config.sample_files:
        if sample.target.exists():
            continue
        if not sample.template.exists():
            log("devenv", "init", f"modèle introuvable: {sample.template}, {sample.target} non créé")
            continue
        log("devenv", "init", f"copie {sample.template} -> {sample.target}")
        if ctx.dry_run:
            continue
        sample.target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(sample.template, sample.target)

    return 0


def clear_stale_pids(ctx: "ExecContext") -> List[Path]:
    """Remove leftover process state so the app server can restart cleanly."""
    pids = ctx.config.stale_pids
    removed: List[Path] = []

    # Le fichier d'abord : il vit souvent dans le répertoire lui-même
    if pids.pid_file.is_file():
        removed.append(pids.pid_file)
        if not ctx.dry_run:
            pids.pid_file.unlink()
    if pids.directory.is_dir():
        removed.append(pids.directory)
        if not ctx.dry_run:
            shutil.rmtree(pids.directory)

    for path in removed:
        log("devenv", "pids", f"{'(dry-run) ' if ctx.dry_run else ''}supprimé {path}")
    return removed
