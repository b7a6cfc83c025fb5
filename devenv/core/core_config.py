# devenv/core/core_config.py

from __future__ import annotations

import os
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from devenv.core.core_utils import apply_overrides, deep_update, load_yaml

DEFAULT_CONFIG_PATH = os.path.join("configs", "devenv.yml")
CONFIG_ENV_VAR = "DEVENV_CONFIG"

DEFAULT_CONFIG: Dict[str, Any] = {
    "project_root": ".",
    "compose": {
        "command": ["docker-compose"],
        "files": [],
        "project_name": "",
    },
    "docker": "docker",
    "git": "git",
    "services": {
        "api": "api",
        "front": "front",
        "spring": "spring",
    },
    "repos": [
        {"name": "api", "url": "", "path": "api"},
        {"name": "front", "url": "", "path": "front"},
    ],
    "sample_files": [
        {"template": ".env.sample", "target": ".env"},
        {"template": "api/config/database.yml.sample", "target": "api/config/database.yml"},
    ],
    "lock_path": "tmp/docker-init.lock",
    "stale_pids": {
        "directory": "api/tmp/pids",
        "pid_file": "api/tmp/pids/server.pid",
    },
    "db_setup": ["bundle", "exec", "rails", "db:setup"],
}


# Data classes

@dataclass
class RepoSpec:
    name: str
    url: str
    path: Path


@dataclass
class SampleFile:
    template: Path
    target: Path


@dataclass
class StalePidConfig:
    directory: Path
    pid_file: Path


@dataclass
class ServicesConfig:
    api: str = "api"
    front: str = "front"
    spring: str = "spring"


@dataclass
class DevEnvConfig:
    project_root: Path
    compose_command: List[str]
    compose_files: List[str]
    project_name: str
    docker: str
    git: str
    services: ServicesConfig
    repos: List[RepoSpec]
    sample_files: List[SampleFile]
    lock_path: Path
    stale_pids: StalePidConfig
    db_setup: List[str] = field(default_factory=list)
    source: Optional[str] = None


def _as_argv(value: Any, key: str) -> List[str]:
    """Accept either a list of tokens or a whitespace separated string."""
    if isinstance(value, str):
        tokens = value.split()
    elif isinstance(value, list):
        tokens = [str(v) for v in value]
    else:
        raise SystemExit(f"[config] '{key}' doit être une liste ou une chaîne, pas {type(value).__name__}")
    if not tokens:
        raise SystemExit(f"[config] '{key}' ne peut pas être vide")
    return tokens


def _resolve(root: Path, raw: Any) -> Path:
    path = Path(str(raw)).expanduser()
    if path.is_absolute():
        return path
    return root / path


def find_config_path(explicit: Optional[str] = None) -> Optional[str]:
    """--config, then $DEVENV_CONFIG, then configs/devenv.yml when it exists."""
    if explicit:
        return explicit
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return from_env
    if os.path.exists(DEFAULT_CONFIG_PATH):
        return DEFAULT_CONFIG_PATH
    return None


def load_config(
    path: Optional[str] = None,
    overrides: Optional[Sequence[str]] = None,
) -> DevEnvConfig:
    """Layer defaults, the optional YAML file and CLI overrides into a DevEnvConfig."""
    raw = deepcopy(DEFAULT_CONFIG)
    source = find_config_path(path)
    if source is not None:
        if not os.path.exists(source):
            raise SystemExit(f"[config] fichier de config introuvable: {source}")
        deep_update(raw, load_yaml(source))
    raw = apply_overrides(raw, list(overrides or []))

    root = Path(str(raw.get("project_root") or ".")).expanduser().resolve()

    compose_cfg = raw.get("compose") or {}
    services_cfg = raw.get("services") or {}
    pids_cfg = raw.get("stale_pids") or {}

    repos: List[RepoSpec] = []
    for repo_raw in raw.get("repos") or []:
        if not isinstance(repo_raw, dict) or not repo_raw.get("path"):
            raise SystemExit(f"[config] entrée 'repos' invalide (path requis): {repo_raw!r}")
        repos.append(
            RepoSpec(
                name=str(repo_raw.get("name") or repo_raw["path"]),
                url=str(repo_raw.get("url") or ""),
                path=_resolve(root, repo_raw["path"]),
            )
        )

    samples: List[SampleFile] = []
    for sample_raw in raw.get("sample_files") or []:
        if not isinstance(sample_raw, dict) or not sample_raw.get("template") or not sample_raw.get("target"):
            raise SystemExit(
                f"[config] entrée 'sample_files' invalide (template et target requis): {sample_raw!r}"
            )
        samples.append(
            SampleFile(
                template=_resolve(root, sample_raw["template"]),
                target=_resolve(root, sample_raw["target"]),
            )
        )

    compose_files = compose_cfg.get("files") or []
    if isinstance(compose_files, str):
        compose_files = [compose_files]

    return DevEnvConfig(
        project_root=root,
        compose_command=_as_argv(compose_cfg.get("command", ["docker-compose"]), "compose.command"),
        compose_files=[str(f) for f in compose_files],
        project_name=str(compose_cfg.get("project_name") or ""),
        docker=str(raw.get("docker") or "docker"),
        git=str(raw.get("git") or "git"),
        services=ServicesConfig(
            api=str(services_cfg.get("api", "api")),
            front=str(services_cfg.get("front", "front")),
            spring=str(services_cfg.get("spring", "spring")),
        ),
        repos=repos,
        sample_files=samples,
        lock_path=_resolve(root, raw.get("lock_path") or DEFAULT_CONFIG["lock_path"]),
        stale_pids=StalePidConfig(
            directory=_resolve(root, pids_cfg.get("directory") or DEFAULT_CONFIG["stale_pids"]["directory"]),
            pid_file=_resolve(root, pids_cfg.get("pid_file") or DEFAULT_CONFIG["stale_pids"]["pid_file"]),
        ),
        db_setup=_as_argv(raw.get("db_setup") or DEFAULT_CONFIG["db_setup"], "db_setup"),
        source=source,
    )
