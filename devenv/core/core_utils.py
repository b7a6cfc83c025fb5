# devenv/core/core_utils.py

import os
from copy import deepcopy
from typing import Any, Dict, List, Tuple

from rich.console import Console
from rich.table import Table
from rich.panel import Panel

import yaml

from devenv import __version__

console = Console()
DEVENV_VERSION = __version__

# ---------- Utils de base ----------

def load_yaml(path: str) -> Dict[str, Any]:
    """Charger un YAML en dict, avec un message d'erreur clair."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"YAML introuvable: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise SystemExit(f"[config] {path} doit contenir un mapping YAML, pas {type(data).__name__}")
    return data


def deep_update(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Fusion récursive de dictionnaires (base modifié in-place, retourné)."""
    for k, v in updates.items():
        if (
            isinstance(v, dict)
            and k in base
            and isinstance(base[k], dict)
        ):
            deep_update(base[k], v)
        else:
            base[k] = v
    return base


def parse_override(raw: str) -> Tuple[List[str], str]:
    """
    Parse une override "a.b.c=val" -> (["a","b","c"], "val").
    Le cast (bool, int, float) est fait par apply_overrides.
    """
    if "=" not in raw:
        raise ValueError(f"Override invalide (pas de '='): {raw}")
    key, value = raw.split("=", 1)
    if not key:
        raise ValueError(f"Override invalide (clé vide): {raw}")
    path = key.split(".")
    return path, value


def cast_scalar(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def apply_overrides(config: Dict[str, Any], overrides: List[str]) -> Dict[str, Any]:
    """Appliquer une liste de 'key=value' sur un dict (nested)."""
    cfg = deepcopy(config)
    for raw in overrides:
        path, value = parse_override(raw)
        cast_val = cast_scalar(value)

        d: Dict[str, Any] = cfg
        for key in path[:-1]:
            if key not in d or not isinstance(d[key], dict):
                d[key] = {}
            d = d[key]
        d[path[-1]] = cast_val
    return cfg


# ---------- Logging minimal ----------

def log(script: str, stage: str, msg: str) -> None:
    """Log formaté uniforme."""
    print(f"[{script}:{stage}] {msg}")


def debug_print_config(config: Any) -> None:
    """
    Affiche la DevEnvConfig résolue sous forme de tableaux rich.
    """
    header_text = (
        f"[bold]devenv[/bold]\n"
        f"[bold]root=[/bold]{config.project_root}\n"
        f"[bold]version=[/bold]{DEVENV_VERSION}\n"
        f"{config.source or 'defaults'}"
    )
    console.print()
    console.print(
        Panel.fit(
            header_text,
            title="CONFIG",
            subtitle="config résolue",
            border_style="cyan",
        )
    )

    t1 = Table(title="Compose & outils", expand=True)
    t1.add_column("Champ", style="bold", no_wrap=True)
    t1.add_column("Valeur")

    t1.add_row("Compose", " ".join(config.compose_command))
    t1.add_row("Compose files", ", ".join(config.compose_files) or "-")
    t1.add_row("Project name", config.project_name or "-")
    t1.add_row("Docker", config.docker)
    t1.add_row("Git", config.git)
    t1.add_row("Services", f"api={config.services.api}, front={config.services.front}, spring={config.services.spring}")
    console.print()
    console.print(t1)

    t2 = Table(title="Fichiers locaux", expand=True)
    t2.add_column("Type", style="bold", no_wrap=True)
    t2.add_column("Source")
    t2.add_column("Cible")

    for repo in config.repos:
        t2.add_row("repo", repo.url or "-", str(repo.path))
    for sample in config.sample_files:
        t2.add_row("sample", str(sample.template), str(sample.target))
    t2.add_row("lock", "-", str(config.lock_path))
    t2.add_row("pid dir", "-", str(config.stale_pids.directory))
    t2.add_row("pid file", "-", str(config.stale_pids.pid_file))
    console.print()
    console.print(t2)
    console.print()
