# devenv/pre/pre_check_env.py

import argparse
import shutil
from typing import List

from devenv.core.core_config import DevEnvConfig, load_config
from devenv.core.core_utils import debug_print_config


def check_tools(config: DevEnvConfig) -> List[str]:
    """Vérifier que les exécutables appelés par le dispatcher sont dans le PATH."""
    problems: List[str] = []
    tools = [config.compose_command[0], config.docker, config.git]
    for tool in dict.fromkeys(tools):
        if shutil.which(tool) is None:
            problems.append(f"executable introuvable dans PATH: {tool}")
    return problems


def check_local_files(config: DevEnvConfig) -> List[str]:
    """Vérifier que init pourra produire chaque fichier local dont il a la charge."""
    problems: List[str] = []
    if not config.project_root.is_dir():
        problems.append(f"project_root introuvable: {config.project_root}")

    for repo in config.repos:
        if not repo.path.exists() and not repo.url:
            problems.append(f"repo '{repo.name}' absent ({repo.path}) et aucune url pour le cloner")

    for sample in config.sample_files:
        if sample.target.exists():
            continue
        # Le modèle peut arriver avec le clone du repo
        if not sample.template.exists() and not any(
            repo.path in sample.template.parents and not repo.path.exists() for repo in config.repos
        ):
            problems.append(f"modèle introuvable: {sample.template} (pour {sample.target})")
    return problems


def run_checks(config: DevEnvConfig) -> bool:
    problems = check_tools(config) + check_local_files(config)
    for problem in problems:
        print(f"[check] MISSING {problem}")
    if problems:
        print(f"[check] {len(problems)} problème(s) détecté(s).")
        return False
    print(f"[OK] Environnement '{config.project_root}' prêt.")
    return True


def main() -> None:
    ap = argparse.ArgumentParser(
        description="Pré-check de l'environnement docker local (outils, repos, fichiers modèles)"
    )
    ap.add_argument("--config", default=None, help="Fichier YAML devenv (défaut: configs/devenv.yml)")
    ap.add_argument(
        "--override",
        action="append",
        default=[],
        help="Override config (clé=valeur, ex: compose.project_name=myapp)",
    )
    ap.add_argument(
        "--verbose", action="store_true", help="Afficher la config résolue"
    )
    args = ap.parse_args()

    config = load_config(args.config, args.override)
    if args.verbose:
        debug_print_config(config)

    if not run_checks(config):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
