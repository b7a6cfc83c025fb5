# devenv/dispatch/commands.py
"""Command handlers and the static command table.

Each handler takes the execution context and the arguments left after the
command name, and returns an exit code. Arguments are forwarded verbatim.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from rich.table import Table

from devenv.core.core_exec import ExecContext, run_steps
from devenv.core.core_state import clear_stale_pids, ensure_local_files
from devenv.core.core_utils import console, debug_print_config, log
from devenv.pre.pre_check_env import run_checks

Handler = Callable[[ExecContext, List[str]], int]


@dataclass(frozen=True)
class CommandSpec:
    name: str
    handler: Handler
    summary: str
    needs_config: bool = True


# Helpers

def _install_steps(ctx: ExecContext) -> List[List[str]]:
    services = ctx.config.services
    return [
        ["run", "--rm", services.api, "bundle", "install"],
        ["run", "--rm", services.front, "npm", "install"],
    ]


def ensure_initialized(ctx: ExecContext) -> int:
    """Run the full init sequence unless the init lock is already set."""
    if ctx.lock.is_set():
        return 0
    log("devenv", "init", f"{ctx.lock.path} absent, initialisation complète")
    return cmd_init(ctx, [])


def _in_front(tool: str) -> Handler:
    def handler(ctx: ExecContext, args: List[str]) -> int:
        return ctx.compose(["run", "--rm", ctx.config.services.front, tool, *args])

    handler.__name__ = f"cmd_{tool}"
    return handler


def _in_spring(tool: str) -> Handler:
    def handler(ctx: ExecContext, args: List[str]) -> int:
        return ctx.compose(["exec", ctx.config.services.spring, tool, *args])

    handler.__name__ = f"cmd_{tool}"
    return handler


# Handlers

def cmd_attach(ctx: ExecContext, args: List[str]) -> int:
    if not args:
        log("devenv", "attach", "usage: attach SERVICE [docker attach options]")
        return 1
    service, rest = args[0], args[1:]
    ids = ctx.container_ids(service)
    if not ids:
        log("devenv", "attach", f"aucun conteneur en cours pour le service '{service}'")
        return 1
    return ctx.docker(["attach", *rest, ids[0]])


def cmd_build(ctx: ExecContext, args: List[str]) -> int:
    code = ensure_initialized(ctx)
    if code != 0:
        return code
    return ctx.compose(["build", *args])


def cmd_bundle(ctx: ExecContext, args: List[str]) -> int:
    return ctx.compose(["run", "--rm", ctx.config.services.api, "bundle", *args])


def cmd_destroy(ctx: ExecContext, args: List[str]) -> int:
    code = ctx.compose(["down", "--rmi", "all", "--volumes", "--remove-orphans", *args])
    # Le lock saute quoi qu'il arrive : le prochain build/up doit tout réinitialiser
    ctx.lock.clear()
    clear_stale_pids(ctx)
    if code != 0:
        return code
    return ctx.docker(["image", "prune", "-f"])


def cmd_down(ctx: ExecContext, args: List[str]) -> int:
    code = ctx.compose(["down", *args])
    clear_stale_pids(ctx)
    return code


def cmd_clean(ctx: ExecContext, args: List[str]) -> int:
    code = ctx.compose(["down", "--rmi", "all", "--remove-orphans", *args])
    clear_stale_pids(ctx)
    if code != 0:
        return code
    return ctx.docker(["image", "prune", "-f"])


def cmd_exec(ctx: ExecContext, args: List[str]) -> int:
    return ctx.compose(["exec", *args])


def cmd_init(ctx: ExecContext, args: List[str]) -> int:
    code = ensure_local_files(ctx)
    if code != 0:
        return code

    code = cmd_destroy(ctx, [])
    if code != 0:
        return code

    steps = _install_steps(ctx)
    steps.append(["run", "--rm", ctx.config.services.api, *ctx.config.db_setup])
    code = run_steps(ctx, steps)
    if code != 0:
        return code

    ctx.lock.set()
    log("devenv", "init", "environnement initialisé")
    return 0


def cmd_redis_cli(ctx: ExecContext, args: List[str]) -> int:
    if not args:
        log("devenv", "redis-cli", "usage: redis-cli HOST [redis-cli options]")
        return 1
    host, rest = args[0], args[1:]
    return ctx.compose(["exec", ctx.config.services.spring, "redis-cli", "-h", host, *rest])


def cmd_run(ctx: ExecContext, args: List[str]) -> int:
    return ctx.compose(["run", "--rm", *args])


def cmd_stats(ctx: ExecContext, args: List[str]) -> int:
    return ctx.docker(["stats", *args, *ctx.container_ids()])


def cmd_stop(ctx: ExecContext, args: List[str]) -> int:
    code = ctx.compose(["stop", *args])
    clear_stale_pids(ctx)
    return code


def cmd_top(ctx: ExecContext, args: List[str]) -> int:
    return ctx.compose(["top", *args])


def cmd_up(ctx: ExecContext, args: List[str]) -> int:
    code = ensure_initialized(ctx)
    if code != 0:
        return code
    code = run_steps(ctx, _install_steps(ctx))
    if code != 0:
        return code
    clear_stale_pids(ctx)
    return ctx.compose(["up", *args])


def cmd_ps(ctx: ExecContext, args: List[str]) -> int:
    return ctx.compose(["ps", *args])


def cmd_logs(ctx: ExecContext, args: List[str]) -> int:
    return ctx.compose(["logs", *args])


def cmd_check(ctx: ExecContext, args: List[str]) -> int:
    return 0 if run_checks(ctx.config) else 1


def cmd_config(ctx: ExecContext, args: List[str]) -> int:
    debug_print_config(ctx.config)
    return 0


def cmd_help(ctx: Optional[ExecContext], args: List[str]) -> int:
    print_usage()
    return 0


def print_usage() -> None:
    table = Table(title="devenv <command> <args...>", expand=False)
    table.add_column("Command", style="bold", no_wrap=True)
    table.add_column("Description")
    for name in sorted(COMMANDS):
        table.add_row(name, COMMANDS[name].summary)
    console.print(table)
    console.print("Global options (before the command): --config PATH, --override KEY=VALUE, --dry-run, --verbose")


def _command_table(specs: List[CommandSpec]) -> Dict[str, CommandSpec]:
    table: Dict[str, CommandSpec] = {}
    for spec in specs:
        if spec.name in table:
            raise ValueError(f"Duplicate command: {spec.name}")
        table[spec.name] = spec
    return table


COMMANDS: Dict[str, CommandSpec] = _command_table([
    CommandSpec("attach", cmd_attach, "Attach to the running container of SERVICE"),
    CommandSpec("build", cmd_build, "Initialize if needed, then build all images"),
    CommandSpec("bundle", cmd_bundle, "Run bundle inside the api container"),
    CommandSpec("check", cmd_check, "Check tools and local files before init"),
    CommandSpec("clean", cmd_clean, "Remove containers and images (keep volumes)"),
    CommandSpec("config", cmd_config, "Print the resolved configuration"),
    CommandSpec("destroy", cmd_destroy, "Remove containers, images and volumes; reset init"),
    CommandSpec("down", cmd_down, "Stop and remove containers"),
    CommandSpec("exec", cmd_exec, "Run a command in a running container"),
    CommandSpec("help", cmd_help, "Show this message", needs_config=False),
    CommandSpec("init", cmd_init, "Clone repos, copy samples, reinstall deps, set up the database"),
    CommandSpec("logs", cmd_logs, "Show container logs"),
    CommandSpec("node", _in_front("node"), "Run node inside the front container"),
    CommandSpec("npm", _in_front("npm"), "Run npm inside the front container"),
    CommandSpec("npx", _in_front("npx"), "Run npx inside the front container"),
    CommandSpec("ps", cmd_ps, "List containers"),
    CommandSpec("rails", _in_spring("rails"), "Run rails inside the spring container"),
    CommandSpec("rake", _in_spring("rake"), "Run rake inside the spring container"),
    CommandSpec("redis-cli", cmd_redis_cli, "Connect redis-cli to HOST from the spring container"),
    CommandSpec("rspec", _in_spring("rspec"), "Run rspec inside the spring container"),
    CommandSpec("rubocop", _in_spring("rubocop"), "Run rubocop inside the spring container"),
    CommandSpec("run", cmd_run, "Run a one-off container, removed afterwards"),
    CommandSpec("stats", cmd_stats, "Live resource usage of all containers"),
    CommandSpec("stop", cmd_stop, "Stop all containers"),
    CommandSpec("top", cmd_top, "Processes running in each container"),
    CommandSpec("up", cmd_up, "Initialize if needed, reinstall deps, start the stack"),
])
