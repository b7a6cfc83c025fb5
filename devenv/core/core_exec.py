# devenv/core/core_exec.py
"""Build and run the external commands (docker-compose, docker, git).

Everything goes through ``subprocess.run`` with an argv list: no shell, the
forwarded arguments reach the child process exactly as they were given.
"""
from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from devenv.core.core_config import DevEnvConfig
from devenv.core.core_state import InitLock
from devenv.core.core_utils import log

COMMAND_NOT_FOUND = 127


@dataclass
class ExecContext:
    config: DevEnvConfig
    dry_run: bool = False
    lock: InitLock = field(init=False)

    def __post_init__(self) -> None:
        self.lock = InitLock(self.config.lock_path, dry_run=self.dry_run)

    # Command builders

    def compose_argv(self, args: Sequence[str]) -> List[str]:
        cmd = list(self.config.compose_command)
        for compose_file in self.config.compose_files:
            cmd.extend(["-f", compose_file])
        if self.config.project_name:
            cmd.extend(["-p", self.config.project_name])
        cmd.extend(args)
        return cmd

    def docker_argv(self, args: Sequence[str]) -> List[str]:
        return [self.config.docker, *args]

    def git_argv(self, args: Sequence[str]) -> List[str]:
        return [self.config.git, *args]

    # Execution

    def run(self, cmd: List[str]) -> int:
        """Run cmd in the foreground, attached to the terminal, and return its exit code."""
        if self.dry_run:
            log("devenv", "dry-run", f"$ {shlex.join(cmd)}")
            return 0
        try:
            process = subprocess.run(cmd, cwd=str(self.config.project_root))
        except FileNotFoundError:
            log("devenv", "exec", f"command not found: {cmd[0]}")
            return COMMAND_NOT_FOUND
        return process.returncode

    def capture(self, cmd: List[str]) -> List[str]:
        """Run cmd and return its non-empty stdout lines (used for container lookups)."""
        if self.dry_run:
            return [f"$({shlex.join(cmd)})"]
        try:
            process = subprocess.run(
                cmd,
                cwd=str(self.config.project_root),
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            log("devenv", "exec", f"command not found: {cmd[0]}")
            return []
        if process.returncode != 0:
            return []
        return [line.strip() for line in (process.stdout or "").splitlines() if line.strip()]

    def compose(self, args: Sequence[str]) -> int:
        return self.run(self.compose_argv(args))

    def docker(self, args: Sequence[str]) -> int:
        return self.run(self.docker_argv(args))

    def git(self, args: Sequence[str]) -> int:
        return self.run(self.git_argv(args))

    def container_ids(self, service: Optional[str] = None) -> List[str]:
        """Container ids of one service (or of the whole stack) via ``ps -q``."""
        ps_args = ["ps", "-q"]
        if service:
            ps_args.append(service)
        return self.capture(self.compose_argv(ps_args))


def run_steps(ctx: ExecContext, steps: Sequence[List[str]]) -> int:
    """Run compose steps in order, stopping at the first failure."""
    for step in steps:
        code = ctx.compose(step)
        if code != 0:
            log("devenv", "exec", f"échec ({code}): {shlex.join(ctx.compose_argv(step))}")
            return code
    return 0
