import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from devenv.core.core_config import load_config
from devenv.core.core_exec import ExecContext


class CommandRecorder:
    """Stand-in for subprocess.run: records argv lists, returns canned results."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[str]] = []
        self.return_codes: Dict[str, int] = {}
        self.stdout: Dict[str, str] = {}

    def __call__(self, cmd, *args, **kwargs):
        cmd = list(cmd)
        self.calls.append(cmd)
        self.cwds.append(kwargs.get("cwd"))
        key = " ".join(cmd)
        code = 0
        for needle, rc in self.return_codes.items():
            if needle in key:
                code = rc
        out = ""
        for needle, text in self.stdout.items():
            if needle in key:
                out = text
        return subprocess.CompletedProcess(cmd, code, stdout=out, stderr="")

    def fail_on(self, needle: str, code: int = 1) -> None:
        self.return_codes[needle] = code

    def count(self, needle: str) -> int:
        return len([c for c in self.calls if needle in " ".join(c)])

    def index_of(self, needle: str) -> Optional[int]:
        for i, c in enumerate(self.calls):
            if needle in " ".join(c):
                return i
        return None


@pytest.fixture
def recorder(monkeypatch: pytest.MonkeyPatch) -> CommandRecorder:
    rec = CommandRecorder()
    monkeypatch.setattr("devenv.core.core_exec.subprocess.run", rec)
    return rec


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty project directory used as cwd, without any devenv.yml around."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEVENV_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def ctx(workspace: Path, recorder: CommandRecorder) -> ExecContext:
    config = load_config(overrides=[f"project_root={workspace}"])
    return ExecContext(config=config)
