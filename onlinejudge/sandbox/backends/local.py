import logging
import os
import shlex
import subprocess
from typing import Dict, List, Optional

from onlinejudge.sandbox.backends.base import ExecutionBackend, ExecutionResult
from onlinejudge.sandbox.languages import (
    IS_WINDOWS, LOCAL_EXECUTABLE_NAME, LOCAL_TOOLCHAIN, LanguageProfile
)
from onlinejudge.sandbox.process import ProcessResult, run_process

logger = logging.getLogger(__name__)

SHELL_PREFIX: List[str] = ["cmd", "/c"] if IS_WINDOWS else ["bash", "-c"]


def _quote(path: str) -> str:
    if IS_WINDOWS:
        return subprocess.list2cmdline([path])
    return shlex.quote(path)


class LocalBackend(ExecutionBackend):
    """Compiles and runs submissions as ordinary child processes of the server.

    There is no isolation: no network or memory containment. Only the wall
    clock is enforced. Suitable for development and trusted deployments.
    """

    name = "LOCAL"

    def _template_values(self, profile: LanguageProfile, workspace: str) -> Dict[str, str]:
        return {
            "file": _quote(os.path.join(workspace, profile.source_name)),
            "dir": _quote(workspace),
            "exe": _quote(os.path.join(workspace, LOCAL_EXECUTABLE_NAME)),
            **LOCAL_TOOLCHAIN,
        }

    def _run_step(
            self,
            profile: LanguageProfile,
            workspace: str,
            template: str,
            stdin: Optional[str],
            timeout_ms: int,
            memory_limit_kb: int
    ) -> ProcessResult:
        command = self._render(template, self._template_values(profile, workspace))
        return run_process(SHELL_PREFIX + [command], cwd=workspace, stdin=stdin, timeout_ms=timeout_ms)

    def _classify(self, result: ProcessResult, time_limit_ms: int) -> ExecutionResult:
        if result.timed_out:
            return ExecutionResult.time_limit_exceeded(time_limit_ms)
        if result.exit_code == 0:
            return self._success(result)
        return self._runtime_error(result)
