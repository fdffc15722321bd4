import asyncio
import logging
import os
import posixpath
import uuid
from typing import Dict, List, Optional

from onlinejudge.core.config import settings
from onlinejudge.sandbox.backends.base import (
    ExecutionBackend, ExecutionResult, ExecutionStatus, blocking_executor
)
from onlinejudge.sandbox.languages import CONTAINER_EXECUTABLE_NAME, CONTAINER_TOOLCHAIN, LanguageProfile
from onlinejudge.sandbox.process import ProcessResult, run_process

logger = logging.getLogger(__name__)

CONTAINER_WORKDIR = "/code"
OOM_EXIT_CODE = 137
DOCKER_RUN_FAILURE_EXIT_CODE = 125


class DockerBackend(ExecutionBackend):
    """Runs every compile and run step in a fresh, disposable container.

    Containers get no network, a hard memory cap (swap disabled), a CPU
    share and a pids limit. The workspace is bind-mounted read-write at
    ``/code`` and the container is removed on exit (``--rm``).

    Out-of-memory detection is best effort: the kernel OOM killer's SIGKILL
    surfaces as exit code 137 and/or ``Killed`` on stderr. A user program
    that kills itself with SIGKILL is indistinguishable from an OOM kill.
    """

    name = "DOCKER"

    def __init__(
            self,
            temp_root: Optional[str] = None,
            compile_timeout_ms: Optional[int] = None,
            docker_binary: Optional[str] = None,
            cpus: Optional[float] = None,
            grace_ms: Optional[int] = None,
            min_memory_mb: Optional[int] = None,
            pids_limit: Optional[int] = None,
    ):
        super().__init__(temp_root=temp_root, compile_timeout_ms=compile_timeout_ms)
        self.docker_binary = docker_binary or settings.DOCKER_BINARY
        self.cpus = cpus if cpus is not None else settings.DOCKER_CPUS
        self.grace_ms = grace_ms if grace_ms is not None else settings.DOCKER_GRACE_MS
        self.min_memory_mb = min_memory_mb if min_memory_mb is not None else settings.DOCKER_MIN_MEMORY_MB
        self.pids_limit = pids_limit if pids_limit is not None else settings.DOCKER_PIDS_LIMIT

    async def is_available(self) -> bool:
        return await asyncio.get_running_loop().run_in_executor(blocking_executor, self.check_available)

    def check_available(self) -> bool:
        try:
            res = run_process([self.docker_binary, "info"], cwd=os.getcwd(),
                              timeout_ms=settings.DOCKER_AVAILABILITY_TIMEOUT_MS)
        except OSError as e:
            logger.warning(f"Docker is not available: {e}")
            return False
        if res.timed_out or res.exit_code != 0:
            logger.warning(f"Docker is not available (exit {res.exit_code}, timed out: {res.timed_out})")
            return False
        return True

    def memory_mb(self, memory_limit_kb: int) -> int:
        return max(self.min_memory_mb, memory_limit_kb // 1024)

    def build_command(self, profile: LanguageProfile, workspace: str, command: str,
                      container_name: str, memory_limit_kb: int) -> List[str]:
        memory = f"{self.memory_mb(memory_limit_kb)}m"
        return [
            self.docker_binary, "run", "--rm", "-i",
            "--name", container_name,
            "--network", "none",
            f"--memory={memory}",
            f"--memory-swap={memory}",
            f"--cpus={self.cpus}",
            "--pids-limit", str(self.pids_limit),
            "-v", f"{os.path.abspath(workspace)}:{CONTAINER_WORKDIR}:rw",
            "-w", CONTAINER_WORKDIR,
            profile.image,
            "sh", "-c", command,
        ]

    def _template_values(self, profile: LanguageProfile) -> Dict[str, str]:
        return {
            "file": posixpath.join(CONTAINER_WORKDIR, profile.source_name),
            "dir": CONTAINER_WORKDIR,
            "exe": posixpath.join(CONTAINER_WORKDIR, CONTAINER_EXECUTABLE_NAME),
            **CONTAINER_TOOLCHAIN,
        }

    def remove_container(self, container_name: str):
        try:
            res = run_process([self.docker_binary, "rm", "-f", container_name], cwd=os.getcwd(),
                              timeout_ms=settings.DOCKER_AVAILABILITY_TIMEOUT_MS)
            if res.exit_code != 0 and "No such container" not in res.stderr:
                logger.warning(f"docker rm -f {container_name} exited with {res.exit_code}: {res.stderr.strip()}")
        except OSError as e:
            logger.warning(f"Failed to remove container {container_name}: {e}")

    def _run_step(
            self,
            profile: LanguageProfile,
            workspace: str,
            template: str,
            stdin: Optional[str],
            timeout_ms: int,
            memory_limit_kb: int
    ) -> ProcessResult:
        container_name = f"oj-{uuid.uuid4().hex[:12]}"
        command = self._render(template, self._template_values(profile))
        docker_cmd = self.build_command(profile, workspace, command, container_name, memory_limit_kb)
        return run_process(
            docker_cmd,
            cwd=workspace,
            stdin=stdin,
            timeout_ms=timeout_ms + self.grace_ms,
            on_timeout=lambda: self.remove_container(container_name),
        )

    def _startup_failure(self, result: ProcessResult) -> Optional[ExecutionResult]:
        if not result.timed_out and result.exit_code == DOCKER_RUN_FAILURE_EXIT_CODE:
            logger.error(f"docker run failed before the program started: {result.stderr.strip()}")
            return ExecutionResult.internal_error("The container runtime failed to start the sandbox.")
        return None

    def _classify(self, result: ProcessResult, time_limit_ms: int) -> ExecutionResult:
        startup_failure = self._startup_failure(result)
        if startup_failure is not None:
            return startup_failure
        if result.timed_out:
            return ExecutionResult.time_limit_exceeded(time_limit_ms)
        if result.exit_code == OOM_EXIT_CODE or (result.exit_code != 0 and "Killed" in result.stderr):
            return ExecutionResult(
                status=ExecutionStatus.MEMORY_LIMIT_EXCEEDED, stderr="Memory limit exceeded",
                exit_code=result.exit_code, execution_time_ms=result.elapsed_ms
            )
        if result.exit_code == 0:
            return self._success(result)
        return self._runtime_error(result)
