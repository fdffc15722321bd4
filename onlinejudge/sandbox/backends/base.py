import asyncio
import logging
import os
import shutil
import signal
import tempfile
import uuid
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel

from onlinejudge.core.config import settings
from onlinejudge.sandbox.languages import LanguageProfile, get_language
from onlinejudge.sandbox.process import ProcessResult

logger = logging.getLogger(__name__)

MAX_THREADS = (os.cpu_count() or 2) * 2
blocking_executor = ThreadPoolExecutor(max_workers=MAX_THREADS)


class ExecutionStatus(str, Enum):
    SUCCESS = "SUCCESS"
    COMPILATION_ERROR = "COMPILATION_ERROR"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    TIME_LIMIT_EXCEEDED = "TIME_LIMIT_EXCEEDED"
    MEMORY_LIMIT_EXCEEDED = "MEMORY_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ExecutionResult(BaseModel):
    status: ExecutionStatus
    stdout: str = ""
    stderr: str = ""
    exit_code: int = -1
    execution_time_ms: int = 0
    message: Optional[str] = None

    @classmethod
    def internal_error(cls, message: str) -> "ExecutionResult":
        return cls(status=ExecutionStatus.INTERNAL_ERROR, message=message)

    @classmethod
    def compilation_error(cls, stderr: str) -> "ExecutionResult":
        return cls(status=ExecutionStatus.COMPILATION_ERROR, stderr=stderr, exit_code=1)

    @classmethod
    def time_limit_exceeded(cls, time_limit_ms: int) -> "ExecutionResult":
        return cls(status=ExecutionStatus.TIME_LIMIT_EXCEEDED, execution_time_ms=time_limit_ms)


class ExecutionBackend(ABC):
    """Runs one piece of user code against one input.

    Subclasses decide how a single compile or run step is launched
    (``_run_step``) and how its raw outcome maps to an ``ExecutionStatus``
    (``_classify``). Workspace handling and compile-then-run sequencing
    live here and are shared.
    """

    name = "BASE"

    def __init__(self, temp_root: Optional[str] = None, compile_timeout_ms: Optional[int] = None):
        self.temp_root = temp_root or settings.SANDBOX_TEMP_ROOT
        self.compile_timeout_ms = compile_timeout_ms or settings.COMPILE_TIMEOUT_MS

    async def is_available(self) -> bool:
        return True

    async def execute(
            self,
            source_code: str,
            language_id: int,
            stdin: Optional[str],
            time_limit_ms: int,
            memory_limit_kb: int
    ) -> ExecutionResult:
        profile = get_language(language_id)
        if profile is None:
            return ExecutionResult.internal_error(f"Unsupported language ID: {language_id}")

        return await asyncio.get_running_loop().run_in_executor(
            blocking_executor, self.execute_blocking,
            profile, source_code, stdin, time_limit_ms, memory_limit_kb
        )

    def execute_blocking(
            self,
            profile: LanguageProfile,
            source_code: str,
            stdin: Optional[str],
            time_limit_ms: int,
            memory_limit_kb: int
    ) -> ExecutionResult:
        workspace = None
        try:
            workspace = self._create_workspace()
            source_path = os.path.join(workspace, profile.source_name)
            with open(source_path, "w", encoding="utf-8") as f:
                f.write(source_code)

            if profile.compile_command:
                compile_res = self._run_step(profile, workspace, profile.compile_command,
                                             None, self.compile_timeout_ms, memory_limit_kb)
                startup_failure = self._startup_failure(compile_res)
                if startup_failure is not None:
                    return startup_failure
                if compile_res.timed_out:
                    return ExecutionResult.compilation_error(
                        f"Compilation timed out after {self.compile_timeout_ms // 1000} seconds.\n"
                        + compile_res.stderr)
                if compile_res.exit_code != 0:
                    return ExecutionResult.compilation_error(compile_res.stderr or compile_res.stdout
                                                             or "Compilation failed.")

            run_res = self._run_step(profile, workspace, profile.run_command,
                                     stdin, time_limit_ms, memory_limit_kb)
            return self._classify(run_res, time_limit_ms)

        except Exception as e:
            logger.error(f"{self.name} execution failed for language {profile.key} "
                         f"(workspace {workspace}): {type(e).__name__}: {e}", exc_info=True)
            return ExecutionResult.internal_error(f"{self.name} execution failed: the sandbox could not run the program.")
        finally:
            if workspace:
                self._remove_workspace(workspace)

    def _create_workspace(self) -> str:
        os.makedirs(self.temp_root, exist_ok=True)
        return tempfile.mkdtemp(prefix=f"{uuid.uuid4().hex[:8]}_", dir=self.temp_root)

    @staticmethod
    def _remove_workspace(workspace: str):
        try:
            shutil.rmtree(workspace)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to clean up workspace {workspace}: {e}")

    @staticmethod
    def _render(template: str, values: Dict[str, str]) -> str:
        return template.format(**values)

    @staticmethod
    def _runtime_error(result: ProcessResult) -> ExecutionResult:
        stderr = result.stderr
        if not stderr.strip():
            if result.exit_code < 0:
                try:
                    sig_name = signal.Signals(-result.exit_code).name
                except ValueError:
                    sig_name = str(-result.exit_code)
                stderr = f"Program terminated by signal {sig_name}."
            else:
                stderr = f"Program exited with code {result.exit_code}."
        return ExecutionResult(
            status=ExecutionStatus.RUNTIME_ERROR, stdout=result.stdout, stderr=stderr,
            exit_code=result.exit_code, execution_time_ms=result.elapsed_ms
        )

    @staticmethod
    def _success(result: ProcessResult) -> ExecutionResult:
        return ExecutionResult(
            status=ExecutionStatus.SUCCESS, stdout=result.stdout, stderr=result.stderr,
            exit_code=result.exit_code, execution_time_ms=result.elapsed_ms
        )

    def _startup_failure(self, result: ProcessResult) -> Optional[ExecutionResult]:
        """Return an INTERNAL_ERROR result if the step never reached user code."""
        return None

    @abstractmethod
    def _run_step(
            self,
            profile: LanguageProfile,
            workspace: str,
            template: str,
            stdin: Optional[str],
            timeout_ms: int,
            memory_limit_kb: int
    ) -> ProcessResult:
        ...

    @abstractmethod
    def _classify(self, result: ProcessResult, time_limit_ms: int) -> ExecutionResult:
        ...
