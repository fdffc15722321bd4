import asyncio
import os
import shutil

import pytest

from onlinejudge.sandbox.backends.base import ExecutionStatus
from onlinejudge.sandbox.backends.local import LocalBackend
from onlinejudge.sandbox.languages import get_language
from onlinejudge.sandbox.process import ProcessResult

PYTHON3_EXISTS = shutil.which("python3") is not None
BASH_EXISTS = shutil.which("bash") is not None
GCC_EXISTS = shutil.which("gcc") is not None

PYTHON = 71
C = 50


@pytest.fixture
def backend(tmp_path) -> LocalBackend:
    return LocalBackend(temp_root=str(tmp_path))


class TestClassification:
    def test_clean_exit_is_success(self, backend):
        result = backend._classify(ProcessResult(stdout="42\n", exit_code=0, elapsed_ms=12), 1000)
        assert result.status == ExecutionStatus.SUCCESS
        assert result.stdout == "42\n"
        assert result.execution_time_ms == 12

    def test_timeout_reports_the_limit(self, backend):
        result = backend._classify(ProcessResult(exit_code=-9, elapsed_ms=1003, timed_out=True), 1000)
        assert result.status == ExecutionStatus.TIME_LIMIT_EXCEEDED
        assert result.execution_time_ms == 1000

    def test_nonzero_exit_without_stderr_gets_a_message(self, backend):
        result = backend._classify(ProcessResult(exit_code=3, elapsed_ms=5), 1000)
        assert result.status == ExecutionStatus.RUNTIME_ERROR
        assert result.stderr == "Program exited with code 3."

    def test_signal_exit_is_named(self, backend):
        result = backend._classify(ProcessResult(exit_code=-11, elapsed_ms=5), 1000)
        assert result.status == ExecutionStatus.RUNTIME_ERROR
        assert result.stderr == "Program terminated by signal SIGSEGV."

    def test_nonzero_exit_keeps_program_stderr(self, backend):
        result = backend._classify(ProcessResult(exit_code=1, stderr="Traceback ...", elapsed_ms=5), 1000)
        assert result.stderr == "Traceback ..."


@pytest.mark.asyncio
async def test_unknown_language_touches_no_filesystem(tmp_path):
    root = tmp_path / "never-created"
    result = await LocalBackend(temp_root=str(root)).execute("print(1)", 999, "", 1000, 65536)
    assert result.status == ExecutionStatus.INTERNAL_ERROR
    assert result.message == "Unsupported language ID: 999"
    assert not root.exists()


@pytest.mark.asyncio
async def test_compile_timeout_is_a_compilation_error(backend, tmp_path, mocker):
    mocker.patch.object(backend, "_run_step", return_value=ProcessResult(exit_code=-9, timed_out=True))
    result = await backend.execute("int main() {}", C, "", 1000, 65536)
    assert result.status == ExecutionStatus.COMPILATION_ERROR
    assert result.stderr.startswith("Compilation timed out after 30 seconds.")
    assert os.listdir(tmp_path) == []


@pytest.mark.asyncio
async def test_compile_failure_without_output_has_a_message(backend, mocker):
    mocker.patch.object(backend, "_run_step", return_value=ProcessResult(exit_code=1))
    result = await backend.execute("int main() {}", C, "", 1000, 65536)
    assert result.status == ExecutionStatus.COMPILATION_ERROR
    assert result.stderr == "Compilation failed."


@pytest.mark.asyncio
async def test_unexpected_failure_is_an_internal_error_and_cleans_up(backend, tmp_path, mocker):
    mocker.patch.object(backend, "_run_step", side_effect=RuntimeError("spawn exploded"))
    result = await backend.execute("print(1)", PYTHON, "", 1000, 65536)
    assert result.status == ExecutionStatus.INTERNAL_ERROR
    assert result.message == "LOCAL execution failed: the sandbox could not run the program."
    assert os.listdir(tmp_path) == []


@pytest.mark.asyncio
async def test_source_is_written_under_its_language_file_name(backend, mocker):
    seen = {}

    def fake_step(profile, workspace, template, stdin, timeout_ms, memory_limit_kb):
        seen["files"] = os.listdir(workspace)
        return ProcessResult(stdout="ok", exit_code=0)

    mocker.patch.object(backend, "_run_step", side_effect=fake_step)
    await backend.execute("print('ok')", PYTHON, "", 1000, 65536)
    assert seen["files"] == [get_language(PYTHON).source_name]


@pytest.mark.sandbox
@pytest.mark.skipif(not (PYTHON3_EXISTS and BASH_EXISTS), reason="python3 and bash are required")
class TestLocalExecution:
    @pytest.mark.asyncio
    async def test_python_reads_stdin(self, backend, tmp_path):
        code = "a, b = map(int, input().split())\nprint(a + b)"
        result = await backend.execute(code, PYTHON, "3 4\n", 5000, 65536)
        assert result.status == ExecutionStatus.SUCCESS
        assert result.stdout.strip() == "7"
        assert result.exit_code == 0
        assert os.listdir(tmp_path) == []

    @pytest.mark.asyncio
    async def test_python_runtime_error(self, backend):
        result = await backend.execute("print(1/0)", PYTHON, "", 5000, 65536)
        assert result.status == ExecutionStatus.RUNTIME_ERROR
        assert result.exit_code != 0
        assert "ZeroDivisionError" in result.stderr

    @pytest.mark.asyncio
    async def test_python_time_limit(self, backend, tmp_path):
        result = await backend.execute("while True: pass", PYTHON, "", 500, 65536)
        assert result.status == ExecutionStatus.TIME_LIMIT_EXCEEDED
        assert result.execution_time_ms == 500
        assert os.listdir(tmp_path) == []

    @pytest.mark.asyncio
    async def test_concurrent_runs_use_distinct_workspaces(self, backend):
        code = "import os; print(os.getcwd())"
        first, second = await asyncio.gather(
            backend.execute(code, PYTHON, "", 5000, 65536),
            backend.execute(code, PYTHON, "", 5000, 65536),
        )
        assert first.status == second.status == ExecutionStatus.SUCCESS
        assert first.stdout.strip() != second.stdout.strip()

    @pytest.mark.skipif(not GCC_EXISTS, reason="gcc is not installed")
    @pytest.mark.asyncio
    async def test_c_program_compiles_and_runs(self, backend):
        code = '#include <stdio.h>\nint main() { int a, b; scanf("%d %d", &a, &b); printf("%d\\n", a + b); return 0; }'
        result = await backend.execute(code, C, "20 22", 5000, 65536)
        assert result.status == ExecutionStatus.SUCCESS
        assert result.stdout.strip() == "42"

    @pytest.mark.skipif(not GCC_EXISTS, reason="gcc is not installed")
    @pytest.mark.asyncio
    async def test_c_compile_error(self, backend):
        code = '#include <stdio.h>\nint main() { printf("hello") return 0; }'
        result = await backend.execute(code, C, "", 5000, 65536)
        assert result.status == ExecutionStatus.COMPILATION_ERROR
        assert "expected" in result.stderr.lower()
