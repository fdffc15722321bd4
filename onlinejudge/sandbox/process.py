import logging
import os
import signal
import subprocess
import threading
import time
from typing import Callable, List, Optional

from pydantic import BaseModel

from onlinejudge.core.config import settings
from onlinejudge.sandbox.languages import IS_WINDOWS

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class ProcessResult(BaseModel):
    stdout: str = ""
    stderr: str = ""
    exit_code: int = -1
    elapsed_ms: int = 0
    timed_out: bool = False


class _StreamCapture:
    """Drains one pipe until EOF, keeping at most ``limit`` bytes."""

    def __init__(self, stream, limit: int):
        self._stream = stream
        self._limit = limit
        self._chunks: List[bytes] = []
        self._size = 0
        self.truncated = False
        self.thread = threading.Thread(target=self._drain, daemon=True)

    def _drain(self):
        try:
            while True:
                chunk = self._stream.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                room = self._limit - self._size
                if room <= 0:
                    self.truncated = True
                    continue
                if len(chunk) > room:
                    chunk = chunk[:room]
                    self.truncated = True
                self._chunks.append(chunk)
                self._size += len(chunk)
        except (OSError, ValueError):
            # pipe closed underneath us after a kill
            pass
        finally:
            try:
                self._stream.close()
            except OSError:
                pass

    def start(self):
        self.thread.start()

    def join(self, timeout_sec: float) -> bool:
        self.thread.join(timeout_sec)
        return not self.thread.is_alive()

    def text(self) -> str:
        return b"".join(self._chunks).decode("utf-8", errors="replace")


def _feed_stdin(stream, data: bytes):
    try:
        stream.write(data)
        stream.flush()
    except (BrokenPipeError, OSError):
        # the program exited or closed stdin without consuming all input
        pass
    finally:
        try:
            stream.close()
        except OSError:
            pass


def _popen_kwargs() -> dict:
    if IS_WINDOWS:
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def kill_process_tree(proc: subprocess.Popen):
    """Forcibly terminate ``proc`` and every process in its group."""
    if IS_WINDOWS:
        subprocess.run(["taskkill", "/F", "/T", "/PID", str(proc.pid)],
                       stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=False)
    else:
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        except OSError as e:
            logger.warning(f"killpg failed for pid {proc.pid}: {e}")
    try:
        proc.kill()
    except OSError:
        pass


def run_process(
        command: List[str],
        cwd: str,
        stdin: Optional[str] = None,
        timeout_ms: int = 5000,
        reader_join_timeout_ms: Optional[int] = None,
        max_output_bytes: Optional[int] = None,
        on_timeout: Optional[Callable[[], None]] = None,
) -> ProcessResult:
    """Run one command with a bounded lifetime and capture its output.

    stdout and stderr are drained by independent threads while stdin is fed
    from a third one, so a child blocked on a full pipe can never deadlock the
    caller. When ``timeout_ms`` expires the whole process group is killed,
    ``on_timeout`` is invoked and the result is flagged ``timed_out``.

    The outcome is not classified here: a nonzero exit code is reported as-is.
    Spawn failures (missing executable, bad ``cwd``) raise ``OSError``.
    """
    join_sec = (reader_join_timeout_ms if reader_join_timeout_ms is not None
                else settings.READER_JOIN_TIMEOUT_MS) / 1000
    limit = max_output_bytes if max_output_bytes is not None else settings.MAX_OUTPUT_BYTES

    logger.debug(f"Spawning {command!r} in {cwd} (timeout {timeout_ms} ms)")
    start = time.monotonic()
    proc = subprocess.Popen(
        command,
        cwd=cwd,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        **_popen_kwargs()
    )

    stdout_capture = _StreamCapture(proc.stdout, limit)
    stderr_capture = _StreamCapture(proc.stderr, limit)
    stdout_capture.start()
    stderr_capture.start()

    writer = None
    if stdin:
        writer = threading.Thread(target=_feed_stdin, args=(proc.stdin, stdin.encode("utf-8")), daemon=True)
        writer.start()
    else:
        proc.stdin.close()

    timed_out = False
    try:
        proc.wait(timeout=timeout_ms / 1000)
    except subprocess.TimeoutExpired:
        timed_out = True
        kill_process_tree(proc)
        if on_timeout is not None:
            on_timeout()
        try:
            proc.wait(timeout=join_sec)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {proc.pid} did not exit after SIGKILL within {join_sec}s")
    elapsed_ms = int((time.monotonic() - start) * 1000)

    drained = stdout_capture.join(join_sec) & stderr_capture.join(join_sec)
    if not drained:
        # a descendant still holds the pipes open
        kill_process_tree(proc)
        stdout_capture.join(join_sec)
        stderr_capture.join(join_sec)
    if writer is not None:
        writer.join(join_sec)

    if stdout_capture.truncated or stderr_capture.truncated:
        logger.info(f"Output of pid {proc.pid} truncated at {limit} bytes")

    return ProcessResult(
        stdout=stdout_capture.text(),
        stderr=stderr_capture.text(),
        exit_code=proc.returncode if proc.returncode is not None else -1,
        elapsed_ms=elapsed_ms,
        timed_out=timed_out,
    )
