import logging
from typing import Optional

from onlinejudge.core.config import settings
from onlinejudge.sandbox.backends.base import ExecutionBackend
from onlinejudge.sandbox.backends.docker import DockerBackend
from onlinejudge.sandbox.backends.local import LocalBackend

logger = logging.getLogger(__name__)

BACKENDS = {
    "local": LocalBackend,
    "docker": DockerBackend,
}


def create_backend(mode: Optional[str] = None) -> ExecutionBackend:
    mode = (mode or settings.EXECUTOR_MODE).lower()
    backend_cls = BACKENDS.get(mode)
    if backend_cls is None:
        raise ValueError(f"Unknown executor mode '{mode}'. Expected one of: {', '.join(BACKENDS)}")
    backend = backend_cls()
    logger.info(f"Execution backend selected: {backend.name}")
    return backend


execution_backend: ExecutionBackend = create_backend()


def get_execution_backend() -> ExecutionBackend:
    return execution_backend
