import os
import tempfile
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./onlinejudge.db"

    EXECUTOR_MODE: Literal["local", "docker"] = "local"
    SANDBOX_TEMP_ROOT: str = os.path.join(tempfile.gettempdir(), "onlinejudge")

    COMPILE_TIMEOUT_MS: int = 30000
    READER_JOIN_TIMEOUT_MS: int = 2000
    MAX_OUTPUT_BYTES: int = 16 * 1024 * 1024

    DOCKER_BINARY: str = "docker"
    DOCKER_CPUS: float = 0.5
    DOCKER_GRACE_MS: int = 2000
    DOCKER_MIN_MEMORY_MB: int = 32
    DOCKER_PIDS_LIMIT: int = 64
    DOCKER_AVAILABILITY_TIMEOUT_MS: int = 5000

    SEED_SAMPLE_DATA: bool = True
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
