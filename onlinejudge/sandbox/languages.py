import sys
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

IS_WINDOWS = sys.platform.startswith("win")

# Toolchain names on the host, fixed for the process lifetime.
LOCAL_TOOLCHAIN: Dict[str, str] = {
    "python": "python" if IS_WINDOWS else "python3",
    "gcc": "gcc",
    "gpp": "g++",
}
LOCAL_EXECUTABLE_NAME = "a.exe" if IS_WINDOWS else "a.out"

# Container images are Linux regardless of the host.
CONTAINER_TOOLCHAIN: Dict[str, str] = {
    "python": "python3",
    "gcc": "gcc",
    "gpp": "g++",
}
CONTAINER_EXECUTABLE_NAME = "a.out"


class LanguageProfile(BaseModel):
    """Static description of how to build and run one language.

    Command templates are formatted with ``{file}``, ``{dir}`` and ``{exe}``
    (workspace paths) and ``{python}``, ``{gcc}``, ``{gpp}`` (toolchain names)
    by the active backend.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    key: str
    display_name: str
    extension: str
    compile_command: Optional[str] = None
    run_command: str
    image: str

    @property
    def source_name(self) -> str:
        if self.key == "java":
            return f"Main.{self.extension}"
        return f"solution.{self.extension}"

    @property
    def is_compiled(self) -> bool:
        return self.compile_command is not None


LANGUAGES: Dict[int, LanguageProfile] = {
    profile.id: profile for profile in (
        LanguageProfile(id=71, key="python", display_name="Python 3", extension="py",
                        run_command="{python} {file}", image="python:3.9-slim"),
        LanguageProfile(id=62, key="java", display_name="Java", extension="java",
                        compile_command="javac {file}", run_command="java -cp {dir} Main",
                        image="openjdk:17-slim"),
        LanguageProfile(id=54, key="cpp", display_name="C++ (GCC)", extension="cpp",
                        compile_command="{gpp} -o {exe} {file}", run_command="{exe}",
                        image="gcc:latest"),
        LanguageProfile(id=63, key="javascript", display_name="JavaScript (Node.js)", extension="js",
                        run_command="node {file}", image="node:18-slim"),
        LanguageProfile(id=50, key="c", display_name="C (GCC)", extension="c",
                        compile_command="{gcc} -o {exe} {file}", run_command="{exe}",
                        image="gcc:latest"),
    )
}


def get_language(language_id: int) -> Optional[LanguageProfile]:
    return LANGUAGES.get(language_id)


def is_supported(language_id: int) -> bool:
    return language_id in LANGUAGES


def language_names() -> Dict[int, str]:
    return {lang_id: profile.display_name for lang_id, profile in sorted(LANGUAGES.items())}


def supported_language_list() -> List[str]:
    return [profile.display_name for _, profile in sorted(LANGUAGES.items())]
