import os
from pathlib import Path

from dotenv import load_dotenv


def load_env_file(env_path: str | Path = ".env") -> bool:
    return load_dotenv(Path(env_path), override=False)


def read_env_var(name: str) -> str:
    if name not in os.environ:
        raise KeyError(f"{name} is not set")

    value = os.environ[name].strip().strip("'\"")
    if not value:
        raise ValueError(f"{name} is empty")
    return value


def read_env_var_optional(name: str, default: str | None = None) -> str | None:
    try:
        return read_env_var(name)
    except (KeyError, ValueError):
        return default
