from .adapter import (
    DEFAULT_SYSTEM_PROMPT,
    FALLBACK_ANSWER,
    CompletionClient,
    CompletionError,
)
from .config import CompletionConfig
from .factory import build_completion_client

__all__ = [
    "CompletionClient",
    "CompletionConfig",
    "CompletionError",
    "DEFAULT_SYSTEM_PROMPT",
    "FALLBACK_ANSWER",
    "build_completion_client",
]
