import logging
from dataclasses import dataclass, field
from typing import Callable

from integrations.ai import CompletionConfig


logger = logging.getLogger(__name__)


EnvReader = Callable[[str], str]
EnvOptionalReader = Callable[[str, str | None], str | None]

DEFAULT_PORT = 3001
DEFAULT_MAX_BODY_BYTES = 64 * 1024


class ConfigurationError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class GatewaySettings:
    llm: CompletionConfig
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    allowed_origins: frozenset[str] = field(default_factory=frozenset)
    rate_window_seconds: int = 60
    rate_max_requests: int = 30
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES


def parse_origins(raw_value: str | None) -> frozenset[str]:
    if not raw_value:
        return frozenset()
    return frozenset(part.strip() for part in raw_value.split(",") if part.strip())


def _read_int_optional(
    read_env_var_optional: EnvOptionalReader,
    name: str,
    default: int,
) -> int:
    raw_value = read_env_var_optional(name, str(default))
    try:
        value = int(raw_value or str(default))
    except ValueError:
        logger.warning("%s is invalid, using default=%s", name, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, using default=%s", name, default)
        return default
    return value


def _read_float_optional(
    read_env_var_optional: EnvOptionalReader,
    name: str,
    default: float,
) -> float:
    raw_value = read_env_var_optional(name, str(default))
    try:
        value = float(raw_value or str(default))
    except ValueError:
        logger.warning("%s is invalid, using default=%s", name, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, using default=%s", name, default)
        return default
    return value


def load_app_settings(
    read_env_var: EnvReader,
    read_env_var_optional: EnvOptionalReader,
) -> GatewaySettings:
    """Resolve the gateway settings once, at process start.

    OPENAI_API_KEY is the only required value; everything else has a default.
    Raises ConfigurationError when the key is missing or empty.
    """
    try:
        llm_api_key = read_env_var("OPENAI_API_KEY")
    except (KeyError, ValueError) as exc:
        raise ConfigurationError(f"Missing OPENAI_API_KEY: {exc}") from exc

    llm = CompletionConfig(
        api_key=llm_api_key,
        model=read_env_var_optional("OPENAI_MODEL", "gpt-5-mini") or "gpt-5-mini",
        base_url=(
            read_env_var_optional("OPENAI_BASE_URL", "https://api.openai.com/v1")
            or "https://api.openai.com/v1"
        ),
        system_prompt=read_env_var_optional("LLM_SYSTEM_PROMPT"),
        timeout_seconds=_read_float_optional(
            read_env_var_optional,
            "LLM_TIMEOUT_SECONDS",
            12.0,
        ),
    )

    allowed_origins = parse_origins(read_env_var_optional("ALLOWED_ORIGINS", ""))
    if not allowed_origins:
        logger.warning("ALLOWED_ORIGINS is empty, every origin will be accepted")

    return GatewaySettings(
        llm=llm,
        port=_read_int_optional(read_env_var_optional, "PORT", DEFAULT_PORT),
        host=read_env_var_optional("HOST", "0.0.0.0") or "0.0.0.0",
        allowed_origins=allowed_origins,
        rate_window_seconds=_read_int_optional(
            read_env_var_optional,
            "RATE_LIMIT_WINDOW_SECONDS",
            60,
        ),
        rate_max_requests=_read_int_optional(
            read_env_var_optional,
            "RATE_LIMIT_MAX_REQUESTS",
            30,
        ),
    )
