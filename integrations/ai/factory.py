import logging

import httpx

from .adapter import CompletionClient
from .config import CompletionConfig


logger = logging.getLogger(__name__)


def build_completion_client(
    config: CompletionConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CompletionClient:
    logger.info(
        "Completion client: model=%s base_url=%s timeout=%ss",
        config.model,
        config.base_url,
        config.timeout_seconds,
    )
    return CompletionClient(
        api_key=config.api_key,
        model=config.model,
        base_url=config.base_url,
        system_prompt=config.system_prompt,
        timeout_seconds=config.timeout_seconds,
        transport=transport,
    )
