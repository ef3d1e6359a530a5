import asyncio
import logging
from typing import Any

import httpx


logger = logging.getLogger(__name__)


DEFAULT_SYSTEM_PROMPT = (
    "You are a friendly VR 101 teacher inside a Unity VR classroom.\n"
    "Answer in 1-3 short sentences. Beginner-friendly. No links.\n"
    "If unrelated, redirect to VR basics: presence, tracking, locomotion, "
    "interaction, spatial audio, comfort."
)

FALLBACK_ANSWER = "I didn't catch that, can you rephrase?"

TIMEOUT_MESSAGE = "Completion provider did not respond in time"


class CompletionError(Exception):
    """A failed completion call, described in words safe to show the caller."""


class CompletionClient:
    """Chat-completions client with one deadline and a single retry.

    The deadline covers both attempts: a slow first attempt leaves less time
    for the second one.
    """

    max_attempts = 2

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-5-mini",
        base_url: str = "https://api.openai.com/v1",
        system_prompt: str | None = None,
        timeout_seconds: float = 12.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("OPENAI_API_KEY is required")
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        self.timeout_seconds = timeout_seconds

        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    async def ask(self, question: str) -> str:
        try:
            return await asyncio.wait_for(
                self._ask_with_retry(question),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "Completion deadline of %ss exceeded", self.timeout_seconds
            )
            raise CompletionError(TIMEOUT_MESSAGE) from exc

    async def aclose(self) -> None:
        await self._http.aclose()

    def build_messages(self, question: str) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": question},
        ]

    async def _ask_with_retry(self, question: str) -> str:
        messages = self.build_messages(question)
        try:
            return await self._call_model(messages)
        except Exception as exc:
            logger.warning("Completion attempt 1 failed, retrying once: %s", exc)

        try:
            return await self._call_model(messages)
        except CompletionError:
            raise
        except Exception as exc:
            logger.exception("Completion attempt 2 failed")
            raise CompletionError("Completion request failed") from exc

    async def _call_model(self, messages: list[dict[str, str]]) -> str:
        payload = {"model": self.model, "messages": messages}

        try:
            response = await self._http.post("/chat/completions", json=payload)
        except httpx.TimeoutException as exc:
            logger.error("LLM timeout: %s", exc)
            raise CompletionError(TIMEOUT_MESSAGE) from exc
        except httpx.HTTPError as exc:
            logger.error("LLM network error: %s", exc)
            raise CompletionError("Could not reach the completion provider") from exc

        if response.status_code >= 400:
            raise self._error_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("LLM returned non-JSON body (HTTP %s)", response.status_code)
            raise CompletionError(
                "Unexpected response from the completion provider"
            ) from exc

        return _extract_text(data) or FALLBACK_ANSWER

    @staticmethod
    def _error_for_status(response: httpx.Response) -> CompletionError:
        body = response.text
        logger.error("LLM HTTP error %s: %s", response.status_code, body)
        api_code = None
        try:
            api_code = response.json().get("error", {}).get("code")
        except (ValueError, AttributeError):
            pass

        if response.status_code == 401:
            return CompletionError("Completion provider rejected the API key")
        if response.status_code == 429 and api_code == "insufficient_quota":
            return CompletionError("Completion provider quota is exhausted")
        if response.status_code == 429:
            return CompletionError("Completion provider is rate limiting requests")
        if 500 <= response.status_code < 600:
            return CompletionError("Completion provider is temporarily unavailable")
        return CompletionError(
            f"Completion provider returned HTTP {response.status_code}"
        )


def _extract_text(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        logger.error("Unexpected LLM response format: %r", data)
        raise CompletionError(
            "Unexpected response from the completion provider"
        ) from exc

    if content is None:
        return ""

    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict) and item.get("type") == "text":
                parts.append(str(item.get("text", "")))
        content = "\n".join(part for part in parts if part)

    return str(content).strip()
