from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CompletionConfig:
    api_key: str
    model: str = "gpt-5-mini"
    base_url: str = "https://api.openai.com/v1"
    system_prompt: str | None = None
    timeout_seconds: float = 12.0
