"""
LLM client for codebuddy.

Gemini is reached through its OpenAI-compatible endpoint, so the openai SDK
does all the transport work. One prompt in, one complete answer out.
"""

import logging
import time
from dataclasses import dataclass, field

import openai

from .config_manager import DEFAULT_MODEL, GEMINI_BASE_URL, ConfigManager
from .errors import ConfigurationError, PreconditionError, RequestFailure
from .prompts import build_relay_prompt


logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Track token usage across all relay calls in this process."""
    calls: int = 0
    failures: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: list[float] = field(default_factory=list)

    @property
    def average_latency_ms(self) -> float:
        if not self.latency_ms:
            return 0.0
        return sum(self.latency_ms) / len(self.latency_ms)

    def summary(self) -> str:
        return (
            f"Gemini: {self.calls} calls ({self.failures} failed), "
            f"{self.input_tokens:,} in / {self.output_tokens:,} out, "
            f"avg {self.average_latency_ms:.0f} ms"
        )


class GeminiClient:
    """Gemini via the OpenAI-compatible API."""

    def __init__(
        self,
        usage: TokenUsage,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str = GEMINI_BASE_URL,
    ):
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                "Gemini API key not found. Run `codebuddy configure` or export GEMINI_API_KEY."
            )
        self.client = openai.OpenAI(api_key=api_key.strip(), base_url=base_url)
        self.model = model
        self.usage = usage

    def generate(self, prompt: str) -> str:
        """Send one prompt and return the full response text.

        No streaming and no retry: a failure is reported once and the user
        decides whether to try again.
        """
        t0 = time.time()
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            self.usage.failures += 1
            raise RequestFailure(
                "Failed to get response from Gemini.",
                detail=f"Gemini API error on {self.model}: {e}",
            ) from e

        latency_ms = (time.time() - t0) * 1000
        self.usage.calls += 1
        self.usage.latency_ms.append(latency_ms)
        if getattr(response, "usage", None):
            self.usage.input_tokens += response.usage.prompt_tokens or 0
            self.usage.output_tokens += response.usage.completion_tokens or 0

        choices = getattr(response, "choices", None) or []
        text = choices[0].message.content if choices else None
        if not text:
            self.usage.failures += 1
            raise RequestFailure(
                "Failed to get response from Gemini.",
                detail=f"Gemini returned an empty response on {self.model}",
            )
        return text


def create_client(usage: TokenUsage, config_manager: ConfigManager | None = None) -> GeminiClient:
    """Factory: build a client from the global config and environment."""
    cm = config_manager or ConfigManager()
    config = cm.load_config()
    return GeminiClient(
        usage=usage,
        model=config.model or DEFAULT_MODEL,
        api_key=cm.resolve_api_key(),
        base_url=config.base_url or GEMINI_BASE_URL,
    )


def relay(user_prompt: str, code_context: str, client: GeminiClient) -> str:
    """Forward a request plus its code context to Gemini.

    Raises PreconditionError for an empty context without touching the
    network, and RequestFailure for anything that goes wrong upstream.
    """
    if not code_context:
        raise PreconditionError("No code found in the editor to provide context.")

    prompt = build_relay_prompt(user_prompt, code_context)
    logger.debug("Relaying %d chars to %s", len(prompt), client.model)
    return client.generate(prompt)
