"""
DeepSeek content provider.

Talks to an OpenAI-compatible chat-completions endpoint and turns the reply
into a DJ monologue. Remote failures degrade to a fixed apology script.
"""

from __future__ import annotations

import requests

from ..infra.exceptions import ContentGenerationDegraded
from ..infra.logging import get_logger
from .http import create_session

logger = get_logger(__name__)

BASE_PROMPT = (
    "Act as a funny, engaging radio DJ. Share some jokes and discuss recent world news "
    "for about 1 minute worth of talking."
)
ANNOUNCE_PROMPT = (
    " In the last 5 seconds, announce the next song that will be played by saying something "
    "like 'Coming up next is [SONG NAME] by [ARTIST NAME]!'"
)
FALLBACK_SCRIPT = (
    "Sorry, I'm having technical difficulties. Let's play some music while we fix this!"
)


def build_prompt(announce_next: bool) -> str:
    """Return the DJ instruction prompt."""
    return BASE_PROMPT + ANNOUNCE_PROMPT if announce_next else BASE_PROMPT


class DeepSeekContentProvider:
    """Content provider backed by the DeepSeek chat-completions API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.deepseek.com/v1",
        model: str = "deepseek-chat",
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key.strip()
        self.base_url = base_url.strip().rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = session or create_session()

    def complete(self, prompt: str) -> str:
        """
        Send a single user prompt and return the generated text.

        Raises:
            ContentGenerationDegraded: On transport failure, HTTP error or an
                unusable response body
        """
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ContentGenerationDegraded(f"chat completion failed: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ContentGenerationDegraded(f"unexpected completion body: {e}") from e
        if not isinstance(content, str) or not content.strip():
            raise ContentGenerationDegraded("empty completion")
        return content.strip()

    def generate_monologue(self, announce_next: bool = False) -> str:
        """Return a DJ monologue, or the fallback apology script if generation fails."""
        try:
            script = self.complete(build_prompt(announce_next))
        except ContentGenerationDegraded as e:
            logger.warning("content_generation_degraded", error=str(e), model=self.model)
            return FALLBACK_SCRIPT
        logger.info("monologue_generated", chars=len(script), announce_next=announce_next)
        return script
