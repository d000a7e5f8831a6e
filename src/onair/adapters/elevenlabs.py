"""ElevenLabs speech synthesizer."""

from __future__ import annotations

import base64

import requests

from ..infra.exceptions import SynthesisUnavailable
from ..infra.logging import get_logger
from .http import create_session

logger = get_logger(__name__)

DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
AUDIO_MIME = "audio/mpeg"


def to_data_uri(audio: bytes, mime: str = AUDIO_MIME) -> str:
    return f"data:{mime};base64,{base64.b64encode(audio).decode('ascii')}"


class ElevenLabsSynthesizer:
    """Text-to-speech via the ElevenLabs REST API; audio comes back as a data URI."""

    def __init__(
        self,
        api_key: str,
        voice_id: str = DEFAULT_VOICE_ID,
        model_id: str = "eleven_monolingual_v1",
        stability: float = 0.5,
        similarity: float = 0.75,
        base_url: str = "https://api.elevenlabs.io/v1",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key.strip()
        self.voice_id = voice_id
        self.model_id = model_id
        self.stability = stability
        self.similarity = similarity
        self.base_url = base_url.strip().rstrip("/")
        self.timeout = timeout
        self.session = session or create_session()

    def render(self, text: str) -> bytes:
        """
        Render text to MP3 bytes.

        Raises:
            SynthesisUnavailable: If the request fails or returns no audio
        """
        if not text or not text.strip():
            raise SynthesisUnavailable("nothing to synthesize")

        body = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {
                "stability": self.stability,
                "similarity_boost": self.similarity,
            },
        }
        try:
            response = self.session.post(
                f"{self.base_url}/text-to-speech/{self.voice_id}",
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "Accept": AUDIO_MIME,
                    "xi-api-key": self.api_key,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise SynthesisUnavailable(f"text-to-speech failed: {e}") from e

        if not response.content:
            raise SynthesisUnavailable("empty audio response")
        return response.content

    def synthesize(self, text: str) -> str | None:
        """Return the spoken script as a data URI, or None when synthesis is unavailable."""
        try:
            audio = self.render(text)
        except SynthesisUnavailable as e:
            logger.warning("synthesis_unavailable", error=str(e), voice_id=self.voice_id)
            return None
        logger.info("speech_synthesized", bytes=len(audio), voice_id=self.voice_id)
        return to_data_uri(audio)
