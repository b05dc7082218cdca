"""Speech helpers: transcription and synthesis proxied with server-held keys."""

import re
from typing import AsyncIterator, Optional

from elevenlabs import VoiceSettings
from elevenlabs.client import AsyncElevenLabs
from openai import AsyncOpenAI

from teachback.core.config import Settings
from teachback.core.exceptions import UpstreamError
from teachback.core.logging import setup_logger

logger = setup_logger(__name__)

TRANSCRIPTION_PROMPT = "Please transcribe this audio in English only"

# Markdown emphasis and headings read badly when spoken
MARKDOWN_SYMBOLS = re.compile(r"[*#]")


def sanitize_for_speech(text: str) -> str:
    return MARKDOWN_SYMBOLS.sub("", text).strip()


class SpeechService:
    """Thin wrapper over the hosted speech-to-text and text-to-speech APIs."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._openai_client = None
        self._elevenlabs_client = None

    def get_openai_client(self) -> AsyncOpenAI:
        if self._openai_client is None:
            self._openai_client = AsyncOpenAI(api_key=self.settings.OPENAI_API_KEY)
        return self._openai_client

    def get_elevenlabs_client(self) -> AsyncElevenLabs:
        if self._elevenlabs_client is None:
            if not self.settings.ELEVENLABS_API_KEY:
                raise UpstreamError("ELEVENLABS_API_KEY setting is required")
            self._elevenlabs_client = AsyncElevenLabs(
                api_key=self.settings.ELEVENLABS_API_KEY
            )
        return self._elevenlabs_client

    async def transcribe(
        self, audio: bytes, filename: str = "audio.mp3", content_type: str = "audio/mp3"
    ) -> str:
        """
        Transcribe an English audio clip.

        Raises:
            UpstreamError: If the transcription call fails
        """
        try:
            transcription = await self.get_openai_client().audio.transcriptions.create(
                file=(filename, audio, content_type),
                model=self.settings.STT_MODEL,
                language="en",
                response_format="json",
                prompt=TRANSCRIPTION_PROMPT,
            )
        except Exception as e:
            logger.error(f"STT Error: {e}", exc_info=True)
            raise UpstreamError("Failed to convert speech to text")

        logger.info(f"Transcribed {len(audio)} bytes of audio")
        return transcription.text

    async def open_speech_stream(
        self, text: str, voice_id: Optional[str] = None
    ) -> AsyncIterator[bytes]:
        """
        Start synthesis and wait for the first audio chunk.

        Raises:
            UpstreamError: If synthesis fails before any audio is produced
        """
        voice = voice_id or self.settings.ELEVENLABS_VOICE_ID
        try:
            audio_stream = self.get_elevenlabs_client().text_to_speech.convert(
                voice_id=voice,
                text=sanitize_for_speech(text),
                model_id=self.settings.ELEVENLABS_MODEL_ID,
                voice_settings=VoiceSettings(
                    stability=self.settings.ELEVENLABS_STABILITY,
                    similarity_boost=self.settings.ELEVENLABS_SIMILARITY_BOOST,
                ),
            )
            iterator = audio_stream.__aiter__()
            first = await iterator.__anext__()
        except StopAsyncIteration:
            first = b""
            iterator = None
        except UpstreamError:
            raise
        except Exception as e:
            logger.error(f"TTS Error: voice={voice}, error={e}", exc_info=True)
            raise UpstreamError("Failed to convert text to speech")

        logger.info(f"Speech stream opened: voice={voice}, characters={len(text)}")
        return self._relay(first, iterator)

    async def _relay(self, first: bytes, iterator) -> AsyncIterator[bytes]:
        if first:
            yield first
        if iterator is None:
            return
        try:
            async for chunk in iterator:
                yield chunk
        except Exception as e:
            logger.error(f"TTS stream interrupted: {e}", exc_info=True)
            raise UpstreamError("Text to speech stream interrupted")

    async def synthesize(self, text: str, voice_id: Optional[str] = None) -> bytes:
        """Synthesize speech and return the complete audio."""
        chunks = []
        async for chunk in await self.open_speech_stream(text, voice_id):
            chunks.append(chunk)
        return b"".join(chunks)
