"""Speech proxy endpoints. Provider keys never leave the server."""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import Response, StreamingResponse

from teachback.core.exceptions import ValidationError
from teachback.core.logging import setup_logger
from teachback.dependencies import get_speech_service
from teachback.schemas.speech import TextToSpeechRequest, TranscriptionResponse
from teachback.services.speech import SpeechService

logger = setup_logger(__name__)

router = APIRouter(tags=["speech"])

AUDIO_MEDIA_TYPE = "audio/mpeg"


@router.post(
    "/speech-to-text",
    status_code=status.HTTP_200_OK,
    response_model=TranscriptionResponse,
    summary="Transcribe an English audio clip",
)
async def speech_to_text(
    audio: Optional[UploadFile] = File(default=None),
    speech_service: SpeechService = Depends(get_speech_service),
) -> TranscriptionResponse:
    """Accept a multipart `audio` file and return `{text}`."""
    if audio is None:
        raise ValidationError("No audio file provided")

    content = await audio.read()
    if not content:
        raise ValidationError("No audio file provided")

    text = await speech_service.transcribe(
        content,
        filename=audio.filename or "audio.mp3",
        content_type=audio.content_type or "audio/mp3",
    )
    return TranscriptionResponse(text=text)


@router.post(
    "/text-to-speech",
    status_code=status.HTTP_200_OK,
    summary="Synthesize speech and return the complete audio",
)
async def text_to_speech(
    request: TextToSpeechRequest,
    speech_service: SpeechService = Depends(get_speech_service),
) -> Response:
    """Return `audio/mpeg` bytes for the given text."""
    if not request.text or not request.text.strip():
        raise ValidationError("Text is required")

    audio = await speech_service.synthesize(request.text, request.voice_id)
    return Response(
        content=audio,
        media_type=AUDIO_MEDIA_TYPE,
        headers={"Content-Length": str(len(audio))},
    )


@router.post(
    "/text-to-speech/stream",
    status_code=status.HTTP_200_OK,
    summary="Synthesize speech and stream the audio as it is produced",
)
async def text_to_speech_stream(
    request: TextToSpeechRequest,
    speech_service: SpeechService = Depends(get_speech_service),
) -> StreamingResponse:
    """
    Stream `audio/mpeg` chunks.

    Failures before the first chunk are reported as a 500 JSON error;
    later failures end the stream early.
    """
    if not request.text or not request.text.strip():
        raise ValidationError("Text is required")

    chunks = await speech_service.open_speech_stream(request.text, request.voice_id)
    return StreamingResponse(chunks, media_type=AUDIO_MEDIA_TYPE)
