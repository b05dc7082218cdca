"""LangSmith-traced recording of completed exchanges."""

import asyncio

from langsmith import traceable
from langsmith.wrappers import wrap_openai
from openai import AsyncOpenAI

from teachback.core.config import Settings
from teachback.core.exceptions import UpstreamError
from teachback.core.logging import setup_logger

logger = setup_logger(__name__)

TRACE_SYSTEM_PROMPT = "Just print the same response you received."


class TracingService:
    """Sends each Q&A pair through a traced echo completion.

    The completion is raced against ``TRACE_TIMEOUT_SECONDS``; the timer
    winning fails the call with UpstreamError.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.timeout = settings.TRACE_TIMEOUT_SECONDS
        self._client = None
        self._traced_completion = traceable(
            name="Tracing",
            run_type="llm",
            project_name=settings.LANGSMITH_PROJECT,
            metadata={"environment": settings.ENVIRONMENT},
        )(self._create_completion)

    def get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = wrap_openai(AsyncOpenAI(api_key=self.settings.OPENAI_API_KEY))
        return self._client

    async def _create_completion(self, question: str, response: str) -> str:
        completion = await self.get_client().chat.completions.create(
            model=self.settings.TRACE_MODEL,
            messages=[
                {"role": "system", "content": TRACE_SYSTEM_PROMPT},
                {"role": "user", "content": f"Question: {question}\nResponse: {response}"},
            ],
        )
        return completion.choices[0].message.content if completion.choices else None

    async def trace_exchange(self, question: str, response: str):
        """
        Record one exchange in the tracing backend.

        Returns:
            The echoed completion text (may be None)

        Raises:
            UpstreamError: On timeout or completion failure
        """
        try:
            content = await asyncio.wait_for(
                self._traced_completion(question, response), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Trace completion timed out after {self.timeout}s")
            raise UpstreamError("Request timeout")
        except Exception as e:
            logger.error(f"Completion error: {e}", exc_info=True)
            raise UpstreamError("Failed to process completion")

        logger.info("Exchange traced")
        return content
