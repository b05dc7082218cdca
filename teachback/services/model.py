"""LLM model service for chat completions."""

from langchain_aws import ChatBedrock
from langchain_openai import ChatOpenAI

from teachback.core.config import Settings
from teachback.core.exceptions import UpstreamError
from teachback.core.logging import setup_logger

logger = setup_logger(__name__)


class ModelService:
    """Service owning the hosted chat model client."""

    def __init__(self, settings: Settings) -> None:
        """Initialize model service."""
        self.settings = settings
        self.provider = settings.MODEL_PROVIDER
        self._model = None

    def get_model(self):
        """Get the LLM model instance."""
        if self._model is None:
            self._model = self._create_model()
        return self._model

    def _create_model(self):
        """Create model based on provider."""
        if self.provider == "openai":
            return self._create_openai_model()
        elif self.provider == "bedrock":
            return self._create_bedrock_model()
        else:
            raise UpstreamError(f"Unsupported model provider: {self.provider}")

    def _model_kwargs(self) -> dict:
        """Generation parameters that are explicitly configured."""
        model_kwargs = {}
        if self.settings.MODEL_MAX_TOKENS is not None:
            model_kwargs["max_tokens"] = self.settings.MODEL_MAX_TOKENS
        if self.settings.MODEL_TEMPERATURE is not None:
            model_kwargs["temperature"] = self.settings.MODEL_TEMPERATURE
        return model_kwargs

    def _create_openai_model(self):
        """Create OpenAI chat model instance."""
        try:
            model_kwargs = self._model_kwargs()
            logger.info(
                f"Initializing OpenAI chat model: model={self.settings.OPENAI_CHAT_MODEL}, "
                f"kwargs={model_kwargs}"
            )
            return ChatOpenAI(
                model=self.settings.OPENAI_CHAT_MODEL,
                api_key=self.settings.OPENAI_API_KEY,
                streaming=True,
                **model_kwargs,
            )
        except Exception as e:
            logger.error(f"Failed to create OpenAI model: {str(e)}")
            raise UpstreamError(f"Failed to initialize OpenAI model: {str(e)}")

    def _create_bedrock_model(self):
        """Create Bedrock chat model instance."""
        try:
            if not self.settings.BEDROCK_MODEL:
                raise UpstreamError("BEDROCK_MODEL setting is required")

            model_kwargs = self._model_kwargs()
            logger.info(
                f"Initializing Bedrock chat model: model={self.settings.BEDROCK_MODEL}, "
                f"region={self.settings.BEDROCK_REGION}, kwargs={model_kwargs}"
            )
            return ChatBedrock(
                region_name=self.settings.BEDROCK_REGION,
                model_id=self.settings.BEDROCK_MODEL,
                model_kwargs=model_kwargs,
            )
        except Exception as e:
            logger.error(f"Failed to create Bedrock model: {str(e)}")
            raise UpstreamError(f"Failed to initialize Bedrock model: {str(e)}")
