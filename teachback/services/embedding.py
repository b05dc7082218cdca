"""Embedding service for vector embeddings."""

from typing import List

from langchain_aws import BedrockEmbeddings
from langchain_openai import OpenAIEmbeddings

from teachback.core.config import Settings
from teachback.core.exceptions import UpstreamError
from teachback.core.logging import setup_logger

logger = setup_logger(__name__)


class EmbeddingService:
    """Service for generating query embeddings."""

    def __init__(self, settings: Settings) -> None:
        """Initialize embedding service."""
        self.settings = settings
        self.provider = settings.EMBEDDING_PROVIDER
        self._embedding_model = None

    def get_embedding_model(self):
        """Get the embedding model instance."""
        if self._embedding_model is None:
            self._embedding_model = self._create_embedding_model()
        return self._embedding_model

    def _create_embedding_model(self):
        """Create embedding model based on provider."""
        if self.provider == "openai":
            return self._create_openai_embeddings()
        elif self.provider == "bedrock":
            return self._create_bedrock_embeddings()
        else:
            raise UpstreamError(f"Unsupported embedding provider: {self.provider}")

    def _create_openai_embeddings(self):
        """Create OpenAI embeddings instance."""
        try:
            logger.info(
                f"Initializing OpenAI embeddings: model={self.settings.OPENAI_EMBEDDING_MODEL}"
            )
            return OpenAIEmbeddings(
                model=self.settings.OPENAI_EMBEDDING_MODEL,
                api_key=self.settings.OPENAI_API_KEY,
            )
        except Exception as e:
            logger.error(f"Failed to create OpenAI embeddings: {str(e)}")
            raise UpstreamError(f"Failed to initialize OpenAI embeddings: {str(e)}")

    def _create_bedrock_embeddings(self):
        """Create Bedrock embeddings instance."""
        try:
            if not self.settings.BEDROCK_EMBEDDING:
                raise UpstreamError("BEDROCK_EMBEDDING setting is required")

            logger.info(
                f"Initializing Bedrock embeddings: model={self.settings.BEDROCK_EMBEDDING}, "
                f"region={self.settings.BEDROCK_REGION}"
            )
            return BedrockEmbeddings(
                region_name=self.settings.BEDROCK_REGION,
                model_id=self.settings.BEDROCK_EMBEDDING,
            )
        except Exception as e:
            logger.error(f"Failed to create Bedrock embeddings: {str(e)}")
            raise UpstreamError(f"Failed to initialize Bedrock embeddings: {str(e)}")

    async def embed_query(self, query: str) -> List[float]:
        """
        Convert a query into its embedding vector.

        Raises:
            UpstreamError: If the model cannot be created or the hosted call fails
        """
        model = self.get_embedding_model()
        try:
            embedding = await model.aembed_query(query)
        except Exception as e:
            logger.error(f"Embedding request failed: {e}", exc_info=True)
            raise UpstreamError(f"Embedding request failed: {str(e)}")

        logger.debug(f"Embedded query: length={len(query)}, dimensions={len(embedding)}")
        return embedding
