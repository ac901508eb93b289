"""OpenAI embeddings generation with validation."""

import asyncio

from openai import OpenAI

from huddle.core.config import get_settings
from huddle.core.errors import EmbeddingError
from huddle.core.logging import get_logger

logger = get_logger(__name__)


def _get_client() -> OpenAI:
    """Get OpenAI client instance."""
    settings = get_settings()
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def embed_texts(texts: list[str]) -> list[list[float]]:
    """
    Generate embeddings for a list of texts using OpenAI.

    Args:
        texts: List of text strings to embed

    Returns:
        List of embedding vectors (each vector is list of floats)

    Raises:
        EmbeddingError: If a vector is empty or its dimension doesn't match EMBEDDING_DIM
        Exception: If OpenAI API call fails
    """
    if not texts:
        return []

    settings = get_settings()
    client = _get_client()

    try:
        response = client.embeddings.create(
            model=settings.EMBEDDING_MODEL,
            input=texts,
        )

        embeddings = []
        for i, embedding_obj in enumerate(response.data):
            embedding = embedding_obj.embedding

            if not embedding:
                raise EmbeddingError(f"Empty embedding generated for text {i}")

            if len(embedding) != settings.EMBEDDING_DIM:
                raise EmbeddingError(
                    f"Embedding dimension mismatch for text {i}: "
                    f"expected {settings.EMBEDDING_DIM}, got {len(embedding)}"
                )

            embeddings.append(embedding)

        logger.debug(
            f"Generated {len(embeddings)} embeddings using {settings.EMBEDDING_MODEL}",
            extra={"model": settings.EMBEDDING_MODEL, "count": len(embeddings)},
        )

        return embeddings

    except Exception as e:
        logger.error(f"Failed to generate embeddings: {e}")
        raise


async def embed_texts_async(texts: list[str]) -> list[list[float]]:
    """Async wrapper around embed_texts using thread pool."""
    return await asyncio.to_thread(embed_texts, texts)


async def embed_text_async(text: str) -> list[float]:
    """Embed a single text; one provider call per player keeps failures isolated."""
    embeddings = await embed_texts_async([text])
    if not embeddings:
        raise EmbeddingError("Empty embedding generated")
    return embeddings[0]
