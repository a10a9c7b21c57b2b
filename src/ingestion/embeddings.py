"""Embedding helpers using OpenAI text-embedding-3-small."""

from __future__ import annotations

from openai import OpenAI


def embed_texts(
    client: OpenAI,
    texts: list[str],
    model: str = "text-embedding-3-small",
    dimensions: int | None = None,
) -> list[list[float]]:
    """Embed a list of texts using the OpenAI embeddings API.

    Args:
        client: Configured OpenAI client.
        texts: Strings to embed.
        model: OpenAI embedding model name.
        dimensions: Optional output dimensionality (text-embedding-3 models only).

    Returns:
        A list of embedding vectors (one per input text).
    """
    if dimensions is None:
        response = client.embeddings.create(input=texts, model=model)
    else:
        response = client.embeddings.create(input=texts, model=model, dimensions=dimensions)
    return [list(item.embedding) for item in response.data]
