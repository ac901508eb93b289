"""Exception types shared across ingestion and advice flows."""


class UpstreamUnavailableError(Exception):
    """Raised when the Sleeper player universe cannot be fetched (fatal for an ingestion run)."""


class EmbeddingError(Exception):
    """Raised when the embedding provider fails or returns an unusable vector."""


class RetrievalError(Exception):
    """Raised when similarity search or live snapshot lookup fails (fatal for an advice query)."""


class GenerationError(Exception):
    """Raised when the generation provider fails to produce advice."""
