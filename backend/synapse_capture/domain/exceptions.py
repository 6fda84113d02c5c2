"""Domain-specific exceptions: framework-independent."""


class ValidationError(Exception):
    """Raised when a request is missing required input. No work is performed."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)


class NoSegmentDeterminedError(Exception):
    """Raised when classification yields no valid segment for a capture."""

    def __init__(self, message: str = "No valid segment could be determined for this content"):
        self.message = message
        super().__init__(message)


class StorageError(Exception):
    """Raised when the content store cannot complete a read or write."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"Storage {operation} failed: {message}")


class ChatProviderError(Exception):
    """Raised when a chat provider returns an error.

    Provider-agnostic: works for OpenRouter, OpenAI, etc.
    """

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")


class EmbeddingProviderError(Exception):
    """Raised when the embedding endpoint returns an error or a malformed body."""

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] embeddings {status_code}: {message}")
