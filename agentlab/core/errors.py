"""
Package errors.

ServiceUnavailableError marks a dependency (LLM, embeddings, parsing service,
vector store) that is misconfigured or unreachable, so the tutorial runner can
report it with a readable message.
"""


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. OpenAI, embeddings API) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ParsingError(Exception):
    """Raised when a hosted parsing job fails or does not finish in time."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse {path}: {reason}")
