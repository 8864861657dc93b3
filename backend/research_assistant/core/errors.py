from __future__ import annotations


class ResearchError(Exception):
    """
    Base class for failures that terminate a search request.

    `status_code` is the HTTP status the API layer answers with and
    `message` is safe to show to the browser client.
    """

    status_code: int = 500
    error: str = "Failed to process search request"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingQueryError(ResearchError):
    status_code = 400
    error = "Missing query"

    def __init__(self, message: str = "Missing query") -> None:
        super().__init__(message)


class ConfigurationError(ResearchError):
    """A mandatory credential is absent; raised before any outbound call."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.error = message


class SynthesisError(ResearchError):
    """The completion service call failed; no partial result is returned."""


class InvalidCredentialError(SynthesisError):
    def __init__(self) -> None:
        super().__init__(
            "Invalid Groq API key. Please check your GROQ_API_KEY configuration"
        )


class RateLimitedError(SynthesisError):
    def __init__(self) -> None:
        super().__init__("Groq API rate limit exceeded. Please try again later")


class SynthesisServiceError(SynthesisError):
    def __init__(self, status_code: int | None, body: str) -> None:
        self.upstream_status = status_code
        self.body = body
        if status_code is None:
            message = f"Groq API request failed: {body}"
        else:
            message = f"Groq API error ({status_code}): {body}"
        super().__init__(message)
