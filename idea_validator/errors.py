"""Exceptions raised by the validation pipeline."""

from __future__ import annotations


class IdeaValidatorError(Exception):
    """Base class for pipeline errors."""


class RephraseError(IdeaValidatorError):
    """Raised when the rephrasing call fails; always recovered locally."""


class SchemaRegistryError(IdeaValidatorError):
    """Raised at startup when a registered JSON Schema is malformed."""


class ProviderError(IdeaValidatorError):
    """A fatal failure of the research or a generation provider.

    The message is the upstream text that is shown to the caller; the
    status and code are kept for server-side logging only.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.code = code

    def details(self) -> dict[str, object]:
        """Technical detail for the error log."""

        return {
            "provider": self.provider,
            "message": self.message,
            "status": self.status_code or 500,
            "code": self.code or "NO_CODE",
        }


class MockFixtureError(ProviderError):
    """Raised when the mock fixture cannot be loaded."""

    def __init__(self, message: str) -> None:
        super().__init__(message, provider="mock")
