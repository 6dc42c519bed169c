"""
Exception hierarchy for ConflictGuard.

Validation and not-found errors are raised at the API boundary; LLM errors
come from the provider layer; AIServiceUnavailableError is the retryable
condition surfaced when conflict reasoning cannot reach a model.
"""

from typing import Any


class ConflictGuardError(Exception):
    """Base class for all ConflictGuard errors."""

    code = "INTERNAL_ERROR"

    def extensions(self) -> dict[str, Any]:
        """Extra fields included in API error payloads."""
        return {"code": self.code}


class ValidationError(ConflictGuardError):
    """Rejected input, tied to the offending field."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field

    def extensions(self) -> dict[str, Any]:
        return {"code": self.code, "field": self.field}


class NotFoundError(ConflictGuardError):
    """A resource looked up by id does not exist."""

    code = "NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with ID '{resource_id}' not found")
        self.resource_type = resource_type
        self.resource_id = resource_id

    def extensions(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "resourceType": self.resource_type,
            "resourceId": self.resource_id,
        }


class LLMError(ConflictGuardError):
    """An LLM call failed after all retries and fallbacks."""

    code = "LLM_ERROR"


class LLMNotConfiguredError(LLMError):
    """No LLM provider has credentials configured."""

    code = "LLM_NOT_CONFIGURED"


class AIServiceUnavailableError(ConflictGuardError):
    """The AI service is temporarily unavailable; the caller may retry later."""

    code = "SERVICE_UNAVAILABLE"

    def __init__(
        self,
        message: str = "AI service temporarily unavailable. Please try again later.",
        service: str = "llm",
        retry_after_seconds: int = 30,
    ):
        super().__init__(message)
        self.service = service
        self.retry_after_seconds = retry_after_seconds

    def extensions(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "service": self.service,
            "retryAfterSeconds": self.retry_after_seconds,
        }


class GraphStoreError(ConflictGuardError):
    """The graph store could not complete an operation."""

    code = "STORE_UNAVAILABLE"
