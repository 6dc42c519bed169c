"""
Input validation shared by the HTTP API and the CLI.

Each check raises ValidationError naming the offending field, before any
service is called.
"""

from conflictguard.config import Settings, get_settings
from conflictguard.exceptions import ValidationError
from conflictguard.models import DocumentType


def validate_document_input(
    name: str | None,
    content: str | None,
    document_type: DocumentType | None,
    settings: Settings | None = None,
) -> None:
    settings = settings or get_settings()

    if name is None or not name.strip():
        raise ValidationError("Document name cannot be empty", "input.name")
    if len(name) > settings.max_document_name_length:
        raise ValidationError(
            f"Document name exceeds maximum length of "
            f"{settings.max_document_name_length} characters",
            "input.name",
        )
    if content is None or not content.strip():
        raise ValidationError("Document content cannot be empty", "input.content")
    if len(content) > settings.max_document_content_length:
        raise ValidationError(
            f"Document content exceeds maximum length of "
            f"{settings.max_document_content_length} characters",
            "input.content",
        )
    if document_type is None:
        raise ValidationError("Document type is required", "input.documentType")


def validate_document_ids(document_ids: list[str] | None, settings: Settings | None = None) -> None:
    settings = settings or get_settings()

    if not document_ids:
        raise ValidationError("At least one document ID is required", "documentIds")
    if len(document_ids) > settings.max_documents_for_analysis:
        raise ValidationError(
            f"Cannot analyze more than {settings.max_documents_for_analysis} documents at once",
            "documentIds",
        )
