"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses for API requests and responses
- Low-level HTTP client with auth and error handling
"""

from lettr.core.client import (
    APIClient,
    APIError,
    DecodeError,
    HTTPResponse,
    LettrError,
    RequestError,
    Transport,
    TransportError,
    ValidationError,
    has_error_code,
    is_not_found,
    is_unauthorized,
    is_validation_error,
)
from lettr.core.types import (
    APIResponse,
    Attachment,
    CreateDomainRequest,
    CreateTemplateRequest,
    CursorPagination,
    Domain,
    DomainDetail,
    EmailEvent,
    ListEmailsParams,
    ListTemplatesParams,
    PagePagination,
    SendEmailOptions,
    SendEmailRequest,
    Template,
    Webhook,
)

__all__ = [
    "APIClient",
    "APIError",
    "APIResponse",
    "Attachment",
    "CreateDomainRequest",
    "CreateTemplateRequest",
    "CursorPagination",
    "DecodeError",
    "Domain",
    "DomainDetail",
    "EmailEvent",
    "HTTPResponse",
    "LettrError",
    "ListEmailsParams",
    "ListTemplatesParams",
    "PagePagination",
    "RequestError",
    "SendEmailOptions",
    "SendEmailRequest",
    "Template",
    "Transport",
    "TransportError",
    "ValidationError",
    "Webhook",
    "has_error_code",
    "is_not_found",
    "is_unauthorized",
    "is_validation_error",
]
