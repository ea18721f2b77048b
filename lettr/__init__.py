"""
Lettr - Python client for the Lettr Email API.

Layers:
- core: Raw types and HTTP client
- sdk: High-level LettrClient with one service per API resource
- cli: Command-line interface
"""

__version__ = "0.1.0"

from lettr.core import (  # noqa: E402
    APIError,
    APIResponse,
    Attachment,
    CreateDomainRequest,
    CreateTemplateRequest,
    DecodeError,
    LettrError,
    ListEmailsParams,
    ListTemplatesParams,
    RequestError,
    SendEmailOptions,
    SendEmailRequest,
    Transport,
    TransportError,
    ValidationError,
    has_error_code,
    is_not_found,
    is_unauthorized,
    is_validation_error,
)
from lettr.sdk import LettrClient  # noqa: E402

__all__ = [
    "APIError",
    "APIResponse",
    "Attachment",
    "CreateDomainRequest",
    "CreateTemplateRequest",
    "DecodeError",
    "LettrClient",
    "LettrError",
    "ListEmailsParams",
    "ListTemplatesParams",
    "RequestError",
    "SendEmailOptions",
    "SendEmailRequest",
    "Transport",
    "TransportError",
    "ValidationError",
    "has_error_code",
    "is_not_found",
    "is_unauthorized",
    "is_validation_error",
]
