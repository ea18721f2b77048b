"""
Request and response types for the Lettr Email API.

Response dataclasses are built with ``from_dict``; request dataclasses are
serialized with ``to_dict``. Optional request fields left as ``None`` are
omitted from the JSON body rather than sent as null.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop unset optional values: None, empty strings and empty collections."""
    return {key: value for key, value in data.items() if value is not None and value not in ("", [], {})}


# =============================================================================
# Envelope & Pagination
# =============================================================================


@dataclass
class APIResponse(Generic[T]):
    """The ``{message, data}`` envelope shared by every successful response."""

    message: str
    data: T

    @classmethod
    def parser(cls, data_parser: Callable[[dict[str, Any]], T]) -> Callable[[dict[str, Any]], "APIResponse[T]"]:
        """Return a function that parses the envelope and its payload."""

        def parse(payload: dict[str, Any]) -> "APIResponse[T]":
            return cls(
                message=payload.get("message") or "",
                data=data_parser(payload.get("data") or {}),
            )

        return parse


@dataclass
class CursorPagination:
    """Cursor-based pagination info for time-ordered listings."""

    next_cursor: str | None = None
    per_page: int = 0

    @property
    def has_more(self) -> bool:
        """Check if there are more results."""
        return bool(self.next_cursor)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CursorPagination":
        """Create from API response dict."""
        return cls(
            next_cursor=data.get("next_cursor"),
            per_page=data.get("per_page", 0),
        )


@dataclass
class PagePagination:
    """Page-number pagination info for catalog listings."""

    total: int = 0
    per_page: int = 0
    current_page: int = 0
    last_page: int = 0

    @property
    def has_more(self) -> bool:
        """Check if there are more pages."""
        return self.current_page < self.last_page

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PagePagination":
        """Create from API response dict."""
        return cls(
            total=data.get("total", 0),
            per_page=data.get("per_page", 0),
            current_page=data.get("current_page", 0),
            last_page=data.get("last_page", 0),
        )


# =============================================================================
# Health & Auth
# =============================================================================


@dataclass
class HealthCheckData:
    """Health check status."""

    status: str
    timestamp: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HealthCheckData":
        """Create from API response dict."""
        return cls(status=data.get("status", ""), timestamp=data.get("timestamp", ""))


@dataclass
class AuthCheckData:
    """Team associated with a valid API key."""

    team_id: int
    timestamp: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthCheckData":
        """Create from API response dict."""
        return cls(team_id=data.get("team_id", 0), timestamp=data.get("timestamp", ""))


# =============================================================================
# Email Types
# =============================================================================


@dataclass
class Attachment:
    """A file attachment. ``data`` is the base64-encoded content."""

    name: str
    type: str
    data: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {"name": self.name, "type": self.type, "data": self.data}


@dataclass
class SendEmailOptions:
    """Tracking and delivery options. ``None`` leaves the account default in place."""

    click_tracking: bool | None = None
    open_tracking: bool | None = None
    transactional: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return _compact(
            {
                "click_tracking": self.click_tracking,
                "open_tracking": self.open_tracking,
                "transactional": self.transactional,
            }
        )


@dataclass
class SendEmailRequest:
    """
    Request body for sending an email.

    At least one of ``html``, ``text`` or ``template_slug`` is expected by the
    API. ``substitution_data`` and ``metadata`` accept any JSON values.
    """

    from_email: str
    to: list[str]
    subject: str
    from_name: str | None = None
    html: str | None = None
    text: str | None = None
    template_slug: str | None = None
    template_version: int | None = None
    project_id: int | None = None
    attachments: list[Attachment] = field(default_factory=list)
    substitution_data: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    options: SendEmailOptions | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        result: dict[str, Any] = {
            "from": self.from_email,
            "to": list(self.to),
            "subject": self.subject,
        }
        result.update(
            _compact(
                {
                    "from_name": self.from_name,
                    "html": self.html,
                    "text": self.text,
                    "template_slug": self.template_slug,
                    "template_version": self.template_version,
                    "project_id": self.project_id,
                    "attachments": [a.to_dict() for a in self.attachments],
                    "substitution_data": self.substitution_data,
                    "metadata": self.metadata,
                    "options": self.options.to_dict() if self.options else None,
                }
            )
        )
        return result


@dataclass
class SendEmailData:
    """Result of a send operation."""

    request_id: str
    accepted: int = 0
    rejected: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SendEmailData":
        """Create from API response dict."""
        return cls(
            request_id=data.get("request_id", ""),
            accepted=data.get("accepted", 0),
            rejected=data.get("rejected", 0),
        )


@dataclass
class EmailEvent:
    """A single event in an email's lifecycle (injection, delivery, bounce, open, click...)."""

    event_id: str
    type: str = ""
    timestamp: str = ""
    request_id: str = ""
    message_id: str = ""
    subject: str = ""
    friendly_from: str = ""
    sending_domain: str = ""
    rcpt_to: str = ""
    raw_rcpt_to: str = ""
    recipient_domain: str = ""
    mailbox_provider: str = ""
    mailbox_provider_region: str = ""
    sending_ip: str = ""
    click_tracking: bool = False
    open_tracking: bool = False
    transactional: bool = False
    msg_size: int = 0
    injection_time: str = ""
    reason: str | None = None
    raw_reason: str | None = None
    error_code: str | None = None
    rcpt_meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmailEvent":
        """Create from API response dict."""
        return cls(
            event_id=data.get("event_id", ""),
            type=data.get("type") or "",
            timestamp=data.get("timestamp") or "",
            request_id=data.get("request_id") or "",
            message_id=data.get("message_id") or "",
            subject=data.get("subject") or "",
            friendly_from=data.get("friendly_from") or "",
            sending_domain=data.get("sending_domain") or "",
            rcpt_to=data.get("rcpt_to") or "",
            raw_rcpt_to=data.get("raw_rcpt_to") or "",
            recipient_domain=data.get("recipient_domain") or "",
            mailbox_provider=data.get("mailbox_provider") or "",
            mailbox_provider_region=data.get("mailbox_provider_region") or "",
            sending_ip=data.get("sending_ip") or "",
            click_tracking=bool(data.get("click_tracking", False)),
            open_tracking=bool(data.get("open_tracking", False)),
            transactional=bool(data.get("transactional", False)),
            msg_size=data.get("msg_size") or 0,
            injection_time=data.get("injection_time") or "",
            reason=data.get("reason"),
            raw_reason=data.get("raw_reason"),
            error_code=data.get("error_code"),
            rcpt_meta=data.get("rcpt_meta") or {},
        )


@dataclass
class ListEmailsParams:
    """Query parameters for listing emails. Unset fields are not sent."""

    per_page: int | None = None
    cursor: str | None = None
    recipients: str | None = None
    from_date: str | None = None
    to_date: str | None = None

    def to_query(self) -> dict[str, Any]:
        """Build the query parameters, skipping unset and zero values."""
        query: dict[str, Any] = {}
        if self.per_page:
            query["per_page"] = self.per_page
        if self.cursor:
            query["cursor"] = self.cursor
        if self.recipients:
            query["recipients"] = self.recipients
        if self.from_date:
            query["from"] = self.from_date
        if self.to_date:
            query["to"] = self.to_date
        return query


@dataclass
class ListEmailsData:
    """A page of email events."""

    results: list[EmailEvent] = field(default_factory=list)
    total_count: int = 0
    pagination: CursorPagination = field(default_factory=CursorPagination)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListEmailsData":
        """Create from API response dict."""
        return cls(
            results=[EmailEvent.from_dict(e) for e in data.get("results") or []],
            total_count=data.get("total_count", 0),
            pagination=CursorPagination.from_dict(data.get("pagination") or {}),
        )


@dataclass
class GetEmailData:
    """All events recorded for one sent email."""

    results: list[EmailEvent] = field(default_factory=list)
    total_count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GetEmailData":
        """Create from API response dict."""
        return cls(
            results=[EmailEvent.from_dict(e) for e in data.get("results") or []],
            total_count=data.get("total_count", 0),
        )


# =============================================================================
# Domain Types
# =============================================================================


@dataclass
class DomainDKIM:
    """DKIM DNS record details."""

    selector: str
    public: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DomainDKIM":
        """Create from API response dict."""
        return cls(selector=data.get("selector", ""), public=data.get("public", ""))


@dataclass
class DomainDNS:
    """DNS records for a domain."""

    dkim: DomainDKIM | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DomainDNS":
        """Create from API response dict."""
        dkim = data.get("dkim")
        return cls(dkim=DomainDKIM.from_dict(dkim) if dkim else None)


@dataclass
class Domain:
    """A sending domain."""

    domain: str
    status: str = ""
    status_label: str = ""
    can_send: bool = False
    cname_status: str | None = None
    dkim_status: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Domain":
        """Create from API response dict."""
        return cls(
            domain=data.get("domain", ""),
            status=data.get("status", ""),
            status_label=data.get("status_label", ""),
            can_send=bool(data.get("can_send", False)),
            cname_status=data.get("cname_status"),
            dkim_status=data.get("dkim_status"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class DomainDetail(Domain):
    """A sending domain with its DNS records and tracking domain."""

    tracking_domain: str | None = None
    dns: DomainDNS | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DomainDetail":
        """Create from API response dict."""
        dns = data.get("dns")
        return cls(
            domain=data.get("domain", ""),
            status=data.get("status", ""),
            status_label=data.get("status_label", ""),
            can_send=bool(data.get("can_send", False)),
            cname_status=data.get("cname_status"),
            dkim_status=data.get("dkim_status"),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            tracking_domain=data.get("tracking_domain"),
            dns=DomainDNS.from_dict(dns) if dns else None,
        )


@dataclass
class CreateDomainRequest:
    """Request body for registering a sending domain."""

    domain: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {"domain": self.domain}


@dataclass
class CreateDomainData:
    """Result of registering a domain."""

    domain: str
    status: str = ""
    status_label: str = ""
    dkim: DomainDKIM | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreateDomainData":
        """Create from API response dict."""
        dkim = data.get("dkim")
        return cls(
            domain=data.get("domain", ""),
            status=data.get("status", ""),
            status_label=data.get("status_label", ""),
            dkim=DomainDKIM.from_dict(dkim) if dkim else None,
        )


@dataclass
class ListDomainsData:
    """All sending domains on the account."""

    domains: list[Domain] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListDomainsData":
        """Create from API response dict."""
        return cls(domains=[Domain.from_dict(d) for d in data.get("domains") or []])


# =============================================================================
# Webhook Types
# =============================================================================


@dataclass
class Webhook:
    """A webhook configuration."""

    id: str
    name: str = ""
    url: str = ""
    enabled: bool = False
    event_types: list[str] = field(default_factory=list)
    auth_type: str = ""
    has_auth_credentials: bool = False
    last_successful_at: str | None = None
    last_failure_at: str | None = None
    last_status: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Webhook":
        """Create from API response dict."""
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            url=data.get("url", ""),
            enabled=bool(data.get("enabled", False)),
            event_types=data.get("event_types") or [],
            auth_type=data.get("auth_type", ""),
            has_auth_credentials=bool(data.get("has_auth_credentials", False)),
            last_successful_at=data.get("last_successful_at"),
            last_failure_at=data.get("last_failure_at"),
            last_status=data.get("last_status"),
        )


@dataclass
class ListWebhooksData:
    """All webhooks on the account."""

    webhooks: list[Webhook] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListWebhooksData":
        """Create from API response dict."""
        return cls(webhooks=[Webhook.from_dict(w) for w in data.get("webhooks") or []])


# =============================================================================
# Template Types
# =============================================================================


@dataclass
class Template:
    """An email template."""

    id: int
    name: str = ""
    slug: str = ""
    project_id: int = 0
    folder_id: int = 0
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Template":
        """Create from API response dict."""
        return cls(
            id=data.get("id", 0),
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            project_id=data.get("project_id") or 0,
            folder_id=data.get("folder_id") or 0,
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
        )


@dataclass
class MergeTag:
    """A merge tag found in template content."""

    key: str
    required: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MergeTag":
        """Create from API response dict."""
        return cls(key=data.get("key", ""), required=bool(data.get("required", False)))


@dataclass
class ListTemplatesParams:
    """Query parameters for listing templates. Unset fields are not sent."""

    project_id: int | None = None
    per_page: int | None = None
    page: int | None = None

    def to_query(self) -> dict[str, Any]:
        """Build the query parameters, skipping unset and zero values."""
        query: dict[str, Any] = {}
        if self.project_id:
            query["project_id"] = self.project_id
        if self.per_page:
            query["per_page"] = self.per_page
        if self.page:
            query["page"] = self.page
        return query


@dataclass
class ListTemplatesData:
    """A page of templates."""

    templates: list[Template] = field(default_factory=list)
    pagination: PagePagination = field(default_factory=PagePagination)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ListTemplatesData":
        """Create from API response dict."""
        return cls(
            templates=[Template.from_dict(t) for t in data.get("templates") or []],
            pagination=PagePagination.from_dict(data.get("pagination") or {}),
        )


@dataclass
class CreateTemplateRequest:
    """
    Request body for creating a template.

    ``html`` and ``json`` (editor JSON content) are mutually exclusive.
    """

    name: str
    html: str | None = None
    json: str | None = None
    project_id: int | None = None
    folder_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        result: dict[str, Any] = {"name": self.name}
        result.update(
            _compact(
                {
                    "html": self.html,
                    "json": self.json,
                    "project_id": self.project_id,
                    "folder_id": self.folder_id,
                }
            )
        )
        return result


@dataclass
class CreateTemplateData:
    """Result of creating a template."""

    id: int
    name: str = ""
    slug: str = ""
    project_id: int = 0
    folder_id: int = 0
    active_version: int = 0
    merge_tags: list[MergeTag] = field(default_factory=list)
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreateTemplateData":
        """Create from API response dict."""
        return cls(
            id=data.get("id", 0),
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            project_id=data.get("project_id") or 0,
            folder_id=data.get("folder_id") or 0,
            active_version=data.get("active_version") or 0,
            merge_tags=[MergeTag.from_dict(m) for m in data.get("merge_tags") or []],
            created_at=data.get("created_at", ""),
        )
