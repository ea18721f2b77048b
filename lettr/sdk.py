"""
Lettr SDK - High-level client with typed operations.

This layer provides a typed interface for every Lettr API resource.
Built on top of the core APIClient.
"""

from collections.abc import Iterator

from lettr.core.client import DEFAULT_TIMEOUT, APIClient, Transport, escape_path
from lettr.core.types import (
    APIResponse,
    AuthCheckData,
    CreateDomainData,
    CreateDomainRequest,
    CreateTemplateData,
    CreateTemplateRequest,
    DomainDetail,
    EmailEvent,
    GetEmailData,
    HealthCheckData,
    ListDomainsData,
    ListEmailsData,
    ListEmailsParams,
    ListTemplatesData,
    ListTemplatesParams,
    ListWebhooksData,
    SendEmailData,
    SendEmailRequest,
    Template,
    Webhook,
)


class LettrClient:
    """
    High-level Lettr API client.

    Example:
        client = LettrClient("your-api-key")

        sent = client.emails.send(
            SendEmailRequest(
                from_email="sender@example.com",
                to=["recipient@example.com"],
                subject="Hello from Lettr",
                html="<h1>Hello!</h1>",
            )
        )
        print(sent.data.request_id)

    """

    def __init__(
        self,
        api_key: str | None = None,
        transport: Transport | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the Lettr client.

        Args:
            api_key: Lettr API key (or LETTR_API_KEY env var)
            transport: Custom transport (for proxies, timeouts or testing)
            base_url: API base URL (or LETTR_BASE_URL env var)
            timeout: Request timeout in seconds, used when no transport is given

        """
        self._client = APIClient(
            api_key=api_key,
            base_url=base_url,
            transport=transport,
            timeout=timeout,
        )

        # Sub-clients for different resources
        self.emails = EmailOperations(self._client)
        self.domains = DomainOperations(self._client)
        self.webhooks = WebhookOperations(self._client)
        self.templates = TemplateOperations(self._client)

    @property
    def base_url(self) -> str:
        """Get the current base URL."""
        return self._client.base_url

    def set_base_url(self, raw_url: str) -> None:
        """Override the base URL, e.g. to point at a mock server."""
        self._client.set_base_url(raw_url)

    def health_check(self, timeout: float | None = None) -> APIResponse[HealthCheckData]:
        """
        Check that the Lettr API is reachable.

        This is the only request sent without an Authorization header.
        """
        request = self._client.build_request("GET", "health", authenticated=False)
        request.remove_header("Authorization")
        _, result = self._client.execute(request, APIResponse.parser(HealthCheckData.from_dict), timeout=timeout)
        return result

    def validate_api_key(self, timeout: float | None = None) -> APIResponse[AuthCheckData]:
        """Check that the configured API key is valid and return its team."""
        return self._client.get("auth/check", parser=APIResponse.parser(AuthCheckData.from_dict), timeout=timeout)


# =============================================================================
# Email Operations
# =============================================================================


class EmailOperations:
    """Operations for sending emails and reading their events."""

    def __init__(self, client: APIClient):
        self._client = client

    def send(self, params: SendEmailRequest, timeout: float | None = None) -> APIResponse[SendEmailData]:
        """
        Send an email.

        Args:
            params: Sender, recipients, subject and content
            timeout: Per-call timeout override in seconds

        Returns:
            Envelope with the request ID and accepted/rejected counts

        """
        return self._client.post(
            "emails",
            params.to_dict(),
            parser=APIResponse.parser(SendEmailData.from_dict),
            timeout=timeout,
        )

    def list(
        self,
        params: ListEmailsParams | None = None,
        timeout: float | None = None,
    ) -> APIResponse[ListEmailsData]:
        """
        List sent email events, newest first.

        Args:
            params: Page size, cursor and filters. None uses API defaults.
            timeout: Per-call timeout override in seconds

        Returns:
            Envelope with one page of events and a cursor for the next page

        """
        query = params.to_query() if params else None
        return self._client.get(
            "emails",
            params=query,
            parser=APIResponse.parser(ListEmailsData.from_dict),
            timeout=timeout,
        )

    def iterate(self, params: ListEmailsParams | None = None) -> Iterator[EmailEvent]:
        """
        Iterate over every email event, following the cursor across pages.

        Args:
            params: Page size and filters. ``cursor`` sets the starting point.

        Yields:
            EmailEvent objects from all pages

        """
        page_params = ListEmailsParams(**vars(params)) if params else ListEmailsParams()
        while True:
            response = self.list(page_params)
            yield from response.data.results

            next_cursor = response.data.pagination.next_cursor
            if not next_cursor or not response.data.results:
                break
            page_params.cursor = next_cursor

    def get(self, request_id: str, timeout: float | None = None) -> APIResponse[GetEmailData]:
        """
        Get every event recorded for one email.

        Args:
            request_id: The request ID returned by send()
            timeout: Per-call timeout override in seconds

        """
        return self._client.get(
            f"emails/{escape_path(request_id)}",
            parser=APIResponse.parser(GetEmailData.from_dict),
            timeout=timeout,
        )


# =============================================================================
# Domain Operations
# =============================================================================


class DomainOperations:
    """Operations for managing sending domains."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self, timeout: float | None = None) -> APIResponse[ListDomainsData]:
        """List all sending domains registered with the account."""
        return self._client.get("domains", parser=APIResponse.parser(ListDomainsData.from_dict), timeout=timeout)

    def get(self, domain: str, timeout: float | None = None) -> APIResponse[DomainDetail]:
        """
        Get a sending domain with its DNS records.

        Args:
            domain: Domain name (e.g. "example.com")
            timeout: Per-call timeout override in seconds

        """
        return self._client.get(
            f"domains/{escape_path(domain)}",
            parser=APIResponse.parser(DomainDetail.from_dict),
            timeout=timeout,
        )

    def create(self, params: CreateDomainRequest, timeout: float | None = None) -> APIResponse[CreateDomainData]:
        """
        Register a sending domain. It stays pending until its DNS is verified.

        Args:
            params: The domain to register
            timeout: Per-call timeout override in seconds

        Returns:
            Envelope with the new domain's status and DKIM record

        """
        return self._client.post(
            "domains",
            params.to_dict(),
            parser=APIResponse.parser(CreateDomainData.from_dict),
            timeout=timeout,
        )

    def delete(self, domain: str, timeout: float | None = None) -> None:
        """
        Remove a sending domain.

        Args:
            domain: Domain name (e.g. "example.com")
            timeout: Per-call timeout override in seconds

        """
        self._client.delete(f"domains/{escape_path(domain)}", timeout=timeout)


# =============================================================================
# Webhook Operations
# =============================================================================


class WebhookOperations:
    """Operations for reading webhook configurations."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self, timeout: float | None = None) -> APIResponse[ListWebhooksData]:
        """List all webhooks configured for the account."""
        return self._client.get("webhooks", parser=APIResponse.parser(ListWebhooksData.from_dict), timeout=timeout)

    def get(self, webhook_id: str, timeout: float | None = None) -> APIResponse[Webhook]:
        """Get a single webhook by ID."""
        return self._client.get(
            f"webhooks/{escape_path(webhook_id)}",
            parser=APIResponse.parser(Webhook.from_dict),
            timeout=timeout,
        )


# =============================================================================
# Template Operations
# =============================================================================


class TemplateOperations:
    """Operations for email templates."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(
        self,
        params: ListTemplatesParams | None = None,
        timeout: float | None = None,
    ) -> APIResponse[ListTemplatesData]:
        """
        List templates, one page at a time.

        Args:
            params: Project, page size and page number. None uses API defaults
                (the team's default project, first page).
            timeout: Per-call timeout override in seconds

        """
        query = params.to_query() if params else None
        return self._client.get(
            "templates",
            params=query,
            parser=APIResponse.parser(ListTemplatesData.from_dict),
            timeout=timeout,
        )

    def iterate(self, params: ListTemplatesParams | None = None) -> Iterator[Template]:
        """
        Iterate over every template, walking pages until the last one.

        Args:
            params: Project and page size. ``page`` sets the starting page.

        Yields:
            Template objects from all pages

        """
        page_params = ListTemplatesParams(**vars(params)) if params else ListTemplatesParams()
        page_params.page = page_params.page or 1
        while True:
            response = self.list(page_params)
            yield from response.data.templates

            if not response.data.pagination.has_more or not response.data.templates:
                break
            page_params.page = response.data.pagination.current_page + 1

    def create(
        self,
        params: CreateTemplateRequest,
        timeout: float | None = None,
    ) -> APIResponse[CreateTemplateData]:
        """
        Create a template from HTML or editor JSON content.

        Returns:
            Envelope with the new template, its active version and merge tags

        """
        return self._client.post(
            "templates",
            params.to_dict(),
            parser=APIResponse.parser(CreateTemplateData.from_dict),
            timeout=timeout,
        )
