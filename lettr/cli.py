"""
Lettr CLI - Command-line interface for the Lettr Email API.

This layer provides the user-facing commands, using the SDK layer for all
operations. It handles:
- Argument parsing
- .env loading and logging setup
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from lettr.core.client import LettrError, ValidationError
from lettr.core.types import (
    Attachment,
    CreateDomainRequest,
    CreateTemplateRequest,
    ListEmailsParams,
    ListTemplatesParams,
    SendEmailOptions,
    SendEmailRequest,
)
from lettr.sdk import LettrClient

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: LettrError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


def read_text_arg(value: str | None) -> str | None:
    """Resolve an argument that may be a literal, ``@path`` or ``-`` for stdin."""
    if value is None:
        return None
    if value == "-":
        return sys.stdin.read()
    if value.startswith("@"):
        try:
            return Path(value[1:]).read_text(encoding="utf-8")
        except OSError as e:
            error_output(ValidationError(f"Cannot read {value[1:]}: {e}"))
    return value


def parse_json_object(value: str | None, name: str) -> dict[str, Any]:
    """Parse a JSON object argument, exiting with an error if it is invalid."""
    if not value:
        return {}
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        error_output(LettrError(f"Invalid JSON for {name}: {e}"))
    if not isinstance(data, dict):
        error_output(LettrError(f"{name} must be a JSON object"))
    return data


def tri_state(value: str | None) -> bool | None:
    """Map on/off flags to True/False, leaving None when not given."""
    if value is None:
        return None
    return value == "on"


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_health(client: LettrClient, _args: argparse.Namespace) -> None:
    """Check API reachability."""
    try:
        response = client.health_check()
        json_output({"status": response.data.status, "timestamp": response.data.timestamp})
    except LettrError as e:
        error_output(e)


def cmd_auth(client: LettrClient, _args: argparse.Namespace) -> None:
    """Validate the configured API key."""
    try:
        response = client.validate_api_key()
        json_output({"valid": True, "team_id": response.data.team_id})
    except LettrError as e:
        error_output(e)


def cmd_emails_send(client: LettrClient, args: argparse.Namespace) -> None:
    """Send an email."""
    attachments = []
    for item in args.attach or []:
        name, _, rest = item.partition(":")
        mime_type, _, data = rest.partition(":")
        attachments.append(Attachment(name=name, type=mime_type, data=data))

    options = SendEmailOptions(
        click_tracking=tri_state(args.click_tracking),
        open_tracking=tri_state(args.open_tracking),
        transactional=True if args.transactional else None,
    )
    request = SendEmailRequest(
        from_email=args.from_email,
        to=args.to,
        subject=args.subject,
        from_name=args.from_name,
        html=read_text_arg(args.html),
        text=read_text_arg(args.text),
        template_slug=args.template,
        template_version=args.template_version,
        project_id=args.project_id,
        attachments=attachments,
        substitution_data=parse_json_object(args.data, "--data"),
        metadata=parse_json_object(args.metadata, "--metadata"),
        options=options if options.to_dict() else None,
    )

    try:
        response = client.emails.send(request)
        json_output(
            {
                "request_id": response.data.request_id,
                "accepted": response.data.accepted,
                "rejected": response.data.rejected,
                "message": response.message,
            }
        )
    except LettrError as e:
        error_output(e)


def cmd_emails_list(client: LettrClient, args: argparse.Namespace) -> None:
    """List sent email events."""
    params = ListEmailsParams(
        per_page=args.per_page,
        cursor=args.cursor,
        recipients=args.recipient,
        from_date=args.since,
        to_date=args.until,
    )
    try:
        response = client.emails.list(params)
        data = response.data

        if is_tty():
            if not data.results:
                print("No emails found.")
                return

            table_output(
                ["Timestamp", "Type", "Recipient", "Subject"],
                [[e.timestamp, e.type, e.rcpt_to, e.subject] for e in data.results],
                [24, 12, 30, 40],
            )
            if data.pagination.next_cursor:
                print(f"\nMore results: --cursor {data.pagination.next_cursor}")
        else:
            json_output(
                {
                    "data": [vars(e) for e in data.results],
                    "total_count": data.total_count,
                    "next_cursor": data.pagination.next_cursor,
                }
            )
    except LettrError as e:
        error_output(e)


def cmd_emails_get(client: LettrClient, args: argparse.Namespace) -> None:
    """Get all events for one email."""
    try:
        response = client.emails.get(args.request_id)
        json_output(
            {
                "data": [vars(e) for e in response.data.results],
                "total_count": response.data.total_count,
            }
        )
    except LettrError as e:
        error_output(e)


def cmd_domains_list(client: LettrClient, _args: argparse.Namespace) -> None:
    """List sending domains."""
    try:
        domains = client.domains.list().data.domains

        if is_tty():
            if not domains:
                print("No domains found.")
                return

            table_output(
                ["Domain", "Status", "Can send"],
                [[d.domain, d.status_label or d.status, "yes" if d.can_send else "no"] for d in domains],
                [40, 20, 8],
            )
        else:
            json_output({"data": [vars(d) for d in domains]})
    except LettrError as e:
        error_output(e)


def cmd_domains_get(client: LettrClient, args: argparse.Namespace) -> None:
    """Get domain details."""
    try:
        domain = client.domains.get(args.domain).data
        dkim = domain.dns.dkim if domain.dns else None
        json_output(
            {
                "domain": domain.domain,
                "status": domain.status,
                "can_send": domain.can_send,
                "cname_status": domain.cname_status,
                "dkim_status": domain.dkim_status,
                "tracking_domain": domain.tracking_domain,
                "dkim": vars(dkim) if dkim else None,
            }
        )
    except LettrError as e:
        error_output(e)


def cmd_domains_create(client: LettrClient, args: argparse.Namespace) -> None:
    """Register a sending domain."""
    try:
        created = client.domains.create(CreateDomainRequest(domain=args.domain)).data
        json_output(
            {
                "domain": created.domain,
                "status": created.status,
                "dkim": vars(created.dkim) if created.dkim else None,
            }
        )
    except LettrError as e:
        error_output(e)


def cmd_domains_delete(client: LettrClient, args: argparse.Namespace) -> None:
    """Delete a sending domain."""
    try:
        client.domains.delete(args.domain)
        json_output({"success": True, "message": f"Domain {args.domain} deleted"})
    except LettrError as e:
        error_output(e)


def cmd_webhooks_list(client: LettrClient, _args: argparse.Namespace) -> None:
    """List webhooks."""
    try:
        webhooks = client.webhooks.list().data.webhooks

        if is_tty():
            if not webhooks:
                print("No webhooks found.")
                return

            table_output(
                ["ID", "Name", "URL", "Enabled"],
                [[w.id, w.name, w.url, "yes" if w.enabled else "no"] for w in webhooks],
                [24, 24, 50, 7],
            )
        else:
            json_output({"data": [vars(w) for w in webhooks]})
    except LettrError as e:
        error_output(e)


def cmd_webhooks_get(client: LettrClient, args: argparse.Namespace) -> None:
    """Get webhook details."""
    try:
        json_output(vars(client.webhooks.get(args.webhook_id).data))
    except LettrError as e:
        error_output(e)


def cmd_templates_list(client: LettrClient, args: argparse.Namespace) -> None:
    """List templates."""
    params = ListTemplatesParams(project_id=args.project_id, per_page=args.per_page, page=args.page)
    try:
        if is_tty():
            response = client.templates.list(params)
            templates = response.data.templates
            if not templates:
                print("No templates found.")
                return

            table_output(
                ["ID", "Slug", "Name"],
                [[t.id, t.slug, t.name] for t in templates],
                [8, 30, 40],
            )
            page = response.data.pagination
            if page.has_more:
                print(f"\nPage {page.current_page} of {page.last_page} ({page.total} templates)")
        elif args.page:
            response = client.templates.list(params)
            templates = response.data.templates
            page = response.data.pagination
            json_output(
                {
                    "data": [vars(t) for t in templates],
                    "total_count": page.total,
                    "current_page": page.current_page,
                    "last_page": page.last_page,
                }
            )
        else:
            templates = list(client.templates.iterate(params))
            json_output({"data": [vars(t) for t in templates], "total_count": len(templates)})
    except LettrError as e:
        error_output(e)


def cmd_templates_create(client: LettrClient, args: argparse.Namespace) -> None:
    """Create a template."""
    request = CreateTemplateRequest(
        name=args.name,
        html=read_text_arg(args.html),
        json=read_text_arg(args.json),
        project_id=args.project_id,
        folder_id=args.folder_id,
    )
    try:
        created = client.templates.create(request).data
        json_output(
            {
                "id": created.id,
                "slug": created.slug,
                "active_version": created.active_version,
                "merge_tags": [vars(m) for m in created.merge_tags],
            }
        )
    except LettrError as e:
        error_output(e)


# =============================================================================
# Main CLI
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lettr",
        description="Lettr CLI - Command-line interface for the Lettr Email API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  LETTR_API_KEY   API key (may be set in a .env file)
  LETTR_BASE_URL  Override the API base URL

Examples:
  lettr emails send --from me@example.com --to you@example.com --subject Hi --html "<p>Hi</p>"
  lettr emails list --per-page 10 | jq '.data[].rcpt_to'
  lettr domains create example.com
""",
    )
    parser.add_argument("--base-url", help="API base URL (overrides LETTR_BASE_URL)")
    parser.add_argument("--timeout", type=float, default=30, help="Request timeout in seconds")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    health = subparsers.add_parser("health", help="Check API reachability")
    health.set_defaults(func=cmd_health)

    auth = subparsers.add_parser("auth", help="Validate the API key")
    auth.set_defaults(func=cmd_auth)

    # ========== Emails ==========
    emails = subparsers.add_parser("emails", help="Send emails and read their events")
    emails.set_defaults(func=lambda _c, _a: emails.print_help())
    emails_sub = emails.add_subparsers(dest="subcommand")

    e_send = emails_sub.add_parser("send", help="Send an email")
    e_send.add_argument("--from", dest="from_email", required=True, help="Sender address")
    e_send.add_argument("--from-name", help="Sender display name")
    e_send.add_argument("--to", action="append", required=True, help="Recipient (repeatable)")
    e_send.add_argument("--subject", required=True, help="Subject line")
    e_send.add_argument("--html", help="HTML body (literal, @file or - for stdin)")
    e_send.add_argument("--text", help="Plain text body (literal, @file or - for stdin)")
    e_send.add_argument("--template", help="Template slug")
    e_send.add_argument("--template-version", type=int, help="Template version")
    e_send.add_argument("--project-id", type=int, help="Project to source the template from")
    e_send.add_argument("--data", help="Substitution data as a JSON object")
    e_send.add_argument("--metadata", help="Metadata as a JSON object")
    e_send.add_argument("--attach", action="append", help="Attachment as name:mime/type:base64data (repeatable)")
    e_send.add_argument("--click-tracking", choices=["on", "off"], help="Override click tracking")
    e_send.add_argument("--open-tracking", choices=["on", "off"], help="Override open tracking")
    e_send.add_argument("--transactional", action="store_true", help="Mark as transactional")
    e_send.set_defaults(func=cmd_emails_send)

    e_list = emails_sub.add_parser("list", help="List sent email events")
    e_list.add_argument("--per-page", "-l", type=int, help="Results per page (1-100)")
    e_list.add_argument("--cursor", help="Cursor from a previous page")
    e_list.add_argument("--recipient", help="Filter by recipient address")
    e_list.add_argument("--since", help="Only emails sent on or after this date (YYYY-MM-DD)")
    e_list.add_argument("--until", help="Only emails sent on or before this date (YYYY-MM-DD)")
    e_list.set_defaults(func=cmd_emails_list)

    e_get = emails_sub.add_parser("get", help="Get all events for an email")
    e_get.add_argument("request_id", help="Request ID returned by send")
    e_get.set_defaults(func=cmd_emails_get)

    # ========== Domains ==========
    domains = subparsers.add_parser("domains", help="Manage sending domains")
    domains.set_defaults(func=lambda _c, _a: domains.print_help())
    domains_sub = domains.add_subparsers(dest="subcommand")

    d_list = domains_sub.add_parser("list", help="List domains")
    d_list.set_defaults(func=cmd_domains_list)

    d_get = domains_sub.add_parser("get", help="Get domain details and DNS records")
    d_get.add_argument("domain", help="Domain name")
    d_get.set_defaults(func=cmd_domains_get)

    d_create = domains_sub.add_parser("create", help="Register a domain")
    d_create.add_argument("domain", help="Domain name")
    d_create.set_defaults(func=cmd_domains_create)

    d_delete = domains_sub.add_parser("delete", help="Delete a domain")
    d_delete.add_argument("domain", help="Domain name")
    d_delete.set_defaults(func=cmd_domains_delete)

    # ========== Webhooks ==========
    webhooks = subparsers.add_parser("webhooks", help="Inspect webhooks")
    webhooks.set_defaults(func=lambda _c, _a: webhooks.print_help())
    webhooks_sub = webhooks.add_subparsers(dest="subcommand")

    w_list = webhooks_sub.add_parser("list", help="List webhooks")
    w_list.set_defaults(func=cmd_webhooks_list)

    w_get = webhooks_sub.add_parser("get", help="Get webhook details")
    w_get.add_argument("webhook_id", help="Webhook ID")
    w_get.set_defaults(func=cmd_webhooks_get)

    # ========== Templates ==========
    templates = subparsers.add_parser("templates", help="List and create templates")
    templates.set_defaults(func=lambda _c, _a: templates.print_help())
    templates_sub = templates.add_subparsers(dest="subcommand")

    t_list = templates_sub.add_parser("list", help="List templates")
    t_list.add_argument("--project-id", type=int, help="Project ID (defaults to the team's project)")
    t_list.add_argument("--per-page", "-l", type=int, help="Results per page (1-100)")
    t_list.add_argument("--page", "-p", type=int, help="Fetch only this page (default: all pages when piped)")
    t_list.set_defaults(func=cmd_templates_list)

    t_create = templates_sub.add_parser("create", help="Create a template")
    t_create.add_argument("name", help="Template name")
    content = t_create.add_mutually_exclusive_group(required=True)
    content.add_argument("--html", help="HTML content (literal, @file or - for stdin)")
    content.add_argument("--json", help="Editor JSON content (literal, @file or - for stdin)")
    t_create.add_argument("--project-id", type=int, help="Project ID")
    t_create.add_argument("--folder-id", type=int, help="Folder ID")
    t_create.set_defaults(func=cmd_templates_create)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        client = LettrClient(base_url=args.base_url, timeout=args.timeout)
    except LettrError as e:
        error_output(e)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
