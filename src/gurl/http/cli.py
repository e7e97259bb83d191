"""
gurl command line.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging

import click
from rich.console import Console
from rich.markup import escape

from gurl import __version__
from gurl.config import ENV_PREFIX, GurlConfig
from gurl.errors import GurlError
from gurl.http.client import execute, format_body, format_headers
from gurl.http.models import HTTPResponse
from gurl.logging_config import configure_logging

logger = logging.getLogger(__name__)

console = Console(highlight=False, emoji=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, emoji=False, soft_wrap=True)


def fail(message: str) -> None:
    """Print one diagnostic line on stderr and exit non-zero."""
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    raise SystemExit(1)


def _status_color(response: HTTPResponse) -> str:
    if response.is_success:
        return "green"
    if response.is_redirect:
        return "yellow"
    if response.is_client_error:
        return "red"
    return "red bold"


def print_response(response: HTTPResponse, indent: bool) -> None:
    color = _status_color(response)
    console.print(f"[{color}]{escape(response.status_line)}[/{color}]")
    for name, value in format_headers(response):
        console.print(f"[cyan]{escape(name)}[/cyan]: {escape(value)}")

    try:
        body = format_body(response, indent=indent)
    except ValueError as e:
        click.echo()
        click.echo(response.body_bytes)
        click.echo()
        fail(f"Cannot indent JSON response: {e}")
    click.echo()
    click.echo(body)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("method", required=False)
@click.argument("url", required=False)
@click.argument("items", nargs=-1)
@click.option("--json", "json_mode", is_flag=True,
              help="Serialize body fields as a JSON object (Content-Type: application/json).")
@click.option("--form", "form_mode", is_flag=True,
              help="Serialize body fields as form fields (default).")
@click.option("--verbose", "-v", is_flag=True, help="Print the whole request as well as the response.")
@click.option("--indent/--noindent", default=True, show_default=True,
              help="Indent JSON response bodies.")
@click.option("--auth", envvar=f"{ENV_PREFIX}AUTH", help="Credentials as USER:PASS.")
@click.option("--auth-type", envvar=f"{ENV_PREFIX}AUTH_TYPE", default="basic", show_default=True,
              help="Authentication type: basic or digest (only basic is implemented).")
@click.option("--server", envvar=f"{ENV_PREFIX}SERVER",
              help="Connect to HOST[:PORT] instead of the URL's host, still sending the original Host.")
@click.option("--debug", is_flag=True, help="Enable debug logging on stderr.")
@click.option("--log-file", envvar=f"{ENV_PREFIX}LOG_FILE", help="Also write logs to this file.")
@click.version_option(__version__, prog_name="gurl")
def gurl(method: str | None, url: str | None, items: tuple, json_mode: bool, form_mode: bool,
         verbose: bool, indent: bool, auth: str | None, auth_type: str,
         server: str | None, debug: bool, log_file: str | None):
    """Send an HTTP request built from request items.

    \b
    METHOD is one of GET, HEAD, DELETE, OPTIONS, POST, PUT.
    ITEMS are key=value body fields (POST and PUT only) or
    Name:Value headers; an empty Value removes the header.

    \b
    Examples:
        gurl GET http://example.com/api Accept:application/json
        gurl POST http://example.com/users name=joe --json
        gurl GET http://example.com/ --server 10.0.0.5:8080
    """
    configure_logging(debug=debug, log_file=log_file)

    if not method or not url:
        fail("Invalid usage for gurl: METHOD and URL are required")

    try:
        config = GurlConfig.build(
            method=method,
            url=url,
            items=items,
            json_mode=json_mode,
            form_mode=form_mode,
            verbose=verbose,
            indent=indent,
            auth=auth,
            auth_type=auth_type,
            server=server,
            debug=debug,
            log_file=log_file,
        )
        result = execute(config)
    except GurlError as e:
        logger.debug("Invocation failed", exc_info=e)
        fail(str(e))

    if not result.success:
        fail(result.error)

    if result.request_bytes is not None:
        click.echo(result.request_bytes, nl=False)
        click.echo()

    print_response(result.response, indent=config.indent)


def main() -> None:
    gurl()


if __name__ == "__main__":
    main()
