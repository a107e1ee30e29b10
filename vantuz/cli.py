"""CLI entry point for vantuz.

Sends one request (or the same request several times) and prints the
response body to stdout and the status line to stderr.

    vantuz GET https://api.example.com/items -H "Accept: application/json" -q page=2
    vantuz POST https://auth.example.com/token --form grant_type=device_code
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

from vantuz.client import new_client
from vantuz.config_loader import load_client_config
from vantuz.exceptions import VantuzError
from vantuz.log import StdLogger
from vantuz.models import ClientConfig

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

EXIT_OK = 0
EXIT_HTTP_ERROR = 1
EXIT_FAILURE = 2
EXIT_INTERRUPTED = 130


def positive_float(value: str) -> float:
    """Parse and validate a positive float value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive number.
    """
    try:
        result = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number '{value}'.")
    if result <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {result}.")
    return result


def positive_int(value: str) -> int:
    """Parse and validate a positive integer value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        result = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer '{value}'.")
    if result <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {result}.")
    return result


def parse_header(value: str) -> tuple[str, str]:
    """Parse "Name: value" format.

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if ":" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid header '{value}'. Expected 'Name: value' (e.g., 'Accept: text/plain')"
        )
    name, _, header_value = value.partition(":")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid header '{value}'. Name cannot be empty.")
    return (name, header_value.strip())


def parse_key_value(value: str) -> tuple[str, str]:
    """Parse KEY=VALUE format. The value may be empty.

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if "=" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid format '{value}'. Expected KEY=VALUE (e.g., 'page=2')"
        )
    key, _, item = value.partition("=")
    if not key:
        raise argparse.ArgumentTypeError(f"Invalid format '{value}'. Key cannot be empty.")
    return (key, item)


def parse_rate_limit(value: str) -> tuple[int, float]:
    """Parse REQUESTS/SECONDS format, e.g. "5/1" or "10/2.5".

    Raises:
        argparse.ArgumentTypeError: If format is invalid.
    """
    if "/" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid rate limit '{value}'. Expected REQUESTS/SECONDS (e.g., '5/1')"
        )
    requests_str, _, per_str = value.partition("/")
    return (positive_int(requests_str), positive_float(per_str))


@dataclass
class RequestArgs:
    """Parsed arguments for one CLI invocation."""

    method: str
    url: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    query: list[tuple[str, str]] = field(default_factory=list)
    json_body: str | None = None
    form: list[tuple[str, str]] = field(default_factory=list)
    config: Path | None = None
    rate_limit: tuple[int, float] | None = None
    timeout: float | None = None
    repeat: int = 1
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vantuz",
        description="Send an HTTP request with client defaults, rate limiting and JSON handling.",
    )
    parser.add_argument(
        "method",
        type=str.upper,
        choices=METHODS,
        help="HTTP method",
    )
    parser.add_argument("url", help="Target URL")
    parser.add_argument(
        "-H", "--header",
        type=parse_header,
        action="append",
        default=[],
        dest="headers",
        metavar="'NAME: VALUE'",
        help="Request header (can be repeated)",
    )
    parser.add_argument(
        "-q", "--query",
        type=parse_key_value,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter; replaces any query string in URL (can be repeated)",
    )

    body_group = parser.add_mutually_exclusive_group()
    body_group.add_argument(
        "--json",
        type=str,
        default=None,
        dest="json_body",
        metavar="TEXT",
        help="Raw JSON request body",
    )
    body_group.add_argument(
        "--form",
        type=parse_key_value,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Form field for an application/x-www-form-urlencoded body (can be repeated)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to client configuration file (YAML)",
    )
    parser.add_argument(
        "--rate-limit",
        type=parse_rate_limit,
        default=None,
        dest="rate_limit",
        metavar="REQUESTS/SECONDS",
        help="Rate limit, overrides the config file (e.g., '5/1')",
    )
    parser.add_argument(
        "--timeout",
        type=positive_float,
        default=None,
        help="Transport timeout in seconds, overrides the config file (default: 20)",
    )
    parser.add_argument(
        "--repeat",
        type=positive_int,
        default=1,
        help="Send the same request N times (default: 1)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log request details to stderr",
    )
    return parser


def parse_args(args: list[str] | None = None) -> RequestArgs:
    namespace = build_parser().parse_args(args)
    return RequestArgs(
        method=namespace.method,
        url=namespace.url,
        headers=namespace.headers,
        query=namespace.query,
        json_body=namespace.json_body,
        form=namespace.form,
        config=namespace.config,
        rate_limit=namespace.rate_limit,
        timeout=namespace.timeout,
        repeat=namespace.repeat,
        verbose=namespace.verbose,
    )


def main() -> int:
    """Main entry point."""
    try:
        return run(parse_args())
    except VantuzError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


def run(args: RequestArgs) -> int:
    """Execute the request described by args.

    Returns:
        EXIT_OK if every response was 2xx, EXIT_HTTP_ERROR otherwise.

    Raises:
        VantuzError: On configuration, URL, transport or cancellation errors.
    """
    config = load_client_config(args.config) if args.config else ClientConfig()
    if args.timeout is not None:
        config = config.model_copy(update={"timeout": args.timeout})

    with new_client(config) as client:
        if args.verbose:
            logging.basicConfig(
                level=logging.DEBUG,
                stream=sys.stderr,
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )
            client.set_logger(StdLogger())
        if args.rate_limit is not None:
            client.set_rate_limit(*args.rate_limit)

        request = client.new_request().set_headers(dict(args.headers))

        if args.query:
            params = request.query_params() or {}
            for key, value in args.query:
                params.setdefault(key, []).append(value)
            request.set_query_params(params)

        if args.json_body is not None:
            request.set_json_string(args.json_body)
        elif args.form:
            values: dict[str, list[str]] = {}
            for key, value in args.form:
                values.setdefault(key, []).append(value)
            request.set_form_url_values(values)

        send = getattr(request, args.method.lower())
        exit_code = EXIT_OK
        for _ in range(args.repeat):
            response = send(args.url)
            print(f"HTTP {response.status_code}", file=sys.stderr)
            sys.stdout.write(response.text)
            if response.text and not response.text.endswith("\n"):
                sys.stdout.write("\n")
            if not response.is_success():
                exit_code = EXIT_HTTP_ERROR

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
