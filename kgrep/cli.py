"""
Command-line interface for kgrep.

This module provides the command-line interface for kgrep, handling argument
parsing, input validation, logging setup and dispatch to the grep operations
or the HTTP server.

Key Functions:
- configure_logging: Set up the kgrep logger from KGREP_LOG_LEVEL
- build_parser: Create and configure the argument parser
- main: Main entry point for the CLI application

Example:
    ```bash
    kgrep pods -n prod -p 'image: nginx'
    kgrep resources -k deployment --api-version apps/v1 -n prod -p replicas
    kgrep logs -n prod,staging -r api -p ERROR -s message
    kgrep serve --port 8080
    ```
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from . import __version__
from .constants import (
    TYPED_KINDS, DEFAULT_HOST, DEFAULT_PORT, DEFAULT_LOG_LEVEL, DEFAULT_SERVER_LOG_LEVEL,
    ENV_HOST, ENV_PORT, ENV_LOG_LEVEL, LOG_FORMAT
)
from .exceptions import KgrepError, ConfigurationError, UnsupportedSortError
from .models import SortOrder
from .output import print_resource_lines, print_log_messages
from .service import Kgrep
from .validation import (
    validate_port, validate_host, validate_api_version, parse_namespaces, settings_from_env
)

log = logging.getLogger('kgrep')


def configure_logging(default_level: str) -> None:
    """Configure the root handler once; KGREP_LOG_LEVEL overrides the default level."""
    level_name = os.getenv(ENV_LOG_LEVEL, default_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.WARNING), format=LOG_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    """
    Build and configure the command-line argument parser.

    Creates an ArgumentParser with one subcommand per typed kind plus
    `resources`, `logs`, `serve` and `version`. Environment variables are
    used as defaults for the server options.

    Returns:
        argparse.ArgumentParser: Configured argument parser with all options

    Environment Variables:
        KGREP_HOST: Default host for `serve` (default: localhost)
        KGREP_PORT: Default port for `serve` (default: 8080)
    """
    env_host = os.getenv(ENV_HOST, DEFAULT_HOST)
    try:
        env_port = int(os.getenv(ENV_PORT, str(DEFAULT_PORT)))
    except ValueError:
        env_port = DEFAULT_PORT

    cluster = argparse.ArgumentParser(add_help=False)
    cluster.add_argument("--kubeconfig", default=None, help="Path to kubeconfig (defaults to kube rules)")
    cluster.add_argument("--context", default=None, help="Kubecontext override")

    search = argparse.ArgumentParser(add_help=False, parents=[cluster])
    search.add_argument("-p", "--pattern", required=True, help="grep search pattern (literal text)")

    p = argparse.ArgumentParser("kgrep", description="Search the content of Kubernetes resources and logs")
    sub = p.add_subparsers(dest="command", required=True)

    for label, kind in TYPED_KINDS.items():
        cmd = sub.add_parser(label, parents=[search], help=f"Search {kind} resources")
        cmd.add_argument("-n", "--namespace", default=None, help="The Kubernetes namespace")

    resources = sub.add_parser("resources", parents=[search], help="Search resources of any kind")
    resources.add_argument("-n", "--namespace", default=None, help="The Kubernetes namespace")
    resources.add_argument("-k", "--kind", required=True, help="Resource kind (e.g., Pod, Deployment), any casing")
    resources.add_argument("--api-version", default=None,
                           help="API version (e.g., v1, apps/v1). If not provided, will be auto-discovered.")

    logs = sub.add_parser("logs", parents=[search], help="Search container logs")
    logs.add_argument("-n", "--namespace", default=None, help="The Kubernetes namespace(s), comma-separated")
    logs.add_argument("-r", "--resource", default=None, help="Only pods whose name contains this text")
    logs.add_argument("-s", "--sort-by", default=SortOrder.BY_DISCOVERY_ORDER.value,
                      help="Sort by: discovery (pod, container, line), message")

    serve = sub.add_parser("serve", parents=[cluster], help="Serve the HTTP JSON API")
    serve.add_argument("--host", default=env_host, help="Host to bind (env: KGREP_HOST)")
    serve.add_argument("--port", type=int, default=env_port, help="Port for HTTP server (env: KGREP_PORT)")

    sub.add_parser("version", help="Show version information")
    return p


def _run_search(args: argparse.Namespace) -> None:
    if not args.pattern:
        raise ConfigurationError("pattern is required")

    if args.command == "logs":
        namespaces = parse_namespaces(args.namespace)
        sort_order = SortOrder.parse(args.sort_by)
        kgrep = Kgrep.connect(args.kubeconfig, args.context, settings_from_env())
        messages = kgrep.grep_logs(namespaces or None, args.resource, args.pattern, sort_order)
        print_log_messages(messages, args.pattern)
        return

    api_version = validate_api_version(args.api_version) if args.command == "resources" else None
    kgrep = Kgrep.connect(args.kubeconfig, args.context, settings_from_env())
    if args.command == "resources":
        lines = kgrep.grep_resources(args.namespace, args.pattern, api_version=api_version, kind=args.kind)
    else:
        lines = kgrep.grep_resources(args.namespace, args.pattern, kind_label=args.command)
    print_resource_lines(lines, args.pattern)


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the kgrep CLI application.

    Raises:
        SystemExit: On configuration errors (exit code 2) or grep/server errors (exit code 1)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print(f"kgrep version {__version__}")
        return

    if args.command == "serve":
        configure_logging(DEFAULT_SERVER_LOG_LEVEL)
        from .server import run_server
        try:
            host = validate_host(args.host)
            port = validate_port(args.port)
        except ConfigurationError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            sys.exit(2)
        try:
            asyncio.run(run_server(args.kubeconfig, args.context, host=host, port=port))
        except KeyboardInterrupt:
            print("\nShutting down...", file=sys.stderr)
        except Exception as e:
            print(f"Server error: {e}", file=sys.stderr)
            sys.exit(1)
        return

    configure_logging(DEFAULT_LOG_LEVEL)
    try:
        _run_search(args)
    except (ConfigurationError, UnsupportedSortError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)
    except KgrepError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
