"""Command-line entry point: clean all but the latest release of each GAV.

Searches Nexus for every group given on the command line (or listed in an
``@filename``), prints the hits to standard output and, with ``--delete``,
removes every version except the latest release. Log output goes to stderr.

Exit status:

* ``0``: completed, or stopped because the throttle was reached.
* ``1``: a search returned more artifacts than ``--expect`` allows.
* ``2``: Nexus could not be reached or answered unexpectedly, or the
  arguments were invalid.
"""

from __future__ import annotations

import argparse
import logging
import random
from typing import Mapping, Sequence

from .client import NexusClient
from .config import (
    DEFAULT_COUNT,
    DEFAULT_EXPECT,
    DEFAULT_THROTTLE,
    DEFAULT_TIMEOUT,
    NexusEndpoint,
    RetentionSettings,
)
from .groups import GroupSourceError, resolve_groups
from .retention import RetentionDriver
from .shuffle import shuffle

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _port(value: str) -> str:
    if not value.isdigit():
        raise argparse.ArgumentTypeError(f"port must be numeric, got {value!r}")
    return value


def _build_parser(defaults: NexusEndpoint) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nexusprune",
        description="Clean all but the latest release for a GAV in Nexus.",
        epilog="@filename references a file with groups separated by newline.",
    )
    parser.add_argument(
        "groups",
        metavar="GROUP",
        nargs="*",
        help="Group to process, or a single @filename.",
    )

    server = parser.add_argument_group("Nexus endpoint")
    server.add_argument("--protocol", default=defaults.protocol, help="Nexus protocol (http/https).")
    server.add_argument("--server", default=defaults.server, help="Nexus server name.")
    server.add_argument("--port", type=_port, default=defaults.port, help="Nexus port.")
    server.add_argument("--contextroot", default=defaults.context_root, help="Nexus context root.")
    server.add_argument("--username", default=defaults.username, help="Nexus credentials.")
    server.add_argument("--password", default=defaults.password, help="Nexus credentials.")
    server.add_argument(
        "--repository",
        default=defaults.repository_id,
        help="Nexus repository ID, empty for global search.",
    )
    server.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"HTTP timeout in seconds (default: {DEFAULT_TIMEOUT:g}).",
    )

    policy = parser.add_argument_group("retention policy")
    policy.add_argument(
        "--count",
        type=int,
        default=DEFAULT_COUNT,
        help=f"Nexus count parameter in REST interface (default: {DEFAULT_COUNT}).",
    )
    policy.add_argument(
        "--delete",
        action="store_true",
        help="Delete search results (otherwise only display them).",
    )
    policy.add_argument(
        "--keep-latest",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Keep the latest release version (default: keep).",
    )
    policy.add_argument(
        "--expect",
        type=int,
        default=DEFAULT_EXPECT,
        help=f"Expected maximum number of results per group (default: {DEFAULT_EXPECT}).",
    )
    policy.add_argument(
        "--throttle",
        type=int,
        default=DEFAULT_THROTTLE,
        help=f"Maximum number of deletions per run (default: {DEFAULT_THROTTLE}).",
    )
    policy.add_argument("--artifact", default="", help="Limit search to an artifact.")
    policy.add_argument(
        "--version",
        default="",
        help="Limit search to a specific version (may include wildcards).",
    )

    ordering = parser.add_argument_group("group ordering")
    ordering.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the group shuffle (default: system entropy).",
    )
    ordering.add_argument(
        "--no-shuffle",
        action="store_true",
        help="Process groups in the given order.",
    )

    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="INFO",
        help="Logging verbosity on stderr (default: INFO).",
    )
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format=_LOG_FORMAT)


def main(argv: Sequence[str] | None = None, *, environ: Mapping[str, str] | None = None) -> int:
    parser = _build_parser(NexusEndpoint.from_env(environ))
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        groups = resolve_groups(args.groups)
    except GroupSourceError as exc:
        parser.error(str(exc))

    try:
        settings = RetentionSettings(
            count=args.count,
            expect=args.expect,
            throttle=args.throttle,
            keep_latest=args.keep_latest,
            delete=args.delete,
            artifact=args.artifact,
            version=args.version,
        )
    except ValueError as exc:
        parser.error(str(exc))

    if args.delete and not args.repository:
        parser.error("--delete requires a repository ID")

    endpoint = NexusEndpoint(
        protocol=args.protocol,
        server=args.server,
        port=args.port,
        context_root=args.contextroot,
        username=args.username,
        password=args.password,
        repository_id=args.repository,
    )

    # Concurrent runs should not walk the groups in the same order and
    # collide on Maven metadata regeneration.
    if not args.no_shuffle:
        random.seed(args.seed)
        shuffle(groups)

    driver = RetentionDriver(NexusClient(endpoint, timeout=args.timeout), settings)
    report = driver.run(groups)
    logger.info(
        "run %s after %d group(s), %d deletion(s)",
        report.outcome.value,
        report.groups_processed,
        report.state.actions,
    )
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
