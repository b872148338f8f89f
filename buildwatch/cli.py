# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for buildwatch.

Inspection commands for the distribution API. The CLI does not poll on a
schedule; wire buildwatch.core.poll_streams into your own scheduler for
that.

Commands:

    project: Show version groups and versions of the project
    builds: Show the build numbers of a version
    build: Show details of one build (the newest by default)

Example:
    Show all versions:
        ```bash
        $ buildwatch project
        ```

    Show the newest build of 1.16.5 against another API:
        ```bash
        $ buildwatch --api-base https://api.example.org build 1.16.5
        ```

    Read settings from a file and .env:
        ```bash
        $ buildwatch --config buildwatch.yaml builds 1.17.1 --verbose
        ```

Exit Codes:

- 0: Success
- 1: Error (configuration, network, or data failure)

Note:
    The CLI uses argparse for command parsing. Each command has its own
    handler function (cmd_<command>). Verbose mode shows full tracebacks
    on errors for debugging.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import Any

from buildwatch import __version__
from buildwatch.api.client import DistributionApi
from buildwatch.config import create_api, load_settings
from buildwatch.exceptions import (
    BuildWatchError,
    ConfigError,
    DataError,
    NetworkError,
)
from buildwatch.logging import get_logger, set_global_logger


def _api_from_args(args: argparse.Namespace) -> DistributionApi:
    """Configure logging and build a client from settings plus CLI flags."""
    set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))

    overrides: dict[str, Any] = {}
    if args.project:
        overrides["project"] = args.project
    if args.api_base:
        overrides["api"] = {"base": args.api_base}

    config_path = Path(args.config) if args.config else None
    settings = load_settings(config_path, overrides=overrides)
    return create_api(settings)


def cmd_project(args: argparse.Namespace, api: DistributionApi) -> int:
    """Handler for 'buildwatch project'."""
    project = api.fetch_project()

    print("=" * 70)
    print(f"PROJECT {project.project_name or api.project}")
    print("=" * 70)
    print(f"Version groups: {', '.join(project.version_groups) or '(none)'}")
    print(f"Versions:       {', '.join(project.versions) or '(none)'}")
    print(f"Latest:         {project.latest_version or '(none)'}")
    return 0


def cmd_builds(args: argparse.Namespace, api: DistributionApi) -> int:
    """Handler for 'buildwatch builds VERSION'."""
    version = api.fetch_version(args.version)

    print(f"Builds for {api.project} {args.version}:")
    print(f"  {' '.join(str(b) for b in version.builds) or '(none)'}")
    latest = version.latest_build_number
    print(f"Latest: {latest if latest is not None else '(none)'}")
    return 0


def cmd_build(args: argparse.Namespace, api: DistributionApi) -> int:
    """Handler for 'buildwatch build VERSION [BUILD]'.

    Without BUILD, the newest build of the version is shown.
    """
    if args.build is None:
        build = api.fetch_latest_build(args.version)
    else:
        build = api.fetch_build(args.version, args.build)

    print("=" * 70)
    print(f"BUILD {api.project} {args.version} #{build.build}")
    print("=" * 70)
    print(f"Time:      {build.time.isoformat()}")
    print(f"Changes:   {len(build.changes)}")
    for change in build.changes:
        print(f"  {change.commit[:7]} {change.summary}")
    print("Downloads:")
    for key, download in build.downloads.items():
        print(f"  {key}: {download.name}")
        print(f"    sha256: {download.sha256}")
        print(f"    url:    {build.download_url(api.api_base, api.project, args.version, key)}")
    return 0


def _run(args: argparse.Namespace) -> int:
    """Run a command handler and map errors to exit codes."""
    try:
        with _api_from_args(args) as api:
            return args.func(args, api)
    except BuildWatchError as err:
        if isinstance(err, ConfigError):
            label = "Configuration error"
        elif isinstance(err, NetworkError):
            label = "Network error"
        elif isinstance(err, DataError):
            label = "Data error"
        else:
            label = "Error"
        print(f"{label}: {err}")
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show HTTP requests and resolved settings (implies --verbose)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the buildwatch CLI."""
    parser = argparse.ArgumentParser(
        prog="buildwatch",
        description="buildwatch - inspect builds on a distribution API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"buildwatch {__version__}",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML settings file (default: none, defaults + environment only)",
    )
    parser.add_argument(
        "--api-base",
        default=None,
        help="API root URL (overrides settings; default: https://papermc.io/api)",
    )
    parser.add_argument(
        "--project",
        default=None,
        help="Project identifier (overrides settings; default: paper)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'project' command
    parser_project = subparsers.add_parser(
        "project",
        help="Show version groups and versions",
    )
    _add_common_flags(parser_project)
    parser_project.set_defaults(func=cmd_project)

    # 'builds' command
    parser_builds = subparsers.add_parser(
        "builds",
        help="Show the build numbers of a version",
    )
    parser_builds.add_argument("version", help="Version label, e.g. 1.16.5")
    _add_common_flags(parser_builds)
    parser_builds.set_defaults(func=cmd_builds)

    # 'build' command
    parser_build = subparsers.add_parser(
        "build",
        help="Show details of one build (newest by default)",
    )
    parser_build.add_argument("version", help="Version label, e.g. 1.16.5")
    parser_build.add_argument(
        "build",
        nargs="?",
        type=int,
        default=None,
        help="Build number (default: newest)",
    )
    _add_common_flags(parser_build)
    parser_build.set_defaults(func=cmd_build)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the buildwatch CLI.

    Registered as the 'buildwatch' console script in pyproject.toml.
    """
    args = build_parser().parse_args(argv)
    sys.exit(_run(args))


if __name__ == "__main__":
    main()
