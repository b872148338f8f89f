"""
buildwatch - build update detection for distribution APIs

A small Python library and CLI that polls a versioned-software
distribution API (PaperMC's v2 API by default) and reports, exactly once,
when a new build of a tracked version appears.

buildwatch provides:
  - A typed client for the project / version / build endpoints
  - Immutable records for projects, versions, builds and downloads
  - The UpdateStream protocol and its build-number implementation
  - Layered settings (YAML file, environment, .env, overrides)
  - One-shot polling helpers for whatever scheduler you already have

Quick Start
-----------
Show the versions of a project:

    $ buildwatch project

Show the newest build of a version:

    $ buildwatch build 1.16.5

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Caller-side helpers: build streams, poll them once.
api : package
    HTTP client and records for the distribution API.
stream : package
    UpdateStream protocol and BuildNumberStream.
config : package
    Settings loading and merging.

Public API
----------
    from buildwatch import DistributionApi, BuildNumberStream
    from buildwatch.config import load_settings, create_api
    from buildwatch.core import build_streams, poll_streams
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "Build update detection for versioned-software distribution APIs"

from buildwatch.api import Build, DistributionApi, Project, Version
from buildwatch.config import Settings, create_api, load_settings
from buildwatch.core import build_streams, poll_streams
from buildwatch.stream import BuildNumberStream, UpdateStream

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "Build",
    "DistributionApi",
    "Project",
    "Version",
    "Settings",
    "create_api",
    "load_settings",
    "build_streams",
    "poll_streams",
    "BuildNumberStream",
    "UpdateStream",
]
