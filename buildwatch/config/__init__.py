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

"""Settings loading for buildwatch.

Settings are layered: built-in defaults, an optional YAML file,
BUILDWATCH_* environment variables (a .env file is honoured), and explicit
overrides. Nothing here is global; callers pass the resulting Settings
object to whatever needs it.

Public API:

- Settings: Frozen settings dataclass
- load_settings: Load and merge settings
- create_api: Build a DistributionApi from Settings

Example:
    Basic usage:

        from pathlib import Path
        from buildwatch.config import create_api, load_settings

        settings = load_settings(Path("buildwatch.yaml"))
        api = create_api(settings)

"""

from .loader import Settings, create_api, load_settings

__all__ = ["Settings", "create_api", "load_settings"]
