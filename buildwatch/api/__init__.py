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

"""Distribution API client and records.

Public API:

- DistributionApi: HTTP client for one project
- Project, Version, Build, Change, Download: decoded records

Example:
    ```python
    from buildwatch.api import DistributionApi

    api = DistributionApi("https://papermc.io/api", "paper")
    print(api.fetch_project().versions)
    ```
"""

from .client import DistributionApi
from .models import Build, Change, Download, Project, Version

__all__ = ["DistributionApi", "Build", "Change", "Download", "Project", "Version"]
