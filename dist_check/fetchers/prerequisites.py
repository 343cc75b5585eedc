"""Maven and JDK prerequisites advertised by plugin sites."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import requests
from bs4 import BeautifulSoup

from dist_check.errors import FetchError
from dist_check.fetchers.base import DEFAULT_TIMEOUT, BaseFetcher
from dist_check.versions import Version

logger = logging.getLogger(__name__)

PLUGINS_BASE_URL = "https://maven.apache.org/plugins/"


@dataclass
class PluginPrerequisites:
    """Minimum Maven and JDK versions a plugin declares."""

    plugin: str
    maven_version: str
    jdk_version: str


class PrerequisitesFetcher(BaseFetcher):
    """Read the "System Requirements" table of each plugin's info page."""

    def __init__(
        self,
        base_url: str = PLUGINS_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(session=session, timeout=timeout)
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.errors: list[str] = []

    def fetch(self, plugin: str) -> PluginPrerequisites:
        """Fetch the prerequisites of one plugin.

        Raises:
            FetchError: If the page is unreachable or has no requirements table.
        """
        url = f"{self.base_url}{plugin}/plugin-info.html"
        soup = BeautifulSoup(self.get_text(url), "html.parser")

        tables = soup.select("table.bodyTable")
        if len(tables) < 2:
            raise FetchError(f"No requirements table in {url}", url=url)
        maven_cell = tables[1].find(class_="a")
        jdk_cell = tables[1].find(class_="b")
        if maven_cell is None or jdk_cell is None:
            raise FetchError(f"Incomplete requirements table in {url}", url=url)

        maven_version = " ".join(maven_cell.get_text(" ").split())
        jdk_version = " ".join(jdk_cell.get_text(" ").split())
        # Some pages list the JDK row first
        if maven_version.startswith("JDK"):
            maven_version, jdk_version = jdk_version, maven_version

        return PluginPrerequisites(
            plugin=plugin,
            maven_version=maven_version.replace("Maven ", ""),
            jdk_version=jdk_version.replace("JDK ", ""),
        )

    def collect(self, plugins: Iterable[str]) -> list[PluginPrerequisites]:
        """Fetch every plugin, skipping (and recording) the ones that fail."""
        results = []
        for plugin in plugins:
            try:
                results.append(self.fetch(plugin))
            except FetchError as e:
                logger.warning("Skipping %s: %s", plugin, e)
                self.errors.append(f"{plugin}: {e}")
        return results


def group_by_maven_version(
    prerequisites: Iterable[PluginPrerequisites],
) -> dict[str, list[PluginPrerequisites]]:
    """Group plugins by required Maven version, lowest version first."""
    grouped: dict[str, list[PluginPrerequisites]] = {}
    for item in prerequisites:
        grouped.setdefault(item.maven_version, []).append(item)
    return {key: grouped[key] for key in sorted(grouped, key=Version)}
