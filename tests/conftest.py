"""Shared fixtures: an in-memory HTTP session and sample documents."""

import threading
import time
from collections import Counter

import pytest
import requests

from dist_check.config import parse_configuration

REPO = "https://repo.example.org/maven2/"
PLUGINS_URL = "https://maven.apache.org/plugins/"
POMS_URL = "https://maven.apache.org/pom/"
SKINS_URL = "https://maven.apache.org/skins/"


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200, url: str = ""):
        self.text = text
        self.status_code = status_code
        self.url = url

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")


class FakeSession:
    """Serves canned documents by URL and counts requests.

    Values may be a body string, an HTTP status code, or an exception to raise.
    Unknown URLs answer 404.
    """

    def __init__(self, pages=None, delay: float = 0.0):
        self.pages = dict(pages or {})
        self.delay = delay
        self.calls = Counter()
        self._lock = threading.Lock()

    def get(self, url, timeout=None):
        with self._lock:
            self.calls[url] += 1
        if self.delay:
            time.sleep(self.delay)
        value = self.pages.get(url, 404)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, int):
            return FakeResponse(status_code=value, url=url)
        return FakeResponse(text=value, url=url)


def metadata_xml(latest=None, last_updated="20220910083000", versions=(), release=None):
    parts = ["<metadata><groupId>g</groupId><artifactId>a</artifactId><versioning>"]
    if latest:
        parts.append(f"<latest>{latest}</latest>")
    if release:
        parts.append(f"<release>{release}</release>")
    if versions:
        parts.append("<versions>")
        parts.extend(f"<version>{v}</version>" for v in versions)
        parts.append("</versions>")
    if last_updated:
        parts.append(f"<lastUpdated>{last_updated}</lastUpdated>")
    parts.append("</versioning></metadata>")
    return "".join(parts)


def metadata_url(group_path: str, artifact_id: str) -> str:
    return f"{REPO}{group_path}/{artifact_id}/maven-metadata.xml"


PLUGINS_HTML = """
<html><body>
<table class="bodyTable">
  <tr><th>Plugin</th><th>Type*</th><th>Version</th><th>Release Date</th><th>Description</th></tr>
  <tr class="a">
    <td><a href="/plugins/maven-jar-plugin/">jar</a></td>
    <td>B</td><td>3.3.0</td><td>2022-09-12</td><td>Build a JAR from the current project.</td>
  </tr>
  <tr class="b">
    <td><a href="/plugins/maven-compiler-plugin/">compiler</a></td>
    <td>B</td><td>3.10.1</td><td>2022-03-08</td><td>Compiles Java sources.</td>
  </tr>
  <tr class="a">
    <td><a class="externalLink" href="https://github.com/example/maven-war-plugin/">war</a></td>
    <td>B</td><td>9.9.9</td><td>2001-01-01</td><td>Mirror elsewhere.</td>
  </tr>
  <tr class="b">
    <td><a href="/plugins/maven-war-plugin/">war</a></td>
    <td>B</td><td>3.3.2 <span>(stable)</span></td><td>2021-09-01</td><td>Build a WAR.</td>
  </tr>
  <tr class="a">
    <td><a href="/plugins/maven-broken-plugin/">broken</a></td>
  </tr>
</table>
</body></html>
"""

POMS_HTML = """
<html><body>
<table class="bodyTable">
  <tr><th>Project</th><th>Version</th><th>Release Date</th></tr>
  <tr><th><b>ASF Parent POM</b></th><th>29</th><th>2023-01-01</th></tr>
  <tr><td><a href="/pom/asf/">apache</a></td><td>29</td><td>2023-01-02</td></tr>
  <tr><th><b>Maven Parent POMs</b></th><th>39</th><th>2023-02-14</th></tr>
  <tr><td><a href="/pom/maven/maven-plugins/">maven-plugins</a></td><td>39</td><td>2023-02-14</td></tr>
  <tr><td><a href="skins/">Maven Skins</a></td><td>8</td><td>2023-03-01</td></tr>
</table>
</body></html>
"""

SKINS_HTML = """
<html><body>
<table class="bodyTable">
  <tr><th>Skin</th><th>Version</th></tr>
  <tr><td><a href="/skins/">Maven Skins</a></td><td>8</td></tr>
  <tr><td><a href="/skins/maven-fluido-skin/">Fluido</a></td><td>1.11.1</td></tr>
</table>
</body></html>
"""

PLUGINS_CONF = f"""
# plugins listed on the plugins index page
>maven/plugins org.apache.maven.plugins {PLUGINS_URL}
maven-jar-plugin
maven-compiler-plugin
maven-ghost-plugin
"""


@pytest.fixture
def session_factory():
    return FakeSession


@pytest.fixture
def plugin_descriptors():
    return parse_configuration(PLUGINS_CONF.splitlines())


@pytest.fixture
def plugins_session():
    """Metadata for three plugins plus the plugins index page."""
    group = "org/apache/maven/plugins"
    return FakeSession(
        {
            PLUGINS_URL: PLUGINS_HTML,
            metadata_url(group, "maven-jar-plugin"): metadata_xml(
                "3.3.0", "20220910083000", ["3.2.2", "3.3.0"]
            ),
            metadata_url(group, "maven-compiler-plugin"): metadata_xml(
                "3.11.0", "20230301120000", ["3.10.1", "3.11.0"]
            ),
            metadata_url(group, "maven-ghost-plugin"): metadata_xml(
                "1.0", "20230101000000", ["1.0"]
            ),
        }
    )
