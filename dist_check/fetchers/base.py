"""Base fetcher class and HTTP utilities."""

import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from dist_check.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_RETRIES = 3
USER_AGENT = "dist-check (release metadata consistency check)"


def get_session(retries: int = DEFAULT_RETRIES) -> requests.Session:
    """Create a requests session with retry logic."""
    session = requests.Session()
    retry = Retry(
        total=retries,
        backoff_factor=0.5,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"],
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers["User-Agent"] = USER_AGENT
    return session


class BaseFetcher:
    """Shared plumbing for everything that reads a remote document."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.session = session or get_session()
        self.timeout = timeout

    def get_text(self, url: str) -> str:
        """GET ``url`` and return its body.

        Transient failures are retried by the session adapter; whatever is
        left after that becomes a FetchError.

        Raises:
            FetchError: If the document is unreachable or not 2xx.
        """
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Failed to fetch %s: %s", url, e)
            raise FetchError(f"Failed to fetch {url}: {e}", url=url) from e
        return response.text
