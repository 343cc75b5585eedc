"""Fetch-once cache of listing (index) pages."""

import logging
import threading
from collections import Counter
from typing import Optional, Union

import requests
from bs4 import BeautifulSoup

from dist_check.errors import FetchError
from dist_check.fetchers.base import DEFAULT_TIMEOUT, BaseFetcher

logger = logging.getLogger(__name__)


class IndexPageCache(BaseFetcher):
    """Parsed listing pages keyed by URL.

    Every URL is fetched at most once for the lifetime of the cache, even
    when several threads ask for it at the same time. A fetch that failed
    after the session's retries is remembered too, and raised again for
    every later caller of that URL.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(session=session, timeout=timeout)
        self._documents: dict[str, Union[BeautifulSoup, FetchError]] = {}
        self._fetches: Counter = Counter()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, url: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(url, threading.Lock())

    def get(self, url: str) -> BeautifulSoup:
        """Return the parsed page at ``url``, fetching it on first use.

        Raises:
            FetchError: If the page could not be fetched.
        """
        with self._lock_for(url):
            if url not in self._documents:
                with self._locks_guard:
                    self._fetches[url] += 1
                logger.info("Fetching index page %s", url)
                try:
                    self._documents[url] = BeautifulSoup(self.get_text(url), "html.parser")
                except FetchError as e:
                    self._documents[url] = e
            cached = self._documents[url]

        if isinstance(cached, FetchError):
            raise cached
        return cached

    def fetch_count(self, url: str) -> int:
        """Number of network fetches made for ``url``."""
        with self._locks_guard:
            return self._fetches[url]

    def __contains__(self, url: str) -> bool:
        return url in self._documents
