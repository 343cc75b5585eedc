"""Locate an artifact's row in a listing page.

Listing pages are tables where each ordinary row links to the component's
own site (``.../plugins/maven-jar-plugin/``) and carries the version, and
sometimes the release date, in later cells. A few umbrella components are
rendered differently, so their lookup is driven by ``LOOKUP_RULES``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from dist_check.models import ArtifactDescriptor, ListingPage


class MatchStrategy(Enum):
    # href of a link cell inside a table row
    ANCHOR_HREF = "tr > td > a[href]:not(.externalLink)"
    # emphasized text of a header cell
    HEADER_TEXT = "tr > th > b"


@dataclass(frozen=True)
class LookupRule:
    key: str
    strategy: MatchStrategy = MatchStrategy.ANCHOR_HREF


LOOKUP_RULES: dict[str, LookupRule] = {
    # the poms page renders Maven parent POMs as a header row
    "maven-parent": LookupRule("Maven Parent POMs", MatchStrategy.HEADER_TEXT),
    "maven-skins": LookupRule("skins/"),
    "apache": LookupRule("asf/"),
}


@dataclass(frozen=True)
class ListingMatch:
    found: bool
    version: Optional[str] = None
    date: Optional[str] = None


NOT_FOUND = ListingMatch(found=False)


def lookup_rule(artifact_id: str, rules: dict[str, LookupRule] = LOOKUP_RULES) -> LookupRule:
    """Rule used to find ``artifact_id``; ``/artifact_id/`` in a link by default."""
    return rules.get(artifact_id) or LookupRule(f"/{artifact_id}/")


def own_text(element: Tag) -> str:
    """Text held directly by ``element``, excluding its children's text.

    Comments and other markup strings are not text.
    """
    text = "".join(child for child in element.children if type(child) is NavigableString)
    return " ".join(text.split())


def _cell(row: Tag, index: int) -> Optional[str]:
    cells = row.find_all(recursive=False)
    if index < len(cells):
        return own_text(cells[index])
    return None


class IndexMatcher:
    """Extract the version and date a listing page shows for an artifact."""

    def __init__(self, rules: Optional[dict[str, LookupRule]] = None):
        self.rules = LOOKUP_RULES if rules is None else rules

    def match(
        self, document: BeautifulSoup, page: ListingPage, descriptor: ArtifactDescriptor
    ) -> ListingMatch:
        """Find the row of ``descriptor`` in ``document``.

        Matching is by substring, so the first candidate containing the
        lookup key wins and scanning stops there.

        Returns:
            The listing's version and date, or ``NOT_FOUND``.
        """
        rule = lookup_rule(descriptor.artifact_id, self.rules)

        for element in document.select(rule.strategy.value):
            if rule.strategy is MatchStrategy.HEADER_TEXT:
                candidate = element.get_text()
            else:
                candidate = element.get("href", "")
            if rule.key not in candidate:
                continue

            row = element.parent.parent
            version = _cell(row, page.version_column - 1)
            date = _cell(row, page.version_column) if page.has_date_column else None
            return ListingMatch(found=True, version=version, date=date)

        return NOT_FOUND
