"""Version ordering and version-range expressions.

Versions are ordered the way a Maven repository orders them, close enough
for picking the newest release: numeric segments compare numerically and
qualifiers rank ``alpha < beta < milestone < rc < snapshot < release < sp``.

Ranges use bracket notation, for example ``[1.0,2.0)``, ``[3.0,)``,
``(,1.0],[1.2,)`` or ``[2.1]``. A bare version such as ``1.0`` is only a
recommendation and matches every version.
"""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Iterable, Optional

from dist_check.errors import InvalidRangeError

QUALIFIER_RANKS = {
    "alpha": 1,
    "a": 1,
    "beta": 2,
    "b": 2,
    "milestone": 3,
    "m": 3,
    "rc": 4,
    "cr": 4,
    "snapshot": 5,
    "": 6,
    "ga": 6,
    "final": 6,
    "release": 6,
    "sp": 7,
}
UNKNOWN_QUALIFIER_RANK = 8

# Filler items used when one version has fewer segments than the other
_ZERO = (1, 0)
_RELEASE = (0, QUALIFIER_RANKS[""], "")

_TOKEN_RE = re.compile(r"\d+|[a-z]+")


def _item(token: str) -> tuple:
    if token.isdigit():
        return (1, int(token))
    if token in QUALIFIER_RANKS:
        # aliases such as "ga" and "final" are the same qualifier
        return (0, QUALIFIER_RANKS[token], "")
    return (0, UNKNOWN_QUALIFIER_RANK, token)


@total_ordering
class Version:
    """A comparable version string."""

    def __init__(self, text: str):
        self.text = text.strip()
        self.items = tuple(_item(t) for t in _TOKEN_RE.findall(self.text.lower()))

    def _compare(self, other: "Version") -> int:
        length = max(len(self.items), len(other.items))
        for i in range(length):
            left = self.items[i] if i < len(self.items) else None
            right = other.items[i] if i < len(other.items) else None
            # Pad the shorter side with a neutral item of the same kind
            if left is None:
                left = _ZERO if right[0] == 1 else _RELEASE
            if right is None:
                right = _ZERO if left[0] == 1 else _RELEASE
            if left != right:
                return -1 if left < right else 1
        return 0

    def _canonical(self) -> tuple:
        items = list(self.items)
        while items and items[-1] in (_ZERO, _RELEASE):
            items.pop()
        return tuple(items)

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self):
        return hash(self._canonical())

    def __str__(self):
        return self.text

    def __repr__(self):
        return f"Version({self.text!r})"


@dataclass(frozen=True)
class Restriction:
    """One bracketed interval of a version range. ``None`` bounds are open."""

    lower: Optional[Version] = None
    lower_inclusive: bool = False
    upper: Optional[Version] = None
    upper_inclusive: bool = False

    def contains(self, version: Version) -> bool:
        if self.lower is not None:
            if version < self.lower or (version == self.lower and not self.lower_inclusive):
                return False
        if self.upper is not None:
            if version > self.upper or (version == self.upper and not self.upper_inclusive):
                return False
        return True


EVERYTHING = Restriction()


@dataclass(frozen=True)
class VersionRange:
    """A parsed version range expression."""

    spec: str
    restrictions: tuple[Restriction, ...]
    recommended: Optional[Version] = None

    @classmethod
    def parse(cls, spec: str) -> "VersionRange":
        """Parse a range expression.

        Args:
            spec: Range text such as ``[1.0,2.0)``.

        Returns:
            The parsed range.

        Raises:
            InvalidRangeError: If the expression is malformed.
        """
        text = spec.strip()
        if not text:
            raise InvalidRangeError(spec, "empty range")

        if text[0] not in "[(":
            if any(c in text for c in "[](),"):
                raise InvalidRangeError(spec, "unexpected bracket or comma")
            return cls(spec=spec, restrictions=(EVERYTHING,), recommended=Version(text))

        restrictions: list[Restriction] = []
        rest = text
        while rest:
            if rest[0] not in "[(":
                raise InvalidRangeError(spec, "range must start with '[' or '('")
            ends = [i for i in (rest.find("]"), rest.find(")")) if i >= 0]
            if not ends:
                raise InvalidRangeError(spec, "unbounded range")
            end = min(ends)
            restriction = _parse_restriction(spec, rest[: end + 1])
            if restrictions:
                previous = restrictions[-1]
                if (
                    previous.upper is None
                    or restriction.lower is None
                    or previous.upper > restriction.lower
                ):
                    raise InvalidRangeError(spec, "ranges overlap")
            restrictions.append(restriction)

            rest = rest[end + 1 :].strip()
            if rest:
                if not rest.startswith(","):
                    raise InvalidRangeError(spec, "ranges must be separated by ','")
                rest = rest[1:].strip()
                if not rest:
                    raise InvalidRangeError(spec, "trailing ','")

        return cls(spec=spec, restrictions=tuple(restrictions))

    def contains(self, version: str) -> bool:
        v = Version(version)
        return any(r.contains(v) for r in self.restrictions)

    def match_version(self, versions: Iterable[str]) -> Optional[str]:
        """Return the highest of ``versions`` inside this range, if any."""
        candidates = [v for v in versions if self.contains(v)]
        if not candidates:
            return None
        return max(candidates, key=Version)

    def __str__(self):
        return self.spec


def _parse_restriction(spec: str, text: str) -> Restriction:
    lower_inclusive = text.startswith("[")
    upper_inclusive = text.endswith("]")
    inner = text[1:-1].strip()

    if "," not in inner:
        if not (lower_inclusive and upper_inclusive):
            raise InvalidRangeError(spec, "single version must be surrounded by []")
        if not inner:
            raise InvalidRangeError(spec, "empty version")
        exact = Version(inner)
        return Restriction(exact, True, exact, True)

    parts = inner.split(",")
    if len(parts) != 2:
        raise InvalidRangeError(spec, "too many ',' in range")
    lower_text, upper_text = (p.strip() for p in parts)
    lower = Version(lower_text) if lower_text else None
    upper = Version(upper_text) if upper_text else None

    if lower is not None and upper is not None:
        if upper < lower:
            raise InvalidRangeError(spec, "range defies version ordering")
        if upper == lower and not (lower_inclusive and upper_inclusive):
            raise InvalidRangeError(spec, "empty range")

    return Restriction(lower, lower_inclusive, upper, upper_inclusive)
