"""Data models for release metadata checks."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from dist_check.errors import ConfigurationError
from dist_check.versions import VersionRange

SRC_BIN_MARKER = "src+bin"
CANNOT_PARSE = "Cannot parse"
METADATA_FILENAME = "maven-metadata.xml"

# Artifact whose "-src" bundle naming only applies on the dist area
SOURCE_RELEASE_EXEMPTION = "maven-ant-tasks"

POMS_INDEX_URL = "https://maven.apache.org/pom/"


class ListingPage(BaseModel):
    """An index page that advertises the current version of components."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Listing URL, also its identity")
    name: str = Field(description="Display label")
    version_column: int = Field(ge=1, description="1-based column holding the version")
    has_date_column: bool = Field(
        description="Whether the column after the version holds a release date"
    )


LISTING_PAGES: dict[str, ListingPage] = {
    page.url: page
    for page in (
        ListingPage(url="https://maven.apache.org/plugins/", name="Plugins", version_column=3, has_date_column=True),
        ListingPage(url="https://maven.apache.org/shared/", name="Shared", version_column=2, has_date_column=True),
        ListingPage(url="https://maven.apache.org/skins/", name="Skins", version_column=2, has_date_column=False),
        ListingPage(url=POMS_INDEX_URL, name="Poms", version_column=2, has_date_column=True),
    )
}


class GroupTemplate(BaseModel):
    """Fields shared by every artifact configured under one group record."""

    model_config = ConfigDict(frozen=True)

    directory: str = Field(description="Display grouping key")
    group_id: str
    artifact_id: Optional[str] = Field(
        default=None, description="Set only for a singleton group record"
    )
    src_bin: bool = False
    listing_url: Optional[str] = Field(
        default=None, description="Listing override for the whole group"
    )

    @classmethod
    def from_tokens(cls, tokens: Sequence[str]) -> "GroupTemplate":
        """Build a group from a tokenized ``directory group[:artifact] [src+bin|url]`` record."""
        if len(tokens) < 2:
            raise ConfigurationError(
                f"Group record needs a directory and a group id: {' '.join(tokens)!r}"
            )

        directory = tokens[0].replace("/", " ").replace(":", " ").strip()
        group_id, sep, artifact_id = tokens[1].partition(":")
        extra = tokens[2] if len(tokens) > 2 else None
        src_bin = extra == SRC_BIN_MARKER

        return cls(
            directory=directory,
            group_id=group_id,
            artifact_id=artifact_id if sep else None,
            src_bin=src_bin,
            listing_url=extra if extra and not src_bin else None,
        )

    def as_descriptor(self) -> Optional["ArtifactDescriptor"]:
        """Return the reconcilable descriptor of a singleton group record.

        A singleton is always checked against the poms listing, where the
        umbrella parent POMs live; the group listing override does not apply.
        """
        if self.artifact_id is None:
            return None
        return ArtifactDescriptor(
            group=self,
            artifact_id=self.artifact_id,
            listing_url=POMS_INDEX_URL,
        )


class ArtifactDescriptor(BaseModel):
    """One configured component."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    group: GroupTemplate
    artifact_id: str
    version_range: Optional[VersionRange] = None
    forced_version: Optional[str] = None
    listing_url: Optional[str] = None

    @classmethod
    def from_tokens(cls, group: GroupTemplate, tokens: Sequence[str]) -> "ArtifactDescriptor":
        """Build a child of ``group`` from a tokenized ``artifact [range]`` record.

        Raises:
            ConfigurationError: If the artifact id is missing.
            InvalidRangeError: If the version range is malformed.
        """
        if not tokens or not tokens[0]:
            raise ConfigurationError("Artifact record needs an artifact id")
        version_range = VersionRange.parse(tokens[1]) if len(tokens) > 1 else None
        return cls(
            group=group,
            artifact_id=tokens[0],
            version_range=version_range,
            listing_url=group.listing_url,
        )

    @property
    def directory(self) -> str:
        return self.group.directory

    @property
    def group_id(self) -> str:
        return self.group.group_id

    @property
    def src_bin(self) -> bool:
        return self.group.src_bin

    def with_forced_version(self, version: Optional[str]) -> "ArtifactDescriptor":
        """Return a copy whose expected version is pinned to ``version``."""
        return self.model_copy(update={"forced_version": version})

    def base_url(self, repo_base_url: str, folder: str) -> str:
        return f"{repo_base_url}{self.group_id.replace('.', '/')}/{self.artifact_id}/{folder}"

    def metadata_url(self, repo_base_url: str) -> str:
        return self.base_url(repo_base_url, METADATA_FILENAME)

    def versioned_folder_url(self, repo_base_url: str, version: str) -> str:
        return self.base_url(repo_base_url, version) + "/"

    def versioned_pom_url(self, repo_base_url: str, version: str) -> str:
        return self.base_url(repo_base_url, f"{version}/{self.artifact_id}-{version}.pom")

    def source_release_filename(self, version: str, dist: bool) -> str:
        """Name of the source bundle published for ``version``.

        Args:
            version: Released version.
            dist: True for the dist area, False for the Maven repository.
        """
        if self.src_bin and (dist or self.artifact_id != SOURCE_RELEASE_EXEMPTION):
            suffix = "-src"
        else:
            suffix = "-source-release"
        return f"{self.artifact_id}-{version}{suffix}.zip"

    def __str__(self):
        return f"{self.group_id}:{self.artifact_id}"


class AuthoritativeRecord(BaseModel):
    """Version data read from an artifact's repository metadata."""

    model_config = ConfigDict(frozen=True)

    latest_version: str
    last_updated_raw: Optional[str] = None
    versions: tuple[str, ...] = ()

    @property
    def release_date(self) -> str:
        """Last-updated timestamp as ``YYYY-MM-DD``, or ``"Cannot parse"``."""
        try:
            parsed = datetime.strptime((self.last_updated_raw or "").strip(), "%Y%m%d%H%M%S")
        except ValueError:
            return CANNOT_PARSE
        return parsed.strftime("%Y-%m-%d")

    def current_version(self, version_range: Optional[VersionRange] = None) -> Optional[str]:
        """Newest version inside ``version_range``; the latest one without a range."""
        if version_range is None:
            return self.latest_version
        return version_range.match_version(self.versions)


class CheckStatus(str, Enum):
    MATCH = "match"
    VERSION_MISMATCH = "version-mismatch"
    DATE_MISMATCH = "date-mismatch"
    NOT_FOUND = "not-found"
    FETCH_ERROR = "fetch-error"


@dataclass
class ReconciliationResult:
    """Outcome of checking one descriptor against its listing."""

    descriptor: ArtifactDescriptor
    status: CheckStatus
    authoritative_version: Optional[str] = None
    authoritative_date: Optional[str] = None
    listing_version: Optional[str] = None
    listing_date: Optional[str] = None
    error: Optional[str] = None
    ignored: bool = False

    @property
    def listing_url(self) -> Optional[str]:
        return self.descriptor.listing_url

    @property
    def is_failure(self) -> bool:
        """Hard failures: wrong version or an unreachable document."""
        return self.status in (CheckStatus.VERSION_MISMATCH, CheckStatus.FETCH_ERROR)


@dataclass
class ReconciliationReport:
    """Results of one run, grouped by listing in configuration order."""

    results_by_listing: dict[str, list[ReconciliationResult]] = field(default_factory=dict)
    error_lines: list[str] = field(default_factory=list)
    warning_lines: list[str] = field(default_factory=list)

    @property
    def results(self) -> list[ReconciliationResult]:
        return [r for group in self.results_by_listing.values() for r in group]

    @property
    def has_failures(self) -> bool:
        return any(r.is_failure and not r.ignored for r in self.results)
