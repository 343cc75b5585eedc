"""Settings and the artifact configuration file.

The configuration file lists one record per line::

    # comment
    >maven/plugins org.apache.maven.plugins https://maven.apache.org/plugins/
    maven-jar-plugin
    maven-compiler-plugin [3.0,4.0)
    >maven/pom/maven org.apache.maven:maven-parent

A line starting with ``>`` opens a group; the lines after it are artifacts of
that group until the next group line.
"""

import json
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from dist_check.errors import ConfigurationError
from dist_check.fetchers.base import DEFAULT_RETRIES, DEFAULT_TIMEOUT
from dist_check.fetchers.metadata import DEFAULT_REPO_BASE_URL
from dist_check.models import ArtifactDescriptor, GroupTemplate

GROUP_PREFIX = ">"
COMMENT_PREFIX = "#"


class CheckSettings(BaseModel):
    """Knobs of a check run."""

    repo_base_url: str = Field(
        default=DEFAULT_REPO_BASE_URL, description="Repository holding maven-metadata.xml files"
    )
    configuration_file: Optional[Path] = Field(
        default=None, description="Artifact configuration file"
    )
    ignore_failures: list[str] = Field(
        default_factory=list, description="artifactId or artifactId:version entries to ignore"
    )
    force_versions: dict[str, str] = Field(
        default_factory=dict, description="artifactId -> version expected on index pages"
    )
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    retries: int = Field(default=DEFAULT_RETRIES, ge=0)
    max_workers: int = Field(default=1, ge=1)
    output_dir: Path = Field(default=Path("target") / "dist-check")

    @field_validator("repo_base_url")
    @classmethod
    def _trailing_slash(cls, v: str) -> str:
        return v if v.endswith("/") else v + "/"


def load_settings(path: Optional[Union[str, Path]]) -> CheckSettings:
    """Load settings from a JSON file; defaults when there is none.

    Raises:
        ConfigurationError: If the file is not valid JSON or has bad values.
    """
    if path is None or not Path(path).exists():
        return CheckSettings()

    try:
        with open(path) as f:
            data = json.load(f)
        return CheckSettings.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ConfigurationError(f"Invalid settings file {path}: {e}") from e


def parse_configuration(lines: Iterable[str]) -> list[ArtifactDescriptor]:
    """Turn configuration lines into descriptors, in file order.

    Raises:
        ConfigurationError: On a malformed record, reported with its line number.
    """
    descriptors: list[ArtifactDescriptor] = []
    group: Optional[GroupTemplate] = None

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue

        try:
            if line.startswith(GROUP_PREFIX):
                group = GroupTemplate.from_tokens(line[1:].split())
                singleton = group.as_descriptor()
                if singleton is not None:
                    descriptors.append(singleton)
            elif group is None:
                raise ConfigurationError("artifact record before any group record")
            else:
                descriptors.append(ArtifactDescriptor.from_tokens(group, line.split()))
        except ConfigurationError as e:
            e.args = (f"line {lineno}: {e}",)
            raise

    return descriptors


def load_configuration(path: Union[str, Path]) -> list[ArtifactDescriptor]:
    """Read and parse an artifact configuration file."""
    try:
        with open(path, encoding="utf-8") as f:
            return parse_configuration(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e


def apply_forced_versions(
    descriptors: Iterable[ArtifactDescriptor], force_versions: Mapping[str, str]
) -> list[ArtifactDescriptor]:
    """Pin the expected version of artifacts whose detection is unreliable."""
    return [d.with_forced_version(force_versions.get(d.artifact_id, d.forced_version)) for d in descriptors]
