"""Check that index pages advertise the versions a repository has released."""

from dist_check.errors import ConfigurationError, DistCheckError, FetchError, InvalidRangeError
from dist_check.models import (
    ArtifactDescriptor,
    AuthoritativeRecord,
    CheckStatus,
    GroupTemplate,
    ListingPage,
    ReconciliationReport,
    ReconciliationResult,
)
from dist_check.reconcile import ReconciliationEngine, is_date_similar

__version__ = "0.1.0"

__all__ = [
    "ArtifactDescriptor",
    "AuthoritativeRecord",
    "CheckStatus",
    "ConfigurationError",
    "DistCheckError",
    "FetchError",
    "GroupTemplate",
    "InvalidRangeError",
    "ListingPage",
    "ReconciliationEngine",
    "ReconciliationReport",
    "ReconciliationResult",
    "is_date_similar",
]
