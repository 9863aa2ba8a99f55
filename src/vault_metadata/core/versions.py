"""Ordering of dataset versions by (major, minor) number."""

from collections import Counter
from typing import Iterable

from schemas.dataset_version import DatasetVersion

from .exceptions import InconsistentStateError


def sort_descending(versions: Iterable[DatasetVersion]) -> list[DatasetVersion]:
    """Sort versions newest first."""
    return sorted(versions, key=lambda v: v.version, reverse=True)


def ensure_unique_versions(versions: Iterable[DatasetVersion]) -> None:
    """Reject a history in which two versions share a version number.

    Raises:
        InconsistentStateError: Naming the first duplicated version number
    """
    counts = Counter(v.version for v in versions)
    duplicates = sorted((n for n, c in counts.items() if c > 1), reverse=True)
    if duplicates:
        version = str(duplicates[0])
        raise InconsistentStateError(
            f"More than one released or deaccessioned version with number {version}",
            version=version,
        )
