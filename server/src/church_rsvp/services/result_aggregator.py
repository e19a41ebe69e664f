"""Paginated, status-summarized views over registration collections"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Generic, List, Sequence, TypeVar

from church_rsvp.models.registration import RegistrationStatus

T = TypeVar("T")


def empty_status_counts() -> Dict[RegistrationStatus, int]:
    return {status: 0 for status in RegistrationStatus}


def count_statuses(collection: Sequence) -> Dict[RegistrationStatus, int]:
    """Count every item of the collection into the three status buckets"""
    counts = empty_status_counts()
    for item in collection:
        counts[RegistrationStatus.parse(item.status)] += 1
    return counts


@dataclass
class RegistrationPage(Generic[T]):
    items: List[T]
    total: int
    status_counts: Dict[RegistrationStatus, int] = field(
        default_factory=empty_status_counts
    )
    page_number: int = 1
    page_size: int = 10

    @property
    def page_count(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page_number * self.page_size < self.total

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1


def page(collection: Sequence[T], page_number: int, page_size: int) -> RegistrationPage[T]:
    """
    Slice one page out of a filtered collection and summarize all of it.

    Args:
        collection: The full filtered collection (not just the visible page)
        page_number: 1-based page index; out-of-range pages come back empty
        page_size: Items per page, must be at least 1

    Returns:
        RegistrationPage with the page items, the collection total and the
        per-status counts of the whole collection

    Raises:
        ValueError: If page_size is smaller than 1
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    items = list(collection)
    total = len(items)
    start = (page_number - 1) * page_size
    end = page_number * page_size

    if page_number < 1 or start >= total:
        visible: List[T] = []
    else:
        visible = items[start:end]

    return RegistrationPage(
        items=visible,
        total=total,
        status_counts=count_statuses(items),
        page_number=page_number,
        page_size=page_size,
    )
