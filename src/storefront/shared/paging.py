"""Pages of aggregates returned by repository queries."""

from dataclasses import dataclass

from protean.exceptions import ValidationError

SCAN_BATCH_SIZE = 100


@dataclass(frozen=True)
class Page:
    items: list
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.size - 1) // self.size if self.size else 0

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages


def page_of(result, page: int, size: int) -> Page:
    """Wrap a Protean ResultSet fetched with ``offset(page * size).limit(size)``."""
    return Page(items=list(result.items), page=page, size=size, total=result.total)


def slice_page(matches: list, page: int, size: int) -> Page:
    start = page * size
    return Page(items=matches[start : start + size], page=page, size=size, total=len(matches))


def scan(query, predicate) -> list:
    """Every record of ``query`` for which ``predicate`` holds, read in batches.

    For conditions the query layer cannot express, such as substring matches
    over several fields or comparisons between two fields of the same record.
    """
    matches = []
    offset = 0
    while True:
        batch = query.offset(offset).limit(SCAN_BATCH_SIZE).all()
        matches.extend(item for item in batch.items if predicate(item))
        if len(batch.items) < SCAN_BATCH_SIZE:
            return matches
        offset += SCAN_BATCH_SIZE


def search_needle(term) -> str:
    """Normalize a free-text search term, refusing one that is blank."""
    needle = (term or "").strip().lower()
    if not needle:
        raise ValidationError({"term": ["Search term must not be blank"]})
    return needle


def contains(needle: str, *values) -> bool:
    return any(needle in str(value).lower() for value in values if value)
