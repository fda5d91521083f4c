"""Query parameters shared by every paginated listing."""

from dataclasses import dataclass

from fastapi import Query

from storefront.utils import settings


@dataclass(frozen=True)
class PageParams:
    page: int
    size: int


def page_params(
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: int | None = Query(None, ge=1, le=settings.MAX_PAGE_SIZE),
) -> PageParams:
    return PageParams(page=page, size=size or settings.DEFAULT_PAGE_SIZE)


def paged(response_model, result, to_item):
    """Build a ``*PageResponse`` from a repository Page."""
    return response_model(
        items=[to_item(item) for item in result.items],
        page=result.page,
        size=result.size,
        total=result.total,
        total_pages=result.total_pages,
    )
