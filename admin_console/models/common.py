"""
Shared model plumbing for upstream payloads.

Upstream payloads are camelCase; models accept both the alias and the field
name, and are dumped snake_case by the console API.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UpstreamModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_upstream(self, **kwargs) -> Dict[str, Any]:
        """camelCase JSON-ready dict for request bodies, without unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True, **kwargs)


T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a list view."""
    items: List[T]
    total: int
    limit: int
    offset: int
    has_more: bool = False
    page: int = 1


class Pagination(UpstreamModel):
    total: int = 0
    limit: int = 0
    offset: int = 0
    has_more: bool = False


def page_to_offset(page: Optional[int], limit: int, offset: Optional[int] = None) -> int:
    """Convert 1-based page numbers to upstream offsets."""
    if page and page > 0:
        return (page - 1) * limit
    return offset or 0


def build_page(items: List[T], pagination: Optional[Dict[str, Any]], *, limit: int, offset: int) -> Page[T]:
    """Build a Page from upstream items and its (possibly missing) pagination block."""
    meta = Pagination.model_validate(pagination) if pagination else Pagination(
        total=len(items), limit=limit, offset=offset, has_more=False
    )
    effective_limit = meta.limit or limit
    return Page(
        items=items,
        total=meta.total,
        limit=effective_limit,
        offset=meta.offset,
        has_more=meta.has_more,
        page=(meta.offset // effective_limit) + 1 if effective_limit else 1,
    )


class MutationResult(BaseModel):
    """Upstream `meta` block returned by create/update/delete endpoints."""
    code: Optional[str] = None
    message: Optional[str] = None
