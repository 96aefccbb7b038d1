"""Page request/result shapes and the arithmetic behind paged queries."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

E = TypeVar("E")


class OffsetMode(str, Enum):
    """How a page number becomes a SQL ``OFFSET``."""

    PAGE_TIMES_SIZE = "page_times_size"  # offset = page * size
    RAW_PAGE = "raw_page"  # offset = page


class PageConfig(BaseModel):
    """
    Requested page.

    ``page`` is 0-based. The first page is counted unless ``ignore_count`` is
    set; ``force_count`` counts on every page. The JSON field names of the
    original wire format (``IngoreCount``, ``ForceCount``) are accepted.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    page: int = Field(default=0, ge=0)
    size: int = 0
    ignore_count: bool = Field(
        default=False,
        validation_alias=AliasChoices("ignore_count", "IngoreCount", "IgnoreCount"),
        serialization_alias="IngoreCount",
    )
    force_count: bool = Field(
        default=False,
        validation_alias=AliasChoices("force_count", "ForceCount"),
        serialization_alias="ForceCount",
    )
    offset_mode: OffsetMode = OffsetMode.PAGE_TIMES_SIZE


class PageResult(BaseModel, Generic[E]):
    """
    One page of entities.

    ``count`` is the number of pages (not rows); it is 0 whenever the count
    query was skipped, which ``counted`` tells apart from an empty table.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: list[E] = Field(default_factory=list)
    count: int = 0
    page: int = 0
    counted: bool = False


def effective_page_size(size: int) -> int:
    return max(1, size)


def should_count(cfg: PageConfig) -> bool:
    return cfg.force_count or (cfg.page == 0 and not cfg.ignore_count)


def page_count(rows: int, size: int) -> int:
    """Pages needed for ``rows`` rows at ``size`` per page (size clamped to 1)."""
    size = effective_page_size(size)
    return (rows + size - 1) // size


def page_offset(cfg: PageConfig) -> int:
    if cfg.offset_mode is OffsetMode.RAW_PAGE:
        return cfg.page
    return cfg.page * effective_page_size(cfg.size)
