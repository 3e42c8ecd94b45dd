"""Pagination settings.

Defaults for page sizes and SQL naming used by keyset traversal, offset
traversal and safe counting. Every value can still be overridden per call.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_PAGE_SIZE=1000, PAGINATION_COUNT_OPTIMIZE=false
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_page_size: Rows fetched per page when the caller gives no size.
        max_page_size: Largest page size the repository accepts.
        bind_prefix: Prefix of the resume predicate placeholders.
        count_alias: Alias of the derived table wrapped by safe counts.
        count_optimize: Replace the projection with a constant when counting.

    Example:
        settings = PaginationSettings()
        page_size = min(requested, settings.max_page_size)
    """

    default_page_size: int = Field(
        default=500,
        ge=1,
        le=100_000,
        description="Rows per page when the caller does not specify a size",
    )
    max_page_size: int = Field(
        default=10_000,
        ge=1,
        le=1_000_000,
        description="Maximum accepted page size (hard limit)",
    )
    bind_prefix: str = Field(
        default="seek",
        min_length=1,
        max_length=30,
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Placeholder name prefix for resume predicate values",
    )
    count_alias: str = Field(
        default="query",
        min_length=1,
        max_length=63,
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Alias given to the derived table of safe counts",
    )
    count_optimize: bool = Field(
        default=True,
        description="Drop the projection of non-UNION queries before counting",
    )

    @model_validator(mode="after")
    def validate_page_sizes(self) -> PaginationSettings:
        """Ensure the default page size fits under the maximum."""
        if self.default_page_size > self.max_page_size:
            msg = "default_page_size must not exceed max_page_size"
            raise ValueError(msg)
        return self

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
