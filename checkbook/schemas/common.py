"""
Common Pydantic schemas for API request/response handling.

This module provides:
- Pagination parameters and response models
- Search result containers
- Error response format
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# Type variable for generic paginated responses
DataT = TypeVar("DataT")


class SearchResult(BaseModel, Generic[DataT]):
    """
    Internal search result container.

    Used for service-to-route communication. Routes convert this to
    PaginatedResponse for HTTP responses.

    Attributes:
        items: List of model instances for current page
        total: Total count of items matching filters (without pagination)
    """

    items: list[DataT]
    total: int

    model_config = ConfigDict(from_attributes=True, arbitrary_types_allowed=True)


class PaginationParams(BaseModel):
    """
    Query parameters for paginated list endpoints.

    Attributes:
        page: Page number (1-indexed)
        page_size: Number of items per page (max 100)
    """

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Number of items per page (max 100)",
    )

    @property
    def offset(self) -> int:
        """
        Calculate SQL OFFSET from page number.

        Example:
            >>> PaginationParams(page=2, page_size=20).offset
            20
        """
        return (self.page - 1) * self.page_size

    @staticmethod
    def calculate_total_pages(total: int, page_size: int) -> int:
        """
        Calculate total pages from total count.

        Example:
            >>> PaginationParams.calculate_total_pages(95, 20)
            5
        """
        return (total + page_size - 1) // page_size if total > 0 else 0


class PaginationMeta(BaseModel):
    """Metadata for paginated responses."""

    total: int = Field(description="Total number of items")
    page: int = Field(description="Current page number")
    page_size: int = Field(description="Number of items per page")
    total_pages: int = Field(description="Total number of pages")

    @classmethod
    def build(cls, total: int, pagination: PaginationParams) -> "PaginationMeta":
        return cls(
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=PaginationParams.calculate_total_pages(
                total, pagination.page_size
            ),
        )


class PaginatedResponse(BaseModel, Generic[DataT]):
    """
    Generic paginated response wrapper.

    Attributes:
        data: List of items for current page
        meta: Pagination metadata
    """

    data: list[DataT]
    meta: PaginationMeta


class ErrorResponse(BaseModel):
    """Standard error response format used for all error responses."""

    class Error(BaseModel):
        code: str = Field(description="Error code (e.g., NOT_FOUND)")
        message: str = Field(description="Human-readable error message")
        details: Any = Field(default=None, description="Additional error details")

    class Meta(BaseModel):
        request_id: str | None = Field(default=None, description="Request id for tracing")

    error: Error
    meta: Meta
