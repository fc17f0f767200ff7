"""Data models for the Chapter Pagination service."""
from .page import Page, PaginationState, DocumentStats
from .chapter import Chapter
from .api import (
    PageResponse,
    ChapterSummary,
    PaginationInfo,
    ChapterPagesResponse,
    PageWindowResponse,
    PageUpdateRequest,
    ChapterStatistics,
)

__all__ = [
    "Page",
    "PaginationState",
    "DocumentStats",
    "Chapter",
    "PageResponse",
    "ChapterSummary",
    "PaginationInfo",
    "ChapterPagesResponse",
    "PageWindowResponse",
    "PageUpdateRequest",
    "ChapterStatistics",
]
