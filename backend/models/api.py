"""API request and response models."""
from typing import List, Optional
from pydantic import BaseModel, Field

from config import DEFAULT_WORDS_PER_PAGE, MIN_WORDS_PER_PAGE, MAX_WORDS_PER_PAGE


class PageResponse(BaseModel):
    """A single page as returned by the API."""
    page_number: int
    content: str
    word_count: int
    character_count: int


class ChapterSummary(BaseModel):
    """Chapter metadata accompanying paginated content."""
    id: int
    title: str
    chapter_number: int
    total_words: int
    total_characters: int


class PaginationInfo(BaseModel):
    """Full pagination of a chapter."""
    total_pages: int
    words_per_page: int
    pages: List[PageResponse]


class ChapterPagesResponse(BaseModel):
    """Response for GET /chapters/{chapter_id}/pages."""
    chapter: ChapterSummary
    pagination: PaginationInfo


class PageWindowResponse(BaseModel):
    """Resident window of pages around the current page."""
    chapter_id: int
    current_page: int
    total_pages: int
    words_per_page: int
    loaded_pages: List[int]
    can_go_next: bool
    can_go_previous: bool
    pages: List[PageResponse]
    repaginated: bool = False


class PageUpdateRequest(BaseModel):
    """Request body for replacing the content of one page."""
    content: str = Field(..., max_length=1_000_000)
    words_per_page: int = Field(
        DEFAULT_WORDS_PER_PAGE,
        ge=MIN_WORDS_PER_PAGE,
        le=MAX_WORDS_PER_PAGE
    )


class ChapterStatistics(BaseModel):
    """Response for GET /chapters/{chapter_id}/statistics."""
    id: int
    title: str
    chapter_number: int
    word_count: int
    character_count: int
    paragraph_count: int
    sentence_count: int
    average_words_per_paragraph: int
    average_words_per_sentence: int
    estimated_reading_time_minutes: int
    pages_at_default_words: int
    created: Optional[str] = None
    last_modified: Optional[str] = None
