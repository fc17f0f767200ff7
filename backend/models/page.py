"""Page and pagination state data models."""
from dataclasses import dataclass
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class Page:
    """A single page of chapter content."""
    page_number: int  # 1-based
    content: str
    word_count: int

    @property
    def character_count(self) -> int:
        """Characters in the page, line breaks excluded."""
        from services.paginator import count_characters
        return count_characters(self.content)


@dataclass(frozen=True)
class PaginationState:
    """Snapshot of a paginated chapter and the pages resident in memory."""
    pages: Tuple[Page, ...]
    current_page: int
    total_pages: int
    loaded_pages: FrozenSet[int]
    words_per_page: int = 0

    @property
    def can_go_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def can_go_previous(self) -> bool:
        return self.current_page > 1


@dataclass(frozen=True)
class DocumentStats:
    """Totals across all pages of a chapter."""
    total_pages: int
    total_words: int
    total_characters: int
