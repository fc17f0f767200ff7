"""Page window manager tracking which pages of a chapter are resident in memory."""
import logging
from dataclasses import replace
from typing import Any, FrozenSet, Optional, Sequence

from models.page import Page, PaginationState
from services.paginator import paginate, reconstruct, count_words, validate_words_per_page
from config import DEFAULT_WORDS_PER_PAGE, MAX_PAGES_IN_MEMORY

logger = logging.getLogger(__name__)

# Pages kept on either side of the current page
WINDOW_RADIUS = MAX_PAGES_IN_MEMORY // 2


def _coerce_page(page: Any, fallback: int) -> int:
    try:
        return int(page)
    except (TypeError, ValueError, OverflowError):
        return fallback


def clamp_page(page: Any, total_pages: int, fallback: int = 1) -> int:
    """Clamp a requested page number to [1, total_pages]."""
    return max(1, min(_coerce_page(page, fallback), total_pages))


class PageWindowManager:
    """
    Keep the current page and its immediate neighbours resident while a
    chapter is navigated.

    States are immutable: every operation returns a new PaginationState and
    leaves its input alone, so a caller holding an older state still sees a
    consistent snapshot.
    """

    def __init__(self, words_per_page: int = DEFAULT_WORDS_PER_PAGE):
        """
        Initialize PageWindowManager.

        Args:
            words_per_page: Word budget used when paginating content

        Raises:
            InvalidArgumentError: If words_per_page is not a positive integer
        """
        self.words_per_page = validate_words_per_page(words_per_page)

    def create_state(self, content: str, initial_page: Any = 1) -> PaginationState:
        """
        Paginate content and open it at the given page.

        Args:
            content: Full chapter text
            initial_page: Page to open; clamped to the chapter's range

        Returns:
            Fresh PaginationState with the window around the opening page loaded
        """
        return self._build_state(content, initial_page, self.words_per_page)

    def navigate_to(self, state: PaginationState, target_page: Any) -> PaginationState:
        """
        Move to another page, loading its neighbours and evicting distant pages.

        The previous resident set and the new window are merged first, then
        every page further than one step from the target is dropped. Pages
        entering the window are therefore never evicted by the same move.

        Args:
            state: Current pagination state
            target_page: Requested page; clamped to [1, total_pages]

        Returns:
            New PaginationState with updated current_page and loaded_pages
        """
        current_page = clamp_page(target_page, state.total_pages, fallback=state.current_page)

        loaded = set(state.loaded_pages) | self.window_for(current_page, state.total_pages)
        evicted = {page for page in loaded if abs(page - current_page) > WINDOW_RADIUS}
        loaded -= evicted

        if evicted:
            logger.debug(f"Evicted pages {sorted(evicted)} while moving to page {current_page}")

        return replace(state, current_page=current_page, loaded_pages=frozenset(loaded))

    def next_page(self, state: PaginationState) -> PaginationState:
        return self.navigate_to(state, state.current_page + 1)

    def previous_page(self, state: PaginationState) -> PaginationState:
        return self.navigate_to(state, state.current_page - 1)

    @staticmethod
    def window_for(page: int, total_pages: int) -> FrozenSet[int]:
        """
        Pages that should be resident when the given page is current.

        Args:
            page: Current page number
            total_pages: Number of pages in the chapter

        Returns:
            The page and its neighbours that exist, at most three page numbers
        """
        window = {page}
        for offset in range(1, WINDOW_RADIUS + 1):
            if page - offset >= 1:
                window.add(page - offset)
            if page + offset <= total_pages:
                window.add(page + offset)
        return frozenset(window)

    @staticmethod
    def content_for(state: PaginationState, page_number: int) -> Optional[str]:
        """
        Content of a resident page.

        Args:
            state: Current pagination state
            page_number: Page to read

        Returns:
            The page content, or None if the page is not loaded. An empty
            string means the page is loaded and genuinely empty.
        """
        if page_number not in state.loaded_pages:
            return None
        page = PageWindowManager._find_page(state, page_number)
        return page.content if page else None

    @staticmethod
    def is_page_loaded(state: PaginationState, page_number: int) -> bool:
        return page_number in state.loaded_pages

    @staticmethod
    def current_page_info(state: PaginationState) -> Page:
        return PageWindowManager._find_page(state, state.current_page)

    @staticmethod
    def reconstruct(pages: Sequence[Page]) -> str:
        """Rebuild full chapter text from its pages for persistence."""
        return reconstruct(pages)

    def update_page(self, state: PaginationState, page_number: int, new_content: str) -> PaginationState:
        """
        Replace the content of one page, leaving page boundaries untouched.

        Args:
            state: Current pagination state
            page_number: Page being edited
            new_content: Edited page text

        Returns:
            New PaginationState; the input state when the page does not exist
        """
        if self._find_page(state, page_number) is None:
            logger.warning(f"Ignoring edit to page {page_number}: chapter has {state.total_pages} pages")
            return state

        pages = tuple(
            Page(page_number=page.page_number, content=new_content, word_count=count_words(new_content))
            if page.page_number == page_number else page
            for page in state.pages
        )
        return replace(state, pages=pages)

    def repaginate(self, state: PaginationState) -> PaginationState:
        """
        Rebuild page boundaries from the state's current content.

        Args:
            state: State whose pages may have been edited

        Returns:
            Fresh PaginationState opened at the same page (clamped)
        """
        words_per_page = state.words_per_page or self.words_per_page
        return self._build_state(reconstruct(state.pages), state.current_page, words_per_page)

    def _build_state(self, content: str, initial_page: Any, words_per_page: int) -> PaginationState:
        pages = paginate(content, words_per_page)
        total_pages = len(pages)
        current_page = clamp_page(initial_page, total_pages)

        logger.debug(f"Created pagination state: {total_pages} pages, opened at page {current_page}")
        return PaginationState(
            pages=tuple(pages),
            current_page=current_page,
            total_pages=total_pages,
            loaded_pages=self.window_for(current_page, total_pages),
            words_per_page=words_per_page
        )

    @staticmethod
    def _find_page(state: PaginationState, page_number: int) -> Optional[Page]:
        for page in state.pages:
            if page.page_number == page_number:
                return page
        return None
