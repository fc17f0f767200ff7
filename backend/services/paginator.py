"""Paginator that splits chapter text into word-bounded pages at paragraph boundaries."""
import logging
import math
import re
from typing import Any, Dict, List, Sequence

from models.page import Page, DocumentStats
from config import DEFAULT_WORDS_PER_PAGE, CHARS_PER_PAGE, REPAGINATION_TOLERANCE, READING_WORDS_PER_MINUTE

logger = logging.getLogger(__name__)

# A newline, optional whitespace-only lines, then another newline
PARAGRAPH_SEPARATOR = re.compile(r"\n\s*\n")
SENTENCE_SEPARATOR = re.compile(r"[.!?]+")
LINE_BREAK = re.compile(r"\r?\n")
WORD = re.compile(r"\S+")

PAGE_JOINER = "\n\n"


class InvalidArgumentError(ValueError):
    """Raised when a pagination input violates its contract."""


def validate_words_per_page(words_per_page: Any) -> int:
    """
    Check that a words-per-page budget is a positive integer.

    Args:
        words_per_page: Candidate budget

    Returns:
        The budget, unchanged

    Raises:
        InvalidArgumentError: If the budget is not a positive integer
    """
    if isinstance(words_per_page, bool) or not isinstance(words_per_page, int):
        raise InvalidArgumentError(
            f"words_per_page must be a positive integer, got {words_per_page!r}"
        )
    if words_per_page <= 0:
        raise InvalidArgumentError(
            f"words_per_page must be a positive integer, got {words_per_page}"
        )
    return words_per_page


def count_words(text: str) -> int:
    """Number of maximal non-whitespace runs in text."""
    if not text:
        return 0
    return len(WORD.findall(text))


def count_characters(text: str) -> int:
    """Number of characters in text, line breaks excluded."""
    if not text:
        return 0
    return len(LINE_BREAK.sub("", text))


def split_paragraphs(text: str) -> List[str]:
    """Split text on blank-line boundaries, keeping empty paragraphs."""
    return PARAGRAPH_SEPARATOR.split(text)


def _empty_pages() -> List[Page]:
    return [Page(page_number=1, content="", word_count=0)]


def paginate(content: str, words_per_page: int = DEFAULT_WORDS_PER_PAGE) -> List[Page]:
    """
    Split chapter content into pages without breaking paragraphs.

    Paragraphs are accumulated greedily. A page is closed as soon as the next
    paragraph would push it over the budget, but only if the page already
    holds something, so a single paragraph larger than the budget still ends
    up alone on its own page instead of being cut.

    Args:
        content: Full chapter text
        words_per_page: Target number of words per page

    Returns:
        Pages numbered from 1 with no gaps; a single empty page for blank content

    Raises:
        InvalidArgumentError: If words_per_page is not a positive integer
    """
    validate_words_per_page(words_per_page)

    if not content or not content.strip():
        return _empty_pages()

    pages: List[Page] = []
    current_content = ""
    current_word_count = 0

    for paragraph in split_paragraphs(content):
        paragraph_word_count = count_words(paragraph)

        # Whitespace-only accumulations do not count as content
        if current_word_count + paragraph_word_count > words_per_page and current_content.strip():
            pages.append(Page(
                page_number=len(pages) + 1,
                content=current_content.strip(),
                word_count=current_word_count
            ))
            current_content = paragraph
            current_word_count = paragraph_word_count
        else:
            if current_content:
                current_content += PAGE_JOINER + paragraph
            else:
                current_content = paragraph
            current_word_count += paragraph_word_count

    # Close the final page
    if current_content.strip():
        pages.append(Page(
            page_number=len(pages) + 1,
            content=current_content.strip(),
            word_count=current_word_count
        ))

    if not pages:
        return _empty_pages()

    logger.debug(
        f"Paginated {count_words(content)} words into {len(pages)} pages "
        f"({words_per_page} words per page)"
    )
    return pages


def reconstruct(pages: Sequence[Page]) -> str:
    """
    Rebuild full chapter text from its pages.

    Args:
        pages: Pages in any order

    Returns:
        Page contents in page-number order joined by a blank line
    """
    ordered = sorted(pages, key=lambda page: page.page_number)
    return PAGE_JOINER.join(page.content for page in ordered)


def document_stats(pages: Sequence[Page]) -> DocumentStats:
    """Totals of pages, words and characters across a chapter."""
    return DocumentStats(
        total_pages=len(pages),
        total_words=sum(page.word_count for page in pages),
        total_characters=sum(page.character_count for page in pages)
    )


def needs_repagination(
    page: Page,
    words_per_page: int = DEFAULT_WORDS_PER_PAGE,
    chars_per_page: int = CHARS_PER_PAGE
) -> bool:
    """True when an edited page has grown well past its word or character budget."""
    validate_words_per_page(words_per_page)
    return (
        page.word_count > words_per_page * REPAGINATION_TOLERANCE
        or page.character_count > chars_per_page * REPAGINATION_TOLERANCE
    )


def chapter_statistics(content: str, words_per_page: int = DEFAULT_WORDS_PER_PAGE) -> Dict[str, int]:
    """
    Compute reading statistics for a chapter.

    Args:
        content: Full chapter text
        words_per_page: Budget used for the page estimate

    Returns:
        Dictionary of word, character, paragraph and sentence counts,
        averages, reading time and estimated page count
    """
    validate_words_per_page(words_per_page)
    content = content or ""

    word_count = count_words(content)
    paragraphs = [p for p in split_paragraphs(content) if p.strip()]
    sentences = [s for s in SENTENCE_SEPARATOR.split(content) if s.strip()]

    return {
        "word_count": word_count,
        "character_count": count_characters(content),
        "paragraph_count": len(paragraphs),
        "sentence_count": len(sentences),
        "average_words_per_paragraph": round(word_count / len(paragraphs)) if paragraphs else 0,
        "average_words_per_sentence": round(word_count / len(sentences)) if sentences else 0,
        "estimated_reading_time_minutes": math.ceil(word_count / READING_WORDS_PER_MINUTE),
        "pages_at_default_words": math.ceil(word_count / words_per_page),
    }
