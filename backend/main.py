"""Main entry point for the Chapter Pagination API."""
import logging
from typing import List
from fastapi import FastAPI, HTTPException, Path, Query
from fastapi.middleware.cors import CORSMiddleware

from config import (
    PORT,
    LOG_LEVEL,
    LOG_FORMAT,
    CORS_ORIGINS,
    DEFAULT_WORDS_PER_PAGE,
    MIN_WORDS_PER_PAGE,
    MAX_WORDS_PER_PAGE,
)
from logger import setup_logging
from models.page import Page, PaginationState
from models.api import (
    PageResponse,
    ChapterSummary,
    PaginationInfo,
    ChapterPagesResponse,
    PageWindowResponse,
    PageUpdateRequest,
    ChapterStatistics,
)
from services.paginator import paginate, chapter_statistics, needs_repagination
from services.page_window import PageWindowManager
from services.chapter_store import ChapterStore, ChapterStoreError, ChapterNotFoundError

# Initialize logging
if LOG_FORMAT == "json":
    setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Chapter Pagination API",
    description="Serves book chapters as word-bounded pages for the editor",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
chapter_store: ChapterStore = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global chapter_store

    logger.info("Initializing Chapter Pagination services...")

    try:
        chapter_store = ChapterStore()
        logger.info("Initialized ChapterStore")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Release services on shutdown."""
    global chapter_store

    if chapter_store is not None:
        chapter_store.close()
        chapter_store = None


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Chapter Pagination API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "chapter-pagination",
        "version": "1.0.0"
    }


@app.get("/chapters/{chapter_id}/pages", response_model=ChapterPagesResponse)
async def chapter_pages_endpoint(
    chapter_id: int = Path(..., ge=1),
    words_per_page: int = Query(DEFAULT_WORDS_PER_PAGE, ge=MIN_WORDS_PER_PAGE, le=MAX_WORDS_PER_PAGE)
) -> ChapterPagesResponse:
    """
    Return every page of a chapter.

    Args:
        chapter_id: ID of the chapter
        words_per_page: Word budget per page (500 to 5000)

    Returns:
        ChapterPagesResponse with chapter metadata and all pages

    Raises:
        HTTPException: 404 for unknown chapters, 503 for storage failures
    """
    try:
        chapter = chapter_store.fetch_chapter(chapter_id)
        pages = paginate(chapter.content, words_per_page)

        logger.info(f"Paginated chapter {chapter_id} into {len(pages)} pages")
        return ChapterPagesResponse(
            chapter=ChapterSummary(
                id=chapter.id,
                title=chapter.title,
                chapter_number=chapter.chapter_number,
                total_words=chapter.word_count,
                total_characters=chapter.character_count
            ),
            pagination=PaginationInfo(
                total_pages=len(pages),
                words_per_page=words_per_page,
                pages=[_page_response(page) for page in pages]
            )
        )
    except Exception as e:
        raise _to_http_exception(e)


@app.get("/chapters/{chapter_id}/pages/{page_number}", response_model=PageWindowResponse)
async def page_window_endpoint(
    chapter_id: int = Path(..., ge=1),
    page_number: int = Path(...),
    words_per_page: int = Query(DEFAULT_WORDS_PER_PAGE, ge=MIN_WORDS_PER_PAGE, le=MAX_WORDS_PER_PAGE)
) -> PageWindowResponse:
    """
    Return the resident window around a page.

    Out-of-range page numbers are clamped to the chapter's first or last page.

    Args:
        chapter_id: ID of the chapter
        page_number: Page to open
        words_per_page: Word budget per page (500 to 5000)

    Returns:
        PageWindowResponse containing only the loaded pages

    Raises:
        HTTPException: 404 for unknown chapters, 503 for storage failures
    """
    try:
        content = chapter_store.fetch_chapter_content(chapter_id)
        manager = PageWindowManager(words_per_page)
        state = manager.create_state(content, page_number)
        return _window_response(chapter_id, state)
    except Exception as e:
        raise _to_http_exception(e)


@app.put("/chapters/{chapter_id}/pages/{page_number}", response_model=PageWindowResponse)
async def update_page_endpoint(
    request: PageUpdateRequest,
    chapter_id: int = Path(..., ge=1),
    page_number: int = Path(...)
) -> PageWindowResponse:
    """
    Replace the content of one page and persist the rebuilt chapter.

    The saved text is paginated again before responding, so the returned
    window matches what a later fetch of the chapter produces.

    Args:
        request: New page content and the word budget in use
        chapter_id: ID of the chapter
        page_number: Page being edited (clamped)

    Returns:
        PageWindowResponse around the edited page; ``repaginated`` is set when
        the edit moved any page boundary

    Raises:
        HTTPException: 404 for unknown chapters, 503 for storage failures
    """
    try:
        content = chapter_store.fetch_chapter_content(chapter_id)
        manager = PageWindowManager(request.words_per_page)
        state = manager.create_state(content, page_number)
        edited = manager.update_page(state, state.current_page, request.content)

        updated_content = manager.reconstruct(edited.pages)
        chapter_store.persist_chapter_content(chapter_id, updated_content)

        if needs_repagination(manager.current_page_info(edited), request.words_per_page):
            logger.info(f"Page {edited.current_page} of chapter {chapter_id} is over budget after edit")

        rebuilt = manager.create_state(updated_content, edited.current_page)
        repaginated = rebuilt.pages != edited.pages

        return _window_response(chapter_id, rebuilt, repaginated=repaginated)
    except Exception as e:
        raise _to_http_exception(e)


@app.get("/chapters/{chapter_id}/statistics", response_model=ChapterStatistics)
async def chapter_statistics_endpoint(chapter_id: int = Path(..., ge=1)) -> ChapterStatistics:
    """
    Reading statistics for a chapter.

    Raises:
        HTTPException: 404 for unknown chapters, 503 for storage failures
    """
    try:
        chapter = chapter_store.fetch_chapter(chapter_id)
        stats = chapter_statistics(chapter.content)

        return ChapterStatistics(
            id=chapter.id,
            title=chapter.title,
            chapter_number=chapter.chapter_number,
            created=chapter.created_at.isoformat() if chapter.created_at else None,
            last_modified=chapter.updated_at.isoformat() if chapter.updated_at else None,
            **stats
        )
    except Exception as e:
        raise _to_http_exception(e)


def _page_response(page: Page) -> PageResponse:
    return PageResponse(
        page_number=page.page_number,
        content=page.content,
        word_count=page.word_count,
        character_count=page.character_count
    )


def _window_response(chapter_id: int, state: PaginationState, repaginated: bool = False) -> PageWindowResponse:
    loaded: List[Page] = [
        page for page in state.pages
        if PageWindowManager.is_page_loaded(state, page.page_number)
    ]
    return PageWindowResponse(
        chapter_id=chapter_id,
        current_page=state.current_page,
        total_pages=state.total_pages,
        words_per_page=state.words_per_page,
        loaded_pages=sorted(state.loaded_pages),
        can_go_next=state.can_go_next,
        can_go_previous=state.can_go_previous,
        pages=[_page_response(page) for page in loaded],
        repaginated=repaginated
    )


def _to_http_exception(error: Exception) -> HTTPException:
    """
    Map service errors to HTTP errors.

    Args:
        error: Exception raised while handling a request

    Returns:
        HTTPException with the matching status code
    """
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, ChapterNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ChapterStoreError):
        logger.error(f"Chapter store error: {error.error.message}")
        return HTTPException(
            status_code=503,
            detail={
                "error": {
                    "code": error.error.code,
                    "message": error.error.message,
                    "details": error.error.details
                }
            }
        )

    logger.error(f"Unexpected error: {error}", exc_info=error)
    return HTTPException(
        status_code=500,
        detail=f"Internal server error: {str(error)}"
    )


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Chapter Pagination API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
