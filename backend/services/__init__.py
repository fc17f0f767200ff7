"""Services for the Chapter Pagination service."""
from .paginator import paginate, reconstruct, count_words, count_characters, InvalidArgumentError
from .page_window import PageWindowManager
from .chapter_store import ChapterStore, ChapterStoreError, ChapterNotFoundError, StoreError

__all__ = ['paginate', 'reconstruct', 'count_words', 'count_characters', 'InvalidArgumentError', 'PageWindowManager', 'ChapterStore', 'ChapterStoreError', 'ChapterNotFoundError', 'StoreError']
