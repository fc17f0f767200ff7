"""Chapter data models."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Chapter:
    """A chapter record as held by the chapter store."""
    id: int
    book_id: int
    title: str
    chapter_number: int
    content: str = ""
    word_count: int = 0
    character_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
