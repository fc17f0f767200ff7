"""Chapter store backed by a Supabase PostgreSQL table."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from supabase import create_client, Client

from models.chapter import Chapter
from services.paginator import count_words, count_characters
from config import SUPABASE_URL, SUPABASE_KEY, CHAPTERS_TABLE

logger = logging.getLogger(__name__)


@dataclass
class StoreError:
    """Structured error from chapter store operations."""
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class ChapterStoreError(Exception):
    """Storage failure with structured error information."""

    def __init__(self, error: StoreError):
        self.error = error
        super().__init__(error.message)


class ChapterNotFoundError(LookupError):
    """Raised when a chapter id has no matching record."""

    def __init__(self, chapter_id: int):
        self.chapter_id = chapter_id
        super().__init__(f"Chapter with ID {chapter_id} not found")


class ChapterStore:
    """Read and write chapter content by id."""

    def __init__(
        self,
        supabase_url: Optional[str] = SUPABASE_URL,
        supabase_key: Optional[str] = SUPABASE_KEY,
        table_name: str = CHAPTERS_TABLE
    ):
        """
        Initialize the chapter store with a Supabase client.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Name of the table holding chapters

        Raises:
            ValueError: If Supabase credentials are missing
        """
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

        self.table_name = table_name
        self.client: Optional[Client] = create_client(supabase_url, supabase_key)
        logger.info(f"ChapterStore initialized with table: {table_name}")

    def fetch_chapter(self, chapter_id: int) -> Chapter:
        """
        Fetch a chapter record.

        Args:
            chapter_id: ID of the chapter

        Returns:
            Chapter with its content and counts

        Raises:
            ChapterNotFoundError: If no chapter has this id
            ChapterStoreError: If the query fails
        """
        client = self._require_client()

        try:
            result = client.table(self.table_name).select("*").eq("id", chapter_id).execute()
        except Exception as e:
            logger.error(f"Error fetching chapter {chapter_id}: {e}")
            raise ChapterStoreError(StoreError(
                code="FETCH_FAILED",
                message=f"Failed to fetch chapter {chapter_id}",
                details={"chapter_id": chapter_id, "reason": str(e)}
            )) from e

        if not result.data:
            logger.warning(f"Chapter {chapter_id} not found")
            raise ChapterNotFoundError(chapter_id)

        chapter = self._to_chapter(result.data[0])
        logger.info(f"Fetched chapter {chapter_id}: {chapter.word_count} words")
        return chapter

    def fetch_chapter_content(self, chapter_id: int) -> str:
        """Full text of a chapter."""
        return self.fetch_chapter(chapter_id).content

    def persist_chapter_content(self, chapter_id: int, content: str) -> Chapter:
        """
        Overwrite a chapter's content and its derived counts.

        Args:
            chapter_id: ID of the chapter
            content: New full chapter text

        Returns:
            The updated Chapter

        Raises:
            ChapterNotFoundError: If no chapter has this id
            ChapterStoreError: If the update fails
        """
        client = self._require_client()

        record = {
            "content": content,
            "word_count": count_words(content),
            "character_count": count_characters(content),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }

        try:
            result = client.table(self.table_name).update(record).eq("id", chapter_id).execute()
        except Exception as e:
            logger.error(f"Error persisting chapter {chapter_id}: {e}")
            raise ChapterStoreError(StoreError(
                code="PERSIST_FAILED",
                message=f"Failed to persist chapter {chapter_id}",
                details={"chapter_id": chapter_id, "reason": str(e)}
            )) from e

        if not result.data:
            logger.warning(f"Chapter {chapter_id} not found, nothing persisted")
            raise ChapterNotFoundError(chapter_id)

        logger.info(f"Persisted chapter {chapter_id}: {record['word_count']} words")
        return self._to_chapter(result.data[0])

    def close(self) -> None:
        """Release the Supabase client; the store cannot be used afterwards."""
        self.client = None
        logger.info("ChapterStore closed")

    def _require_client(self) -> Client:
        if self.client is None:
            raise ChapterStoreError(StoreError(
                code="STORE_CLOSED",
                message="Chapter store has been closed"
            ))
        return self.client

    def _to_chapter(self, row: Dict[str, Any]) -> Chapter:
        content = row.get("content") or ""
        return Chapter(
            id=row["id"],
            book_id=row["book_id"],
            title=row["title"],
            chapter_number=row["chapter_number"],
            content=content,
            word_count=count_words(content),
            character_count=count_characters(content),
            created_at=self._parse_timestamp(row.get("created_at")),
            updated_at=self._parse_timestamp(row.get("updated_at"))
        )

    def _parse_timestamp(self, timestamp_str: Optional[str]) -> Optional[datetime]:
        """
        Parse timestamp string from Supabase, handling various formats.

        Supabase can return timestamps with varying microsecond precision,
        which Python's fromisoformat() can't always handle. This method
        normalizes the timestamp format.

        Args:
            timestamp_str: Timestamp string from Supabase

        Returns:
            datetime object, or None if no timestamp was stored
        """
        if not timestamp_str:
            return None

        # Replace 'Z' with '+00:00' for timezone
        timestamp_str = timestamp_str.replace("Z", "+00:00")

        # Truncate or pad microseconds to 6 digits
        if "." in timestamp_str:
            base, fraction = timestamp_str.split(".", 1)
            tz = ""
            for sign in ("+", "-"):
                if sign in fraction:
                    fraction, tz = fraction.split(sign, 1)
                    tz = sign + tz
                    break
            timestamp_str = f"{base}.{fraction[:6].ljust(6, '0')}{tz}"

        return datetime.fromisoformat(timestamp_str)
