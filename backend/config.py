"""Configuration management for the Chapter Pagination service."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Storage Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
CHAPTERS_TABLE = os.getenv("CHAPTERS_TABLE", "chapters")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173"
).split(",")

# Pagination Configuration
DEFAULT_WORDS_PER_PAGE = 2000
MIN_WORDS_PER_PAGE = 500
MAX_WORDS_PER_PAGE = 5000
MAX_PAGES_IN_MEMORY = 3
CHARS_PER_PAGE = 8000
REPAGINATION_TOLERANCE = 1.2  # Repaginate once a page is 20% over budget

# Statistics Configuration
READING_WORDS_PER_MINUTE = 200

# Logging Configuration
if LOG_FORMAT != "json":
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
