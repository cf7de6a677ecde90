"""Data models and configuration.

Pydantic models and configuration:
- models: Catalog entry, chapter and selection models
- config: Centralized configuration (Pydantic Settings)
"""

from models.models import CatalogEntry, ChapterInfo, ChapterPage, ChapterSelection
from models.config import settings, get_data_path, get_save_dir

__all__ = [
    "CatalogEntry",
    "ChapterInfo",
    "ChapterPage",
    "ChapterSelection",
    "settings",
    "get_data_path",
    "get_save_dir",
]
