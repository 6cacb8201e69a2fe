"""Configuration module: exports Settings and the category loader."""

from specharvest.config.loader import load_categories
from specharvest.config.settings import Settings

__all__ = ["Settings", "load_categories"]
