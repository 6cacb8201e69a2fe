"""Site-specific page extractors."""

from specharvest.providers.extractor.gsmarena_extractor import GSMArenaExtractor

__all__ = ["GSMArenaExtractor"]
