"""YAML loader for the ordered category list.

The file is a mapping with a single ``categories`` key::

    categories:
      - name: apple
        listing_url: https://www.gsmarena.com/apple-phones-48.php
        kind: phones

Order in the file is crawl order.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from specharvest.models.catalog import Category, ListingUrl
from specharvest.utils.errors import ConfigurationError


def load_categories(
    path: str | Path = "config/categories.yaml",
    only: list[str] | None = None,
) -> list[Category]:
    """Load and validate the category list.

    Args:
        path: Path to the YAML file.
        only: Optional category names to keep (case-insensitive); the
            file order is preserved.

    Returns:
        The categories to crawl, in order.

    Raises:
        ConfigurationError: If the file is missing or malformed, a listing
            URL does not parse, a name is duplicated, or a name in *only*
            is unknown.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(message=f"Category file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(message=f"Could not read {config_path}: {exc}") from exc

    entries = raw.get("categories") if isinstance(raw, dict) else None
    if not isinstance(entries, list):
        raise ConfigurationError(message=f"{config_path} must contain a 'categories' list")

    categories: list[Category] = []
    seen: set[str] = set()
    for index, entry in enumerate(entries):
        try:
            category = Category.model_validate(entry)
        except ValidationError as exc:
            raise ConfigurationError(
                message=f"Invalid category #{index + 1} in {config_path}: {exc}"
            ) from exc
        ListingUrl.parse(category.listing_url)
        key = category.name.lower()
        if key in seen:
            raise ConfigurationError(message=f"Duplicate category name: {category.name!r}")
        seen.add(key)
        categories.append(category)

    if only:
        wanted = {name.lower() for name in only}
        unknown = wanted - seen
        if unknown:
            raise ConfigurationError(
                message=f"Unknown category name(s): {', '.join(sorted(unknown))}"
            )
        categories = [c for c in categories if c.name.lower() in wanted]

    return categories
