"""Localization lookup: key + locale → formatted string.

Catalogs are nested JSON files in ``tagbot/locales/<locale>.json``.
Keys are dotted paths (``command.issue-pr.action.merge``). A ``count``
parameter selects the ``<key>_one`` / ``<key>_other`` plural form when
one exists.

Lookup order: requested locale, default locale, then the key itself.
"""

import json
import logging
import os
from functools import lru_cache
from typing import Any, Optional

logger = logging.getLogger("tagbot.i18n")

LOCALES_DIR = os.path.join(os.path.dirname(__file__), "locales")
DEFAULT_LOCALE = "en"


@lru_cache(maxsize=None)
def load_catalog(locale: str) -> dict:
    """Load and flatten a locale catalog. Missing catalogs are empty."""
    path = os.path.join(LOCALES_DIR, f"{locale}.json")
    if not os.path.isfile(path):
        logger.debug(f"No catalog for locale '{locale}'")
        return {}
    with open(path, encoding="utf-8") as f:
        return _flatten(json.load(f))


def _flatten(tree: dict, prefix: str = "") -> dict[str, str]:
    flat = {}
    for key, value in tree.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(_flatten(value, path))
        else:
            flat[path] = value
    return flat


def available_locales() -> list[str]:
    """List locales that ship a catalog."""
    return sorted(
        name[:-5] for name in os.listdir(LOCALES_DIR)
        if name.endswith(".json")
    )


def _lookup(key: str, locale: str, count: Optional[int]) -> Optional[str]:
    catalog = load_catalog(locale)
    if count is not None:
        plural = f"{key}_one" if count == 1 else f"{key}_other"
        if plural in catalog:
            return catalog[plural]
    return catalog.get(key)


def t(key: str, locale: Optional[str] = None, **params: Any) -> str:
    """Translate a key into the given locale.

    Args:
        key: Dotted catalog key
        locale: Locale code (e.g. "en"); falls back to DEFAULT_LOCALE
        **params: Interpolation values for ``{name}`` placeholders

    Returns:
        The formatted string, or the key itself if no catalog has it.
    """
    count = params.get("count")
    template = None
    for lng in (locale, DEFAULT_LOCALE):
        if not lng:
            continue
        template = _lookup(key, lng, count)
        if template is not None:
            break

    if template is None:
        logger.warning(f"Missing translation: {key} ({locale})")
        return key

    try:
        return template.format(**params)
    except (KeyError, IndexError) as e:
        logger.warning(f"Bad interpolation for {key}: missing {e}")
        return template
