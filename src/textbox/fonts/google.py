"""
Fallback font fetching from Google Fonts.

The standard PDF fonts only encode WinAnsi, so text in other scripts needs a
TrueType fallback font (Noto Sans JP, Noto Naskh Arabic, ...). This module
looks up the TrueType file of a family/weight pair and keeps a local copy, so
box files can name fallback fonts without shipping the font files.
"""

import logging
import re
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)

FALLBACK_FONT_CACHE = Path.home() / ".cache" / "pdf-textbox" / "fonts"

# The v1 CSS API still serves TrueType URLs, which ReportLab can embed
CSS_API_URL = "https://fonts.googleapis.com/css"
CSS_TIMEOUT = 10
FONT_TIMEOUT = 30

_SRC_URL_PATTERN = re.compile(r"src:\s*url\((https://[^)]+\.ttf)\)")
_ANY_TTF_PATTERN = re.compile(r"(https://[^\s'\"]+\.ttf)")


def cached_font_path(family: str, weight: int, cache_dir: Path | None = None) -> Path:
    """Where the TTF for a family/weight pair is kept, e.g. NotoSansJP-400.ttf."""
    return (cache_dir or FALLBACK_FONT_CACHE) / f"{family.replace(' ', '')}-{weight}.ttf"


def fetch_fallback_font(family: str, weight: int = 400, cache_dir: Path | None = None) -> Optional[Path]:
    """
    Return a local TTF for a fallback font family, downloading it once.

    Args:
        family: Google Fonts family name (e.g., "Noto Sans JP").
        weight: Font weight (e.g., 400 for regular, 700 for bold).
        cache_dir: Directory holding downloaded fonts. Defaults to FALLBACK_FONT_CACHE.

    Returns:
        Path to the TTF file, or None if it could not be fetched.
    """
    path = cached_font_path(family, weight, cache_dir)
    if path.exists():
        logger.debug(f"Fallback font {family} {weight} already cached at {path}")
        return path

    try:
        font_url = truetype_url(family, weight)
        if font_url is None:
            logger.error(f"Google Fonts has no TrueType file for {family} (weight {weight})")
            return None
        logger.info(f"Downloading fallback font {family} (weight {weight})")
        response = requests.get(font_url, timeout=FONT_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Failed to fetch fallback font {family} (weight {weight}): {e}")
        return None

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(response.content)
    logger.info(f"Cached fallback font {path.name}")
    return path


def truetype_url(family: str, weight: int) -> Optional[str]:
    """
    Ask the Google Fonts CSS API where the TTF of a family/weight pair lives.

    Raises:
        requests.RequestException: If the CSS request fails.
    """
    params = {"family": f"{family}:{weight}", "display": "swap"}
    response = requests.get(CSS_API_URL, params=params, timeout=CSS_TIMEOUT)
    response.raise_for_status()
    return _truetype_url_from_css(response.text)


def _truetype_url_from_css(css: str) -> Optional[str]:
    """First .ttf URL in an @font-face rule, preferring its src descriptor."""
    match = _SRC_URL_PATTERN.search(css) or _ANY_TTF_PATTERN.search(css)
    return match.group(1) if match else None
