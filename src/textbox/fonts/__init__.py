"""Font registration, family lookup and glyph queries."""

import logging
from pathlib import Path
from typing import Optional

from reportlab.lib.fonts import tt2ps
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from textbox.errors import BadFontFamily
from textbox.fonts.google import fetch_fallback_font

logger = logging.getLogger(__name__)

# Filename suffixes recognised as faces of one family, longest first
_FACE_SUFFIXES = (
    ("-BoldItalic", True, True),
    ("-BoldOblique", True, True),
    ("-Bold", True, False),
    ("-Italic", False, True),
    ("-Oblique", False, True),
    ("-Regular", False, False),
)


def _normalize_font_name(name: str) -> str:
    """
    Normalize a font name to TitleCase convention.

    Examples:
        "noto-sans-regular" → "Noto-Sans-Regular"
        "dejavusans-bold" → "Dejavusans-Bold"
    """
    parts = name.split('-')
    return '-'.join(part.title() for part in parts)


def register_fonts(fonts_dir: Path) -> list[str]:
    """
    Register every TTF file in a directory with ReportLab.

    Each font is registered with a TitleCase name based on its filename. Files
    named <Family>-Regular/-Bold/-Italic/-BoldItalic are also registered as a
    font family so styled runs can find their faces.

    Args:
        fonts_dir: Directory to scan.

    Returns:
        Names of the fonts that were registered.
    """
    ttf_files = sorted(fonts_dir.glob("*.ttf"))
    if not ttf_files:
        logger.warning(f"No TTF font files found in {fonts_dir}. Using built-in PDF fonts.")
        return []

    registered: list[str] = []
    families: dict[str, dict[tuple[bool, bool], str]] = {}
    for font_path in ttf_files:
        font_name = _normalize_font_name(font_path.stem)
        try:
            pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
        except Exception as e:
            logger.warning(f"Failed to register font {font_name} from {font_path.name}: {e}. Skipping.")
            continue
        registered.append(font_name)
        logger.info(f"Registered font: {font_name} from {font_path.name}")

        for suffix, bold, italic in _FACE_SUFFIXES:
            if font_name.lower().endswith(suffix.lower()):
                family = font_name[: -len(suffix)]
                families.setdefault(family, {})[(bold, italic)] = font_name
                break

    for family, faces in families.items():
        normal = faces.get((False, False))
        if normal is None:
            continue
        register_font_family(
            family,
            normal=normal,
            bold=faces.get((True, False)),
            italic=faces.get((False, True)),
            bold_italic=faces.get((True, True)),
        )

    logger.info(f"Successfully registered {len(registered)} font(s) from {fonts_dir}.")
    return registered


def register_font_family(
    family: str,
    normal: str,
    bold: str | None = None,
    italic: str | None = None,
    bold_italic: str | None = None,
) -> None:
    """
    Register the faces of a font family.

    Missing faces fall back to the normal face, so bold text in a family
    without a bold face prints in the normal face.

    Args:
        family: Family name used by runs (e.g., "Noto-Sans").
        normal: Registered font name of the regular face.
        bold: Registered font name of the bold face.
        italic: Registered font name of the italic face.
        bold_italic: Registered font name of the bold italic face.
    """
    pdfmetrics.registerFontFamily(
        family,
        normal=normal,
        bold=bold or normal,
        italic=italic or normal,
        boldItalic=bold_italic or bold or italic or normal,
    )
    logger.debug(f"Registered font family {family}: {normal}, {bold}, {italic}, {bold_italic}")


def resolve_face(font_name: str, styles: frozenset[str] | set[str] | tuple[str, ...] = ()) -> str:
    """
    Resolve a font (face or family name) plus bold/italic styles to a face.

    Args:
        font_name: A registered font name or a family name.
        styles: Style flags; only "bold" and "italic" affect face selection.

    Returns:
        Registered font name of the face to draw with.

    Raises:
        BadFontFamily: If the font is unknown, or styles are requested and no
            family is registered for it.
    """
    bold = "bold" in styles
    italic = "italic" in styles
    if not (bold or italic):
        try:
            pdfmetrics.getFont(font_name)
            return font_name
        except Exception:
            pass

    # tt2ps accepts a family or a face and merges the face's own bold/italic
    wanted = tuple(s for s in ("bold", "italic") if s in styles)
    try:
        face = tt2ps(font_name, int(bold), int(italic))
    except ValueError as e:
        raise BadFontFamily(font_name, wanted) from e

    try:
        pdfmetrics.getFont(face)
    except Exception as e:
        raise BadFontFamily(font_name, wanted) from e
    return face


def resolve_font(font_spec: str, fallback: str = "Helvetica") -> str:
    """
    Resolve a font specification to a registered font name.

    Resolution priority:
    1. Already registered (TTF fonts or PDF built-ins)
    2. Google Fonts (auto-download and cache) when a weight is given
    3. The fallback font

    Args:
        font_spec: "name" or "family:weight", case-insensitive.
        fallback: Fallback font name.

    Returns:
        Registered font name.
    """
    if ":" in font_spec:
        family, weight_str = (part.strip() for part in font_spec.split(":", 1))
        try:
            weight: Optional[int] = int(weight_str)
            font_name = f"{_normalize_font_name(family.replace(' ', ''))}-{weight}"
        except ValueError:
            logger.warning(f"Invalid font weight '{weight_str}' in '{font_spec}', using as-is")
            font_name = _normalize_font_name(font_spec.replace(":", "-"))
            weight = None
    else:
        family = font_spec.strip()
        font_name = family
        weight = None

    try:
        pdfmetrics.getFont(font_name)
        logger.debug(f"Font '{font_name}' found in registry")
        return font_name
    except Exception:
        pass

    if weight is not None:
        logger.info(f"Font '{font_name}' not found locally, trying Google Fonts...")
        result = register_google_font(family, weight)
        if result:
            return result
        logger.warning(f"Could not download '{font_name}' from Google Fonts")

    logger.info(f"Using fallback font '{fallback}' for '{font_spec}'")
    return fallback


def register_google_font(family: str, weight: int = 400) -> Optional[str]:
    """
    Download and register a Google Font with ReportLab.

    Args:
        family: Font family name (e.g., "Noto Sans JP") - case-insensitive.
        weight: Font weight (e.g., 400 for regular, 700 for bold).

    Returns:
        Registered font name (e.g., "Notosansjp-400"), or None if registration failed.
    """
    font_name = f"{_normalize_font_name(family.replace(' ', ''))}-{weight}"

    try:
        pdfmetrics.getFont(font_name)
        logger.info(f"Google Font already registered: {font_name}")
        return font_name
    except Exception:
        pass

    font_path = fetch_fallback_font(family, weight)
    if not font_path:
        logger.error(f"Failed to download Google Font: {family} (weight {weight})")
        return None

    try:
        pdfmetrics.registerFont(TTFont(font_name, str(font_path)))
        logger.info(f"Registered Google Font: {font_name}")
        return font_name
    except Exception as e:
        logger.error(f"Failed to register Google Font {font_name}: {e}")
        return None
