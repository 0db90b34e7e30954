"""
markup.py - Reduce question HTML to the text a student actually sees.
"""

from bs4 import BeautifulSoup


def visible_text(blob: str) -> str:
    """
    Strip markup from an HTML fragment and return its visible text.

    Case is preserved, entities are decoded and surrounding whitespace is
    trimmed. Empty or None input gives "".
    """
    if not blob:
        return ""
    soup = BeautifulSoup(blob, "html.parser")
    return soup.get_text().strip()


def normalize_text(blob: str) -> str:
    """Visible text, lower-cased, for content comparison."""
    return visible_text(blob).lower()
