"""Wiki markup cleanup for divination card text scraped from the game wiki."""

import re
from typing import Optional

# [[File:...]] image references, with or without parameters
FILE_REF_PATTERN = re.compile(r"\[\[File:[^\]]*\]\]")

# [[Link|Display]] - keep only the display text
PIPED_LINK_PATTERN = re.compile(r"\[\[([^\]|]+)\|([^\]]+)\]\]")

# [[Link]] - keep the link text
SIMPLE_LINK_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")

WHITESPACE_PATTERN = re.compile(r"\s+")


def clean_wiki_markup(text: Optional[str]) -> str:
    """Strip wiki link and file markup from card reward/flavour HTML.

    Args:
        text: Raw HTML that may contain [[...]] wiki markup (None allowed)

    Returns:
        Cleaned text with whitespace collapsed and trimmed ("" for None)
    """
    if not text:
        return ""

    cleaned = FILE_REF_PATTERN.sub("", text)
    cleaned = PIPED_LINK_PATTERN.sub(r"\2", cleaned)
    cleaned = SIMPLE_LINK_PATTERN.sub(r"\1", cleaned)
    cleaned = WHITESPACE_PATTERN.sub(" ", cleaned)
    return cleaned.strip()
