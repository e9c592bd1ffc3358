"""Editorial text classification and extraction."""

import logging

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

MIN_EDITORIAL_LENGTH = 60

BLACKLISTED_PREFIXES = (
    "photo:",
    "image:",
    "courtesy of",
    "by ",
    "credit:",
    "source:",
    "updated",
    "published",
)

BLACKLISTED_KEYWORDS = (
    "getty images",
    "photo by",
    "caption:",
    "staff writer",
    "associated press",
    "advertisement",
    "appeared first on",
)

# Removed before any text is read
NON_CONTENT_SELECTORS = (
    "script",
    "style",
    "nav",
    "footer",
    "header",
    "aside",
    ".ad",
    ".caption",
    "figcaption",
    ".credits",
    ".advertisement",
)

CONTAINER_SELECTORS = ("article", ".article-content", "main")

PARAGRAPH_SEPARATOR = "\n\n"


def is_editorial(text: str) -> bool:
    """
    Check if a text fragment reads as editorial prose.

    Args:
        text: Paragraph text

    Returns:
        False for short fragments, captions, bylines and boilerplate
    """
    clean_text = text.strip()
    if len(clean_text) < MIN_EDITORIAL_LENGTH:
        return False

    lowercase = clean_text.lower()
    if lowercase.startswith(BLACKLISTED_PREFIXES):
        return False
    if any(keyword in lowercase for keyword in BLACKLISTED_KEYWORDS):
        return False

    return True


def extract_editorial_content(
    markup: str,
    target_min: int = 250,
    target_max: int = 1100,
) -> tuple[str, int]:
    """
    Reduce an HTML document or fragment to a narration-ready excerpt.

    Paragraphs are appended in document order until the excerpt reaches
    target_min, and never started once it has reached target_max.

    Returns:
        Tuple of (text, paragraph_count). Empty text means nothing usable was found.
    """
    if not markup or not markup.strip():
        return "", 0

    soup = BeautifulSoup(markup, "html.parser")

    for selector in NON_CONTENT_SELECTORS:
        for element in soup.select(selector):
            element.decompose()

    container = None
    for selector in CONTAINER_SELECTORS:
        container = soup.select_one(selector)
        if container is not None:
            break
    if container is None:
        container = soup.body or soup

    paragraphs = []
    for p in container.find_all("p"):
        text = p.get_text().strip()
        if is_editorial(text):
            paragraphs.append(text)
        elif len(text) > 20:
            logger.debug("Discarding non-editorial paragraph: %r", text[:30])

    accumulated = ""
    count = 0
    for paragraph in paragraphs:
        if len(accumulated) >= target_max:
            break
        separator = PARAGRAPH_SEPARATOR if accumulated else ""
        accumulated += separator + paragraph
        count += 1
        if len(accumulated) >= target_min:
            break

    return accumulated.strip(), count
