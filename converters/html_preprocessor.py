"""Text rewrites applied to raw post HTML before Markdown conversion."""

import logging
import re

logger = logging.getLogger('wp_export_to_markdown.converters.html_preprocessor')

SEPARATOR_TAG = '<div></div>'
FRAME_PLACEHOLDER = '.'

DOUBLE_BREAK_PATTERN = re.compile(r'(\r?\n){2}')
CONTENT_IMAGE_SRC_PATTERN = re.compile(
    r'(<img[^>]*src=").*?([^/"]+\.(?:gif|jpg|jpeg|png))("[^>]*>)',
    re.IGNORECASE
)
FRAME_CLOSE_PATTERN = re.compile(r'(</iframe>)', re.IGNORECASE)
FRAME_PLACEHOLDER_PATTERN = re.compile(re.escape(FRAME_PLACEHOLDER) + r'(</iframe>)', re.IGNORECASE)


def insert_paragraph_separators(html: str) -> str:
    """Replace each blank line with an empty separator div."""
    return DOUBLE_BREAK_PATTERN.sub('\n' + SEPARATOR_TAG + '\n', html)


def localize_image_sources(html: str) -> str:
    """Point ``<img>`` sources at the post's local ``images/`` folder."""
    return CONTENT_IMAGE_SRC_PATTERN.sub(r'\1images/\2\3', html)


def mark_frames(html: str) -> str:
    """Give every ``<iframe>`` a body so it is never dropped as empty."""
    return FRAME_CLOSE_PATTERN.sub(FRAME_PLACEHOLDER + r'\1', html)


def unmark_frames(markdown: str) -> str:
    return FRAME_PLACEHOLDER_PATTERN.sub(r'\1', markdown)


def preprocess(html: str, localize_images: bool = True) -> str:
    """
    Run the pre-conversion rewrites over a post body.

    Args:
        html: raw post body
        localize_images: rewrite image sources to ``images/<filename>``

    Returns:
        HTML ready for the Markdown converter
    """
    html = insert_paragraph_separators(html.strip())
    if localize_images:
        html = localize_image_sources(html)
    return mark_frames(html)


__all__ = [
    'SEPARATOR_TAG',
    'insert_paragraph_separators',
    'localize_image_sources',
    'mark_frames',
    'unmark_frames',
    'preprocess'
]
