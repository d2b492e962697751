"""Markdown converter for WordPress post bodies, preserving embedded widgets."""

import logging
import re
from typing import Any, Dict, Optional

from bs4 import Comment, NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter
from markdownify import MarkdownConverter as MarkdownifyConverter, should_remove_whitespace_outside

from models import Post
from .html_preprocessor import preprocess, unmark_frames

LIST_MARKER_SPACING_PATTERN = re.compile(r'^(\s*)(-|\d+\.) +', re.MULTILINE)

# Tags whose Markdown starts on a fresh paragraph
BLOCK_OUTPUT_TAGS = {'hr', 'iframe', 'script'}


class SourceOrderFormatter(HTMLFormatter):
    """Renders attributes in document order instead of sorting them."""

    def attributes(self, tag):
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())


SOURCE_ORDER = SourceOrderFormatter(entity_substitution=EntitySubstitution.substitute_xml)


def _is_content_node(node) -> bool:
    """Tags and non-blank text count as content; comments and whitespace do not."""
    if isinstance(node, Tag):
        return True
    if isinstance(node, Comment):
        return False
    if isinstance(node, NavigableString):
        return node.strip() != ''
    return False


def previous_content_sibling(el):
    node = el.previous_sibling
    while node is not None and not _is_content_node(node):
        node = node.previous_sibling
    return node


def next_content_sibling(el):
    node = el.next_sibling
    while node is not None and not _is_content_node(node):
        node = node.next_sibling
    return node


def is_separator(node) -> bool:
    """Empty ``<div>`` standing in for a blank line of the source."""
    return isinstance(node, Tag) and node.name == 'div' and not node.contents


def starts_block(node) -> bool:
    return isinstance(node, Tag) and (
        should_remove_whitespace_outside(node) or node.name in BLOCK_OUTPUT_TAGS
    )


def render_html(el) -> str:
    return el.decode(formatter=SOURCE_ORDER)


class PostMarkdownConverter(MarkdownifyConverter):
    """
    Converts WordPress post HTML to Markdown.

    On top of markdownify's defaults this converter:
    - keeps embedded tweets, CodePen demos, scripts and iframes as raw HTML
    - turns empty ``<div>`` separators into paragraph breaks
    - runs the pre/post text rewrites around the conversion
    """

    def __init__(self, logger: logging.Logger = None, config: Dict[str, Any] = None, **kwargs):
        """Initialize markdown converter with logger and configuration."""
        markdownify_options = {
            'heading_style': 'ATX',  # Use # for headings
            'bullets': '-',  # Use - for unordered lists
        }
        markdownify_options.update(kwargs)

        super().__init__(**markdownify_options)

        self.logger = logger or logging.getLogger('wp_export_to_markdown.converters.markdown_converter')
        self.config = config or {}
        self.localize_images = self.config.get('addcontentimages', True)

    def convert_post(self, post: Post) -> str:
        """
        Convert a post's raw body and store the result on ``post.content``.

        Args:
            post: Post whose ``meta.body_html`` holds the exported HTML

        Returns:
            The converted Markdown
        """
        self.logger.debug(f"Converting post {post.meta.id} to markdown")
        post.content = self.convert_html(post.meta.body_html)
        return post.content

    def convert_html(self, html: str) -> str:
        """Run the full rewrite and conversion pipeline over a body of HTML."""
        markdown = self.convert(preprocess(html, localize_images=self.localize_images))
        markdown = LIST_MARKER_SPACING_PATTERN.sub(r'\1\2 ', markdown)
        return unmark_frames(markdown)

    def _embed_padding(self, el) -> str:
        # Embed scripts that follow a widget stay directly under it
        following = next_content_sibling(el)
        if isinstance(following, Tag) and following.name == 'script':
            return '\n'
        return '\n\n'

    def _is_codepen(self, el) -> bool:
        return el.has_attr('data-slug-hash') and el.get('class') == ['codepen']

    def convert_blockquote(self, el, text, parent_tags=None, **kwargs):
        """Keep embedded tweets as HTML; quote everything else."""
        if el.get('class') == ['twitter-tweet']:
            return '\n\n' + render_html(el) + self._embed_padding(el)
        return super().convert_blockquote(el, text, parent_tags=parent_tags)

    def convert_p(self, el, text, parent_tags=None, **kwargs):
        if self._is_codepen(el):
            return '\n\n' + render_html(el) + self._embed_padding(el)
        return super().convert_p(el, text, parent_tags=parent_tags)

    def convert_div(self, el, text, parent_tags=None, **kwargs):
        """Handle CodePen embeds and empty paragraph separators."""
        if self._is_codepen(el):
            return '\n\n' + render_html(el) + self._embed_padding(el)

        if is_separator(el):
            if parent_tags and '_inline' in parent_tags:
                return ' '
            # A following block brings its own paragraph break
            if 'pre' not in (parent_tags or ()) and starts_block(next_content_sibling(el)):
                return ''
            return '\n\n'

        return super().convert_div(el, text, parent_tags=parent_tags)

    def convert_script(self, el, text, parent_tags=None, **kwargs):
        """Keep scripts (tweet, CodePen and gist loaders) verbatim."""
        before = '\n\n'
        previous = previous_content_sibling(el)
        if isinstance(previous, Tag) and not is_separator(previous):
            before = '\n'
        html = render_html(el).replace('async=""', 'async')
        return before + html + '\n\n'

    def convert_iframe(self, el, text, parent_tags=None, **kwargs):
        html = render_html(el).replace('allowfullscreen=""', 'allowfullscreen')
        return '\n\n' + html + '\n\n'


def convert_post(post: Post, config: Optional[Dict[str, Any]] = None) -> str:
    """Convenience wrapper converting a single post with a fresh converter."""
    return PostMarkdownConverter(config=config).convert_post(post)


__all__ = [
    'PostMarkdownConverter',
    'convert_post',
    'previous_content_sibling',
    'next_content_sibling'
]
