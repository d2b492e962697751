"""Converters package: WordPress post HTML to Markdown."""

from .html_preprocessor import preprocess
from .markdown_converter import PostMarkdownConverter, convert_post

__all__ = [
    'convert_post',
    'preprocess',
    'PostMarkdownConverter'
]
