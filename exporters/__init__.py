"""Export package: writes converted posts and their images to disk.

Package Structure:
- frontmatter: empty-value pruning and YAML front-matter rendering
- path_resolver: output directory / filename policy per layout mode
- image_downloader: staggered image downloads on the worker pool
- markdown_writer: schedules post writes and downloads, collects results
"""

from .frontmatter import clean, is_empty, render_post
from .image_downloader import ImageDownloader
from .markdown_writer import ExportWriter
from .path_resolver import PathResolutionError, PathResolver

__all__ = [
    'ExportWriter',
    'ImageDownloader',
    'PathResolver',
    'PathResolutionError',
    'clean',
    'is_empty',
    'render_post'
]
