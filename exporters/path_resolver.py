"""Output directory and filename policy for exported posts."""

from pathlib import Path
from typing import Union

from models import LayoutMode, Post


class PathResolutionError(ValueError):
    """Raised when a post lacks the attributes its layout needs."""
    pass


class PathResolver:
    """
    Derives where each post is written.

    Args:
        output: base output directory
        folders: layout mode (``year``, ``yearmonth``, ``path`` or ``post``)
        prefix_date: prefix folder (``post`` mode) or file names with ``yyyy-MM-dd-``
        named_files: in folder layouts, name files ``<slug>.md`` instead of ``index.md``
    """

    FOLDER_MODES = (LayoutMode.PATH.value, LayoutMode.POST.value)

    def __init__(
        self,
        output: Union[str, Path],
        folders: str = LayoutMode.PATH.value,
        prefix_date: bool = False,
        named_files: bool = False,
        extension: str = 'md'
    ):
        self.output = Path(output)
        self.folders = folders.value if isinstance(folders, LayoutMode) else folders
        self.prefix_date = prefix_date
        self.named_files = named_files
        self.extension = extension

    def _require_date(self, post: Post):
        if post.date is None:
            raise PathResolutionError(
                f"Post {post.meta.id} ('{post.title}') has no publish date, "
                f"required by the '{self.folders}' layout"
            )
        return post.date

    def _date_prefix(self, post: Post) -> str:
        return self._require_date(post).strftime('%Y-%m-%d') + '-'

    def get_post_dir(self, post: Post) -> Path:
        """Return the directory a post is written into."""
        if self.folders == LayoutMode.YEAR.value:
            return self.output / self._require_date(post).strftime('%Y')

        if self.folders == LayoutMode.YEAR_MONTH.value:
            post_date = self._require_date(post)
            return self.output / post_date.strftime('%Y') / post_date.strftime('%m')

        if self.folders == LayoutMode.PATH.value:
            if post.meta.status == 'draft':
                return self.output / 'drafts' / post.meta.slug
            return self.output / post.meta.path

        if self.folders == LayoutMode.POST.value:
            folder = post.meta.slug
            if self.prefix_date:
                folder = self._date_prefix(post) + folder
            return self.output / folder

        return self.output

    def get_post_filename(self, post: Post) -> str:
        """Return the file name of a post within its directory."""
        filename = f"{post.meta.slug}.{self.extension}"

        if self.folders in self.FOLDER_MODES:
            return filename if self.named_files else f"index.{self.extension}"

        if self.prefix_date:
            return self._date_prefix(post) + filename
        return filename

    def get_post_path(self, post: Post) -> Path:
        return self.get_post_dir(post) / self.get_post_filename(post)


__all__ = [
    'PathResolver',
    'PathResolutionError'
]
