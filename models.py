"""Data models for the WordPress export to Markdown pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from datetime import date

# Images scraped from post bodies have no attachment id to match against
SCRAPED_IMAGE_ID = -1


class LayoutMode(Enum):
    """Output directory layouts."""
    YEAR = "year"
    YEAR_MONTH = "yearmonth"
    PATH = "path"
    POST = "post"


@dataclass(frozen=True)
class Author:
    """A blog author, keyed by login."""

    id: str
    name: str


@dataclass
class Image:
    """An image owned by (at most) one post."""

    id: Union[str, int]
    post_id: str
    url: str

    @property
    def is_scraped(self) -> bool:
        """True for images found in post content rather than declared as attachments."""
        return self.id == SCRAPED_IMAGE_ID

    @property
    def filename(self) -> str:
        return filename_from_url(self.url)


@dataclass
class PostMeta:
    """Working data for a post. Never written to the output file."""

    id: str
    slug: str
    path: str
    status: str
    thumbnail_image_id: Optional[str] = None
    feature_image_id: Optional[str] = None
    image_urls: List[str] = field(default_factory=list)
    body_html: str = ''


@dataclass
class Post:
    """A blog post with its persisted front-matter and converted content."""

    meta: PostMeta
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    content: str = ''

    @property
    def date(self) -> Optional[date]:
        return self.frontmatter.get('date')

    @property
    def title(self) -> str:
        return self.frontmatter.get('title', '')

    def __eq__(self, other: Any) -> bool:
        """Compare posts by ID."""
        if not isinstance(other, Post):
            return False
        return self.meta.id == other.meta.id

    def __hash__(self) -> int:
        return hash(self.meta.id)


@dataclass
class ExportContext:
    """Run-wide state handed from one pipeline stage to the next."""

    config: Dict[str, Any]
    site_url: Optional[str] = None
    authors: List[Author] = field(default_factory=list)
    images: List[Image] = field(default_factory=list)
    posts: List[Post] = field(default_factory=list)

    def get_statistics(self) -> Dict[str, Any]:
        """Get entity counts for reporting."""
        scraped = sum(1 for image in self.images if image.is_scraped)
        return {
            'authors': len(self.authors),
            'posts': len(self.posts),
            'images': len(self.images),
            'images_scraped': scraped,
            'images_linked': sum(len(post.meta.image_urls) for post in self.posts),
        }


@dataclass
class WriteResult:
    """Outcome of one asynchronous post write or image download."""

    kind: str  # "post" or "image"
    target: str
    source: Optional[str] = None
    success: bool = True
    error: Optional[str] = None
    status_code: Optional[int] = None


def filename_from_url(url: str) -> str:
    """Return the last path segment of a URL."""
    return url.split('/')[-1]


__all__ = [
    'SCRAPED_IMAGE_ID',
    'LayoutMode',
    'Author',
    'Image',
    'PostMeta',
    'Post',
    'ExportContext',
    'WriteResult',
    'filename_from_url',
]
