"""Extract authors, posts and images from a parsed WordPress export."""

import logging
import re
from datetime import date, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from dateutil import parser as date_parser

from models import SCRAPED_IMAGE_ID, Author, Image, Post, PostMeta
from .meta_filter import MetaFilter

logger = logging.getLogger('wp_export_to_markdown.extractors.entity_extractor')

IMAGE_URL_PATTERN = re.compile(r'\.(gif|jpg|jpeg|png)$', re.IGNORECASE)
CONTENT_IMAGE_PATTERN = re.compile(r'<img[^>]*src="(.+?\.(?:gif|jpg|jpeg|png))"[^>]*>', re.IGNORECASE)
SITE_PREFIX_PATTERN = re.compile(r'https?://[^/]+')
# WordPress writes year -0001 for drafts that were never published
NEGATIVE_YEAR_PATTERN = re.compile(r"\s-\d{4}\s")

THUMBNAIL_META_KEY = '_thumbnail_id'
FEATURE_META_KEY = 'post_medium_thumbnail_id'


class UnknownAuthorError(LookupError):
    """Raised when a post's creator is not among the export's authors."""
    pass


def _first(node: Dict[str, Any], key: str, default: Any = '') -> Any:
    """Return the first value of a child list, or ``default`` when absent."""
    values = node.get(key)
    if not values:
        return default
    return values[0]


def _text(value: Any) -> str:
    if isinstance(value, dict):
        return value.get('_', '')
    return value or ''


def get_channel(data: Dict[str, Any]) -> Dict[str, Any]:
    return data['rss']['channel'][0]


def get_items_of_type(data: Dict[str, Any], item_type: str) -> List[Dict[str, Any]]:
    """Return channel items whose ``post_type`` equals ``item_type``."""
    return [
        item for item in get_channel(data).get('item', [])
        if _text(_first(item, 'post_type')) == item_type
    ]


def get_post_id(post: Dict[str, Any]) -> str:
    return _text(_first(post, 'post_id'))


def get_post_slug(post: Dict[str, Any]) -> str:
    return _text(_first(post, 'post_name')) or get_post_id(post)


def get_post_path(post: Dict[str, Any]) -> str:
    """Site-relative permalink without surrounding slashes."""
    path = SITE_PREFIX_PATTERN.sub('', _text(_first(post, 'link')), count=1)
    if path.startswith('/'):
        path = path[1:]
    if path.endswith('/'):
        path = path[:-1]
    return path


def get_post_date(post: Dict[str, Any]) -> Optional[date]:
    """
    Parse the RFC-2822 publish date into a UTC calendar date.

    Returns None when the date cannot be parsed (WordPress writes year -0001
    for drafts that were never published).
    """
    raw = _text(_first(post, 'pubDate')).strip()
    if not raw:
        return None

    if NEGATIVE_YEAR_PATTERN.search(raw):
        logger.warning(f"Unable to parse date '{raw}' for post {get_post_id(post)}: negative year")
        return None

    try:
        parsed = date_parser.parse(raw)
    except (ValueError, OverflowError) as e:
        logger.warning(f"Unable to parse date '{raw}' for post {get_post_id(post)}: {e}")
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).date()


def get_post_status(post: Dict[str, Any]) -> str:
    return _text(_first(post, 'status'))


def get_post_title(post: Dict[str, Any]) -> str:
    return _text(_first(post, 'title')).strip()


def get_post_content(post: Dict[str, Any]) -> str:
    return _text(_first(post, 'encoded'))


def get_post_excerpt(post: Dict[str, Any]) -> str:
    encoded = post.get('encoded') or []
    if len(encoded) < 2:
        return ''
    return _text(encoded[1]).strip()


def get_post_author(post: Dict[str, Any]) -> str:
    return _text(_first(post, 'creator'))


def _get_terms(post: Dict[str, Any], domain: str) -> List[str]:
    terms = []
    for item in post.get('category', []):
        if not isinstance(item, dict):
            continue
        if item.get('$', {}).get('domain') == domain:
            terms.append(item.get('_', '').lower().strip())
    return terms


def get_categories(post: Dict[str, Any]) -> List[str]:
    return _get_terms(post, 'category')


def get_tags(post: Dict[str, Any]) -> List[str]:
    return _get_terms(post, 'post_tag')


def _get_meta_value(post: Dict[str, Any], meta_key: str) -> Optional[str]:
    for record in post.get('postmeta', []):
        if _text(_first(record, 'meta_key')) == meta_key:
            return _text(_first(record, 'meta_value'))
    return None


def get_post_thumbnail_image(post: Dict[str, Any]) -> Optional[str]:
    return _get_meta_value(post, THUMBNAIL_META_KEY)


def get_post_feature_image(post: Dict[str, Any]) -> Optional[str]:
    return _get_meta_value(post, FEATURE_META_KEY)


class EntityExtractor:
    """
    Builds normalized Author, Image and Post records from the export tree.

    Args:
        add_content_images: also collect ``<img>`` sources found in post bodies
        post_filter: optional case-insensitive title substring
        meta_filter: allow-list applied to each post's postmeta records
    """

    def __init__(
        self,
        add_content_images: bool = True,
        post_filter: Optional[str] = None,
        meta_filter: Optional[MetaFilter] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.add_content_images = add_content_images
        self.post_filter = post_filter
        self.meta_filter = meta_filter or MetaFilter()
        self.logger = logger or logging.getLogger('wp_export_to_markdown.extractors.entity_extractor')

    def collect_authors(self, data: Dict[str, Any]) -> List[Author]:
        return [
            Author(
                id=_text(_first(item, 'author_login')),
                name=_text(_first(item, 'author_display_name'))
            )
            for item in get_channel(data).get('author', [])
        ]

    def collect_images(self, data: Dict[str, Any]) -> List[Image]:
        """Collect declared image attachments, then scraped content images if enabled."""
        images = []
        for attachment in get_items_of_type(data, 'attachment'):
            url = _text(_first(attachment, 'attachment_url'))
            if not IMAGE_URL_PATTERN.search(url):
                continue
            images.append(Image(
                id=get_post_id(attachment),
                post_id=_text(_first(attachment, 'post_parent')),
                url=url
            ))

        self.logger.debug(f"Collected {len(images)} attachment images")

        if self.add_content_images:
            self._add_content_images(data, images)

        return images

    def _add_content_images(self, data: Dict[str, Any], images: List[Image]) -> None:
        seen = {(image.post_id, image.url) for image in images}

        for post in get_items_of_type(data, 'post'):
            post_id = get_post_id(post)
            post_link = _text(_first(post, 'link'))

            for match in CONTENT_IMAGE_PATTERN.finditer(get_post_content(post)):
                url = urljoin(post_link, match.group(1))
                if (post_id, url) in seen:
                    continue
                seen.add((post_id, url))
                images.append(Image(id=SCRAPED_IMAGE_ID, post_id=post_id, url=url))
                self.logger.info(f"Scraped: {url}")

    def collect_posts(self, data: Dict[str, Any], authors: List[Author]) -> List[Post]:
        """
        Build posts in export order, applying the title filter.

        Raises:
            UnknownAuthorError: if a post's creator has no matching author record
        """
        author_names = {author.id: author.name for author in authors}
        needle = self.post_filter.lower() if self.post_filter else None

        posts = []
        for item in get_items_of_type(data, 'post'):
            title = get_post_title(item)
            if needle and needle not in title.lower():
                continue

            self.logger.info(f"Processing: {title}")

            creator = get_post_author(item)
            if creator not in author_names:
                raise UnknownAuthorError(
                    f"Post {get_post_id(item)} ('{title}') references unknown author '{creator}'"
                )

            meta = PostMeta(
                id=get_post_id(item),
                slug=get_post_slug(item),
                path=get_post_path(item),
                status=get_post_status(item),
                thumbnail_image_id=get_post_thumbnail_image(item),
                feature_image_id=get_post_feature_image(item),
                body_html=get_post_content(item)
            )

            frontmatter = {
                'slug': meta.slug,
                'title': title,
                'summary': get_post_excerpt(item),
                'author': author_names[creator],
                'date': get_post_date(item),
                'images': {},
                'categories': get_categories(item),
                'tags': get_tags(item),
                'meta': self.meta_filter.filter(item.get('postmeta', [])),
            }

            posts.append(Post(meta=meta, frontmatter=frontmatter))

        return posts


__all__ = [
    'EntityExtractor',
    'UnknownAuthorError',
    'get_items_of_type',
    'get_post_id',
    'get_post_slug',
    'get_post_path',
    'get_post_date',
    'get_post_status',
    'get_post_title',
    'get_post_excerpt',
    'get_categories',
    'get_tags',
    'get_post_thumbnail_image',
    'get_post_feature_image',
]
