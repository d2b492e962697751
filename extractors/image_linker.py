"""Associate images with the posts that own them."""

import logging
from typing import Dict, List, Optional

from models import Image, Post

logger = logging.getLogger('wp_export_to_markdown.extractors.image_linker')


def find_owner(image: Image, posts: List[Post], posts_by_id: Dict[str, Post]) -> Optional[Post]:
    """
    Find the post owning an image.

    A post naming the image as its thumbnail wins over the image's declared
    parent. Scraped images never match a thumbnail id.
    """
    if not image.is_scraped:
        for post in posts:
            if post.meta.thumbnail_image_id == image.id:
                return post

    return posts_by_id.get(image.post_id)


def link_images(images: List[Image], posts: List[Post]) -> int:
    """
    Attach image URLs to their owning posts and fill in front-matter images.

    Args:
        images: images in extraction order
        posts: posts to enrich in place

    Returns:
        Number of images linked to a post
    """
    posts_by_id = {post.meta.id: post for post in posts}
    linked = 0

    for image in images:
        post = find_owner(image, posts, posts_by_id)
        if post is None:
            logger.debug(f"Orphan image {image.id} for post {image.post_id}: {image.url}")
            continue

        post.meta.image_urls.append(image.url)
        linked += 1

        if image.is_scraped:
            continue

        images_block = post.frontmatter.setdefault('images', {})
        if image.id == post.meta.thumbnail_image_id:
            images_block['thumbnail'] = './images/' + image.filename
        if image.id == post.meta.feature_image_id:
            images_block['feature'] = './images/' + image.filename

    logger.info(f"Linked {linked} of {len(images)} images to posts")
    return linked


__all__ = [
    'find_owner',
    'link_images'
]
