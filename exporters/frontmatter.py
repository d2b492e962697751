"""Front-matter pruning and Markdown file rendering."""

from typing import Any

import yaml

from models import Post


def is_empty(value: Any) -> bool:
    """
    Decide whether a front-matter value should be dropped.

    Lists are empty when none of their items is truthy, mappings when they have
    no keys, scalars when they are None or an empty string. ``0`` and ``False``
    are kept.
    """
    if isinstance(value, list):
        return not any(value)
    if isinstance(value, dict):
        return len(value) == 0
    return value is None or value == ''


def clean(value: Any) -> Any:
    """Recursively remove empty values from lists and mappings, bottom-up."""
    if isinstance(value, list):
        return [item for item in (clean(item) for item in value) if not is_empty(item)]

    if isinstance(value, dict):
        output = {}
        for key, item in value.items():
            if is_empty(item):
                continue
            item = clean(item)
            if not is_empty(item):
                output[key] = item
        return output

    return value


def render_frontmatter(frontmatter: dict) -> str:
    # width=1000 keeps long titles and summaries on one line
    yaml_str = yaml.safe_dump(
        clean(frontmatter),
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
        width=1000
    )
    return f"---\n{yaml_str}---\n"


def render_post(post: Post) -> str:
    """Render a post as a YAML front-matter block followed by its Markdown body."""
    return render_frontmatter(post.frontmatter) + '\n' + post.content + '\n'


__all__ = [
    'is_empty',
    'clean',
    'render_frontmatter',
    'render_post'
]
