"""Allow-list filter for WordPress postmeta records."""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

logger = logging.getLogger('wp_export_to_markdown.extractors.meta_filter')


def _to_bool(value: str) -> bool:
    return value.strip().lower() not in ('', '0', 'false', 'no', 'off')


TRANSFORMS: Dict[str, Callable[[str], Any]] = {
    'identity': lambda value: value,
    'int': int,
    'float': float,
    'bool': _to_bool,
    'lower': lambda value: value.lower(),
    'strip': lambda value: value.strip(),
}


class MetaFilter:
    """
    Keeps whitelisted postmeta keys and converts their values.

    Keys are compared after stripping a single leading underscore, so the
    WordPress-private ``_wp_page_template`` is matched by ``wp_page_template``.
    """

    def __init__(self, transforms: Optional[Mapping[str, Callable[[str], Any]]] = None):
        self.transforms = dict(transforms or {})

    @classmethod
    def from_config(cls, meta_keys: Union[None, List[str], Mapping[str, str]]) -> 'MetaFilter':
        """
        Build a filter from the ``meta_keys`` configuration value.

        Args:
            meta_keys: list of key names (kept as-is) or mapping of key name to a
                transform name from ``TRANSFORMS``

        Raises:
            ValueError: on an unknown transform name or an unsupported meta_keys type
        """
        if not meta_keys:
            return cls()

        if isinstance(meta_keys, Mapping):
            transforms = {}
            for key, name in meta_keys.items():
                transform_name = name or 'identity'
                if transform_name not in TRANSFORMS:
                    raise ValueError(
                        f"Unknown meta transform '{transform_name}' for key '{key}'. "
                        f"Must be one of: {', '.join(TRANSFORMS)}"
                    )
                transforms[str(key)] = TRANSFORMS[transform_name]
            return cls(transforms)

        if isinstance(meta_keys, (list, tuple)):
            return cls({str(key): TRANSFORMS['identity'] for key in meta_keys})

        raise ValueError(f"meta_keys must be a list or a mapping, got {type(meta_keys).__name__}")

    def filter(self, records: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Reduce postmeta records to the allowed keys.

        Args:
            records: postmeta nodes, each with ``meta_key`` and ``meta_value`` lists

        Returns:
            Mapping of allowed key to transformed value
        """
        result: Dict[str, Any] = {}

        for record in records:
            key = _first_text(record, 'meta_key')
            value = _first_text(record, 'meta_value')
            if key.startswith('_'):
                key = key[1:]

            transform = self.transforms.get(key)
            if transform is None or not value:
                continue

            try:
                result[key] = transform(value)
            except ValueError as e:
                logger.warning(f"Skipping meta key '{key}': cannot convert {value!r} ({e})")

        return result


def _first_text(record: Mapping[str, Any], key: str) -> str:
    values = record.get(key) or ['']
    value = values[0]
    if isinstance(value, dict):
        value = value.get('_', '')
    return value or ''


__all__ = [
    'TRANSFORMS',
    'MetaFilter'
]
