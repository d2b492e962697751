"""Read a WordPress WXR export into an xml2js-style nested mapping."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from lxml import etree


class ExportReadError(Exception):
    """Raised when the export file cannot be read or is not a WXR document."""
    pass


class ExportReader:
    """
    Parses an export file into plain dicts and lists.

    Mapping rules:
    - tag names lose their namespace prefix (``wp:post_id`` becomes ``post_id``)
    - every child name maps to a list of values, in document order
    - an element with no attributes and no child elements becomes its text
    - anything else becomes a dict with ``$`` (attributes) and ``_`` (text)
    """

    def __init__(self, path: Union[str, Path], logger: Optional[logging.Logger] = None):
        self.path = Path(path)
        self.logger = logger or logging.getLogger('wp_export_to_markdown.readers.export_reader')

    def read(self) -> Dict[str, Any]:
        """
        Read and parse the export file.

        Returns:
            ``{'rss': <root mapping>}``

        Raises:
            ExportReadError: if the file is unreadable, malformed or has no channel
        """
        self.logger.info(f"Reading export file: {self.path}")

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise ExportReadError(f"Unable to read export file {self.path}: {e}") from e

        return self.parse(raw)

    def parse(self, raw: Union[bytes, str]) -> Dict[str, Any]:
        """Parse export XML held in memory."""
        if isinstance(raw, str):
            raw = raw.encode('utf-8')

        parser = etree.XMLParser(strip_cdata=True, huge_tree=True)
        try:
            root = etree.fromstring(raw, parser=parser)
        except etree.XMLSyntaxError as e:
            raise ExportReadError(f"Malformed export XML in {self.path}: {e}") from e

        if etree.QName(root).localname != 'rss':
            raise ExportReadError(f"Export root element is not <rss> in {self.path}")

        tree = self._element_to_value(root)
        if not isinstance(tree, dict) or not tree.get('channel'):
            raise ExportReadError(f"Export has no <channel> element in {self.path}")

        self.logger.debug(f"Parsed export with {len(tree['channel'][0].get('item', []))} items")
        return {'rss': tree}

    def _element_to_value(self, element) -> Any:
        children = [child for child in element if isinstance(child.tag, str)]
        attributes = dict(element.attrib)
        text = element.text or ''

        if not children and not attributes:
            return text

        node: Dict[str, Any] = {}
        if attributes:
            node['$'] = {etree.QName(name).localname: value for name, value in attributes.items()}
        if text.strip():
            node['_'] = text

        for child in children:
            name = etree.QName(child).localname
            node.setdefault(name, []).append(self._element_to_value(child))

        return node


__all__ = [
    'ExportReader',
    'ExportReadError'
]
