"""Shared fixtures: sample WXR documents and a fake HTTP session."""

import threading
from typing import Dict, List, Optional

import pytest

WXR_HEADER = '''<?xml version="1.0" encoding="UTF-8" ?>
<rss version="2.0"
    xmlns:excerpt="http://wordpress.org/export/1.2/excerpt/"
    xmlns:content="http://purl.org/rss/1.0/modules/content/"
    xmlns:wfw="http://wellformedweb.org/CommentAPI/"
    xmlns:dc="http://purl.org/dc/elements/1.1/"
    xmlns:wp="http://wordpress.org/export/1.2/">
<channel>
    <title>Sample Blog</title>
    <link>https://blog.example.com</link>
    <wp:base_site_url>https://blog.example.com</wp:base_site_url>
    <wp:author>
        <wp:author_id>1</wp:author_id>
        <wp:author_login><![CDATA[jdoe]]></wp:author_login>
        <wp:author_display_name><![CDATA[Jane Doe]]></wp:author_display_name>
    </wp:author>
'''

WXR_FOOTER = '''
</channel>
</rss>
'''


def make_post(
    post_id: str,
    title: str,
    slug: str = '',
    link: Optional[str] = None,
    content: str = '<p>Hello</p>',
    excerpt: str = '',
    pub_date: str = 'Tue, 15 Jun 2021 10:00:00 +0000',
    creator: str = 'jdoe',
    status: str = 'publish',
    categories: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
    postmeta: Optional[Dict[str, str]] = None,
) -> str:
    """Render one ``post`` item."""
    link = link or f'https://blog.example.com/2021/06/{slug or post_id}/'
    terms = ''.join(
        f'<category domain="category" nicename="{name.lower()}"><![CDATA[{name}]]></category>'
        for name in categories or []
    ) + ''.join(
        f'<category domain="post_tag" nicename="{name.lower()}"><![CDATA[{name}]]></category>'
        for name in tags or []
    )
    meta = ''.join(
        f'<wp:postmeta><wp:meta_key><![CDATA[{key}]]></wp:meta_key>'
        f'<wp:meta_value><![CDATA[{value}]]></wp:meta_value></wp:postmeta>'
        for key, value in (postmeta or {}).items()
    )
    return f'''
    <item>
        <title>{title}</title>
        <link>{link}</link>
        <pubDate>{pub_date}</pubDate>
        <dc:creator><![CDATA[{creator}]]></dc:creator>
        <content:encoded><![CDATA[{content}]]></content:encoded>
        <excerpt:encoded><![CDATA[{excerpt}]]></excerpt:encoded>
        <wp:post_id>{post_id}</wp:post_id>
        <wp:post_name><![CDATA[{slug}]]></wp:post_name>
        <wp:status><![CDATA[{status}]]></wp:status>
        <wp:post_type><![CDATA[post]]></wp:post_type>
        {terms}
        {meta}
    </item>
'''


def make_attachment(post_id: str, parent_id: str, url: str) -> str:
    """Render one ``attachment`` item."""
    return f'''
    <item>
        <title>attachment {post_id}</title>
        <wp:post_id>{post_id}</wp:post_id>
        <wp:post_parent>{parent_id}</wp:post_parent>
        <wp:post_type><![CDATA[attachment]]></wp:post_type>
        <wp:attachment_url><![CDATA[{url}]]></wp:attachment_url>
    </item>
'''


def make_export(*items: str) -> str:
    return WXR_HEADER + ''.join(items) + WXR_FOOTER


class FakeResponse:
    """Minimal stand-in for ``requests.Response`` used with ``stream=True``."""

    def __init__(self, status_code: int = 200, content: bytes = b'image-bytes'):
        self.status_code = status_code
        self.content = content
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class FakeSession:
    """Records requests and serves canned responses keyed by URL."""

    def __init__(self, responses: Optional[Dict[str, object]] = None, default_status: int = 200):
        self.responses = responses or {}
        self.default_status = default_status
        self.headers: Dict[str, str] = {}
        self.requests: List[Dict[str, object]] = []
        self.closed = False
        self._lock = threading.Lock()

    def get(self, url, **kwargs):
        with self._lock:
            self.requests.append({'url': url, **kwargs})
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            response = FakeResponse(self.default_status)
        return response

    def close(self):
        self.closed = True

    @property
    def urls(self) -> List[str]:
        return [request['url'] for request in self.requests]


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def base_config(tmp_path):
    """Configuration with defaults and no request stagger."""
    from config_loader import ConfigLoader

    config = ConfigLoader.with_defaults({
        'output': str(tmp_path / 'output'),
        'progress_bars': False,
    })
    config['advanced']['stagger_ms'] = 0
    config['advanced']['max_workers'] = 2
    return config
