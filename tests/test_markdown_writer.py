"""Tests for scheduling post writes and image downloads."""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path

import pytest

from conftest import FakeResponse, FakeSession
from exporters import ExportWriter, ImageDownloader
from models import Post, PostMeta


def make_post(post_id='10', slug='hello', image_urls=None, post_date=date(2021, 6, 15)):
    return Post(
        meta=PostMeta(
            id=post_id,
            slug=slug,
            path=f'2021/06/{slug}',
            status='publish',
            image_urls=list(image_urls or [])
        ),
        frontmatter={'slug': slug, 'title': slug.title(), 'date': post_date, 'images': {}},
        content='Body'
    )


@pytest.fixture
def writer_factory(base_config):
    writers = []

    def build(session=None, **overrides):
        config = dict(base_config, **overrides)
        executor = ThreadPoolExecutor(max_workers=2)
        downloader = ImageDownloader(executor, config=config, session=session or FakeSession())
        writer = ExportWriter(config, downloader=downloader, executor=executor)
        writers.append(writer)
        return writer

    yield build

    for writer in writers:
        writer.close()


class TestExportWriter:

    def test_writes_markdown_file(self, writer_factory, base_config):
        writer = writer_factory()

        writer.write_posts([make_post()])
        results = writer.flush()

        target = Path(base_config['output']) / '2021' / '06' / 'hello' / 'index.md'
        assert [result.success for result in results] == [True]
        assert results[0].target == str(target)
        assert target.read_text(encoding='utf-8').startswith('---\nslug: hello\n')
        assert target.read_text(encoding='utf-8').endswith('---\n\nBody\n')

    def test_schedules_image_downloads(self, writer_factory, base_config):
        session = FakeSession({'https://x.com/a.png': FakeResponse(200, b'A')})
        writer = writer_factory(session=session)

        writer.write_posts([make_post(image_urls=['https://x.com/a.png'])])
        results = writer.flush()

        image = Path(base_config['output']) / '2021' / '06' / 'hello' / 'images' / 'a.png'
        assert [result.kind for result in results] == ['post', 'image']
        assert image.read_bytes() == b'A'
        assert writer.get_stats()['images_saved'] == 1

    def test_saveimages_disabled(self, writer_factory):
        session = FakeSession()
        writer = writer_factory(session=session, saveimages=False)

        writer.write_posts([make_post(image_urls=['https://x.com/a.png'])])
        results = writer.flush()

        assert [result.kind for result in results] == ['post']
        assert session.requests == []

    def test_download_failure_does_not_block_siblings(self, writer_factory):
        session = FakeSession({'https://x.com/bad.png': FakeResponse(500)})
        writer = writer_factory(session=session)

        writer.write_posts([
            make_post('1', 'first', image_urls=['https://x.com/bad.png', 'https://x.com/good.png']),
            make_post('2', 'second'),
        ])
        results = writer.flush()

        assert [(result.kind, result.success) for result in results] == [
            ('post', True),
            ('image', False),
            ('image', True),
            ('post', True),
        ]
        assert writer.get_stats()['images_failed'] == 1

    def test_unresolvable_path_is_reported(self, writer_factory):
        writer = writer_factory(folders='year')

        writer.write_posts([make_post('1', 'undated', post_date=None), make_post('2', 'dated')])
        results = writer.flush()

        assert sorted(result.success for result in results) == [False, True]
        assert writer.get_stats()['posts_failed'] == 1

    def test_stagger_counts_across_posts(self, writer_factory):
        writer = writer_factory()

        writer.write_posts([
            make_post('1', 'a', image_urls=['https://x.com/1.png']),
            make_post('2', 'b', image_urls=['https://x.com/2.png', 'https://x.com/3.png']),
        ])
        writer.flush()

        assert writer.downloader.scheduled == 3
        assert writer.get_stats()['images_scheduled'] == 3

    def test_flush_without_writes(self, writer_factory):
        assert writer_factory().flush() == []

    def test_unrenderable_frontmatter_fails_only_that_post(self, writer_factory, base_config):
        broken = make_post('1', 'broken')
        broken.frontmatter['meta'] = {'widget': object()}
        writer = writer_factory()

        writer.write_posts([broken, make_post('2', 'fine')])
        results = writer.flush()

        assert [result.success for result in results] == [False, True]
        assert not (Path(base_config['output']) / '2021' / '06' / 'broken' / 'index.md').exists()
        assert writer.get_stats()['posts_failed'] == 1
