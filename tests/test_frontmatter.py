"""Tests for front-matter pruning and file rendering."""

from datetime import date

import yaml

from exporters import clean, is_empty, render_post
from models import Post, PostMeta


class TestIsEmpty:

    def test_scalars(self):
        assert is_empty(None)
        assert is_empty('')
        assert not is_empty(0)
        assert not is_empty(False)
        assert not is_empty('x')

    def test_lists_without_truthy_items(self):
        assert is_empty([])
        assert is_empty(['', None, 0])
        assert not is_empty(['', 'a'])

    def test_mappings(self):
        assert is_empty({})
        assert not is_empty({'a': None})


class TestClean:

    def test_prunes_nested_empties(self):
        frontmatter = {
            'slug': 'hello',
            'summary': '',
            'images': {},
            'categories': ['news', ''],
            'tags': [],
            'meta': {'views': None, 'nested': {'inner': ''}},
            'count': 0,
        }

        assert clean(frontmatter) == {'slug': 'hello', 'categories': ['news'], 'count': 0}

    def test_lists_of_mappings(self):
        assert clean([{'a': ''}, {'b': 1}]) == [{'b': 1}]

    def test_idempotent(self):
        value = {'a': {'b': {'c': []}}, 'd': ['', ['x', None]], 'e': 'keep'}

        assert clean(clean(value)) == clean(value)

    def test_preserves_key_order(self):
        assert list(clean({'z': 1, 'a': 2, 'm': 3})) == ['z', 'a', 'm']


class TestRenderPost:

    def make_post(self, **frontmatter):
        return Post(
            meta=PostMeta(id='1', slug='hello', path='hello', status='publish'),
            frontmatter=frontmatter,
            content='Body text'
        )

    def test_layout(self):
        post = self.make_post(slug='hello', title='Hello World', summary='', date=date(2021, 6, 15))

        rendered = render_post(post)

        assert rendered == (
            '---\n'
            'slug: hello\n'
            'title: Hello World\n'
            'date: 2021-06-15\n'
            '---\n'
            '\n'
            'Body text\n'
        )

    def test_yaml_round_trips(self):
        post = self.make_post(
            title='Quotes: "and" colons',
            images={'thumbnail': './images/cover.jpg'},
            tags=['python', 'yaml'],
        )

        block = render_post(post).split('---\n')[1]

        assert yaml.safe_load(block) == {
            'title': 'Quotes: "and" colons',
            'images': {'thumbnail': './images/cover.jpg'},
            'tags': ['python', 'yaml'],
        }

    def test_unicode_is_not_escaped(self):
        post = self.make_post(title='Café')

        assert 'title: Café\n' in render_post(post)
