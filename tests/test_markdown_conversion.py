"""Tests for WordPress post HTML to Markdown conversion."""

from bs4 import BeautifulSoup

from converters import PostMarkdownConverter, preprocess
from converters.html_preprocessor import insert_paragraph_separators, localize_image_sources, mark_frames
from models import Post, PostMeta


def convert(html, **config):
    return PostMarkdownConverter(config=config).convert_html(html)


class TestPreprocessing:
    """Text rewrites run before the converter."""

    def test_blank_lines_become_separators(self):
        assert insert_paragraph_separators('a\n\nb\r\n\r\nc') == 'a\n<div></div>\nb\n<div></div>\nc'

    def test_image_sources_are_localized(self):
        html = '<img class="wp-image" src="https://blog.example.com/uploads/2021/cat.JPG" alt="">'

        assert localize_image_sources(html) == '<img class="wp-image" src="images/cat.JPG" alt="">'

    def test_non_image_sources_untouched(self):
        html = '<img src="https://blog.example.com/pixel.svg">'

        assert localize_image_sources(html) == html

    def test_frames_get_placeholder(self):
        assert mark_frames('<iframe src="x"></iframe>') == '<iframe src="x">.</iframe>'

    def test_preprocess_trims_and_skips_localizing_when_disabled(self):
        html = '  <img src="http://x/a.png">  '

        assert preprocess(html, localize_images=False) == '<img src="http://x/a.png">'


class TestParagraphs:

    def test_blank_line_keeps_paragraphs_apart(self):
        assert convert('First line\n\nSecond line') == 'First line\n\nSecond line'

    def test_blank_line_between_blocks_is_single(self):
        assert convert('<p>a</p>\n\n<p>b</p>') == 'a\n\nb'

    def test_blank_line_between_heading_and_list_is_single(self):
        assert convert('<h2>T</h2>\n\n<ul><li>x</li></ul>') == '## T\n\n- x'

    def test_blank_line_after_block_before_text(self):
        assert convert('<p>a</p>\n\nb') == 'a\n\nb'

    def test_single_newline_is_kept_as_is(self):
        assert convert('First line\nSecond line') == 'First line\nSecond line'

    def test_blank_line_inside_pre_is_preserved(self):
        result = convert('<pre>line1\n\nline2</pre>')

        assert result == '```\nline1\n\nline2\n```'

    def test_headings_are_atx(self):
        assert convert('<h2>Title</h2><p>Body</p>') == '## Title\n\nBody'

    def test_bullets_use_dash(self):
        assert convert('<ul><li>One</li><li>Two</li></ul>') == '- One\n- Two'

    def test_ordered_list(self):
        assert convert('<ol><li>One</li><li>Two</li></ol>') == '1. One\n2. Two'


class TestImages:

    def test_content_images_point_to_local_folder(self):
        html = '<p><img src="https://blog.example.com/wp-content/uploads/2021/06/cat.png" alt="A cat"></p>'

        assert convert(html) == '![A cat](images/cat.png)'

    def test_content_images_untouched_when_disabled(self):
        html = '<p><img src="https://blog.example.com/cat.png" alt="A cat"></p>'

        assert convert(html, addcontentimages=False) == '![A cat](https://blog.example.com/cat.png)'


class TestEmbeds:
    """Widgets kept as raw HTML."""

    def test_tweet_stays_snug_with_its_script(self):
        html = (
            '<blockquote class="twitter-tweet"><p lang="en">Hello</p>Jane '
            '<a href="https://twitter.com/jane/status/1">June 15, 2021</a></blockquote>\n'
            '<script async src="https://platform.twitter.com/widgets.js" charset="utf-8"></script>'
        )

        assert convert(html) == (
            '<blockquote class="twitter-tweet"><p lang="en">Hello</p>Jane '
            '<a href="https://twitter.com/jane/status/1">June 15, 2021</a></blockquote>\n'
            '<script async src="https://platform.twitter.com/widgets.js" charset="utf-8"></script>'
        )

    def test_tweet_without_script_is_padded(self):
        html = '<blockquote class="twitter-tweet"><p>Hi</p></blockquote><p>After</p>'

        assert convert(html) == '<blockquote class="twitter-tweet"><p>Hi</p></blockquote>\n\nAfter'

    def test_plain_blockquote_is_quoted(self):
        assert convert('<blockquote><p>Quoted</p></blockquote>') == '> Quoted'

    def test_codepen_is_preserved(self):
        html = (
            '<p class="codepen" data-height="265" data-slug-hash="abc123" data-user="jane">See the Pen</p>\n'
            '<script async src="https://static.codepen.io/assets/embed/ei.js"></script>'
        )

        assert convert(html) == (
            '<p class="codepen" data-height="265" data-slug-hash="abc123" data-user="jane">See the Pen</p>\n'
            '<script async src="https://static.codepen.io/assets/embed/ei.js"></script>'
        )

    def test_codepen_div_is_preserved(self):
        html = '<div class="codepen" data-slug-hash="abc123">Pen</div>'

        assert convert(html) == html

    def test_paragraph_with_codepen_class_but_no_hash_is_converted(self):
        assert convert('<p class="codepen">Just text</p>') == 'Just text'

    def test_script_after_text_gets_blank_line(self):
        html = 'Look at this\n<script src="https://gist.github.com/jane/1.js"></script>'

        assert convert(html) == 'Look at this\n\n<script src="https://gist.github.com/jane/1.js"></script>'

    def test_iframe_is_preserved(self):
        html = (
            '<p>Watch:</p>'
            '<iframe src="https://www.youtube.com/embed/x" width="560" height="315" allowfullscreen></iframe>'
        )

        assert convert(html) == (
            'Watch:\n\n'
            '<iframe src="https://www.youtube.com/embed/x" width="560" height="315" allowfullscreen></iframe>'
        )

    def test_embed_attributes_keep_source_order(self):
        html = '<div data-slug-hash="abc123" data-user="jane" class="codepen">Pen</div>'

        assert convert(html) == html

    def test_embed_entities_stay_escaped(self):
        html = '<iframe src="https://maps.example.com/?a=1&amp;b=2" width="600"></iframe>'

        assert convert(html) == html

    def test_tweet_then_blank_line_then_script(self):
        html = '<blockquote class="twitter-tweet"><p>Hi</p></blockquote>\n\n<script src="w.js"></script>'

        assert convert(html) == html

    def test_blank_line_before_script_after_text(self):
        html = 'Look at this\n\n<script src="https://gist.github.com/jane/1.js"></script>'

        assert convert(html) == html


class TestScriptRule:
    """Padding before a script depends on what precedes it."""

    def test_after_element_single_newline(self):
        soup = BeautifulSoup('<div><span>x</span><script async src="a.js"></script></div>', 'html.parser')

        result = PostMarkdownConverter().convert_script(soup.find('script'), '', parent_tags=set())

        assert result == '\n<script async src="a.js"></script>\n\n'

    def test_after_text_blank_line(self):
        soup = BeautifulSoup('<div>text <script src="a.js"></script></div>', 'html.parser')

        result = PostMarkdownConverter().convert_script(soup.find('script'), '', parent_tags=set())

        assert result == '\n\n<script src="a.js"></script>\n\n'


class TestConvertPost:

    def test_sets_post_content(self):
        post = Post(meta=PostMeta(id='1', slug='a', path='a', status='publish', body_html='<p>Hi <em>there</em></p>'))

        result = PostMarkdownConverter().convert_post(post)

        assert result == 'Hi *there*'
        assert post.content == 'Hi *there*'
