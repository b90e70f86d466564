"""
Built-in tag catalog tests

Tests that:
- Each tag family renders the documented HTML
- Parameters that end up in attributes are validated and escaped
- Code tags highlight with Pygments when a language is given
"""

import pytest

from bbdown.config import AppSettings
from bbdown.lib.builtins import (
    CodeTag,
    builtinTags_make,
    color_validate,
    size_validate,
    url_validate,
)
from bbdown.lib.engine import Engine
from bbdown.lib.lexer import BBCodeLexer


@pytest.fixture
def engine():
    return Engine()


def html_of(engine, source: str) -> str:
    return engine.process(source).html


class TestValidators:

    @pytest.mark.parametrize("value, expected", [
        ("red", "red"),
        ("ff0000", "#ff0000"),
        ("#00FF00", "#00FF00"),
        ("javascript:alert(1)", "black"),
        ("red;background:url(x)", "black"),
        ("", "black"),
    ])
    def test_color(self, value, expected):
        assert color_validate(value, "black") == expected

    @pytest.mark.parametrize("value, expected", [
        ("20", 20),
        ("4", 4),
        ("40", 40),
        ("3", 14),
        ("41", 14),
        ("huge", 14),
        ("", 14),
    ])
    def test_size(self, value, expected):
        assert size_validate(value) == expected

    @pytest.mark.parametrize("value, ok", [
        ("http://example.com/a?b=c", True),
        ("https://example.com", True),
        ("javascript:alert(1)", False),
        ("data:text/html,x", False),
        ("http://example.com/?a[]=1", True),
        ('http://a.com/"onmouseover', False),
    ])
    def test_url(self, value, ok):
        assert (url_validate(value, "#") == value) is ok


class TestFormatting:

    @pytest.mark.parametrize("name", ["b", "i", "u", "s"])
    def test_span_classes(self, engine, name):
        assert html_of(engine, f"[{name}]x[/{name}]") == f'<span class="xbbcode-{name}">x</span>'

    def test_sub_sup(self, engine):
        assert html_of(engine, "H[sub]2[/sub]O x[sup]2[/sup]") == "H<sub>2</sub>O x<sup>2</sup>"

    def test_alignment(self, engine):
        assert html_of(engine, "[center]x[/center]") == '<span class="xbbcode-center">x</span>'

    def test_quote(self, engine):
        assert (
            html_of(engine, "[quote]x[/quote]")
            == '<blockquote class="xbbcode-blockquote">x</blockquote>'
        )


class TestStyleTags:

    def test_color(self, engine):
        assert html_of(engine, "[color=Red]x[/color]") == '<span style="color:red">x</span>'

    def test_color_default(self, engine):
        assert html_of(engine, "[color]x[/color]") == '<span style="color:black">x</span>'

    def test_size(self, engine):
        assert html_of(engine, "[size=20]x[/size]") == '<span class="xbbcode-size-20">x</span>'
        assert html_of(engine, "[size=99]x[/size]") == '<span class="xbbcode-size-14">x</span>'

    def test_large_and_small(self, engine):
        assert (
            html_of(engine, "[large=blue]x[/large]")
            == '<span class="xbbcode-size-36" style="color:blue">x</span>'
        )
        assert (
            html_of(engine, "[small]x[/small]")
            == '<span class="xbbcode-size-10" style="color:inherit">x</span>'
        )

    def test_face(self, engine):
        assert html_of(engine, "[face=arial]x[/face]") == '<span style="font-family:arial">x</span>'
        assert (
            html_of(engine, "[font=x;color:red]x[/font]")
            == '<span style="font-family:inherit">x</span>'
        )


class TestLinkTags:

    def test_url_from_content(self, engine):
        assert (
            html_of(engine, "[url]http://example.com[/url]")
            == '<a href="http://example.com" target="_blank">http://example.com</a>'
        )

    def test_url_from_param(self, engine):
        assert (
            html_of(engine, "[url=https://example.com]site[/url]")
            == '<a href="https://example.com" target="_blank">site</a>'
        )

    def test_url_content_markup_ignored(self, engine):
        assert (
            html_of(engine, "[url][b]http://example.com[/b][/url]")
            == '<a href="http://example.com" target="_blank">'
               '<span class="xbbcode-b">http://example.com</span></a>'
        )

    def test_email(self, engine):
        assert (
            html_of(engine, "[email]me@example.com[/email]")
            == '<a href="mailto:me@example.com">me@example.com</a>'
        )

    def test_email_rejects_quotes(self, engine):
        assert (
            html_of(engine, '[email=a"b@x.com]mail[/email]')
            == "<a>mail</a>"
        )

    def test_img(self, engine):
        assert (
            html_of(engine, "[img]http://example.com/cat.png[/img]")
            == '<img src="http://example.com/cat.png" />'
        )

    def test_img_bad_source(self, engine):
        assert html_of(engine, "[img]javascript:alert(1)[/img]") == '<img src="" />'

    def test_url_brackets_and_angles_escaped_once(self, engine):
        """Query strings like a[]=1 keep a single level of escaping"""
        result = engine.process("[url]http://example.com/?a[]=1&b=<2>[/url]")
        assert result.html == (
            '<a href="http://example.com/?a[]=1&amp;b=&lt;2&gt;" target="_blank">'
            'http://example.com/?a[]=1&b=&lt;2&gt;</a>'
        )
        assert result.error is False
        assert "&amp;#" not in result.html
        assert "&amp;lt;" not in result.html

    def test_url_brackets_kept_as_entities(self, engine):
        result = engine.process({
            "text": "[url]http://example.com/?a[]=1[/url]",
            "escapeHtml": True,
        })
        assert result.html == (
            '<a href="http://example.com/?a&#91;&#93;=1" target="_blank">'
            'http://example.com/?a&#91;&#93;=1</a>'
        )

    def test_url_param_angles_escaped_once(self, engine):
        assert (
            html_of(engine, "[url=http://example.com/?b=<2>]x[/url]")
            == '<a href="http://example.com/?b=&lt;2&gt;" target="_blank">x</a>'
        )

    def test_img_source_with_brackets(self, engine):
        assert (
            html_of(engine, "[img]http://example.com/a.png?s=[1][/img]")
            == '<img src="http://example.com/a.png?s=[1]" />'
        )


class TestListAndTableTags:

    def test_ordered_list(self, engine):
        assert html_of(engine, "[ol][*]a[/ol]") == "<ol><li>a</li></ol>"

    def test_li(self, engine):
        assert html_of(engine, "[ul][li]a[/li][/ul]") == "<ul><li>a</li></ul>"

    def test_table(self, engine):
        assert (
            html_of(engine, "[table][tr][td]x[/td][/tr][/table]")
            == '<table class="xbbcode-table"><tr class="xbbcode-tr">'
               '<td class="xbbcode-td">x</td></tr></table>'
        )


class TestCodeTags:

    def test_plain_code(self, engine):
        assert html_of(engine, "[code]x[/code]") == '<span class="xbbcode-code">x</span>'

    def test_highlighted_code(self, engine):
        result = engine.process("[code=python]def f(): pass[/code]")
        assert result.error is False
        assert 'class="highlight"' in result.html
        assert "style=" in result.html
        assert "def" in result.html

    def test_highlight_restores_angles(self, engine):
        result = engine.process("[code=python]a < b[/code]")
        assert "&lt;" in result.html
        assert "&amp;lt;" not in result.html

    def test_php_tag_highlights(self, engine):
        result = engine.process('[php]echo "hi";[/php]')
        assert 'class="highlight"' in result.html
        assert "echo" in result.html

    def test_bbcode_language_uses_custom_lexer(self):
        assert isinstance(CodeTag.lexer_get("bbcode"), BBCodeLexer)

    def test_unknown_language_falls_back(self, engine):
        result = engine.process("[code=nosuchlanguage]x[/code]")
        assert 'class="highlight"' in result.html

    def test_highlighted_markup_not_misaligned(self, engine):
        result = engine.process("[code=bbcode][b]x[/b][/code]")
        assert result.error is False
        assert "<span" in result.html


class TestCatalogShape:

    def test_fresh_definitions_each_call(self):
        first = {tag.name: tag for tag in builtinTags_make()}
        second = {tag.name: tag for tag in builtinTags_make()}
        assert first["b"] is not second["b"]

    def test_settings_drive_catalog(self):
        """Star name, root name and highlight style come from the given settings"""
        settings = AppSettings(star_tag="#", root_tag="doc", pygments_style="monokai")
        tags = {tag.name: tag for tag in builtinTags_make(settings)}
        assert "#" in tags and "*" not in tags
        assert "doc" in tags and "bbcode" not in tags
        assert tags["list"].restrict_children_to == frozenset({"#", "li"})
        assert tags["code"].style == "monokai"

    def test_img_hides_content(self):
        tags = {tag.name: tag for tag in builtinTags_make()}
        assert tags["img"].display_content is False
        assert tags["code"].no_parse is True
