"""
Transformer tests - inside-out rendering of annotated occurrences

Tests that:
- Open and close render calls see the same processed content
- Children render before their parents
- display_content=False drops the content but still computes it
- No-parse content is shown verbatim
- Failing tag implementations raise RenderError
- Deep nesting renders without hitting the recursion limit
"""

import pytest

from bbdown.config import AppSettings
from bbdown.lib.annotator import DepthAnnotator
from bbdown.lib.errors import RenderError
from bbdown.lib.escaper import Escaper
from bbdown.lib.registry import TagRegistry
from bbdown.lib.stars import StarRewriter
from bbdown.lib.transformer import Transformer
from bbdown.models.tags import TagDefinition


def render(tagset, source: str) -> str:
    text = StarRewriter(tagset).rewrite(Escaper(tagset).escape(source))
    annotated = DepthAnnotator(tagset).annotate(text)
    return Transformer(tagset).transform(annotated)


def recording_tag(name: str, calls: list, **kwargs) -> TagDefinition:
    """Tag that records (which, name, params, content) for every render call"""

    def open_tag(params, content):
        calls.append(("open", name, params, content))
        return f"<{name}>"

    def close_tag(params, content):
        calls.append(("close", name, params, content))
        return f"</{name}>"

    return TagDefinition(name=name, open_tag=open_tag, close_tag=close_tag, **kwargs)


class TestRenderContract:

    def test_same_content_to_open_and_close(self):
        calls = []
        registry = TagRegistry([recording_tag("x", calls)])
        assert render(registry.tagset_make(), "[x=1]hi[/x]") == "<x>hi</x>"
        assert calls == [("open", "x", "=1", "hi"), ("close", "x", "=1", "hi")]

    def test_children_render_first(self):
        calls = []
        registry = TagRegistry([recording_tag("outer", calls), recording_tag("inner", calls)])
        html = render(registry.tagset_make(), "[outer]a[inner]b[/inner]c[/outer]")
        assert html == "<outer>a<inner>b</inner>c</outer>"
        assert [(which, name) for which, name, _, _ in calls] == [
            ("open", "inner"),
            ("close", "inner"),
            ("open", "outer"),
            ("close", "outer"),
        ]
        assert calls[2][3] == "a<inner>b</inner>c"

    def test_hidden_content_still_passed(self):
        calls = []
        registry = TagRegistry([recording_tag("hide", calls, display_content=False)])
        assert render(registry.tagset_make(), "[hide]secret[/hide]") == "<hide></hide>"
        assert calls[0][3] == "secret"

    def test_text_outside_tags_kept(self):
        calls = []
        registry = TagRegistry([recording_tag("x", calls)])
        assert render(registry.tagset_make(), "a [x]b[/x] c") == "a <x>b</x> c"


class TestBuiltinRendering:

    @pytest.fixture
    def tagset(self):
        return TagRegistry().tagset_make()

    def test_bold(self, tagset):
        assert render(tagset, "[b]x[/b]") == '<span class="xbbcode-b">x</span>'

    def test_nested(self, tagset):
        assert (
            render(tagset, "[quote][i]x[/i][/quote]")
            == '<blockquote class="xbbcode-blockquote"><span class="xbbcode-i">x</span></blockquote>'
        )

    def test_noparse_literal(self, tagset):
        assert render(tagset, "[noparse][b]x[/b][/noparse]") == "&#91;b&#93;x&#91;/b&#93;"

    def test_code_literal(self, tagset):
        assert (
            render(tagset, "[code][i]x[/i][/code]")
            == '<span class="xbbcode-code">&#91;i&#93;x&#91;/i&#93;</span>'
        )

    def test_unmatched_markers_left_in_place(self, tagset):
        assert render(tagset, "[b]x") == "[b]x"

    def test_unpaired_item_close_dropped(self, tagset):
        assert render(tagset, "[list][*]a[*][b]b[/list]") == "[list]<li>a</li>[*][b]b[/list]"

    def test_deep_nesting_rendered_iteratively(self):
        tagset = TagRegistry(settings=AppSettings(max_nesting_depth=1500)).tagset_make()
        text = Escaper(tagset).escape("[i]" * 1200 + "x" + "[/i]" * 1200)
        annotated = DepthAnnotator(tagset, AppSettings(max_nesting_depth=1500)).annotate(text)
        html = Transformer(tagset).transform(annotated)
        assert html == '<span class="xbbcode-i">' * 1200 + "x" + "</span>" * 1200


class TestPostorder:

    def test_children_before_parents(self):
        tagset = TagRegistry().tagset_make()
        annotated = DepthAnnotator(tagset).annotate("[quote][b]x[/b][i]y[/i][/quote][u]z[/u]")
        order = [o.name for o in Transformer.occurrences_postorder(annotated.occurrences)]
        assert order == ["b", "i", "quote", "u"]


class TestRenderErrors:

    def test_failing_open_raises(self):
        def broken(params, content):
            raise ValueError("boom")

        registry = TagRegistry([TagDefinition(name="bad", open_tag=broken)])
        with pytest.raises(RenderError) as excinfo:
            render(registry.tagset_make(), "[bad]x[/bad]")
        assert excinfo.value.tag_name == "bad"
        assert "boom" in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, ValueError)
