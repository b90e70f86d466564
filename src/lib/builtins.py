"""
Built-in tag catalog for bbdown

Every tag here implements the same TagDefinition contract available to
embedding applications. Tags that put a parameter into an HTML attribute
validate it against an allow-pattern and fall back to a safe default, and
the value is attribute-escaped as well.
"""

import html
import re
from typing import Callable, List, Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, TextLexer
from pygments.util import ClassNotFound

from ..config import appsettings, AppSettings
from ..models.tags import RenderFunction, TagCategory, TagDefinition
from .escaper import brackets_escape, markup_restore
from .lexer import get_lexer


URL_PATTERN = re.compile(
    r'^(?:https?|file|c):(?:/{1,3}|\\{1})[-a-zA-Z0-9:;,@#%&()~_?+=/\\.\[\]<>]*$'
)
COLOR_NAME_PATTERN = re.compile(
    r'^(?:aliceblue|antiquewhite|aqua|aquamarine|azure|beige|bisque|black|blanchedalmond|'
    r'blue|blueviolet|brown|burlywood|cadetblue|chartreuse|chocolate|coral|cornflowerblue|'
    r'cornsilk|crimson|cyan|darkblue|darkcyan|darkgoldenrod|darkgray|darkgreen|darkkhaki|'
    r'darkmagenta|darkolivegreen|darkorange|darkorchid|darkred|darksalmon|darkseagreen|'
    r'darkslateblue|darkslategray|darkturquoise|darkviolet|deeppink|deepskyblue|dimgray|'
    r'dodgerblue|firebrick|floralwhite|forestgreen|fuchsia|gainsboro|ghostwhite|gold|'
    r'goldenrod|gray|green|greenyellow|honeydew|hotpink|indianred|indigo|ivory|khaki|'
    r'lavender|lavenderblush|lawngreen|lemonchiffon|lightblue|lightcoral|lightcyan|'
    r'lightgoldenrodyellow|lightgray|lightgreen|lightpink|lightsalmon|lightseagreen|'
    r'lightskyblue|lightslategray|lightsteelblue|lightyellow|lime|limegreen|linen|magenta|'
    r'maroon|mediumaquamarine|mediumblue|mediumorchid|mediumpurple|mediumseagreen|'
    r'mediumslateblue|mediumspringgreen|mediumturquoise|mediumvioletred|midnightblue|'
    r'mintcream|mistyrose|moccasin|navajowhite|navy|oldlace|olive|olivedrab|orange|'
    r'orangered|orchid|palegoldenrod|palegreen|paleturquoise|palevioletred|papayawhip|'
    r'peachpuff|peru|pink|plum|powderblue|purple|red|rosybrown|royalblue|saddlebrown|'
    r'salmon|sandybrown|seagreen|seashell|sienna|silver|skyblue|slateblue|slategray|snow|'
    r'springgreen|steelblue|tan|teal|thistle|tomato|turquoise|violet|wheat|white|'
    r'whitesmoke|yellow|yellowgreen)$'
)
COLOR_CODE_PATTERN = re.compile(r'^#?[a-fA-F0-9]{6}$')
EMAIL_PATTERN = re.compile(r'^[^\s@"\'<>&]+@[^\s@"\'<>&]+\.[^\s@"\'<>&]+$')
FONT_FACE_PATTERN = re.compile(r'^([a-z][a-z0-9_]+|"[a-z][a-z0-9_\s]+")$', re.IGNORECASE)
LANGUAGE_PATTERN = re.compile(r'^[a-z0-9_+#.-]+$', re.IGNORECASE)
SIZE_PATTERN = re.compile(r'^\s*([+-]?\d+)')
MARKUP_PATTERN = re.compile(r'<.*?>')

SIZE_MIN = 4
SIZE_MAX = 40
SIZE_DEFAULT = 14


def param_value(params: str) -> str:
    """Value part of a raw parameter string: "=red" -> "red" """
    return params[1:] if params else ""


def attribute_escape(value: str) -> str:
    """
    Escape a decoded value for use inside a double-quoted HTML attribute

    Brackets are kept as &#91; / &#93; so they are not mistaken for
    leftover markers.
    """
    return brackets_escape(html.escape(value, quote=True))


def color_validate(value: str, default: str) -> str:
    """
    Accept a CSS color name or a 6-digit hex code, else return default

    Example:
        >>> color_validate("ff0000", "black")
        '#ff0000'
        >>> color_validate("javascript:alert(1)", "black")
        'black'
    """
    if COLOR_NAME_PATTERN.match(value):
        return value
    if COLOR_CODE_PATTERN.match(value):
        return value if value.startswith('#') else '#' + value
    return default


def size_validate(value: str) -> int:
    """Font size in the 4-40 range, else 14"""
    match = SIZE_PATTERN.match(value)
    size = int(match.group(1)) if match else 0
    if size < SIZE_MIN or size > SIZE_MAX:
        return SIZE_DEFAULT
    return size


def url_validate(value: str, default: str) -> str:
    """Accept http(s)/file URLs only, else return default"""
    return value if URL_PATTERN.match(value) else default


def fixed(fragment: str) -> RenderFunction:
    """Render function that always returns the same fragment"""
    def render(params: str, content: str) -> str:
        return fragment
    return render


class CodeTag(TagDefinition):
    """
    No-parse code tag with optional Pygments highlighting

    [code]x[/code] renders <span class="xbbcode-code">x</span>.
    [code=python]...[/code] (or a tag created with a default language, like
    [php]) renders a highlighted block with inline styles. The body is
    rendered inside open_render, so display_content is always False.
    """

    def __init__(
        self,
        name: str,
        language: Optional[str] = None,
        style: str = "default",
        **kwargs,
    ):
        kwargs.setdefault('category', TagCategory.LITERAL)
        super().__init__(name=name, no_parse=True, display_content=False, **kwargs)
        self.language = language
        self.style = style

    def language_get(self, params: str) -> Optional[str]:
        """Requested language, or the tag default"""
        requested = param_value(params).strip()
        if requested and LANGUAGE_PATTERN.match(requested):
            return requested.lower()
        return self.language

    def open_render(self, params: str, content: str) -> str:
        language = self.language_get(params)
        if language is None:
            return f'<span class="xbbcode-code">{content}</span>'
        return self.code_highlight(markup_restore(content), language)

    def close_render(self, params: str, content: str) -> str:
        return ""

    @staticmethod
    def lexer_get(language: str) -> Lexer:
        """Lexer for language, falling back to plain text"""
        if language in ('bbcode', 'bbdown'):
            return get_lexer()
        try:
            if language == 'php':
                return get_lexer_by_name(language, startinline=True)
            return get_lexer_by_name(language)
        except ClassNotFound:
            return TextLexer()

    def code_highlight(self, code: str, language: str) -> str:
        """
        Highlight code with inline styles

        Brackets in the highlighted HTML are entity-escaped so they read as
        literal text, not as leftover markers.
        """
        formatter = HtmlFormatter(style=self.style, noclasses=True)
        return brackets_escape(highlight(code, self.lexer_get(language), formatter))


def formattingTags_make() -> List[TagDefinition]:
    """Simple span/element wrappers"""
    formatting_specs = [
        ('b', '<span class="xbbcode-b">', '</span>', 'Bold text'),
        ('i', '<span class="xbbcode-i">', '</span>', 'Italic text'),
        ('u', '<span class="xbbcode-u">', '</span>', 'Underlined text'),
        ('s', '<span class="xbbcode-s">', '</span>', 'Strike-through text'),
        ('sub', '<sub>', '</sub>', 'Subscript'),
        ('sup', '<sup>', '</sup>', 'Superscript'),
    ]
    return [
        TagDefinition(
            name=name,
            open_tag=fixed(open_html),
            close_tag=fixed(close_html),
            category=TagCategory.INLINE,
            description=desc,
            examples=[f'[{name}]text[/{name}]'],
        )
        for name, open_html, close_html, desc in formatting_specs
    ]


def alignmentTags_make() -> List[TagDefinition]:
    """Alignment wrappers and block quotes"""
    tags = [
        TagDefinition(
            name=name,
            open_tag=fixed(f'<span class="xbbcode-{name}">'),
            close_tag=fixed('</span>'),
            category=TagCategory.BLOCK,
            description=f'{name.capitalize()}-aligned text',
            examples=[f'[{name}]text[/{name}]'],
        )
        for name in ('center', 'left', 'right', 'justify')
    ]
    tags.append(TagDefinition(
        name='quote',
        open_tag=fixed('<blockquote class="xbbcode-blockquote">'),
        close_tag=fixed('</blockquote>'),
        category=TagCategory.BLOCK,
        description='Block quotation',
        examples=['[quote]Someone said this[/quote]'],
    ))
    return tags


def styleTags_make() -> List[TagDefinition]:
    """Tags whose parameter ends up in a style attribute"""

    def color_open(params: str, content: str) -> str:
        color = color_validate(param_value(params).lower() or 'black', 'black')
        return f'<span style="color:{attribute_escape(color)}">'

    def sized_color_open(size_class: str) -> RenderFunction:
        def render(params: str, content: str) -> str:
            color = color_validate(param_value(params) or 'inherit', 'inherit')
            return f'<span class="{size_class}" style="color:{attribute_escape(color)}">'
        return render

    def face_open(params: str, content: str) -> str:
        face = param_value(params) or 'inherit'
        if not FONT_FACE_PATTERN.match(face):
            face = 'inherit'
        return f'<span style="font-family:{attribute_escape(face)}">'

    def size_open(params: str, content: str) -> str:
        return f'<span class="xbbcode-size-{size_validate(param_value(params))}">'

    close_span = fixed('</span>')

    return [
        TagDefinition(
            name='color', open_tag=color_open, close_tag=close_span,
            description='Colored text (CSS color name or hex code, default black)',
            examples=['[color=red]text[/color]', '[color=#00ff00]text[/color]'],
        ),
        TagDefinition(
            name='face', open_tag=face_open, close_tag=close_span,
            description='Font family',
            examples=['[face=arial]text[/face]'],
        ),
        TagDefinition(
            name='font', open_tag=face_open, close_tag=close_span,
            description='Font family (alias of face)',
            examples=['[font="comic sans"]text[/font]'],
        ),
        TagDefinition(
            name='size', open_tag=size_open, close_tag=close_span,
            description='Font size 4-40 (default 14)',
            examples=['[size=20]text[/size]'],
        ),
        TagDefinition(
            name='large', open_tag=sized_color_open('xbbcode-size-36'), close_tag=close_span,
            description='Large text with optional color',
            examples=['[large=red]text[/large]'],
        ),
        TagDefinition(
            name='small', open_tag=sized_color_open('xbbcode-size-10'), close_tag=close_span,
            description='Small text with optional color',
            examples=['[small]text[/small]'],
        ),
    ]


def linkTags_make() -> List[TagDefinition]:
    """Links and embedded images"""

    def url_open(params: str, content: str) -> str:
        target = param_value(params) if params else MARKUP_PATTERN.sub('', content)
        target = url_validate(markup_restore(target), '#')
        return f'<a href="{attribute_escape(target)}" target="_blank">'

    def email_open(params: str, content: str) -> str:
        address = param_value(params) if params else MARKUP_PATTERN.sub('', content)
        if not EMAIL_PATTERN.match(address):
            return '<a>'
        return f'<a href="mailto:{attribute_escape(address)}">'

    def img_open(params: str, content: str) -> str:
        source = url_validate(markup_restore(content), '')
        return f'<img src="{attribute_escape(source)}" />'

    return [
        TagDefinition(
            name='url', open_tag=url_open, close_tag=fixed('</a>'),
            category=TagCategory.LINK,
            description='Hyperlink (target from parameter or content)',
            examples=['[url]http://example.com[/url]', '[url=http://example.com]site[/url]'],
        ),
        TagDefinition(
            name='email', open_tag=email_open, close_tag=fixed('</a>'),
            category=TagCategory.LINK,
            description='mailto: link (address from parameter or content)',
            examples=['[email]me@example.com[/email]'],
        ),
        TagDefinition(
            name='img', open_tag=img_open,
            category=TagCategory.MEDIA,
            description='Image - the body is the image URL',
            display_content=False,
            examples=['[img]http://example.com/cat.png[/img]'],
        ),
    ]


def listTags_make(star_tag: str = '*') -> List[TagDefinition]:
    """Lists and list items"""
    list_parents = ['list', 'ul', 'ol']
    item_children = [star_tag, 'li']

    tags = [
        TagDefinition(
            name=name,
            open_tag=fixed(f'<{element}>'),
            close_tag=fixed(f'</{element}>'),
            category=TagCategory.LIST,
            description=desc,
            restrict_children_to=frozenset(item_children),
            examples=[f'[{name}][{star_tag}]one[{star_tag}]two[/{name}]'],
        )
        for name, element, desc in [
            ('list', 'ul', 'Unordered list'),
            ('ul', 'ul', 'Unordered list'),
            ('ol', 'ol', 'Ordered list'),
        ]
    ]
    for name, desc in [('li', 'List item'), (star_tag, 'List item shorthand (no closing tag)')]:
        tags.append(TagDefinition(
            name=name,
            open_tag=fixed('<li>'),
            close_tag=fixed('</li>'),
            category=TagCategory.LIST,
            description=desc,
            restrict_parents_to=frozenset(list_parents),
        ))
    return tags


def tableTags_make() -> List[TagDefinition]:
    """Tables and their sections"""
    table_specs = [
        # name, open, children, parents
        ('table', '<table class="xbbcode-table">', ['tbody', 'thead', 'tfoot', 'tr'], []),
        ('tbody', '<tbody>', ['tr'], ['table']),
        ('tfoot', '<tfoot>', ['tr'], ['table']),
        ('thead', '<thead class="xbbcode-thead">', ['tr'], ['table']),
        ('tr', '<tr class="xbbcode-tr">', ['td', 'th'], ['table', 'tbody', 'tfoot', 'thead']),
        ('td', '<td class="xbbcode-td">', [], ['tr']),
        ('th', '<th class="xbbcode-th">', [], ['tr']),
    ]
    return [
        TagDefinition(
            name=name,
            open_tag=fixed(open_html),
            close_tag=fixed(f'</{name}>'),
            category=TagCategory.TABLE,
            description=f'Table element <{name}>',
            restrict_children_to=frozenset(children),
            restrict_parents_to=frozenset(parents),
        )
        for name, open_html, children, parents in table_specs
    ]


def literalTags_make(style: str = "default") -> List[TagDefinition]:
    """Tags whose content is shown verbatim"""
    return [
        CodeTag(
            'code', style=style,
            description='Code (literal); [code=language] highlights with Pygments',
            examples=['[code]x = [1, 2][/code]', '[code=python]def f(): pass[/code]'],
        ),
        CodeTag(
            'php', language='php', style=style,
            description='Highlighted PHP code (literal)',
            examples=['[php]echo "hi";[/php]'],
        ),
        TagDefinition(
            name='noparse',
            category=TagCategory.LITERAL,
            description='Show markup verbatim',
            no_parse=True,
            examples=['[noparse][b]not bold[/b][/noparse]'],
        ),
    ]


def structuralTags_make(root_tag: str = "bbcode") -> List[TagDefinition]:
    """The document root classification tag"""
    return [
        TagDefinition(
            name=root_tag,
            category=TagCategory.STRUCTURAL,
            description='Renders nothing; names the document root for nesting rules',
        ),
    ]


def builtinTags_make(settings: Optional[AppSettings] = None) -> List[TagDefinition]:
    """
    Build the full built-in catalog

    A fresh set of definitions is returned on each call, so registries
    never share mutable TagDefinition objects.

    Args:
        settings: Supplies the root and star tag names and the Pygments
                  style (defaults to the module singleton)
    """
    settings = settings or appsettings
    tags: List[TagDefinition] = []
    makers: List[Callable[[], List[TagDefinition]]] = [
        formattingTags_make,
        lambda: structuralTags_make(settings.root_tag),
        alignmentTags_make,
        styleTags_make,
        linkTags_make,
        lambda: literalTags_make(settings.pygments_style),
        lambda: listTags_make(settings.star_tag),
        tableTags_make,
    ]
    for make in makers:
        tags.extend(make())
    return tags
