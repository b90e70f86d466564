"""
Custom Pygments lexer for BBCode tag markup

Used by [code=bbcode] to show tag markup with highlighting.

Token types:
- Name.Tag: Tag names (e.g., b, color, list)
- Punctuation: Brackets and the closing slash
- Operator: The = introducing a parameter
- Literal.String: Parameter values
- Keyword: The [*] list-item shorthand
- String: Content of literal tags ([code], [php], [noparse])
- Text: Everything else
"""

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Keyword,
    Literal,
    Operator,
)


_LITERAL_TAGS = r'((?i:code|php|noparse))'


class BBCodeLexer(RegexLexer):
    """
    Lexer for BBCode markup

    Example:
        [color=red]Hello [b]world[/b][/color]

    Tokens:
        [ → Punctuation
        color → Name.Tag
        = → Operator
        red → Literal.String
        ] → Punctuation
    """

    name = 'BBCode'
    aliases = ['bbdown']
    filenames = ['*.bbcode']

    tokens = {
        'root': [
            # Literal tags - body is not markup until the matching close
            (r'(\[)' + _LITERAL_TAGS + r'((?:=[^\]]*)?)(\])',
             bygroups(Punctuation, Name.Tag, Literal.String, Punctuation), 'literal'),

            # List-item shorthand
            (r'(\[)(\*)(\])', bygroups(Punctuation, Keyword, Punctuation)),

            # Closing tag
            (r'(\[)(/)(\*|[a-zA-Z]\w*)(\])',
             bygroups(Punctuation, Punctuation, Name.Tag, Punctuation)),

            # Opening tag with =value parameter
            (r'(\[)([a-zA-Z]\w*)(=)([^\]]*)(\])',
             bygroups(Punctuation, Name.Tag, Operator, Literal.String, Punctuation)),

            # Opening tag with space-separated attributes (or none)
            (r'(\[)([a-zA-Z]\w*)(\s[^\]]*)?(\])',
             bygroups(Punctuation, Name.Tag, Name.Attribute, Punctuation)),

            # Everything else is text
            (r'[^\[]+', Text),
            (r'\[', Text),
        ],

        'literal': [
            (r'(\[)(/)' + _LITERAL_TAGS + r'(\])',
             bygroups(Punctuation, Punctuation, Name.Tag, Punctuation), '#pop'),
            (r'[^\[]+', String),
            (r'\[', String),
        ],
    }


def get_lexer() -> BBCodeLexer:
    """
    Get the BBCodeLexer instance

    Returns:
        BBCodeLexer instance ready for use with Pygments
    """
    return BBCodeLexer()
