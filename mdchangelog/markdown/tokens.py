"""Token model for the subset of markdown used by changelogs."""

from dataclasses import dataclass, field
from enum import Enum


class TokenType(Enum):
    """Kinds of tokens the renderer knows how to write back."""

    HEADING = "heading"
    LIST = "list"
    LIST_ITEM = "list_item"
    PARAGRAPH = "paragraph"
    TEXT = "text"
    SPACE = "space"
    CODE = "code"


@dataclass
class HeadingToken:
    """A `#`-style heading. Depth is the heading level."""

    depth: int
    text: str
    type: TokenType = field(default=TokenType.HEADING, init=False)


@dataclass
class ListItemToken:
    """A single list item and the block tokens it contains."""

    depth: int
    text: str
    tokens: list["Token"] = field(default_factory=list)
    type: TokenType = field(default=TokenType.LIST_ITEM, init=False)


@dataclass
class ListToken:
    """An ordered or unordered list. Depth 0 is a top-level list."""

    depth: int
    items: list[ListItemToken] = field(default_factory=list)
    ordered: bool = False
    type: TokenType = field(default=TokenType.LIST, init=False)


@dataclass
class ParagraphToken:
    text: str
    type: TokenType = field(default=TokenType.PARAGRAPH, init=False)


@dataclass
class TextToken:
    text: str
    type: TokenType = field(default=TokenType.TEXT, init=False)


@dataclass
class SpaceToken:
    type: TokenType = field(default=TokenType.SPACE, init=False)


@dataclass
class CodeToken:
    """Fenced code block. `lang` is the info string after the opening fence."""

    text: str
    lang: str = ""
    type: TokenType = field(default=TokenType.CODE, init=False)


@dataclass
class RawToken:
    """A block the changelog model does not cover (blockquote, html, hr, ...).

    `type` holds the markdown-it node type rather than a `TokenType`, so the
    renderer refuses to write it.
    """

    type: str
    text: str = ""


Token = (
    HeadingToken
    | ListToken
    | ListItemToken
    | ParagraphToken
    | TextToken
    | SpaceToken
    | CodeToken
    | RawToken
)

Tokens = list[Token]


def create_text_token(text: str) -> TextToken:
    """Return a text token with the given text."""
    return TextToken(text=text)


def create_list_token(depth: int = 0) -> ListToken:
    """Return an empty unordered list at the given depth."""
    return ListToken(depth=depth)


def create_list_item_token(text: str, depth: int = 0) -> ListItemToken:
    """Return a list item holding a single text token."""
    return ListItemToken(depth=depth, text=text, tokens=[create_text_token(text)])
