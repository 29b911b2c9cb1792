"""Markdown lexing and rendering for changelog documents."""

from .lexer import fix_list_depths, lexify
from .renderer import MarkdownRenderer, RenderingContext, UnsupportedTokenKindError, render
from .tokens import (
    CodeToken,
    HeadingToken,
    ListItemToken,
    ListToken,
    ParagraphToken,
    RawToken,
    SpaceToken,
    TextToken,
    Token,
    Tokens,
    TokenType,
    create_list_item_token,
    create_list_token,
    create_text_token,
)

__all__ = [
    "CodeToken",
    "HeadingToken",
    "ListItemToken",
    "ListToken",
    "MarkdownRenderer",
    "ParagraphToken",
    "RawToken",
    "RenderingContext",
    "SpaceToken",
    "TextToken",
    "Token",
    "TokenType",
    "Tokens",
    "UnsupportedTokenKindError",
    "create_list_item_token",
    "create_list_token",
    "create_text_token",
    "fix_list_depths",
    "lexify",
    "render",
]
