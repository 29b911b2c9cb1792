"""Renderer writing changelog tokens back to markdown."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from ..errors import ChangelogError
from .tokens import (
    CodeToken,
    HeadingToken,
    ListItemToken,
    ListToken,
    ParagraphToken,
    SpaceToken,
    TextToken,
    Token,
    Tokens,
    TokenType,
)

EOL = "\n"
INDENT = "  "

# Only the basic entities are decoded, anything else (like `&copy` in URLs) is kept
HTML_ENTITIES = {"&amp;": "&", "&lt;": "<", "&gt;": ">", "&quot;": '"', "&#39;": "'"}
HTML_ENTITY_PATTERN = re.compile("|".join(map(re.escape, HTML_ENTITIES)))


class UnsupportedTokenKindError(ChangelogError):
    """Raised when the renderer meets a token outside the changelog model."""

    def __init__(self, token_type: object):
        self.token_type = token_type
        super().__init__(f"Cannot render token with type: {token_type}")


@dataclass(frozen=True)
class RenderingContext:
    """Per-token rendering state passed down the tree."""

    indent: int = 0
    ordered_list: bool = False
    item_index: int = 1


class MarkdownRenderer:
    """Renders tokens to markdown.

    Only the seven token types of the changelog model are supported; anything
    else raises `UnsupportedTokenKindError`.
    """

    def render(self, tokens: Tokens) -> str:
        return "".join(self.render_token(token, RenderingContext()) for token in tokens)

    def render_token(self, token: Token, ctx: RenderingContext) -> str:
        if token.type is TokenType.HEADING:
            return self.heading(token)
        if token.type is TokenType.LIST:
            return self.list(token, ctx)
        if token.type is TokenType.LIST_ITEM:
            return self.list_item(token, ctx)
        if token.type is TokenType.PARAGRAPH:
            return self.paragraph(token)
        if token.type is TokenType.TEXT:
            return self.text(token)
        if token.type is TokenType.SPACE:
            return self.space(token)
        if token.type is TokenType.CODE:
            return self.code(token, ctx)
        raise UnsupportedTokenKindError(token.type)

    def indent(self, depth: int, indent_str: str = INDENT) -> str:
        return indent_str * depth if depth else ""

    def heading(self, token: HeadingToken) -> str:
        return self.indent(token.depth, "#") + " " + token.text + EOL * 2

    def list(self, token: ListToken, ctx: RenderingContext) -> str:
        output = ""
        for index, item in enumerate(token.items, start=1):
            output += self.list_item(
                item, replace(ctx, ordered_list=token.ordered, item_index=index)
            )
        return output + EOL

    def list_item(self, token: ListItemToken, ctx: RenderingContext) -> str:
        bullet = f"{ctx.item_index}." if ctx.ordered_list else "-"
        output = self.indent(ctx.indent) + bullet + " "

        child_ctx = replace(ctx, indent=ctx.indent + 1)
        for child in token.tokens:
            output += self.render_token(child, child_ctx).rstrip() + EOL
        return output.rstrip() + EOL

    def paragraph(self, token: ParagraphToken) -> str:
        return token.text + EOL

    def text(self, token: TextToken) -> str:
        return token.text

    def space(self, token: SpaceToken) -> str:
        return EOL

    def code(self, token: CodeToken, ctx: RenderingContext) -> str:
        indent_str = self.indent(ctx.indent)
        lines = ["```" + token.lang, *token.text.split(EOL), "```"]
        return indent_str + (EOL + indent_str).join(lines)


def render(tokens: Tokens, renderer: MarkdownRenderer | None = None) -> str:
    """Render tokens to markdown ending with exactly one newline."""
    renderer = renderer or MarkdownRenderer()
    return unescape(renderer.render(tokens).rstrip() + EOL)


def unescape(text: str) -> str:
    """Decode `&amp;`, `&lt;`, `&gt;`, `&quot;` and `&#39;` in the text."""
    return HTML_ENTITY_PATTERN.sub(lambda match: HTML_ENTITIES[match.group(0)], text)
