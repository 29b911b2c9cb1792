"""Lexer adapter turning markdown-it-py output into changelog tokens."""

from __future__ import annotations

import re
from collections.abc import Sequence

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

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
)

# Matches the bullet (or number) of a list item plus the single space after it
LIST_MARKER_PATTERN = re.compile(r"^(\s*(?:[-*+]|\d{1,9}[.)])[ \t]?)")

_parser = MarkdownIt("commonmark")


def lexify(text: str) -> Tokens:
    """Receive markdown text and return a list of tokens."""
    # Split on line feeds only, matching how markdown-it numbers lines in `node.map`
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = text.split("\n")
    root = SyntaxTreeNode(_parser.parse(text))
    tokens = _convert_nodes(root.children, lines, top_level=True)
    fix_list_depths(tokens)
    return tokens


def fix_list_depths(tokens: Sequence[Token], list_depth: int = 0) -> None:
    """Assign list and list item depths in place.

    markdown-it does not report nesting depth, so every list met at call depth
    `d` gets depth `d` and the children of its items are visited with `d + 1`.
    """
    for token in tokens:
        if token.type is TokenType.LIST:
            token.depth = list_depth
            for item in token.items:
                item.depth = list_depth
                fix_list_depths(item.tokens, list_depth + 1)


def _convert_nodes(
    nodes: Sequence[SyntaxTreeNode], lines: list[str], *, top_level: bool = False
) -> Tokens:
    tokens: Tokens = []
    for index, node in enumerate(nodes):
        token = _convert_node(node, lines)
        tokens.append(token)

        if not top_level or index + 1 == len(nodes):
            continue

        has_gap = _has_blank_lines_between(node, nodes[index + 1])
        if token.type is TokenType.CODE:
            # The closing fence needs its own line break before the next block
            tokens.append(SpaceToken())
            if has_gap:
                tokens.append(SpaceToken())
        elif token.type is TokenType.PARAGRAPH and has_gap:
            tokens.append(SpaceToken())
    return tokens


def _convert_node(node: SyntaxTreeNode, lines: list[str]) -> Token:
    if node.type == "heading":
        return HeadingToken(depth=int(node.tag[1:]), text=_inline_text(node))

    if node.type == "paragraph":
        if node.hidden:
            # Paragraphs of tight list items
            return TextToken(text=_inline_text(node))
        return ParagraphToken(text=_inline_text(node))

    if node.type in ("bullet_list", "ordered_list"):
        items = [
            ListItemToken(
                depth=0,
                text=_list_item_text(child, lines),
                tokens=_convert_nodes(child.children, lines),
            )
            for child in node.children
        ]
        return ListToken(depth=0, items=items, ordered=node.type == "ordered_list")

    if node.type in ("fence", "code_block"):
        lang = node.info.strip() if node.type == "fence" else ""
        return CodeToken(text=node.content.removesuffix("\n"), lang=lang)

    return RawToken(type=node.type, text=_source_text(node, lines))


def _inline_text(node: SyntaxTreeNode) -> str:
    if not node.children:
        return ""
    return node.children[0].content.strip()


def _source_text(node: SyntaxTreeNode, lines: list[str]) -> str:
    if node.map is None:
        return node.content
    start, end = node.map
    return "\n".join(lines[start:end]).rstrip()


def _list_item_text(node: SyntaxTreeNode, lines: list[str]) -> str:
    """Return the source of a list item without its marker.

    Continuation lines are dedented by the marker width, so nested lists keep
    their own markers relative to the item.
    """
    if node.map is None:
        return ""

    start, end = node.map
    item_lines = lines[start:end]
    if not item_lines:
        return ""

    match = LIST_MARKER_PATTERN.match(item_lines[0])
    width = len(match.group(1)) if match else 0

    result = [item_lines[0][width:]]
    for line in item_lines[1:]:
        if line[:width].strip():
            result.append(line.lstrip())
        else:
            result.append(line[width:])
    return "\n".join(result).rstrip()


def _has_blank_lines_between(node: SyntaxTreeNode, next_node: SyntaxTreeNode) -> bool:
    if node.map is None or next_node.map is None:
        return False
    return next_node.map[0] > node.map[1]
