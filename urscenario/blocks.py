"""
Balanced block scanning for scenario notation.

A block is a keyword (optionally followed by a parenthesised argument
list) and a brace-delimited body:

    scenario("title") { domain { klass("Light") { ... } } steps { ... } }

The scanner walks the text once, skipping string literals, ``[[ ... ]]``
raw blocks and comments, and records every block with its exact inner
body. It runs before the grammar so that brace mistakes are reported by
block name instead of as a generic syntax error.
"""
from typing import List, NamedTuple, Tuple

from urscenario.errors import (
    MissingBlockError,
    UnbalancedBlockError,
    get_line_context,
    line_of_offset,
)

REQUIRED_SECTIONS = ("domain", "steps")


class Block(NamedTuple):
    keyword: str
    depth: int
    open_offset: int  # index of '{'
    close_offset: int  # index of the matching '}'

    def body(self, source):
        return source[self.open_offset + 1:self.close_offset]


def _skip_string(source, i):
    """Return the index just past the string literal starting at i."""
    n = len(source)
    i += 1
    while i < n:
        ch = source[i]
        if ch == '\\':
            i += 2
            continue
        if ch == '"':
            return i + 1
        i += 1
    return n


def _skip_until(source, i, terminator):
    end = source.find(terminator, i)
    return len(source) if end < 0 else end + len(terminator)


def scan_blocks(source: str) -> List[Block]:
    """Find every block in the text, outermost first by opening offset."""
    blocks = []
    stack: List[Tuple[str, int]] = []
    pending = None  # last identifier seen outside any argument list
    paren_depth = 0
    i = 0
    n = len(source)

    while i < n:
        ch = source[i]
        if ch == '"':
            i = _skip_string(source, i)
            continue
        if source.startswith("[[", i):
            i = _skip_until(source, i + 2, "]]")
            continue
        if source.startswith("//", i) or ch == '#':
            i = _skip_until(source, i, "\n")
            continue
        if source.startswith("/*", i):
            i = _skip_until(source, i + 2, "*/")
            continue

        if ch.isalpha() or ch == '_':
            start = i
            while i < n and (source[i].isalnum() or source[i] == '_'):
                i += 1
            if paren_depth == 0:
                pending = source[start:i]
            continue

        if ch == '(':
            paren_depth += 1
        elif ch == ')':
            paren_depth = max(paren_depth - 1, 0)
        elif ch == '{':
            stack.append((pending or "<anonymous>", i))
            pending = None
        elif ch == '}':
            if not stack:
                line = line_of_offset(source, i)
                raise UnbalancedBlockError(
                    "Unexpected '}' with no open block",
                    line_number=line,
                    context=get_line_context(source, line),
                    suggestion="Remove the extra '}'",
                )
            keyword, open_offset = stack.pop()
            blocks.append(Block(keyword, len(stack), open_offset, i))
            pending = None
        i += 1

    if stack:
        keyword, open_offset = stack[-1]
        line = line_of_offset(source, open_offset)
        raise UnbalancedBlockError(
            f"Block '{keyword}' is never closed",
            line_number=line,
            context=get_line_context(source, line),
            suggestion=f"Add the missing '}}' for '{keyword}'",
        )

    blocks.sort(key=lambda b: b.open_offset)
    return blocks


def extract_block(source: str, keyword: str, start: int = 0) -> Tuple[str, int]:
    """Return (body, end) of the first `keyword { ... }` block opening at or after `start`.

    `end` is the offset just past the closing brace.
    """
    for block in scan_blocks(source):
        if block.keyword == keyword and block.open_offset >= start:
            return block.body(source), block.close_offset + 1
    raise MissingBlockError(
        f"Missing '{keyword}' block",
        suggestion=f"Add a '{keyword} {{ ... }}' block",
    )


def check_blocks(source: str) -> List[Block]:
    """Validate block structure and the presence of the required sections."""
    blocks = scan_blocks(source)
    roots = [b for b in blocks if b.depth == 0 and b.keyword == "scenario"]
    if not roots:
        raise MissingBlockError(
            "Missing 'scenario' block",
            suggestion='Wrap the model in scenario("<title>") { ... }',
        )
    root = roots[0]
    sections = {
        b.keyword for b in blocks
        if b.depth == 1 and root.open_offset < b.open_offset < root.close_offset
    }
    for name in REQUIRED_SECTIONS:
        if name not in sections:
            raise MissingBlockError(
                f"Missing '{name}' block",
                line_number=line_of_offset(source, root.open_offset),
                suggestion=f"Add a '{name} {{ ... }}' block inside the scenario",
            )
    return blocks
