"""Syntax trees for JS/TS/JSX/TSX sources, built with tree-sitter."""

import bisect
import html
import re
from pathlib import PurePath
from typing import Dict, Iterator, List, Optional, Tuple

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())
TYPESCRIPT_LANGUAGE = Language(tree_sitter_typescript.language_typescript())

# Plain .ts files can hold `<Type>value` casts, which the TSX grammar rejects
DEFAULT_LANGUAGES: Dict[str, Language] = {
    ".ts": TYPESCRIPT_LANGUAGE,
    ".mts": TYPESCRIPT_LANGUAGE,
    ".cts": TYPESCRIPT_LANGUAGE,
}

TEXT_NODE_TYPES = ("jsx_text", "html_character_reference")

_JS_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0",
}
_ESCAPE_PATTERN = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])"
)


class SyntaxParser:
    """
    Error-recovering parser for UI source files.

    A syntax error only turns the broken region into an ERROR node; the rest
    of the file still parses normally.
    """

    def __init__(
        self,
        default_language: Language = TSX_LANGUAGE,
        languages: Optional[Dict[str, Language]] = None,
    ):
        self.default_language = default_language
        self.languages = dict(DEFAULT_LANGUAGES if languages is None else languages)
        self._parsers: Dict[int, Parser] = {}

    def language_for(self, file_identity: str) -> Language:
        suffix = PurePath(file_identity).suffix.lower()
        return self.languages.get(suffix, self.default_language)

    def parse(self, source: bytes, file_identity: str = "unknown") -> Tree:
        """Parse ``source`` with the grammar matching the file extension."""
        language = self.language_for(file_identity)
        parser = self._parsers.get(id(language))
        if parser is None:
            parser = Parser(language)
            self._parsers[id(language)] = parser
        return parser.parse(source)


class SourceText:
    """UTF-8 source with byte-offset to (line, column) mapping."""

    def __init__(self, text: str):
        self.text = text
        self.data = text.encode("utf-8")
        self._line_starts = [0]
        for index, byte in enumerate(self.data):
            if byte == 0x0A:
                self._line_starts.append(index + 1)

    def location(self, offset: int) -> Tuple[int, int]:
        """Get the 1-based line and 0-based character column of a byte offset."""
        line_index = bisect.bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[line_index]
        column = len(self.data[line_start:offset].decode("utf-8", errors="replace"))
        return line_index + 1, column

    def slice(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8")


def walk(root: Node) -> Iterator[Node]:
    """Pre-order traversal of every node under ``root``."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def node_text(node: Node) -> str:
    return node.text.decode("utf-8")


def in_error_region(node: Node) -> bool:
    """Check whether the node sits inside a region the parser had to recover."""
    current = node.parent
    while current is not None:
        if current.type == "ERROR":
            return True
        current = current.parent
    return False


def error_lines(root: Node, limit: int = 5) -> List[int]:
    """1-based lines of the first few ERROR / missing nodes."""
    lines: List[int] = []
    if not root.has_error:
        return lines
    for node in walk(root):
        if node.type == "ERROR" or node.is_missing:
            lines.append(node.start_point[0] + 1)
            if len(lines) >= limit:
                break
    return lines


def unescape_js(raw: str) -> str:
    """Resolve the escape sequences of a JS string literal body."""

    def replace(match: re.Match) -> str:
        escape = match.group(1)
        if escape.startswith("u{"):
            return chr(int(escape[2:-1], 16))
        if escape.startswith("u") and len(escape) == 5:
            return chr(int(escape[1:], 16))
        if escape.startswith("x") and len(escape) == 3:
            return chr(int(escape[1:], 16))
        if escape in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
            return ""  # line continuation
        return _JS_ESCAPES.get(escape, escape)

    return _ESCAPE_PATTERN.sub(replace, raw)


def string_value(node: Node) -> str:
    """Value of a ``string`` node (quotes removed, escapes resolved)."""
    raw = node_text(node)[1:-1]
    if node.parent is not None and node.parent.type == "jsx_attribute":
        # JSX attribute strings have no backslash escapes
        return html.unescape(raw)
    return unescape_js(raw)


def is_plain_string(node: Optional[Node]) -> bool:
    return node is not None and node.type == "string"


def callee_name(call: Node) -> Optional[str]:
    """Name of a call's callee when it is a bare identifier."""
    function = call.child_by_field_name("function")
    if function is not None and function.type == "identifier":
        return node_text(function)
    return None


def first_argument(call: Node) -> Optional[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None or not arguments.named_children:
        return None
    return arguments.named_children[0]


def element_name(element: Node) -> Optional[str]:
    """Tag name of a ``jsx_element`` or ``jsx_self_closing_element``."""
    tag = element.child_by_field_name("open_tag") if element.type == "jsx_element" else element
    if tag is None:
        return None
    name = tag.child_by_field_name("name")
    return node_text(name) if name is not None else None


def element_content(element: Node) -> List[Node]:
    """Children of a ``jsx_element`` between its opening and closing tags."""
    open_tag = element.child_by_field_name("open_tag")
    close_tag = element.child_by_field_name("close_tag")
    return [
        child for child in element.children
        if child != open_tag and child != close_tag
    ]


def text_runs(element: Node) -> List[List[Node]]:
    """
    Group an element's content into runs of adjacent literal text.

    Text and character references (``&amp;``) next to each other form one
    run, so ``Terms &amp; Conditions`` is a single piece of text.
    """
    runs: List[List[Node]] = []
    current: List[Node] = []
    for child in element_content(element):
        if child.type in TEXT_NODE_TYPES:
            current.append(child)
            continue
        if current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs


def attribute_parts(attribute: Node) -> Tuple[Optional[str], Optional[Node]]:
    """Name and value node of a ``jsx_attribute`` (value None when boolean)."""
    if not attribute.children:
        return None, None
    name = node_text(attribute.children[0])
    value = attribute.children[-1] if len(attribute.children) >= 3 else None
    return name, value
