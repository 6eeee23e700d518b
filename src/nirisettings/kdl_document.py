"""Parser for the KDL subset used by niri configs.

Produces top-level :class:`Node` objects that keep the exact source text
they were parsed from, which is what lets the merge engine re-emit
unmanaged nodes byte-for-byte.

Supported: bare and quoted identifiers, positional arguments, ``key=value``
properties, child blocks, ``;`` terminators, ``//`` and nested ``/* */``
comments, ``/-`` slashdash on nodes, entries and child blocks, escaped and
raw strings, decimal/hex/octal/binary numbers, ``true``/``false``/``null``
(with or without the ``#`` prefix), ``(type)`` annotations (ignored) and
``\\`` line continuations.

Slashdashed properties are not discarded: they are collected into
``Node.annotations`` so generated files can carry metadata (``/-id=3``) the
compositor never sees.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Any, Iterator

from nirisettings.errors import ParseError

_NON_IDENT = set('\\/(){}<>;[]=,"#') | set(" \t\r\n\ufeff")
_NUMBER_RE = re.compile(
    r"[+-]?(?:0x[0-9a-fA-F][0-9a-fA-F_]*|0o[0-7][0-7_]*|0b[01][01_]*"
    r"|[0-9][0-9_]*(?:\.[0-9][0-9_]*)?(?:[eE][+-]?[0-9][0-9_]*)?)$"
)
_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "/": "/",
    '"': '"',
    "b": "\b",
    "f": "\f",
    "s": " ",
}
_KEYWORDS = {"true": True, "false": False, "null": None}


@dataclasses.dataclass
class Node:
    """One KDL node with its arguments, properties and children."""

    name: str
    args: list[Any] = dataclasses.field(default_factory=list)
    props: dict[str, Any] = dataclasses.field(default_factory=dict)
    children: list[Node] | None = None
    annotations: dict[str, Any] = dataclasses.field(default_factory=dict)
    line: int = 0
    raw: str = ""
    leading: str = ""
    # Comment on the same line after the node, e.g. `foo 1 // note`.
    comment: str = ""

    # -- lookups -----------------------------------------------------------

    def arg(self, index: int = 0, default: Any = None) -> Any:
        if index < len(self.args):
            return self.args[index]
        return default

    def get(self, name: str) -> Node | None:
        """Return the last child called *name* (later nodes override)."""
        found = None
        for child in self.children or ():
            if child.name == name:
                found = child
        return found

    def get_all(self, name: str) -> list[Node]:
        return [c for c in self.children or () if c.name == name]

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def value(self, key: str, default: Any = None) -> Any:
        """Look up *key* as a child's first argument, then as a property."""
        child = self.get(key)
        if child is not None and child.args:
            return child.args[0]
        if key in self.props:
            return self.props[key]
        return default

    def iter_children(self) -> Iterator[Node]:
        return iter(self.children or ())


@dataclasses.dataclass
class Document:
    """Top-level nodes of one KDL file, in source order."""

    nodes: list[Node]
    trailing: str = ""

    def get(self, name: str) -> Node | None:
        found = None
        for node in self.nodes:
            if node.name == name:
                found = node
        return found

    def get_all(self, name: str) -> list[Node]:
        return [n for n in self.nodes if n.name == name]

    def names(self) -> list[str]:
        return [n.name for n in self.nodes]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.n = len(text)
        self.trailing = ""

    # -- position helpers --------------------------------------------------

    def _where(self, pos: int | None = None) -> tuple[int, int]:
        pos = self.pos if pos is None else pos
        line = self.text.count("\n", 0, pos) + 1
        col = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return line, col

    def error(self, message: str, pos: int | None = None) -> ParseError:
        line, col = self._where(pos)
        return ParseError(message, line=line, column=col)

    def peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.text[i] if i < self.n else ""

    def startswith(self, s: str) -> bool:
        return self.text.startswith(s, self.pos)

    # -- whitespace and comments ------------------------------------------

    def skip_block_comment(self) -> None:
        start = self.pos
        self.pos += 2
        depth = 1
        while depth:
            if self.pos >= self.n:
                raise self.error("Unterminated block comment", start)
            if self.startswith("/*"):
                depth += 1
                self.pos += 2
            elif self.startswith("*/"):
                depth -= 1
                self.pos += 2
            else:
                self.pos += 1

    def skip_line_comment(self) -> None:
        end = self.text.find("\n", self.pos)
        self.pos = self.n if end == -1 else end

    def skip_inline_space(self) -> None:
        """Skip spaces, block comments and line continuations."""
        while self.pos < self.n:
            ch = self.peek()
            if ch in " \t\ufeff":
                self.pos += 1
            elif self.startswith("/*"):
                self.skip_block_comment()
            elif ch == "\\":
                self.pos += 1
                while self.peek() in (" ", "\t"):
                    self.pos += 1
                if self.startswith("//"):
                    self.skip_line_comment()
                if self.startswith("\r\n"):
                    self.pos += 2
                elif self.peek() == "\n":
                    self.pos += 1
                elif self.pos < self.n:
                    raise self.error("Expected newline after line continuation")
            else:
                break

    def skip_line_space(self) -> None:
        """Skip whitespace, newlines and comments."""
        while self.pos < self.n:
            ch = self.peek()
            if ch in " \t\r\n\ufeff":
                self.pos += 1
            elif self.startswith("//"):
                self.skip_line_comment()
            elif self.startswith("/*"):
                self.skip_block_comment()
            else:
                break

    # -- scalars -----------------------------------------------------------

    def parse_quoted(self) -> str:
        start = self.pos
        self.pos += 1
        out: list[str] = []
        while True:
            if self.pos >= self.n:
                raise self.error("Unterminated string", start)
            ch = self.text[self.pos]
            if ch == '"':
                self.pos += 1
                return "".join(out)
            if ch == "\\":
                esc = self.peek(1)
                if esc in _ESCAPES:
                    out.append(_ESCAPES[esc])
                    self.pos += 2
                elif esc == "u" and self.peek(2) == "{":
                    close = self.text.find("}", self.pos)
                    if close == -1:
                        raise self.error("Bad unicode escape")
                    try:
                        out.append(chr(int(self.text[self.pos + 3:close], 16)))
                    except (ValueError, OverflowError) as exc:
                        raise self.error("Bad unicode escape") from exc
                    self.pos = close + 1
                elif esc in " \t\r\n":
                    # whitespace escape: drop the run of whitespace
                    self.pos += 1
                    while self.peek() in (" ", "\t", "\r", "\n"):
                        self.pos += 1
                else:
                    raise self.error(f"Unknown escape \\{esc}")
            else:
                out.append(ch)
                self.pos += 1

    def parse_raw(self) -> str:
        # r"..."  r#"..."#  #"..."#
        start = self.pos
        if self.peek() == "r":
            self.pos += 1
        hashes = 0
        while self.peek() == "#":
            hashes += 1
            self.pos += 1
        if self.peek() != '"':
            raise self.error("Malformed raw string", start)
        self.pos += 1
        terminator = '"' + "#" * hashes
        end = self.text.find(terminator, self.pos)
        if end == -1:
            raise self.error("Unterminated raw string", start)
        value = self.text[self.pos:end]
        self.pos = end + len(terminator)
        return value

    def is_raw_start(self) -> bool:
        if self.peek() == "r" and self.peek(1) in ('"', "#"):
            i = 1
            while self.peek(i) == "#":
                i += 1
            return self.peek(i) == '"'
        if self.peek() == "#":
            i = 0
            while self.peek(i) == "#":
                i += 1
            return self.peek(i) == '"'
        return False

    def parse_bare(self) -> str:
        start = self.pos
        while self.pos < self.n and self.text[self.pos] not in _NON_IDENT:
            self.pos += 1
        if self.pos == start:
            raise self.error(f"Unexpected character {self.peek()!r}")
        return self.text[start:self.pos]

    def parse_string_like(self) -> str:
        if self.peek() == '"':
            return self.parse_quoted()
        if self.is_raw_start():
            return self.parse_raw()
        return self.parse_bare()

    def parse_value(self) -> Any:
        if self.peek() == "(":
            self.skip_type_annotation()
        if self.peek() == '"':
            return self.parse_quoted()
        if self.is_raw_start():
            return self.parse_raw()
        if self.peek() == "#":
            self.pos += 1
            word = self.parse_bare()
            if word not in _KEYWORDS:
                raise self.error(f"Unknown keyword #{word}")
            return _KEYWORDS[word]
        start = self.pos
        word = self.parse_bare()
        if word in _KEYWORDS:
            return _KEYWORDS[word]
        if _NUMBER_RE.match(word):
            try:
                return _to_number(word)
            except ValueError as exc:
                raise self.error(f"Invalid number {word!r}: {exc}", start) from exc
        if word[0].isdigit() or (word[0] in "+-" and len(word) > 1 and word[1].isdigit()):
            raise self.error(f"Invalid number {word!r}", start)
        return word

    def skip_type_annotation(self) -> None:
        close = self.text.find(")", self.pos)
        if close == -1:
            raise self.error("Unterminated type annotation")
        self.pos = close + 1

    # -- nodes -------------------------------------------------------------

    def at_node_end(self) -> bool:
        ch = self.peek()
        return ch in ("", "\n", "\r", ";", "}") or self.startswith("//")

    def parse_nodes(self, *, top: bool) -> list[Node]:
        nodes: list[Node] = []
        carried: int | None = None
        while True:
            # Slashdashed nodes stay part of the next node's leading trivia.
            gap_start = self.pos if carried is None else carried
            self.skip_line_space()
            while self.peek() == ";":
                self.pos += 1
                self.skip_line_space()
            if self.pos >= self.n:
                if not top:
                    raise self.error("Unexpected end of input, expected '}'")
                self.trailing = self.text[gap_start:]
                return nodes
            if self.peek() == "}":
                if top:
                    raise self.error("Unexpected '}'")
                return nodes
            if self.startswith("/-"):
                self.pos += 2
                self.skip_line_space()
                self.parse_node()
                carried = gap_start
                continue
            leading = self.text[gap_start:self.pos]
            node_start = self.pos
            node = self.parse_node()
            node.leading = leading
            node.comment = self.take_same_line_comment(node_start + len(node.raw))
            nodes.append(node)
            carried = None

    def parse_node(self) -> Node:
        start = self.pos
        if self.peek() == "(":
            self.skip_type_annotation()
        line, _ = self._where(start)
        node = Node(name=self.parse_string_like(), line=line)
        end = self.pos
        while True:
            self.skip_inline_space()
            if self.at_node_end():
                break
            sd = False
            if self.startswith("/-"):
                sd = True
                self.pos += 2
                self.skip_inline_space()
            if self.peek() == "{":
                children = self.parse_children()
                if not sd:
                    if node.children is not None:
                        raise self.error("Node has more than one children block")
                    node.children = children
                end = self.pos
                continue
            self.parse_entry(node, slashdash=sd)
            end = self.pos
        node.raw = self.text[start:end]
        if self.peek() == ";":
            self.pos += 1
        return node

    def take_same_line_comment(self, raw_end: int) -> str:
        """Consume a ``//`` comment that ends the node's line.

        Returns the comments between *raw_end* and the end of that line, or
        "" when there are none.
        """
        p = self.pos
        while p < self.n and self.text[p] in " \t;":
            p += 1
        if self.text.startswith("//", p):
            end = self.text.find("\n", p)
            self.pos = self.n if end == -1 else end
        tail = self.text[raw_end:self.pos].strip().lstrip(";").strip()
        return tail if tail.startswith("/") else ""

    def parse_children(self) -> list[Node]:
        self.pos += 1
        children = self.parse_nodes(top=False)
        self.pos += 1  # closing brace
        return children

    def parse_entry(self, node: Node, *, slashdash: bool) -> None:
        if node.children is not None:
            raise self.error("Entries are not allowed after a children block")
        entry_start = self.pos
        if self.peek() not in ("(", '"', "#") and not self.is_raw_start():
            word_end = self.pos
            while word_end < self.n and self.text[word_end] not in _NON_IDENT:
                word_end += 1
            if word_end < self.n and self.text[word_end] == "=":
                key = self.text[self.pos:word_end]
                self.pos = word_end + 1
                value = self.parse_value()
                (node.annotations if slashdash else node.props)[key] = value
                return
        elif self.peek() == '"' or self.is_raw_start():
            save = self.pos
            key = self.parse_string_like()
            if self.peek() == "=":
                self.pos += 1
                value = self.parse_value()
                (node.annotations if slashdash else node.props)[key] = value
                return
            self.pos = save
        value = self.parse_value()
        if self.pos == entry_start:
            raise self.error("Expected an argument or property")
        if not slashdash:
            node.args.append(value)


def _to_number(word: str) -> int | float:
    clean = word.replace("_", "")
    sign = -1 if clean.startswith("-") else 1
    body = clean.lstrip("+-")
    if body.startswith("0x"):
        return sign * int(body[2:], 16)
    if body.startswith("0o"):
        return sign * int(body[2:], 8)
    if body.startswith("0b"):
        return sign * int(body[2:], 2)
    if "." in body or "e" in body or "E" in body:
        return float(clean)
    return int(clean)


def parse(text: str) -> Document:
    """Parse *text* into a :class:`Document` or raise :class:`ParseError`."""
    parser = _Parser(text)
    nodes = parser.parse_nodes(top=True)
    return Document(nodes=nodes, trailing=parser.trailing)


# ---------------------------------------------------------------------------
# Formatting helpers shared by the generator
# ---------------------------------------------------------------------------


def quote(value: str) -> str:
    """Render *value* as a KDL quoted string."""
    out = ['"']
    for ch in value:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\b":
            out.append("\\b")
        elif ch == "\f":
            out.append("\\f")
        elif ord(ch) < 0x20:
            out.append("\\u{%x}" % ord(ch))
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def format_value(value: Any) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, int):
        return str(value)
    return quote(str(value))


def format_name(name: str) -> str:
    """Render a node name or property key, quoting it when needed."""
    bare_ok = (
        name
        and not any(ch in _NON_IDENT for ch in name)
        and name not in _KEYWORDS
        and not _NUMBER_RE.match(name)
        and not name[0].isdigit()
        and not (name[0] in "+-" and len(name) > 1 and name[1].isdigit())
        and not name.startswith("r#")
        and not name.startswith('r"')
    )
    return name if bare_ok else quote(name)
