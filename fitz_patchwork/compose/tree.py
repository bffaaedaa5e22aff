# fitz_patchwork/compose/tree.py
"""
Minimal syntax tree for a UI composition file.

Only what splicing needs is modeled: the module head (directives and
import declarations) and the markup returned by the component function.
Every node keeps its exact source text, so parse(text).serialize() == text
and regions that are not touched survive byte-for-byte.

Supported edits:
- find_import / insert_import
- remove_section (by heading text)
- append_to_root
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from fitz_patchwork.errors import ComposeParseError

_DIRECTIVE_RE = re.compile(r"(['\"])use [\w-]+\1[ \t]*;?")
_IMPORT_RE = re.compile(
    r"import(?![\w$(])\s*(?:type\s+)?(?:[^'\";]*?\bfrom\s*)?(['\"])(?P<source>[^'\"\n]+)\1[ \t]*;?"
)
_TAG_NAME_RE = re.compile(r"[A-Za-z0-9_$.:-]*")
_DEFAULT_FUNCTION_RE = re.compile(r"export\s+default\s+(?:async\s+)?function\b[^(]*\(")
_DEFAULT_NAME_RE = re.compile(r"export\s+default\s+([A-Z][\w$]*)\s*;?")
_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_JSX_PRECEDERS = frozenset("(,?:=&|{[!>")
_CLOSERS = {"(": ")", "{": "}", "[": "]"}


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

@dataclass
class Trivia:
    """Whitespace and comments between head statements."""

    text: str


@dataclass
class Directive:
    text: str


@dataclass
class ImportDeclaration:
    text: str
    source: str


HeadNode = Trivia | Directive | ImportDeclaration


@dataclass
class Text:
    raw: str

    @property
    def is_blank(self) -> bool:
        return not self.raw.strip()

    def serialize(self) -> str:
        return self.raw


@dataclass
class Expression:
    """A {...} container, kept verbatim."""

    raw: str

    @property
    def comment(self) -> str | None:
        match = re.fullmatch(r"\{\s*/\*(.*?)\*/\s*\}", self.raw, re.DOTALL)
        return match.group(1).strip() if match else None

    def serialize(self) -> str:
        return self.raw


@dataclass
class Element:
    tag: str
    open_tag: str
    children: list["MarkupNode"] = field(default_factory=list)
    close_tag: str = ""
    self_closing: bool = False

    @classmethod
    def reference(cls, tag: str) -> "Element":
        """A self-closing reference such as <TopTracks />."""
        return cls(tag=tag, open_tag=f"<{tag} />", self_closing=True)

    @property
    def direct_text(self) -> str:
        text = "".join(child.raw for child in self.children if isinstance(child, Text))
        return " ".join(text.split())

    def serialize(self) -> str:
        if self.self_closing:
            return self.open_tag
        inner = "".join(child.serialize() for child in self.children)
        return f"{self.open_tag}{inner}{self.close_tag}"


MarkupNode = Text | Expression | Element


def walk(element: Element, ancestors: tuple[Element, ...] = ()) -> Iterator[tuple[Element, tuple[Element, ...]]]:
    """Depth-first over elements, yielding (element, ancestors outermost-first)."""
    yield element, ancestors
    for child in element.children:
        if isinstance(child, Element):
            yield from walk(child, ancestors + (element,))


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class _Parser:
    def __init__(self, src: str):
        self.src = src
        self.n = len(src)

    def fail(self, message: str, pos: int) -> ComposeParseError:
        line = self.src.count("\n", 0, pos) + 1
        return ComposeParseError(f"{message} (line {line})")

    # -- lexical skipping ----------------------------------------------------

    def skip_string(self, i: int) -> int:
        quote = self.src[i]
        i += 1
        while i < self.n:
            c = self.src[i]
            if c == "\\":
                i += 2
                continue
            if c == quote:
                return i + 1
            if c == "\n":
                break
            i += 1
        raise self.fail("Unterminated string", i)

    def skip_template(self, i: int) -> int:
        i += 1
        while i < self.n:
            c = self.src[i]
            if c == "\\":
                i += 2
            elif c == "`":
                return i + 1
            elif c == "$" and self.src.startswith("${", i):
                i = self.skip_group(i + 1)
            else:
                i += 1
        raise self.fail("Unterminated template literal", i)

    def skip_trivia(self, i: int) -> int:
        """Skip whitespace and comments."""
        while i < self.n:
            if self.src[i].isspace():
                i += 1
            elif self.src.startswith("//", i):
                end = self.src.find("\n", i)
                i = self.n if end == -1 else end + 1
            elif self.src.startswith("/*", i):
                end = self.src.find("*/", i + 2)
                if end == -1:
                    raise self.fail("Unterminated comment", i)
                i = end + 2
            else:
                break
        return i

    def jsx_starts(self, i: int) -> bool:
        if i + 1 >= self.n or not (self.src[i + 1].isalpha() or self.src[i + 1] == ">"):
            return False
        before = self.src[:i].rstrip()
        if not before:
            return True
        return before[-1] in _JSX_PRECEDERS or re.search(r"\breturn$", before) is not None

    def skip_token(self, i: int) -> int | None:
        """End of the string, template, comment or markup starting at i, if any."""
        c = self.src[i]
        if c in "'\"":
            return self.skip_string(i)
        if c == "`":
            return self.skip_template(i)
        if self.src.startswith("//", i) or self.src.startswith("/*", i):
            return self.skip_trivia(i)
        if c == "<" and self.jsx_starts(i):
            return self.parse_element(i)[1]
        return None

    def skip_group(self, i: int) -> int:
        """i is at an opening bracket; return the index after its partner."""
        stack = [_CLOSERS[self.src[i]]]
        start = i
        i += 1
        while stack:
            if i >= self.n:
                raise self.fail(f"Unbalanced '{self.src[start]}'", start)
            end = self.skip_token(i)
            if end is not None:
                i = end
                continue
            c = self.src[i]
            if c in _CLOSERS:
                stack.append(_CLOSERS[c])
            elif c in ")]}":
                if c != stack[-1]:
                    raise self.fail(f"Unexpected '{c}'", i)
                stack.pop()
            i += 1
        return i

    # -- markup --------------------------------------------------------------

    def parse_element(self, i: int) -> tuple[Element, int]:
        start = i
        name_match = _TAG_NAME_RE.match(self.src, i + 1)
        tag = name_match.group(0)
        i = name_match.end()
        while True:
            if i >= self.n:
                raise self.fail(f"Unterminated tag <{tag}>", start)
            c = self.src[i]
            if c in "'\"":
                i = self.skip_string(i)
            elif c == "{":
                i = self.skip_group(i)
            elif self.src.startswith("/>", i):
                return Element(tag=tag, open_tag=self.src[start:i + 2], self_closing=True), i + 2
            elif c == ">":
                i += 1
                break
            else:
                i += 1

        element = Element(tag=tag, open_tag=self.src[start:i])
        while True:
            if i >= self.n:
                raise self.fail(f"Missing closing tag for <{tag}>", start)
            if self.src.startswith("</", i):
                end = self.src.find(">", i)
                if end == -1:
                    raise self.fail("Unterminated closing tag", i)
                closing = self.src[i + 2:end].strip()
                if closing != tag:
                    raise self.fail(f"Closing tag </{closing}> does not match <{tag}>", i)
                element.close_tag = self.src[i:end + 1]
                return element, end + 1
            c = self.src[i]
            if c == "<":
                child, i = self.parse_element(i)
                element.children.append(child)
            elif c == "{":
                end = self.skip_group(i)
                element.children.append(Expression(self.src[i:end]))
                i = end
            else:
                end = i
                while end < self.n and self.src[end] not in "<{":
                    end += 1
                element.children.append(Text(self.src[i:end]))
                i = end

    # -- module structure ----------------------------------------------------

    def parse_head(self) -> tuple[list[HeadNode], int]:
        nodes: list[HeadNode] = []
        pending: list[HeadNode] = []
        i = 0
        committed = 0
        while True:
            j = self.skip_trivia(i)
            if j > i:
                pending.append(Trivia(self.src[i:j]))
            directive = _DIRECTIVE_RE.match(self.src, j)
            declaration = _IMPORT_RE.match(self.src, j)
            if directive:
                node: HeadNode = Directive(directive.group(0))
                i = directive.end()
            elif declaration:
                node = ImportDeclaration(declaration.group(0), declaration.group("source"))
                i = declaration.end()
            else:
                break
            nodes.extend(pending)
            pending = []
            nodes.append(node)
            committed = i
        return nodes, committed

    def component_function(self, start: int) -> int:
        """Index of the parameter list '(' of the default-exported component."""
        match = _DEFAULT_FUNCTION_RE.search(self.src, start)
        if match:
            return match.end() - 1
        named = _DEFAULT_NAME_RE.search(self.src, start)
        if named:
            pattern = rf"function\s+{re.escape(named.group(1))}\s*(?:<[^>]*>)?\s*\("
            match = re.search(pattern, self.src[start:])
            if match:
                return start + match.end() - 1
        candidates = list(re.finditer(r"function\s+[A-Z][\w$]*\s*\(", self.src[start:]))
        if candidates:
            return start + candidates[-1].end() - 1
        raise self.fail("No component function found", start)

    def root_markup(self, start: int) -> tuple[Element, int, int]:
        params = self.component_function(start)
        i = self.skip_group(params)
        body = self.src.find("{", i)
        if body == -1:
            raise self.fail("Component function has no body", i)
        body_end = self.skip_group(body) - 1
        i = body + 1
        while i < body_end:
            end = self.skip_token(i)
            if end is not None:
                i = end
                continue
            c = self.src[i]
            if c in _CLOSERS:
                i = self.skip_group(i)
                continue
            if self.src.startswith("return", i) and not self._is_word_char(i - 1) and not self._is_word_char(i + 6):
                j = self.skip_trivia(i + 6)
                while j < self.n and self.src[j] == "(":
                    j = self.skip_trivia(j + 1)
                if j < self.n and self.src[j] == "<":
                    element, end = self.parse_element(j)
                    return element, j, end
            i += 1
        raise self.fail("No returned markup found in component function", body)

    def _is_word_char(self, i: int) -> bool:
        return 0 <= i < self.n and (self.src[i].isalnum() or self.src[i] in "_$")


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

@dataclass
class ComponentSource:
    head: list[HeadNode]
    between: str
    markup: Element
    tail: str

    @classmethod
    def parse(cls, text: str) -> "ComponentSource":
        """
        Parse composition file text.

        Raises:
            ComposeParseError: If the head, the component function or its
                returned markup cannot be parsed
        """
        parser = _Parser(text)
        head, head_end = parser.parse_head()
        markup, start, end = parser.root_markup(head_end)
        return cls(head=head, between=text[head_end:start], markup=markup, tail=text[end:])

    def serialize(self) -> str:
        head = "".join(node.text for node in self.head)
        return f"{head}{self.between}{self.markup.serialize()}{self.tail}"

    @property
    def imports(self) -> list[ImportDeclaration]:
        return [node for node in self.head if isinstance(node, ImportDeclaration)]

    def find_import(self, *sources: str) -> ImportDeclaration | None:
        for declaration in self.imports:
            if declaration.source in sources:
                return declaration
        return None

    def insert_import(self, statement: str) -> ImportDeclaration:
        """Insert an import declaration at the top, after any directives."""
        match = _IMPORT_RE.fullmatch(statement.strip())
        if not match:
            raise ComposeParseError(f"Not an import declaration: {statement!r}")
        declaration = ImportDeclaration(statement.strip(), match.group("source"))

        first_import = next((i for i, n in enumerate(self.head) if isinstance(n, ImportDeclaration)), None)
        if first_import is not None:
            self.head[first_import:first_import] = [declaration, Trivia("\n")]
            return declaration
        directives = [i for i, n in enumerate(self.head) if isinstance(n, Directive)]
        if directives:
            at = directives[-1] + 1
            self.head[at:at] = [Trivia("\n\n"), declaration]
        else:
            self.head[0:0] = [declaration, Trivia("\n\n")]
        return declaration

    def find_heading(self, title: str) -> tuple[Element, tuple[Element, ...]] | None:
        wanted = " ".join(title.split()).casefold()
        for element, ancestors in walk(self.markup):
            if element.tag in _HEADING_TAGS and element.direct_text.casefold() == wanted:
                return element, ancestors
        return None

    def remove_section(self, title: str) -> bool:
        """
        Remove the <section> enclosing the heading whose text is title.

        The whitespace before the section goes with it, as does a directly
        preceding {/* title */} comment.

        Returns:
            True if a section was removed
        """
        found = self.find_heading(title)
        if found is None:
            return False
        heading, ancestors = found
        chain = ancestors + (heading,)
        section_at = next((i for i in range(len(chain) - 1, -1, -1) if chain[i].tag == "section"), None)
        if section_at is None or section_at == 0:
            return False
        section, parent = chain[section_at], chain[section_at - 1]

        siblings = parent.children
        start = end = next(i for i, child in enumerate(siblings) if child is section)
        if start > 0 and isinstance(siblings[start - 1], Text) and siblings[start - 1].is_blank:
            start -= 1
        if start > 0 and isinstance(siblings[start - 1], Expression):
            comment = siblings[start - 1].comment
            if comment is not None and comment.casefold() == " ".join(title.split()).casefold():
                start -= 1
                if start > 0 and isinstance(siblings[start - 1], Text) and siblings[start - 1].is_blank:
                    start -= 1
        del siblings[start:end + 1]
        return True

    def has_element(self, tag: str) -> bool:
        return any(element.tag == tag for element, _ in walk(self.markup))

    def append_to_root(self, element: Element) -> bool:
        """
        Append element as the last child of the root markup node.

        The new child reuses the whitespace that separates the current last
        child from its predecessor, so it lines up with its siblings.

        Returns:
            False when the root is self-closing
        """
        root = self.markup
        if root.self_closing:
            return False
        children = root.children
        content = [i for i, child in enumerate(children) if not (isinstance(child, Text) and child.is_blank)]
        if content:
            last = content[-1]
            before = children[last - 1] if last > 0 else None
            if isinstance(before, Text) and before.is_blank:
                separator = before.raw
            else:
                separator = ""
            at = last + 1
        else:
            trailing = children[-1].raw if children else ""
            indent = trailing.rsplit("\n", 1)[-1] if "\n" in trailing else ""
            separator = f"\n{indent}  "
            at = 0
        children[at:at] = [Text(separator), element]
        return True
