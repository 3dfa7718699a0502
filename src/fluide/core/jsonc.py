"""Format-preserving JSON-with-comments documents.

tsconfig.json files routinely carry comments and trailing commas, so they
cannot be round-tripped through `json`. JsoncDocument keeps the original
text and edits top-level members in place: everything it was not asked to
change (other keys, comments, whitespace, key order) is left byte-for-byte
intact.

    doc = JsoncDocument.parse(path.read_text())
    doc.set("extends", "fluide/tsconfigs/strict")
    path.write_text(doc.dumps())
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fluide.core.errors import ConfigParseError

_STRING_RE = re.compile(r'"(?:[^"\\\x00-\x1f]|\\.)*"', re.DOTALL)
_NUMBER_RE = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS = {"true": True, "false": False, "null": None}

DEFAULT_INDENT = 2
# Deeper documents are rejected instead of exhausting the interpreter stack
MAX_DEPTH = 200


@dataclass
class _Member:
    """Location of a top-level `"key": value` pair in the source text."""
    key: str
    key_start: int
    value_start: int
    value_end: int


class _Parser:
    """Recursive-descent JSONC parser that records root member offsets."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.members: List[_Member] = []
        self.root_open = -1
        self.root_close = -1
        self.depth = 0

    def error(self, message: str) -> ConfigParseError:
        return ConfigParseError(message, self.pos)

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip(self) -> None:
        """Skip whitespace and comments."""
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch in " \t\r\n\ufeff":
                self.pos += 1
            elif text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = len(text) if end == -1 else end + 1
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("Unterminated block comment")
                self.pos = end + 2
            else:
                break

    def parse_document(self) -> Any:
        self.skip()
        if not self.peek():
            raise self.error("Empty document")
        value = self.parse_value(root=True)
        self.skip()
        if self.pos != len(self.text):
            raise self.error("Unexpected content after document")
        return value

    def parse_value(self, root: bool = False) -> Any:
        self.skip()
        ch = self.peek()
        if ch == "{":
            return self.parse_object(root)
        if ch == "[":
            return self.parse_array()
        if ch == '"':
            return self.parse_string()
        for word, value in _LITERALS.items():
            if self.text.startswith(word, self.pos):
                self.pos += len(word)
                return value
        match = _NUMBER_RE.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            return json.loads(match.group())
        if not ch:
            raise self.error("Unexpected end of document")
        raise self.error(f"Unexpected character {ch!r}")

    def parse_string(self) -> str:
        match = _STRING_RE.match(self.text, self.pos)
        if not match:
            raise self.error("Invalid string")
        try:
            value = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise self.error(f"Invalid string: {e.msg}") from e
        self.pos = match.end()
        return value

    def enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise self.error(f"Nesting deeper than {MAX_DEPTH} levels")

    def parse_object(self, root: bool) -> Dict[str, Any]:
        self.enter()
        if root:
            self.root_open = self.pos
        self.pos += 1
        result: Dict[str, Any] = {}
        while True:
            self.skip()
            ch = self.peek()
            if ch == "}":
                break
            if ch != '"':
                raise self.error("Expected property name")
            key_start = self.pos
            key = self.parse_string()
            self.skip()
            if self.peek() != ":":
                raise self.error("Expected ':'")
            self.pos += 1
            self.skip()
            value_start = self.pos
            result[key] = self.parse_value()
            if root:
                self.members.append(_Member(key, key_start, value_start, self.pos))
            self.skip()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
            elif ch != "}":
                raise self.error("Expected ',' or '}'")
        if root:
            self.root_close = self.pos
        self.pos += 1
        self.depth -= 1
        return result

    def parse_array(self) -> List[Any]:
        self.enter()
        self.pos += 1
        result: List[Any] = []
        while True:
            self.skip()
            ch = self.peek()
            if ch == "]":
                break
            result.append(self.parse_value())
            self.skip()
            ch = self.peek()
            if ch == ",":
                self.pos += 1
            elif ch != "]":
                raise self.error("Expected ',' or ']'")
        self.pos += 1
        self.depth -= 1
        return result


class JsoncDocument:
    """A parsed JSONC document that serializes back to its original text."""

    def __init__(self, text: str):
        self._text = text
        self._load()

    def _load(self) -> None:
        parser = _Parser(self._text)
        self._value = parser.parse_document()
        self._members = parser.members
        self._root_open = parser.root_open
        self._root_close = parser.root_close

    # -- Construction ------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> "JsoncDocument":
        """Parse JSONC text.

        Raises:
            ConfigParseError: If the text is not valid JSON with comments
        """
        return cls(text)

    @classmethod
    def from_mapping(cls, mapping: Dict[str, Any], indent: int = DEFAULT_INDENT) -> "JsoncDocument":
        """Create a new document from a plain mapping."""
        return cls(json.dumps(mapping, indent=indent) + "\n")

    # -- Inspection --------------------------------------------------------

    @property
    def value(self) -> Any:
        """Plain Python value of the document (comments dropped)."""
        return self._value

    @property
    def is_mapping(self) -> bool:
        return isinstance(self._value, dict)

    def keys(self) -> List[str]:
        if not self.is_mapping:
            return []
        return list(self._value.keys())

    def get(self, key: str, default: Any = None) -> Any:
        if not self.is_mapping:
            return default
        return self._value.get(key, default)

    def __contains__(self, key: str) -> bool:
        return self.is_mapping and key in self._value

    # -- Mutation ----------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Set or overwrite a top-level key, leaving the rest untouched.

        New keys are inserted as the first member of the root object.

        Raises:
            TypeError: If the document root is not an object
        """
        if not self.is_mapping:
            raise TypeError("Only object documents support set()")

        existing = self._find(key)
        if existing is not None:
            indent = self._line_indent(existing.key_start)
            rendered = self._render(value, indent)
            text = self._text[:existing.value_start] + rendered + self._text[existing.value_end:]
        else:
            text = self._insert_first(key, value)

        self._text = text
        self._load()

    def _find(self, key: str) -> Optional[_Member]:
        found = None
        for member in self._members:
            if member.key == key:
                found = member
        return found

    def _line_indent(self, offset: int) -> str:
        line_start = self._text.rfind("\n", 0, offset) + 1
        prefix = self._text[line_start:offset]
        return prefix if prefix.strip() == "" else ""

    def _render(self, value: Any, indent: str) -> str:
        if isinstance(value, (dict, list)) and value:
            lines = json.dumps(value, indent=DEFAULT_INDENT).split("\n")
            return "\n".join([lines[0]] + [indent + line for line in lines[1:]])
        return json.dumps(value)

    def _insert_first(self, key: str, value: Any) -> str:
        open_at = self._root_open
        head, tail = self._text[:open_at + 1], self._text[open_at + 1:]

        if not self._members:
            body = self._text[open_at + 1:self._root_close]
            base = self._line_indent(open_at)
            indent = base + " " * DEFAULT_INDENT
            entry = f"{json.dumps(key)}: {self._render(value, indent)}"
            if body.strip() == "":
                return head + f"\n{indent}{entry}\n{base}" + self._text[self._root_close:]
            return head + f"\n{indent}{entry}" + tail

        first = self._members[0]
        multiline = "\n" in self._text[open_at:first.key_start]
        if multiline:
            indent = self._line_indent(first.key_start) or " " * DEFAULT_INDENT
            entry = f"{json.dumps(key)}: {self._render(value, indent)}"
            return head + f"\n{indent}{entry}," + tail
        entry = f"{json.dumps(key)}: {self._render(value, '')}"
        return head + f" {entry}," + tail

    # -- Serialization -----------------------------------------------------

    def dumps(self) -> str:
        return self._text

    def __str__(self) -> str:
        return self._text
