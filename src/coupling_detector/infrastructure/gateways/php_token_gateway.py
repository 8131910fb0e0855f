"""PHP token gateway - extract the declared namespace and referenced symbols of a file.

This is a lexer, not a grammar: comments, strings, heredocs and inline HTML
are skipped, then namespace and import ``use`` statements are read from the
remaining token stream. Aliases are not resolved.
"""

import bisect
import logging
import re
from pathlib import Path
from typing import NamedTuple, Optional

from coupling_detector.domain.entities import Location, Node, QualifiedName, Reference
from coupling_detector.domain.errors import NodeParseError

logger = logging.getLogger(__name__)

_NAME = r"[A-Za-z_\x80-\U0010ffff][\w\x80-\U0010ffff]*"

_OPEN_TAG = re.compile(r"<\?(?:php\b|=)", re.IGNORECASE)

_TOKEN = re.compile(
    rf"""
    (?P<ws>\s+)
  | (?P<close>\?>)
  | (?P<comment>(?://|\#(?!\[))(?:[^\r\n?]|\?(?!>))*)
  | (?P<block>/\*.*?\*/)
  | (?P<heredoc><<<[ \t]*(?P<quote>["']?)(?P<label>{_NAME})(?P=quote)\r?\n)
  | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|`(?:[^`\\]|\\.)*`)
  | (?P<unterminated>/\*|['"`])
  | (?P<variable>\$+{_NAME})
  | (?P<name>\\?{_NAME}(?:\\{_NAME})*\\?)
  | (?P<op>\?->|->|::)
  | (?P<punct>.)
    """,
    re.VERBOSE | re.DOTALL,
)

_SKIPPED = frozenset({"ws", "comment", "block", "string"})
_CLASS_KEYWORDS = frozenset({"class", "interface", "trait"})
_USE_KINDS = frozenset({"function", "const"})


class Token(NamedTuple):
    kind: str
    text: str
    offset: int


class PhpLexer:
    """Split PHP source into significant tokens (names, variables, operators, punctuation)."""

    def tokenize(self, source: str) -> list[Token]:
        """
        Raises:
            ValueError: on an unterminated comment, string or heredoc.
        """
        tokens: list[Token] = []
        pos = self._skip_inline_html(source, 0)
        size = len(source)
        while pos < size:
            match = _TOKEN.match(source, pos)
            if match is None:  # pragma: no cover - the punct branch matches any char
                raise ValueError(f"cannot tokenize at offset {pos}")
            kind = match.lastgroup or "punct"
            if kind in ("quote", "label"):
                kind = "heredoc"
            if kind == "unterminated":
                raise ValueError(f"unterminated comment or string at offset {pos}")
            if kind == "heredoc":
                pos = self._skip_heredoc(source, match)
                continue
            if kind == "close":
                pos = self._skip_inline_html(source, match.end())
                continue
            if kind not in _SKIPPED:
                tokens.append(Token(kind, match.group(), pos))
            pos = match.end()
        return tokens

    @staticmethod
    def _skip_inline_html(source: str, pos: int) -> int:
        opening = _OPEN_TAG.search(source, pos)
        return opening.end() if opening else len(source)

    @staticmethod
    def _skip_heredoc(source: str, match: "re.Match[str]") -> int:
        label = match.group("label")
        closing = re.compile(rf"^[ \t]*{re.escape(label)}\b", re.MULTILINE)
        end = closing.search(source, match.end())
        if end is None:
            raise ValueError(f"unterminated heredoc '{label}' at offset {match.start()}")
        return end.end()


class _LineIndex:
    """Offset -> 1-based (line, column)."""

    def __init__(self, source: str) -> None:
        self._starts = [0] + [m.end() for m in re.finditer(r"\r\n|\r|\n", source)]

    def locate(self, offset: int) -> Location:
        line = bisect.bisect_right(self._starts, offset)
        return Location(line=line, column=offset - self._starts[line - 1] + 1)


class _ReferenceExtractor:
    """Walk a token stream and collect the namespace and referenced symbols."""

    def __init__(self, tokens: list[Token], lines: _LineIndex, include_inline_references: bool) -> None:
        self.tokens = tokens
        self.lines = lines
        self.include_inline_references = include_inline_references
        self.namespace: Optional[QualifiedName] = None
        self.references: list[Reference] = []

    def _peek(self, index: int) -> Optional[Token]:
        return self.tokens[index] if index < len(self.tokens) else None

    def _is_punct(self, index: int, text: str) -> bool:
        token = self._peek(index)
        return token is not None and token.kind == "punct" and token.text == text

    def _is_word(self, index: int, words: frozenset[str]) -> bool:
        token = self._peek(index)
        return token is not None and token.kind == "name" and token.text.lower() in words

    def _add(self, name: str, offset: int) -> None:
        symbol = QualifiedName.parse(name)
        if not symbol.is_empty():
            self.references.append(Reference(symbol=symbol, location=self.lines.locate(offset)))

    def extract(self) -> None:
        depth = 0
        class_depths: list[int] = []
        awaiting_body = False
        index = 0
        previous: Optional[Token] = None
        while index < len(self.tokens):
            token = self.tokens[index]
            if token.kind == "punct" and token.text == "{":
                depth += 1
                if awaiting_body:
                    class_depths.append(depth)
                    awaiting_body = False
            elif token.kind == "punct" and token.text == "}":
                if class_depths and class_depths[-1] == depth:
                    class_depths.pop()
                depth = max(depth - 1, 0)
            elif token.kind == "name" and not (previous is not None and previous.kind == "op"):
                word = token.text.lower()
                if word in _CLASS_KEYWORDS or (word == "enum" and self._is_enum(index)):
                    awaiting_body = True
                elif word == "namespace":
                    index = self._namespace(index)
                    previous = token
                    continue
                elif word == "use" and not class_depths:
                    index = self._use(index)
                    previous = token
                    continue
                elif self.include_inline_references and token.text.startswith("\\"):
                    self._add(token.text, token.offset)
            previous = token
            index += 1

    def _is_enum(self, index: int) -> bool:
        name = self._peek(index + 1)
        return name is not None and name.kind == "name" and (
            self._is_punct(index + 2, "{") or self._is_punct(index + 2, ":")
        )

    def _namespace(self, index: int) -> int:
        name = self._peek(index + 1)
        if name is None or name.kind != "name":
            return index + 1
        if self.namespace is None:
            self.namespace = QualifiedName.parse(name.text)
        return index + 2

    def _skip_statement(self, index: int) -> int:
        while index < len(self.tokens) and not self._is_punct(index, ";"):
            index += 1
        return index + 1

    def _use(self, index: int) -> int:
        index += 1
        if self._is_punct(index, "("):
            return index
        if self._is_word(index, _USE_KINDS) and (nxt := self._peek(index + 1)) and nxt.kind == "name":
            index += 1
        while True:
            name = self._peek(index)
            if name is None or name.kind != "name":
                return self._skip_statement(index)
            if name.text.endswith("\\") and self._is_punct(index + 1, "{"):
                index = self._group(name.text, index + 2)
            else:
                self._add(name.text, name.offset)
                index += 1
                if self._is_word(index, frozenset({"as"})):
                    index += 2
            if self._is_punct(index, ","):
                index += 1
                continue
            if self._is_punct(index, ";"):
                return index + 1
            return self._skip_statement(index)

    def _group(self, prefix: str, index: int) -> int:
        while index < len(self.tokens):
            if self._is_punct(index, "}"):
                return index + 1
            if self._is_punct(index, ","):
                index += 1
                continue
            if self._is_word(index, _USE_KINDS) and (nxt := self._peek(index + 1)) and nxt.kind == "name":
                index += 1
            item = self.tokens[index]
            if item.kind == "name":
                self._add(prefix + item.text, item.offset)
                index += 1
                if self._is_word(index, frozenset({"as"})):
                    index += 2
            else:
                index += 1
        return index


class PhpNodeParser:
    """
    Infrastructure implementation of NodeParserProtocol for PHP sources.

    With ``include_inline_references`` every fully-qualified name written in
    code (``\\Vendor\\Pkg\\Class``) is reported too, not only imports.
    """

    def __init__(self, include_inline_references: bool = False) -> None:
        self.include_inline_references = include_inline_references
        self.lexer = PhpLexer()

    def parse(self, file_path: str) -> Node:
        try:
            raw = Path(file_path).read_bytes()
        except OSError as exc:
            raise NodeParseError(file_path, f"unreadable file ({exc.strerror or exc})") from exc
        try:
            source = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise NodeParseError(file_path, f"invalid UTF-8 at byte {exc.start}") from exc
        return self.parse_source(source, file_path)

    def parse_source(self, source: str, file_path: str = "<string>") -> Node:
        try:
            tokens = self.lexer.tokenize(source)
        except ValueError as exc:
            raise NodeParseError(file_path, str(exc)) from exc
        extractor = _ReferenceExtractor(tokens, _LineIndex(source), self.include_inline_references)
        extractor.extract()
        logger.debug(
            "Parsed %s: namespace=%s references=%d",
            file_path,
            extractor.namespace,
            len(extractor.references),
        )
        return Node(
            file_path=file_path,
            declared_namespace=extractor.namespace or QualifiedName(),
            references=tuple(extractor.references),
        )
