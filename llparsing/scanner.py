from __future__ import annotations
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from re import compile as re_compile

from llparsing.ast import Token
from llparsing.errors import ParsingError
from llparsing.interfaces import TokenStream


class ScannerError(ParsingError):
    def __init__(self, message: str, line: int, column: int) -> None:
        ParsingError.__init__(
            self, "%s (line %d, column %d)" % (message, line, column)
        )
        self.message = message
        self.line = line
        self.column = column


class TokenList(TokenStream):
    """
    TokenStream over an in-memory sequence.  Items may be Token instances
    or plain strings, which are taken as token kinds.  Tokens without a
    position get their 1-based index in the sequence.
    """

    def __init__(
        self,
        tokens: Iterable[Union[Token, str]],
        end_position: Any = None,
    ) -> None:
        self._tokens: List[Token] = []
        for i, tok in enumerate(tokens):
            if isinstance(tok, str):
                tok = Token(tok, tok, i + 1)
            elif tok.position is None:
                tok = Token(tok.kind, tok.lexeme, i + 1)
            self._tokens.append(tok)
        if end_position is None:
            end_position = len(self._tokens) + 1
        self._end_position = end_position
        self._idx = 0

    def peek(self) -> Optional[Token]:
        if self._idx < len(self._tokens):
            return self._tokens[self._idx]
        return None

    def advance(self) -> None:
        if self._idx >= len(self._tokens):
            raise IndexError("advance() past the end of the token list")
        self._idx += 1

    def end_position(self) -> Any:
        return self._end_position

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Any:
        return iter(self._tokens)

    def __repr__(self) -> str:
        return "TokenList(%r)" % (self._tokens,)


class Scanner:
    """
    Regular expression scanner.  patterns is a sequence of (kind, regex)
    pairs; the longest match wins, and ties go to the pattern listed first.
    A kind of None marks text that is matched and then dropped (comments,
    for example).  keywords maps lexemes to the kind they should have
    instead of the one their pattern gave them.

        scanner = Scanner([("NUM", r"[0-9]+"), ("PLUS", r"\\+")])
        tokens = scanner.scan("1 + 2")
    """

    def __init__(
        self,
        patterns: Sequence[Tuple[Optional[str], str]],
        re_whitespace: str = r"\s+",
        keywords: Optional[dict[str, str]] = None,
    ) -> None:
        self.regexes = [(re_compile(rgx), kind) for kind, rgx in patterns]
        self.keywords = dict(keywords or {})
        self.whitespace = re_compile(re_whitespace)

    def scan(self, string: str) -> TokenList:
        return TokenList(
            self.tokens(string), self._position(string, len(string))
        )

    def tokens(self, string: str) -> Iterable[Token]:
        whitespace = self.whitespace
        regexes = self.regexes

        idx = 0
        line, line_start = 1, 0
        while idx < len(string):
            m = whitespace.match(string, idx)
            if m and m.end() > idx:
                line, line_start = _advance_lines(
                    string, idx, m.end(), line, line_start
                )
                idx = m.end()
                continue
            max_idx = idx
            max_kind: Optional[str] = None
            max_str = ""
            for rgx, kind in regexes:
                m = rgx.match(string, idx)
                if m and m.end() > max_idx:
                    max_kind = kind
                    max_str = m.group()
                    max_idx = m.end()
            if max_idx == idx:
                raise ScannerError(
                    "Scanning failed at %r" % string[idx],
                    line,
                    idx - line_start + 1,
                )
            if max_kind is not None:
                kind = self.keywords.get(max_str, max_kind)
                yield Token(kind, max_str, (line, idx - line_start + 1))
            line, line_start = _advance_lines(
                string, idx, max_idx, line, line_start
            )
            idx = max_idx

    @staticmethod
    def _position(string: str, idx: int) -> Tuple[int, int]:
        line = string.count("\n", 0, idx) + 1
        return (line, idx - (string.rfind("\n", 0, idx) + 1) + 1)


def _advance_lines(
    string: str, start: int, end: int, line: int, line_start: int
) -> Tuple[int, int]:
    newlines = string.count("\n", start, end)
    if newlines:
        line += newlines
        line_start = string.rfind("\n", start, end) + 1
    return line, line_start
