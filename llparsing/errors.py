"""
The llparsing module implements the following exception classes:

  * AnyException
  * GrammarError
    * DuplicateSymbolError
    * UnknownSymbolError
    * GrammarSyntaxError
    * LeftRecursionError
    * AmbiguousGrammarError
  * ParsingError
    * ParserError
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from llparsing.ast import Token
    from llparsing.grammar import Production


# ============================================================================
# Begin exceptions.
#
class AnyException(Exception):
    """
    Top-level class for all exceptions thrown within the llparsing module.
    """


class GrammarError(AnyException):
    """
    Grammar error exception.  GrammarError arises when the configuration
    compiler detects an error, either while reading the grammar text or
    while generating the parsing table.  No partially built table ever
    escapes a GrammarError.
    """


class DuplicateSymbolError(GrammarError):
    """
    A symbol name was declared twice with different kinds, e.g. a terminal
    that is also given production rules.
    """

    def __init__(self, name: str, old_kind: str, new_kind: str) -> None:
        super().__init__(
            "Symbol %s redeclared as %s (previously %s)"
            % (name, new_kind, old_kind)
        )
        self.name = name
        self.old_kind = old_kind
        self.new_kind = new_kind


class UnknownSymbolError(GrammarError):
    """
    A name used on the right-hand side of a production (or as the start
    symbol) is neither a terminal nor a nonterminal with productions.  lhs
    names the nonterminal whose rule referenced it, if any.
    """

    def __init__(self, name: str, lhs: Optional[str] = None) -> None:
        if lhs is None:
            msg = "Unknown symbol: %s" % name
        else:
            msg = "Unknown symbol %s in rule for %s" % (name, lhs)
        super().__init__(msg)
        self.name = name
        self.lhs = lhs


class GrammarSyntaxError(GrammarError):
    """
    Malformed grammar text.  line and column are 1-based.
    """

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__("%s (line %d, column %d)" % (message, line, column))
        self.message = message
        self.line = line
        self.column = column


class LeftRecursionError(GrammarError):
    """
    The grammar is left-recursive, which top-down parsing cannot handle.
    cycle lists the nonterminals on the recursion path, starting and ending
    with the same nonterminal.
    """

    def __init__(self, cycle: Sequence[str]) -> None:
        super().__init__("Left recursion: %s" % " -> ".join(cycle))
        self.cycle: Tuple[str, ...] = tuple(cycle)
        self.nonterminal = self.cycle[0]


class AmbiguousGrammarError(GrammarError):
    """
    Two productions of the same nonterminal both predict the same lookahead
    terminal and no precedence annotation decides between them.
    """

    def __init__(
        self,
        nonterminal: str,
        terminal: str,
        productions: Tuple[Production, Production],
    ) -> None:
        super().__init__(
            "Ambiguous grammar: %s on %s could expand %r or %r"
            % (nonterminal, terminal, productions[0], productions[1])
        )
        self.nonterminal = nonterminal
        self.terminal = terminal
        self.productions = productions


class ParsingError(AnyException):
    """
    Top level parse-time exception class, from which we derive all
    exceptions that occur during the parsing of an input token stream.
    """


class ParserError(ParsingError):
    """
    Parser syntax error.  ParserError arises when a Driver detects that its
    input can not be derived from the start symbol.

    expected : frozenset of terminal names that would have been accepted.
    actual : name of the offending terminal, or "<$>" at end of input.
    position : position of the offending token (a 1-based token index
               unless the token stream supplies its own positions).
    token : the offending Token, or None at end of input.
    """

    def __init__(
        self,
        expected: Iterable[str],
        actual: str,
        position: object,
        token: Optional[Token] = None,
    ) -> None:
        self.expected = frozenset(expected)
        self.actual = actual
        self.position = position
        self.token = token
        super().__init__(self._render())

    def _render(self) -> str:
        if self.token is not None and self.token.lexeme not in (
            None,
            self.actual,
        ):
            actual = "%s %r" % (self.actual, self.token.lexeme)
        else:
            actual = self.actual
        return "Unexpected %s at %s; expected %s" % (
            actual,
            _render_position(self.position),
            " or ".join(sorted(self.expected)) or "nothing",
        )

    def __reduce__(self):  # type: ignore
        return (
            type(self),
            (self.expected, self.actual, self.position, self.token),
        )


def _render_position(position: object) -> str:
    if isinstance(position, tuple) and len(position) == 2:
        return "line %d, column %d" % position
    return "position %s" % (position,)


#
# End exceptions.
# ============================================================================
