from __future__ import annotations
from typing import Any, Callable, Iterable, List, Optional, Set, Union

from llparsing.ast import Node, Token
from llparsing.configuration import CompiledConfiguration
from llparsing.errors import ParserError
from llparsing.grammar import Production, SymbolSpec, eoi, epsilon
from llparsing.interfaces import Parser, TokenStream
from llparsing.scanner import TokenList

ReduceCallback = Callable[[Production, List[Any]], Any]


class _Reduction:
    """Stack marker: every symbol above it belongs to production."""

    def __init__(self, production: Production) -> None:
        self.production = production

    def __repr__(self) -> str:
        return "<reduce %d>" % self.production.index


class Driver(Parser):
    """
    LL(1) parser.  The Driver class uses a CompiledConfiguration in order
    to parse the token stream handed to parse().

    on_reduce, if given, is called as on_reduce(production, children) each
    time a production has been completely matched.  children holds the
    matched tokens and, for nonterminals, whatever the inner reductions
    produced.  A return value other than None stands in for the node in
    the parent's children (and, at the root, as the parse result).
    Exceptions raised by on_reduce abort the parse unmodified.

    A Driver may be used for any number of sequential parses, but must not
    be shared between threads; the configuration can be.
    """

    _stack: List[Union[SymbolSpec, _Reduction]]
    _values: List[List[Any]]
    # Stack entries popped since the last token was consumed (top first),
    # and the depth below which the stack is unchanged since then.
    _saved: List[Union[SymbolSpec, _Reduction]]
    _low: int

    def __init__(
        self,
        config: CompiledConfiguration,
        on_reduce: Optional[ReduceCallback] = None,
        verbose: bool = False,
    ) -> None:
        self._config = config
        self._on_reduce = on_reduce
        self.verbose = verbose
        self.reset()

    @property
    def config(self) -> CompiledConfiguration:
        return self._config

    def reset(self) -> None:
        self._stack = []
        self._values = []
        self._saved = []
        self._low = 0

    def parse(self, tokens: Union[TokenStream, Iterable[Any]]) -> Any:
        """
        Parse tokens, which is either a TokenStream or an iterable of
        Tokens and/or token kind strings.  Returns the parse tree (or the
        root's on_reduce result).  Raises ParserError if the input is not
        derivable from the start symbol."""
        if isinstance(tokens, TokenStream):
            stream = tokens
        else:
            stream = TokenList(tokens)

        self.reset()
        self._stack.append(self._config.start)
        self._values.append([])
        self._low = 1
        try:
            while self._stack:
                self._step(stream)

            token = stream.peek()
            if token is not None:
                raise self._error(stream, token)
            if self.verbose:
                print("   --> accept")
            return self._values[0][0]
        finally:
            self.reset()

    def _step(self, stream: TokenStream) -> None:
        top = self._stack[-1]
        if self.verbose:
            self._printStack()

        if isinstance(top, _Reduction):
            self._pop()
            children = self._values.pop()
            r = self._production(top.production, children)
            self._values[-1].append(r)
            if self.verbose:
                print("   --> %r" % top.production)
            return

        token = stream.peek()
        if top.is_terminal:
            if token is None or token.kind != top.token_kind:
                raise self._error(stream, token)
            if self.verbose:
                print("INPUT: %r" % token)
            self._stack.pop()
            self._values[-1].append(token)
            stream.advance()
            self._low = len(self._stack)
            self._saved = []
            return

        lookahead = self._lookahead(token)
        index = None
        if lookahead is not None:
            index = self._config.predict(top, lookahead)
        if index is None:
            raise self._error(stream, token)

        production = self._config.production(index)
        if self.verbose:
            print("   --> expand %r" % production)
        self._pop()
        self._stack.append(_Reduction(production))
        self._stack.extend(reversed(production.rhs))
        self._values.append([])

    def _lookahead(self, token: Optional[Token]) -> Optional[str]:
        if token is None:
            return eoi.name
        sym = self._config.terminal_for(token.kind)
        if sym is None:
            return None
        return sym.name

    def _pop(self) -> Union[SymbolSpec, _Reduction]:
        entry = self._stack.pop()
        if len(self._stack) < self._low:
            self._low = len(self._stack)
            self._saved.append(entry)
        return entry

    def _expected(self) -> Set[str]:
        """
        Terminals that are acceptable in place of the current token: FIRST
        of the symbols that were pending when the previous token was
        consumed, walking down until one of them is not nullable, and end
        of input if all of them are.  The stack is rebuilt from the saved
        entries, since expansions to the empty string may have popped some
        of them without consuming anything."""
        pending = self._saved + list(reversed(self._stack[: self._low]))
        expected: Set[str] = set()
        for entry in pending:
            if isinstance(entry, _Reduction):
                continue
            expected.update(self._config.first(entry) - {epsilon.name})
            if not self._config.is_nullable(entry):
                return expected
        expected.add(eoi.name)
        return expected

    def _error(
        self, stream: TokenStream, token: Optional[Token]
    ) -> ParserError:
        if token is None:
            return ParserError(
                self._expected(), eoi.name, stream.end_position()
            )
        actual = self._lookahead(token) or token.kind
        return ParserError(self._expected(), actual, token.position, token)

    def _production(
        self, production: Production, children: List[Any]
    ) -> Any:
        r = None
        if self._on_reduce is not None:
            r = self._on_reduce(production, children)

        # Callbacks that only want side effects can return None; keep the
        # tree node in that case.
        if r is None:
            r = Node(production, children)

        return r

    def _printStack(self) -> None:
        print("STACK:", end=" ")
        for entry in reversed(self._stack):
            print("%r" % entry, end=" ")
        print()
