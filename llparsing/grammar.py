# ============================================================================
# Copyright (c) 2007 Jason Evans <jasone@canonware.com>
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
# ============================================================================
"""
This module contains the classes that make up the grammar model: symbols,
precedences, productions, and the Grammar container that owns them.

A Grammar is built incrementally (add_terminal(), add_nonterminal(),
add_production(), ...) and then frozen by finalize(), which resolves every
right-hand side name.  Everything downstream (FIRST/FOLLOW computation,
table compilation, parsing) only ever sees finalized grammars.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Tuple

import enum

from llparsing.errors import (
    DuplicateSymbolError,
    GrammarError,
    UnknownSymbolError,
)


class SymbolKind(enum.Enum):
    TERMINAL = "terminal"
    NONTERMINAL = "nonterminal"


class SymbolSpec:
    """
    Grammar symbol.  Symbols are a tagged variant rather than a class
    hierarchy: kind says whether this is a terminal or a nonterminal, and
    terminals additionally carry the token_kind that input tokens are
    matched against (by default the terminal's name).
    """

    def __init__(
        self,
        name: str,
        kind: SymbolKind,
        token_kind: Optional[str] = None,
    ) -> None:
        self.name = name
        self.kind = kind
        if kind is SymbolKind.TERMINAL and token_kind is None:
            token_kind = name
        self.token_kind = token_kind

    @property
    def is_terminal(self) -> bool:
        return self.kind is SymbolKind.TERMINAL

    def __hash__(self) -> int:
        return hash(self.name)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, SymbolSpec):
            return self.name == other.name and self.kind is other.kind
        else:
            return NotImplemented

    def __repr__(self) -> str:
        return self.name

    __str__ = __repr__


# <$>.
eoi = SymbolSpec("<$>", SymbolKind.TERMINAL)

# <e>.
epsilon = SymbolSpec("<e>", SymbolKind.TERMINAL)

RESERVED_NAMES = frozenset((eoi.name, epsilon.name))


class Precedence:
    """
    Precedences decide between two productions of the same nonterminal
    that predict the same lookahead terminal.  A production with a declared
    precedence beats one without; otherwise the higher level wins, and
    equal levels keep the production that was declared first.
    """

    def __init__(self, name: str, level: int) -> None:
        self.name = name
        self.level = level

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Precedence):
            return (self.name, self.level) == (other.name, other.level)
        else:
            return NotImplemented

    def __hash__(self) -> int:
        return hash((self.name, self.level))

    def __repr__(self) -> str:
        return "[%s %d]" % (self.name, self.level)


class Production:
    """
    A production lhs ::= rhs.  index is the production's position in
    declaration order within its grammar, and is what the parse table
    stores.
    """

    def __init__(
        self,
        index: int,
        lhs: SymbolSpec,
        rhs: Tuple[SymbolSpec, ...],
        prec: Optional[Precedence] = None,
        line: Optional[int] = None,
    ) -> None:
        self.index = index
        self.lhs = lhs
        self.rhs = rhs
        self.prec = prec
        self.line = line

    def __hash__(self) -> int:
        return self.index

    def __eq__(self, other: Any) -> bool:
        if type(other) is Production:
            return (self.index, self.lhs, self.rhs) == (
                other.index,
                other.lhs,
                other.rhs,
            )
        else:
            return NotImplemented

    def __lt__(self, other: Any) -> bool:
        if type(other) is Production:
            return self.index < other.index
        else:
            return NotImplemented

    def __repr__(self) -> str:
        if self.rhs:
            rhs = " ".join(["%r" % elm for elm in self.rhs])
        else:
            rhs = epsilon.name
        if self.prec is None:
            return "%r ::= %s." % (self.lhs, rhs)
        return "%r ::= %s. [%s]" % (self.lhs, rhs, self.prec.name)


class Grammar:
    """
    Container for the symbols, precedences and productions of one grammar.

    Names are declared with add_terminal()/add_nonterminal(); redeclaring a
    name with the same kind is harmless, with a different kind it raises
    DuplicateSymbolError.  Right-hand sides are plain names that are only
    resolved by finalize(), so rules may refer to nonterminals that are
    defined further down.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name
        self._symbols: Dict[str, SymbolSpec] = {}
        self._token_kinds: Dict[str, str] = {}
        self._precedences: Dict[str, Precedence] = {}
        self._rules: List[
            Tuple[str, Tuple[str, ...], Optional[str], Optional[int]]
        ] = []
        self._start_name: Optional[str] = None
        self._final = False

        # Populated by finalize().
        self._start: Optional[SymbolSpec] = None
        self._productions: List[Production] = []
        self._by_lhs: Dict[str, List[Production]] = {}

    # =========================================================================
    # Construction.
    #
    def add_terminal(
        self, name: str, token_kind: Optional[str] = None
    ) -> SymbolSpec:
        sym = self._declare(name, SymbolKind.TERMINAL, token_kind)
        assert sym.token_kind is not None
        owner = self._token_kinds.setdefault(sym.token_kind, name)
        if owner != name:
            raise GrammarError(
                "Terminals %s and %s share token kind %s"
                % (owner, name, sym.token_kind)
            )
        return sym

    def add_nonterminal(self, name: str) -> SymbolSpec:
        return self._declare(name, SymbolKind.NONTERMINAL)

    def add_precedence(self, name: str, level: int) -> Precedence:
        self._check_mutable()
        if name in self._precedences:
            raise GrammarError("Duplicate precedence name: %s" % (name,))
        prec = Precedence(name, level)
        self._precedences[name] = prec
        return prec

    def add_production(
        self,
        lhs: str,
        rhs: Iterable[str],
        prec: Optional[str] = None,
        line: Optional[int] = None,
    ) -> None:
        self._check_mutable()
        self.add_nonterminal(lhs)
        if prec is not None and prec not in self._precedences:
            raise GrammarError("Unknown precedence: %s" % (prec,))
        self._rules.append((lhs, tuple(rhs), prec, line))

    def set_start(self, name: str) -> None:
        self._check_mutable()
        self._start_name = name

    def has_symbol(self, name: str) -> bool:
        return name in self._symbols

    def _declare(
        self,
        name: str,
        kind: SymbolKind,
        token_kind: Optional[str] = None,
    ) -> SymbolSpec:
        self._check_mutable()
        if name in RESERVED_NAMES:
            raise GrammarError("Reserved symbol name: %s" % (name,))
        sym = self._symbols.get(name)
        if sym is None:
            sym = SymbolSpec(name, kind, token_kind)
            self._symbols[name] = sym
        elif sym.kind is not kind:
            raise DuplicateSymbolError(name, sym.kind.value, kind.value)
        return sym

    def _check_mutable(self) -> None:
        if self._final:
            raise GrammarError("Grammar is finalized")

    # =========================================================================
    # Finalization.
    #
    def finalize(self) -> None:
        """
        Resolve every production's right-hand side and freeze the grammar.
        Calling finalize() more than once is harmless."""
        if self._final:
            return

        if not self._rules:
            raise GrammarError("No start symbol specified")

        by_lhs: Dict[str, List[Production]] = {
            name: []
            for name, sym in self._symbols.items()
            if sym.kind is SymbolKind.NONTERMINAL
        }
        defined = {rule[0] for rule in self._rules}

        productions = []
        for index, (lhs, names, prec, line) in enumerate(self._rules):
            rhs = []
            for name in names:
                sym = self._symbols.get(name)
                if sym is None or (
                    sym.kind is SymbolKind.NONTERMINAL and name not in defined
                ):
                    raise UnknownSymbolError(name, lhs)
                rhs.append(sym)
            production = Production(
                index,
                self._symbols[lhs],
                tuple(rhs),
                None if prec is None else self._precedences[prec],
                line,
            )
            productions.append(production)
            by_lhs[lhs].append(production)

        start_name = self._start_name
        if start_name is None:
            start_name = self._rules[0][0]
        start = self._symbols.get(start_name)
        if (
            start is None
            or start.kind is not SymbolKind.NONTERMINAL
            or not by_lhs[start_name]
        ):
            raise UnknownSymbolError(start_name)

        self._start = start
        self._productions = productions
        self._by_lhs = by_lhs
        self._final = True

    # =========================================================================
    # Read-only views of a finalized grammar.
    #
    @property
    def finalized(self) -> bool:
        return self._final

    @property
    def start(self) -> SymbolSpec:
        self._check_final()
        assert self._start is not None
        return self._start

    @property
    def productions(self) -> Tuple[Production, ...]:
        self._check_final()
        return tuple(self._productions)

    @property
    def terminals(self) -> Tuple[SymbolSpec, ...]:
        return tuple(
            sym for sym in self._symbols.values() if sym.is_terminal
        )

    @property
    def nonterminals(self) -> Tuple[SymbolSpec, ...]:
        return tuple(
            sym for sym in self._symbols.values() if not sym.is_terminal
        )

    @property
    def precedences(self) -> Tuple[Precedence, ...]:
        return tuple(self._precedences.values())

    def symbol(self, name: str) -> SymbolSpec:
        if name == eoi.name:
            return eoi
        try:
            return self._symbols[name]
        except KeyError:
            raise UnknownSymbolError(name) from None

    def terminal_for_kind(self, token_kind: str) -> Optional[SymbolSpec]:
        name = self._token_kinds.get(token_kind)
        if name is None:
            return None
        return self._symbols[name]

    def productions_for(self, nonterm: SymbolSpec) -> Tuple[Production, ...]:
        """Productions of nonterm, in declaration order."""
        self._check_final()
        return tuple(self._by_lhs.get(nonterm.name, ()))

    def _check_final(self) -> None:
        if not self._final:
            raise GrammarError("Grammar is not finalized")

    def __repr__(self) -> str:
        lines = ["Grammar %s:" % (self.name or "<anonymous>",)]
        for production in self._productions:
            lines.append("  %d: %r" % (production.index, production))
        return "\n".join(lines)
