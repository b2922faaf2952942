"""
FIRST/FOLLOW computation for finalized grammars.

All three results (nullable, FIRST, FOLLOW) are computed by round-robin
fixed-point iteration: every pass walks all productions in declaration
order and merges what it can, until a full pass adds nothing.  Sets only
ever grow and are bounded by the number of terminals, so this terminates.
"""

from __future__ import annotations
from typing import Dict, FrozenSet, Iterable, Mapping, Set

from llparsing.grammar import Grammar, SymbolSpec, eoi, epsilon


class FirstFollow:
    """
    Immutable result of the set computation for one grammar.

    first maps every symbol name to its FIRST set (terminal names, plus
    "<e>" when the symbol is nullable); follow maps every nonterminal name
    to its FOLLOW set (terminal names, plus "<$>" where the nonterminal can
    end the input).
    """

    def __init__(
        self,
        nullable: Iterable[str],
        first: Mapping[str, Iterable[str]],
        follow: Mapping[str, Iterable[str]],
    ) -> None:
        self._nullable = frozenset(nullable)
        self._first = {k: frozenset(v) for k, v in first.items()}
        self._follow = {k: frozenset(v) for k, v in follow.items()}

    @property
    def nullable(self) -> FrozenSet[str]:
        return self._nullable

    def first(self, sym: SymbolSpec) -> FrozenSet[str]:
        if sym == eoi:
            return frozenset((eoi.name,))
        return self._first[sym.name]

    def follow(self, sym: SymbolSpec) -> FrozenSet[str]:
        return self._follow[sym.name]

    def is_nullable(self, sym: SymbolSpec) -> bool:
        return sym.name in self._nullable

    def first_of_sequence(self, syms: Iterable[SymbolSpec]) -> FrozenSet[str]:
        """
        FIRST of a string of symbols.  Contains "<e>" iff every symbol of
        the string is nullable (in particular, for the empty string)."""
        result: Set[str] = set()
        for sym in syms:
            result.update(self.first(sym) - {epsilon.name})
            if not self.is_nullable(sym):
                return frozenset(result)
        result.add(epsilon.name)
        return frozenset(result)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FirstFollow):
            return (self._nullable, self._first, self._follow) == (
                other._nullable,
                other._first,
                other._follow,
            )
        else:
            return NotImplemented

    def __repr__(self) -> str:
        lines = []
        for name in self._first:
            lines.append(
                "FIRST(%s) = {%s}"
                % (name, ", ".join(sorted(self._first[name])))
            )
        for name in self._follow:
            lines.append(
                "FOLLOW(%s) = {%s}"
                % (name, ", ".join(sorted(self._follow[name])))
            )
        return "\n".join(lines)


def compute(grammar: Grammar) -> FirstFollow:
    """Compute nullable, FIRST and FOLLOW sets for a finalized grammar."""
    nullable = _nullable(grammar)
    first = _first_sets(grammar, nullable)
    follow = _follow_sets(grammar, nullable, first)
    return FirstFollow(nullable, first, follow)


def _nullable(grammar: Grammar) -> Set[str]:
    nullable: Set[str] = set()
    done = False
    while not done:
        done = True
        for prod in grammar.productions:
            if prod.lhs.name in nullable:
                continue
            if all(sym.name in nullable for sym in prod.rhs):
                nullable.add(prod.lhs.name)
                done = False
    return nullable


# Compute the first sets for all symbols.
def _first_sets(grammar: Grammar, nullable: Set[str]) -> Dict[str, Set[str]]:
    first: Dict[str, Set[str]] = {}

    # first(X) is X for terminals.
    for sym in grammar.terminals:
        first[sym.name] = {sym.name}
    for sym in grammar.nonterminals:
        first[sym.name] = {epsilon.name} if sym.name in nullable else set()

    # Repeat the following loop until no more symbols can be added to any
    # first set.
    done = False
    while not done:
        done = True
        for prod in grammar.productions:
            lhs_first = first[prod.lhs.name]
            # Iterate through the RHS and merge the first sets into this
            # symbol's, until a preceding symbol is not nullable.
            for elm in prod.rhs:
                added = first[elm.name] - lhs_first - {epsilon.name}
                if added:
                    lhs_first |= added
                    done = False
                if elm.name not in nullable:
                    break
    return first


# Compute the follow sets for all nonterminals.
def _follow_sets(
    grammar: Grammar,
    nullable: Set[str],
    first: Dict[str, Set[str]],
) -> Dict[str, Set[str]]:
    follow: Dict[str, Set[str]] = {
        sym.name: set() for sym in grammar.nonterminals
    }
    follow[grammar.start.name].add(eoi.name)

    done = False
    while not done:
        done = True
        for prod in grammar.productions:
            # Walk the RHS right to left, carrying what can follow the
            # current position: FOLLOW(lhs) for as long as the suffix seen
            # so far is nullable, plus FIRST of that suffix.
            trailer = set(follow[prod.lhs.name])
            for elm in reversed(prod.rhs):
                if not elm.is_terminal:
                    added = trailer - follow[elm.name]
                    if added:
                        follow[elm.name] |= added
                        done = False
                if elm.name in nullable:
                    trailer |= first[elm.name] - {epsilon.name}
                else:
                    trailer = first[elm.name] - {epsilon.name}
    return follow
