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
The functions in this module turn a finalized grammar and its FIRST/FOLLOW
sets into an LL(1) parse table.

Table construction is the classic one: for each production A ::= a, the
cell (A, t) predicts the production for every terminal t in FIRST(a), and,
when a is nullable, for every t in FOLLOW(A).  A cell that would predict two
different productions is a conflict.  Conflicts are resolved by precedence
when the productions carry one, and are otherwise fatal.

Left recursion makes the construction meaningless (a left-recursive
nonterminal conflicts with itself on every terminal in its FIRST set), so
it is detected and reported separately before any cell is filled in.
"""

from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
)

import types

from llparsing.errors import AmbiguousGrammarError, LeftRecursionError
from llparsing.grammar import Grammar, Production, SymbolSpec, epsilon
from llparsing.sets import FirstFollow

if TYPE_CHECKING:
    from typing_extensions import Literal

    ConflictResolution = Literal[
        "old",  # Keep old.
        "new",  # Keep new.
        "tie",  # Keep old, but warn.
        "err",  # Unresolvable conflict.
    ]


class ParseTable:
    """
    Mapping from (nonterminal name, terminal name) to a production index.
    Absent cells are syntax errors.  ParseTable instances are never
    modified once constructed.
    """

    def __init__(self, cells: Mapping[str, Mapping[str, int]]) -> None:
        self._cells: Dict[str, Dict[str, int]] = {
            nonterm: dict(row) for nonterm, row in cells.items()
        }

    def get(self, nonterm: str, terminal: str) -> Optional[int]:
        row = self._cells.get(nonterm)
        if row is None:
            return None
        return row.get(terminal)

    def row(self, nonterm: str) -> Mapping[str, int]:
        return types.MappingProxyType(self._cells.get(nonterm, {}))

    def __iter__(self) -> Iterator[Tuple[str, str, int]]:
        for nonterm, row in self._cells.items():
            for terminal, index in row.items():
                yield nonterm, terminal, index

    def __len__(self) -> int:
        return sum(len(row) for row in self._cells.values())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParseTable):
            return self._cells == other._cells
        else:
            return NotImplemented

    def __repr__(self) -> str:
        lines = []
        for nonterm, row in self._cells.items():
            lines.append("%s:" % nonterm)
            for terminal in sorted(row):
                lines.append("  %15s : %d" % (terminal, row[terminal]))
        return "\n".join(lines)


def check_left_recursion(grammar: Grammar, sets: FirstFollow) -> None:
    """
    Raise LeftRecursionError if some nonterminal can derive a string that
    begins with itself.

    The walk is a depth-first search over "can derive as first symbol"
    edges: A -> B whenever A ::= a B b with a nullable.  Nonterminals and
    productions are visited in declaration order, so the reported cycle is
    deterministic."""
    edges: Dict[str, List[str]] = {}
    for nonterm in grammar.nonterminals:
        targets: List[str] = []
        for prod in grammar.productions_for(nonterm):
            for sym in prod.rhs:
                if sym.is_terminal:
                    break
                if sym.name not in targets:
                    targets.append(sym.name)
                if not sets.is_nullable(sym):
                    break
        edges[nonterm.name] = targets

    done: Set[str] = set()
    for nonterm in grammar.nonterminals:
        if nonterm.name in done:
            continue
        # One edge iterator per nonterminal on the current path.
        path: List[str] = [nonterm.name]
        frames: List[Iterator[str]] = [iter(edges[nonterm.name])]
        while frames:
            target = next(frames[-1], None)
            if target is None:
                frames.pop()
                done.add(path.pop())
            elif target in path:
                cycle = path[path.index(target):] + [target]
                raise LeftRecursionError(cycle)
            elif target not in done:
                path.append(target)
                frames.append(iter(edges[target]))


def compile_table(
    grammar: Grammar, sets: FirstFollow
) -> Tuple[ParseTable, List[str]]:
    """
    Build the parse table.  Returns the table and a list of warnings about
    conflicts that were resolved by declaration order between productions
    of equal precedence."""
    productions = grammar.productions
    cells: Dict[str, Dict[str, int]] = {
        nonterm.name: {} for nonterm in grammar.nonterminals
    }
    warnings: List[str] = []

    for prod in productions:
        row = cells[prod.lhs.name]
        for terminal in _predict(prod, sets):
            old_index = row.get(terminal)
            if old_index is None or old_index == prod.index:
                row[terminal] = prod.index
                continue

            old = productions[old_index]
            resolution = _resolve(old, prod)
            if resolution == "err":
                raise AmbiguousGrammarError(
                    prod.lhs.name, terminal, (old, prod)
                )
            if resolution == "new":
                row[terminal] = prod.index
            elif resolution == "tie":
                warnings.append(
                    "Conflict on %s for %s resolved in favor of %r over %r"
                    % (terminal, prod.lhs.name, old, prod)
                )

    return ParseTable(cells), warnings


def check_unused(grammar: Grammar) -> List[str]:
    """
    Report terminals that no production uses and nonterminals that can not
    be reached from the start symbol.  These are only ever warnings."""
    used: Set[str] = set()
    for prod in grammar.productions:
        used.update(sym.name for sym in prod.rhs)

    reachable = {grammar.start.name}
    pending: List[SymbolSpec] = [grammar.start]
    while pending:
        nonterm = pending.pop()
        for prod in grammar.productions_for(nonterm):
            for sym in prod.rhs:
                if not sym.is_terminal and sym.name not in reachable:
                    reachable.add(sym.name)
                    pending.append(sym)

    lines = []
    for sym in grammar.terminals:
        if sym.name not in used:
            lines.append("Unused terminal: %s" % sym.name)
    for sym in grammar.nonterminals:
        if sym.name not in reachable:
            lines.append("Unreachable nonterminal: %s" % sym.name)
    return lines


def _predict(prod: Production, sets: FirstFollow) -> List[str]:
    first = sets.first_of_sequence(prod.rhs)
    result = sorted(first - {epsilon.name})
    if epsilon.name in first:
        result.extend(
            sorted(t for t in sets.follow(prod.lhs) if t not in result)
        )
    return result


def _resolve(old: Production, new: Production) -> ConflictResolution:
    if old.prec is None and new.prec is None:
        return "err"
    if new.prec is None:
        return "old"
    if old.prec is None:
        return "new"
    if new.prec.level > old.prec.level:
        return "new"
    if new.prec.level == old.prec.level:
        return "tie"
    return "old"
