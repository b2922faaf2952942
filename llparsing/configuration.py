"""
The CompiledConfiguration class holds the read-only data structures that a
Driver needs in order to parse input.  Grammar compilation results in a
CompiledConfiguration instance, which can then be shared by any number of
Driver instances (including drivers running on different threads).
"""

from __future__ import annotations
from typing import Any, FrozenSet, Iterable, Optional, Tuple

from llparsing.grammar import Grammar, Production, SymbolSpec, eoi
from llparsing.sets import FirstFollow
from llparsing.table import ParseTable


class CompiledConfiguration:
    def __init__(
        self,
        grammar: Grammar,
        sets: FirstFollow,
        table: ParseTable,
        warnings: Iterable[str] = (),
        digest: Optional[str] = None,
    ) -> None:
        assert grammar.finalized
        self._grammar = grammar
        self._sets = sets
        self._table = table
        self._warnings = tuple(warnings)
        self._digest = digest
        self._productions = grammar.productions

    @property
    def name(self) -> Optional[str]:
        """The grammar's %name, if it declared one."""
        return self._grammar.name

    @property
    def grammar(self) -> Grammar:
        return self._grammar

    @property
    def sets(self) -> FirstFollow:
        return self._sets

    @property
    def table(self) -> ParseTable:
        return self._table

    @property
    def start(self) -> SymbolSpec:
        return self._grammar.start

    @property
    def warnings(self) -> Tuple[str, ...]:
        return self._warnings

    @property
    def digest(self) -> Optional[str]:
        """sha256 of the grammar text this configuration was compiled
        from."""
        return self._digest

    def production(self, index: int) -> Production:
        return self._productions[index]

    def terminal_for(self, token_kind: str) -> Optional[SymbolSpec]:
        """Map an input token kind to the terminal it matches."""
        return self._grammar.terminal_for_kind(token_kind)

    def predict(self, nonterm: SymbolSpec, terminal: str) -> Optional[int]:
        return self._table.get(nonterm.name, terminal)

    def first(self, sym: SymbolSpec) -> FrozenSet[str]:
        return self._sets.first(sym)

    def is_nullable(self, sym: SymbolSpec) -> bool:
        return self._sets.is_nullable(sym)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") and name not in self.__dict__:
            object.__setattr__(self, name, value)
        else:
            raise AttributeError(
                "CompiledConfiguration is immutable (%s)" % name
            )

    def __getstate__(self) -> dict[str, Any]:
        return dict(self.__dict__)

    def __setstate__(self, state: dict[str, Any]) -> None:
        for k, v in state.items():
            object.__setattr__(self, k, v)

    def __repr__(self) -> str:
        lines = [
            "CompiledConfiguration %s (start %s, end %s):"
            % (self.name or "<anonymous>", self.start, eoi)
        ]
        for production in self._productions:
            lines.append("  %d: %r" % (production.index, production))
        lines.append("%r" % self._table)
        return "\n".join(lines)
