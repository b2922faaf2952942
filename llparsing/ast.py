"""
The classes `Token` and `Node` are the runtime values of a parse.  The
driver consumes `Token` instances from a token stream and, unless a
reduction callback substitutes its own values, builds a tree of `Node`
instances whose leaves are those tokens.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Iterator, List, Optional

from mypy_extensions import mypyc_attr

if TYPE_CHECKING:
    from llparsing.grammar import Production


@mypyc_attr(serializable=True, allow_interpreted_subclasses=True)
class Symbol:
    pass


class Token(Symbol):
    """
    Tokens are terminal symbols.  The driver is fed Token instances, which
    is what drives parsing.  kind is matched against the token_kind of the
    grammar's terminals; lexeme is the raw text; position is whatever the
    producer uses to locate the token ((line, column) for the Scanner, a
    1-based index for plain token lists).

        tok = Token("NUM", "42", (1, 5))
    """

    def __init__(
        self,
        kind: str,
        lexeme: Optional[str] = None,
        position: Any = None,
    ) -> None:
        self.kind = kind
        self.lexeme = kind if lexeme is None else lexeme
        self.position = position

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Token):
            return (self.kind, self.lexeme, self.position) == (
                other.kind,
                other.lexeme,
                other.position,
            )
        else:
            return NotImplemented

    def __hash__(self) -> int:
        return hash((self.kind, self.lexeme, self.position))

    def __repr__(self) -> str:
        if self.lexeme == self.kind:
            return self.kind
        return "%s(%r)" % (self.kind, self.lexeme)


class Node(Symbol):
    """
    Nonterminal node of a parse tree.  Each node records the production
    that was expanded to build it; children are Tokens, Nodes, or whatever
    a reduction callback returned for a subtree.
    """

    def __init__(self, production: Production, children: List[Any]) -> None:
        self.production = production
        self.children = children

    @property
    def name(self) -> str:
        return self.production.lhs.name

    def leaves(self) -> Iterator[Token]:
        """Yield the tokens under this node, left to right."""
        # Lists are right recursive in LL grammars, so trees can be far
        # deeper than the interpreter's recursion limit.
        stack: List[Any] = list(reversed(self.children))
        while stack:
            child = stack.pop()
            if isinstance(child, Node):
                stack.extend(reversed(child.children))
            elif isinstance(child, Token):
                yield child

    def __repr__(self) -> str:
        pieces: List[str] = []
        stack: List[Any] = [self]
        while stack:
            item = stack.pop()
            if item is _close:
                pieces.append(")")
            elif isinstance(item, Node):
                pieces.append(" (%s" % item.name)
                stack.append(_close)
                stack.extend(reversed(item.children))
            else:
                pieces.append(" %r" % item)
        return "".join(pieces)[1:]


_close = object()
