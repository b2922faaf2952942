"""
This module declares several structural ("duck typing") interfaces
that objects or classes can implement to be used in the library
"""

from __future__ import annotations
from typing import Any, Optional

import abc

from llparsing.ast import Token


class TokenStream(abc.ABC):
    """
    Pull-based token source.  The driver only ever looks at the current
    token and moves past it; peek() returns None once the input is
    exhausted.
    """

    @abc.abstractmethod
    def peek(self) -> Optional[Token]:
        raise NotImplementedError

    @abc.abstractmethod
    def advance(self) -> None:
        raise NotImplementedError

    def end_position(self) -> Any:
        """Position reported for errors at end of input."""
        return None


class Parser(abc.ABC):
    @abc.abstractmethod
    def parse(self, tokens: Any) -> Any:
        raise NotImplementedError
