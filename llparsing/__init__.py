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
#
#
# Release history:
#
# 1.0 (19 October 2026): Initial release.  LL(1) table compiler for the
#                        %name/%terminals grammar DSL, table-driven Driver.
#
# ============================================================================
"""
The llparsing module implements an LL(1) parser generator, as well as the
runtime support for using a generated parser, via the Driver class.  Grammars
are written in a small text format (see llparsing.compiler for the full
description):

    %name Example;
    %terminals A B;

    root = A | B;

The configuration compiler validates the grammar (unknown and duplicate
symbols, left recursion, conflicts between productions) and produces a
CompiledConfiguration, which holds the LL(1) parse table.  A compiled
configuration is never modified, so it can be shared by any number of Driver
instances, on any number of threads:

    config = llparsing.compile_grammar(text)
    tree = llparsing.Driver(config).parse(["A"])

Compilation errors derive from GrammarError; syntax errors in parsed input
are reported as ParserError, which carries the set of expected terminals,
the offending terminal, and its position.
"""

from __future__ import annotations


__all__ = (
    "AmbiguousGrammarError",
    "CompiledConfiguration",
    "ConfigurationCompiler",
    "Driver",
    "DuplicateSymbolError",
    "Grammar",
    "GrammarError",
    "GrammarSyntaxError",
    "LeftRecursionError",
    "Node",
    "ParseTable",
    "Parser",
    "ParserError",
    "Scanner",
    "ScannerError",
    "Token",
    "TokenList",
    "TokenStream",
    "UnknownSymbolError",
    "compile_grammar",
    "__version__",
)

from llparsing._version import __version__
from llparsing.ast import Node, Token
from llparsing.compiler import ConfigurationCompiler, compile_grammar
from llparsing.configuration import CompiledConfiguration
from llparsing.driver import Driver
from llparsing.errors import (
    AmbiguousGrammarError,
    DuplicateSymbolError,
    GrammarError,
    GrammarSyntaxError,
    LeftRecursionError,
    ParserError,
    UnknownSymbolError,
)
from llparsing.grammar import Grammar
from llparsing.interfaces import Parser, TokenStream
from llparsing.scanner import Scanner, ScannerError, TokenList
from llparsing.table import ParseTable
