"""
The configuration compiler reads a grammar written in the llparsing DSL and
turns it into a CompiledConfiguration.

The DSL consists of directives and rules, each terminated by a semicolon:

    # Comments run to the end of the line.
    %name Calc::Parser;
    %terminals PLUS NUM LPAREN RPAREN;
    %precedence low;
    %precedence high;

    expr      = term expr_rest;
    expr_rest = PLUS term expr_rest | _;
    term      = NUM | LPAREN expr RPAREN;

Directives:

       %name : Cosmetic name of the grammar ("::" separated identifiers).

  %terminals : Declares terminal names.  Input tokens match a terminal when
               their kind equals the terminal's name.

 %precedence : Declares one precedence level; each %precedence directive is
               one level above the previous one.  Several names may share a
               level.  Precedences must be declared before they are used.

Rules have the form "lhs = alt | alt ... ;".  An alternative is a sequence
of symbol names, optionally followed by a precedence annotation "[name]".
An empty alternative, or "_", derives the empty string.  Names that are not
terminals must be defined by a rule somewhere in the grammar.  The lhs of
the first rule is the start symbol.

A name may be followed by one of the postfix operators ?, * and +, which
are shorthands for generated nonterminals:

    X?  ->  X_opt      = X | _;
    X*  ->  X_opt_list = X X_opt_list | _;
    X+  ->  X_list     = X X_opt_list;
"""

from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    Any,
    List,
    NoReturn,
    Optional,
    Set,
    Tuple,
)

import hashlib
import pickle
import sys
import time

from llparsing import sets as set_solver
from llparsing.ast import Token
from llparsing.configuration import CompiledConfiguration
from llparsing.errors import GrammarSyntaxError
from llparsing.grammar import Grammar
from llparsing.scanner import Scanner, ScannerError
from llparsing.table import check_left_recursion, check_unused, compile_table

if TYPE_CHECKING:
    from typing_extensions import Literal

    PickleMode = Literal["r", "w", "rw"]


_scanner = Scanner(
    [
        (None, r"#[^\n]*"),
        ("DIRECTIVE", r"%[A-Za-z_]+"),
        ("IDENT", r"[A-Za-z_][A-Za-z0-9_]*"),
        ("NAMESEP", r"::"),
        ("EQ", r"="),
        ("PIPE", r"\|"),
        ("SEMI", r";"),
        ("OP", r"[?*+]"),
        ("LBRACK", r"\["),
        ("RBRACK", r"\]"),
    ],
    keywords={"_": "EPSILON"},
)

postfix = {"?": "_opt", "*": "_opt_list", "+": "_list"}


class _Reader:
    """
    Recursive-descent reader for the grammar DSL.  Populates a Grammar as
    it goes; the grammar is not finalized here.
    """

    def __init__(self, text: str) -> None:
        try:
            stream = _scanner.scan(text)
            self._tokens: List[Token] = list(stream)
        except ScannerError as e:
            raise GrammarSyntaxError(e.message, e.line, e.column) from e
        self._end = stream.end_position()
        self._idx = 0
        self.grammar = Grammar()
        self._levels = 0
        self._start: Optional[str] = None
        self._generated: Set[str] = set()
        self._pending: List[Tuple[str, Tuple[str, ...], int]] = []

    def read(self) -> Grammar:
        while self._peek() is not None:
            tok = self._next()
            if tok.kind == "DIRECTIVE":
                self._directive(tok)
            elif tok.kind == "IDENT":
                self._rule(tok)
            else:
                self._error("Expected a directive or a rule", tok)
        if self._start is not None:
            self.grammar.set_start(self._start)
        return self.grammar

    # =========================================================================
    # Statements.
    #
    def _directive(self, tok: Token) -> None:
        if tok.lexeme == "%name":
            parts = [self._expect("IDENT").lexeme]
            while self._accept("NAMESEP") is not None:
                parts.append(self._expect("IDENT").lexeme)
            self.grammar.name = "::".join(parts)
        elif tok.lexeme == "%terminals":
            for name in self._names(tok):
                self.grammar.add_terminal(name)
        elif tok.lexeme == "%precedence":
            self._levels += 1
            for name in self._names(tok):
                self.grammar.add_precedence(name, self._levels)
        else:
            self._error("Unknown directive %s" % tok.lexeme, tok)
        self._expect("SEMI")

    def _names(self, directive: Token) -> List[str]:
        names = []
        while True:
            tok = self._accept("IDENT")
            if tok is None:
                break
            names.append(tok.lexeme)
        if not names:
            self._error(
                "%s requires at least one name" % directive.lexeme, directive
            )
        return names

    def _rule(self, lhs: Token) -> None:
        if lhs.lexeme in self._generated:
            self._error(
                "%s clashes with a generated rule" % lhs.lexeme, lhs
            )
        if self._start is None:
            self._start = lhs.lexeme
        self._expect("EQ")
        line = _line(lhs)
        while True:
            rhs, prec = self._alternative()
            self.grammar.add_production(lhs.lexeme, rhs, prec, line)
            if self._accept("PIPE") is None:
                break
        self._expect("SEMI")
        for name, rhs_names, line in self._pending:
            self.grammar.add_production(name, rhs_names, None, line)
        self._pending = []

    def _alternative(self) -> Tuple[List[str], Optional[str]]:
        rhs: List[str] = []
        prec = None
        while True:
            tok = self._peek()
            if tok is None:
                break
            if tok.kind == "EPSILON":
                self._next()
            elif tok.kind == "IDENT":
                self._next()
                op = self._accept("OP")
                if op is None:
                    rhs.append(tok.lexeme)
                else:
                    rhs.append(self._generate(tok, op.lexeme))
            elif tok.kind == "LBRACK":
                self._next()
                name = self._expect("IDENT")
                if name.lexeme not in {
                    p.name for p in self.grammar.precedences
                }:
                    self._error("Unknown precedence %s" % name.lexeme, name)
                prec = name.lexeme
                self._expect("RBRACK")
                break
            else:
                break
        return rhs, prec

    def _generate(self, operand: Token, op: str) -> str:
        name = operand.lexeme + postfix[op]
        if name in self._generated:
            return name
        if self.grammar.has_symbol(name):
            self._error("%s clashes with a generated rule" % name, operand)
        self._generated.add(name)
        line = _line(operand)
        if op == "?":
            self._pending.append((name, (operand.lexeme,), line))
            self._pending.append((name, (), line))
        elif op == "*":
            self._pending.append((name, (operand.lexeme, name), line))
            self._pending.append((name, (), line))
        else:
            rest = self._generate(operand, "*")
            self._pending.append((name, (operand.lexeme, rest), line))
        self.grammar.add_nonterminal(name)
        return name

    # =========================================================================
    # Token helpers.
    #
    def _peek(self) -> Optional[Token]:
        if self._idx < len(self._tokens):
            return self._tokens[self._idx]
        return None

    def _next(self) -> Token:
        tok = self._tokens[self._idx]
        self._idx += 1
        return tok

    def _accept(self, kind: str) -> Optional[Token]:
        tok = self._peek()
        if tok is not None and tok.kind == kind:
            self._idx += 1
            return tok
        return None

    def _expect(self, kind: str) -> Token:
        tok = self._accept(kind)
        if tok is None:
            self._error("Expected %s" % kind, self._peek())
        return tok

    def _error(self, message: str, tok: Optional[Token]) -> NoReturn:
        if tok is None:
            line, column = self._end
            message += " at end of input"
        else:
            line, column = tok.position
            message += ", got %r" % tok.lexeme
        raise GrammarSyntaxError(message, line, column)


def _line(tok: Token) -> int:
    return tok.position[0]


class ConfigurationCompiler:
    """
    Compiles grammar text into a CompiledConfiguration.

    text : The grammar, in the llparsing DSL.

    pickleFile : The path of a file to use for caching the compiled
                 configuration.

    pickleMode :  "r" : Reuse a compatible configuration from pickleFile.
                  "w" : Store the configuration in pickleFile.
                  "rw" : Both.

    logFile : The path of a file to store a human-readable copy of the
              warnings and the parsing table in.

    verbose : If true, print progress information while compiling."""

    def __init__(
        self,
        text: str,
        verbose: bool = False,
        logFile: Optional[str] = None,
        pickleFile: Optional[str] = None,
        pickleMode: PickleMode = "rw",
    ) -> None:
        self.text = text
        self.digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        self._verbose = verbose
        self._logFile = logFile
        self._pickleFile = pickleFile
        self._pickleMode = pickleMode

    def compile(self) -> CompiledConfiguration:
        config = self._unpickle()
        if config is not None:
            return config

        if self._verbose:
            start = time.monotonic()
            print("llparsing: Reading grammar...")
        grammar = _Reader(self.text).read()
        grammar.finalize()

        if self._verbose:
            print("llparsing: Computing FIRST/FOLLOW sets...")
        sets = set_solver.compute(grammar)
        check_left_recursion(grammar, sets)

        if self._verbose:
            print("llparsing: Generating LL(1) parse table...")
        table, warnings = compile_table(grammar, sets)
        warnings.extend(check_unused(grammar))

        config = CompiledConfiguration(
            grammar, sets, table, warnings, self.digest
        )
        self._log(config)
        if self._verbose:
            lines = ["llparsing: %s" % warning for warning in warnings]
            lines.append(
                "llparsing: %d terminal%s, %d nonterminal%s, "
                "%d production%s"
                % (
                    _plural(len(grammar.terminals))
                    + _plural(len(grammar.nonterminals))
                    + _plural(len(grammar.productions))
                )
            )
            lines.append(
                "llparsing: Compilation took %.1f milliseconds"
                % ((time.monotonic() - start) * 1000)
            )
            sys.stdout.write("%s\n" % "\n".join(lines))
        self._pickle(config)
        return config

    def _log(self, config: CompiledConfiguration) -> None:
        if self._logFile is None:
            return
        if self._verbose:
            print("llparsing: Writing log to '%s'..." % self._logFile)
        with open(self._logFile, "w+") as f:
            f.write("%s" % "\n".join(list(config.warnings) + ["%r" % config]))

    # Store the configuration to a pickle file, if requested.
    def _pickle(self, config: CompiledConfiguration) -> None:
        if self._pickleFile is not None and "w" in self._pickleMode:
            if self._verbose:
                print(
                    "llparsing: Creating pickle in %s..." % self._pickleFile
                )
            with open(self._pickleFile, "wb") as f:
                pickle.dump(config, f, protocol=pickle.HIGHEST_PROTOCOL)

    # Restore a configuration from a pickle file, if a compatible one (same
    # grammar text) is provided.
    def _unpickle(self) -> Optional[CompiledConfiguration]:
        if self._pickleFile is None or "r" not in self._pickleMode:
            return None
        if self._verbose:
            print(
                "llparsing: Attempting to use pickle from "
                'file "%s"...' % self._pickleFile
            )
        try:
            with open(self._pickleFile, "rb") as f:
                # Any exception at all in unpickling can be assumed to be due
                # to an incompatible pickle.
                try:
                    config: Any = pickle.load(f)
                except Exception:
                    if self._verbose:
                        error = sys.exc_info()
                        print(
                            "llparsing: Pickle load failed: "
                            "Exception %s: %s" % (error[0], error[1])
                        )
                    return None
        except IOError:
            if self._verbose:
                error = sys.exc_info()
                print(
                    "llparsing: Pickle open failed: "
                    "Exception %s: %s" % (error[0], error[1])
                )
            return None

        if (
            not isinstance(config, CompiledConfiguration)
            or config.digest != self.digest
        ):
            if self._verbose:
                print(
                    'llparsing: Pickle in "%s" is incompatible.'
                    % self._pickleFile
                )
            return None

        if self._verbose:
            print('llparsing: Using pickle in "%s"...' % self._pickleFile)
        return config


def compile_grammar(text: str, **kwargs: Any) -> CompiledConfiguration:
    """Shorthand for ConfigurationCompiler(text, **kwargs).compile()."""
    return ConfigurationCompiler(text, **kwargs).compile()


def _plural(n: int) -> Tuple[int, str]:
    return n, ("s", "")[n == 1]
