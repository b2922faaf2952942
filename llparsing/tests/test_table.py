import unittest

from llparsing import sets
from llparsing.compiler import _Reader
from llparsing.errors import AmbiguousGrammarError, LeftRecursionError
from llparsing.table import check_left_recursion, check_unused, compile_table
from llparsing.tests.specs import a, b, c


def build(text):
    grammar = _Reader(text).read()
    grammar.finalize()
    ff = sets.compute(grammar)
    check_left_recursion(grammar, ff)
    table, warnings = compile_table(grammar, ff)
    return grammar, table, warnings


class TestTable(unittest.TestCase):
    def test_expression_table(self):
        grammar, table, warnings = build(a.grammar)
        self.assertEqual(warnings, [])
        self.assertEqual(len(table), 13)

        def rhs(nonterm, terminal):
            index = table.get(nonterm, terminal)
            if index is None:
                return None
            return [sym.name for sym in grammar.productions[index].rhs]

        self.assertEqual(rhs("E", "NUM"), ["T", "E_rest"])
        self.assertEqual(rhs("E", "LPAREN"), ["T", "E_rest"])
        self.assertEqual(rhs("E", "PLUS"), None)
        self.assertEqual(rhs("E_rest", "PLUS"), ["PLUS", "T", "E_rest"])
        self.assertEqual(rhs("E_rest", "RPAREN"), [])
        self.assertEqual(rhs("E_rest", "<$>"), [])
        self.assertEqual(rhs("T_rest", "PLUS"), [])
        self.assertEqual(rhs("F", "LPAREN"), ["LPAREN", "E", "RPAREN"])
        self.assertEqual(rhs("F", "NUM"), ["NUM"])
        self.assertEqual(
            set(table.row("T_rest")), {"STAR", "PLUS", "RPAREN", "<$>"}
        )
        self.assertEqual(table.row("nothing"), {})

    def test_one_production_per_cell(self):
        for text in (a.grammar, b.grammar):
            grammar, table, _ = build(text)
            cells = [(nonterm, terminal) for nonterm, terminal, _ in table]
            self.assertEqual(len(cells), len(set(cells)))
            for nonterm, terminal, index in table:
                self.assertEqual(
                    grammar.productions[index].lhs.name, nonterm
                )

    def test_deterministic(self):
        self.assertEqual(build(a.grammar)[1], build(a.grammar)[1])
        self.assertNotEqual(build(a.grammar)[1], build(b.grammar)[1])

    def test_left_recursion(self):
        with self.assertRaises(LeftRecursionError) as cm:
            build(c.left_recursive)
        self.assertEqual(cm.exception.nonterminal, "expr")
        self.assertEqual(cm.exception.cycle, ("expr", "expr"))
        self.assertIn("expr -> expr", str(cm.exception))

    def test_indirect_left_recursion(self):
        with self.assertRaises(LeftRecursionError) as cm:
            build(c.indirect_left_recursive)
        self.assertEqual(cm.exception.cycle, ("root", "a", "b", "root"))

    def test_long_rule_chain(self):
        rules = ["r%d = r%d;" % (i, i + 1) for i in range(1500)]
        text = "%%terminals A;\n%s\nr1500 = A;\n" % "\n".join(rules)
        grammar, table, warnings = build(text)
        self.assertEqual(len(table), 1501)
        self.assertEqual(table.get("r0", "A"), 0)

        rules.append("r1500 = r0 | A;")
        with self.assertRaises(LeftRecursionError) as cm:
            build("%%terminals A;\n%s\n" % "\n".join(rules))
        self.assertEqual(len(cm.exception.cycle), 1502)
        self.assertEqual(cm.exception.cycle[0], "r0")
        self.assertEqual(cm.exception.cycle[-1], "r0")

    def test_first_first_conflict(self):
        with self.assertRaises(AmbiguousGrammarError) as cm:
            build(c.first_first)
        self.assertEqual(cm.exception.nonterminal, "root")
        self.assertEqual(cm.exception.terminal, "A")
        self.assertEqual(
            [p.index for p in cm.exception.productions], [0, 1]
        )

    def test_first_follow_conflict(self):
        with self.assertRaises(AmbiguousGrammarError) as cm:
            build(c.first_follow)
        self.assertEqual(cm.exception.nonterminal, "a")
        self.assertEqual(cm.exception.terminal, "A")

    def test_precedence_beats_none(self):
        grammar, table, warnings = build(b.grammar)
        self.assertEqual(warnings, [])
        production = grammar.productions[table.get("else_part", "ELSE")]
        self.assertEqual(repr(production), "else_part ::= ELSE stmt. [shift]")
        self.assertEqual(
            grammar.productions[table.get("else_part", "<$>")].rhs, ()
        )

    def test_higher_precedence_wins(self):
        grammar, table, warnings = build(
            """
            %terminals A B C;
            %precedence low;
            %precedence high;
            root = A B [low] | A C [high];
            """
        )
        self.assertEqual(warnings, [])
        self.assertEqual(table.get("root", "A"), 1)

    def test_equal_precedence_keeps_first(self):
        grammar, table, warnings = build(
            """
            %terminals A B C;
            %precedence p q;
            root = A B [q] | A C [p];
            """
        )
        self.assertEqual(table.get("root", "A"), 0)
        self.assertEqual(len(warnings), 1)
        self.assertIn("Conflict on A for root", warnings[0])

    def test_unused(self):
        grammar = _Reader(
            """
            %terminals A B;
            root = A;
            orphan = A;
            """
        ).read()
        grammar.finalize()
        self.assertEqual(
            check_unused(grammar),
            ["Unused terminal: B", "Unreachable nonterminal: orphan"],
        )


if __name__ == "__main__":
    unittest.main()
