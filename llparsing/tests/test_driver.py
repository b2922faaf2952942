import pickle
import threading
import unittest

import llparsing
from llparsing.ast import Node, Token
from llparsing.tests.specs import a, b


class TestDriver(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.simple = llparsing.compile_grammar(
            "%name A::B;\n\n%terminals A B;\n\nroot = A | B;\n"
        )
        cls.calc = llparsing.compile_grammar(a.grammar)
        cls.stmts = llparsing.compile_grammar(b.grammar)

    def test_simple(self):
        parser = llparsing.Driver(self.simple)

        tree = parser.parse(["A"])
        self.assertIsInstance(tree, Node)
        self.assertEqual(tree.name, "root")
        self.assertEqual(tree.children, [Token("A", "A", 1)])
        self.assertEqual(repr(tree), "(root A)")

        tree = parser.parse(["B"])
        self.assertEqual(tree.production.index, 1)
        self.assertEqual(list(tree.leaves()), [Token("B", "B", 1)])

    def test_simple_empty_input(self):
        parser = llparsing.Driver(self.simple)
        with self.assertRaises(llparsing.ParserError) as cm:
            parser.parse([])
        self.assertEqual(cm.exception.expected, {"A", "B"})
        self.assertEqual(cm.exception.actual, "<$>")
        self.assertIsNone(cm.exception.token)
        self.assertEqual(cm.exception.position, 1)
        self.assertEqual(
            str(cm.exception), "Unexpected <$> at position 1; expected A or B"
        )

    def test_simple_extra_input(self):
        parser = llparsing.Driver(self.simple)
        with self.assertRaises(llparsing.ParserError) as cm:
            parser.parse(["A", "B"])
        self.assertEqual(cm.exception.expected, {"<$>"})
        self.assertEqual(cm.exception.actual, "B")
        self.assertEqual(cm.exception.position, 2)
        self.assertEqual(cm.exception.token, Token("B", "B", 2))

    def test_driver_reusable_after_error(self):
        parser = llparsing.Driver(self.simple)
        self.assertRaises(llparsing.ParserError, parser.parse, ["B", "B"])
        self.assertEqual(parser.parse(["A"]).production.index, 0)

    def test_leaves_match_input(self):
        parser = llparsing.Driver(self.calc)
        for text in ("1", "1 + 2 * 3", "(1 + 2) * 3", "((4)) * (5 + 6 * 7)"):
            with self.subTest(text=text):
                tokens = list(a.scanner.scan(text))
                tree = parser.parse(tokens)
                self.assertEqual(list(tree.leaves()), tokens)

    def test_long_list(self):
        config = llparsing.compile_grammar("%terminals A;\nroot = A*;")
        tree = llparsing.Driver(config).parse(["A"] * 3000)
        leaves = list(tree.leaves())
        self.assertEqual(len(leaves), 3000)
        self.assertEqual(leaves[-1], Token("A", "A", 3000))

        text = repr(tree)
        self.assertTrue(text.startswith("(root (A_opt_list A (A_opt_list A"))
        self.assertTrue(text.endswith("(A_opt_list)" + ")" * 3001))
        self.assertEqual(text.count("("), 3002)

    def test_semantic_actions(self):
        parser = llparsing.Driver(self.calc, on_reduce=a.evaluate)
        self.assertEqual(parser.parse(a.scanner.scan("2 + 3 * (4 + 1)")), 17)
        self.assertEqual(parser.parse(a.scanner.scan("2 * 3 + 4")), 10)

        parser = llparsing.Driver(self.calc, on_reduce=a.render)
        self.assertEqual(
            parser.parse(a.scanner.scan("1 * 2 + 3")), "[[1 * 2] + 3]"
        )
        self.assertEqual(
            parser.parse(a.scanner.scan("1 + 2 + 3")), "[[1 + 2] + 3]"
        )
        self.assertEqual(
            parser.parse(a.scanner.scan("2 + 3 * (4 + 1)")),
            "[2 + [3 * ([4 + 1])]]",
        )

    def test_reduction_order(self):
        reductions = []

        def record(production, children):
            reductions.append(production.lhs.name)

        tree = llparsing.Driver(self.calc, on_reduce=record).parse(
            ["NUM", "PLUS", "NUM"]
        )
        # Returning None keeps the tree.
        self.assertIsInstance(tree, Node)
        self.assertEqual(
            reductions,
            ["F", "T_rest", "T", "F", "T_rest", "T", "E_rest", "E_rest", "E"],
        )

    def test_callback_exception_propagates(self):
        class Boom(Exception):
            pass

        def explode(production, children):
            if production.lhs.name == "T":
                raise Boom(production)

        parser = llparsing.Driver(self.calc, on_reduce=explode)
        with self.assertRaises(Boom):
            parser.parse(["NUM"])

    def test_expected_after_terminal(self):
        parser = llparsing.Driver(self.calc)
        with self.assertRaises(llparsing.ParserError) as cm:
            parser.parse(["NUM", "PLUS"])
        self.assertEqual(cm.exception.expected, {"LPAREN", "NUM"})
        self.assertEqual(cm.exception.actual, "<$>")
        self.assertEqual(cm.exception.position, 3)

    def test_expected_through_nullable(self):
        parser = llparsing.Driver(self.calc)
        with self.assertRaises(llparsing.ParserError) as cm:
            parser.parse(["NUM", "NUM"])
        self.assertEqual(cm.exception.expected, {"STAR", "PLUS", "<$>"})
        self.assertEqual(cm.exception.actual, "NUM")
        self.assertEqual(cm.exception.position, 2)

    def test_expected_after_empty_expansions(self):
        # T_rest and E_rest are expanded to nothing on the strength of the
        # end of input before RPAREN fails to match; the expected set still
        # covers everything that could have followed NUM.
        parser = llparsing.Driver(self.calc)
        with self.assertRaises(llparsing.ParserError) as cm:
            parser.parse(a.scanner.scan("(1"))
        self.assertEqual(
            cm.exception.expected, {"STAR", "PLUS", "RPAREN"}
        )
        self.assertEqual(cm.exception.actual, "<$>")
        self.assertEqual(cm.exception.position, (1, 3))

    def test_unknown_token_kind(self):
        parser = llparsing.Driver(self.calc)
        with self.assertRaises(llparsing.ParserError) as cm:
            parser.parse([Token("NUM", "1"), Token("MINUS", "-")])
        self.assertEqual(cm.exception.actual, "MINUS")
        self.assertEqual(cm.exception.position, 2)
        self.assertIn("MINUS '-'", str(cm.exception))

    def test_scanner_positions(self):
        parser = llparsing.Driver(self.calc)
        with self.assertRaises(llparsing.ParserError) as cm:
            parser.parse(a.scanner.scan("1 +\n  * 2"))
        self.assertEqual(cm.exception.actual, "STAR")
        self.assertEqual(cm.exception.position, (2, 3))
        self.assertEqual(
            str(cm.exception),
            "Unexpected STAR '*' at line 2, column 3; expected LPAREN or NUM",
        )

    def test_dangling_else(self):
        parser = llparsing.Driver(self.stmts)
        tree = parser.parse(
            [
                "IF", "ID", "THEN",
                "IF", "ID", "THEN", "ID", "EQ", "NUM", "SEMI",
                "ELSE", "ID", "EQ", "NUM", "SEMI",
                "ID", "EQ", "NUM", "SEMI",
            ]
        )
        self.assertEqual(tree.name, "program")
        stmt_list = tree.children[0]
        outer = stmt_list.children[0]
        self.assertEqual(outer.name, "stmt")
        self.assertEqual(outer.children[-1].children, [])
        inner = outer.children[3]
        else_part = inner.children[-1]
        self.assertEqual(else_part.name, "else_part")
        self.assertEqual(else_part.children[0].kind, "ELSE")
        self.assertEqual(len(list(tree.leaves())), 19)

    def test_token_stream(self):
        class Stream(llparsing.TokenStream):
            def __init__(self, kinds):
                self.kinds = list(kinds)
                self.calls = []

            def peek(self):
                self.calls.append("peek")
                if self.kinds:
                    return Token(self.kinds[0], position="here")
                return None

            def advance(self):
                self.calls.append("advance")
                self.kinds.pop(0)

        stream = Stream(["B"])
        tree = llparsing.Driver(self.simple).parse(stream)
        self.assertEqual(tree.children[0].position, "here")
        self.assertEqual(stream.calls.count("advance"), 1)

        with self.assertRaises(llparsing.ParserError) as cm:
            llparsing.Driver(self.simple).parse(Stream([]))
        self.assertIsNone(cm.exception.position)

    def test_verbose(self):
        import contextlib
        import io

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            llparsing.Driver(self.simple, verbose=True).parse(["A"])
        output = out.getvalue()
        self.assertIn("STACK: root", output)
        self.assertIn("   --> expand root ::= A.", output)
        self.assertIn("   --> accept", output)

    def test_pickled_configuration(self):
        config = pickle.loads(pickle.dumps(self.calc))
        parser = llparsing.Driver(config, on_reduce=a.evaluate)
        self.assertEqual(parser.parse(a.scanner.scan("6 * 7")), 42)

    def test_shared_between_threads(self):
        results = {}
        errors = []

        def work(n):
            try:
                parser = llparsing.Driver(self.calc, on_reduce=a.evaluate)
                text = " + ".join(["%d * 2" % n] * 50)
                results[n] = parser.parse(a.scanner.scan(text))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=work, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(results, {n: n * 100 for n in range(8)})


if __name__ == "__main__":
    unittest.main()
