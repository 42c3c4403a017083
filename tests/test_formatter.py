"""
Formatter tests.

Canonical Flux text must survive a parse/format round trip unchanged, and
hand-built trees must get parentheses exactly where precedence needs them.
"""
import unittest

from fluxcheck import ast
from fluxcheck import builders as b
from fluxcheck.formatter import format_float, format_node, format_string
from fluxcheck.parser import parse_source


CANONICAL = [
    'option task = {name: "foo", every: 1h}',
    'data = from(bucket: "telegraf")\n'
    '\t|> range(start: -1h)',
    'x = if a > 1 then "big" else "small"',
    "f = (tables=<-, n=1) => tables |> limit(n: n)",
    "f = (t=now()) => t",
    "f = (tables=<-, fn=(r) => r._value) => tables |> map(fn: fn)",
    'x = "cost \\${y}"',
    'm = "${r.host} is ${r._value * 2}"',
    'm = "$${r.host} \\\\${r._value}"',
    "y = (a + b) * -c",
    "y = a - (b - c)",
    "y = 2 ^ 3 ^ 4",
    "z = not exists r.host",
    'z = a == 1 or b == 2 and c != 3',
    'z = (a or b) and c',
    's = "quote \\" backslash \\\\ newline \\n tab \\t"',
    't = r["my key"]',
    "u = arr[0]",
    "v = {r with _value: r._value * 2.5}",
    "w = [1, 2.0, 1h30m, 2019-10-10T10:10:10Z]",
    "f = (r) => {\n\tx = r._value\n\treturn x\n}",
    "g = (r) => ({r with a: 1})",
    "h = () => 1",
    "e = {}",
    'k = {"my-key": 1, plain: 2}',
    'package foo\n\nimport "array"\n\nx = 1',
    'import s "strings"\n\nx = s.toUpper(v: "a")',
    'from(bucket: "foo")\n\t|> range(start: -1d)\n\t|> filter(fn: (r) => r._measurement == "cpu" and r._field == "usage_idle")',
]


def roundtrip(source):
    package, errors = parse_source(source)
    if errors:
        raise AssertionError(f"parse failed: {[str(e) for e in errors]}")
    return format_node(package)


class TestRoundTrip(unittest.TestCase):

    def test_canonical_sources(self):
        for source in CANONICAL:
            single_line = source.replace("\n\t|>", " |>")
            with self.subTest(source=single_line):
                self.assertEqual(roundtrip(single_line), single_line)

    def test_formatting_is_idempotent(self):
        messy = "x=1+2*3\ny   =   (  r  )=>r._value>1.5   // cmt\n"
        once = roundtrip(messy)
        self.assertEqual(once, "x = 1 + 2 * 3\ny = (r) => r._value > 1.5")
        self.assertEqual(roundtrip(once), once)

    def test_redundant_parens_dropped(self):
        self.assertEqual(roundtrip("y = (a * b) + (c)"), "y = a * b + c")


class TestFormatNodes(unittest.TestCase):

    def test_float_literal(self):
        self.assertEqual(format_float(10), "10.0")
        self.assertEqual(format_float(2.5), "2.5")
        self.assertEqual(format_float(-40.0), "-40.0")
        self.assertEqual(format_float(1e20), "100000000000000000000.0")
        self.assertEqual(format_float(1e-7), "0.0000001")

    def test_string_escapes(self):
        self.assertEqual(format_string('a"b\\c\n'), '"a\\"b\\\\c\\n"')
        self.assertEqual(format_string("${r._value}"), '"${r._value}"')

    def test_string_expression_escapes_literal_interpolation(self):
        node = ast.StringExpression(parts=[
            ast.TextPart("cost ${y} "),
            ast.InterpolatedPart(b.member("r", "_value")),
        ])
        self.assertEqual(format_node(node), '"cost \\${y} ${r._value}"')

    def test_threshold_predicates(self):
        value = b.member("r", "_value")
        pred = b.logical_and(
            b.less_than(value, b.float_literal(40)),
            b.greater_than(value, b.float_literal(10)),
        )
        fn = b.function_expression(b.function_params("r"), pred)
        self.assertEqual(format_node(b.define_variable("crit", fn)), "crit = (r) => r._value < 40.0 and r._value > 10.0")

    def test_binary_operands_parenthesized(self):
        a, c = b.identifier("a"), b.identifier("c")
        inner = ast.BinaryExpression(operator=ast.OperatorKind.ADDITION, left=a, right=b.identifier("b"))
        outer = ast.BinaryExpression(operator=ast.OperatorKind.MULTIPLICATION, left=inner, right=c)
        self.assertEqual(format_node(outer), "(a + b) * c")
        right = ast.BinaryExpression(operator=ast.OperatorKind.SUBTRACTION, left=c, right=inner)
        self.assertEqual(format_node(right), "c - (a + b)")

    def test_pipe_argument_parenthesized(self):
        fn = b.function_expression(b.function_params("r"), b.identifier("r"))
        call = b.call_expression(b.identifier("f"), b.object_expression())
        self.assertEqual(format_node(b.pipe(fn, call)), "((r) => r) |> f()")

    def test_non_identifier_key(self):
        prop = ast.Property(key=ast.Identifier("my-tag"), value=b.string_literal("v"))
        self.assertEqual(format_node(prop), '"my-tag": "v"')
        self.assertEqual(format_node(b.string_property("my tag", b.string_literal("v"))), '"my tag": "v"')

    def test_call_without_arguments(self):
        self.assertEqual(format_node(ast.CallExpression(callee=b.identifier("now"))), "now()")

    def test_unknown_node(self):
        with self.assertRaises(TypeError):
            format_node(ast.Duration(1, "h"))


class TestFormatPackage(unittest.TestCase):

    def test_files_render_as_one_script(self):
        query = b.file("query.flux", [], [b.define_variable("data", b.identifier("x"))])
        generated = b.file("threshold.flux", b.imports("influxdata/influxdb/alerts"), [
            b.define_variable("a", b.float_literal(1)),
            b.define_variable("b", b.float_literal(2)),
        ])
        package = ast.Package(files=[query, generated])
        self.assertEqual(
            format_node(package),
            'import "influxdata/influxdb/alerts"\n\ndata = x\n\na = 1.0\nb = 2.0',
        )

    def test_duplicate_imports_written_once(self):
        f1 = b.file("a.flux", b.imports("strings"), [b.define_variable("x", b.float_literal(1))])
        f2 = b.file("b.flux", b.imports("strings", "array"), [])
        self.assertEqual(format_node(ast.Package(files=[f1, f2])), 'import "strings"\nimport "array"\n\nx = 1.0')

    def test_empty_package(self):
        self.assertEqual(format_node(ast.Package()), "")

    def test_no_trailing_newline(self):
        f = b.file("a.flux", [], [b.define_variable("x", b.float_literal(1))])
        self.assertFalse(format_node(f).endswith("\n"))


if __name__ == "__main__":
    unittest.main()
