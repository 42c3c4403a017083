"""
Flux parser.

``FluxParser.parse`` turns Flux source into an ``ast.Package`` and a list of
syntax errors. On an error the parser skips to the next line that opens a
new statement (``|>`` and operator continuation lines are skipped with the
broken one) and keeps going, so one call reports every broken statement.
"""
import logging
import re
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError

from . import ast
from .config import settings
from .errors import FluxSyntaxError

logger = logging.getLogger("fluxcheck.parser")

GRAMMAR_PATH = Path(__file__).with_name("flux.lark")

_DURATION_PART_RE = re.compile(r"(\d+)(mo|ms|us|ns|y|w|d|h|m|s)")
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\", "$": "$"}
_ESCAPE_RE = re.compile(r"\\(.)", re.S)

# A line opening with one of these carries on the statement above it.
_CONTINUATION_RE = re.compile(r"\s*(\|>|[)\]}.,+\-*/%^<>=!]|(and|or|then|else|with)\b)")


def unquote(token: str) -> str:
    """Decode a quoted Flux string literal."""
    body = token[1:-1]
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), body)


def string_segments(token: str) -> List[Tuple[bool, str, int]]:
    """
    Split a quoted Flux string into text and ``${...}`` segments.

    Returns (is_interpolation, text, offset) triples. Text segments are
    decoded; interpolation segments hold the raw expression source and its
    offset within the token.
    """
    body = token[1:-1]
    segments: List[Tuple[bool, str, int]] = []
    text: List[str] = []
    i = 0
    while i < len(body):
        c = body[i]
        if c == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            text.append(_ESCAPES.get(nxt, c + nxt))
            i += 2
        elif c == "$" and body.startswith("{", i + 1):
            if text:
                segments.append((False, "".join(text), 0))
                text = []
            end = _closing_brace(body, i + 2)
            if end == -1:
                raise ValueError("unterminated string interpolation")
            # +1 for the opening quote
            segments.append((True, body[i + 2:end], i + 3))
            i = end + 1
        else:
            text.append(c)
            i += 1
    if text:
        segments.append((False, "".join(text), 0))
    return segments


def _closing_brace(body: str, start: int) -> int:
    depth = 1
    for i in range(start, len(body)):
        if body[i] == "{":
            depth += 1
        elif body[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _resume_offset(source: str, pos: int) -> Optional[int]:
    """Offset of the first line after ``pos`` that can open a new statement."""
    nl = source.find("\n", pos)
    while nl != -1:
        start = nl + 1
        if not _CONTINUATION_RE.match(source, start):
            return start
        nl = source.find("\n", start)
    return None


def _binary(op: ast.OperatorKind):
    def handler(self, args):
        return ast.BinaryExpression(operator=op, left=args[0], right=args[1])
    return handler


class FluxTransformer(Transformer):
    def __init__(self, source_file: str = "",
                 parse_expression: Optional[Callable[[str], ast.Expression]] = None):
        super().__init__()
        self.source_file = source_file
        self.parse_expression = parse_expression
        self.node_count = 0

    def _node(self, node):
        self.node_count += 1
        return node

    def start(self, args):
        f = ast.File(name=self.source_file)
        for a in args:
            if isinstance(a, ast.PackageClause):
                f.package = a
            elif isinstance(a, ast.ImportDeclaration):
                f.imports.append(a)
            else:
                f.body.append(a)
        return f

    def package_clause(self, args):
        return ast.PackageClause(name=ast.Identifier(str(args[0])))

    def import_decl(self, args):
        alias = ast.Identifier(str(args[0])) if len(args) == 2 else None
        return self._node(ast.ImportDeclaration(path=ast.StringLiteral(unquote(args[-1])), alias=alias))

    # ─── Statements ──────────────────────────────────────────────────────────

    def assignment(self, args):
        return self._node(ast.VariableAssignment(id=ast.Identifier(str(args[0])), init=args[1]))

    def member_assignment(self, args):
        member = ast.MemberExpression(object=ast.Identifier(str(args[0])), property=ast.Identifier(str(args[1])))
        return self._node(ast.MemberAssignment(member=member, init=args[2]))

    def option_stmt(self, args):
        return self._node(ast.OptionStatement(assignment=args[0]))

    def return_stmt(self, args):
        return self._node(ast.ReturnStatement(argument=args[0]))

    def expr_stmt(self, args):
        return self._node(ast.ExpressionStatement(expression=args[0]))

    def block(self, args):
        return ast.Block(body=list(args))

    # ─── Operators ───────────────────────────────────────────────────────────

    def conditional_expr(self, args):
        return ast.ConditionalExpression(test=args[0], consequent=args[1], alternate=args[2])

    def or_expr(self, args):
        return ast.LogicalExpression(operator=ast.LogicalOperatorKind.OR, left=args[0], right=args[1])

    def and_expr(self, args):
        return ast.LogicalExpression(operator=ast.LogicalOperatorKind.AND, left=args[0], right=args[1])

    def not_expr(self, args):
        return ast.UnaryExpression(operator=ast.OperatorKind.NOT, argument=args[0])

    def exists_expr(self, args):
        return ast.UnaryExpression(operator=ast.OperatorKind.EXISTS, argument=args[0])

    def neg(self, args):
        return ast.UnaryExpression(operator=ast.OperatorKind.SUBTRACTION, argument=args[0])

    def pos(self, args):
        return ast.UnaryExpression(operator=ast.OperatorKind.ADDITION, argument=args[0])

    eq = _binary(ast.OperatorKind.EQUAL)
    neq = _binary(ast.OperatorKind.NOT_EQUAL)
    lt = _binary(ast.OperatorKind.LESS_THAN)
    le = _binary(ast.OperatorKind.LESS_THAN_EQUAL)
    gt = _binary(ast.OperatorKind.GREATER_THAN)
    ge = _binary(ast.OperatorKind.GREATER_THAN_EQUAL)
    add = _binary(ast.OperatorKind.ADDITION)
    sub = _binary(ast.OperatorKind.SUBTRACTION)
    mul = _binary(ast.OperatorKind.MULTIPLICATION)
    div = _binary(ast.OperatorKind.DIVISION)
    mod = _binary(ast.OperatorKind.MODULO)
    pow = _binary(ast.OperatorKind.POWER)

    @v_args(meta=True)
    def pipe_expr(self, meta, args):
        argument, call = args
        if not isinstance(call, ast.CallExpression):
            raise FluxSyntaxError(
                "pipe destination must be a function call",
                line=meta.line, column=meta.column, pos=meta.start_pos,
            )
        return self._node(ast.PipeExpression(argument=argument, call=call))

    # ─── Postfix ─────────────────────────────────────────────────────────────

    def member_dot(self, args):
        return ast.MemberExpression(object=args[0], property=ast.Identifier(str(args[1])))

    def member_index(self, args):
        obj, index = args
        if isinstance(index, ast.StringLiteral):
            return ast.MemberExpression(object=obj, property=index)
        return ast.IndexExpression(array=obj, index=index)

    def call(self, args):
        arguments = []
        if len(args) > 1:
            arguments.append(ast.ObjectExpression(properties=args[1]))
        return self._node(ast.CallExpression(callee=args[0], arguments=arguments))

    # ─── Literals ────────────────────────────────────────────────────────────

    def identifier(self, args):
        return ast.Identifier(str(args[0]))

    def integer_lit(self, args):
        return ast.IntegerLiteral(int(args[0]))

    def float_lit(self, args):
        return ast.FloatLiteral(float(args[0]))

    @v_args(meta=True)
    def string_lit(self, meta, args):
        raw = str(args[0])
        if "${" not in raw and "\\$" not in raw:
            return ast.StringLiteral(unquote(raw))

        # Escaped or interpolated "$" must survive formatting, so these
        # strings keep their parts.
        parts = []
        try:
            for is_interpolation, text, _ in string_segments(raw):
                if not is_interpolation:
                    parts.append(ast.TextPart(text))
                    continue
                if self.parse_expression is None:
                    raise ValueError("string interpolation is not supported here")
                parts.append(ast.InterpolatedPart(self.parse_expression(text)))
        except (UnexpectedInput, VisitError, ValueError) as e:
            raise FluxSyntaxError(
                f"invalid string interpolation: {e}",
                line=meta.line, column=meta.column, pos=meta.start_pos,
            )
        return self._node(ast.StringExpression(parts=parts))

    def duration_lit(self, args):
        parts = [ast.Duration(int(mag), unit) for mag, unit in _DURATION_PART_RE.findall(str(args[0]))]
        return ast.DurationLiteral(values=parts)

    def datetime_lit(self, args):
        return ast.DateTimeLiteral(str(args[0]))

    def PIPE_RECEIVE(self, token):
        return ast.PipeLiteral()

    def array(self, args):
        return ast.ArrayExpression(elements=list(args))

    def object(self, args):
        return ast.ObjectExpression(properties=args[0] if args else [])

    def object_with(self, args):
        return ast.ObjectExpression(properties=args[1], with_=ast.Identifier(str(args[0])))

    def property_list(self, args):
        return list(args)

    def property(self, args):
        return ast.Property(key=ast.Identifier(str(args[0])), value=args[1])

    def string_property(self, args):
        return ast.Property(key=ast.StringLiteral(unquote(str(args[0]))), value=args[1])

    @v_args(meta=True)
    def group(self, meta, args):
        items = args[0]
        if len(items) != 1 or isinstance(items[0], ast.Property):
            raise FluxSyntaxError(
                "expected '=>' after parameter list",
                line=meta.line, column=meta.column, pos=meta.start_pos,
            )
        return items[0]

    @v_args(meta=True)
    def function(self, meta, args):
        params = []
        for item in (args[0] if len(args) == 2 else []):
            if isinstance(item, ast.Identifier):
                item = ast.Property(key=item)
            elif not isinstance(item, ast.Property):
                raise FluxSyntaxError(
                    "function parameters must be identifiers",
                    line=meta.line, column=meta.column, pos=meta.start_pos,
                )
            params.append(item)
        return self._node(ast.FunctionExpression(params=params, body=args[-1]))

    def paren_items(self, args):
        return list(args)

    def param(self, args):
        default = args[1] if len(args) > 1 else None
        return ast.Property(key=ast.Identifier(str(args[0])), value=default)


def _describe(e: UnexpectedInput) -> str:
    if isinstance(e, UnexpectedToken):
        if e.token.type == "$END":
            return "unexpected end of input"
        expected = sorted(t for t in e.expected if not t.startswith("_"))
        msg = f"unexpected token {str(e.token)!r}"
        if expected:
            msg += f", expected one of: {', '.join(expected[:8])}"
        return msg
    if isinstance(e, UnexpectedCharacters):
        return f"invalid character {e.char!r}"
    return "unexpected end of input"


class FluxParser:
    _parsers = {}

    def __init__(self, grammar_path: Path = GRAMMAR_PATH):
        self.grammar_path = str(grammar_path)
        if self.grammar_path not in self._parsers:
            with open(self.grammar_path, "r", encoding="utf-8") as f:
                grammar = f.read()
            self._parsers[self.grammar_path] = Lark(
                grammar,
                start="start",
                parser="lalr",
                propagate_positions=True,
            )
        self.parser = self._parsers[self.grammar_path]

    def parse_expression(self, source: str) -> ast.Expression:
        """Parse the expression inside a ``${...}`` interpolation."""
        tree = self.parser.parse(source)
        f = FluxTransformer(parse_expression=self.parse_expression).transform(tree)
        if f.package or f.imports or len(f.body) != 1 or not isinstance(f.body[0], ast.ExpressionStatement):
            raise ValueError(f"expected a single expression, got {source!r}")
        return f.body[0].expression

    def parse(self, source: str, source_file: str = "") -> Tuple[ast.Package, List[FluxSyntaxError]]:
        """
        Parse Flux source.

        Returns: (Package, List[FluxSyntaxError]). When errors are reported
        the package holds no files.
        """
        start_time = time.time()
        errors: List[FluxSyntaxError] = []
        remaining = source
        line_offset = 0
        parsed: Optional[ast.File] = None
        transformer = None

        while True:
            pos = None
            try:
                tree = self.parser.parse(remaining)
                transformer = FluxTransformer(source_file, parse_expression=self.parse_expression)
                parsed = transformer.transform(tree)
                break
            except UnexpectedInput as e:
                if isinstance(e, UnexpectedEOF) or e.line is None or e.line < 0:
                    errors.append(FluxSyntaxError(_describe(e)))
                    break
                errors.append(FluxSyntaxError(_describe(e), line=e.line + line_offset, column=e.column))
                pos = e.pos_in_stream
            except VisitError as e:
                if not isinstance(e.orig_exc, FluxSyntaxError):
                    raise
                err = e.orig_exc
                errors.append(FluxSyntaxError(err.description, line=err.line + line_offset, column=err.column))
                pos = err.pos

            if pos is None or pos < 0:
                break
            start = _resume_offset(remaining, pos)
            if start is None:
                break
            line_offset += remaining.count("\n", 0, start)
            remaining = remaining[start:]

        if settings.PARSE_DEBUG:
            dur = (time.time() - start_time) * 1000
            nodes = transformer.node_count if transformer else 0
            logger.debug(f"Parsed {len(source)} bytes in {dur:.2f}ms. Nodes: {nodes}. Errors: {len(errors)}")

        if errors:
            for err in errors:
                logger.debug(f"Syntax error in {source_file or '<query>'}: {err}")
            return ast.Package(), errors

        package = ast.Package(files=[parsed])
        if parsed.package is not None:
            package.package = parsed.package.name.name
        return package, errors


_default_parser: Optional[FluxParser] = None


def parse_source(source: str, source_file: str = "") -> Tuple[ast.Package, List[FluxSyntaxError]]:
    """Parse with a shared ``FluxParser``."""
    global _default_parser
    if _default_parser is None:
        _default_parser = FluxParser()
    return _default_parser.parse(source, source_file)
