"""
Canonical Flux text for AST nodes.

A package renders as a single script: package clause, the imports of every
file (first occurrence wins), then each file's statements as a paragraph.
Parentheses are emitted only where operator precedence needs them, so
formatting parsed canonical text gives back the same text.
"""
from decimal import Decimal
from typing import Callable, Dict, List, Type

from . import ast
from .builders import is_identifier

# Binding strength, higher binds tighter.
PREC_FUNCTION = 0
PREC_CONDITIONAL = 1
PREC_OR = 2
PREC_AND = 3
PREC_UNARY_LOGICAL = 4
PREC_COMPARISON = 5
PREC_ADDITIVE = 6
PREC_MULTIPLICATIVE = 7
PREC_POWER = 8
PREC_PIPE = 9
PREC_UNARY = 10
PREC_POSTFIX = 11
PREC_PRIMARY = 12

_BINARY_PREC = {
    ast.OperatorKind.EQUAL: PREC_COMPARISON,
    ast.OperatorKind.NOT_EQUAL: PREC_COMPARISON,
    ast.OperatorKind.LESS_THAN: PREC_COMPARISON,
    ast.OperatorKind.LESS_THAN_EQUAL: PREC_COMPARISON,
    ast.OperatorKind.GREATER_THAN: PREC_COMPARISON,
    ast.OperatorKind.GREATER_THAN_EQUAL: PREC_COMPARISON,
    ast.OperatorKind.ADDITION: PREC_ADDITIVE,
    ast.OperatorKind.SUBTRACTION: PREC_ADDITIVE,
    ast.OperatorKind.MULTIPLICATION: PREC_MULTIPLICATIVE,
    ast.OperatorKind.DIVISION: PREC_MULTIPLICATIVE,
    ast.OperatorKind.MODULO: PREC_MULTIPLICATIVE,
    ast.OperatorKind.POWER: PREC_POWER,
}

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def precedence(node: ast.Node) -> int:
    if isinstance(node, ast.FunctionExpression):
        return PREC_FUNCTION
    if isinstance(node, ast.ConditionalExpression):
        return PREC_CONDITIONAL
    if isinstance(node, ast.LogicalExpression):
        return PREC_OR if node.operator == ast.LogicalOperatorKind.OR else PREC_AND
    if isinstance(node, ast.UnaryExpression):
        if node.operator in (ast.OperatorKind.NOT, ast.OperatorKind.EXISTS):
            return PREC_UNARY_LOGICAL
        return PREC_UNARY
    if isinstance(node, ast.BinaryExpression):
        return _BINARY_PREC[node.operator]
    if isinstance(node, ast.PipeExpression):
        return PREC_PIPE
    if isinstance(node, (ast.CallExpression, ast.MemberExpression, ast.IndexExpression)):
        return PREC_POSTFIX
    return PREC_PRIMARY


def format_string(value: str) -> str:
    return '"' + "".join(_ESCAPES.get(c, c) for c in value) + '"'


def format_text_part(value: str) -> str:
    """Escape text inside a string expression; a literal ``${`` stays literal."""
    return "".join(_ESCAPES.get(c, c) for c in value).replace("${", "\\${")


def format_float(value: float) -> str:
    text = repr(float(value))
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if "." not in text:
        text += ".0"
    return text


class Formatter:
    def __init__(self, indent: str = "\t"):
        self.indent = indent
        self.depth = 0
        self.handlers: Dict[Type[ast.Node], Callable[[ast.Node], str]] = {
            ast.Package: self.format_package,
            ast.File: self.format_file,
            ast.PackageClause: lambda n: f"package {n.name.name}",
            ast.ImportDeclaration: self.format_import,
            ast.VariableAssignment: lambda n: f"{n.id.name} = {self.format(n.init)}",
            ast.MemberAssignment: lambda n: f"{self.format(n.member)} = {self.format(n.init)}",
            ast.OptionStatement: lambda n: f"option {self.format(n.assignment)}",
            ast.ReturnStatement: lambda n: f"return {self.format(n.argument)}",
            ast.ExpressionStatement: lambda n: self.format(n.expression),
            ast.Block: self.format_block,
            ast.Identifier: lambda n: n.name,
            ast.StringLiteral: lambda n: format_string(n.value),
            ast.StringExpression: self.format_string_expression,
            ast.IntegerLiteral: lambda n: str(n.value),
            ast.FloatLiteral: lambda n: format_float(n.value),
            ast.DurationLiteral: lambda n: "".join(f"{d.magnitude}{d.unit}" for d in n.values),
            ast.DateTimeLiteral: lambda n: n.value,
            ast.PipeLiteral: lambda n: "<-",
            ast.Property: self.format_property,
            ast.ObjectExpression: self.format_object,
            ast.ArrayExpression: lambda n: "[" + ", ".join(self.format(e) for e in n.elements) + "]",
            ast.FunctionExpression: self.format_function,
            ast.MemberExpression: self.format_member,
            ast.IndexExpression: lambda n: f"{self.operand(n.array, PREC_POSTFIX)}[{self.format(n.index)}]",
            ast.CallExpression: self.format_call,
            ast.PipeExpression: lambda n: f"{self.operand(n.argument, PREC_PIPE)} |> {self.format(n.call)}",
            ast.BinaryExpression: self.format_binary,
            ast.LogicalExpression: self.format_binary,
            ast.UnaryExpression: self.format_unary,
            ast.ConditionalExpression: lambda n: (
                f"if {self.format(n.test)} then {self.format(n.consequent)} else {self.format(n.alternate)}"
            ),
        }

    def format(self, node: ast.Node) -> str:
        handler = self.handlers.get(type(node))
        if handler is None:
            raise TypeError(f"cannot format {type(node).__name__}")
        return handler(node)

    def operand(self, node: ast.Node, min_prec: int) -> str:
        text = self.format(node)
        if precedence(node) < min_prec:
            return f"({text})"
        return text

    # ─── Files & packages ────────────────────────────────────────────────────

    def _render(self, package_name: str, files: List[ast.File]) -> str:
        chunks = []
        if package_name:
            chunks.append(f"package {package_name}")

        seen = set()
        import_lines = []
        for f in files:
            for imp in f.imports:
                line = self.format(imp)
                if line not in seen:
                    seen.add(line)
                    import_lines.append(line)
        if import_lines:
            chunks.append("\n".join(import_lines))

        for f in files:
            if f.body:
                chunks.append("\n".join(self.format(s) for s in f.body))
        return "\n\n".join(chunks)

    def format_package(self, node: ast.Package) -> str:
        clause = next((f.package for f in node.files if f.package is not None), None)
        return self._render(clause.name.name if clause else "", node.files)

    def format_file(self, node: ast.File) -> str:
        return self._render(node.package.name.name if node.package else "", [node])

    def format_import(self, node: ast.ImportDeclaration) -> str:
        if node.alias is not None:
            return f"import {node.alias.name} {self.format(node.path)}"
        return f"import {self.format(node.path)}"

    def format_block(self, node: ast.Block) -> str:
        self.depth += 1
        try:
            lines = [self.indent * self.depth + self.format(s) for s in node.body]
        finally:
            self.depth -= 1
        return "{\n" + "\n".join(lines) + "\n" + self.indent * self.depth + "}"

    # ─── Expressions ─────────────────────────────────────────────────────────

    def format_key(self, key: ast.Node) -> str:
        if isinstance(key, ast.Identifier) and is_identifier(key.name):
            return key.name
        if isinstance(key, ast.Identifier):
            return format_string(key.name)
        return self.format(key)

    def format_string_expression(self, node: ast.StringExpression) -> str:
        out = []
        for part in node.parts:
            if isinstance(part, ast.InterpolatedPart):
                out.append("${" + self.format(part.expression) + "}")
            else:
                out.append(format_text_part(part.value))
        return '"' + "".join(out) + '"'

    def format_property(self, node: ast.Property) -> str:
        key = self.format_key(node.key)
        if node.value is None:
            return key
        return f"{key}: {self.format(node.value)}"

    def _properties(self, props: List[ast.Property]) -> str:
        return ", ".join(self.format_property(p) for p in props)

    def format_object(self, node: ast.ObjectExpression) -> str:
        if node.with_ is not None:
            return f"{{{node.with_.name} with {self._properties(node.properties)}}}"
        return "{" + self._properties(node.properties) + "}"

    def format_function(self, node: ast.FunctionExpression) -> str:
        params = []
        for p in node.params:
            if p.value is None:
                params.append(self.format_key(p.key))
            else:
                params.append(f"{self.format_key(p.key)}={self.format(p.value)}")
        body = self.format(node.body)
        if isinstance(node.body, ast.ObjectExpression):
            body = f"({body})"
        return f"({', '.join(params)}) => {body}"

    def format_member(self, node: ast.MemberExpression) -> str:
        obj = self.operand(node.object, PREC_POSTFIX)
        if isinstance(node.property, ast.StringLiteral):
            return f"{obj}[{self.format(node.property)}]"
        return f"{obj}.{node.property.name}"

    def format_call(self, node: ast.CallExpression) -> str:
        callee = self.operand(node.callee, PREC_POSTFIX)
        props = [p for arg in node.arguments for p in arg.properties]
        return f"{callee}({self._properties(props)})"

    def format_binary(self, node) -> str:
        prec = precedence(node)
        left = self.operand(node.left, prec)
        right = self.operand(node.right, prec + 1)
        return f"{left} {node.operator.value} {right}"

    def format_unary(self, node: ast.UnaryExpression) -> str:
        prec = precedence(node)
        arg = self.operand(node.argument, prec)
        if node.operator in (ast.OperatorKind.NOT, ast.OperatorKind.EXISTS):
            return f"{node.operator.value} {arg}"
        return f"{node.operator.value}{arg}"


def format_node(node: ast.Node) -> str:
    """Render ``node`` as Flux source."""
    return Formatter().format(node)
