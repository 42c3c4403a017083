"""
Small constructors for Flux AST nodes.

Generated code composes trees only through these helpers; none of them
validate beyond what their argument types already say.
"""
import re
from typing import List, Union

from . import ast

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

KEYWORDS = frozenset({
    "and", "or", "not", "exists", "if", "then", "else",
    "import", "package", "option", "return", "with",
})


def is_identifier(name: str) -> bool:
    """True if ``name`` can be written as a bare Flux identifier."""
    return bool(_IDENTIFIER_RE.match(name)) and name not in KEYWORDS


def file(name: str, imports: List[ast.ImportDeclaration], body: List[ast.Statement]) -> ast.File:
    return ast.File(name=name, imports=list(imports), body=list(body))


def identifier(name: str) -> ast.Identifier:
    return ast.Identifier(name=name)


def member(obj: Union[str, ast.Expression], prop: str) -> ast.MemberExpression:
    if isinstance(obj, str):
        obj = identifier(obj)
    return ast.MemberExpression(object=obj, property=identifier(prop))


def greater_than(lhs: ast.Expression, rhs: ast.Expression) -> ast.BinaryExpression:
    return ast.BinaryExpression(operator=ast.OperatorKind.GREATER_THAN, left=lhs, right=rhs)


def less_than(lhs: ast.Expression, rhs: ast.Expression) -> ast.BinaryExpression:
    return ast.BinaryExpression(operator=ast.OperatorKind.LESS_THAN, left=lhs, right=rhs)


def logical_and(lhs: ast.Expression, rhs: ast.Expression) -> ast.LogicalExpression:
    return ast.LogicalExpression(operator=ast.LogicalOperatorKind.AND, left=lhs, right=rhs)


def pipe(base: ast.Expression, *calls: ast.CallExpression) -> ast.PipeExpression:
    """
    Pipe ``base`` forward through each call in turn.

    ``pipe(a, f, g)`` is ``a |> f |> g``. At least one call is required.
    """
    if not calls:
        raise ValueError("must pipe forward to at least one CallExpression")
    pe = ast.PipeExpression(argument=base, call=calls[0])
    for call in calls[1:]:
        pe = ast.PipeExpression(argument=pe, call=call)
    return pe


def call_expression(callee: ast.Expression, args: ast.ObjectExpression) -> ast.CallExpression:
    return ast.CallExpression(callee=callee, arguments=[args])


def string_literal(s: str) -> ast.StringLiteral:
    return ast.StringLiteral(value=s)


def float_literal(f: float) -> ast.FloatLiteral:
    return ast.FloatLiteral(value=float(f))


def expression_statement(e: ast.Expression) -> ast.ExpressionStatement:
    return ast.ExpressionStatement(expression=e)


def function_params(*names: str) -> List[ast.Property]:
    return [ast.Property(key=identifier(name)) for name in names]


def function_expression(params: List[ast.Property], body: ast.Expression) -> ast.FunctionExpression:
    return ast.FunctionExpression(params=list(params), body=body)


def define_variable(name: str, init: ast.Expression) -> ast.VariableAssignment:
    return ast.VariableAssignment(id=identifier(name), init=init)


def property_(key: str, value: ast.Expression) -> ast.Property:
    return ast.Property(key=identifier(key), value=value)


def string_property(key: str, value: ast.Expression) -> ast.Property:
    """Property whose key is written as a string, for keys that are not identifiers."""
    return ast.Property(key=string_literal(key), value=value)


def object_expression(*props: ast.Property) -> ast.ObjectExpression:
    return ast.ObjectExpression(properties=list(props))


def import_declaration(path: str) -> ast.ImportDeclaration:
    return ast.ImportDeclaration(path=string_literal(path))


def imports(*paths: str) -> List[ast.ImportDeclaration]:
    return [import_declaration(path) for path in paths]
