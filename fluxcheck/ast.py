"""
Flux abstract syntax tree.

A closed set of node dataclasses covering the part of the Flux language that
check scripts are written in. Nodes compare structurally, so a tree built by
hand can be checked against one built by the builders or the parser.

Layout:
  Package -> File -> (PackageClause, ImportDeclaration*, Statement*)
  Statement -> VariableAssignment | MemberAssignment | OptionStatement
             | ReturnStatement | ExpressionStatement
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class OperatorKind(str, Enum):
    MULTIPLICATION = "*"
    DIVISION = "/"
    MODULO = "%"
    POWER = "^"
    ADDITION = "+"
    SUBTRACTION = "-"
    LESS_THAN_EQUAL = "<="
    LESS_THAN = "<"
    GREATER_THAN_EQUAL = ">="
    GREATER_THAN = ">"
    EQUAL = "=="
    NOT_EQUAL = "!="
    NOT = "not"
    EXISTS = "exists"


class LogicalOperatorKind(str, Enum):
    AND = "and"
    OR = "or"


class Node:
    """Base class for all AST nodes."""
    pass


class Statement(Node):
    pass


class Expression(Node):
    pass


# ─── Literals ────────────────────────────────────────────────────────────────

@dataclass
class Identifier(Expression):
    name: str


@dataclass
class StringLiteral(Expression):
    value: str


@dataclass
class TextPart(Node):
    value: str


@dataclass
class InterpolatedPart(Node):
    expression: Expression


@dataclass
class StringExpression(Expression):
    """
    A string written with ``${...}`` interpolation or an escaped ``\\$``.

    Text parts hold decoded text; a literal ``${`` inside them is escaped
    again when formatted. Plain strings stay ``StringLiteral``.
    """
    parts: List[Union[TextPart, InterpolatedPart]] = field(default_factory=list)


@dataclass
class IntegerLiteral(Expression):
    value: int


@dataclass
class FloatLiteral(Expression):
    value: float


@dataclass
class Duration:
    magnitude: int
    unit: str


@dataclass
class DurationLiteral(Expression):
    """A duration such as ``1h30m``, kept as its ordered parts."""
    values: List[Duration] = field(default_factory=list)


@dataclass
class DateTimeLiteral(Expression):
    """RFC3339 timestamp, kept as written."""
    value: str


@dataclass
class PipeLiteral(Expression):
    """The ``<-`` default that marks a function's pipe-receive parameter."""
    pass


# ─── Composite expressions ───────────────────────────────────────────────────

@dataclass
class Property(Node):
    """Object, call-argument or parameter entry. ``value`` is None for bare params."""
    key: Union[Identifier, StringLiteral]
    value: Optional[Expression] = None


@dataclass
class ObjectExpression(Expression):
    properties: List[Property] = field(default_factory=list)
    with_: Optional[Identifier] = None


@dataclass
class ArrayExpression(Expression):
    elements: List[Expression] = field(default_factory=list)


@dataclass
class Block(Node):
    body: List[Statement] = field(default_factory=list)


@dataclass
class FunctionExpression(Expression):
    params: List[Property]
    body: Union[Expression, Block]


@dataclass
class MemberExpression(Expression):
    object: Expression
    property: Union[Identifier, StringLiteral]


@dataclass
class IndexExpression(Expression):
    array: Expression
    index: Expression


@dataclass
class CallExpression(Expression):
    """Flux calls take named arguments only, so ``arguments`` holds at most one object."""
    callee: Expression
    arguments: List[ObjectExpression] = field(default_factory=list)


@dataclass
class PipeExpression(Expression):
    argument: Expression
    call: CallExpression


@dataclass
class BinaryExpression(Expression):
    operator: OperatorKind
    left: Expression
    right: Expression


@dataclass
class LogicalExpression(Expression):
    operator: LogicalOperatorKind
    left: Expression
    right: Expression


@dataclass
class UnaryExpression(Expression):
    operator: OperatorKind
    argument: Expression


@dataclass
class ConditionalExpression(Expression):
    test: Expression
    consequent: Expression
    alternate: Expression


# ─── Statements ──────────────────────────────────────────────────────────────

@dataclass
class VariableAssignment(Statement):
    id: Identifier
    init: Expression


@dataclass
class MemberAssignment(Statement):
    member: MemberExpression
    init: Expression


@dataclass
class OptionStatement(Statement):
    assignment: Union[VariableAssignment, MemberAssignment]


@dataclass
class ReturnStatement(Statement):
    argument: Expression


@dataclass
class ExpressionStatement(Statement):
    expression: Expression


# ─── Files & packages ────────────────────────────────────────────────────────

@dataclass
class PackageClause(Node):
    name: Identifier


@dataclass
class ImportDeclaration(Node):
    path: StringLiteral
    alias: Optional[Identifier] = None


@dataclass
class File(Node):
    name: str = ""
    package: Optional[PackageClause] = None
    imports: List[ImportDeclaration] = field(default_factory=list)
    body: List[Statement] = field(default_factory=list)


@dataclass
class Package(Node):
    package: str = "main"
    files: List[File] = field(default_factory=list)
