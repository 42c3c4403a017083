"""
Statement generation for threshold checks.

Given a validated ``Threshold``, emits, in order:

    check = {checkID: "...", tags: {...}}
    <level> = (r) => <predicate>          # one per configured bound
    messageFn = (r, check) => "<template>"
    data |> alerts.check(check: check, messageFn: messageFn, ok: ok, info: info, warn: warn, crit: crit)
"""
from typing import List

from . import ast
from . import builders as b
from .check import BoundKind, Threshold, ThresholdConfig
from .errors import InternalError

# Named arguments of alerts.check(), in call order. Every level is passed
# whether or not the check defines a bound for it.
CHECK_CALL_ARGS = ("check", "messageFn", "ok", "info", "warn", "crit")


class ThresholdBuilder:
    def __init__(self, check: Threshold):
        self.check = check

    def build(self) -> List[ast.Statement]:
        statements: List[ast.Statement] = []
        statements.append(self.check_definition())
        statements.extend(self.threshold_functions())
        statements.append(self.message_function())
        statements.append(self.checks_function())
        return statements

    def check_definition(self) -> ast.Statement:
        tag_properties = []
        for tag in self.check.tags:
            value = b.string_literal(tag.value)
            if b.is_identifier(tag.key):
                tag_properties.append(b.property_(tag.key, value))
            else:
                tag_properties.append(b.string_property(tag.key, value))
        tags = b.property_("tags", b.object_expression(*tag_properties))

        check_id = b.property_("checkID", b.string_literal(self.check.id))

        return b.define_variable("check", b.object_expression(check_id, tags))

    def threshold_functions(self) -> List[ast.Statement]:
        return [threshold_function(cfg) for cfg in self.check.thresholds]

    def message_function(self) -> ast.Statement:
        fn = b.function_expression(
            b.function_params("r", "check"),
            b.string_literal(self.check.status_message_template),
        )
        return b.define_variable("messageFn", fn)

    def checks_function(self) -> ast.Statement:
        return b.expression_statement(b.pipe(b.identifier("data"), self.checks_call()))

    def checks_call(self) -> ast.CallExpression:
        props = [b.property_(name, b.identifier(name)) for name in CHECK_CALL_ARGS]
        return b.call_expression(b.member("alerts", "check"), b.object_expression(*props))


def threshold_function(cfg: ThresholdConfig) -> ast.Statement:
    """``<level> = (r) => <predicate>`` for one bound."""
    value = b.member("r", "_value")
    kind = cfg.kind

    if kind == BoundKind.GREATER:
        body = b.greater_than(value, b.float_literal(cfg.lower_bound))
    elif kind == BoundKind.LESSER:
        body = b.less_than(value, b.float_literal(cfg.upper_bound))
    elif kind == BoundKind.RANGE:
        body = b.logical_and(
            b.less_than(value, b.float_literal(cfg.upper_bound)),
            b.greater_than(b.member("r", "_value"), b.float_literal(cfg.lower_bound)),
        )
    else:
        raise InternalError(
            f"threshold for level {cfg.level.name} has neither lowerBound nor upperBound",
            data=cfg,
        )

    fn = b.function_expression(b.function_params("r"), body)
    return b.define_variable(cfg.level.name.lower(), fn)


def generate_body(check: Threshold) -> List[ast.Statement]:
    return ThresholdBuilder(check).build()
