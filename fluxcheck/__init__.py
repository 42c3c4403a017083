"""
fluxcheck: compiles threshold check configurations into Flux scripts.

All logic lives in:
  - ast.py        → Flux AST node types
  - builders.py   → node constructors used by code generation
  - check.py      → check models, validation, JSON boundary
  - threshold.py  → statements for a threshold check
  - compiler.py   → parse query, append generated file, format
  - parser.py     → Flux parser (lark)
  - formatter.py  → Flux source rendering
  - errors.py     → error types with stable codes
  - config.py     → FLUXCHECK_* settings
  - cli.py        → command line entry point
"""
from .check import CheckLevel, Tag, Threshold, ThresholdConfig, marshal_check, unmarshal_check
from .compiler import FluxCompiler, generate_flux, generate_flux_ast
from .errors import CompileError, FluxCheckError, FluxSyntaxError, InternalError, InvalidConfigError

__version__ = "0.1.0"
