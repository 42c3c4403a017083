"""
Error types raised by fluxcheck.

Every error carries a stable ``code`` so callers can branch on the kind of
failure without matching message text.
"""
from typing import Any, List, Optional

EINVALID = "invalid"
EINTERNAL = "internal"


class FluxCheckError(Exception):
    """Base exception for fluxcheck errors."""
    def __init__(self, message: str, code: str = EINTERNAL, data: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data


class InvalidConfigError(FluxCheckError):
    """Check configuration failed validation."""
    def __init__(self, message: str, data: Any = None):
        super().__init__(message, code=EINVALID, data=data)


class InternalError(FluxCheckError):
    """An invariant the caller should have guaranteed was broken."""
    def __init__(self, message: str, data: Any = None):
        super().__init__(message, code=EINTERNAL, data=data)


class FluxSyntaxError(FluxCheckError):
    """A single syntax error reported by the Flux parser."""
    def __init__(self, description: str, line: Optional[int] = None,
                 column: Optional[int] = None, pos: Optional[int] = None):
        if line is not None and column is not None:
            message = f"error @{line}:{column}: {description}"
        else:
            message = f"error: {description}"
        super().__init__(message, code=EINVALID)
        self.description = description
        self.line = line
        self.column = column
        self.pos = pos


class CompileError(FluxCheckError):
    """
    Aggregated error for a query that could not be compiled.

    The message is every underlying error message joined by newlines, in the
    order they were reported.
    """
    def __init__(self, errors: List[Exception]):
        self.errors = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors), code=EINVALID)
