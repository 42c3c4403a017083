"""
Threshold check compiler.

Turns a ``Threshold`` check into a Flux script: the user's query is parsed,
a generated ``threshold.flux`` file is appended after it, and the whole
package is formatted as one script.
"""
import logging
from typing import Callable, List, Optional, Tuple

from . import ast
from . import builders as b
from .check import Threshold
from .config import settings
from .errors import CompileError
from .formatter import format_node
from .parser import parse_source
from .threshold import ThresholdBuilder

logger = logging.getLogger("fluxcheck.compiler")

ParseFn = Callable[[str], Tuple[ast.Package, List[Exception]]]
FormatFn = Callable[[ast.Node], str]


class FluxCompiler:
    def __init__(self, parse: Optional[ParseFn] = None, format: Optional[FormatFn] = None):
        self.parse = parse or parse_source
        self.format = format or format_node

    def generate_flux_ast(self, check: Threshold) -> ast.Package:
        """
        Build the Flux package for ``check``.

        Raises:
            InvalidConfigError: the check failed validation.
            CompileError: the check's query has syntax errors; its message
                holds every error, one per line.
        """
        check.valid()

        package, errors = self.parse(check.query.text)
        if errors:
            logger.warning(f"Query for check {check.id} has {len(errors)} syntax error(s)")
            raise CompileError(errors)

        f = b.file(
            settings.THRESHOLD_FILE_NAME,
            b.imports(settings.ALERTS_PACKAGE),
            ThresholdBuilder(check).build(),
        )
        package.files.append(f)
        return package

    def generate_flux(self, check: Threshold) -> str:
        """Compile ``check`` to Flux source text."""
        package = self.generate_flux_ast(check)
        script = self.format(package)
        logger.debug(f"Compiled check {check.id} ({len(check.thresholds)} thresholds, {len(script)} bytes)")
        return script


def generate_flux_ast(check: Threshold) -> ast.Package:
    return FluxCompiler().generate_flux_ast(check)


def generate_flux(check: Threshold) -> str:
    return FluxCompiler().generate_flux(check)
