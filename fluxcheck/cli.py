"""
fluxcheck command line.

    fluxcheck compile check.json [-o out.flux]
    fluxcheck validate check.json
    fluxcheck fmt query.flux
"""
import argparse
import logging
import sys

from .check import unmarshal_check
from .compiler import FluxCompiler
from .config import settings
from .errors import CompileError, FluxCheckError
from .formatter import format_node
from .parser import parse_source


class Colors:
    OKGREEN = '\033[92m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'


def _fail(message: str) -> int:
    print(f"{Colors.FAIL}{message}{Colors.ENDC}", file=sys.stderr)
    return 1


def _read(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def cmd_compile(args) -> int:
    check = unmarshal_check(_read(args.check))
    script = FluxCompiler().generate_flux(check)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(script + "\n")
    else:
        print(script)
    return 0


def cmd_validate(args) -> int:
    check = unmarshal_check(_read(args.check))
    check.valid()
    print(f"{Colors.OKGREEN}{check.check_type} check {check.name!r} is valid{Colors.ENDC}")
    return 0


def cmd_fmt(args) -> int:
    package, errors = parse_source(_read(args.file), args.file)
    if errors:
        raise CompileError(errors)
    print(format_node(package))
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fluxcheck", description="Compile threshold checks to Flux.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compile", help="compile a check JSON document to a Flux script")
    p.add_argument("check", help="path to the check JSON")
    p.add_argument("-o", "--output", help="write the script here instead of stdout")
    p.set_defaults(func=cmd_compile)

    p = sub.add_parser("validate", help="validate a check JSON document")
    p.add_argument("check", help="path to the check JSON")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("fmt", help="print a Flux file in canonical form")
    p.add_argument("file")
    p.set_defaults(func=cmd_fmt)
    return parser


def main(argv=None) -> int:
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    args = build_arg_parser().parse_args(argv)
    try:
        return args.func(args)
    except FluxCheckError as e:
        return _fail(f"Error [{e.code}]: {e}")
    except OSError as e:
        return _fail(f"Error: {e}")


if __name__ == "__main__":
    sys.exit(main())
