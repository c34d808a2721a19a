"""Command-line entry point.

Usage:
    python -m zod_schema_compiler definitions.yml [-o schemas.ts] [-c config.yml]

Without -o (and without output.path or output.separate_files in the
config) the TypeScript is printed to stdout. Logs go to stderr; set
ZOD_SCHEMA_LOG_LEVEL to change verbosity.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from .compiler import SchemaCompiler
from .config import CompilerConfigLoader
from .definitions import load_definitions
from .exceptions import SchemaCompilerError

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure stderr logging from ZOD_SCHEMA_LOG_LEVEL (default INFO)."""
    valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    log_level_str = os.getenv("ZOD_SCHEMA_LOG_LEVEL", "INFO").upper()

    if log_level_str not in valid_log_levels:
        print(
            f"Warning: Invalid ZOD_SCHEMA_LOG_LEVEL '{log_level_str}'. "
            f"Valid levels: {', '.join(sorted(valid_log_levels))}. "
            "Using INFO.",
            file=sys.stderr,
        )
        log_level_str = "INFO"

    logging.basicConfig(
        level=getattr(logging, log_level_str),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zod-schema-compiler",
        description="Compile Laravel-style validation rules into Zod schemas.",
    )
    parser.add_argument("definitions", help="YAML file with a 'schemas:' list of sources")
    parser.add_argument("-o", "--output", help="Output file (directory with --separate-files)")
    parser.add_argument("-c", "--config", help="Compiler config file")
    parser.add_argument(
        "--separate-files",
        action="store_true",
        help="Write one file per schema into the output directory",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the compiler; returns the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        config = CompilerConfigLoader(args.config).load_config()
        if args.separate_files:
            config = config.model_copy(
                update={"output": config.output.model_copy(update={"separate_files": True})}
            )

        compiler = SchemaCompiler(load_definitions(args.definitions), config)
        if args.output or config.output.path or config.output.separate_files:
            for path in compiler.write(args.output):
                logger.info(f"Wrote {path}")
        else:
            sys.stdout.write(compiler.compile())
    except SchemaCompilerError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
