"""
c0c - c0 Compiler Command-Line Interface
========================================

This module implements the command-line interface for the c0 compiler
front end. It compiles one c0 source file into a stack machine
instruction listing.

Usage Examples
--------------
Basic compilation:
    $ c0c hello.c0

With output file:
    $ c0c hello.c0 -o hello.lst

Print the token stream:
    $ c0c --tokens hello.c0

Verbose mode (debug logging):
    $ c0c -v hello.c0

Defaults for the compiler options can also be set with the C0_STRICT_INIT,
C0_INTEGER_BITS and C0_NO_BUILTINS environment variables.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from c0_sdk import __version__
from c0_sdk.cli.errors import handle_cli_exception
from c0_sdk.frontend import C0Compiler, CompilerOptions, Tokenizer, format_listing
from c0_sdk.frontend.compiler import INTEGER_BITS_RANGE


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output listing file (default: input.lst)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "--no-strict-init",
    is_flag=True,
    help="Allow reading variables before they are assigned",
)
@click.option(
    "--no-builtins",
    is_flag=True,
    help="Do not pre-declare the standard library functions",
)
@click.option(
    "--integer-bits",
    type=click.IntRange(*INTEGER_BITS_RANGE),
    default=None,
    help="Width of unsigned integer literals (default: 64)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="c0c")
def main(
    input_file: Path,
    output: Optional[Path],
    tokens: bool,
    no_strict_init: bool,
    no_builtins: bool,
    integer_bits: Optional[int],
    verbose: bool,
) -> None:
    """
    Compile c0 source code to stack machine instructions.

    INPUT_FILE is the c0 source file (.c0) to compile.

    \b
    Examples:
        c0c hello.c0                 # Outputs hello.lst
        c0c hello.c0 -o out.lst      # Specify output file
        c0c --tokens hello.c0        # Dump tokens
        c0c -v hello.c0              # Verbose output
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if output is None:
        output = input_file.with_suffix(".lst")

    options = CompilerOptions.from_env()
    options.filename = str(input_file)
    if no_strict_init:
        options.strict_initialization = False
    if no_builtins:
        options.include_builtins = False
    if integer_bits is not None:
        options.integer_bits = integer_bits

    try:
        source = input_file.read_text(encoding="utf-8")

        # Token dump mode
        if tokens:
            tokenizer = Tokenizer(source, str(input_file), options.integer_bits)
            for token in tokenizer.tokenize():
                click.echo(repr(token))
            return

        if verbose:
            click.echo(f"Compiling {input_file}...")

        compiler = C0Compiler(options)
        result = compiler.compile_source(source, str(input_file))

        output.write_text(format_listing(result.instructions) + "\n", encoding="utf-8")

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens")
            click.echo(f"Emitted: {len(result.instructions)} instructions")
            click.echo(f"Allocated: {result.slot_count} slots")

        click.echo(f"Compiled {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
