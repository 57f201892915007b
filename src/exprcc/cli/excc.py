"""
excc - Expression Compiler Command-Line Interface
=================================================

Compiles one arithmetic expression to x86-64 assembly.

Usage Examples
--------------
Print the assembly:
    $ excc "2*(3+4)"

With output file:
    $ excc "2*(3+4)" -o expr.s

Build and run with the system toolchain:
    $ excc "2*(3+4)" -o expr.s && cc -o expr expr.s && ./expr; echo $?

Inspect the front end:
    $ excc --tokens "1 <= 2"
    $ excc --ast "5 > 3"
"""

import logging
from pathlib import Path
from typing import Optional

import click

from exprcc import __version__
from exprcc.compiler import ExpressionCompiler, CompilerOptions
from exprcc.compiler.ast import ASTPrinter
from exprcc.cli.errors import handle_cli_exception, setup_logging

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("expression")
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output assembly file (default: stdout)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "-c", "--comments",
    is_flag=True,
    help="Annotate the assembly with comments",
)
@click.option(
    "--entry",
    default="main",
    show_default=True,
    help="Entry symbol of the generated program",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="excc")
def main(
    expression: str,
    output: Optional[Path],
    tokens: bool,
    ast: bool,
    comments: bool,
    entry: str,
    verbose: bool,
) -> None:
    """
    Compile an arithmetic expression to x86-64 assembly.

    EXPRESSION is the expression to compile. Quote it so the shell
    leaves operators such as * and < alone.

    The program returns the value of the expression from main, so after
    assembling and linking it the value shows up as the exit status.

    \b
    Examples:
        excc "2+3*4"                 # Assembly to stdout
        excc "2+3*4" -o expr.s       # Specify output file
        excc -c "(1+2)*3"            # Commented assembly
        excc -- "-3+5"               # Leading minus after --
        excc --ast "5 > 3"           # Print the parse tree

    \b
    Supported syntax:
        - Decimal integer literals
        - + - * / with the usual precedence
        - == != < <= > >= (result 0 or 1)
        - Unary + and -, parentheses
    """
    setup_logging(verbose)

    if not entry:
        handle_cli_exception(click.BadParameter("entry symbol must not be empty"))

    options = CompilerOptions(
        entry_symbol=entry,
        output_comments=comments,
    )
    compiler = ExpressionCompiler(options)

    try:
        # Token dump mode
        if tokens:
            for token in compiler.tokenize(expression):
                click.echo(repr(token))
            return

        # AST dump mode
        if ast:
            click.echo(ASTPrinter().print(compiler.parse(expression)))
            return

        result = compiler.compile_source(expression)

        if output is None:
            click.echo(result.assembly, nl=False)
            return

        output.write_text(result.assembly)
        logger.debug(f"Wrote {len(result.assembly)} bytes to {output}")
        click.echo(f"Compiled {expression!r} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
