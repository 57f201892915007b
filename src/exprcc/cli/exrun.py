"""
exrun - Reference Emulator Command-Line Interface
================================================

Runs assembly produced by excc on the in-process stack-machine emulator
and prints the value main returns.

Usage Examples
--------------
Run a file:
    $ exrun expr.s

From a pipe:
    $ excc "2*(3+4)" | exrun

Behave like the compiled program:
    $ exrun --exit-status expr.s; echo $?

Trace execution:
    $ exrun --trace expr.s
"""

import sys
from typing import TextIO

import click

from exprcc import __version__
from exprcc.emulator import StackMachine, exit_status
from exprcc.cli.errors import handle_cli_exception, setup_logging


@click.command()
@click.argument(
    "input_file",
    type=click.File("r"),
    default="-",
)
@click.option(
    "--entry",
    default="main",
    show_default=True,
    help="Label to start execution at",
)
@click.option(
    "--exit-status", "use_exit_status",
    is_flag=True,
    help="Exit with the result truncated to 0-255, like the real program",
)
@click.option(
    "--trace",
    is_flag=True,
    help="Log every executed instruction",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="exrun")
def main(
    input_file: TextIO,
    entry: str,
    use_exit_status: bool,
    trace: bool,
    verbose: bool,
) -> None:
    """
    Execute generated assembly on the reference emulator.

    INPUT_FILE is the assembly file to run; standard input is read when
    it is omitted. The value returned from the entry label is printed.

    \b
    Examples:
        exrun expr.s                 # Print main's return value
        excc "1<2" | exrun           # Compile and run
        exrun --exit-status expr.s   # Exit with the value & 0xFF
    """
    setup_logging(verbose or trace)

    try:
        program = input_file.read()
        machine = StackMachine(entry=entry, trace=trace)
        value = machine.run(program)

    except Exception as e:
        handle_cli_exception(e, verbose)

    click.echo(str(value))

    if use_exit_status:
        sys.exit(exit_status(value))


if __name__ == "__main__":
    main()
