"""Line-oriented shell over a StackPool."""

from stack_pool_cli.repl import (
    make_pool,
    repl,
    run_command,
    run_program_lines,
    main,
)

__all__ = [
    "make_pool",
    "repl",
    "run_command",
    "run_program_lines",
    "main",
]
