import os
import sys
from pathlib import Path

from brace.brace_runtime import ScriptRunner
from brace.brace_printer import Printer

USAGE = """Usage:
  brace                  start the interactive prompt
  brace <file>           run a file
  brace ast|a [<file>]   print the syntax tree of a file, or of each line typed at the prompt
  brace help|h           show this help
"""


# A basic input prompt; tests replace it.
def read_line(prompt: str) -> str:
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return sys.stdin.readline()


def loop_limit_from_env():
    """Optional bound on loop iterations from BRACE_LOOP_LIMIT."""
    try:
        limit = int(os.environ.get("BRACE_LOOP_LIMIT", ""))
    except ValueError:
        return None
    return limit if limit > 0 else None


def read_source(file_path: str) -> str:
    try:
        return Path(file_path).read_text(encoding="utf-8")
    except (FileNotFoundError, IsADirectoryError):
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)


def run_script_file(file_path: str):
    """Run a brace file non-interactively and exit with appropriate status."""
    runner = ScriptRunner(max_loop_iterations=loop_limit_from_env())
    result = runner.handle_script(read_source(file_path))
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)


def print_ast_file(file_path: str):
    result = ScriptRunner().dump_ast(read_source(file_path))
    if result.status == 'error':
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)
    print(result.value)


def repl(dump_ast: bool = False):
    """Read lines until 'exit' or end of input, echoing values or syntax trees."""
    print("brace REPL v0.1")
    print("Type 'exit' or press Ctrl+D to quit.")

    runner = ScriptRunner(max_loop_iterations=loop_limit_from_env())
    printer = Printer()

    while True:
        try:
            raw = read_line(">: ")
            if raw == "":
                raise EOFError
            line = raw.strip()

            if not line:
                continue
            if line == "exit":
                break

            if dump_ast:
                result = runner.dump_ast(line, interactive=True)
            else:
                result = runner.handle_line(line)

            if result.status == 'error':
                print(result.format_error(), file=sys.stderr)
                continue

            print(result.value if dump_ast else printer.pformat(result.value))

        except EOFError:
            print("\nExiting.")
            break


def main(argv=None):
    """Dispatch on the command line: no args starts the prompt, otherwise run a mode or a file."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        repl()
        return
    command = args[0].lower()
    if command in ("help", "h"):
        print(USAGE)
    elif command in ("ast", "a"):
        if len(args) > 1:
            print_ast_file(args[1])
        else:
            repl(dump_ast=True)
    elif len(args) == 1:
        run_script_file(args[0])
    else:
        print(USAGE, file=sys.stderr)
        raise SystemExit(2)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nExiting.")
