## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# arrfl — A concatenative stack language over typed one-dimensional arrays.
#

import sys
import time
from pathlib import Path
from dataclasses import dataclass

import click

from .errors import ArrError, ArrParseError, ArrEvalError, ArrStackError, ArrTypeError, ArrValueError
from .parser import format_parse_error_context
from .formatting import write_without_ansi, format_value, show_stack, show_words
from .interpreter import DEFAULT_MAX_DEPTH
from .runtime import Runtime


SYNTAX_HELP = """
\033[97mDefinitions\033[0m
  : name body ;   Define the word `name`, evaluated whenever `name` appears.
  [ 1 2 3 ]       Numeric array literal.  A single number needs no brackets.
  "text"          Character array literal.
  # comment       Ignore the rest of the line.

\033[97mShell\033[0m
  .load FILE      Run every line of FILE.
  .debug          Toggle showing the stack and words after each line.
  .words          Show the defined words.
  .quit           Leave the REPL.
"""


@dataclass(frozen=True)
class RuntimeConfig:
    verbose: int
    debug: bool
    strict: bool
    max_depth: int
    ignore: bool
    stats: bool
    plain: bool


class ArrRunner:
    def __init__(self, config: RuntimeConfig):
        self.verbose = config.verbose
        self.ignore = config.ignore
        self.stats_enabled = config.stats
        self.plain = config.plain

        if self.plain:
            writer = write_without_ansi(sys.stdout.write)
            sys.stdout.write, sys.stderr.write = writer, writer

        self.runtime = Runtime(debug=config.debug, strict=config.strict, max_depth=config.max_depth)
        self.total_stats = {'steps': 0, 'start': time.time()} if self.stats_enabled else None
        self.sources: dict[str, list[str]] = {}
        self.failure = False
        self.executed_lines = 0

    def _source_of(self, filename: str | None) -> str:
        return '\n'.join(self.sources.get(filename, []))

    def _report(self, message: str, detail: str, exc_type: str = None, context: str = '') -> None:
        header = detail if not exc_type else f"{detail} (Exception: \033[33m{exc_type}\033[0m)"
        print(f'\033[30;43m {message} \033[0m {header}\n{context}', file=sys.stderr)

    def _handle_exception(self, exc: ArrError, filename: str) -> None:
        if isinstance(exc, ArrParseError):
            context = format_parse_error_context(filename, exc.line, exc.column, exc.token, source=self._source_of(filename))
            context += f"\n\033[90m{str(exc).replace(chr(10), ' ').replace(chr(9), ' ')}\033[0m\n"
            self._report("SYNTAX ERROR.", f"Parsing `\033[97m{filename}\033[0m` caused a problem!", type(exc).__name__, context)
            return

        assert isinstance(exc, ArrEvalError)
        if isinstance(exc, ArrStackError): banner = "STACK ERROR."
        elif isinstance(exc, (ArrTypeError, ArrValueError)): banner = "TYPE ERROR."
        else: banner = "RUNTIME ERROR."

        context, meta = '', exc.arr_meta or {}
        if (source := self._source_of(meta.get('filename'))) and meta.get('line'):
            context = format_parse_error_context(meta['filename'], meta['line'], meta.get('column'), meta.get('text', exc.arr_token), source=source)
        self._report(banner, f"Token \033[1;97m`{exc.arr_token}`\033[0m failed: {exc}", type(exc).__name__, context)
        print(f'\033[1;33m  Stack content is\033[0;33m\n    ', end='', file=sys.stderr)
        show_stack(exc.arr_stack, width=None, file=sys.stderr)
        print('\033[0m', file=sys.stderr)

    def execute_line(self, line: str, filename: str, lineno: int, print_result: bool = False) -> bool:
        try:
            self.runtime.execute(line, filename=filename, lineno=lineno, verbosity=self.verbose, stats=self.total_stats)
        except ArrError as exc:
            self._handle_exception(exc, filename)
            self.failure = True
            return False
        else:
            self.executed_lines += 1
            if print_result and (top := self.runtime.top()) is not None:
                print(format_value(top))
            return True
        finally:
            if self.runtime.debug:
                self.runtime.dump()

    def execute_source(self, source: str, filename: str) -> None:
        """Run a file line by line; a failing line is reported and the following lines still run."""
        self.sources[filename] = source.splitlines()
        for lineno, line in enumerate(self.sources[filename], start=1):
            self.execute_line(line, filename, lineno)

    def load_file(self, path: str) -> None:
        try:
            source = Path(path).read_text(encoding='utf-8')
        except OSError as exc:
            self._report("LOAD ERROR.", f"Cannot read `\033[97m{path}\033[0m`: {exc.strerror}.")
            return
        self.execute_source(source, path)

    def show_help(self) -> None:
        print("\033[97mBuiltins\033[0m")
        for spellings, doc in self.runtime.library.describe():
            print(f"  {' '.join(spellings):<14}  {doc}")
        print(SYNTAX_HELP, end='')

    def _repl_command(self, line: str) -> bool:
        """Shell commands of the REPL, returning False once the session should end."""
        command, _, argument = line.partition(' ')
        match command:
            case '.quit' | 'quit' | 'exit':
                return False
            case '.debug':
                self.runtime.debug = not self.runtime.debug
                print(f"\033[90mdebug {'on' if self.runtime.debug else 'off'}\033[0m")
            case '.load':
                if argument.strip(): self.load_file(argument.strip())
                else: print("\033[90musage: .load FILE\033[0m")
            case '.words':
                show_words(self.runtime.words)
            case '.help':
                self.show_help()
            case _:
                print(f"\033[90munknown command `{command}`, try .help\033[0m")
        return True

    def repl(self) -> None:
        if sys.platform != "win32": import readline

        print('arrfl - Array stack language REPL; type .help for builtins, Ctrl+C to exit.')
        history = self.sources.setdefault('<REPL>', [])

        while True:
            try:
                line = input("\033[36m<<< \033[0m")
                if len(line.strip()) == 0: continue
                if line.strip().startswith('.') or line.strip() in ('quit', 'exit'):
                    if not self._repl_command(line.strip()): break
                    continue

                history.append(line)
                if self.execute_line(line, '<REPL>', len(history)) and (top := self.runtime.top()) is not None:
                    print("\033[90m>>>\033[0m", format_value(top))

            except (KeyboardInterrupt, EOFError):
                print(""); break

    def finalize(self) -> int:
        if self.total_stats and self.executed_lines > 0:
            elapsed_time = time.time() - self.total_stats['start']
            print(f"\n\033[97m\033[48;5;30m STATISTICS. \033[0m")
            print(f"step\t\033[97m{self.total_stats['steps']:,}\033[0m")
            print(f"time\t\033[97m{elapsed_time:.3f}s\033[0m")
        return 1 if (self.failure and not self.ignore) else 0


def _parse_dev_tokens(tokens: list[str]) -> list[tuple[str, Path | str | None]]:
    actions: list[tuple[str, Path | str | None]] = []
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token == '--':
            index += 1
            continue
        if token in ('-c', '--command'):
            index += 1
            if index >= len(tokens):
                raise click.BadParameter("Missing inline code after -c/--command option.")
            actions.append(('command', tokens[index]))
            index += 1
            continue
        if token.startswith('-c=') or token.startswith('--command='):
            _, value = token.split('=', 1)
            if value == '':
                raise click.BadParameter("Empty code supplied to command option.")
            actions.append(('command', value))
            index += 1
            continue
        if token in ('-r', '--repl'):
            actions.append(('repl', None))
            index += 1
            continue
        if token.startswith('-'):
            raise click.BadParameter(f"Unknown option `{token}`.")
        path = Path(token)
        if not path.exists():
            raise click.BadParameter(f"File `{token}` not found.")
        actions.append(('file', path))
        index += 1
    return actions


@click.group(invoke_without_command=True, context_settings={'ignore_unknown_options': True, 'allow_extra_args': True})
@click.option('--verbose', '-v', default=0, count=True, help='Trace word calls (-v) or every step (-vv).')
@click.option('--debug', '-d', is_flag=True, envvar='ARRFL_DEBUG', help='Show the stack and words after each line.')
@click.option('--strict', is_flag=True, help='Fail on words that are not defined instead of ignoring them.')
@click.option('--max-depth', default=DEFAULT_MAX_DEPTH, show_default=True, type=click.IntRange(min=1), help='Maximum nesting of word calls.')
@click.option('--ignore', '-i', is_flag=True, help='Exit successfully even when some lines failed.')
@click.option('--stats', is_flag=True, help='Display execution statistics (e.g., number of steps).')
@click.option('--plain', '-p', is_flag=True, help='Strip ANSI color codes and redirect stderr to stdout.')
@click.pass_context
def cli(ctx: click.Context, verbose: int, debug: bool, strict: bool, max_depth: int, ignore: bool, stats: bool, plain: bool) -> None:
    ctx.ensure_object(dict)
    ctx.obj['config'] = RuntimeConfig(verbose=verbose, debug=debug, strict=strict, max_depth=max_depth,
                                      ignore=ignore, stats=stats, plain=plain)


@cli.command('run-file')
@click.argument('script', type=click.File('r', encoding='utf-8'))
@click.pass_context
def run_file(ctx: click.Context, script) -> None:
    runner = ArrRunner(ctx.obj['config'])
    runner.execute_source(script.read(), script.name or '<STDIN>')
    ctx.exit(runner.finalize())


@cli.command('run-dev', context_settings={'ignore_unknown_options': True, 'allow_extra_args': True})
@click.argument('tokens', nargs=-1)
@click.pass_context
def run_dev(ctx: click.Context, tokens: tuple[str, ...]) -> None:
    runner = ArrRunner(ctx.obj['config'])
    actions = _parse_dev_tokens(list(tokens))

    command_index = 1
    for action, payload in actions:
        if action == 'file':
            runner.load_file(str(payload))
        elif action == 'command':
            filename = f'<INPUT_{command_index}>'
            runner.sources[filename] = [payload]
            runner.execute_line(payload, filename, 1, print_result=True)
            command_index += 1
        elif action == 'repl':
            runner.repl()
        else:
            raise NotImplementedError

    if not actions:
        runner.repl()
    ctx.exit(runner.finalize())


@cli.command('run-repl')
@click.pass_context
def run_repl(ctx: click.Context) -> None:
    runner = ArrRunner(ctx.obj['config'])
    runner.repl()
    ctx.exit(runner.finalize())


def main(argv: list[str] | None = None) -> None:
    a = list(sys.argv[1:] if argv is None else argv)
    flags = ('--debug', '-d', '--strict', '--ignore', '-i', '--stats', '--plain', '-p')
    g, r, i = [], [], 0
    while i < len(a):
        t = a[i]
        if t in flags or (t.startswith('-v') and set(t[1:]) == {'v'}) or t.startswith('--max-depth='):
            g.append(t)
        elif t == '--max-depth' and i + 1 < len(a):
            g.extend(a[i:i+2]); i += 1
        else:
            r.append(t)
        i += 1
    pos = [t for t in r if not t.startswith('-')]
    has_dev_opt = any(t in ('-c', '-r', '--repl') or t.startswith('--command') or t.startswith('-c=') for t in r)

    if len(r) == 0:
        # No args: if stdin has data, treat as file '-', else REPL
        cmd, tail = ('run-file', ['-']) if not sys.stdin.isatty() else ('run-repl', [])
    elif r == ['-']:
        cmd, tail = 'run-file', ['-']
    elif r == ['--repl']:
        cmd, tail = 'run-repl', []
    elif len(pos) == 1 and not has_dev_opt and len(r) == 1:
        cmd, tail = 'run-file', [pos[0]]
    else:
        cmd, tail = 'run-dev', r

    cli.main(args=[*g, cmd, *tail], prog_name='arrfl')


if __name__ == "__main__":
    main()
