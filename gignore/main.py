# main.py
import logging
from pathlib import Path

import click

from gignore.compiler import compile_lines
from gignore.gitignore import DEFAULT_IGNORE_FILE, compile_file
from gignore.matcher import decide
from gignore.models import RuleSet


def _load_rules(ignore_file, excludes):
    rules = ()
    if ignore_file is not None:
        rules += compile_file(ignore_file).rules
    if excludes:
        rules += compile_lines(excludes, source="-e").rules
    return RuleSet(rules=rules)


def _format_verbose(rule, path):
    if rule is None:
        return f"::\t{path}"
    source = rule.source or ""
    line = rule.line_number if rule.line_number is not None else ""
    return f"{source}:{line}:{rule.pattern}\t{path}"


@click.command()
@click.argument("pathnames", nargs=-1)
@click.option("-f", "--ignore-file", envvar="GIGNORE_FILE", default=DEFAULT_IGNORE_FILE, show_default=True,
              help="Read patterns from this file.")
@click.option("-e", "--exclude", "excludes", multiple=True, metavar="PATTERN",
              help="Extra pattern, applied after the ignore file. Can be repeated.")
@click.option("--stdin", "from_stdin", is_flag=True,
              help="Read path names from standard input, one per line.")
@click.option("-q", "--quiet", is_flag=True,
              help="Don't print anything, only set the exit status.")
@click.option("-v", "--verbose", is_flag=True,
              help="Show the pattern that decided each path.")
@click.option("-n", "--non-matching", is_flag=True,
              help="With --verbose, also show paths no pattern decided.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx, pathnames, ignore_file, excludes, from_stdin, quiet, verbose, non_matching, debug):
    """
    Checks PATHNAMES against gitignore patterns, like `git check-ignore`.

    Prints every path that is ignored. Exits with 0 if at least one path
    is ignored, 1 if none is, and 128 on a fatal error.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if quiet and verbose:
        click.secho("fatal: cannot have both --quiet and --verbose", fg="red", err=True)
        ctx.exit(128)
    if non_matching and not verbose:
        click.secho("fatal: --non-matching is only valid with --verbose", fg="red", err=True)
        ctx.exit(128)

    if not Path(ignore_file).is_file():
        if not excludes:
            click.secho(f"fatal: cannot read ignore file '{ignore_file}'", fg="red", err=True)
            ctx.exit(128)
        logging.debug("Ignore file %s not found, using -e patterns only", ignore_file)
        ignore_file = None

    rule_set = _load_rules(ignore_file, excludes)

    paths = list(pathnames)
    if from_stdin:
        paths.extend(line.rstrip("\r\n") for line in click.get_text_stream("stdin") if line.strip())
    if not paths:
        click.secho("fatal: no path specified", fg="red", err=True)
        ctx.exit(128)

    found = False
    for path in paths:
        rule = decide(rule_set, path)
        ignored = rule is not None and not rule.negated
        found = found or ignored
        if quiet:
            continue
        if verbose:
            if rule is not None or non_matching:
                click.echo(_format_verbose(rule, path))
        elif ignored:
            click.echo(path)

    ctx.exit(0 if found else 1)


if __name__ == "__main__":
    cli()
