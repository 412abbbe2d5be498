"""CLI entry point, command definitions using Click.

Commands:
    help              This page plus the configured checks and their run level
    prereq (p)        Install the tools needed by the enabled checks
    install (i)       prereq, then install the git pre-commit hook
    run (r)           Run all enabled checks
    installrun        install, then run (the default without a command)
    writeconfig (w)   Write (or rewrite) the configuration file
"""

import functools
import logging
import sys
from pathlib import Path

import click

from precommit_go import __version__

# ---------------------------------------------------------------------------
# Helpers shared by all commands
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s.%(msecs)03d %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _root(ctx: click.Context) -> Path:
    """Return the git checkout root, resolved once per invocation."""
    from precommit_go.hook import find_git_root

    obj = ctx.find_root().obj
    if obj.get("root") is None:
        obj["root"] = find_git_root()
        if obj["verbose"]:
            click.echo(f"[verbose] git checkout root is {obj['root']}", err=True)
    return obj["root"]


def _config_path(ctx: click.Context) -> Path:
    path = Path(ctx.find_root().obj["config_path"])
    return path if path.is_absolute() else _root(ctx) / path


def _load_config(ctx: click.Context):
    """Load the configuration relative to the checkout root. Exits on error."""
    from precommit_go.config import ConfigError, load

    try:
        return load(str(_config_path(ctx)))
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


def _handle_errors(func):
    """Decorator that reports known failures and exits with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from precommit_go.errors import CheckError, ChecksFailedError
        from precommit_go.hook import HookError
        from precommit_go.prereq import PrerequisiteError
        from precommit_go.tree import TreeError

        try:
            return func(*args, **kwargs)
        except (ChecksFailedError, CheckError, HookError, PrerequisiteError, TreeError) as exc:
            click.echo(f"pre-commit-go: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

class _AliasedGroup(click.Group):
    """Group that also accepts the one letter command aliases."""

    aliases = {"i": "install", "p": "prereq", "r": "run", "w": "writeconfig"}

    def get_command(self, ctx: click.Context, cmd_name: str):
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(self, ctx: click.Context, args):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args


@click.group(cls=_AliasedGroup, invoke_without_command=True)
@click.option("--config", "config_path", default="pre-commit-go.yml", show_default=True,
              help="File name of the config to load, relative to the checkout root.")
@click.option("--level", "run_level", type=click.IntRange(0, 3), default=1, show_default=True,
              help="Run level; the higher, the more checks are run.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable verbose logging.")
@click.version_option(__version__, prog_name="pre-commit-go")
@click.pass_context
def cli(ctx: click.Context, config_path: str, run_level: int, verbose: bool) -> None:
    """pre-commit-go: runs pre-commit checks on Go projects, fast.

    Without a command, does the equivalent of 'installrun'. No check ever
    modifies any file.
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["run_level"] = run_level
    ctx.obj["verbose"] = verbose
    ctx.obj.setdefault("root", None)
    if ctx.invoked_subcommand is None:
        ctx.invoke(installrun_command)


# ---------------------------------------------------------------------------
# help
# ---------------------------------------------------------------------------

@cli.command("help")
@click.pass_context
@_handle_errors
def help_command(ctx: click.Context) -> None:
    """Show this page and the configured checks."""
    click.echo(ctx.parent.get_help())
    checks = _load_config(ctx).all_checks()
    width = max(len(c.name) for c in checks)
    native = [c for c in checks if not c.prerequisites]
    others = [c for c in checks if c.prerequisites]

    click.echo("\nSupported checks and their run level:")
    click.echo("  Native checks that only depend on the Go distribution:")
    for c in native:
        click.echo(f"    - {c.name:<{width}} {c.run_level} : {c.description}")
    click.echo("\n  Checks that have prerequisites (which will be automatically installed):")
    for c in others:
        click.echo(f"    - {c.name:<{width}} {c.run_level} : {c.description}")


# ---------------------------------------------------------------------------
# prereq / install
# ---------------------------------------------------------------------------

@cli.command("prereq")
@click.pass_context
@_handle_errors
def prereq_command(ctx: click.Context) -> None:
    """Install prerequisites of the enabled checks (errcheck, golint, ...)."""
    from precommit_go.prereq import install_prerequisites

    config = _load_config(ctx)
    install_prerequisites(config.enabled_checks(ctx.find_root().obj["run_level"]))


@cli.command("install")
@click.pass_context
@_handle_errors
def install_command(ctx: click.Context) -> None:
    """Run 'prereq' then install the git hook as .git/hooks/pre-commit."""
    from precommit_go.hook import install_hook

    ctx.invoke(prereq_command)
    path = install_hook(_root(ctx))
    if ctx.find_root().obj["verbose"]:
        click.echo(f"[verbose] installed {path}", err=True)


# ---------------------------------------------------------------------------
# run / installrun
# ---------------------------------------------------------------------------

@cli.command("run")
@click.pass_context
@_handle_errors
def run_command(ctx: click.Context) -> None:
    """Run all enabled checks."""
    from precommit_go.scheduler import run_checks
    from precommit_go.tree import SourceTree

    obj = ctx.find_root().obj
    config = _load_config(ctx)
    checks = config.enabled_checks(obj["run_level"])
    tree = SourceTree.scan(_root(ctx))

    if obj["verbose"]:
        names = ", ".join(c.name for c in checks) or "(none)"
        click.echo(f"[verbose] Running at level {obj['run_level']}: {names}", err=True)

    outcomes = run_checks(checks, config.max_duration, tree)
    if obj["verbose"]:
        total = sum(o.elapsed for o in outcomes)
        click.echo(f"[verbose] {len(outcomes)} checks passed ({total:1.2f}s of check time)", err=True)


@cli.command("installrun")
@click.pass_context
@_handle_errors
def installrun_command(ctx: click.Context) -> None:
    """Run 'prereq', 'install' then 'run'."""
    ctx.invoke(install_command)
    ctx.invoke(run_command)


# ---------------------------------------------------------------------------
# writeconfig
# ---------------------------------------------------------------------------

@cli.command("writeconfig")
@click.pass_context
@_handle_errors
def writeconfig_command(ctx: click.Context) -> None:
    """Write (or rewrite) the configuration file with all values spelled out."""
    from precommit_go.config import write_config

    config = _load_config(ctx)
    path = _config_path(ctx)
    write_config(config, str(path))
    click.echo(f"Configuration written to '{path}'.")
