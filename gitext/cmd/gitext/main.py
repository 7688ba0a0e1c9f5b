"""CLI entry point."""

import os
import sys
import functools
import click
import logging
import yaml
from pydantic import ValidationError
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar, cast
from click import Context

from ...config import Config, default_config
from ...config.config_parser import parse_config
from ...git import RealGit, branch_listing, get_upstream, last_hash, remotes
from ...branches import parse_branch_listing
from ...branches.graph import build_graph
from ...pretty import format_rows, render_tree
from ...stack import StackManager
from ...typing import ConfigFailure, GitExtError

# Get module logger
logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])

def check(err: Optional[Exception]) -> None:
    """Check for error and exit if needed."""
    if err:
        logger.error(f"{err}")
        sys.exit(1)

def reports_errors(f: F) -> F:
    """Turn a GitExtError escaping a command into a logged error and exit status 1."""
    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except GitExtError as e:
            check(e)
    return cast(F, wrapper)

class AliasedGroup(click.Group):
    """Command group with support for aliases."""

    def __init__(self, name: Optional[str] = None, commands: Optional[Dict[str, click.Command]] = None, **attrs: Any) -> None:
        """Initialize with aliases map."""
        super().__init__(name, commands, **attrs)
        self.aliases: Dict[str, str] = {}

    def add_alias(self, alias: str, command: str) -> None:
        """Add an alias for a command."""
        self.aliases[alias] = command

    def get_command(self, ctx: Context, cmd_name: str) -> Optional[click.Command]:
        """Get a command by name, supporting aliases."""
        if cmd_name in self.aliases:
            cmd_name = self.aliases[cmd_name]
        return super().get_command(ctx, cmd_name)

    def resolve_command(self, ctx: Context, args: Any) -> Any:
        # Report the canonical name so usage errors don't show the alias
        _, cmd, args = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, args

def setup_git(directory: Optional[str] = None, verbose: bool = False) -> Tuple[Config, RealGit]:
    """Setup Git command and config.

    Raises:
        ConfigFailure: A config file is not valid YAML or fails validation.
    """
    if directory:
        os.chdir(directory)

    git_cmd = RealGit(default_config(), verbose=verbose)
    try:
        git_cmd.run(["rev-parse", "--git-dir"])
    except GitExtError:
        logger.error("Not in a git repository")
        sys.exit(2)

    try:
        config = Config(parse_config(git_cmd))
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigFailure(str(e)) from e
    return config, RealGit(config, verbose=verbose)

def make_manager(ctx: Context) -> StackManager:
    config, git_cmd = setup_git(ctx.obj.get('directory'), ctx.obj['verbose'] > 0)
    return StackManager(config, git_cmd, verbose=ctx.obj['verbose'] > 0,
                        confirm=click.confirm)

@click.group(cls=AliasedGroup)
@click.option('-C', '--directory', type=click.Path(exists=True, file_okay=False, dir_okay=True),
              help='Run as if git-ext was started in DIRECTORY instead of the current working directory')
@click.option('-v', '--verbose', count=True,
              help="Echo every git invocation and its output (-vv adds debug logging)")
@click.pass_context
def cli(ctx: Context, directory: Optional[str], verbose: int) -> None:
    """git-ext - workflow commands for stacks of dependent branches."""
    from ... import setup_logging
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['directory'] = directory
    ctx.obj['verbose'] = verbose

@cli.command(name="lasthash", help="(alias: lh) print the most recent commit hash")
@click.pass_context
@reports_errors
def lasthash_cmd(ctx: Context) -> None:
    manager = make_manager(ctx)
    click.echo(last_hash(manager.git_cmd, manager.verbose))

@cli.command(name="show-up", help="(alias: shup) print the current branch's upstream")
@click.pass_context
@reports_errors
def show_up(ctx: Context) -> None:
    manager = make_manager(ctx)
    click.echo(get_upstream(manager.git_cmd, manager.verbose))

@cli.command(name="fix-up", help="(alias: fu) rebase the latest commit onto the upstream")
@click.pass_context
@reports_errors
def fix_up(ctx: Context) -> None:
    make_manager(ctx).fix_up()

@cli.command(name="up", help="rebase the latest commit onto the specified branch")
@click.argument('branch')
@click.pass_context
@reports_errors
def up(ctx: Context, branch: str) -> None:
    make_manager(ctx).fix_upstream(branch)

@cli.command(name="rec-fix-up",
             help="(alias: rup) recursively rebase the latest commit onto the upstream, to the provided terminal branch")
@click.argument('terminal')
@click.option('--push', is_flag=True, help="Force push each restacked branch to the same-named origin branch")
@click.pass_context
@reports_errors
def rec_fix_up(ctx: Context, terminal: str, push: bool) -> None:
    order = make_manager(ctx).recursive_fix_up(terminal, push)
    logger.info(f"Restacked {len(order)} branch(es) onto {terminal}")

@cli.command(name="commit-br",
             help="(alias: cbr) reset to HEAD~1 and then create a new branch from the (formerly) current commit only")
@click.argument('name')
@click.pass_context
@reports_errors
def commit_br(ctx: Context, name: str) -> None:
    make_manager(ctx).commit_onto_new_branch(name)

@cli.command(name="show-tree", help="(alias: tree) show the tree of all branches and their upstream relations")
@click.option('--color/--no-color', default=None, help="Force colors on or off (default: on for terminals)")
@click.pass_context
@reports_errors
def show_tree(ctx: Context, color: Optional[bool]) -> None:
    manager = make_manager(ctx)
    graph = build_graph(parse_branch_listing(branch_listing(manager.git_cmd, manager.verbose)))
    rows = render_tree(graph, remotes(manager.git_cmd, manager.verbose), manager.config.tree)
    click.echo(format_rows(rows, color=color is not False), color=color)

@cli.command(name="push-origin", help="(alias: po) force push to the same-named branch on the origin")
@click.pass_context
@reports_errors
def push_origin(ctx: Context) -> None:
    make_manager(ctx).push_origin()

@cli.command(name="purge", help="delete all branches with the given prefix that are no longer on the origin")
@click.argument('prefix')
@click.option('-y', 'assume_yes', is_flag=True, help="Don't ask for confirmation")
@click.pass_context
@reports_errors
def purge(ctx: Context, prefix: str, assume_yes: bool) -> None:
    make_manager(ctx).purge(prefix, assume_yes)

@cli.command(name="add-amend-push-origin", help="(alias: aap) `git add .`; `git commit --amend`; `git-ext po`")
@click.pass_context
@reports_errors
def add_amend_push_origin(ctx: Context) -> None:
    make_manager(ctx).add_amend_push()

@cli.command(name="rebase-onto-latest",
             help="(alias: rl) pull the latest main (or specified branch), then set the current branch "
                  "to be the current commit rebased on that")
@click.argument('branch', required=False)
@click.pass_context
@reports_errors
def rebase_onto_latest(ctx: Context, branch: Optional[str]) -> None:
    make_manager(ctx).rebase_onto_latest(branch)

@cli.command(name="reset-hard-origin", help="(alias: rho) reset --hard to the same-named branch on the origin")
@click.pass_context
@reports_errors
def reset_hard_origin(ctx: Context) -> None:
    make_manager(ctx).reset_hard_to_remote()

ALIASES = {
    'lh': 'lasthash',
    'shup': 'show-up',
    'fu': 'fix-up',
    'fix_up': 'fix-up',
    'rup': 'rec-fix-up',
    'cbr': 'commit-br',
    'tree': 'show-tree',
    'po': 'push-origin',
    'aap': 'add-amend-push-origin',
    'rl': 'rebase-onto-latest',
    'rho': 'reset-hard-origin',
}

for _alias, _command in ALIASES.items():
    cast(AliasedGroup, cli).add_alias(_alias, _command)

def main() -> None:
    """Main entry point."""
    cli(obj={})

if __name__ == "__main__":
    main()
