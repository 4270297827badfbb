"""reposync CLI - install and keep dependency repositories in sync."""
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from reposync.config import Project, Settings, load_downloader
from reposync.config.project import DEFAULT_SETTINGS_PATH
from reposync.core.errors import (
    CommandFailedError,
    ConfigurationError,
    RepoSyncError,
    ToolNotFoundError,
    UnresolvableRefError,
)
from reposync.downloader import Downloader

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(name)s: %(message)s",
)
logger = logging.getLogger("reposync")

EXIT_FAILURE = 1
EXIT_UNRESOLVABLE_REF = 3
EXIT_TOOL_NOT_FOUND = 4
EXIT_CONFIG_ERROR = 7


def _exit_for(error: RepoSyncError) -> None:
    """Log error and exit with the code matching its kind."""
    if isinstance(error, UnresolvableRefError):
        logger.error(f"Invalid reference: {error}")
        sys.exit(EXIT_UNRESOLVABLE_REF)
    if isinstance(error, ToolNotFoundError):
        logger.error(str(error))
        sys.exit(EXIT_TOOL_NOT_FOUND)
    if isinstance(error, ConfigurationError):
        logger.error(f"Configuration error: {error}")
        sys.exit(EXIT_CONFIG_ERROR)
    if isinstance(error, CommandFailedError):
        logger.error(f"Git command failed: {error}")
        sys.exit(EXIT_FAILURE)
    logger.error(f"Failed: {error}")
    sys.exit(EXIT_FAILURE)


def _load(ctx: click.Context, name: str, ref: Optional[str] = None) -> Downloader:
    project = Project.load(ctx.obj["project"])
    settings = Settings.load(ctx.obj["settings"])
    downloader = load_downloader(name, project.repo_vars(name), settings)
    if ref:
        downloader.set_commit(ref)
    return downloader


def _dest_for(name: str, dest: Optional[Path]) -> Path:
    return dest if dest is not None else Path("repos") / name


dest_option = click.option(
    "--dest",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Working copy directory (default: repos/<name>)",
)
ref_option = click.option(
    "--ref",
    default=None,
    help="Branch, tag, or commit overriding the project file",
)


@click.group()
@click.option(
    "--project",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("project.yml"),
    help="Project file listing the repositories",
)
@click.option(
    "--settings",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_SETTINGS_PATH,
    help="Private settings file with repository credentials",
)
@click.option("-v", "--verbose", is_flag=True, help="Echo git commands")
@click.option("-q", "--quiet", is_flag=True, help="Only print warnings and errors")
@click.pass_context
def main(ctx: click.Context, project: Path, settings: Path, verbose: bool, quiet: bool):
    """reposync - fetch and synchronize dependency repositories."""
    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.INFO)

    ctx.ensure_object(dict)
    ctx.obj["project"] = project
    ctx.obj["settings"] = settings


@main.command()
@click.argument("name")
@dest_option
@ref_option
@click.pass_context
def install(ctx: click.Context, name: str, dest: Optional[Path], ref: Optional[str]):
    """Clone repository NAME and check out its configured ref.

    Examples:
        reposync install widgets
        reposync install widgets --ref v1.0 --dest vendor/widgets

    Exit codes:
        0: Success
        1: Generic runtime failure
        3: Requested revision not found
        4: git not installed
        7: Configuration file error
    """
    dest = _dest_for(name, dest)
    try:
        downloader = _load(ctx, name, ref)
        if dest.exists():
            raise RepoSyncError(f"Destination already exists: {dest}")
        downloader.download_repo(downloader.get_commit(), dest)

        click.echo(f"[OK] Installed {name}: {downloader.get_commit()}")
        click.echo(f"  Commit: {downloader.hash_for(dest, 'HEAD')[:12]}")
        click.echo(f"  Path: {dest}")
        sys.exit(0)

    except RepoSyncError as e:
        _exit_for(e)

    except Exception as e:
        logger.error(f"Install failed: {str(e)}")
        sys.exit(EXIT_FAILURE)


@main.command()
@click.argument("name")
@dest_option
@ref_option
@click.pass_context
def upgrade(ctx: click.Context, name: str, dest: Optional[Path], ref: Optional[str]):
    """Fetch and merge upstream changes into the working copy of NAME."""
    dest = _dest_for(name, dest)
    try:
        downloader = _load(ctx, name, ref)
        downloader.fixup_origin(dest)
        downloader.update_repo(dest, downloader.get_commit())

        click.echo(f"[OK] Upgraded {name}: {downloader.get_commit()}")
        click.echo(f"  Commit: {downloader.hash_for(dest, 'HEAD')[:12]}")
        sys.exit(0)

    except RepoSyncError as e:
        _exit_for(e)

    except Exception as e:
        logger.error(f"Upgrade failed: {str(e)}")
        sys.exit(EXIT_FAILURE)


@main.command()
@click.argument("name")
@dest_option
@ref_option
@click.pass_context
def info(ctx: click.Context, name: str, dest: Optional[Path], ref: Optional[str]):
    """Show how the configured ref of NAME resolves in its working copy."""
    dest = _dest_for(name, dest)
    try:
        downloader = _load(ctx, name, ref)
        commit = downloader.get_commit()
        kind = downloader.commit_type(dest, commit)

        click.echo(f"Repository: {name}")
        click.echo(f"  Ref: {commit} ({kind.value})")
        click.echo(f"  Hash: {downloader.hash_for(dest, commit)}")
        click.echo(f"  Names: {', '.join(downloader.commits_for(dest, commit))}")
        click.echo(f"  Dirty: {'yes' if downloader.are_changes(dest) else 'no'}")
        sys.exit(0)

    except RepoSyncError as e:
        _exit_for(e)

    except Exception as e:
        logger.error(f"Info failed: {str(e)}")
        sys.exit(EXIT_FAILURE)


@main.command("fetch-file")
@click.argument("name")
@click.argument("filename")
@dest_option
@ref_option
@click.option(
    "--out",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Directory the file is written to (created if absent)",
)
@click.pass_context
def fetch_file(
    ctx: click.Context,
    name: str,
    filename: str,
    dest: Optional[Path],
    ref: Optional[str],
    out: Path,
):
    """Copy FILENAME, as of the configured ref of NAME, into --out."""
    dest = _dest_for(name, dest)
    try:
        downloader = _load(ctx, name, ref)
        written = downloader.fetch_file(dest, filename, out)

        click.echo(f"[OK] Fetched {filename} -> {written}")
        sys.exit(0)

    except RepoSyncError as e:
        _exit_for(e)

    except Exception as e:
        logger.error(f"Fetch failed: {str(e)}")
        sys.exit(EXIT_FAILURE)


@main.command()
@click.argument("name")
@dest_option
@click.pass_context
def fixup(ctx: click.Context, name: str, dest: Optional[Path]):
    """Point the origin remote of NAME back at its configured URL."""
    dest = _dest_for(name, dest)
    try:
        downloader = _load(ctx, name)
        changed = downloader.fixup_origin(dest)

        if changed:
            click.echo(f"[OK] Corrected origin of {name}")
        else:
            click.echo(f"[OK] Origin of {name} already correct")
        sys.exit(0)

    except RepoSyncError as e:
        _exit_for(e)

    except Exception as e:
        logger.error(f"Fixup failed: {str(e)}")
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
