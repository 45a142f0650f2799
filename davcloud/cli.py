import functools
import logging
import sys
from pathlib import Path
from typing import Optional

import click
import requests
from colorama import Fore, Style, init

from .client import Client, PathStatus
from .config import load_config
from .errors import CloudError, OCSError, WebDAVError
from .results import ShareResult

init(autoreset=True)

logger = logging.getLogger(__name__)


def _handle_errors(func):
    """Turn library and transport errors into a message and exit status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except WebDAVError as e:
            click.echo(f"{Fore.RED}Server error: {e.exception}: {e.message}", err=True)
        except OCSError as e:
            click.echo(f"{Fore.RED}Server error: {e}", err=True)
        except (CloudError, requests.RequestException, OSError) as e:
            click.echo(f"{Fore.RED}Error: {str(e)}", err=True)
        sys.exit(1)
    return wrapper


def _get_client(ctx: click.Context) -> Client:
    """Build the client from command line options, falling back to the environment."""
    options = ctx.obj
    config = load_config(
        options['env_file'],
        url=options['url'],
        username=options['username'],
        password=options['password'],
    )
    return config.create_client()


def _echo_share_result(result: ShareResult) -> None:
    click.echo(f"Status: {result.status} ({result.status_code})")
    if result.message:
        click.echo(f"Message: {result.message}")
    if result.id:
        click.echo(f"Id: {result.id}")
    if result.url:
        click.echo(f"URL: {Fore.CYAN}{result.url}")


@click.group()
@click.option('--url', help='Server base URL (default: $DAVCLOUD_URL)')
@click.option('--username', '-u', help='Account name (default: $DAVCLOUD_USERNAME)')
@click.option('--password', '-p', help='Password or app password (default: $DAVCLOUD_PASSWORD)')
@click.option('--env-file', type=click.Path(exists=True, dir_okay=False), help='.env file to read settings from')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, url: Optional[str], username: Optional[str], password: Optional[str],
         env_file: Optional[str], debug: bool):
    """davcloud - WebDAV and sharing client for {own|next}cloud servers"""
    logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING)
    ctx.obj = {
        'url': url,
        'username': username,
        'password': password,
        'env_file': env_file,
    }


@main.command()
@click.argument('path')
@click.pass_context
@_handle_errors
def mkdir(ctx, path: str):
    """Create remote directory PATH."""
    _get_client(ctx).mkdir(path)
    click.echo(f"{Fore.GREEN}Created {path}")


@main.command()
@click.argument('path')
@click.pass_context
@_handle_errors
def delete(ctx, path: str):
    """Delete remote file or directory PATH."""
    _get_client(ctx).delete(path)
    click.echo(f"{Fore.GREEN}Deleted {path}")


@main.command()
@click.argument('local', type=click.Path(exists=True, dir_okay=False))
@click.argument('remote')
@click.pass_context
@_handle_errors
def upload(ctx, local: str, remote: str):
    """Upload LOCAL file to REMOTE path."""
    data = Path(local).read_bytes()
    _get_client(ctx).upload(data, remote)
    click.echo(f"{Fore.GREEN}Uploaded {local} -> {remote} ({len(data)} bytes)")


@main.command()
@click.argument('remote')
@click.argument('local', required=False)
@click.pass_context
@_handle_errors
def download(ctx, remote: str, local: Optional[str]):
    """Download REMOTE file to LOCAL (standard output if omitted)."""
    data = _get_client(ctx).download(remote)
    if local is None:
        click.get_binary_stream('stdout').write(data)
        return
    Path(local).write_bytes(data)
    click.echo(f"{Fore.GREEN}Downloaded {remote} -> {local} ({len(data)} bytes)")


@main.command()
@click.argument('path')
@click.pass_context
@_handle_errors
def exists(ctx, path: str):
    """Check whether remote PATH exists. Exits with 1 if it does not."""
    status = _get_client(ctx).status(path)
    colors = {
        PathStatus.EXISTS: Fore.GREEN,
        PathStatus.MISSING: Fore.YELLOW,
        PathStatus.ERROR: Fore.RED,
    }
    click.echo(f"{colors[status]}{path}: {status.value}")
    if status is not PathStatus.EXISTS:
        sys.exit(1)


@main.command('upload-dir')
@click.argument('pattern')
@click.argument('dest')
@click.option('--no-progress', is_flag=True, help='Do not show a progress bar')
@click.pass_context
@_handle_errors
def upload_dir(ctx, pattern: str, dest: str, no_progress: bool):
    """Upload local files matching glob PATTERN into remote directory DEST.

    Quote PATTERN so the shell does not expand it.
    """
    files = _get_client(ctx).upload_dir(pattern, dest, progress=not no_progress)
    if not files:
        click.echo(f"{Fore.YELLOW}No files match {pattern}")
        return
    for file in files:
        click.echo(f"  {file}")
    click.echo(f"{Fore.GREEN}Uploaded {len(files)} file(s) to {dest}")


@main.group('group-folder')
def group_folder():
    """Manage group folders."""
    pass


@group_folder.command('create')
@click.argument('mount_point')
@click.pass_context
@_handle_errors
def group_folder_create(ctx, mount_point: str):
    """Create a group folder mounted at MOUNT_POINT."""
    result = _get_client(ctx).create_group_folder(mount_point)
    _echo_share_result(result)


@group_folder.command('add-group')
@click.argument('folder_id', type=int)
@click.argument('group')
@click.pass_context
@_handle_errors
def group_folder_add_group(ctx, folder_id: int, group: str):
    """Give GROUP access to group folder FOLDER_ID."""
    result = _get_client(ctx).add_group_to_group_folder(group, folder_id)
    _echo_share_result(result)


@group_folder.command('set-permissions')
@click.argument('folder_id', type=int)
@click.argument('group')
@click.argument('permissions', type=click.IntRange(0, 31))
@click.pass_context
@_handle_errors
def group_folder_set_permissions(ctx, folder_id: int, group: str, permissions: int):
    """Set PERMISSIONS bits (1 read, 2 update, 4 create, 8 delete, 16 share) of GROUP on FOLDER_ID."""
    result = _get_client(ctx).set_group_permissions_for_group_folder(permissions, group, folder_id)
    _echo_share_result(result)


@main.group()
def share():
    """Manage public link shares."""
    pass


@share.command('drop')
@click.argument('path')
@click.pass_context
@_handle_errors
def share_drop(ctx, path: str):
    """Create an upload-only (file drop) link for PATH."""
    result = _get_client(ctx).create_file_drop_share(path)
    _echo_share_result(result)


@share.command('read-only')
@click.argument('path')
@click.pass_context
@_handle_errors
def share_read_only(ctx, path: str):
    """Create a read-only link for PATH."""
    result = _get_client(ctx).create_read_only_share(path)
    _echo_share_result(result)


@share.command('list')
@click.argument('path')
@click.pass_context
@_handle_errors
def share_list(ctx, path: str):
    """List the shares of PATH."""
    result = _get_client(ctx).get_share(path)
    if not result.elements:
        click.echo(f"No shares for {path}")
        return
    for element in result.elements:
        line = f"{Style.BRIGHT}{element.id}{Style.RESET_ALL}  permissions={element.permissions}"
        if element.url:
            line += f"  {element.url}"
        click.echo(line)


@share.command('delete')
@click.argument('share_id', type=int)
@click.pass_context
@_handle_errors
def share_delete(ctx, share_id: int):
    """Delete share SHARE_ID."""
    _get_client(ctx).delete_share(share_id)
    click.echo(f"{Fore.GREEN}Deleted share {share_id}")


if __name__ == '__main__':
    main()
