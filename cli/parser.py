"""Command parser for CLI input."""

import shlex

from blossom.utils import get_hash_from_url, is_sha256
from cli.models import (
    CommandRequest,
    DeleteCommand,
    DownloadCommand,
    ListCommand,
    ServersCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Upload/Download/List/Delete/Servers)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "download":
        return _parse_download(tokens[1:])
    elif command_name == "list":
        return _parse_list(tokens[1:])
    elif command_name == "delete":
        return _parse_delete(tokens[1:])
    elif command_name == "servers":
        return _parse_servers(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <file> [file ...]' command."""
    if not args:
        raise ParseError("upload requires at least one file")

    return UploadCommand(file_list=tuple(args))


def _parse_hash(value: str) -> str:
    """Accept a bare hash or a blob URL that embeds one."""
    if is_sha256(value):
        return value.lower()
    if "://" in value:
        sha256 = get_hash_from_url(value)
        if sha256:
            return sha256.lower()
    raise ParseError(f"Not a sha256 hash or blob URL: {value}")


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <sha256|url> [filename]' command."""
    if len(args) < 1 or len(args) > 2:
        raise ParseError("download requires 1 or 2 arguments: <sha256|url> [filename]")

    filename = args[1] if len(args) > 1 else None
    return DownloadCommand(sha256=_parse_hash(args[0]), filename=filename)


def _parse_list(args: list[str]) -> ListCommand:
    """Parse 'list [pubkey]' command."""
    if len(args) > 1:
        raise ParseError("list takes at most 1 argument: [pubkey]")

    return ListCommand(pubkey=args[0] if args else None)


def _parse_delete(args: list[str]) -> DeleteCommand:
    """Parse 'delete <sha256>' command."""
    if len(args) != 1:
        raise ParseError("delete requires exactly 1 argument: <sha256>")

    return DeleteCommand(sha256=_parse_hash(args[0]))


def _parse_servers(args: list[str]) -> ServersCommand:
    """Parse 'servers' or 'servers add <url> [max_mb]' command."""
    if not args:
        return ServersCommand()

    if args[0] != "add" or len(args) not in (2, 3):
        raise ParseError("usage: servers | servers add <url> [max_mb]")

    url = args[1]
    if not url.startswith(("http://", "https://")):
        raise ParseError(f"Server URL must start with http:// or https://: {url}")

    if len(args) == 2:
        return ServersCommand(add_url=url)

    try:
        max_mb = float(args[2])
    except ValueError:
        raise ParseError(f"max_mb must be a number: {args[2]}")
    if max_mb <= 0:
        raise ParseError("max_mb must be positive")

    return ServersCommand(add_url=url, max_upload_size_mb=max_mb)
