"""Custom completer for Blossom CLI with local file autocompletion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS


class BlossomCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local file path completion for the 'upload' command
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() != "upload":
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        already_typed = set(tokens[1:])
        already_typed.discard(current_word)

        yield from self._complete_paths(current_word, already_typed)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_paths(
        self, partial: str, exclude_files: set
    ) -> Iterable[Completion]:
        """
        Complete paths relative to the current directory.

        Directories are offered with a trailing slash so completion can
        continue into them; files already on the line are not offered again.
        """
        directory, _, prefix = partial.rpartition("/")
        base = Path.cwd() / directory if directory else Path.cwd()

        if not base.is_dir():
            return

        for item in sorted(base.iterdir()):
            if item.name.startswith(".") or not item.name.startswith(prefix):
                continue
            candidate = f"{directory}/{item.name}" if directory else item.name
            if item.is_dir():
                yield Completion(candidate + "/", start_position=-len(partial))
            elif candidate not in exclude_files:
                yield Completion(candidate, start_position=-len(partial))
