"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["upload", "download", "list", "delete", "servers", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#9B5DE5 bold",
        "command": "#0088ff bold",
    }
)

PURPLE = "\033[38;2;155;93;229m"
GREEN = "\033[32m"
RESET = "\033[0m"

WELCOME_TITLE = f"{PURPLE}Blossom CLI{RESET} - Content addressed blob transfer"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "blossom> "

HELP_TEXT = """Available commands:
  upload <file> [file ...]            Upload files to every configured server
  download <sha256|url> [filename]    Download a blob from the first server that has it
  list [pubkey]                       List blobs on every server (default: own key)
  delete <sha256>                     Delete a blob from every server
  servers                             Show configured servers and size limits
  servers add <url> [max_mb]          Add a server (or update its limit, default 100 MB)
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  upload videos/talk.mp4 videos/talk.jpg
  download 3b4c...e9 talk.mp4
  download https://cdn.example/3b4c...e9.mp4
  delete 3b4c...e9
  servers add https://blossom.example 50"""
