"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["upload", "download", "fetch", "list", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2EA043 bold",
        "command": "#0088ff bold",
    }
)

GREEN = "\033[38;2;46;160;67m"
RESET = "\033[0m"

LOGO = f"""{GREEN}
 ██████╗ ██████╗ ██████╗ ███████╗██╗  ██╗ █████╗ ██████╗ ███████╗
 ██╔══██╗╚════██╗██╔══██╗██╔════╝██║  ██║██╔══██╗██╔══██╗██╔════╝
 ██████╔╝ █████╔╝██████╔╝███████╗███████║███████║██████╔╝█████╗
 ██╔═══╝ ██╔═══╝ ██╔═══╝ ╚════██║██╔══██║██╔══██║██╔══██╗██╔══╝
 ██║     ███████╗██║     ███████║██║  ██║██║  ██║██║  ██║███████╗
 ╚═╝     ╚══════╝╚═╝     ╚══════╝╚═╝  ╚═╝╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝
{RESET}"""

WELCOME_TITLE = "p2pshare - File Management"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "p2pshare> "

HELP_TEXT = """Available commands:
  upload <path> [path...]             Upload local files to the server
  download <name> [output_dir]        Download a server file (default: configured download_dir)
  fetch                               Refresh the server file list
  list                                Show the last fetched server file list
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Files are stored on the server under their base name only.
Examples:
  upload reports/report.txt
  fetch
  download report.txt
  download report.txt downloads/"""
