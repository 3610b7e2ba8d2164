"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "signup", "login", "logout", "whoami", "create", "join", "room",
    "upload", "download", "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#1E90FF bold",
        "command": "#0088ff bold",
    }
)

SKY_BLUE = "\033[38;2;30;144;255m"
GREEN = "\033[92m"
RESET = "\033[0m"

LOGO = f"""{SKY_BLUE}
  ____  _          ____
 / ___|| | ___   _|  _ \\ _ __ ___  _ __
 \\___ \\| |/ / | | | | | | '__/ _ \\| '_ \\
  ___) |   <| |_| | |_| | | | (_) | |_) |
 |____/|_|\\_\\\\__, |____/|_|  \\___/| .__/
             |___/                |_|
{RESET}"""

WELCOME_TITLE = "SkyDrop CLI - Share files through short-lived rooms"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "skydrop> "

HELP_TEXT = """Available commands:
  signup <email> <password> [name]     Create an account
  login <email> <password>             Log in and save the session token
  logout                               End the current session
  whoami                               Show the logged-in user
  create                               Create a room (valid for 30 minutes)
  join <code> <password>               Join a room with its code and password
  room [room_id]                       Show room state, participants and files
  upload <path> [path ...]             Upload files into the current room
  download <locator> [output_path]     Download a file by its locator
  clear                                Clear screen and redisplay welcome message
  help                                 Show this help
  exit                                 Exit REPL

Examples:
  signup alice@example.com s3cret Alice
  login alice@example.com s3cret
  create
  join AB12CD xy9Kp2qz
  upload report.pdf notes.txt
  download 1718000000000-1a2b3c4d-report.pdf downloads/report.pdf"""

DEFAULT_DOWNLOAD_DIR = "downloads"
