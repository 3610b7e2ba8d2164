"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    handle_create_room,
    handle_download,
    handle_join_room,
    handle_login,
    handle_logout,
    handle_show_room,
    handle_signup,
    handle_upload,
    handle_whoami,
)
from cli.constants import (
    COMMANDS,
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    CreateRoomCommand,
    DownloadCommand,
    JoinRoomCommand,
    LoginCommand,
    LogoutCommand,
    ShowRoomCommand,
    SignupCommand,
    UploadCommand,
    WhoAmICommand,
)
from cli.parser import ParseError, parse_command

HANDLERS = {
    SignupCommand: handle_signup,
    LoginCommand: handle_login,
    LogoutCommand: handle_logout,
    WhoAmICommand: handle_whoami,
    CreateRoomCommand: handle_create_room,
    JoinRoomCommand: handle_join_room,
    ShowRoomCommand: handle_show_room,
    UploadCommand: handle_upload,
    DownloadCommand: handle_download,
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_banner() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj)


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    completer = WordCompleter(COMMANDS, ignore_case=True)
    history = InMemoryHistory()
    session: PromptSession = PromptSession(
        completer=completer, history=history, style=STYLE
    )

    clear_screen()
    show_banner()

    while True:
        try:
            user_input = session.prompt([("class:prompt", PROMPT_TEXT)])
            stripped = user_input.strip()

            if not stripped:
                continue

            if stripped == "exit":
                print("Goodbye!")
                break

            if stripped == "help":
                print(HELP_TEXT)
                continue

            if stripped == "clear":
                clear_screen()
                show_banner()
                continue

            cmd_obj = parse_command(user_input)
            result = dispatch_command(cmd_obj)
            print(result)

        except ParseError as e:
            print(f"Error: {e}")
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break
