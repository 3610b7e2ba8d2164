"""Tests for CLI command parsing."""

import pytest

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


class TestParseCommand:
    def test_signup(self):
        cmd = parse_command('signup alice@example.com secret123')
        assert cmd == SignupCommand(email='alice@example.com', password='secret123')

    def test_signup_with_quoted_name(self):
        cmd = parse_command('signup alice@example.com secret123 "Alice Liddell"')
        assert cmd.username == 'Alice Liddell'

    def test_signup_requires_email(self):
        with pytest.raises(ParseError, match="Not an email address"):
            parse_command('signup alice secret123')

    def test_login(self):
        assert parse_command('login alice@example.com secret123') == LoginCommand(
            email='alice@example.com', password='secret123'
        )

    def test_login_wrong_arity(self):
        with pytest.raises(ParseError):
            parse_command('login alice@example.com')

    @pytest.mark.parametrize("line,expected", [
        ('logout', LogoutCommand()),
        ('whoami', WhoAmICommand()),
        ('create', CreateRoomCommand()),
        ('CREATE', CreateRoomCommand()),
    ])
    def test_no_argument_commands(self, line, expected):
        assert parse_command(line) == expected

    def test_no_argument_command_rejects_arguments(self):
        with pytest.raises(ParseError, match="takes no arguments"):
            parse_command('create now')

    def test_join_uppercases_code(self):
        assert parse_command('join abc123 Pass1234') == JoinRoomCommand(room_code='ABC123', room_password='Pass1234')

    def test_join_keeps_password_case(self):
        assert parse_command('join ABC123 pAsS1234').room_password == 'pAsS1234'

    @pytest.mark.parametrize("line", [
        'join ABC12 Pass1234',
        'join ABC1234 Pass1234',
        'join ABC-12 Pass1234',
        'join ABC123 short',
        'join ABC123',
    ])
    def test_join_rejects_malformed_credentials(self, line):
        with pytest.raises(ParseError):
            parse_command(line)

    def test_room(self):
        assert parse_command('room') == ShowRoomCommand()
        assert parse_command('room room-1') == ShowRoomCommand(room_id='room-1')

    def test_upload(self):
        cmd = parse_command('upload a.txt "my file.pdf"')
        assert cmd == UploadCommand(file_list=('a.txt', 'my file.pdf'))

    def test_upload_requires_file(self):
        with pytest.raises(ParseError):
            parse_command('upload')

    def test_download(self):
        assert parse_command('download 1-abcdef01-a.txt') == DownloadCommand(locator='1-abcdef01-a.txt')
        assert parse_command('download 1-abcdef01-a.txt out.txt').output_path == 'out.txt'

    def test_download_too_many_args(self):
        with pytest.raises(ParseError):
            parse_command('download a b c')

    @pytest.mark.parametrize("line", ['', '   '])
    def test_empty(self, line):
        with pytest.raises(ParseError, match="Empty command"):
            parse_command(line)

    def test_unknown_command(self):
        with pytest.raises(ParseError, match="Unknown command"):
            parse_command('frobnicate')

    def test_unbalanced_quotes(self):
        with pytest.raises(ParseError, match="Invalid syntax"):
            parse_command('upload "a.txt')
