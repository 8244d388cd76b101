"""Tests for the pagekit command line tool."""

import json
from unittest.mock import patch

import pytest

from pagekit.cli import main


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep the CLI from reconfiguring structlog for the rest of the session."""
    with patch("pagekit.cli.configure_logging") as mock_configure:
        yield mock_configure


@pytest.fixture
def seeded(backend, login_record, contact_record):
    backend.add_page(login_record)
    backend.add_page(contact_record)
    return backend


class TestPagesCommands:
    """Tests for the pages sub-commands."""

    def test_list(self, seeded, client, capsys):
        """Test listing all pages."""
        assert main(["pages", "list"], client=client) == 0

        out = capsys.readouterr().out.splitlines()
        assert "10\tlogin\tlogin\tMember Login" in out
        assert "20\tcontact_us\tcontact\tGet in touch" in out

    def test_list_by_type(self, seeded, client, capsys):
        """Test filtering by type."""
        assert main(["pages", "list", "--type", "contact_us"], client=client) == 0

        out = capsys.readouterr().out.splitlines()
        assert out == ["20\tcontact_us\tcontact\tGet in touch"]
        assert seeded.requests[-1]["params"] == {"page_type": "contact_us"}

    def test_show(self, seeded, client, capsys):
        """Test showing a normalized page."""
        assert main(["pages", "show", "20"], client=client) == 0

        page = json.loads(capsys.readouterr().out)
        assert page["id"] == "20"
        assert page["settings"]["nameLabel"] == "Full Name"

    def test_export(self, seeded, client, capsys):
        """Test exporting the wire body."""
        assert main(["pages", "export", "10"], client=client) == 0

        body = json.loads(capsys.readouterr().out)
        fields = json.loads(body["form_config"])
        assert body["page_type"] == "login"
        assert fields[0]["placeholder"] == "Enter your email"

    def test_show_missing(self, seeded, client, capsys):
        """Test a missing page exits non-zero with a readable message."""
        assert main(["pages", "show", "999"], client=client) == 1

        assert "Page not found" in capsys.readouterr().err

    def test_delete_requires_yes(self, seeded, client, capsys):
        """Test deletion needs explicit confirmation."""
        assert main(["pages", "delete", "10"], client=client) == 1

        assert "10" in seeded.pages
        assert "--yes" in capsys.readouterr().err

    def test_delete(self, seeded, client, capsys):
        """Test confirmed deletion."""
        assert main(["pages", "delete", "10", "--yes"], client=client) == 0

        assert "10" not in seeded.pages
        assert "Deleted page 10" in capsys.readouterr().out


class TestLoginCommand:
    """Tests for the login sub-command."""

    def test_login_prints_token(self, client, capsys):
        """Test a successful login prints the token."""
        assert main(["login", "--username", "admin", "--password", "secret"], client=client) == 0

        assert capsys.readouterr().out.strip() == "tok-123"

    def test_login_prompts_for_password(self, client, capsys):
        """Test the password is prompted for when omitted."""
        with patch("pagekit.cli.getpass.getpass", return_value="secret") as mock_getpass:
            assert main(["login", "--username", "admin"], client=client) == 0

        mock_getpass.assert_called_once()

    def test_login_rejected(self, client, capsys):
        """Test rejected credentials exit non-zero."""
        assert main(["login", "--username", "admin", "--password", "nope"], client=client) == 1

        assert "Invalid credentials" in capsys.readouterr().err


class TestArguments:
    """Tests for argument parsing."""

    def test_unknown_type_rejected(self, client):
        """Test --type only accepts known page types."""
        with pytest.raises(SystemExit):
            main(["pages", "list", "--type", "landing"], client=client)

    def test_command_required(self, client):
        """Test a sub-command is required."""
        with pytest.raises(SystemExit):
            main([], client=client)
