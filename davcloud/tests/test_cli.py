"""Tests for the davcloud command line interface."""

import pytest
import requests
from click.testing import CliRunner
from unittest.mock import patch

from davcloud.cli import main as cli

from conftest import NOT_FOUND_BODY, make_response, ocs_body

CONNECTION = ["--url", "http://localhost:8080/", "-u", "admin", "-p", "password"]


@pytest.fixture
def runner(clean_env):
    return CliRunner()


@pytest.fixture
def mock_request():
    with patch("davcloud.client.requests.request") as mock:
        yield mock


class TestConnectionOptions:
    """Tests for how the CLI finds its server."""

    def test_missing_url_fails(self, runner, mock_request):
        result = runner.invoke(cli, ["mkdir", "Test"])
        assert result.exit_code == 1
        assert "DAVCLOUD_URL" in result.output
        mock_request.assert_not_called()

    def test_url_from_environment(self, runner, mock_request, clean_env):
        clean_env.setenv("DAVCLOUD_URL", "http://cloud.local/")
        clean_env.setenv("DAVCLOUD_USERNAME", "bob")
        clean_env.setenv("DAVCLOUD_PASSWORD", "secret")
        mock_request.return_value = make_response(status_code=201)

        result = runner.invoke(cli, ["mkdir", "Test"])

        assert result.exit_code == 0, result.output
        args, kwargs = mock_request.call_args
        assert args == ("MKCOL", "http://cloud.local/remote.php/webdav/Test")
        assert kwargs["auth"] == ("bob", "secret")

    def test_options_override_environment(self, runner, mock_request, clean_env):
        clean_env.setenv("DAVCLOUD_USERNAME", "bob")
        mock_request.return_value = make_response(status_code=201)

        result = runner.invoke(cli, CONNECTION + ["mkdir", "Test"])

        assert result.exit_code == 0, result.output
        assert mock_request.call_args[1]["auth"] == ("admin", "password")

    def test_url_option_with_env_file(self, runner, mock_request, tmp_path):
        """Credentials and timeout still come from --env-file when --url is given."""
        env_file = tmp_path / "cloud.env"
        env_file.write_text(
            "DAVCLOUD_USERNAME=alice\nDAVCLOUD_PASSWORD=s3cret\nDAVCLOUD_TIMEOUT=7\n"
        )
        mock_request.return_value = make_response(status_code=201)

        result = runner.invoke(cli, ["--url", "http://h/", "--env-file", str(env_file), "mkdir", "T"])

        assert result.exit_code == 0, result.output
        args, kwargs = mock_request.call_args
        assert args == ("MKCOL", "http://h/remote.php/webdav/T")
        assert kwargs["auth"] == ("alice", "s3cret")
        assert kwargs["timeout"] == 7

    def test_url_option_reads_dotenv_in_cwd(self, runner, mock_request, tmp_path):
        (tmp_path / ".env").write_text("DAVCLOUD_USERNAME=carol\nDAVCLOUD_PASSWORD=pw\n")
        mock_request.return_value = make_response(status_code=201)

        result = runner.invoke(cli, ["--url", "http://h/", "mkdir", "T"])

        assert result.exit_code == 0, result.output
        assert mock_request.call_args[1]["auth"] == ("carol", "pw")


class TestFileCommands:
    """Tests for the WebDAV commands."""

    def test_mkdir(self, runner, mock_request):
        mock_request.return_value = make_response(status_code=201)
        result = runner.invoke(cli, CONNECTION + ["mkdir", "Test"])
        assert result.exit_code == 0
        assert "Created Test" in result.output

    def test_server_error_exit_code(self, runner, mock_request):
        mock_request.return_value = make_response(NOT_FOUND_BODY, status_code=404)
        result = runner.invoke(cli, CONNECTION + ["delete", "Test"])
        assert result.exit_code == 1
        assert "NotFound" in result.output

    def test_connection_error_exit_code(self, runner, mock_request):
        mock_request.side_effect = requests.ConnectionError("Connection refused")
        result = runner.invoke(cli, CONNECTION + ["mkdir", "Test"])
        assert result.exit_code == 1
        assert "Connection refused" in result.output

    def test_upload(self, runner, mock_request, tmp_path):
        local = tmp_path / "test.txt"
        local.write_bytes(b"Hello World!\n")
        mock_request.return_value = make_response(status_code=201)

        result = runner.invoke(cli, CONNECTION + ["upload", str(local), "Test/test.txt"])

        assert result.exit_code == 0, result.output
        assert mock_request.call_args[1]["data"] == b"Hello World!\n"

    def test_download_to_file(self, runner, mock_request, tmp_path):
        mock_request.return_value = make_response(b"Hello World!\n")
        dest = tmp_path / "out.txt"

        result = runner.invoke(cli, CONNECTION + ["download", "Test/test.txt", str(dest)])

        assert result.exit_code == 0, result.output
        assert dest.read_bytes() == b"Hello World!\n"

    def test_download_to_stdout(self, runner, mock_request):
        mock_request.return_value = make_response(b"Hello World!\n")
        result = runner.invoke(cli, CONNECTION + ["download", "Test/test.txt"])
        assert result.exit_code == 0
        assert result.stdout_bytes == b"Hello World!\n"

    def test_exists(self, runner, mock_request):
        mock_request.return_value = make_response(b"", status_code=207)
        result = runner.invoke(cli, CONNECTION + ["exists", "Test"])
        assert result.exit_code == 0
        assert "Test: exists" in result.output

    def test_exists_missing(self, runner, mock_request):
        mock_request.return_value = make_response(NOT_FOUND_BODY, status_code=404)
        result = runner.invoke(cli, CONNECTION + ["exists", "Test"])
        assert result.exit_code == 1
        assert "Test: missing" in result.output

    def test_upload_dir(self, runner, mock_request, tmp_path):
        (tmp_path / "test.txt").write_bytes(b"Hello World!\n")
        mock_request.return_value = make_response(status_code=201)

        result = runner.invoke(cli, CONNECTION + ["upload-dir", "--no-progress", str(tmp_path / "*.txt"), "Test"])

        assert result.exit_code == 0, result.output
        assert "Uploaded 1 file(s) to Test" in result.output


class TestAdminCommands:
    """Tests for the group folder and share commands."""

    def test_group_folder_create(self, runner, mock_request):
        mock_request.return_value = make_response(ocs_body(100, data="<id>9</id>"))
        result = runner.invoke(cli, CONNECTION + ["group-folder", "create", "Team"])
        assert result.exit_code == 0, result.output
        assert "Id: 9" in result.output

    def test_set_permissions_range_checked(self, runner, mock_request):
        result = runner.invoke(cli, CONNECTION + ["group-folder", "set-permissions", "9", "staff", "64"])
        assert result.exit_code == 2
        mock_request.assert_not_called()

    def test_share_drop(self, runner, mock_request):
        mock_request.return_value = make_response(
            ocs_body(200, data="<id>42</id><url>http://localhost:8080/s/AbCdEf</url>")
        )
        result = runner.invoke(cli, CONNECTION + ["share", "drop", "ShareTest"])
        assert result.exit_code == 0, result.output
        assert "http://localhost:8080/s/AbCdEf" in result.output

    def test_share_list_empty(self, runner, mock_request):
        mock_request.return_value = make_response(ocs_body(200))
        result = runner.invoke(cli, CONNECTION + ["share", "list", "ShareTest"])
        assert result.exit_code == 0
        assert "No shares for ShareTest" in result.output

    def test_share_list(self, runner, mock_request):
        mock_request.return_value = make_response(ocs_body(
            200, data="<element><id>42</id><permissions>4</permissions></element>"
        ))
        result = runner.invoke(cli, CONNECTION + ["share", "list", "ShareTest"])
        assert "42" in result.output
        assert "permissions=4" in result.output

    def test_share_delete_failure(self, runner, mock_request):
        mock_request.return_value = make_response(
            ocs_body(404, status="failure", message="Wrong share ID, share doesn't exist"), status_code=404
        )
        result = runner.invoke(cli, CONNECTION + ["share", "delete", "42"])
        assert result.exit_code == 1
        assert "404" in result.output
