"""Tests for the objectacl command-line interface."""

import json

import httpx
import pytest
import yaml
from httpx import ASGITransport, AsyncClient

from objectacl import cli
from objectacl.transport import HttpxTransport


@pytest.fixture
def cli_s3(monkeypatch, s3_app, restore_root_logging):
    """Route the CLI's transport to the FastAPI S3 stand-in."""

    def make_transport(**kwargs):
        client = AsyncClient(transport=ASGITransport(app=s3_app))
        return HttpxTransport(scheme="http", client=client)

    monkeypatch.setattr(cli, "HttpxTransport", make_transport)
    return s3_app


class TestParseArgs:
    def test_canned(self):
        args = cli.parse_args(["put-object-acl", "mybucket", "key.txt", "--canned", "public-read"])
        assert args.command == "put-object-acl"
        assert args.bucket == "mybucket"
        assert args.key == "key.txt"
        assert args.canned == "public-read"
        assert args.policy is None
        assert args.version_id is None

    def test_invalid_canned_rejected(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args(["put-object-acl", "b", "k", "--canned", "everyone"])
        assert exc_info.value.code == 2

    def test_canned_and_policy_exclusive(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["put-object-acl", "b", "k", "--canned", "private", "--policy", "p.yaml"])


class TestMain:
    def test_canned_success(self, cli_s3):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--host", "s3.test", "put-object-acl", "mybucket", "key.txt", "--canned", "private"])
        assert exc_info.value.code == 0
        assert cli_s3.state.acls[("mybucket", "key.txt", None)] == "private"

    def test_yaml_policy_with_version(self, cli_s3, tmp_path):
        policy_file = tmp_path / "policy.yaml"
        policy_file.write_text(
            yaml.safe_dump(
                {
                    "Owner": {"ID": "1", "DisplayName": "me"},
                    "AccessControlList": [{"Grantee": {"URI": "AllUsers"}, "Permission": "READ"}],
                }
            )
        )
        with pytest.raises(SystemExit) as exc_info:
            cli.main(
                [
                    "--host",
                    "s3.test",
                    "put-object-acl",
                    "mybucket",
                    "key.txt",
                    "--policy",
                    str(policy_file),
                    "--version-id",
                    "v7",
                ]
            )
        assert exc_info.value.code == 0
        stored = cli_s3.state.acls[("mybucket", "key.txt", "v7")]
        assert stored.grants[0].grantee.uri == "AllUsers"

    def test_empty_version_id_is_sent(self, cli_s3):
        """An explicitly empty --version-id still reaches the service."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(
                ["put-object-acl", "mybucket", "key.txt", "--canned", "private", "--version-id", ""]
            )
        assert exc_info.value.code == 0
        assert cli_s3.state.acls[("mybucket", "key.txt", "")] == "private"
        assert ("mybucket", "key.txt", None) not in cli_s3.state.acls

    def test_invalid_json_policy(self, cli_s3, tmp_path):
        policy_file = tmp_path / "policy.json"
        policy_file.write_text(
            json.dumps(
                {
                    "Owner": {"ID": "1", "DisplayName": "me"},
                    "AccessControlList": [{"Grantee": {"ID": "2"}, "Permission": "READ"}],
                }
            )
        )
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["put-object-acl", "b", "k", "--policy", str(policy_file)])
        assert exc_info.value.code == 1
        assert cli_s3.state.requests == []

    def test_service_error_exit_code(self, cli_s3):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["put-object-acl", "mybucket", "missing.txt", "--canned", "private"])
        assert exc_info.value.code == 2

    def test_transport_failure_exit_code(self, monkeypatch, restore_root_logging, capsys):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        def make_transport(**kwargs):
            client = AsyncClient(transport=httpx.MockTransport(refuse))
            return HttpxTransport(scheme="http", client=client)

        monkeypatch.setattr(cli, "HttpxTransport", make_transport)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["put-object-acl", "mybucket", "key.txt", "--canned", "private"])
        assert exc_info.value.code == 3
        err = capsys.readouterr().err
        assert "ConnectError: connection refused" in err
        assert "Traceback" not in err

    def test_missing_policy_file(self, cli_s3, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["put-object-acl", "b", "k", "--policy", str(tmp_path / "absent.yaml")])
        assert exc_info.value.code == 1

    def test_missing_config_file(self, restore_root_logging, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--config", str(tmp_path / "absent.yaml"), "put-object-acl", "b", "k", "--canned", "private"])
        assert exc_info.value.code == 1
