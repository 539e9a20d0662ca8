"""Tests for the error hierarchy and its user-facing rendering."""

import pytest

from server_room.errors import (
    DuplicateServerDirError,
    DuplicateServerNameError,
    EmptyServerNameError,
    EmptyStartCommandError,
    InvalidServerError,
    MalformedPackageJsonError,
    NonExistentServerError,
    NoServersError,
    ParseStoreError,
    RunScriptError,
    ServerRoomError,
    StringifyStoreError,
    WriteStoreError,
)
from server_room.models.server import Server


@pytest.fixture()
def existing() -> Server:
    return Server(name="api", directory="/srv/api", start_command="npm run dev")


class TestRendering:
    def test_code_message_and_suggestion(self):
        err = NonExistentServerError("apj", "api")
        assert str(err) == (
            'NonExistentServer: Server "apj" does not exist\n\nDid you mean --server api?'
        )

    def test_without_suggestion(self):
        assert str(StringifyStoreError()) == "StringifyStore: Couldn't stringify server store"

    def test_no_closest_name(self):
        assert NonExistentServerError("api").suggestion == "Try a different server name."

    def test_duplicate_dir_names_existing_server(self, existing: Server):
        err = DuplicateServerDirError("/srv/api", existing)
        assert err.existing is existing
        assert '"api"' in err.message
        assert "--server api" in err.suggestion

    def test_duplicate_name_carries_existing(self, existing: Server):
        err = DuplicateServerNameError("api", existing)
        assert err.existing is existing
        assert err.code == "DuplicateServerName"

    def test_malformed_package_json_includes_cause(self):
        err = MalformedPackageJsonError("/srv/api/package.json", "invalid JSON")
        assert "invalid JSON" in err.message

    def test_run_script_includes_command(self):
        assert '"npm run dev"' in str(RunScriptError("npm run dev"))

    def test_empty_start_command_points_at_edit(self):
        err = EmptyStartCommandError("api")
        assert err.name == "api"
        assert "server-room edit start-script --server api" in err.suggestion


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            ParseStoreError("/tmp/servers.json"),
            WriteStoreError("/tmp/servers.json"),
            StringifyStoreError(),
            NonExistentServerError("api"),
            EmptyServerNameError(),
            EmptyStartCommandError("api"),
            InvalidServerError("api", "name: too short"),
            RunScriptError("npm start"),
            NoServersError(),
        ],
    )
    def test_all_are_server_room_errors(self, error):
        assert isinstance(error, ServerRoomError)
        assert isinstance(error, Exception)
        assert str(error).startswith(f"{error.code}: ")

    def test_codes_are_distinct(self, existing: Server):
        codes = {
            DuplicateServerNameError("api", existing).code,
            DuplicateServerDirError("/srv/api", existing).code,
            EmptyServerNameError().code,
        }
        assert len(codes) == 3
