"""Tests for package initialization and basic imports."""


def test_package_imports():
    """Verify the main package can be imported."""
    import server_room

    assert server_room is not None


def test_version_defined():
    """Verify __version__ is set and follows semver format."""
    from server_room import __version__

    assert isinstance(__version__, str)
    parts = __version__.split(".")
    assert len(parts) == 3, f"Expected semver (X.Y.Z), got {__version__}"
    for part in parts:
        assert part.isdigit(), f"Version part '{part}' is not a digit in {__version__}"


def test_subpackages_importable():
    """Verify all subpackages can be imported."""
    import server_room.cli
    import server_room.models
    import server_room.storage

    assert server_room.models is not None
    assert server_room.storage is not None
    assert server_room.cli is not None


def test_cli_group_exists():
    """Verify the Click CLI group can be imported."""
    from server_room.cli.main import cli

    assert callable(cli)
