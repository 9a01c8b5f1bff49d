from ghost import __version__
from ghost._version import GHOST_VERSION
from ghost.versioning import build_version_output, get_version


def test_get_version_matches_constant():
    assert get_version() == GHOST_VERSION
    assert __version__ == GHOST_VERSION


def test_build_version_output_uses_package_version():
    output = build_version_output()
    assert f"Version:          {GHOST_VERSION}" in output
