"""Installed pagetheme version."""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Version stamped into the package metadata at build time."""
    try:
        return version("pagetheme")
    except PackageNotFoundError:
        return "0.0.0+unknown"
