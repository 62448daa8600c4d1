"""
Version of the installed aidchain-sdk distribution.
"""
import importlib.metadata

DISTRIBUTION = "aidchain-sdk"
# Reported when running from a source tree that was never installed
UNINSTALLED_VERSION = "0.0.0.dev0"


def installed_version(distribution: str = DISTRIBUTION) -> str:
    """Return the installed version of ``distribution``, or UNINSTALLED_VERSION."""
    try:
        return importlib.metadata.version(distribution)
    except importlib.metadata.PackageNotFoundError:
        return UNINSTALLED_VERSION


__version__ = installed_version()
