"""frecent — zoxide-style frecency ranking for notes."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("frecent")
except PackageNotFoundError:
    __version__ = "unknown"
