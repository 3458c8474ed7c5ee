"""hawkeye-cli: terminal client for streamed Hawkeye investigations."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version

try:
    __version__ = get_package_version("hawkeye-cli")
except PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for dev without install
