"""Core (non-CLI) functionality for hawkeye-cli."""
