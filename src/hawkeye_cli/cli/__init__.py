"""Command-line interface for hawkeye-cli."""
