"""Configuration package for hawkeye-cli.

Sub-modules:
    parsing  – value parsing/normalization helpers
    loader   – TOML + environment loading mixin (_ConfigLoader)
    settings – HawkeyeConfig dataclass
"""

from hawkeye_cli.config.settings import HawkeyeConfig

__all__ = ["HawkeyeConfig"]
