"""Building blocks of a ShadowsocksR-style proxy: HTTP obfuscation, rules, network helpers, JSON reading and DNS resolution."""

__version__ = "0.1.0"