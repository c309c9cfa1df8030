"""prrescue: score GitHub review activity and surface neglected pull requests."""

__version__ = "0.1.0"
