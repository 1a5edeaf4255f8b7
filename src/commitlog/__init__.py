"""commitlog: parse sentinel-formatted git log output into commit records."""

__version__ = "0.1.0"
