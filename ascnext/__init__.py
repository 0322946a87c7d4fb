"""Next App Store version and build number for CI pipelines."""

__version__ = "0.3.0"
