"""modcheck - verify dependency archives against go.sum checksums."""

__version__ = "0.1.0"
