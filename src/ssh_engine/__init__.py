"""Relay local input to a remote SSH shell configured by engine.yml."""

__version__ = "0.1.0"
