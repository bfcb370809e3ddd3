"""SMIA: script runner and browser client for the ExtreamFS filesystem service."""

__version__ = "0.1.0"
