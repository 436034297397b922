"""DisFork - find and delete GitHub forks that carry no commits of their own."""

__version__ = "0.1.0"
