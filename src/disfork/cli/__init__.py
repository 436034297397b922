"""CLI package for DisFork."""
