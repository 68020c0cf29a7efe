"""Core infrastructure: configuration, storage, logging, and the CLI."""
