"""Core infrastructure: configuration, extensions, logging, errors, security."""
