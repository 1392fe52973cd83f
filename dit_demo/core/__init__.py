"""Core demo logic: table managers, infrastructure, fixtures and steps."""
