"""Database connectors."""
