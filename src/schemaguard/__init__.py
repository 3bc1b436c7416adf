"""schemaguard - Breaking-change detection for GraphQL schemas."""

__version__ = "0.1.0"
