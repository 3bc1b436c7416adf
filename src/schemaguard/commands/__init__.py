"""schemaguard CLI Commands - Subcommand implementations."""
