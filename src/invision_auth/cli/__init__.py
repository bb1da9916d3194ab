"""Command line interface for invision-auth."""
