"""Command modules for Nexus CLI."""
