"""Nexus CLI - command-line companion for the Nexus productivity suite."""

__version__ = "0.1.0"
