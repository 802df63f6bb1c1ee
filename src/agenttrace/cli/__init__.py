"""Command-line interface for AgentTrace."""
