"""Transport for agent tool calls."""
