"""Governed, versioned memory for agents: models, policy, config, exports and a tool server."""

__version__ = "0.1.0"

__all__ = [
    "candidates",
    "config",
    "errors",
    "export",
    "history",
    "mcp_schema",
    "mcp_server",
    "mcp_tools",
    "models",
    "policy",
    "reconcile",
    "snapshot",
    "validate",
]