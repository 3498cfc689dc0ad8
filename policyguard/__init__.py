"""Access control policy model, policy store, management API and thread-safe enforcer."""

__version__ = "0.1.0"

__all__ = [
    "assertion",
    "errors",
    "frontend",
    "internal",
    "log",
    "management",
    "model",
    "policy",
    "synced",
]