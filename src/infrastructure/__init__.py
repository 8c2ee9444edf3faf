"""Infrastructure layer containing implementations."""

__all__ = [
    "config",
    "constants",
    "logging",
    "patterns",
    "repositories",
    "telemetry",
]
