__all__ = [
    "config",
    "contracts",
    "errors",
    "logging",
    "models",
    "schemas",
    "tracing",
]
