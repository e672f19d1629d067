"""Helper modules for the FixFlow application."""

__all__ = [
    "demo_data",
    "whatsapp",
]
