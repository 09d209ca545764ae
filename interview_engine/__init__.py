"""Real-time conversational interview engine."""

__version__ = "0.1.0"
