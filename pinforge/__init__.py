"""PinForge — deterministic MCU pin allocation for sensor projects."""

__version__ = "0.1.0"
