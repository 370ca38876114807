"""Host metrics reports sent through a Telegram bot, plus Docker container reporting helpers."""

__version__ = "0.1.0"