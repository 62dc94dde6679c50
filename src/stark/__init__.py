"""Stark — Telegram team assistant backed by Claude, with per-chat to-dos and memory."""

__version__ = "0.1.0"
