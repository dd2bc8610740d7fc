"""Telegram surface of farmedic."""
