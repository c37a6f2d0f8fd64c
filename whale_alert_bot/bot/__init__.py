"""Telegram bot implementation package.

Contains the chat-facing pieces: command parsing, callback-data codec,
keyboards, reply formatting, the command dispatcher and the update handlers
registered with python-telegram-bot.
"""
