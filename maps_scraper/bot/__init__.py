"""Telegram operator bot package.

Contains the command controller over the traversal engine, the Telegram
command handlers, the status channel relaying pushes to the admin chat, and
the message templates shared by the bot and the engine.
"""
