"""
Top-level package for the Norwegian translation Discord bot.

This package hosts:
- config loading and validation
- the translation router (graph, path finding, pipelines) and its providers
- in-memory rate limiting
- Discord client, slash commands, context menus and reaction handlers
"""
