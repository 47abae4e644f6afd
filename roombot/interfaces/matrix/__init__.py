# roombot/interfaces/matrix/__init__.py
"""Matrix integration package for the command bot.

This package provides the matrix-nio client adapter and the process
entry point that wires nio callbacks to the dispatcher.

Entry point: roombot (or python -m roombot.interfaces.matrix.bot)
"""
