"""
Infrastructure layer - logging, settings, and technical concerns.

This layer contains infrastructure concerns like configuration,
structured logging and the shared exception hierarchy.
"""
