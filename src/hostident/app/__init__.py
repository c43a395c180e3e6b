"""
hostident Application Layer

This package holds the ambient pieces shared by every entry point: configuration, logging and
error reporting bootstrap, and metrics.

Key Components:
- config.py: Configuration management using Pydantic settings
- cli.py: Logging configuration and Sentry initialisation for command line use
- metrics.py: Metrics abstraction with Telegraf and no-op backends
"""
