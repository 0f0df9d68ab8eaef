# ABOUTME: Cross-cutting utilities and shared infrastructure
# ABOUTME: Supporting services: logging, retry policy, rich output helpers

from . import logging

__all__ = [
    "logging",
]
