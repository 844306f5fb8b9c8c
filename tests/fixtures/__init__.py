"""Shared pytest fixtures and helpers for directory bridge tests."""

from .core import *  # noqa: F401,F403
from .directory import *  # noqa: F401,F403
from .services import *  # noqa: F401,F403
