"""Pydantic schemas for request/response validation."""

from .cart import *  # noqa: F403
from .common import *  # noqa: F403
from .execution import *  # noqa: F403
from .health import *  # noqa: F403
from .tour import *  # noqa: F403
