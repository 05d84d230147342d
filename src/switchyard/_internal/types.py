"""Shared type aliases used across switchyard modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Handler or middleware, called as (request, response, next); may take fewer args
Handler: TypeAlias = Callable[..., Any]

HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE")
