"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, shared by
a Router and every Route that doesn't override it. Per-route overrides
produce a new instance via ``merged()``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from switchyard.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router and route options. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(enable_logging=True, body_size_limit=1_048_576)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "info"

    # Responses
    custom_404_path: str | Path | None = None
    default_headers: Mapping[str, str] = field(default_factory=dict)

    # Static files
    index: str = "index.html"

    # Limits
    body_size_limit: int | None = None  # bytes; None = unbounded
    timeout: int | None = None  # milliseconds; None = no timeout

    # Observability
    enable_logging: bool = False

    def merged(self, **overrides: Any) -> "RouterConfig":
        """Return a copy with *overrides* applied.

        Raises ``ConfigurationError`` for unknown option names so typos
        surface at setup time rather than being silently ignored.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            msg = f"Unknown router option(s): {', '.join(unknown)}"
            raise ConfigurationError(msg)
        if not overrides:
            return self
        return replace(self, **overrides)

    @property
    def timeout_seconds(self) -> float | None:
        """The request timeout in seconds, or ``None`` when disabled."""
        if self.timeout is None:
            return None
        return self.timeout / 1000
