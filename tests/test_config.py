"""Tests for switchyard.config — RouterConfig frozen dataclass."""

from dataclasses import FrozenInstanceError

import pytest

from switchyard.config import RouterConfig
from switchyard.errors import ConfigurationError


class TestRouterConfig:
    def test_defaults(self) -> None:
        cfg = RouterConfig()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 3000
        assert cfg.custom_404_path is None
        assert dict(cfg.default_headers) == {}
        assert cfg.index == "index.html"
        assert cfg.body_size_limit is None
        assert cfg.timeout is None
        assert cfg.enable_logging is False

    def test_frozen(self) -> None:
        cfg = RouterConfig()
        with pytest.raises(FrozenInstanceError):
            cfg.port = 1  # type: ignore[misc]

    def test_merged_returns_copy(self) -> None:
        base = RouterConfig(body_size_limit=10)
        merged = base.merged(timeout=500)
        assert merged.body_size_limit == 10
        assert merged.timeout == 500
        assert base.timeout is None

    def test_merged_without_overrides_is_same(self) -> None:
        cfg = RouterConfig()
        assert cfg.merged() is cfg

    def test_merged_rejects_unknown(self) -> None:
        with pytest.raises(ConfigurationError, match="bogus"):
            RouterConfig().merged(bogus=1)

    def test_timeout_seconds(self) -> None:
        assert RouterConfig().timeout_seconds is None
        assert RouterConfig(timeout=1500).timeout_seconds == 1.5
