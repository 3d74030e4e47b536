"""Tests for configuration models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from doc_loader.config import AppConfig, FetcherConfig, LoaderConfig


def test_defaults() -> None:
    config = AppConfig()
    assert config.loader.follow_meta_refresh is False
    assert config.loader.max_refreshes == 0
    assert config.loader.strict_refresh is True
    assert config.fetcher.timeout_ms == 30000


def test_rejects_out_of_range_values() -> None:
    with pytest.raises(ValidationError):
        LoaderConfig(max_refreshes=-1)
    with pytest.raises(ValidationError):
        FetcherConfig(timeout_ms=10)


def test_toml_round_trip(tmp_path: Path) -> None:
    config = AppConfig(
        loader=LoaderConfig(follow_meta_refresh=True, max_refreshes=5),
        fetcher=FetcherConfig(user_agent='Agent "quoted"'),
    )
    path = tmp_path / "loader.toml"
    path.write_text(config.to_toml())

    loaded = AppConfig.from_toml(path)
    assert loaded == config


def test_to_toml_omits_defaults() -> None:
    text = AppConfig(loader=LoaderConfig(follow_meta_refresh=True)).to_toml()
    assert "[loader]\nfollow_meta_refresh = true" in text
    assert "max_refreshes" not in text
    assert "verbose" not in text
