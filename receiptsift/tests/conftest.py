"""Shared pytest fixtures/options for receiptsift tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from receiptsift.runtime.parser_settings import _load_parser_config_cached


def pytest_addoption(parser):
    """Custom pytest option for receipt e2e tests."""
    parser.addoption(
        "--receiptsift-e2e-mode",
        action="store",
        default="cached",
        choices=["cached", "live", "both"],
        help=(
            "Receipt E2E mode for receiptsift/tests/test_e2e_receipts.py: "
            "cached (.ocr.json), live (.jpg -> OCR service), or both."
        ),
    )


@pytest.fixture(autouse=True)
def _isolated_parser_settings(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory) -> Iterator[None]:
    """Keep tests off any parser.toml or $RECEIPTSIFT_CONFIG on the host."""
    missing = tmp_path_factory.mktemp("settings") / "parser.toml"
    monkeypatch.setenv("RECEIPTSIFT_CONFIG", str(missing))
    _load_parser_config_cached.cache_clear()
    yield
    _load_parser_config_cached.cache_clear()
