# File: tests/conftest.py
import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

import pytest

from fakes import TEST_TRANSFORMS, ROOT, Graph, GraphFetcher, MemoryStorage, images_for
from image_scout.aggregator import EventCollector
from image_scout.config import CrawlerConfig
from image_scout.controller import Controller
from image_scout.logger import attached
from image_scout.transforms import Transform


@pytest.fixture()
def make_controller(tmp_path: Path):
    """Factory: controller over an in-memory graph and storage."""

    def _make(
        pages: Graph,
        images: Optional[Dict[str, bytes]] = None,
        *,
        max_depth: int = 3,
        transforms: Optional[Sequence[Transform]] = None,
        parallelism: int = 4,
        diagnostics: bool = False,
        on_fetch: Optional[Callable[[str], None]] = None,
    ) -> Controller:
        config = CrawlerConfig(
            root_url=ROOT,
            max_depth=max_depth,
            download_path=tmp_path / "images",
            parallelism=parallelism,
            diagnostics_enabled=diagnostics,
        )
        return Controller.from_config(
            config,
            fetcher=GraphFetcher(pages, on_fetch=on_fetch),
            storage=MemoryStorage(images_for(pages) if images is None else images),
            transforms=transforms or TEST_TRANSFORMS,
            consumer=EventCollector(),
        )

    return _make


@pytest.fixture()
def scout_log(caplog):
    """caplog wired to the project logger (which does not propagate)."""
    with attached(caplog.handler, logging.DEBUG):
        yield caplog
