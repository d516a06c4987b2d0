# File: tests/test_cli.py
"""Тесты для CLI (`image_scout.cli`) с использованием click.testing.CliRunner.
Проверяют команды `crawl`, `compare`, `config`, `--version`, а также обработку ошибок.
"""
import importlib
import json

import pytest
from click.testing import CliRunner

from image_scout.aggregator import CrawlReport
from image_scout.cli import cli
from image_scout.errors import ConfigurationError
from image_scout.logger import init_logging

# image_scout.cli как атрибут пакета - это click-группа, модуль берём явно
cli_module = importlib.import_module("image_scout.cli")


def make_report(strategy="sequential", count=6, cancelled=False):
    return CrawlReport(
        strategy=strategy,
        root_url="http://example.com/",
        max_depth=1,
        image_count=count,
        pages_visited=2,
        transforms={"null": count},
        cancelled=cancelled,
    )


class FakeEngine:
    """Подменяет Engine: запоминает конфиг и возвращает заготовленные отчёты."""

    counts = {"sequential": 6, "fork_join": 6, "futures": 6}
    instances = []

    def __init__(self, cfg):
        self.config = cfg
        self.closed = False
        FakeEngine.instances.append(self)

    def start_crawl(self, strategy=None):
        name = (strategy or self.config.strategy).value
        return make_report(name, self.counts[name])

    def compare(self):
        return [make_report(name, count) for name, count in self.counts.items()]

    def cancel(self):
        pass

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def patch_engine(monkeypatch):
    """Патчим Engine, чтобы не обходить настоящие сайты."""
    FakeEngine.instances = []
    monkeypatch.setattr(cli_module, "Engine", FakeEngine)
    yield FakeEngine
    # CLI rebinds the log handler to the runner's stream
    init_logging()


@pytest.fixture()
def cfg_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "root_url": "https://example.com",
                "max_depth": 1,
                "download_path": str(tmp_path / "images"),
                "transforms": ["null"],
            }
        ),
        encoding="utf-8",
    )
    return path


def invoke(cfg_file, *args):
    runner = CliRunner()
    return runner.invoke(cli, ["--config", str(cfg_file), "--log-level", "ERROR", *args])


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "ImageScout" in result.output


def test_show_config(cfg_file):
    result = invoke(cfg_file, "config")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["root_url"] == "https://example.com/"
    assert data["strategy"] == "sequential"


def test_crawl_stdout(cfg_file):
    result = invoke(cfg_file, "crawl")
    assert result.exit_code == 0
    output = json.loads(result.output)
    assert output["image_count"] == 6
    assert output["strategy"] == "sequential"
    assert FakeEngine.instances[0].closed


def test_crawl_overrides(cfg_file):
    result = invoke(cfg_file, "crawl", "--strategy", "futures", "--max-depth", "0")
    assert result.exit_code == 0
    cfg = FakeEngine.instances[0].config
    assert cfg.strategy.value == "futures"
    assert cfg.max_depth == 0
    assert json.loads(result.output)["strategy"] == "futures"


def test_crawl_bad_strategy(cfg_file):
    result = invoke(cfg_file, "crawl", "--strategy", "threads")
    assert result.exit_code != 0


def test_crawl_json_file(cfg_file, tmp_path):
    out = tmp_path / "out.json"
    result = invoke(cfg_file, "crawl", "--json", str(out), "--pretty")
    assert result.exit_code == 0
    assert out.exists()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["image_count"] == 6


def test_crawl_html_file(cfg_file, tmp_path):
    out = tmp_path / "report.html"
    result = invoke(cfg_file, "crawl", "--html", str(out))
    assert result.exit_code == 0
    assert "http://example.com/" in out.read_text(encoding="utf-8")


def test_compare_agree(cfg_file):
    result = invoke(cfg_file, "compare")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert [r["strategy"] for r in data] == ["sequential", "fork_join", "futures"]


def test_compare_disagree(cfg_file, monkeypatch):
    monkeypatch.setattr(FakeEngine, "counts", {"sequential": 6, "fork_join": 5, "futures": 6})
    result = invoke(cfg_file, "compare")
    assert result.exit_code == 1


def test_missing_config(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(tmp_path / "none.yaml"), "config"])
    assert result.exit_code != 0


def test_invalid_config(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("root_url: http://example.com\nmax_depth: -3\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(bad), "config"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_engine_configuration_error(cfg_file, monkeypatch):
    def broken(cfg):
        raise ConfigurationError("A platform storage must be specified.")

    monkeypatch.setattr(cli_module, "Engine", broken)
    result = invoke(cfg_file, "crawl")
    assert result.exit_code == 1
    assert "Ошибка конфигурации" in result.output
