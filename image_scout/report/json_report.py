# image_scout/report/json_report.py
"""JSON-отчёт: один CrawlReport (crawl) или список отчётов (compare)."""
import json
from pathlib import Path
from typing import Any, Sequence, Union

from image_scout.aggregator import CrawlReport


def _payload(report: Union[CrawlReport, Sequence[CrawlReport]]) -> Any:
    if isinstance(report, CrawlReport):
        return report.to_dict()
    return [r.to_dict() for r in report]


def render_json(report: Union[CrawlReport, Sequence[CrawlReport]], output_path: Path | str) -> Path:
    """
    Записывает отчёт в *output_path* (UTF-8, отступ 2), создавая каталоги.

    :return: путь к записанному файлу
    """
    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(_payload(report), ensure_ascii=False, indent=2), encoding="utf-8")
    return target
