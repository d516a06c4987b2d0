"""image_scout.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence, Union

from jinja2 import BaseLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from image_scout.aggregator import CrawlReport, counts_agree

TEMPLATE_NAME = "report.html.j2"


def render_html(
    report: Union[CrawlReport, Sequence[CrawlReport]],
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        report: объект CrawlReport или список отчётов (compare).
        output_path: путь к итоговому HTML-файлу.
        template_dir: директория с Jinja2-шаблонами; по умолчанию шаблон из пакета.

    Returns:
        Path до сохранённого HTML-файла.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    loader: BaseLoader
    if template_dir is not None:
        loader = FileSystemLoader(str(template_dir))
    else:
        loader = PackageLoader("image_scout", "templates")

    env = Environment(loader=loader, autoescape=select_autoescape(["html", "xml", "j2"]))
    template = env.get_template(TEMPLATE_NAME)

    reports = [report] if isinstance(report, CrawlReport) else list(report)
    context: dict[str, Any] = {
        "reports": reports,
        "agree": counts_agree(reports),
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
