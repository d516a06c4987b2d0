"""image_scout.report: Генерация отчётов (JSON и HTML) для CLI и тестов."""

from image_scout.report.html_report import render_html
from image_scout.report.json_report import render_json

__all__ = ["render_json", "render_html"]
