# === FILE: image_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска краулера ImageScout через командную строку.

Команды:
  crawl     Запустить обход выбранной стратегией и вывести/сохранить отчёт
  compare   Запустить все стратегии и сверить число изображений
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию ImageScout

Пример:
  image-scout --config configs/default.yaml crawl --strategy fork_join --json report.json --pretty
"""
import json
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import click
from pydantic import ValidationError

from image_scout import __version__
from image_scout.aggregator import counts_agree, summary
from image_scout.config import StrategyName, load_config
from image_scout.engine import Engine
from image_scout.errors import ConfigurationError
from image_scout.logger import enable_diagnostics, init_logging, logger
from image_scout.report.html_report import render_html
from image_scout.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
STRATEGIES = [s.value for s in StrategyName]


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@contextmanager
def cancel_on_interrupt(engine: Engine) -> Iterator[None]:
    """Ctrl+C поднимает флаг отмены вместо KeyboardInterrupt посреди обхода."""
    try:
        previous = signal.signal(signal.SIGINT, lambda signum, frame: engine.cancel())
    except ValueError:
        # not in the main thread (e.g. CliRunner inside a worker)
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def build_engine(cfg) -> Engine:
    try:
        return Engine(cfg)
    except ConfigurationError as e:
        print_error(f'Ошибка конфигурации: {e}')


def write_reports(report, json_output, html_output, pretty):
    if not json_output and not html_output:
        if isinstance(report, list):
            indent = 2 if pretty else None
            click.echo(json.dumps([r.to_dict() for r in report], ensure_ascii=False, indent=indent))
        else:
            click.echo(report.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(report, html_output)
            click.echo(f'HTML report: {saved_html}')
        except OSError as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ImageScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(threadName)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд ImageScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError, ValidationError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--strategy', '-s', 'strategy',
    default=None,
    type=click.Choice(STRATEGIES),
    help='Стратегия обхода (override strategy)'
)
@click.option(
    '--max-depth', '-d', 'max_depth',
    type=click.IntRange(min=0),
    default=None,
    help='Максимальная глубина (override max_depth)'
)
@click.option(
    '--diagnostics', is_flag=True, default=None,
    help='Трассировка каждого шага обхода (уровень DEBUG)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.pass_context
def crawl(ctx, strategy, max_depth, diagnostics, json_output, html_output, pretty):
    """Запустить обход и сгенерировать отчёт."""
    try:
        cfg = ctx.obj['config'].with_overrides(
            strategy=strategy, max_depth=max_depth, diagnostics_enabled=diagnostics
        )
    except ValidationError as e:
        print_error(f'Ошибка конфигурации: {e}')
    if cfg.diagnostics_enabled:
        enable_diagnostics()
    logger.info('Starting %s crawl of %s', cfg.strategy.value, cfg.root_url)

    engine = build_engine(cfg)
    try:
        with cancel_on_interrupt(engine):
            report = engine.start_crawl()
    finally:
        engine.close()

    if report.cancelled:
        logger.warning('Обход отменён')
    write_reports(report, json_output, html_output, pretty)


@cli.command('compare', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.pass_context
def compare(ctx, json_output, html_output, pretty):
    """Запустить все стратегии на одном графе и сверить результаты."""
    cfg = ctx.obj['config']
    engine = build_engine(cfg)
    try:
        with cancel_on_interrupt(engine):
            reports = engine.compare()
    finally:
        engine.close()

    for strategy, count in summary(reports).items():
        logger.info('%-12s %s', strategy, 'cancelled' if count is None else f'{count} images')
    write_reports(reports, json_output, html_output, pretty)

    if not counts_agree(reports):
        print_error('Стратегии вернули разное число изображений')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
