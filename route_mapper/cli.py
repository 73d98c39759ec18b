#!/usr/bin/env python3
"""
Точка входа для запуска RouteMapper через командную строку.

Команды:
  crawl URL   Обойти сайт и вывести/сохранить дерево маршрутов
  config      Показать текущие параметры обхода

Общие опции:
  --config PATH       Путь к YAML/JSON с параметрами обхода
  --max-depth INT     Переопределить max_depth
  --max-pages INT     Переопределить max_pages
  --timeout MS        Переопределить таймаут одной попытки
  --delay MS          Переопределить паузу между запросами
  --concurrency INT   Переопределить число одновременных страниц
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --note TEXT         Необязательная заметка к запросу
  --json PATH         Сохранить JSON-дерево в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с Jinja2-шаблонами
  --routes            Вывести плоский список маршрутов вместо дерева
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --crawl-timeout SEC Таймаут всего обхода (секунд)

Пример:
  route-mapper --max-depth 1 crawl https://example.com --pretty
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from route_mapper import __version__
from route_mapper.aggregator import build_report
from route_mapper.config import load_config, merge_overrides
from route_mapper.engine import run_crawl, validate_request
from route_mapper.logger import DEFAULT_FORMAT, init_logging
from route_mapper.report.html_report import render_html
from route_mapper.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    msg = errors[0].get('msg', str(exc))
    return msg.removeprefix('Value error, ')


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='RouteMapper, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу параметров (YAML или JSON).'
)
@click.option('--max-depth', 'max_depth', type=int, default=None, help='Максимальная глубина обхода')
@click.option('--max-pages', 'max_pages', type=int, default=None, help='Макс. число страниц')
@click.option('--timeout', 'timeout', type=int, default=None, help='Таймаут попытки (мс)')
@click.option('--delay', 'delay', type=int, default=None, help='Пауза между запросами (мс)')
@click.option('--concurrency', 'concurrency', type=int, default=None, help='Одновременно обрабатываемых страниц')
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, max_depth, max_pages, timeout, delay, concurrency,
        log_level, log_file, log_format):
    """Группа команд RouteMapper CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format,
        to_stderr=True,
    )
    try:
        cfg = load_config(config_path)
        cfg = merge_overrides(
            cfg,
            max_depth=max_depth,
            max_pages=max_pages,
            timeout=timeout,
            delay=delay,
            concurrency=concurrency,
        )
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--note', '-n', 'note', default=None, help='Необязательная заметка к запросу')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-дерево в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблонами (по умолчанию встроенная)'
)
@click.option('--routes', 'routes_only', is_flag=True, help='Вывести только список маршрутов')
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.pass_context
def crawl(ctx, url, note, json_output, html_output, template_dir, routes_only, pretty, crawl_timeout):
    """Обойти сайт и вывести дерево маршрутов."""
    cfg = ctx.obj['config']
    try:
        request = validate_request({'url': url, 'note': note})
    except ValidationError as e:
        print_error(f'Некорректный запрос: {_first_error(e)}')

    try:
        tree = run_crawl(request, cfg, timeout=crawl_timeout)
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')

    if tree.error:
        print_error(tree.error)

    if json_output or html_output:
        if json_output:
            try:
                saved_json = render_json(tree, json_output, pretty=True)
                click.echo(f'JSON report: {saved_json}')
            except OSError as e:
                print_error(f'Ошибка при сохранении JSON: {e}')
        if html_output:
            try:
                saved_html = render_html(tree, template_dir, html_output)
                click.echo(f'HTML report: {saved_html}')
            except Exception as e:
                print_error(f'Ошибка при сохранении HTML: {e}')
        return

    if routes_only:
        for route in build_report(tree).routes:
            click.echo(route)
        return

    indent = 2 if pretty else None
    click.echo(json.dumps(tree.to_dict(), ensure_ascii=False, indent=indent))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущие параметры в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
