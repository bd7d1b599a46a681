# === FILE: polite_crawl/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска краулера PoliteCrawl через командную строку.

Команды:
  crawl     Запустить обход и вывести/сохранить ссылки по страницам
  check     Проверить по robots.txt, можно ли обходить URL
  select    Загрузить страницу и вывести первый элемент по CSS-селектору
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml)
  --limit INT         Макс. число страниц (override max_pages)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --seed URL          Seed URL (можно несколько; по умолчанию base_url)
  --json PATH         Сохранить JSON-отчёт в файл
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --rendered          Загружать все страницы через headless-браузер
  --crawl-timeout SEC Таймаут всего обхода (секунд)

Пример:
  polite-crawl --config configs/default.yaml crawl --seed https://example.com/ --pretty
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from polite_crawl import __version__
from polite_crawl.config import load_config
from polite_crawl.engine import check_url, fetch_page_element, start_crawl
from polite_crawl.errors import FetchError
from polite_crawl.logger import DEFAULT_FORMAT, init_logging
from polite_crawl.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='PoliteCrawl, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--limit', '-l', 'limit',
    type=int,
    default=None,
    help='Макс. число страниц для обхода (override max_pages)'
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
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов (поле session - id текущего запуска)'
)
@click.pass_context
def cli(ctx, config_path, limit, log_level, log_file, log_format):
    """Группа команд PoliteCrawl CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    if limit is not None:
        cfg = cfg.model_copy(update={'max_pages': limit})
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--seed', '-s', 'seeds',
    multiple=True,
    help='Seed URL (по умолчанию base_url из конфига)'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--rendered', is_flag=True,
    help='Загружать страницы через headless-браузер'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.pass_context
def crawl(ctx, seeds, json_output, pretty, rendered, crawl_timeout):
    """Запустить обход и вывести найденные ссылки."""
    cfg = ctx.obj['config']
    if rendered:
        cfg = cfg.model_copy(update={'strategy': 'rendered'})
    try:
        report = asyncio.run(
            asyncio.wait_for(start_crawl(cfg, list(seeds) or None), timeout=crawl_timeout)
        )
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')
        return

    indent = 2 if pretty else None
    click.echo(json.dumps(report.pages, ensure_ascii=False, indent=indent))


@cli.command('check', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.pass_context
def check(ctx, url):
    """Проверить по robots.txt, разрешён ли обход URL."""
    cfg = ctx.obj['config']
    allowed = asyncio.run(check_url(cfg, url))
    click.echo(f'{url}: {"allowed" if allowed else "disallowed"}')


@cli.command('select', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.argument('selector')
@click.option('--rendered', is_flag=True, help='Рендерить страницу в headless-браузере')
@click.pass_context
def select(ctx, url, selector, rendered):
    """Вывести первый элемент страницы, подходящий под CSS-селектор."""
    cfg = ctx.obj['config']
    try:
        node = asyncio.run(fetch_page_element(cfg, url, selector, rendered=rendered))
    except FetchError as e:
        print_error(f'Не удалось загрузить страницу: {e}')
    if node is None:
        print_error(f'Нет элементов для селектора {selector!r}')
    click.echo(str(node))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
