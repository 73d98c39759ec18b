# route_mapper/report/json_report.py

"""
Генерация JSON-отчёта для проекта RouteMapper.

Сериализация дерева маршрутов в файл.
"""
import json
from pathlib import Path

from route_mapper.crawler.models import RouteNode


def render_json(tree: RouteNode, output_path: Path | str, pretty: bool = True) -> Path:
    """
    Сохраняет дерево tree в формате JSON по указанному пути.

    :param tree: корневой RouteNode
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 вместо компактной записи
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(tree.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
