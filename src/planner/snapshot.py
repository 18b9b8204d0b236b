"""
JSON snapshot import/export.
A snapshot holds tasks, reminders and productivity data in their persisted
shapes, under the keys "tasks", "reminders" and "productivityData".
"""

import json
from pathlib import Path
from typing import Dict, List, Union

from config.logging_config import get_logger
from src.planner.repository import TaskRepository

logger = get_logger(__name__)


def _section(document: dict, key: str) -> List:
    """Records under one snapshot key; a missing, null or non-list section is empty."""
    records = document.get(key) or []
    if not isinstance(records, list):
        logger.warning(f"Ignoring snapshot section {key!r}: expected a list, got {type(records).__name__}")
        return []
    return records


def load_snapshot(path: Union[str, Path], tasks: TaskRepository) -> Dict[str, int]:
    """
    Import a snapshot file into the stores.

    Args:
        path: Snapshot JSON file
        tasks: Task repository (its reminder and productivity stores are used too)

    Returns:
        Number of imported records per key
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        document = json.load(f)

    if not isinstance(document, dict):
        raise ValueError(f"Snapshot {path} must contain a JSON object")

    counts = {
        'tasks': tasks.import_records(_section(document, 'tasks')),
        'reminders': tasks.reminders.import_records(_section(document, 'reminders')),
        'productivityData': tasks.productivity.import_records(_section(document, 'productivityData'))
    }

    logger.info(f"Loaded snapshot {path}: {counts}")
    return counts


def save_snapshot(path: Union[str, Path], tasks: TaskRepository) -> None:
    """
    Write every store to a snapshot file.

    Args:
        path: Destination JSON file
        tasks: Task repository (its reminder and productivity stores are used too)
    """
    document = {
        'tasks': tasks.export_records(),
        'reminders': tasks.reminders.export_records(),
        'productivityData': tasks.productivity.export_records()
    }

    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)

    logger.info(f"Saved snapshot {path}")
