import asyncio
import json

from src.main import main, parse_arguments


def test_parse_arguments_defaults():
    args = parse_arguments([])
    assert args.db is None
    assert args.import_path is None
    assert not args.no_sound


def test_import_then_export(tmp_path):
    snapshot = {
        "tasks": [],
        "reminders": [
            {"id": "r1", "taskId": "t1", "time": "06:45", "sound": True, "vibration": True,
             "snooze": True, "repeat": "daily", "enabled": True,
             "triggeredAt": "2025-01-06T06:45:10"},
        ],
        "productivityData": [],
    }
    source = tmp_path / "in.json"
    source.write_text(json.dumps(snapshot))
    target = tmp_path / "out.json"

    exit_code = asyncio.run(main([
        "--db", str(tmp_path / "hub.db"),
        "--import", str(source),
        "--export", str(target),
    ]))

    assert exit_code == 0
    assert json.loads(target.read_text()) == snapshot
