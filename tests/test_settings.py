import os
import subprocess
import sys

from config import settings

SHOW_SETTINGS = (
    "from config import settings; "
    "print(settings.DB_PATH); print(settings.ENABLE_HARDWARE_GPIO); print(settings.ENV_LOADED)"
)


def read_settings(env_file, **overrides):
    env = {k: v for k, v in os.environ.items()
           if k not in ("PRODUCTIVITY_HUB_DATA_DIR", "ENABLE_HARDWARE_GPIO")}
    env["PRODUCTIVITY_HUB_ENV_FILE"] = str(env_file)
    env.update(overrides)
    result = subprocess.run(
        [sys.executable, "-c", SHOW_SETTINGS],
        cwd=settings.PROJECT_ROOT, env=env,
        capture_output=True, text=True, check=True
    )
    return result.stdout.split()


def test_env_file_values_reach_settings(tmp_path):
    data_dir = tmp_path / "from_env_file"
    env_file = tmp_path / ".env"
    env_file.write_text(f"PRODUCTIVITY_HUB_DATA_DIR={data_dir}\nENABLE_HARDWARE_GPIO=true\n")

    db_path, gpio, loaded = read_settings(env_file)

    assert db_path == str(data_dir / "hub.db")
    assert gpio == "True"
    assert loaded == "True"
    assert data_dir.is_dir()


def test_real_environment_beats_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(f"PRODUCTIVITY_HUB_DATA_DIR={tmp_path / 'file'}\n")

    db_path, _, _ = read_settings(env_file, PRODUCTIVITY_HUB_DATA_DIR=str(tmp_path / "real"))

    assert db_path == str(tmp_path / "real" / "hub.db")


def test_missing_env_file_is_not_an_error(tmp_path):
    _, gpio, loaded = read_settings(tmp_path / "absent.env")
    assert gpio == "False"
    assert loaded == "False"
