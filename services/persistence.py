import json
import os
import tempfile
import shutil
import threading
from typing import Any, Callable, Dict, List

from utils.paths import resolve_data_dir

DATA_DIR = resolve_data_dir(os.environ.get('ART_APP_DATA_DIR'))

FILES = {
    'process_logs': 'process_logs.json',
    'projects': 'projects.json',
    'notifications': 'notifications.json',
    'accounts': 'accounts.json',
    'objects': 'objects.json',
}

# Streamlit serves every browser session from its own thread; read-modify-write
# cycles on the same file must not interleave.
_write_lock = threading.RLock()


def _path(key: str) -> str:
    return os.path.join(DATA_DIR, FILES[key])


def load_list(key: str) -> List[Dict[str, Any]]:
    file_path = _path(key)
    if not os.path.exists(file_path):
        return []
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError):
        return []
    return data if isinstance(data, list) else []


def atomic_write(key: str, data: List[Dict[str, Any]]):
    file_path = _path(key)
    os.makedirs(os.path.dirname(file_path), exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(prefix='tmp_', suffix='.json', dir=os.path.dirname(file_path))
    with os.fdopen(tmp_fd, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    shutil.move(tmp_path, file_path)


def append_item(key: str, item: Dict[str, Any]):
    with _write_lock:
        data = load_list(key)
        data.append(item)
        atomic_write(key, data)


def replace_all(key: str, items: List[Dict[str, Any]]):
    with _write_lock:
        atomic_write(key, items)


def update_items(key: str, match: Callable[[Dict[str, Any]], bool],
                 change: Callable[[Dict[str, Any]], None]) -> List[Dict[str, Any]]:
    """Apply `change` in place to every row where `match` holds; return copies of those rows.

    The file is only rewritten when at least one row matched.
    """
    with _write_lock:
        rows = load_list(key)
        changed = []
        for row in rows:
            if match(row):
                change(row)
                changed.append(dict(row))
        if changed:
            atomic_write(key, rows)
    return changed


def write_blob(relative: str, payload: bytes) -> str:
    """Store raw bytes under DATA_DIR/uploads and return the absolute path."""
    target = os.path.join(DATA_DIR, 'uploads', relative)
    os.makedirs(os.path.dirname(target), exist_ok=True)
    with open(target, 'wb') as f:
        f.write(payload)
    return target
