import os
from typing import Optional


def project_root() -> str:
    return os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def resolve_data_dir(override: Optional[str] = None) -> str:
    """Resolve the local data directory across local dev and container (/mount/src) layouts.

    Strategy:
    1. An explicit override (ART_APP_DATA_DIR) wins.
    2. Project-root relative `data/` based on this file location, if it exists.
    3. cwd + `data/` (in case working dir is project root).
    4. /mount/src/data (Streamlit Community Cloud container pattern).
    Falls back to the project-root location so it can be created on first write.
    """
    if override:
        return os.path.abspath(override)
    default = os.path.join(project_root(), 'data')
    candidates = [
        default,
        os.path.join(os.getcwd(), 'data'),
        '/mount/src/data',
    ]
    for p in candidates:
        if os.path.isdir(p):
            return p
    return default
