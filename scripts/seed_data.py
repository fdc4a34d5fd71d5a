"""Seed the local JSON backend with a demo account and a week of sessions.

Usage: python scripts/seed_data.py [email] [password]
"""
import sys
import os
import random
import datetime as dt

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from domain.constants import NOTIFICATIONS_TABLE, REACTIONS, SESSIONS_TABLE  # noqa: E402
from services import persistence  # noqa: E402
from services.backend import BackendError  # noqa: E402
from services.local_backend import LocalBackend  # noqa: E402
from services.sessions import ensure_project  # noqa: E402

PEERS = ["Beginner A", "Senior B", "Hard worker C", "Pen hunter"]


def seed(email: str = "demo@example.com", password: str = "demo-password-123", days: int = 7):
    backend = LocalBackend()
    try:
        session = backend.sign_up(email, password)
    except BackendError:
        session = backend.sign_in(email, password)
    project = ensure_project(backend, session.user_id)
    now = dt.datetime.now(dt.timezone.utc)
    for d in range(days):
        created = (now - dt.timedelta(days=d, hours=random.randint(0, 5))).replace(microsecond=0)
        backend.insert(SESSIONS_TABLE, {
            'user_id': session.user_id,
            'project_id': project.id,
            'duration_seconds': random.randint(10, 120) * 60,
            'image_url': None,
            'reactions': {k: random.randint(0, 5) for k in random.sample(list(REACTIONS), 2)},
            'created_at': created.isoformat().replace('+00:00', 'Z'),
        })
    for i, peer in enumerate(PEERS):
        backend.insert(NOTIFICATIONS_TABLE, {
            'user_id': session.user_id,
            'type': 'reaction',
            'message': 'reacted 🔥 to your post',
            'from_user_name': peer,
            'is_read': i >= 2,
        })
    print(f"Seeded {days} sessions for {email} in {persistence.DATA_DIR}")


if __name__ == '__main__':
    seed(*sys.argv[1:3])
