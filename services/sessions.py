"""Session (process log) and project helpers: saving a finished stopwatch run,
listing feeds and building per-project summaries.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from domain.constants import (
    DEFAULT_PROJECT_STATUS, DEFAULT_PROJECT_TITLE, EVIDENCE_BUCKET, PROJECTS_TABLE, SESSIONS_TABLE,
)
from domain.models import (
    Project, ProjectSummary, SessionRecord, project_from_dict, session_from_dict,
)
from services.backend import Backend, ValidationError
from services.imaging import EncodedImage
from utils.ids import storage_key

logger = logging.getLogger(__name__)

FEED_COLUMNS = '*, projects(title, status)'


def list_projects(backend: Backend, user_id: str) -> List[Project]:
    rows = backend.select(PROJECTS_TABLE, {'user_id': user_id}, columns='id, user_id, title, status')
    return [project_from_dict(r) for r in rows]


def ensure_project(backend: Backend, user_id: str) -> Project:
    """Return the user's first project, creating the default one if none exists."""
    projects = list_projects(backend, user_id)
    if projects:
        return projects[0]
    row = backend.insert(PROJECTS_TABLE, {
        'user_id': user_id,
        'title': DEFAULT_PROJECT_TITLE,
        'status': DEFAULT_PROJECT_STATUS,
    })
    logger.info("Created default project for %s", user_id)
    return project_from_dict(row)


def save_session(backend: Backend, user_id: str, duration_seconds: int,
                 image: Optional[EncodedImage] = None,
                 project_id: Optional[str] = None) -> SessionRecord:
    if duration_seconds < 0:
        raise ValidationError("Duration must not be negative.")
    if project_id is None:
        project_id = ensure_project(backend, user_id).id
    image_url = None
    if image is not None:
        image_url = backend.upload(EVIDENCE_BUCKET, storage_key(user_id, image.filename),
                                   image.data, image.content_type)
    row = backend.insert(SESSIONS_TABLE, {
        'user_id': user_id,
        'project_id': project_id,
        'duration_seconds': int(duration_seconds),
        'image_url': image_url,
        'reactions': {},
    })
    logger.info("Saved session %s (%ss) for %s", row.get('id'), duration_seconds, user_id)
    return session_from_dict(row)


def list_feed(backend: Backend) -> List[SessionRecord]:
    return [session_from_dict(r) for r in backend.select(SESSIONS_TABLE, columns=FEED_COLUMNS)]


def list_user_sessions(backend: Backend, user_id: str) -> List[SessionRecord]:
    rows = backend.select(SESSIONS_TABLE, {'user_id': user_id}, order='created_at', desc=True)
    return [session_from_dict(r) for r in rows]


def list_project_sessions(backend: Backend, project_id: str) -> List[SessionRecord]:
    rows = backend.select(SESSIONS_TABLE, {'project_id': project_id}, order='created_at', desc=True)
    return [session_from_dict(r) for r in rows]


def project_summaries(projects: Sequence[Project], records: Sequence[SessionRecord]) -> List[ProjectSummary]:
    """Total time, image count and the first image per project (records newest first)."""
    by_project: Dict[str, List[SessionRecord]] = {p.id: [] for p in projects}
    for r in records:
        if r.project_id in by_project:
            by_project[r.project_id].append(r)
    summaries = []
    for p in projects:
        logs = by_project[p.id]
        with_image = [r for r in logs if r.image_url]
        summaries.append(ProjectSummary(
            project=p,
            image_count=len(with_image),
            total_seconds=sum(r.duration_seconds for r in logs),
            last_image=with_image[0].image_url if with_image else None,
        ))
    return summaries
