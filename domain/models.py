from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
import datetime as _dt


def _now():
    return _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0)


def now_iso() -> str:
    return _now().isoformat().replace('+00:00', 'Z')


def parse_timestamp(value: Any) -> _dt.datetime:
    """Parse a backend timestamp into an aware datetime (naive values are taken as UTC)."""
    if isinstance(value, _dt.datetime):
        ts = value
    elif not value:
        return _now()
    else:
        text = str(value).strip().replace('Z', '+00:00')
        # PostgREST may return more than 6 fractional digits
        if '.' in text:
            head, _, tail = text.partition('.')
            digits = ''.join(ch for ch in tail if ch.isdigit())
            rest = tail[len(digits):]
            text = f"{head}.{digits[:6]}{rest}"
        ts = _dt.datetime.fromisoformat(text)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=_dt.timezone.utc)
    return ts


@dataclass
class Project:
    id: str
    user_id: str
    title: str
    status: str = 'WIP'


def project_from_dict(d: Dict[str, Any]) -> Project:
    return Project(
        id=str(d.get('id', '')),
        user_id=str(d.get('user_id', '')),
        title=d.get('title') or '',
        status=d.get('status') or '',
    )


@dataclass
class SessionRecord:
    id: str
    user_id: str
    project_id: Optional[str]
    duration_seconds: int
    created_at: _dt.datetime = field(default_factory=_now)
    image_url: Optional[str] = None
    reactions: Dict[str, int] = field(default_factory=dict)
    project_title: Optional[str] = None
    project_status: Optional[str] = None

    @property
    def reaction_total(self) -> int:
        return sum(self.reactions.values())


def session_from_dict(d: Dict[str, Any]) -> SessionRecord:
    """Build a SessionRecord from a backend row, flattening the joined `projects` object."""
    joined = d.get('projects') or {}
    reactions = {str(k): max(0, int(v or 0)) for k, v in (d.get('reactions') or {}).items()}
    return SessionRecord(
        id=str(d.get('id', '')),
        user_id=str(d.get('user_id', '')),
        project_id=d.get('project_id'),
        duration_seconds=max(0, int(d.get('duration_seconds') or 0)),
        created_at=parse_timestamp(d.get('created_at')),
        image_url=d.get('image_url'),
        reactions=reactions,
        project_title=joined.get('title'),
        project_status=joined.get('status'),
    )


@dataclass
class Notification:
    id: str
    user_id: str
    type: str
    message: str
    from_user_name: Optional[str] = None
    is_read: bool = False
    created_at: _dt.datetime = field(default_factory=_now)


def notification_from_dict(d: Dict[str, Any]) -> Notification:
    return Notification(
        id=str(d.get('id', '')),
        user_id=str(d.get('user_id', '')),
        type=d.get('type') or '',
        message=d.get('message') or '',
        from_user_name=d.get('from_user_name'),
        is_read=bool(d.get('is_read', False)),
        created_at=parse_timestamp(d.get('created_at')),
    )


@dataclass
class AuthSession:
    access_token: str
    user_id: str
    email: str
    refresh_token: Optional[str] = None
    expires_at: Optional[float] = None  # epoch seconds


@dataclass
class Thread:
    id: str
    title: str
    author: str
    replies: int
    likes: int
    time_label: str
    category: str
    pinned: bool = False


@dataclass
class ProjectSummary:
    project: Project
    image_count: int
    total_seconds: int
    last_image: Optional[str] = None


@dataclass
class ProfileStats:
    total_hours: int
    total_posts: int
    streak: int
    rank: str
    experience_points: int
    weekly_minutes: List[int] = field(default_factory=lambda: [0] * 7)
