import datetime as dt
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from domain.constants import (
    DURATION_WEIGHT, NEW_CREATOR_BOOST, NEW_CREATOR_POST_LIMIT, STREAK_WEIGHT,
)
from domain.models import SessionRecord
from services.stats import login_streak


@dataclass
class ScoredSession:
    record: SessionRecord
    score: float
    streak: int
    author_post_count: int

    @property
    def is_new_creator(self) -> bool:
        return self.author_post_count < NEW_CREATOR_POST_LIMIT


def effort_score(record: SessionRecord, streak: int, author_post_count: int) -> float:
    """duration * 0.1 + streak * 100 + reactions, boosted 1.5x for authors with < 5 posts."""
    score = record.duration_seconds * DURATION_WEIGHT + streak * STREAK_WEIGHT + record.reaction_total
    if author_post_count < NEW_CREATOR_POST_LIMIT:
        score *= NEW_CREATOR_BOOST
    return score


def author_streaks(records: Sequence[SessionRecord], tz: dt.tzinfo, today: Optional[dt.date] = None) -> Dict[str, int]:
    by_author: Dict[str, List[SessionRecord]] = defaultdict(list)
    for r in records:
        by_author[r.user_id].append(r)
    return {uid: login_streak(rs, tz, today=today) for uid, rs in by_author.items()}


def rank_sessions(records: Sequence[SessionRecord], tz: dt.tzinfo, today: Optional[dt.date] = None) -> List[ScoredSession]:
    """Score every record and sort by score, highest first.

    Post counts and streaks are computed per author from the same list. The sort is
    stable, so equal scores keep the order of the input.
    """
    counts = Counter(r.user_id for r in records)
    streaks = author_streaks(records, tz, today=today)
    scored = [
        ScoredSession(
            record=r,
            score=effort_score(r, streaks.get(r.user_id, 0), counts[r.user_id]),
            streak=streaks.get(r.user_id, 0),
            author_post_count=counts[r.user_id],
        )
        for r in records
    ]
    return sorted(scored, key=lambda s: s.score, reverse=True)


def feed_for_tab(ranked: Sequence[ScoredSession], tab: str) -> List[ScoredSession]:
    """popular: by score; rookie: by score, new creators only; following: newest first."""
    if tab == 'rookie':
        return [s for s in ranked if s.is_new_creator]
    if tab == 'following':
        return sorted(ranked, key=lambda s: s.record.created_at, reverse=True)
    return list(ranked)
