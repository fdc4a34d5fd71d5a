from typing import List

from domain.constants import BOARD_ALL
from domain.models import Thread

THREADS = [
    Thread("1", "I can't figure out how to shade in my sketches...", "Beginner A", 12, 8, "2 min ago", "Question", pinned=True),
    Thread("2", "Which pen tablet would you recommend?", "Pen hunter", 24, 15, "15 min ago", "Consult"),
    Thread("3", "Tips for a watercolor look in digital painting", "Senior B", 7, 32, "1 h ago", "Tips"),
    Thread("4", "What happened after practicing 30 minutes every day", "Hard worker C", 45, 128, "3 h ago", "Report"),
    Thread("5", "Anyone else struggling with coloring?", "D", 18, 22, "5 h ago", "Chat"),
    Thread("6", "How to set up perspective for background art", "Architecture fan E", 9, 41, "8 h ago", "Tips"),
    Thread("7", "What do you do when motivation runs out?", "Worried F", 31, 56, "1 d ago", "Consult"),
    Thread("8", "Looking for people to join a croquis session!", "Host G", 14, 19, "1 d ago", "Recruit", pinned=True),
]


def filter_threads(category: str, threads: List[Thread] = THREADS) -> List[Thread]:
    """Threads in `category` (or all), pinned ones first, otherwise in posting order."""
    selected = threads if category == BOARD_ALL else [t for t in threads if t.category == category]
    return sorted(selected, key=lambda t: not t.pinned)
