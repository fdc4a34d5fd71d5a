"""
This module contains centralized constants used throughout the application,
ensuring a single source of truth for values like reaction kinds, board categories
and ranking thresholds.
"""

# Backend table / bucket / function names
SESSIONS_TABLE = "process_logs"
PROJECTS_TABLE = "projects"
NOTIFICATIONS_TABLE = "notifications"
EVIDENCE_BUCKET = "evidence"
INCREMENT_REACTION_FN = "increment_reaction"

# Reaction kinds shown under every feed post (kind -> emoji)
REACTIONS = {
    "fire": "🔥",
    "sparkle": "✨",
    "heart": "❤️",
    "muscle": "💪",
}

# Notification type -> icon
NOTIFICATION_ICONS = {
    "reaction": "🔥",
    "sparkle": "✨",
    "heart": "❤️",
}
NOTIFICATION_FETCH_LIMIT = 20

# Authentication
MIN_PASSWORD_LENGTH = 12

# Effort score
DURATION_WEIGHT = 0.1
STREAK_WEIGHT = 100
NEW_CREATOR_POST_LIMIT = 5
NEW_CREATOR_BOOST = 1.5

# Profile rank thresholds (total hours)
RANK_THRESHOLDS = [
    (100, "Master"),
    (30, "Intermediate"),
    (0, "Rookie"),
]
XP_PER_POST = 10

# Weekly histogram labels, Monday first
WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# Image optimization defaults
RESIZE_MAX_SIZE = 1200
RESIZE_QUALITY = 0.8

# Project created implicitly on first save
DEFAULT_PROJECT_TITLE = "My practice"
DEFAULT_PROJECT_STATUS = "WIP"

# Feed tabs
FEED_TABS = {
    "popular": "Popular",
    "rookie": "Rookies",
    "following": "Following",
}

# Discussion board
BOARD_ALL = "All"
BOARD_CATEGORIES = [BOARD_ALL, "Question", "Consult", "Tips", "Report", "Chat", "Recruit"]

# Weekly missions on the home screen: (label, metric, target)
WEEKLY_MISSIONS = [
    ("Record 3 hours in total", "minutes", 180),
    ("Post 2 pieces with evidence", "images", 2),
    ("Keep a 5 day streak", "streak", 5),
]
