import datetime as dt


def format_time(sec: int) -> str:
    """HH:MM:SS for the stopwatch display."""
    sec = max(0, int(sec))
    h, rem = divmod(sec, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_hours(sec: int) -> str:
    h = sec // 3600
    m = (sec % 3600) // 60
    return f"{h}h {m}m" if h > 0 else f"{m}m"


def time_ago(created_at: dt.datetime, now: dt.datetime) -> str:
    mins = int((now - created_at).total_seconds() // 60)
    if mins < 1:
        return "just now"
    if mins < 60:
        return f"{mins} min ago"
    hours = mins // 60
    if hours < 24:
        return f"{hours} h ago"
    return f"{hours // 24} d ago"
