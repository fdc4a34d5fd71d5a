"""
This package provides a collection of reusable UI components for the Streamlit application.

It is organized into several modules, each containing a specific category of components:
- `base`: CSS injection and small HTML badges.
- `cards`: Larger blocks for feed posts, projects, stats, threads and notifications.
- `notifications`: The notification bell shown on every signed-in screen.
- `timer`: Stopwatch clock and the "recording" mini bar.

By importing the components here, we provide a single, consistent access point
for the rest of the application (`from ui.components import ...`).
"""

from .base import (
    inject_base_css,
    badge,
    rank_badge,
)

from .cards import (
    stat_card,
    session_tile,
    project_card,
    thread_card,
    notification_row,
)

from .notifications import (
    notification_bell,
)

from .timer import (
    timer_bar,
    clock,
)
