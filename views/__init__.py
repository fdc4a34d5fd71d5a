"""View modules for manual routing.

This project uses a custom router in `app.py` instead of Streamlit's automatic
multi-page system. Every page lives under `views/` and exposes a `view()` function;
register new pages in `PAGE_REGISTRY` inside `app.py`. Pages flagged with
`auth: True` are only reachable with a signed-in session.
"""
