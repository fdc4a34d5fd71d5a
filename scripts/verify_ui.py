"""Browser smoke check against a running app (streamlit run app.py).

Requires the `verify` extra (playwright) and `playwright install chromium`.
"""
import os
import time

from playwright.sync_api import sync_playwright, expect

BASE_URL = os.environ.get("ART_APP_URL", "http://localhost:8501")
EMAIL = os.environ.get("ART_APP_VERIFY_EMAIL", "demo@example.com")
PASSWORD = os.environ.get("ART_APP_VERIFY_PASSWORD", "demo-password-123")


def run_verification():
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=True)
        page = browser.new_page()

        time.sleep(5)  # wait for streamlit to start
        page.goto(BASE_URL)

        # 1. Entry guard: unauthenticated visitors land on the sign-in screen
        expect(page.get_by_text("ART APP")).to_be_visible()

        # 2. Sign in
        page.get_by_label("Email").fill(EMAIL)
        page.get_by_label("Password").fill(PASSWORD)
        page.get_by_role("button", name="Sign in").click()
        page.wait_for_load_state('networkidle')
        expect(page.get_by_text("00:00:00")).to_be_visible()
        page.screenshot(path="verify_01_home.png")

        # 3. Start and stop the stopwatch
        page.get_by_role("button", name="▶ START").click()
        time.sleep(2.5)
        page.get_by_role("button", name="■ STOP").click()
        expect(page.get_by_role("button", name="💾 Save session", exact=False)).to_be_visible()
        page.screenshot(path="verify_02_stopped.png")

        # 4. Visit the other screens
        for label in ["🖼️ Board", "📁 Portfolio", "💬 Consult", "🙍 Profile"]:
            page.get_by_text(label).click()
            page.wait_for_load_state('networkidle')
            page.screenshot(path=f"verify_{label.split()[-1].lower()}.png")

        browser.close()


if __name__ == "__main__":
    run_verification()
