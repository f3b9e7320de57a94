"""Save a logged-in LinkedIn session as cookies for the worker.

Usage:
    .venv/bin/python scripts/extract_cookies.py [--output config/linkedin_cookies.json]

Opens a Chromium window. Log in to LinkedIn manually, then press Enter
in the terminal. The worker loads the saved cookies (browser.cookies_path)
so jobs can skip the credential login.
"""

import argparse
import json
from pathlib import Path

from patchright.sync_api import sync_playwright

DEFAULT_OUTPUT = "config/linkedin_cookies.json"
LOGIN_URL = "https://www.linkedin.com/login"


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Save LinkedIn session cookies")
    parser.add_argument("--output", default=DEFAULT_OUTPUT, help=f"default: {DEFAULT_OUTPUT}")
    args = parser.parse_args(argv)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=False)
        context = browser.new_context()
        page = context.new_page()
        page.goto(LOGIN_URL)

        input("\n>>> Log in to LinkedIn, then press Enter here to save cookies...")

        cookies = [c for c in context.cookies() if "linkedin.com" in c.get("domain", "")]
        output.write_text(json.dumps(cookies, indent=2))
        print(f"Saved {len(cookies)} LinkedIn cookies to {output}")

        browser.close()


if __name__ == "__main__":
    main()
