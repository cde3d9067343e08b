"""User-agent signature matching for headless browsers, bots, and HTTP libraries."""

import re

BOT_SIGNATURES: tuple[str, ...] = (
    # Headless engines and browser automation
    "headlesschrome",
    "puppeteer",
    "selenium",
    "phantomjs",
    "chromium",
    "webdriver",
    "headless",
    # Generic crawlers
    "bot",
    "crawler",
    "spider",
    "scraper",
    # HTTP client libraries and CLI tools
    "curl",
    "wget",
    "httpclient",
    "python",
    "java/",
    "node",
    "go-http-client",
    "axios",
    "requests",
    "urllib",
    "jsdom",
)

_SIGNATURE_PATTERN = re.compile("|".join(re.escape(token) for token in BOT_SIGNATURES))


def match_signature(signal: str | None) -> str | None:
    """Return the first known automation token found in *signal*, if any."""
    if not signal or signal.isspace():
        return None
    match = _SIGNATURE_PATTERN.search(signal.lower())
    return match.group(0) if match else None


def is_suspicious_signal(signal: str | None) -> bool:
    """Check whether *signal* looks like automated traffic.

    A missing or blank signal counts as suspicious.
    """
    if not signal or signal.isspace():
        return True
    return match_signature(signal) is not None
