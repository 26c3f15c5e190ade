"""
Session-based rate limiting for browse, download and upload actions.

Design decisions:
- Sliding window algorithm: Smoother than fixed windows, no burst at boundaries
- Streamlit session_state storage: No external dependencies, per-session isolation
- deque for O(1) operations: Efficient timestamp management
- Named rules: each action has its own bucket and budget

Default budgets (15 minute window):
- browse: 100 listings
- download: 20 downloads
- upload: 10 uploads

Limitations:
- Per-session, not per-client IP: refresh browser = new quota
- In-memory: Lost on server restart
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, MutableMapping

from .settings import Settings

_BUCKET_PREFIX = "rate_limit:"


@dataclass(frozen=True)
class RateRule:
    """Budget for one kind of action."""

    name: str
    max_requests: int
    window_seconds: int
    message: str = "Too many requests, please try again later."


def rules_from_settings(settings: Settings) -> dict[str, RateRule]:
    """Build the browse/download/upload rules from settings."""
    window = settings.rate_limit_window_seconds
    return {
        "browse": RateRule("browse", settings.rate_limit_browse, window),
        "download": RateRule(
            "download",
            settings.rate_limit_download,
            window,
            "Too many download requests, please try again later.",
        ),
        "upload": RateRule(
            "upload",
            settings.rate_limit_upload,
            window,
            "Too many upload requests, please try again later.",
        ),
    }


def check_rate_limit(
    session_state: MutableMapping[str, Any],
    rule: RateRule,
    now: float | None = None,
) -> tuple[bool, int]:
    """
    Record one request against *rule* if it fits the sliding window.

    Args:
        session_state: Streamlit session state or similar mutable mapping
        rule: Budget to check
        now: Current time (seconds), defaults to time.time()

    Returns:
        Tuple of (allowed, retry_after_seconds)

    Usage:
        allowed, retry = check_rate_limit(st.session_state, rules["download"])
        if not allowed:
            st.warning(f"{rule.message} Retry in {retry}s")
    """
    if rule.max_requests <= 0:
        return False, max(1, rule.window_seconds)

    now = time.time() if now is None else now
    key = _BUCKET_PREFIX + rule.name
    dq: Deque[float] | None = session_state.get(key)
    if dq is None:
        dq = deque()
        session_state[key] = dq

    cutoff = now - rule.window_seconds
    while dq and dq[0] < cutoff:
        dq.popleft()

    if len(dq) >= rule.max_requests:
        retry_after = int(dq[0] + rule.window_seconds - now) + 1
        return False, max(1, retry_after)

    dq.append(now)
    return True, 0
