"""Exit-reason classification rules.

Rules are evaluated top to bottom against the lower-cased free-text
reason; the first predicate that matches decides the category.
"""

import re
from typing import Callable, Optional

from tradelog.models.trade import ExitReason


def _phrase(phrase: str) -> Callable[[str], bool]:
    return lambda text: phrase in text


def _word(token: str) -> Callable[[str], bool]:
    pattern = re.compile(rf"\b{re.escape(token)}\b")
    return lambda text: pattern.search(text) is not None


EXIT_REASON_RULES: list[tuple[Callable[[str], bool], ExitReason]] = [
    (_phrase("predictive exit"), "MANUAL"),
    (_phrase("stop loss"), "SL"),
    (_word("sl"), "SL"),
    (_phrase("take profit"), "TP"),
    (_word("tp"), "TP"),
]


def classify_exit_reason(marker: Optional[str], reason_text: Optional[str]) -> ExitReason:
    """Classify an exit from its explicit marker or free-text reason.

    Args:
        marker: Explicit ``TP``/``SL`` tag from the close line, if any.
        reason_text: Free-text reason from the close line, if any.

    Returns:
        ``"TP"``, ``"SL"`` or ``"MANUAL"``.
    """
    if marker:
        tag = marker.upper()
        if tag in ("TP", "SL"):
            return tag

    text = (reason_text or "").lower()
    for predicate, reason in EXIT_REASON_RULES:
        if predicate(text):
            return reason
    return "MANUAL"
