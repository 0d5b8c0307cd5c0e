from __future__ import annotations

import time
from typing import Any

_feedback: list[dict[str, Any]] = []


def record_feedback(user_id: int, car_id: int, is_positive: bool) -> None:
    _feedback.append({
        "user_id": user_id,
        "car_id": car_id,
        "is_positive": is_positive,
        "timestamp": time.time(),
    })


def get_feedback() -> list[dict[str, Any]]:
    return _feedback


def feedback_summary() -> dict[str, Any]:
    positive = sum(1 for f in _feedback if f["is_positive"])
    negative = len(_feedback) - positive
    return {
        "total": len(_feedback),
        "positive": positive,
        "negative": negative,
        "satisfaction_rate": round(positive / len(_feedback) * 100, 1) if _feedback else 0.0,
    }


def clear_feedback() -> None:
    _feedback.clear()
