from __future__ import annotations

from collections import Counter
from typing import Any

from .feedback import feedback_summary


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    recs = [e for e in events if e["type"] == "recommendation"]
    searches = [e for e in events if e["type"] == "search"]
    comparisons = [e for e in events if e["type"] == "comparison"]
    total = len(recs)

    # Average response time
    times = [r["response_time_ms"] for r in recs if "response_time_ms" in r]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    personalized = sum(1 for r in recs if r.get("personalized"))

    # Why personalization was skipped
    fallback_counter: Counter[str] = Counter()
    for r in recs:
        if r.get("fallback_reason"):
            fallback_counter[r["fallback_reason"]] += 1

    priority_counter: Counter[str] = Counter()
    for r in recs:
        priority_counter[r.get("priority") or "none"] += 1

    # Makes users filter on in advanced search
    make_counter: Counter[str] = Counter()
    for s in searches:
        for m in s.get("makes", []) or []:
            make_counter[m] += 1
    top_searched_makes = [{"name": n, "count": c} for n, c in make_counter.most_common(10)]

    cache_hits = sum(1 for r in recs if r.get("cache_hit"))

    return {
        "total_recommendations": total,
        "personalized_rate": round(personalized / total * 100, 1) if total else 0.0,
        "avg_response_time_ms": avg_time,
        "fallback_reasons": dict(fallback_counter),
        "priority_usage": dict(priority_counter),
        "total_searches": len(searches),
        "ai_enhanced_searches": sum(1 for s in searches if s.get("ai_enhanced")),
        "top_searched_makes": top_searched_makes,
        "total_comparisons": len(comparisons),
        "cache_stats": {
            "hits": cache_hits,
            "misses": total - cache_hits,
            "hit_rate": round(cache_hits / total * 100, 1) if total else 0.0,
        },
        "feedback_summary": feedback_summary(),
    }
