from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    lookups = [e for e in events if e["type"] == "lookup"]
    batches = [e for e in events if e["type"] == "batch"]
    nearby = [e for e in events if e["type"] == "nearby"]
    total = len(lookups)

    # Average response time across every timed event
    times = [e["response_time_ms"] for e in events if "response_time_ms" in e]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Which tier answered single lookups
    source_counter: Counter[str] = Counter(e.get("source", "unknown") for e in lookups)
    memory_hits = source_counter.get("memory", 0)
    misses = sum(1 for e in lookups if not e.get("found"))

    # Per-kind volume
    kind_counter: Counter[str] = Counter(e.get("kind", "unknown") for e in lookups)

    # Most requested restaurants, single and batched
    name_counter: Counter[str] = Counter()
    for e in lookups:
        name_counter[e.get("name", "unknown")] += 1
    for e in batches:
        for name in e.get("restaurants", []) or []:
            name_counter[name] += 1
    top_restaurants = [{"name": n, "count": c} for n, c in name_counter.most_common(10)]

    return {
        "total_lookups": total,
        "total_batches": len(batches),
        "total_nearby": len(nearby),
        "avg_response_time_ms": avg_time,
        "sources": dict(source_counter),
        "kinds": dict(kind_counter),
        "memory_hit_rate": round(memory_hits / total * 100, 1) if total else 0.0,
        "not_found": misses,
        "top_restaurants": top_restaurants,
    }
