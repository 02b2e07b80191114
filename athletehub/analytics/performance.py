"""
Aggregations over an athlete's performance records.

Records carry `metrics` as a list of {name, value, unit}; only numeric
values take part in averages.
"""
from collections import OrderedDict
from typing import Dict, List, Optional

from athletehub.utils.serialize import as_utc

# Reference values until per-sport benchmark data exists
BENCHMARKS = {
    "speed": {"average": 15, "top": 20},
    "strength": {"average": 70, "top": 90},
    "endurance": {"average": 65, "top": 85},
}

STRENGTH_THRESHOLD = 80
WEAKNESS_THRESHOLD = 50


def metric_values(record: dict) -> Dict[str, float]:
    values = {}
    for m in record.get("metrics") or []:
        v = m.get("value")
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            continue
        values[m.get("name")] = float(v)
    return values


def _averages(records: List[dict], only: Optional[str] = None) -> Dict[str, float]:
    buckets: Dict[str, List[float]] = OrderedDict()
    for r in records:
        for name, v in metric_values(r).items():
            if only and name != only:
                continue
            buckets.setdefault(name, []).append(v)
    return {k: sum(vs) / len(vs) for k, vs in buckets.items() if vs}


def _by_date(records: List[dict]) -> List[dict]:
    return sorted(records, key=lambda r: as_utc(r["date"]))


def summarize(records: List[dict]) -> dict:
    """Per-metric averages plus first-to-last change across the window."""
    ordered = _by_date(records)
    analytics = {
        "total_records": len(ordered),
        "average_scores": _averages(ordered),
        "trends": {},
    }
    if len(ordered) >= 2:
        first, last = metric_values(ordered[0]), metric_values(ordered[-1])
        for name, start in first.items():
            if name not in last:
                continue
            change = last[name] - start
            analytics["trends"][name] = {
                "change": change,
                "percent_change": (change / start) * 100 if start else None,
            }
    return analytics


def compare_with_benchmarks(records: List[dict]) -> dict:
    """Average over the given records against the reference table."""
    comparison = {"metrics": _averages(records), "benchmarks": {}, "percentiles": {}}
    for name, avg in comparison["metrics"].items():
        bench = BENCHMARKS.get(name)
        if not bench:
            continue
        comparison["benchmarks"][name] = bench
        comparison["percentiles"][name] = min(100.0, (avg / bench["top"]) * 100)
    return comparison


def _interval_key(record: dict, interval: Optional[str]) -> str:
    d = as_utc(record["date"])
    if interval == "week":
        year, week, _ = d.isocalendar()
        return f"{year}-W{week:02d}"
    if interval == "month":
        return f"{d.year}-{d.month:02d}"
    return d.date().isoformat()


def trends(records: List[dict], metric: Optional[str] = None, interval: Optional[str] = None) -> List[dict]:
    grouped: Dict[str, List[dict]] = OrderedDict()
    for r in _by_date(records):
        grouped.setdefault(_interval_key(r, interval), []).append(r)
    return [
        {"interval": key, "averages": _averages(bucket, only=metric)}
        for key, bucket in grouped.items()
    ]


def recommendations(records: List[dict]) -> dict:
    recs = {
        "strengths": [],
        "areas_for_improvement": [],
        "training_recommendations": [],
        "nutrition_recommendations": [],
    }
    if not records:
        recs["training_recommendations"].append("Record more performance data for personalized recommendations")
        return recs

    for name, avg in _averages(records).items():
        if avg > STRENGTH_THRESHOLD:
            recs["strengths"].append(f"Strong performance in {name}")
        elif avg < WEAKNESS_THRESHOLD:
            recs["areas_for_improvement"].append(f"Focus on improving {name}")
            recs["training_recommendations"].append(f"Increase training frequency for {name}")

    recs["training_recommendations"].append("Maintain consistent training schedule")
    recs["nutrition_recommendations"].append("Ensure adequate protein intake for recovery")
    recs["nutrition_recommendations"].append("Stay hydrated during training sessions")
    return recs
