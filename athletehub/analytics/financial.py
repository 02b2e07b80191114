"""
Financial summaries: period totals, category splits, monthly trend,
investment and sponsorship roll-ups, a simplified tax estimate and
rule-based recommendations.
"""
from collections import defaultdict
from datetime import datetime
from typing import Iterable, List, Optional

from athletehub.analytics.periods import months_ago
from athletehub.utils.serialize import as_utc

TAX_DISCLAIMER = (
    "This is a simplified tax estimate and should not be used for official tax "
    "filing purposes. Please consult a tax professional."
)

# (upper bound, base tax, marginal rate, bracket floor)
TAX_BRACKETS = (
    (10000, 0, 0.10, 0),
    (50000, 1000, 0.15, 10000),
    (100000, 7000, 0.25, 50000),
    (None, 19500, 0.35, 100000),
)

RECENT_MONTHS = 3
TARGET_SAVINGS_RATE = 20
MIN_MONTHLY_SAVINGS = 1000
MIN_INVESTMENT_TYPES = 3


def _in_period(item: dict, year: Optional[int], month: Optional[int]) -> bool:
    d = as_utc(item.get("date"))
    if d is None:
        return year is None
    if year is not None and d.year != year:
        return False
    if year is not None and month is not None and d.month != month:
        return False
    return True


def _total(items: Iterable[dict]) -> float:
    return sum(i.get("amount") or 0 for i in items)


def _by_category(items: Iterable[dict]) -> dict:
    out = defaultdict(float)
    for i in items:
        out[i.get("category")] += i.get("amount") or 0
    return dict(out)


def monthly_trends(income: List[dict], expenses: List[dict]) -> List[dict]:
    months = defaultdict(lambda: {"income": 0.0, "expenses": 0.0, "net": 0.0})
    for i in income:
        d = as_utc(i["date"])
        row = months[f"{d.year}-{d.month:02d}"]
        row["income"] += i["amount"]
        row["net"] += i["amount"]
    for e in expenses:
        d = as_utc(e["date"])
        row = months[f"{d.year}-{d.month:02d}"]
        row["expenses"] += e["amount"]
        row["net"] -= e["amount"]
    return [{"month": k, **months[k]} for k in sorted(months)]


def summarize(financial: dict, year: Optional[int] = None, month: Optional[int] = None) -> dict:
    income = [i for i in financial.get("income") or [] if _in_period(i, year, month)]
    expenses = [e for e in financial.get("expenses") or [] if _in_period(e, year, month)]
    total_income = _total(income)
    total_expenses = _total(expenses)

    investments = financial.get("investments") or []
    invested = _total(investments)
    current = sum(i.get("current_value", i.get("amount")) or 0 for i in investments)

    active = [s for s in financial.get("sponsorships") or [] if s.get("status") == "active"]

    goals = []
    for g in financial.get("goals") or []:
        progress = 0.0
        target = g.get("target_amount") or 0
        if target > 0:
            if g.get("type") == "savings":
                progress = (total_income - total_expenses) / target * 100
            elif g.get("type") == "income":
                progress = total_income / target * 100
        goals.append({
            "_id": g.get("_id"),
            "name": g.get("name"),
            "type": g.get("type"),
            "target_amount": target,
            "progress": min(100.0, progress),
            "status": g.get("status"),
        })

    return {
        "summary": {
            "total_income": total_income,
            "total_expenses": total_expenses,
            "net_income": total_income - total_expenses,
            "savings_rate": (total_income - total_expenses) / total_income * 100 if total_income > 0 else 0,
        },
        "income_by_category": _by_category(income),
        "expenses_by_category": _by_category(expenses),
        "trends": monthly_trends(financial.get("income") or [], financial.get("expenses") or []),
        "investments": {
            "total_invested": invested,
            "current_value": current,
            "growth": current - invested,
            "return_percentage": (current - invested) / invested * 100 if invested > 0 else 0,
        },
        "sponsorships": {
            "active": len(active),
            "total_value": sum(s.get("value") or 0 for s in active),
        },
        "goal_progress": goals,
    }


def estimate_tax(taxable_income: float) -> float:
    for upper, base, rate, floor in TAX_BRACKETS:
        if upper is None or taxable_income <= upper:
            return base + (taxable_income - floor) * rate
    return 0.0


def tax_summary(financial: dict, year: int) -> dict:
    income = [i for i in financial.get("income") or [] if _in_period(i, year, None)]
    deductible = [
        e for e in financial.get("expenses") or []
        if _in_period(e, year, None) and e.get("tax_deductible")
    ]
    total_income = _total(income)
    deductions = _total(deductible)
    taxable = max(total_income - deductions, 0)
    tax = estimate_tax(taxable)
    return {
        "year": year,
        "total_income": total_income,
        "deductible_expenses": deductions,
        "taxable_income": taxable,
        "estimated_tax": tax,
        "effective_tax_rate": tax / taxable * 100 if taxable > 0 else 0,
        "income_by_type": _by_category(income),
        "deductions_by_type": _by_category(deductible),
        "disclaimer": TAX_DISCLAIMER,
    }


def recommendations(financial: dict, now: datetime) -> dict:
    cutoff = months_ago(now, RECENT_MONTHS)
    recent_income = _total(i for i in financial.get("income") or [] if as_utc(i["date"]) >= cutoff)
    recent_expenses = _total(e for e in financial.get("expenses") or [] if as_utc(e["date"]) >= cutoff)
    monthly_savings = (recent_income - recent_expenses) / RECENT_MONTHS
    savings_rate = (recent_income - recent_expenses) / recent_income * 100 if recent_income > 0 else 0

    recs = {
        "budgeting": [],
        "savings": [],
        "investments": [],
        "tax_planning": [],
        "retirement_planning": [],
    }

    if recent_expenses > recent_income:
        recs["budgeting"].append(
            "Your expenses exceed your income. Review your budget to identify areas where you can reduce spending."
        )
    if savings_rate < TARGET_SAVINGS_RATE:
        recs["budgeting"].append(
            "Your savings rate is below the recommended 20%. "
            "Consider increasing your savings by reducing discretionary spending."
        )

    by_category = _by_category(financial.get("expenses") or [])
    if by_category:
        top = max(by_category, key=by_category.get)
        recs["budgeting"].append(
            f"Your highest expense category is {top}. Review these expenses to identify potential savings."
        )

    if monthly_savings < MIN_MONTHLY_SAVINGS:
        recs["savings"].append(
            "Consider setting up an automatic transfer to a savings account to build your emergency fund."
        )

    investments = financial.get("investments") or []
    if not investments:
        recs["investments"].append("Consider starting an investment portfolio to grow your wealth over time.")
    elif len({i.get("type") for i in investments}) < MIN_INVESTMENT_TYPES:
        recs["investments"].append(
            "Your investment portfolio could benefit from greater diversification. "
            "Consider adding different asset classes."
        )

    recs["tax_planning"].append(
        "Keep track of all potential tax deductions related to your athletic career, "
        "including training expenses and equipment."
    )
    recs["tax_planning"].append("Consider consulting with a tax professional who specializes in working with athletes.")
    recs["retirement_planning"].append(
        "Start planning for your post-athletic career early. Consider setting up a retirement account."
    )
    recs["retirement_planning"].append(
        "As an athlete, your peak earning years may be earlier than in other professions. "
        "Plan your long-term finances accordingly."
    )

    return {
        "recommendations": recs,
        "financial_summary": {
            "recent_monthly_income": recent_income / RECENT_MONTHS,
            "recent_monthly_expenses": recent_expenses / RECENT_MONTHS,
            "monthly_savings": monthly_savings,
            "savings_rate": savings_rate,
        },
    }
