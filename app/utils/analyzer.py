from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Union

Number = Union[int, float]


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value or 0))


def _to_number(value: Decimal) -> Number:
    """Convert Decimal sums back to native numbers, like the DynamoDB layer does."""
    if value % 1 == 0:
        return int(value)
    return float(value)


def _percentage(part: Decimal, whole: Decimal) -> float:
    if whole == 0:
        return 0
    return float(part * 100 / whole)


@dataclass
class Totals:
    total_expenses: Number = 0
    total_income: Number = 0
    net: Number = 0
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalExpenses": self.total_expenses,
            "totalIncome": self.total_income,
            "netAmount": self.net,
            "transactionCount": self.count,
        }


@dataclass
class CategoryBucket:
    """Aggregated transactions for a single category."""

    category: str
    total: Number
    count: int
    percentage: float
    transactions: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def average_per_transaction(self) -> float:
        if self.count == 0:
            return 0
        return _to_number(_to_decimal(self.total) / self.count)

    def to_dict(self, include_transactions: bool = True, include_average: bool = False) -> Dict[str, Any]:
        data = asdict(self)
        if include_average:
            data["averagePerTransaction"] = self.average_per_transaction
        if not include_transactions:
            data.pop("transactions")
        return data


@dataclass
class DailyTrendPoint:
    date: str
    expenses: Number = 0
    income: Number = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class LedgerAnalyzer:
    """
    Pure aggregation over an already window-filtered list of transaction
    dicts. Nothing here touches storage, so the same instance is shared by
    every request.

    Sums are kept as Decimal while aggregating so category totals add up to
    the overall expense total exactly.
    """

    def __init__(self, top_categories_limit: int = 5, recent_limit: int = 10) -> None:
        self._top_categories_limit = top_categories_limit
        self._recent_limit = recent_limit

    def totals(self, transactions: Sequence[Dict[str, Any]]) -> Totals:
        expenses = Decimal(0)
        income = Decimal(0)
        for txn in transactions:
            amount = _to_decimal(txn.get("amount"))
            if txn.get("type") == "expense":
                expenses += amount
            elif txn.get("type") == "income":
                income += amount

        return Totals(
            total_expenses=_to_number(expenses),
            total_income=_to_number(income),
            net=_to_number(income - expenses),
            count=len(transactions),
        )

    def category_breakdown(self, transactions: Sequence[Dict[str, Any]]) -> List[CategoryBucket]:
        """
        Group by exact category string. Buckets come back in the order their
        category was first seen; members are sorted newest first.
        """
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        sums: Dict[str, Decimal] = {}
        for txn in transactions:
            category = txn["category"]
            grouped.setdefault(category, []).append(txn)
            sums[category] = sums.get(category, Decimal(0)) + _to_decimal(txn.get("amount"))

        grand_total = sum(sums.values(), Decimal(0))

        return [
            CategoryBucket(
                category=category,
                total=_to_number(sums[category]),
                count=len(items),
                percentage=_percentage(sums[category], grand_total),
                transactions=sorted(items, key=lambda t: t["date"], reverse=True),
            )
            for category, items in grouped.items()
        ]

    def top_categories(self, buckets: Sequence[CategoryBucket], n: Optional[int] = None) -> List[CategoryBucket]:
        # sorted() is stable, so ties keep bucket creation order
        limit = self._top_categories_limit if n is None else n
        return sorted(buckets, key=lambda b: b.total, reverse=True)[:limit]

    def daily_trend(self, transactions: Sequence[Dict[str, Any]]) -> List[DailyTrendPoint]:
        expenses: Dict[str, Decimal] = {}
        income: Dict[str, Decimal] = {}
        for txn in transactions:
            day = txn["date"]
            expenses.setdefault(day, Decimal(0))
            income.setdefault(day, Decimal(0))
            amount = _to_decimal(txn.get("amount"))
            if txn.get("type") == "expense":
                expenses[day] += amount
            else:
                income[day] += amount

        # YYYY-MM-DD sorts correctly as a string
        return [
            DailyTrendPoint(date=day, expenses=_to_number(expenses[day]), income=_to_number(income[day]))
            for day in sorted(expenses)
        ]

    def recent_transactions(self, transactions: Sequence[Dict[str, Any]], n: Optional[int] = None) -> List[Dict[str, Any]]:
        """First ``n`` transactions; the input is expected newest first already."""
        limit = self._recent_limit if n is None else n
        return list(transactions[:limit])

    def summarize(self, transactions: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        return self.totals(transactions).to_dict()

    def analyze(self, transactions: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        expenses = [txn for txn in transactions if txn.get("type") == "expense"]
        buckets = self.category_breakdown(expenses)
        return {
            "summary": self.totals(transactions).to_dict(),
            "topCategories": [
                bucket.to_dict(include_transactions=False)
                for bucket in self.top_categories(buckets)
            ],
            "dailyTrend": [point.to_dict() for point in self.daily_trend(transactions)],
            "recentTransactions": self.recent_transactions(transactions),
        }

    def category_analysis(
        self,
        transactions: Sequence[Dict[str, Any]],
        category: Optional[str] = None,
    ) -> Dict[str, Any]:
        expenses = [txn for txn in transactions if txn.get("type") == "expense"]
        if category:
            expenses = [txn for txn in expenses if txn["category"] == category]

        buckets = self.category_breakdown(expenses)
        buckets = self.top_categories(buckets, n=len(buckets))
        return {
            "totalExpenses": self.totals(expenses).total_expenses,
            "categoryCount": len(buckets),
            "categories": [bucket.to_dict(include_average=True) for bucket in buckets],
            "filteredBy": category,
        }
