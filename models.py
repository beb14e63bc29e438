# bucketlist_advisor/models.py

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Dict, List, Any, Tuple

from .config import DEFAULT_CURRENCY, DEFAULT_REJECTION_REASONS


def to_money(value: Any) -> Decimal:
    """Parse a JSON number/string into Decimal. Missing, junk or non-finite values count as 0."""
    if value is None:
        return Decimal("0")
    try:
        money = Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")
    return money if money.is_finite() else Decimal("0")


class Verdict(str, Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


@dataclass(frozen=True)
class LineItem:
    name: str
    description: str
    amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "price": float(self.amount),
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "LineItem":
        # priceBreakdown uses name/price, budgetBreakdown uses category/amount
        name = d.get("name") or d.get("category") or ""
        amount = d["price"] if "price" in d else d.get("amount")
        return LineItem(
            name=name,
            description=d.get("description") or "",
            amount=to_money(amount),
        )


@dataclass(frozen=True)
class PriceBreakdown:
    """
    Normalized cost of a suggestion.

    `declared_total` is whatever total the server sent (None if it sent
    none). `total_cost` is always the line-item sum.
    """

    line_items: Tuple[LineItem, ...]
    currency: str = DEFAULT_CURRENCY
    declared_total: Optional[Decimal] = None

    @property
    def total_cost(self) -> Decimal:
        return sum((item.amount for item in self.line_items), Decimal("0"))

    @property
    def is_consistent(self) -> bool:
        if self.declared_total is None:
            return True
        return self.declared_total == self.total_cost

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lineItems": [item.to_dict() for item in self.line_items],
            "currency": self.currency,
            "totalCost": float(self.total_cost),
        }


def normalize_price(d: Dict[str, Any]) -> PriceBreakdown:
    """
    Build one PriceBreakdown from either suggestion shape:

    - {"priceBreakdown": {"lineItems": [...], "currency": .., "totalCost": ..}}
    - {"budgetBreakdown": [...], "estimatedCost": .., "priceBand": ..}

    A legacy body with only `estimatedCost` becomes a single line item.
    """
    pb = d.get("priceBreakdown")
    if pb:
        items = tuple(LineItem.from_dict(li) for li in pb.get("lineItems") or [])
        declared = pb.get("totalCost")
        return PriceBreakdown(
            line_items=items,
            currency=pb.get("currency") or DEFAULT_CURRENCY,
            declared_total=to_money(declared) if declared is not None else None,
        )

    items = tuple(LineItem.from_dict(li) for li in d.get("budgetBreakdown") or [])
    estimated = d.get("estimatedCost")

    if not items and estimated is not None:
        items = (LineItem("Estimated cost", d.get("priceBand") or "", to_money(estimated)),)

    return PriceBreakdown(
        line_items=items,
        currency=d.get("currency") or DEFAULT_CURRENCY,
        declared_total=to_money(estimated) if estimated is not None else None,
    )


@dataclass(frozen=True)
class Suggestion:
    id: str
    title: str
    description: str
    category: Optional[str]
    price: PriceBreakdown
    rejection_reasons: Tuple[str, ...] = ()

    @property
    def total_cost(self) -> Decimal:
        return self.price.total_cost

    @property
    def currency(self) -> str:
        return self.price.currency

    def reason_menu(self) -> List[str]:
        return list(self.rejection_reasons) or list(DEFAULT_REJECTION_REASONS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "priceBreakdown": self.price.to_dict(),
            "rejectionReasons": list(self.rejection_reasons),
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Suggestion":
        return Suggestion(
            id=str(d["id"]),
            title=d.get("title") or "",
            description=d.get("description") or "",
            category=d.get("category"),
            price=normalize_price(d),
            rejection_reasons=tuple(d.get("rejectionReasons") or ()),
        )


@dataclass(frozen=True)
class RejectedSuggestion:
    suggestion: Suggestion
    reason: Optional[str]
    is_custom_reason: bool = False
    rejected_at: Optional[str] = None

    @property
    def id(self) -> str:
        return self.suggestion.id

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RejectedSuggestion":
        return RejectedSuggestion(
            suggestion=Suggestion.from_dict(d),
            reason=d.get("reason"),
            is_custom_reason=bool(d.get("isCustomReason", d.get("customReason", False))),
            rejected_at=d.get("rejectedAt"),
        )


@dataclass(frozen=True)
class Profile:
    profile_id: str
    gender: str
    age: int
    capital: Decimal
    mode: Optional[str] = None
    summary: str = ""

    @staticmethod
    def from_response(
        d: Dict[str, Any], gender: str, age: int, capital: Decimal, mode: Optional[str]
    ) -> "Profile":
        """Merge the creation response with what was submitted."""
        echoed = d.get("capital")
        return Profile(
            profile_id=str(d["profileId"]),
            gender=gender,
            age=age,
            capital=to_money(echoed) if echoed is not None else capital,
            mode=d.get("mode") or mode,
            summary=d.get("profileSummary") or "",
        )


@dataclass(frozen=True)
class QueueKey:
    profile_id: str
    category: Optional[str] = None
    mode: Optional[str] = None

    def params(self) -> Dict[str, str]:
        p = {}
        if self.category:
            p["category"] = self.category
        if self.mode:
            p["mode"] = self.mode
        return p


@dataclass(frozen=True)
class FeedbackRecord:
    profile_id: str
    suggestion_id: str
    verdict: Verdict
    reason: Optional[str] = None
    is_custom_reason: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profileId": self.profile_id,
            "suggestionId": self.suggestion_id,
            "verdict": self.verdict.value,
            "reason": self.reason,
            "isCustomReason": self.is_custom_reason,
        }


@dataclass(frozen=True)
class RefreshEvent:
    profile_id: str
    suggestion_id: str
    verdict: Verdict
