"""
Data models for Patungan - bill items, unit assignments and settlements
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Dict, Optional, Any

from config import CURRENCY_DEFAULT
from constants import ZERO


class SplitStrategy(str, Enum):
    """How tax and tip are distributed across participants"""
    PAYER_PAYS_ALL = "PAYER_PAYS_ALL"
    SPLIT_EQUALLY = "SPLIT_EQUALLY"


@dataclass
class Participant:
    """A person sharing the bill"""
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name}


@dataclass
class Assignment:
    """Units of a line item consumed by one participant"""
    participant_id: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {'participant_id': self.participant_id, 'count': self.count}


@dataclass
class LineItem:
    """Represents a single priced line on the bill"""
    id: str
    name: str
    unit_price: Decimal
    quantity: int = 1
    assignments: List[Assignment] = field(default_factory=list)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def assigned_units(self) -> int:
        return sum(a.count for a in self.assignments)

    @property
    def unassigned_units(self) -> int:
        return self.quantity - self.assigned_units

    def count_for(self, participant_id: str) -> int:
        """Units held by a participant, 0 if none"""
        for assignment in self.assignments:
            if assignment.participant_id == participant_id:
                return assignment.count
        return 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'unit_price': str(self.unit_price),
            'quantity': self.quantity,
            'assignments': [a.to_dict() for a in self.assignments],
        }


@dataclass(frozen=True)
class BillPolicy:
    """Payer and tax/tip distribution for a bill"""
    payer_id: Optional[str] = None
    tax_amount: Decimal = ZERO
    tip_amount: Decimal = ZERO
    split_strategy: SplitStrategy = SplitStrategy.SPLIT_EQUALLY

    @property
    def extras(self) -> Decimal:
        return self.tax_amount + self.tip_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            'payer_id': self.payer_id,
            'tax_amount': str(self.tax_amount),
            'tip_amount': str(self.tip_amount),
            'split_strategy': self.split_strategy.value,
        }


@dataclass(frozen=True)
class Settlement:
    """Represents a payment settlement to the payer"""
    from_person: str
    to_person: str
    amount: Decimal
    currency: str = CURRENCY_DEFAULT

    def to_dict(self) -> Dict[str, Any]:
        return {
            'from': self.from_person,
            'to': self.to_person,
            'amount': str(self.amount),
            'currency': self.currency,
        }


@dataclass(frozen=True)
class ItemShare:
    """One item line inside a person's breakdown"""
    item_id: str
    item_name: str
    units: int
    unit_price: Decimal
    amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'item_id': self.item_id,
            'item_name': self.item_name,
            'units': self.units,
            'unit_price': str(self.unit_price),
            'amount': str(self.amount),
        }


@dataclass(frozen=True)
class PersonBreakdown:
    """How a participant's share was put together"""
    participant_id: str
    name: str
    items: List[ItemShare]
    items_subtotal: Decimal
    tax_tip_share: Decimal
    total: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'participant_id': self.participant_id,
            'name': self.name,
            'items': [i.to_dict() for i in self.items],
            'items_subtotal': str(self.items_subtotal),
            'tax_tip_share': str(self.tax_tip_share),
            'total': str(self.total),
        }


@dataclass(frozen=True)
class UnassignedUnits:
    """Units of an item nobody is charged for"""
    item_id: str
    item_name: str
    units: int
    amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'item_id': self.item_id,
            'item_name': self.item_name,
            'units': self.units,
            'amount': str(self.amount),
        }


@dataclass(frozen=True)
class SettlementResult:
    """Owed shares and settlements computed for a bill"""
    per_person_share: Dict[str, Decimal]
    grand_total: Decimal
    settlements: List[Settlement]
    payer_name: str
    tax_amount: Decimal = ZERO
    tip_amount: Decimal = ZERO
    split_strategy: SplitStrategy = SplitStrategy.SPLIT_EQUALLY
    breakdown: List[PersonBreakdown] = field(default_factory=list)
    unassigned: List[UnassignedUnits] = field(default_factory=list)
    currency: str = CURRENCY_DEFAULT

    def to_dict(self) -> Dict[str, Any]:
        return {
            'payer_name': self.payer_name,
            'currency': self.currency,
            'tax_amount': str(self.tax_amount),
            'tip_amount': str(self.tip_amount),
            'split_strategy': self.split_strategy.value,
            'per_person_share': {name: str(amount) for name, amount in self.per_person_share.items()},
            'grand_total': str(self.grand_total),
            'settlements': [s.to_dict() for s in self.settlements],
            'breakdown': [b.to_dict() for b in self.breakdown],
            'unassigned': [u.to_dict() for u in self.unassigned],
        }


@dataclass
class ReceiptCandidate:
    """Untrusted item proposal from a receipt extraction service"""
    name: Any
    unit_price: Any
    quantity: Any = 1


@dataclass
class ParsedReceipt:
    """Candidates and totals read from receipt text"""
    candidates: List[ReceiptCandidate] = field(default_factory=list)
    total: Decimal = ZERO
    currency: str = CURRENCY_DEFAULT

    @property
    def candidates_total(self) -> Decimal:
        total = ZERO
        for candidate in self.candidates:
            total += candidate.unit_price * candidate.quantity
        return total
