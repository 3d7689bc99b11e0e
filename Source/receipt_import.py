"""
Receipt import for Patungan
Merges item proposals from a receipt extraction service into a bill. The
proposals are untrusted: every one goes through the same validation as a
manually entered item.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Tuple

from allocation import AllocationModel
from constants import DEFAULT_ITEM_NAME
from data_models import LineItem, ReceiptCandidate
from exceptions import InvalidItemError


@dataclass
class ImportReport:
    """Items added from a receipt and proposals that were turned down"""
    added: List[LineItem] = field(default_factory=list)
    rejected: List[Tuple[int, Any, InvalidItemError]] = field(default_factory=list)

    @property
    def all_added(self) -> bool:
        return not self.rejected


def _read_candidate(raw: Any) -> ReceiptCandidate:
    """Accept ReceiptCandidate objects or service payload dicts"""
    if isinstance(raw, ReceiptCandidate):
        return raw

    if not isinstance(raw, dict):
        raise InvalidItemError(f"Unsupported item record: {raw!r}")

    # The service has used unitPrice, unit_price and price for the same field
    for key in ('unitPrice', 'unit_price', 'price'):
        if key in raw:
            unit_price = raw[key]
            break
    else:
        raise InvalidItemError("Item record has no price")

    quantity = raw.get('quantity')
    return ReceiptCandidate(
        name=raw.get('name'),
        unit_price=unit_price,
        quantity=1 if quantity is None else quantity,
    )


def import_candidates(model: AllocationModel, candidates: Iterable[Any]) -> ImportReport:
    """Add every acceptable candidate to the model, report the rest"""
    report = ImportReport()

    for index, raw in enumerate(candidates):
        try:
            candidate = _read_candidate(raw)
        except InvalidItemError as e:
            report.rejected.append((index, raw, e))
            continue

        name = candidate.name
        if not isinstance(name, str) or not name.strip():
            name = DEFAULT_ITEM_NAME

        result = model.add_item(name, candidate.unit_price, candidate.quantity)
        if result.ok:
            report.added.append(result.value)
        else:
            report.rejected.append((index, raw, result.error))

    return report
