"""
Allocation Model for Patungan
Keeps participants and line items of one bill and enforces that no item has
more units assigned than it holds
"""

import copy
import uuid
from dataclasses import dataclass
from typing import List, Dict, Optional, Any, Iterable

from data_models import Participant, Assignment, LineItem, UnassignedUnits
from exceptions import (
    DuplicateNameError,
    InvalidParticipantError,
    InvalidItemError,
    OverAssignmentError,
    ParticipantNotFoundError,
    ItemNotFoundError,
    InvalidSnapshotError,
    PatunganError,
)
from results import OperationResult
from utils import to_money, to_quantity


@dataclass(frozen=True)
class ParticipantRemoval:
    """What happened when a participant left the bill"""
    participant: Participant
    was_payer: bool
    freed_units: int


def _normalize_name(name: Any) -> Optional[str]:
    if not isinstance(name, str):
        return None
    name = ' '.join(name.split())
    return name or None


class AllocationModel:
    """Participants and line items of a bill with unit-level assignments"""

    def __init__(self):
        self.participants: List[Participant] = []
        self.items: List[LineItem] = []

    def _generate_participant_id(self) -> str:
        return f"person_{uuid.uuid4().hex}"

    def _generate_item_id(self) -> str:
        return f"item_{uuid.uuid4().hex}"

    # ==================== Queries ====================

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def find_participant_by_name(self, name: str) -> Optional[Participant]:
        """Case-insensitive lookup by display name"""
        wanted = _normalize_name(name)
        if wanted is None:
            return None
        for participant in self.participants:
            if participant.name.casefold() == wanted.casefold():
                return participant
        return None

    def get_item(self, item_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def unassigned_items(self) -> List[UnassignedUnits]:
        """Items whose units are not all assigned, with the excluded amount"""
        report = []
        for item in self.items:
            missing = item.unassigned_units
            if missing > 0:
                report.append(UnassignedUnits(
                    item_id=item.id,
                    item_name=item.name,
                    units=missing,
                    amount=item.unit_price * missing,
                ))
        return report

    @property
    def is_empty(self) -> bool:
        return not self.items

    # ==================== Participants ====================

    def _check_name(self, name: Any, ignore_id: Optional[str] = None) -> OperationResult:
        normalized = _normalize_name(name)
        if normalized is None:
            return OperationResult.failure(InvalidParticipantError("Participant name must not be blank"))

        existing = self.find_participant_by_name(normalized)
        if existing is not None and existing.id != ignore_id:
            return OperationResult.failure(
                DuplicateNameError(f"A participant named '{existing.name}' is already on this bill")
            )
        return OperationResult.success(normalized)

    def add_participant(self, name: str) -> OperationResult:
        """Add a participant with a fresh id; names are unique case-insensitively"""
        checked = self._check_name(name)
        if not checked.ok:
            return checked

        participant = Participant(id=self._generate_participant_id(), name=checked.value)
        self.participants.append(participant)
        return OperationResult.success(participant)

    def rename_participant(self, participant_id: str, name: str) -> OperationResult:
        participant = self.get_participant(participant_id)
        if participant is None:
            return OperationResult.failure(ParticipantNotFoundError(f"Participant {participant_id} not found"))

        checked = self._check_name(name, ignore_id=participant_id)
        if not checked.ok:
            return checked

        participant.name = checked.value
        return OperationResult.success(participant)

    def remove_participant(self, participant_id: str, payer_id: Optional[str] = None) -> OperationResult:
        """
        Remove a participant and strip their assignments from every item.

        Their units are not redistributed; they become unassigned. When the
        removed participant is payer_id the result says so, and the caller
        has to pick a new payer.
        """
        participant = self.get_participant(participant_id)
        if participant is None:
            return OperationResult.failure(ParticipantNotFoundError(f"Participant {participant_id} not found"))

        freed = 0
        for item in self.items:
            kept = []
            for assignment in item.assignments:
                if assignment.participant_id == participant_id:
                    freed += assignment.count
                else:
                    kept.append(assignment)
            item.assignments = kept

        self.participants.remove(participant)
        return OperationResult.success(ParticipantRemoval(
            participant=participant,
            was_payer=payer_id is not None and payer_id == participant_id,
            freed_units=freed,
        ))

    # ==================== Items ====================

    def _check_item_fields(self, name: Any, unit_price: Any, quantity: Any) -> OperationResult:
        if not isinstance(name, str):
            return OperationResult.failure(InvalidItemError("Item name must be text"))

        price = to_money(unit_price)
        if price is None:
            return OperationResult.failure(InvalidItemError(f"Invalid unit price: {unit_price!r}"))
        if price < 0:
            return OperationResult.failure(InvalidItemError(f"Unit price must not be negative, got {price}"))

        qty = to_quantity(quantity)
        if qty is None or qty < 1:
            return OperationResult.failure(InvalidItemError(f"Quantity must be a whole number of at least 1, got {quantity!r}"))

        return OperationResult.success((name.strip(), price, qty))

    def add_item(self, name: str, unit_price: Any, quantity: Any = 1) -> OperationResult:
        """Add a line item with no assignments"""
        checked = self._check_item_fields(name, unit_price, quantity)
        if not checked.ok:
            return checked

        name, price, qty = checked.value
        item = LineItem(id=self._generate_item_id(), name=name, unit_price=price, quantity=qty)
        self.items.append(item)
        return OperationResult.success(item)

    def update_item(self, item_id: str, name: Optional[str] = None,
                    unit_price: Any = None, quantity: Any = None) -> OperationResult:
        """
        Update name, unit price and/or quantity of an item.

        Lowering the quantity below the assigned units trims assignments from
        the end of the list, reducing counts before dropping entries.
        """
        item = self.get_item(item_id)
        if item is None:
            return OperationResult.failure(ItemNotFoundError(f"Item {item_id} not found"))

        checked = self._check_item_fields(
            item.name if name is None else name,
            item.unit_price if unit_price is None else unit_price,
            item.quantity if quantity is None else quantity,
        )
        if not checked.ok:
            return checked

        item.name, item.unit_price, item.quantity = checked.value

        excess = item.assigned_units - item.quantity
        while excess > 0:
            last = item.assignments[-1]
            if last.count > excess:
                last.count -= excess
                excess = 0
            else:
                excess -= last.count
                item.assignments.pop()

        return OperationResult.success(item)

    def remove_item(self, item_id: str) -> OperationResult:
        item = self.get_item(item_id)
        if item is None:
            return OperationResult.failure(ItemNotFoundError(f"Item {item_id} not found"))

        self.items.remove(item)
        return OperationResult.success(item)

    # ==================== Assignments ====================

    def set_assignment(self, item_id: str, participant_id: str, count: Any) -> OperationResult:
        """Set how many units of an item a participant takes; 0 removes them"""
        item = self.get_item(item_id)
        if item is None:
            return OperationResult.failure(ItemNotFoundError(f"Item {item_id} not found"))

        if self.get_participant(participant_id) is None:
            return OperationResult.failure(ParticipantNotFoundError(f"Participant {participant_id} not found"))

        units = to_quantity(count)
        if units is None or units < 0:
            return OperationResult.failure(InvalidItemError(f"Unit count must be a whole number >= 0, got {count!r}"))

        others = item.assigned_units - item.count_for(participant_id)
        if others + units > item.quantity:
            return OperationResult.failure(OverAssignmentError(
                f"Cannot assign {units} of '{item.name}': {others} of {item.quantity} units already taken"
            ))

        existing = next((a for a in item.assignments if a.participant_id == participant_id), None)
        if units == 0:
            if existing is not None:
                item.assignments.remove(existing)
        elif existing is not None:
            existing.count = units
        else:
            item.assignments.append(Assignment(participant_id=participant_id, count=units))

        return OperationResult.success(item)

    def assign_evenly(self, item_id: str, participant_ids: Iterable[str]) -> OperationResult:
        """Deal an item's units round-robin across participants, replacing its assignments"""
        item = self.get_item(item_id)
        if item is None:
            return OperationResult.failure(ItemNotFoundError(f"Item {item_id} not found"))

        ids = list(dict.fromkeys(participant_ids))
        for participant_id in ids:
            if self.get_participant(participant_id) is None:
                return OperationResult.failure(ParticipantNotFoundError(f"Participant {participant_id} not found"))

        counts: Dict[str, int] = {pid: 0 for pid in ids}
        if ids:
            for unit in range(item.quantity):
                counts[ids[unit % len(ids)]] += 1

        item.assignments = [Assignment(participant_id=pid, count=c) for pid, c in counts.items() if c > 0]
        return OperationResult.success(item)

    # ==================== Persistence boundary ====================

    def snapshot(self) -> "AllocationModel":
        """Independent copy; later edits to either side do not leak across"""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'participants': [p.to_dict() for p in self.participants],
            'items': [i.to_dict() for i in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OperationResult:
        """Restore a model from plain records, re-checking every invariant"""
        model = cls()
        try:
            for record in data.get('participants', []):
                checked = model._check_name(record['name'])
                if not checked.ok:
                    raise checked.error
                if model.get_participant(record['id']) is not None:
                    raise InvalidSnapshotError(f"Duplicate participant id {record['id']}")
                model.participants.append(Participant(id=record['id'], name=checked.value))

            for record in data.get('items', []):
                checked = model._check_item_fields(record['name'], record['unit_price'], record.get('quantity', 1))
                if not checked.ok:
                    raise checked.error
                if model.get_item(record['id']) is not None:
                    raise InvalidSnapshotError(f"Duplicate item id {record['id']}")
                name, price, qty = checked.value
                item = LineItem(id=record['id'], name=name, unit_price=price, quantity=qty)
                model.items.append(item)

                for assignment in record.get('assignments', []):
                    if item.count_for(assignment['participant_id']):
                        raise InvalidSnapshotError(
                            f"Participant {assignment['participant_id']} assigned twice to item {item.id}"
                        )
                    result = model.set_assignment(item.id, assignment['participant_id'], assignment['count'])
                    if not result.ok:
                        raise result.error
        except (KeyError, TypeError, AttributeError) as e:
            return OperationResult.failure(InvalidSnapshotError(f"Malformed bill record: {e!r}"))
        except InvalidSnapshotError as e:
            return OperationResult.failure(e)
        except PatunganError as e:
            return OperationResult.failure(InvalidSnapshotError(str(e)))

        return OperationResult.success(model)
