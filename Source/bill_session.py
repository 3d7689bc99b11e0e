"""
Bill session for Patungan
One bill being edited: its allocation model, its policy and payer upkeep
"""

from dataclasses import replace
from typing import Any, Dict, Optional

from allocation import AllocationModel
from config import CURRENCY_DEFAULT
from constants import ZERO
from data_models import BillPolicy, SplitStrategy, SettlementResult
from exceptions import (
    InvalidSnapshotError,
    NothingToSummarizeError,
    ParticipantNotFoundError,
)
from results import OperationResult
from settlement_engine import SettlementEngine, build_policy


class BillSession:
    """Owns the allocation model and policy of a single bill"""

    def __init__(self, name: str = "", currency: str = CURRENCY_DEFAULT):
        self.name = name
        self.currency = currency
        self.model = AllocationModel()
        self.policy = BillPolicy()
        self.engine = SettlementEngine(currency)

    @property
    def payer(self):
        if self.policy.payer_id is None:
            return None
        return self.model.get_participant(self.policy.payer_id)

    # ==================== Participants ====================

    def add_participant(self, name: str) -> OperationResult:
        """Add a participant; the first one becomes payer if none is set"""
        result = self.model.add_participant(name)
        if result.ok and self.payer is None:
            self.policy = replace(self.policy, payer_id=result.value.id)
        return result

    def remove_participant(self, participant_id: str) -> OperationResult:
        """Remove a participant, handing the payer role to the first one left"""
        result = self.model.remove_participant(participant_id, payer_id=self.policy.payer_id)
        if result.ok and result.value.was_payer:
            remaining = self.model.participants
            self.policy = replace(self.policy, payer_id=remaining[0].id if remaining else None)
        return result

    def rename_participant(self, participant_id: str, name: str) -> OperationResult:
        return self.model.rename_participant(participant_id, name)

    # ==================== Items ====================

    def add_item(self, name: str, unit_price: Any, quantity: Any = 1) -> OperationResult:
        return self.model.add_item(name, unit_price, quantity)

    def update_item(self, item_id: str, **fields) -> OperationResult:
        return self.model.update_item(item_id, **fields)

    def remove_item(self, item_id: str) -> OperationResult:
        return self.model.remove_item(item_id)

    def set_assignment(self, item_id: str, participant_id: str, count: Any) -> OperationResult:
        return self.model.set_assignment(item_id, participant_id, count)

    def assign_to_everyone(self, item_id: str) -> OperationResult:
        return self.model.assign_evenly(item_id, [p.id for p in self.model.participants])

    # ==================== Policy ====================

    def _update_policy(self, **changes) -> OperationResult:
        values = {
            'payer_id': self.policy.payer_id,
            'tax_amount': self.policy.tax_amount,
            'tip_amount': self.policy.tip_amount,
            'split_strategy': self.policy.split_strategy,
        }
        values.update(changes)

        result = build_policy(**values)
        if result.ok:
            self.policy = result.value
        return result

    def set_payer(self, participant_id: Optional[str]) -> OperationResult:
        if participant_id is not None and self.model.get_participant(participant_id) is None:
            return OperationResult.failure(ParticipantNotFoundError(f"Participant {participant_id} not found"))
        return self._update_policy(payer_id=participant_id)

    def set_tax(self, amount: Any) -> OperationResult:
        return self._update_policy(tax_amount=amount)

    def set_tip(self, amount: Any) -> OperationResult:
        return self._update_policy(tip_amount=amount)

    def set_strategy(self, strategy: Any) -> OperationResult:
        return self._update_policy(split_strategy=strategy)

    # ==================== Summary ====================

    def summarize(self, allow_empty: bool = False) -> OperationResult:
        """
        Compute the settlement for the current state of the bill.

        With allow_empty an empty bill yields the all-zero summary instead
        of NothingToSummarizeError.
        """
        result = self.engine.compute(self.model, self.policy)
        if allow_empty and isinstance(result.error, NothingToSummarizeError):
            return OperationResult.success(self.engine.zero_summary(self.model, self.policy))
        return result

    def zero_summary(self) -> SettlementResult:
        return self.engine.zero_summary(self.model, self.policy)

    # ==================== Persistence boundary ====================

    def to_dict(self) -> Dict[str, Any]:
        data = {'name': self.name, 'currency': self.currency}
        data.update(self.model.to_dict())
        data['policy'] = self.policy.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OperationResult:
        """Restore a bill snapshot written by to_dict()"""
        if not isinstance(data, dict):
            return OperationResult.failure(InvalidSnapshotError("Bill snapshot must be a mapping"))

        restored = AllocationModel.from_dict(data)
        if not restored.ok:
            return restored

        raw_policy = data.get('policy') or {}
        if not isinstance(raw_policy, dict):
            return OperationResult.failure(InvalidSnapshotError("Bill policy must be a mapping"))

        policy = build_policy(
            payer_id=raw_policy.get('payer_id'),
            tax_amount=raw_policy.get('tax_amount', ZERO),
            tip_amount=raw_policy.get('tip_amount', ZERO),
            split_strategy=raw_policy.get('split_strategy', SplitStrategy.SPLIT_EQUALLY),
        )
        if not policy.ok:
            return OperationResult.failure(InvalidSnapshotError(str(policy.error)))

        session = cls(name=data.get('name', ""), currency=data.get('currency', CURRENCY_DEFAULT))
        session.model = restored.value
        session.policy = policy.value

        if session.policy.payer_id is not None and session.payer is None:
            return OperationResult.failure(
                InvalidSnapshotError(f"Payer {session.policy.payer_id} is not a participant of this bill")
            )

        return OperationResult.success(session)
