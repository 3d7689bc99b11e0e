"""
Settlement Engine for Patungan
Computes each participant's share of a bill and what they owe the payer
"""

from decimal import Decimal
from typing import Any, List, Dict, Optional

from allocation import AllocationModel
from config import CURRENCY_DEFAULT
from constants import DECIMAL_QUANTIZE, ZERO
from data_models import (
    BillPolicy,
    SplitStrategy,
    Settlement,
    SettlementResult,
    PersonBreakdown,
    ItemShare,
)
from exceptions import PayerRequiredError, NothingToSummarizeError, InvalidPolicyError
from results import OperationResult
from utils import to_money


def build_policy(payer_id: Optional[str] = None, tax_amount: Any = ZERO, tip_amount: Any = ZERO,
                 split_strategy: Any = SplitStrategy.SPLIT_EQUALLY) -> OperationResult:
    """Validate raw policy values into a BillPolicy"""
    tax = to_money(tax_amount)
    if tax is None or tax < 0:
        return OperationResult.failure(InvalidPolicyError(f"Tax must be a non-negative amount, got {tax_amount!r}"))

    tip = to_money(tip_amount)
    if tip is None or tip < 0:
        return OperationResult.failure(InvalidPolicyError(f"Tip must be a non-negative amount, got {tip_amount!r}"))

    try:
        strategy = SplitStrategy(split_strategy)
    except ValueError:
        return OperationResult.failure(InvalidPolicyError(f"Unknown split strategy {split_strategy!r}"))

    return OperationResult.success(BillPolicy(
        payer_id=payer_id,
        tax_amount=tax,
        tip_amount=tip,
        split_strategy=strategy,
    ))


class SettlementEngine:
    """Stateless bill splitting: one payer, shares per participant"""

    def __init__(self, currency: str = CURRENCY_DEFAULT):
        self.currency = currency

    def _check_policy(self, model: AllocationModel, policy: BillPolicy) -> OperationResult:
        if policy.payer_id is None:
            return OperationResult.failure(PayerRequiredError("Select who paid the bill first"))

        if model.get_participant(policy.payer_id) is None:
            return OperationResult.failure(
                PayerRequiredError(f"Payer {policy.payer_id} is no longer on this bill, select a new payer")
            )

        return build_policy(policy.payer_id, policy.tax_amount, policy.tip_amount, policy.split_strategy)

    def _item_shares(self, model: AllocationModel) -> Dict[str, List[ItemShare]]:
        """Only assigned units are charged; unassigned units drop out entirely"""
        shares: Dict[str, List[ItemShare]] = {p.id: [] for p in model.participants}

        for item in model.items:
            for assignment in item.assignments:
                if assignment.participant_id not in shares:
                    continue
                shares[assignment.participant_id].append(ItemShare(
                    item_id=item.id,
                    item_name=item.name,
                    units=assignment.count,
                    unit_price=item.unit_price,
                    amount=item.unit_price * assignment.count,
                ))

        return shares

    def _distribute_extras(self, model: AllocationModel, payer_id: str,
                           extras: Decimal, strategy: SplitStrategy) -> Dict[str, Decimal]:
        """Tax and tip per participant; the payer absorbs any rounding remainder"""
        distribution = {p.id: ZERO for p in model.participants}

        if strategy == SplitStrategy.PAYER_PAYS_ALL:
            distribution[payer_id] = extras
            return distribution

        people = len(model.participants)
        minor_units = int(extras / DECIMAL_QUANTIZE)
        each_units, remainder_units = divmod(minor_units, people)

        for participant_id in distribution:
            distribution[participant_id] = DECIMAL_QUANTIZE * each_units
        distribution[payer_id] += DECIMAL_QUANTIZE * remainder_units

        return distribution

    def compute(self, model: AllocationModel, policy: BillPolicy) -> OperationResult:
        """
        Compute per-person shares, the grand total and payer settlements.

        Fails with PayerRequiredError when no present participant is the
        payer, InvalidPolicyError for negative tax/tip, and
        NothingToSummarizeError for a bill with no items, tax or tip.
        The model is only read.
        """
        checked = self._check_policy(model, policy)
        if not checked.ok:
            return checked
        policy = checked.value
        tax, tip, strategy = policy.tax_amount, policy.tip_amount, policy.split_strategy

        if model.is_empty and tax == 0 and tip == 0:
            return OperationResult.failure(NothingToSummarizeError("No items, tax or tip to summarize"))

        item_shares = self._item_shares(model)
        extras = self._distribute_extras(model, policy.payer_id, tax + tip, strategy)

        per_person_share: Dict[str, Decimal] = {}
        breakdown: List[PersonBreakdown] = []
        for participant in model.participants:
            lines = item_shares[participant.id]
            subtotal = sum((line.amount for line in lines), ZERO)
            total = subtotal + extras[participant.id]

            per_person_share[participant.name] = total
            breakdown.append(PersonBreakdown(
                participant_id=participant.id,
                name=participant.name,
                items=lines,
                items_subtotal=subtotal,
                tax_tip_share=extras[participant.id],
                total=total,
            ))

        payer = model.get_participant(policy.payer_id)
        settlements = [
            Settlement(
                from_person=participant.name,
                to_person=payer.name,
                amount=per_person_share[participant.name],
                currency=self.currency,
            )
            for participant in model.participants
            if participant.id != payer.id and per_person_share[participant.name] > 0
        ]

        return OperationResult.success(SettlementResult(
            per_person_share=per_person_share,
            grand_total=sum(per_person_share.values(), ZERO),
            settlements=settlements,
            payer_name=payer.name,
            tax_amount=tax,
            tip_amount=tip,
            split_strategy=strategy,
            breakdown=breakdown,
            unassigned=model.unassigned_items(),
            currency=self.currency,
        ))

    def zero_summary(self, model: AllocationModel, policy: BillPolicy) -> SettlementResult:
        """All-zero summary for bills with nothing to split"""
        payer = model.get_participant(policy.payer_id) if policy.payer_id else None

        try:
            strategy = SplitStrategy(policy.split_strategy)
        except ValueError:
            strategy = SplitStrategy.SPLIT_EQUALLY

        return SettlementResult(
            per_person_share={p.name: ZERO for p in model.participants},
            grand_total=ZERO,
            settlements=[],
            payer_name=payer.name if payer else "",
            split_strategy=strategy,
            breakdown=[
                PersonBreakdown(
                    participant_id=p.id,
                    name=p.name,
                    items=[],
                    items_subtotal=ZERO,
                    tax_tip_share=ZERO,
                    total=ZERO,
                )
                for p in model.participants
            ],
            unassigned=model.unassigned_items(),
            currency=self.currency,
        )


def compute_settlement(model: AllocationModel, policy: BillPolicy,
                       currency: str = CURRENCY_DEFAULT) -> OperationResult:
    """Shortcut for SettlementEngine(currency).compute(model, policy)"""
    return SettlementEngine(currency).compute(model, policy)
