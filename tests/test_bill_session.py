"""
Bill session tests: payer upkeep, policy edits, summaries and snapshots.
"""

import pytest
from decimal import Decimal

from bill_session import BillSession
from data_models import SplitStrategy
from exceptions import (
    InvalidPolicyError,
    InvalidSnapshotError,
    NothingToSummarizeError,
    ParticipantNotFoundError,
)


class TestPayer:
    """Who is owed the money."""

    def test_first_participant_becomes_payer(self):
        bill = BillSession()
        alice = bill.add_participant('Alice').unwrap()
        bill.add_participant('Bob').unwrap()

        assert bill.payer == alice

    def test_removing_payer_hands_role_on(self, session):
        alice, bob = session.model.participants

        result = session.remove_participant(alice.id)

        assert result.value.was_payer
        assert session.payer == bob

    def test_removing_last_participant_clears_payer(self):
        bill = BillSession()
        alice = bill.add_participant('Alice').unwrap()

        bill.remove_participant(alice.id).unwrap()

        assert bill.payer is None
        assert bill.policy.payer_id is None

    def test_set_payer(self, session):
        bob = session.model.participants[1]

        assert session.set_payer(bob.id).ok
        assert session.payer == bob

    def test_set_unknown_payer(self, session):
        payer_before = session.payer

        result = session.set_payer('person_missing')

        assert isinstance(result.error, ParticipantNotFoundError)
        assert session.payer == payer_before


class TestPolicyEdits:
    """Tax, tip and strategy changes."""

    def test_set_tax_and_tip(self, session):
        session.set_tax('10000').unwrap()
        session.set_tip(2500).unwrap()

        assert session.policy.tax_amount == Decimal('10000')
        assert session.policy.tip_amount == Decimal('2500')
        assert session.policy.extras == Decimal('12500')

    def test_negative_tip_keeps_previous_policy(self, session):
        session.set_tip(1000).unwrap()

        result = session.set_tip(-1)

        assert isinstance(result.error, InvalidPolicyError)
        assert session.policy.tip_amount == Decimal('1000')

    def test_set_strategy(self, session):
        session.set_strategy('PAYER_PAYS_ALL').unwrap()

        assert session.policy.split_strategy is SplitStrategy.PAYER_PAYS_ALL


class TestSummary:
    """Summaries computed from the session."""

    def test_summarize(self, session):
        session.set_tax(10000)

        result = session.summarize().unwrap()

        assert result.per_person_share == {'Alice': Decimal('30000'), 'Bob': Decimal('30000')}
        assert result.payer_name == 'Alice'

    def test_empty_bill_fails_by_default(self):
        bill = BillSession()
        bill.add_participant('Alice')

        assert isinstance(bill.summarize().error, NothingToSummarizeError)

    def test_empty_bill_with_allow_empty(self):
        bill = BillSession()
        bill.add_participant('Alice')

        result = bill.summarize(allow_empty=True).unwrap()

        assert result.grand_total == Decimal('0')
        assert result.per_person_share == {'Alice': Decimal('0')}

    def test_summary_follows_edits(self, session):
        """Recomputing after a change reflects the new state."""
        first = session.summarize().unwrap()
        item = session.model.items[0]
        session.update_item(item.id, unit_price=30000).unwrap()

        second = session.summarize().unwrap()

        assert first.grand_total == Decimal('50000')
        assert second.grand_total == Decimal('60000')


class TestSnapshots:
    """Saving and restoring a whole bill."""

    def test_round_trip_gives_same_result(self, session):
        session.set_tax(10000)
        session.set_strategy(SplitStrategy.PAYER_PAYS_ALL)

        restored = BillSession.from_dict(session.to_dict()).unwrap()

        assert restored.name == 'Makan siang'
        assert restored.to_dict() == session.to_dict()
        assert restored.summarize().unwrap() == session.summarize().unwrap()

    def test_missing_payer_rejected(self, session):
        data = session.to_dict()
        data['policy']['payer_id'] = 'person_missing'

        assert isinstance(BillSession.from_dict(data).error, InvalidSnapshotError)

    def test_bad_policy_rejected(self, session):
        data = session.to_dict()
        data['policy']['tax_amount'] = '-10'

        assert isinstance(BillSession.from_dict(data).error, InvalidSnapshotError)

    @pytest.mark.parametrize('data', [None, [], 'bill'])
    def test_non_mapping_rejected(self, data):
        assert isinstance(BillSession.from_dict(data).error, InvalidSnapshotError)

    def test_oversized_price_rejected(self):
        data = {
            'participants': [{'id': 'p1', 'name': 'Alice'}],
            'items': [{'id': 'i1', 'name': 'Sate', 'unit_price': '1e30', 'quantity': 1}],
        }

        assert isinstance(BillSession.from_dict(data).error, InvalidSnapshotError)

    def test_snapshot_without_policy(self):
        data = {
            'participants': [{'id': 'p1', 'name': 'Alice'}],
            'items': [{'id': 'i1', 'name': 'Teh', 'unit_price': '5000', 'quantity': 1,
                       'assignments': [{'participant_id': 'p1', 'count': 1}]}],
        }

        bill = BillSession.from_dict(data).unwrap()

        assert bill.payer is None
        assert bill.policy.split_strategy is SplitStrategy.SPLIT_EQUALLY
        assert bill.currency == 'IDR'
