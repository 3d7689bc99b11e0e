import pytest
from decimal import Decimal

from allocation import AllocationModel
from bill_session import BillSession
from data_models import BillPolicy, SplitStrategy
from settlement_engine import SettlementEngine


@pytest.fixture
def model():
    """Return an empty allocation model."""
    return AllocationModel()


@pytest.fixture
def alice(model):
    """Add and return participant Alice."""
    return model.add_participant('Alice').unwrap()


@pytest.fixture
def bob(model):
    """Add and return participant Bob."""
    return model.add_participant('Bob').unwrap()


@pytest.fixture
def nasi_goreng(model):
    """Add and return two units of Nasi Goreng at 25000 each."""
    return model.add_item('Nasi Goreng', 25000, 2).unwrap()


@pytest.fixture
def shared_nasi_goreng(model, alice, bob, nasi_goreng):
    """Nasi Goreng with one unit assigned to Alice and one to Bob."""
    model.set_assignment(nasi_goreng.id, alice.id, 1).unwrap()
    model.set_assignment(nasi_goreng.id, bob.id, 1).unwrap()
    return nasi_goreng


@pytest.fixture
def engine():
    """Return a settlement engine in IDR."""
    return SettlementEngine('IDR')


@pytest.fixture
def equal_policy(alice):
    """Alice pays, tax 10000 split equally."""
    return BillPolicy(
        payer_id=alice.id,
        tax_amount=Decimal('10000'),
        split_strategy=SplitStrategy.SPLIT_EQUALLY,
    )


@pytest.fixture
def session():
    """Return a bill session with Alice, Bob and one shared item."""
    bill = BillSession(name='Makan siang')
    bill.add_participant('Alice').unwrap()
    bill.add_participant('Bob').unwrap()
    item = bill.add_item('Nasi Goreng', 25000, 2).unwrap()
    bill.assign_to_everyone(item.id).unwrap()
    return bill
