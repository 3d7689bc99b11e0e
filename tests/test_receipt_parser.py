"""
Receipt text parser tests.
"""

import pytest
from decimal import Decimal

from receipt_parser import ReceiptTextParser


WARUNG_RECEIPT = """
WARUNG MAKAN SEDERHANA
Nasi Goreng x2 50.000
2 Es Teh - 10.000
Sate Ayam 2 x 15.000 30.000
Kerupuk - 5.000
Tahu Isi 8.000
PAJAK 10%  9.300
TOTAL: Rp 103.000
"""


@pytest.fixture
def parser():
    return ReceiptTextParser(debug=False)


class TestPriceCleaning:
    """Printed prices in local and international formats."""

    @pytest.mark.parametrize('text,expected', [
        ('25.000', Decimal('25000')),
        ('1,250,000', Decimal('1250000')),
        ('12.50', Decimal('12.50')),
        ('12,5', Decimal('12.5')),
        ('1.234,56', Decimal('1234.56')),
        ('1,234.56', Decimal('1234.56')),
        ('Rp15.000', Decimal('15000')),
    ])
    def test_clean_price(self, parser, text, expected):
        assert parser._clean_price(text) == expected

    @pytest.mark.parametrize('text', ['', '0', '1.2345', '999.999.999', 'abc'])
    def test_unbelievable_prices(self, parser, text):
        assert parser._clean_price(text) == Decimal('0')


class TestParse:
    """Whole receipts."""

    def test_warung_receipt(self, parser):
        receipt = parser.parse(WARUNG_RECEIPT)

        assert [(c.name, c.quantity, c.unit_price) for c in receipt.candidates] == [
            ('Nasi Goreng', 2, Decimal('25000')),
            ('Es Teh', 2, Decimal('5000')),
            ('Sate Ayam', 2, Decimal('15000')),
            ('Kerupuk', 1, Decimal('5000')),
            ('Tahu Isi', 1, Decimal('8000')),
        ]
        assert receipt.total == Decimal('103000')
        assert receipt.currency == 'IDR'
        assert receipt.candidates_total == receipt.total

    def test_dollar_receipt(self, parser):
        receipt = parser.parse("Burger $12.50\nFries $4.00\nTOTAL $16.50")

        assert [c.name for c in receipt.candidates] == ['Burger', 'Fries']
        assert receipt.currency == 'USD'
        assert receipt.total == Decimal('16.50')

    def test_subtotal_is_not_the_total(self, parser):
        receipt = parser.parse("Kopi 18.000\nSUBTOTAL 18.000\nTOTAL 19.800")

        assert [c.name for c in receipt.candidates] == ['Kopi']
        assert receipt.total == Decimal('19800')

    def test_duplicate_lines_removed(self, parser):
        receipt = parser.parse("Kopi Susu 18.000\nKopi Susu 18.000")

        assert len(receipt.candidates) == 1

    def test_duplicates_kept_when_disabled(self):
        receipt = ReceiptTextParser(debug=False, deduplicate=False).parse("Kopi Susu 18.000\nKopi Susu 18.000")

        assert len(receipt.candidates) == 2

    def test_mismatched_line_total_falls_back(self, parser):
        """A qty x price line whose total does not match is not read as that layout."""
        receipt = parser.parse("Sate Ayam 2 x 15.000 99.000")

        assert all(c.quantity == 1 for c in receipt.candidates)

    def test_empty_text(self, parser):
        receipt = parser.parse("")

        assert receipt.candidates == []
        assert receipt.total == Decimal('0')

    def test_debug_output(self, capsys):
        ReceiptTextParser(debug=True).parse("Kerupuk - 5.000")

        assert 'Found simple item: Kerupuk' in capsys.readouterr().out
