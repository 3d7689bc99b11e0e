"""
Command-line tests: batch mode over bill files and a scripted interactive run.
"""

import json
import pytest

from bill_session import BillSession
from main import main, load_session, run


@pytest.fixture
def bill_file(tmp_path, session):
    """Write the shared Nasi Goreng bill with 10000 tax to disk."""
    session.set_tax(10000).unwrap()
    path = tmp_path / 'bill.json'
    path.write_text(json.dumps(session.to_dict()), encoding='utf-8')
    return path


@pytest.fixture
def people_only_file(tmp_path):
    """A bill with two people and nothing on it."""
    bill = BillSession()
    bill.add_participant('Alice')
    bill.add_participant('Bob')
    path = tmp_path / 'people.json'
    path.write_text(json.dumps(bill.to_dict()), encoding='utf-8')
    return path


class TestBatchMode:
    """patungan bill.json [options]"""

    def test_prints_settlements(self, bill_file, capsys):
        assert main([str(bill_file)]) == 0

        out = capsys.readouterr().out
        assert 'Bob' in out and 'Alice' in out
        assert 'Rp30.000' in out
        assert 'Rp60.000' in out

    def test_export(self, bill_file, tmp_path):
        out_path = tmp_path / 'out.json'

        assert main([str(bill_file), '--export', str(out_path)]) == 0

        data = json.loads(out_path.read_text(encoding='utf-8'))
        assert data['summary']['grand_total'] == '60000.00'
        assert data['summary']['settlements'] == [
            {'from': 'Bob', 'to': 'Alice', 'amount': '30000.00', 'currency': 'IDR'}
        ]
        assert data['bill']['name'] == 'Makan siang'

    def test_exported_file_can_be_loaded_again(self, bill_file, tmp_path):
        out_path = tmp_path / 'out.json'
        main([str(bill_file), '--export', str(out_path)])

        assert load_session(str(out_path)) is not None

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / 'nope.json')]) == 1
        assert 'Could not read' in capsys.readouterr().out

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'broken.json'
        path.write_text('{not json', encoding='utf-8')

        assert main([str(path)]) == 1

    def test_invalid_bill(self, tmp_path, capsys):
        path = tmp_path / 'bad.json'
        path.write_text(json.dumps({'participants': [{'id': 'p1', 'name': ' '}]}), encoding='utf-8')

        assert main([str(path)]) == 1
        assert 'Invalid bill' in capsys.readouterr().out

    def test_empty_bill_fails(self, people_only_file):
        assert main([str(people_only_file)]) == 1

    def test_empty_bill_allowed(self, people_only_file, capsys):
        assert main([str(people_only_file), '--allow-empty']) == 0
        assert 'Nobody owes the payer anything' in capsys.readouterr().out

    def test_receipt_text_import(self, people_only_file, tmp_path, capsys):
        receipt = tmp_path / 'receipt.txt'
        receipt.write_text("Kopi Susu 18.000\nRoti Bakar - 12.000\nTOTAL: 30.000\n", encoding='utf-8')

        assert main([str(people_only_file), '--receipt-text', str(receipt)]) == 0

        out = capsys.readouterr().out
        assert 'Imported 2 item(s)' in out
        assert 'not assigned' in out

    def test_unreadable_receipt_text(self, people_only_file, tmp_path):
        assert main([str(people_only_file), '--receipt-text', str(tmp_path / 'missing.txt')]) == 1

    def test_console_script_exits_with_status(self, monkeypatch, people_only_file):
        """The installed patungan command exits with main's return code."""
        monkeypatch.setattr('sys.argv', ['patungan', str(people_only_file)])

        with pytest.raises(SystemExit) as exc_info:
            run()

        assert exc_info.value.code == 1


class TestInteractiveMode:
    """patungan with no bill file."""

    def test_scripted_session(self, monkeypatch, capsys):
        answers = iter([
            '1', '1', 'Alice', '1', 'Bob', '4',         # people
            '2', '1', 'Nasi Goreng', '25.000', '2', '5',  # items
            '3', '1',                                    # share among everyone
            '5',                                         # calculate
            '7',                                         # exit
        ])
        monkeypatch.setattr('builtins.input', lambda prompt='': next(answers))

        assert main([]) == 0

        out = capsys.readouterr().out
        assert 'Added Alice' in out
        assert 'Shared among everyone' in out
        assert 'Bob' in out and 'Rp25.000' in out
        assert 'Terima kasih' in out
