"""
Patungan - Bill Splitter

python3 main.py                                  # Interactive CLI mode
python3 main.py bill.json                        # Summarize a saved bill
python3 main.py bill.json --receipt-text r.txt   # Add receipt items first
python3 main.py bill.json --export out.json      # Write the summary to JSON
python3 main.py --help                           # Show help
"""

import json
import sys
import argparse

from bill_session import BillSession
from cli_interface import PatunganCLI, export_results, print_summary
from receipt_import import import_candidates
from receipt_parser import ReceiptTextParser


def load_session(path: str):
    """Load a bill snapshot from disk, None if it cannot be used"""
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        print(f"❌ Could not read {path}: {e}")
        return None
    except json.JSONDecodeError as e:
        print(f"❌ {path} is not valid JSON: {e}")
        return None

    # Files written by the export option wrap the snapshot
    if isinstance(data, dict) and isinstance(data.get('bill'), dict):
        data = data['bill']

    result = BillSession.from_dict(data)
    if not result.ok:
        print(f"❌ Invalid bill in {path}: {result.error}")
        return None
    return result.value


def import_receipt_text(session: BillSession, path: str) -> bool:
    """Parse a receipt text file into the session, False if unreadable"""
    try:
        with open(path, encoding='utf-8') as f:
            text = f.read()
    except OSError as e:
        print(f"❌ Could not read {path}: {e}")
        return False

    parsed = ReceiptTextParser().parse(text)
    report = import_candidates(session.model, parsed.candidates)

    print(f"📋 Imported {len(report.added)} item(s) from {path}")
    for index, raw, error in report.rejected:
        print(f"  ⚠ Skipped candidate {index + 1}: {error}")
    return True


def main(argv=None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        prog='patungan',
        description='Patungan - split a shared bill by item units',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  patungan                                # Interactive mode
  patungan bill.json                      # Show settlements for a saved bill
  patungan bill.json --receipt-text r.txt # Import receipt lines, then summarize
  patungan bill.json --export out.json    # Save bill and summary as JSON
        """
    )

    parser.add_argument(
        'bill',
        nargs='?',
        help='Bill snapshot (JSON) to summarize'
    )
    parser.add_argument(
        '--receipt-text',
        metavar='FILE',
        help='Receipt text whose items are added before summarizing'
    )
    parser.add_argument(
        '--export',
        metavar='FILE',
        help='Write the bill and its summary to this JSON file'
    )
    parser.add_argument(
        '--allow-empty',
        action='store_true',
        help='Print an all-zero summary for a bill with nothing on it'
    )
    parser.add_argument(
        '--version',
        action='version',
        version='Patungan 1.0'
    )

    args = parser.parse_args(argv)

    if not args.bill:
        cli = PatunganCLI()
        if args.receipt_text:
            cli.import_receipt_text(args.receipt_text)
        cli.run()
        return 0

    session = load_session(args.bill)
    if session is None:
        return 1

    if args.receipt_text and not import_receipt_text(session, args.receipt_text):
        return 1

    result = session.summarize(allow_empty=args.allow_empty)
    if not result.ok:
        print(f"❌ {result.error}")
        return 1

    print_summary(result.value)

    if args.export:
        try:
            filename = export_results(session, result.value, args.export)
        except OSError as e:
            print(f"❌ Export failed: {e}")
            return 1
        print(f"\n✅ Results exported to {filename}")

    return 0


def run():
    """Console script entry point"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\n👋 Goodbye!")
        sys.exit(0)


if __name__ == "__main__":
    run()
