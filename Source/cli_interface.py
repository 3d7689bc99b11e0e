"""
CLI Interface module for Patungan
Command-line interface for entering a bill and splitting it
"""

import json
from datetime import datetime
from typing import Optional

from bill_session import BillSession
from data_models import SettlementResult, SplitStrategy
from receipt_import import import_candidates
from receipt_parser import ReceiptTextParser
from utils import (
    format_currency,
    try_parse_int,
    try_parse_decimal,
    validate_menu_choice,
    clean_text_for_display,
)


def print_summary(result: SettlementResult):
    """Print shares, settlements and unassigned units of a computed bill"""
    currency = result.currency

    if result.unassigned:
        print("\n⚠ Some units are not assigned and are left out of everyone's total:")
        for entry in result.unassigned:
            print(f"  • {entry.item_name}: {entry.units} unit(s), {format_currency(entry.amount, currency)}")

    print("\n" + "-"*50)
    print("💰 INDIVIDUAL SHARES")
    print("-"*50)
    for person in result.breakdown:
        print(f"{person.name[:15]:15} : {format_currency(person.total, currency):>15}")
        for line in person.items:
            print(f"    {line.item_name[:25]:25} {line.units:2}x {format_currency(line.amount, currency):>12}")
        if person.tax_tip_share:
            print(f"    {'Tax & tip':25}     {format_currency(person.tax_tip_share, currency):>12}")

    print("\n" + "="*50)
    print(f"💸 SETTLEMENTS (payer: {result.payer_name})")
    print("="*50)
    if not result.settlements:
        print("\n🎉 Nobody owes the payer anything!")
    else:
        for s in result.settlements:
            print(f"{s.from_person[:15]:15} → {s.to_person[:15]:15} : {format_currency(s.amount, s.currency)}")

    print("\n" + "-"*50)
    print(f"{'GRAND TOTAL:':20} {format_currency(result.grand_total, currency)}")
    print(f"{'Transactions:':20} {len(result.settlements)}")


def export_results(session: BillSession, result: Optional[SettlementResult], filename: Optional[str] = None) -> str:
    """Write the bill snapshot and its summary to a JSON file"""
    if filename is None:
        filename = f"patungan_bill_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"

    data = {
        'export_info': {
            'timestamp': datetime.now().isoformat(),
            'version': '1.0',
            'currency': session.currency,
        },
        'bill': session.to_dict(),
    }

    if result is not None:
        data['summary'] = result.to_dict()
        data['summary']['payment_instructions'] = [
            f"{s.from_person} pays {s.to_person} {format_currency(s.amount, s.currency)}"
            for s in result.settlements
        ]

    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    return filename


class PatunganCLI:
    """Command-line interface for Patungan"""

    def __init__(self, session: Optional[BillSession] = None):
        self.session = session or BillSession()
        self.parser = ReceiptTextParser()
        self.result: Optional[SettlementResult] = None

    def display_banner(self):
        """Display application banner"""
        print("\n" + "="*60)
        print("🧾  PATUNGAN - Bill Splitter")
        print("Split by units, settle with the payer")
        print("="*60)

    def _pick_person(self, prompt: str = "Select person number: "):
        people = self.session.model.participants
        for i, person in enumerate(people, 1):
            print(f"{i}. {person.name}")
        idx = try_parse_int(input(prompt))
        if idx is None or not 1 <= idx <= len(people):
            print("Invalid selection")
            return None
        return people[idx - 1]

    def _pick_item(self):
        items = self.session.model.items
        for i, item in enumerate(items, 1):
            print(f"{i}. {clean_text_for_display(item.name, 30)}")
        idx = try_parse_int(input("Select item number: "))
        if idx is None or not 1 <= idx <= len(items):
            print("Invalid selection")
            return None
        return items[idx - 1]

    def _report(self, result, success_message: str) -> bool:
        if result.ok:
            print(f"✓ {success_message}")
            self.result = None
            return True
        print(f"⚠ {result.error}")
        return False

    def display_items(self):
        """Display bill items and their assignments"""
        model = self.session.model
        currency = self.session.currency
        if not model.items:
            print("\n⚠ No items on this bill yet")
            return

        print("\n" + "="*50)
        print("📋 BILL ITEMS")
        print("="*50)

        for i, item in enumerate(model.items, 1):
            assigned = ', '.join(
                f"{model.get_participant(a.participant_id).name} x{a.count}" for a in item.assignments
            ) or 'Unassigned'
            print(f"{i:2}. {clean_text_for_display(item.name, 30):30} {item.quantity:2}x "
                  f"{format_currency(item.unit_price, currency):>12} [{assigned}]")
            if item.unassigned_units:
                print(f"      {item.unassigned_units} unit(s) not assigned")

    def manage_people(self):
        """Manage people for bill splitting"""
        print("\n" + "="*50)
        print("👥 PEOPLE MANAGEMENT")
        print("="*50)

        while True:
            people = self.session.model.participants
            payer = self.session.payer
            print(f"\nCurrent people: {', '.join(clean_text_for_display(p.name) for p in people) if people else 'None'}")
            print(f"Payer: {payer.name if payer else 'None'}")
            print("\n1. Add person")
            print("2. Remove person")
            print("3. Rename person")
            print("4. Done")

            choice = validate_menu_choice(input("\nChoice: "), ['1', '2', '3', '4']) or ''
            print("-"*50)

            if choice == '1':
                name = input("Enter name: ")
                self._report(self.session.add_participant(name), f"Added {name.strip()}")
            elif choice == '2' and people:
                person = self._pick_person("Select person number to remove: ")
                if person:
                    result = self.session.remove_participant(person.id)
                    if self._report(result, f"Removed {person.name}") and result.value.was_payer:
                        new_payer = self.session.payer
                        print(f"⚠ {person.name} was paying, payer is now {new_payer.name if new_payer else 'nobody'}")
            elif choice == '3' and people:
                person = self._pick_person()
                if person:
                    self._report(self.session.rename_participant(person.id, input("New name: ")), "Renamed")
            elif choice == '4':
                break

    def manage_items(self):
        """Add, edit and delete bill items"""
        while True:
            self.display_items()
            print("\n1. Add item")
            print("2. Edit item")
            print("3. Delete item")
            print("4. Import receipt text")
            print("5. Done")

            choice = validate_menu_choice(input("\nChoice: "), ['1', '2', '3', '4', '5']) or ''
            print("-"*50)

            if choice == '1':
                name = input("Item name: ").strip()
                price = try_parse_decimal(input("Unit price: "))
                quantity = try_parse_int(input("Quantity [1]: ") or "1")
                self._report(self.session.add_item(name, price, quantity), f"Added {name}")
            elif choice == '2' and self.session.model.items:
                item = self._pick_item()
                if item:
                    name = input(f"Name [{item.name}]: ").strip() or None
                    price_text = input(f"Unit price [{item.unit_price}]: ").strip()
                    quantity_text = input(f"Quantity [{item.quantity}]: ").strip()
                    self._report(self.session.update_item(
                        item.id,
                        name=name,
                        unit_price=try_parse_decimal(price_text) if price_text else None,
                        quantity=try_parse_int(quantity_text) if quantity_text else None,
                    ), "Item updated")
            elif choice == '3' and self.session.model.items:
                item = self._pick_item()
                if item:
                    self._report(self.session.remove_item(item.id), f"Deleted {item.name}")
            elif choice == '4':
                self.import_receipt_text(input("Enter text file path: ").strip())
            elif choice == '5':
                break

    def import_receipt_text(self, path: str):
        """Parse receipt text from a file and add the items it contains"""
        try:
            with open(path, encoding='utf-8') as f:
                text = f.read()
        except OSError as e:
            print(f"⚠ Could not read {path}: {e}")
            return

        parsed = self.parser.parse(text)
        report = import_candidates(self.session.model, parsed.candidates)
        self.result = None

        print(f"✓ Imported {len(report.added)} item(s)")
        for index, raw, error in report.rejected:
            print(f"  ⚠ Skipped candidate {index + 1}: {error}")
        if parsed.total and parsed.total != parsed.candidates_total:
            print(f"  ⚠ Receipt total {format_currency(parsed.total, parsed.currency)} does not match the items")

    def assign_items(self):
        """Assign item units to people"""
        model = self.session.model
        if not model.items:
            print("\n⚠ No items to assign")
            return

        if not model.participants:
            print("\n⚠ No people added yet")
            return

        print("\n" + "="*50)
        print("🔍 ITEM ASSIGNMENT")
        print("="*50)

        for item in model.items:
            print(f"\n{item.name} - {item.quantity} unit(s), {item.unassigned_units} unassigned")

            print("\n1. Share among everyone")
            print("2. Set units per person")
            print("3. Skip")

            choice = validate_menu_choice(input("Choice: "), ['1', '2', '3']) or ''
            print("-"*50)

            if choice == '1':
                self._report(self.session.assign_to_everyone(item.id), "Shared among everyone")
            elif choice == '2':
                for person in model.participants:
                    current = item.count_for(person.id)
                    count = try_parse_int(input(f"  Units for {person.name} [{current}]: ") or str(current))
                    self._report(self.session.set_assignment(item.id, person.id, count),
                                 f"{person.name} takes {count}")

    def edit_policy(self):
        """Set payer, tax, tip and how tax/tip are split"""
        if self.session.model.participants:
            print("\nWho paid the bill?")
            payer = self._pick_person()
            if payer:
                self._report(self.session.set_payer(payer.id), f"{payer.name} is paying")

        tax_text = input(f"\nTax amount [{self.session.policy.tax_amount}]: ").strip()
        if tax_text:
            self._report(self.session.set_tax(try_parse_decimal(tax_text)), "Tax updated")

        tip_text = input(f"Tip amount [{self.session.policy.tip_amount}]: ").strip()
        if tip_text:
            self._report(self.session.set_tip(try_parse_decimal(tip_text)), "Tip updated")

        print("\n1. Split tax & tip equally")
        print("2. Payer covers tax & tip")
        choice = validate_menu_choice(input("Choice [keep]: "), ['1', '2'])
        if choice == '1':
            self._report(self.session.set_strategy(SplitStrategy.SPLIT_EQUALLY), "Tax & tip split equally")
        elif choice == '2':
            self._report(self.session.set_strategy(SplitStrategy.PAYER_PAYS_ALL), "Payer covers tax & tip")

    def calculate_settlements(self):
        """Calculate and display settlements"""
        result = self.session.summarize(allow_empty=True)
        if not result.ok:
            print(f"\n⚠ {result.error}")
            return

        self.result = result.value
        print_summary(self.result)

    def export(self):
        """Export the bill and its last summary to JSON"""
        try:
            filename = export_results(self.session, self.result)
        except OSError as e:
            print(f"\nExport failed: {e}")
            return
        print(f"\n✅ Bill exported to {filename}")

    def run(self):
        """Run the CLI application"""
        self.display_banner()

        while True:
            print("\n" + "="*50)
            print("MAIN MENU")
            print("="*50)
            print("1. Manage people")
            print("2. Manage items")
            print("3. Assign items to people")
            print("4. Payer, tax & tip")
            print("5. Calculate settlements")
            print("6. Export results")
            print("7. Exit")

            choice = input("\nChoice: ").strip()

            if choice == '1':
                self.manage_people()
            elif choice == '2':
                self.manage_items()
            elif choice == '3':
                self.assign_items()
            elif choice == '4':
                self.edit_policy()
            elif choice == '5':
                self.calculate_settlements()
            elif choice == '6':
                self.export()
            elif choice == '7':
                print("\n👋 Terima kasih for using Patungan!")
                break
