"""
Receipt Parser module for Patungan
Turns receipt text returned by an OCR service into item candidates
"""

import os
import re
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from difflib import SequenceMatcher
from typing import Optional

from config import CURRENCY_DEFAULT, DUPLICATE_SIMILARITY_THRESHOLD, ITEM_PRICE_MAX, PARSER_DEBUG
from constants import ITEM_PATTERNS, TOTAL_SUM_PATTERNS, SKIP_WORDS, STOP_MARKERS, ZERO
from data_models import ParsedReceipt, ReceiptCandidate
from utils import to_money

# Tolerance when checking qty x unit price against the printed line total
LINE_TOTAL_TOLERANCE = Decimal("0.5")


class ReceiptTextParser:
    """Parses receipt text to extract item candidates and the printed total"""

    def __init__(self, debug: bool = PARSER_DEBUG, deduplicate: bool = True):
        self.debug = debug
        self.deduplicate = deduplicate

    def _clean_price(self, price_str: str) -> Decimal:
        """Convert a printed price to Decimal, ZERO if it is not believable"""
        if not price_str:
            return ZERO

        cleaned = re.sub(r'[^\d,\.]', '', str(price_str)).strip(',.')
        if not cleaned:
            return ZERO

        # Separator conventions are resolved by to_money
        price = to_money(cleaned)
        if price is None or price <= 0 or price > ITEM_PRICE_MAX:
            return ZERO
        return price

    def _normalize_text(self, text: str) -> str:
        """Normalize text for better comparison"""
        normalized = ' '.join(text.lower().split())
        normalized = re.sub(r'[^\w\s]', ' ', normalized)
        return ' '.join(normalized.split())

    def _is_valid_item_name(self, name: str) -> bool:
        """Check if the name is likely a menu item"""
        if not name or len(name.strip()) < 2:
            return False

        normalized_name = self._normalize_text(name)

        for skip_word in SKIP_WORDS:
            if re.search(r'\b' + re.escape(skip_word) + r'\b', normalized_name):
                return False

        if not re.search(r'[^\W\d_]', name):
            return False

        if len(re.sub(r'[\d\s\.\,\-]', '', name)) < 2:
            return False

        return True

    def _similarity_score(self, str1: str, str2: str) -> float:
        """Calculate similarity score between two strings (0-1)"""
        return SequenceMatcher(None, str1.lower(), str2.lower()).ratio()

    def _deduplicate_by_line_similarity(self, text: str) -> str:
        """Remove duplicate lines that appear when OCR regions overlap"""
        lines = text.split('\n')
        unique_lines = []
        seen_exact = set()
        seen_similar = []

        for line in lines:
            line = line.strip()
            if not line:
                continue

            if line in seen_exact:
                if self.debug:
                    print(f"  Skipping exact duplicate: '{line}'")
                continue

            is_similar_duplicate = False
            for seen_line in seen_similar[-10:]:  # Check last 10 lines
                similarity = self._similarity_score(line, seen_line)
                if similarity > DUPLICATE_SIMILARITY_THRESHOLD:
                    is_similar_duplicate = True
                    if self.debug:
                        print(f"  Skipping similar duplicate: '{line}' (similar to '{seen_line}', score: {similarity:.3f})")
                    break

            if not is_similar_duplicate:
                unique_lines.append(line)
                seen_exact.add(line)
                seen_similar.append(line)

        return '\n'.join(unique_lines)

    def _candidate(self, name: str, quantity: int, unit_price: Decimal, kind: str) -> Optional[ReceiptCandidate]:
        if not self._is_valid_item_name(name) or unit_price <= 0 or quantity < 1:
            return None
        if self.debug:
            print(f"    ✓ Found {kind} item: {name} {quantity}x{unit_price}")
        return ReceiptCandidate(name=name, unit_price=unit_price, quantity=quantity)

    def _extract_item_from_line(self, line: str) -> Optional[ReceiptCandidate]:
        """Extract an item from a single line using the known layouts"""
        line = line.strip()
        if not line:
            return None

        if self.debug:
            print(f"  Analyzing line: '{line}'")

        if any(marker in line.upper() for marker in STOP_MARKERS):
            return None

        # Pattern 1: Name xN LineTotal
        match = re.search(ITEM_PATTERNS['qty_suffix'], line, re.IGNORECASE)
        if match:
            quantity = int(match.group(2))
            total_price = self._clean_price(match.group(3))
            candidate = self._candidate(match.group(1).strip(), quantity, total_price / quantity, 'qty') if quantity > 0 else None
            if candidate:
                return candidate

        # Pattern 2: N Name - LineTotal
        match = re.search(ITEM_PATTERNS['qty_prefix'], line, re.IGNORECASE)
        if match:
            quantity = int(match.group(1))
            total_price = self._clean_price(match.group(3))
            candidate = self._candidate(match.group(2).strip(), quantity, total_price / quantity, 'numbered') if quantity > 0 else None
            if candidate:
                return candidate

        # Pattern 3: Name Qty x UnitPrice LineTotal
        match = re.search(ITEM_PATTERNS['qty_unit_total'], line, re.IGNORECASE)
        if match:
            quantity = int(match.group(2))
            unit_price = self._clean_price(match.group(3))
            total_price = self._clean_price(match.group(4))
            if abs(unit_price * quantity - total_price) < LINE_TOTAL_TOLERANCE:
                candidate = self._candidate(match.group(1).strip(), quantity, unit_price, 'traditional')
                if candidate:
                    return candidate

        # Pattern 4: Name - Price
        match = re.search(ITEM_PATTERNS['dash_price'], line, re.IGNORECASE)
        if match:
            candidate = self._candidate(match.group(1).strip(), 1, self._clean_price(match.group(2)), 'simple')
            if candidate:
                return candidate

        # Pattern 5: Name Price
        match = re.search(ITEM_PATTERNS['plain_price'], line, re.IGNORECASE)
        if match:
            return self._candidate(match.group(1).strip(), 1, self._clean_price(match.group(2)), 'no-dash')

        return None

    def _find_total(self, text: str) -> Decimal:
        """Find the total amount printed on the receipt"""
        for pattern in TOTAL_SUM_PATTERNS:
            for match in re.finditer(pattern, text, re.IGNORECASE | re.MULTILINE):
                total = self._clean_price(match.group(1))
                if total > 0:
                    if self.debug:
                        print(f"  Found total: {total}")
                    return total
        return ZERO

    def _detect_currency(self, text: str) -> str:
        """Detect currency used in receipt"""
        idr_indicators = len(re.findall(r'\bRp\.?|\bIDR\b', text, re.IGNORECASE))
        usd_indicators = len(re.findall(r'\$|\bUSD\b', text, re.IGNORECASE))
        eur_indicators = len(re.findall(r'€|\bEUR\b', text, re.IGNORECASE))

        if idr_indicators > max(usd_indicators, eur_indicators):
            return 'IDR'
        elif usd_indicators > eur_indicators:
            return 'USD'
        elif eur_indicators > 0:
            return 'EUR'
        else:
            return CURRENCY_DEFAULT

    def parse(self, text: str) -> ParsedReceipt:
        """Parse receipt text to extract item candidates and total"""
        if self.debug:
            print("\n🔍 Starting receipt parsing...")
            print(f"Receipt text length: {len(text)} characters")

        receipt = ParsedReceipt()

        cleaned_text = self._deduplicate_by_line_similarity(text) if self.deduplicate else text
        receipt.currency = self._detect_currency(cleaned_text)
        if self.debug:
            print(f"Detected currency: {receipt.currency}")

        lines = [l for l in cleaned_text.split('\n') if l.strip()]

        # Parallel line parsing, results keep line order
        max_workers = max(1, min(8, (os.cpu_count() or 4)))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for candidate in executor.map(self._extract_item_from_line, lines):
                if candidate:
                    receipt.candidates.append(candidate)

        receipt.total = self._find_total(cleaned_text)

        if receipt.candidates and receipt.total > 0:
            calculated_total = receipt.candidates_total
            if abs(calculated_total - receipt.total) > 1 and self.debug:
                print(f"  ⚠ Total mismatch: items add up to {calculated_total} vs printed {receipt.total}")

        if self.debug:
            print(f"\n📊 Parsing Results:")
            print(f"  Items found: {len(receipt.candidates)}")
            print(f"  Total: {receipt.total} {receipt.currency}")

        return receipt
