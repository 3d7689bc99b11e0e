from decimal import Decimal

from config import MINOR_UNIT

DECIMAL_QUANTIZE = MINOR_UNIT
ZERO = Decimal("0")

DEFAULT_ITEM_NAME = "Unknown item"

# Currency markers found on receipts
CURRENCY_SUFFIX = r'(?:Rp\.?|IDR|\$|USD|€|EUR)?'

ITEM_PATTERNS = {
    # Nasi Goreng x2 50.000
    'qty_suffix': r'^(.+?)\s*[xX×](\d+)\s*[-\s]*' + CURRENCY_SUFFIX + r'\s*([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$',
    # 2 Es Teh - 10.000
    'qty_prefix': r'^(\d+)\s+(.+?)\s*[-–]\s*' + CURRENCY_SUFFIX + r'\s*([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$',
    # Sate Ayam 2 x 15.000 30.000
    'qty_unit_total': r'^(.+?)\s+(\d+)\s*[xX×]\s*' + CURRENCY_SUFFIX + r'\s*([\d,\.]+)\s+' + CURRENCY_SUFFIX + r'\s*([\d,\.]+)\s*$',
    # Kerupuk - 5.000
    'dash_price': r'^(.+?)\s*[-–]\s*' + CURRENCY_SUFFIX + r'\s*([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$',
    # Kerupuk 5.000
    'plain_price': r'^(.+?)\s+' + CURRENCY_SUFFIX + r'\s*([\d,\.]+)\s*' + CURRENCY_SUFFIX + r'\s*$',
}

TOTAL_SUM_PATTERNS = [
    r'\b(?:GRAND\s+TOTAL|TOTAL\s+BAYAR|TOTAL|JUMLAH)[:\s]*' + CURRENCY_SUFFIX + r'\s*([\d,\.]+)',
]

# Words to skip
SKIP_WORDS = [
    'total', 'subtotal', 'sub total', 'jumlah', 'pajak', 'ppn', 'pb1', 'tax',
    'service', 'servis', 'tip', 'tunai', 'cash', 'kembali', 'change', 'card',
    'kartu', 'debit', 'kredit', 'credit', 'diskon', 'discount', 'receipt',
    'struk', 'invoice', 'tanggal', 'date', 'time', 'jam', 'kasir', 'cashier',
    'terima kasih', 'thank', 'npwp', 'meja', 'table',
]

# Lines that end item parsing immediately
STOP_MARKERS = ['TOTAL:', 'JUMLAH:', 'GRAND TOTAL', 'TOTAL BAYAR']
