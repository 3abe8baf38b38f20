"""Engine configuration constants."""

from decimal import Decimal

# Currencies
DEFAULT_CURRENCY = "KRW"
SUPPORTED_CURRENCIES = ("KRW", "USD")

# Comparison tolerances (one currency unit for KRW, one cent for USD)
AMOUNT_TOLERANCE = {
    "KRW": Decimal("1"),
    "USD": Decimal("0.01"),
}
USD_BALANCE_TOLERANCE = Decimal("1")  # Manual USD float vs trade-implied flow
LOT_DUST_THRESHOLD = Decimal("0.00000001")  # Lots below this are closed

# XIRR solver
XIRR_DEFAULT_GUESS = 0.10
XIRR_MAX_ITERATIONS = 50
XIRR_TOLERANCE = 1e-9  # |NPV| or step size below this = converged
XIRR_MIN_DERIVATIVE = 1e-15  # Flat NPV curve, no progress possible
DAYS_PER_YEAR = 365.25

# Ticker normalization
KOREAN_EXCHANGE_SUFFIXES = ("KSQ", "KS", "KQ", "KO", "K")
KRW_TICKER_LENGTH = 6  # Canonical KRX codes are 6 characters

# Ledger categories
CARD_PAYMENT_CATEGORY = "신용카드"
CARD_PAYMENT_SUB_CATEGORY = "카드대금"
DEFAULT_SAVINGS_CATEGORIES = ("저축성지출",)
GENERAL_TRANSFER_CATEGORIES = ("이체", "계좌이체", "카드결제이체")

# Generic labels stored in `category` while the real classification lives in
# `sub_category` (or the other way around)
WRAPPER_CATEGORIES = {
    "income": ("수입", "income"),
    "expense": ("지출", "expense"),
    "transfer": ("이체", "transfer"),
}

# Known corrupted/abbreviated labels seen in imported data
CATEGORY_ALIASES = {
    "유류통": "유류교통비",
    "데이비": "데이트비",
    "이비": "데이트비",
    "식": "식비",
    "장/마트": "시장/마트",
    "시장/미트": "시장/마트",
    "저축성지출출": "저축성지출",
    "경조사회비": "경조사비",
    "입": "수입",
}

SUB_CATEGORY_ALIASES = {
    "데이비": "데이트비",
    "이비": "데이트비",
    "식": "식비",
    "장/마트": "시장/마트",
    "시장/미트": "시장/마트",
    "건": "물건",
    "유트브": "유튜브",
}

# Fixed-expense sub-categories recognized without a preset entry
FIXED_EXPENSE_PAIRS = (("주거비", "주담대이자"),)

# Reports
DIVIDEND_KEYWORDS = ("배당", "이자")
