"""Fixed vocabulary tables for entity normalization and type classification.

Everything here is immutable data (tuples of strings). Compiled forms live
next to their consumers (:mod:`.canonical`, :mod:`.type_codes`) and are built
once per instance from these tables.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Banking jargon stripped from every description before display
# ---------------------------------------------------------------------------

BANKING_TERMS: tuple[str, ...] = (
    # Direct debits and standing orders
    "DD", "DDR", "DIRECT DEBIT", "DIR DEB", "D/D", "D/DR", "MEMO DD", "VAR DD",
    "AUDDIS", "SO", "STO", "S/O", "STNDG ORDER", "STANDING ORDER",
    # Bank giro / BACS / faster payments
    "BGC", "BACS", "BACS CREDIT", "BACS PYMT", "B.G.C.", "BGC/FBP", "BGC/FPI",
    "FPI", "FPO", "FP", "FASTER PYMT", "FST PYMT", "FAST PAY", "FP/BGC",
    # Cheques and cash
    "CHQ", "CHEQUE", "CHQ IN", "CHQ PAID", "C/Q", "CQ", "CQ IN", "ATM", "CASH",
    "CASH WDL", "WDL", "WITHDRAWAL", "LINK", "CDM",
    # Cards
    "POS", "DEB", "DEBIT CARD", "DC", "VISA", "MC", "MASTERCARD",
    # CHAPS, interest and dividends
    "CHAPS", "CHAPS PYMT", "CHAP", "INT", "INTEREST", "INT PAID", "GROSS INT",
    "NET INT", "DIV", "DIVIDEND", "DIV PAYMT",
    # Transfers
    "TFR", "TRF", "TRANSFER", "INTERNAL TFR", "ITR", "FT", "GIRO",
    "GIRO CREDIT", "GCT", "GIR",
    # References, invoices, accounts
    "REF:", "REFERENCE", "REF NO", "REFN", "RN", "INV", "INVOICE", "INV NO",
    "INV#", "A/C", "AC", "ACCOUNT", "ACC NO", "ACT",
    # Channel and processing metadata
    "MOTO", "E-COM", "RECURRING", "MANDATE", "VALUE DATE", "VAL DT",
    "BOOK DATE", "NON-STG", "NON-STERLING", "FX FEE", "X-RATE", "AUTH",
    "AUTHORISATION", "APP CODE", "TRANS ID", "ORIGINATOR", "ORIG", "USER ID",
    "MEMO", "REMARK", "NOTE", "CONTACTLESS", "CNL", "CTLS",
    # Fees, charges, corrections
    "COMMISSION", "COMM", "CMN", "FEE", "FEES", "MONTHLY FEE",
    "ARRANGEMENT FEE", "CHARGES", "CHG", "CHGS", "SERVICE CHG", "OVERDRAFT",
    "O/D", "OD", "UNAUTH O/D", "PENALTY", "RETURNED", "UNPAID", "STOPPED",
    "ADJUSTMENT", "ADJ", "CORRECTION", "CORR",
    # General ledger vocabulary
    "BENEFICIARY", "BILL", "BILL PAY", "BILL PAYMT", "BOND", "BONUS", "BRANCH",
    "BRH", "BROKER", "BUSINESS", "BUY", "CALL", "CANCELLED", "CAP", "CAPITAL",
    "CARD PYMT", "CARDHOLDER", "CASHBACK", "CERTIFICATE", "CHARGEBACK",
    "CLEARING", "CLOSING", "COLL", "COLLECTION", "COMPOUND", "CONSOLIDATED",
    "CONTRA", "CONTRACT", "CONTRIBUTION", "CONVERSION", "COST", "COUPON", "CR",
    "CREDIT", "CSD", "CUST", "DEBIT", "DEBT", "DRAWING", "DR", "DUAL", "DUE",
    "DUPLICATE", "DUTY", "EARLY", "ELECTRONIC", "ESCROW", "ESTATE", "EST",
    "ESTIMATE", "EXCESS", "EXCHANGE", "EXCL", "I-BANK", "IBAN", "IDENT",
    "IMMED", "IMMEDIATE", "IMPORT", "IMPOST", "JRNL", "JOURNAL", "PAID", "PAY",
    "PAYABLE", "PAYEE", "PAYER", "PAYING", "PAYMENT",
)

# Markers whose following reference code (when it carries a digit) is part of
# the boilerplate, e.g. "REF:1234" or "INV# A-778".
REFERENCE_MARKERS: frozenset[str] = frozenset(
    {"REF:", "REF NO", "REFN", "INV NO", "INV#", "ACC NO", "TRANS ID", "APP CODE", "USER ID"}
)

# ---------------------------------------------------------------------------
# Generic words removed only when building clustering keys
# ---------------------------------------------------------------------------

GENERIC_NOISE: tuple[str, ...] = (
    "TRUCK", "STATION", "STORE", "SHOP", "ONLINE", "PURCHASE", "POS", "CARD",
    "TRANSACTION", "PAYMENT", "BILL", "VALUE", "DATE", "LOC", "LOCAL", "INT",
    "INTL", "COM", "CO", "UK", "USA", "EU", "THE", "AND", "AT", "OF", "TO",
    "FOR", "FROM", "VIA", "IN", "ON", "BY", "MR", "MRS", "MS", "DR",
)

# ---------------------------------------------------------------------------
# Transaction type codes; order matters (first matching entry wins)
# ---------------------------------------------------------------------------

TYPE_PATTERNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("DD", (r"DIRECT DEBIT", r"DIR DEB", r"MEMO DD", r"VAR DD", r"\bDD\b", r"\bDDR\b", r"AUDDIS")),
    ("SO", (r"STANDING ORDER", r"\bSO\b", r"\bSTO\b", r"\bS/O\b", r"STNDG ORDER")),
    (
        "FP",
        (
            r"FASTER PAYMENT", r"FASTER PYMT", r"FST PYMT", r"FP/BGC", r"\bFP\b",
            r"\bFPS\b", r"\bFPO\b", r"\bFPI\b", r"FAST PAY",
        ),
    ),
    (
        "CARD",
        (
            r"CARD TRANSACTION", r"VISA", r"MASTERCARD", r"DEBIT CARD", r"CONTACTLESS",
            r"^CD \d", r"\bDC\b", r"\bPOS\b", r"\bMC\b", r"CARD\b",
        ),
    ),
    (
        "TFR",
        (r"ONLINE TRANSFER", r"INTERNAL TFR", r"TRANSFER", r"\bTFR\b", r"\bTRF\b", r"ITR", r"\bFT\b"),
    ),
    ("BACS", (r"\bBACS\b",)),
    ("BGC", (r"BANK GIRO", r"B\.G\.C\.", r"\bBGC\b")),
    ("CHQ", (r"CHEQUE", r"\bCHQ\b", r"C/Q", r"CQ\b")),
    ("CASH", (r"\bATM\b", r"CASH", r"WITHDRAWAL", r"\bWDL\b", r"\bLINK\b", r"\bCDM\b")),
    (
        "FEE",
        (r"FEE\b", r"CHARGE", r"\bCHG\b", r"COMMISSION", r"\bCOMM?\b", r"SERVICE CHG", r"MONTHLY FEE"),
    ),
    ("INT", (r"INTEREST", r"\bINT\b", r"GROSS INT", r"NET INT")),
    ("DIV", (r"DIVIDEND", r"\bDIV\b")),
    ("BILL", (r"BILL PAY", r"\bBP\b", r"BILL\b")),
    ("SAL", (r"SALARY", r"PAYROLL", r"WAGES")),
    ("TAX", (r"HMRC", r"VAT", r"TAX\b", r"COUNCIL TAX")),
    ("DEP", (r"DEPOSIT", r"\bDEP\b", r"CREDIT", r"\bCR\b")),
    ("CHAPS", (r"\bCHAPS\b",)),
    ("REV", (r"REVERSAL", r"\bREV\b", r"RETURNED", r"UNPAID", r"CANCELLED")),
    ("REF", (r"REFUND", r"REPAYMENT", r"\bREFD\b")),
    ("ADJ", (r"ADJUSTMENT", r"\bADJ\b", r"CORRECTION", r"\bCORR\b")),
    ("INS", (r"INSURANCE", r"\bPREM\b", r"PREMIUM", r"\bINS\b")),
    ("LOAN", (r"LOAN", r"MORTGAGE", r"\bMTG\b", r"FINANCE")),
    ("PENS", (r"PENSION", r"\bPEN\b")),
    ("RENT", (r"RENT\b",)),
    ("UTIL", (r"UTILITY", r"\bUTIL\b", r"ELEC", r"GAS\b", r"WATER\b", r"ENERGY")),
    ("SUB", (r"SUBSCRIPTION", r"\bSUB\b", r"MEMBERSHIP", r"CLUB\b")),
    ("ONL", (r"ONLINE", r"\bONL\b", r"E-COM", r"INTERNET", r"WEB\b", r"WWW\.")),
    ("PHON", (r"TELEPHONE", r"PHONE", r"MOBILE", r"\bTEL\b")),
    ("GIFT", (r"GIFT", r"DONATION", r"CHARITY")),
    ("OTHR", (r"MISC", r"OTHER")),
)

# Category values that mean "not yet categorized".
UNCATEGORIZED_LABELS: frozenset[str] = frozenset({"", "UNCATEGORIZED"})


__all__ = [
    "BANKING_TERMS",
    "REFERENCE_MARKERS",
    "GENERIC_NOISE",
    "TYPE_PATTERNS",
    "UNCATEGORIZED_LABELS",
]
