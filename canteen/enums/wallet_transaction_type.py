from enum import Enum

class WalletTransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"
