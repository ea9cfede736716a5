from pydantic import BaseModel

from meshfinance.schemas.category import CategoryOut
from meshfinance.schemas.transaction import TxOut

class TrashOut(BaseModel):
    transactions: list[TxOut]
    categories: list[CategoryOut]
