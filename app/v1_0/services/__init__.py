from .inventory_ledger import InventoryLedger
from .sale_journal import SaleJournal
from .sync_service import RemoteSynchronizer
from .stall_service import StallService
__all__=[
    "InventoryLedger",
    "SaleJournal",
    "RemoteSynchronizer",
    "StallService",
    ]
