from dataclasses import dataclass
from datetime import datetime
from typing import Optional

@dataclass(slots=True)
class SyncStatusDTO:
    subscribed: bool
    pending_writes: int
    failed_writes: int
    last_error: Optional[str] = None
    last_snapshot_at: Optional[datetime] = None
