"""
K12 Tutor - Shared Schema Types
"""
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from app.core.clock import ensure_utc

# SQLite returns naive timestamps; responses always carry UTC offsets
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]
