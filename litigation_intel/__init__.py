"""
Litigation Intelligence - Strategic signal engine for litigation cases
======================================================================

Turns case material (documents, timeline, correspondence, deadlines) into
structured tactical intelligence:
1. Case role and substantive merits
2. Procedural leverage, weak spots, compliance breaches, time pressure,
   Awaab's Law deadlines and practice-area viability
3. Strategy paths, scenarios and a momentum verdict

No database, no HTTP layer: callers pass case material in and get typed
insight records back.
"""

import logging
from typing import Optional

__version__ = "1.0.0"


def configure_logging(level: Optional[str] = None) -> None:
    """Basic logging setup for scripts (the library itself adds no handlers)"""
    from .config import get_settings

    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
