"""Utility functions for Camp Core.

Import convention: use module-level imports for clarity.

    from camp_core.utils import isodatetime, uid
    timestamp = isodatetime.now()
    member_id = uid.generate_uuid()
"""

from . import isodatetime, uid

__all__ = ["isodatetime", "uid"]
