"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_utc, parse_iso, to_epoch_seconds
from utils.user_context import (
    Identity,
    get_current_identity,
    get_current_user_id,
    set_current_identity,
    clear_current_identity,
    identity_context,
)
