# Shadow Collector - password state and password aging.

import datetime
from typing import Any

from .base import Collector, LockState, PasswordState, Sentinel

EPOCH = datetime.date(1970, 1, 1)


def _limit(days: int | None):
    if days is None or days <= 0:
        return Sentinel.UNLIMITED
    return days


class ShadowCollector(Collector):
    name = "shadow"
    fields = (
        "password_state",
        "lock_state",
        "last_change_date",
        "min_days",
        "max_days",
        "warn_days",
    )

    def __init__(self, source):
        self.source = source

    def unknown(self) -> dict[str, Any]:
        return {
            "password_state": PasswordState.UNKNOWN,
            "lock_state": LockState.UNKNOWN,
            "last_change_date": Sentinel.UNKNOWN,
            "min_days": Sentinel.UNKNOWN,
            "max_days": Sentinel.UNKNOWN,
            "warn_days": Sentinel.UNKNOWN,
        }

    def collect(self, account) -> dict[str, Any]:
        entry = self.source.shadow(account.name)

        if entry.last_change is None:
            changed = Sentinel.NOT_APPLICABLE
        else:
            changed = EPOCH + datetime.timedelta(days=entry.last_change)

        return {
            "password_state": PasswordState.NO_PASSWORD if not entry.password else PasswordState.HAS_PASSWORD,
            "lock_state": LockState.LOCKED if entry.password.startswith("!") else LockState.UNLOCKED,
            "last_change_date": changed,
            "min_days": _limit(entry.min_days),
            "max_days": _limit(entry.max_days),
            "warn_days": entry.warn_days if entry.warn_days is not None else Sentinel.NOT_APPLICABLE,
        }
