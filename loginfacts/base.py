# Abstract base collector and shared types for lslogins

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class LsloginsError(Exception):
    """Base class for every error lslogins raises on purpose."""


class ConfigError(LsloginsError):
    pass


class Unavailable(LsloginsError):
    """A fact could not be determined; the affected fields become unknown."""


class AccessDenied(Unavailable):
    pass


class NotFound(Unavailable):
    pass


class GroupResolutionError(Unavailable):
    pass


class FatalLookup(LsloginsError):
    pass


class LogReadError(LsloginsError):
    pass


class CorruptLog(LogReadError):
    pass


class EmitError(LsloginsError):
    pass


class Sentinel(Enum):
    UNKNOWN = "unknown"
    NONE = "none"
    NOT_APPLICABLE = "n/a"
    UNLIMITED = "unlimited"

    def __str__(self) -> str:
        return "unlimited" if self is Sentinel.UNLIMITED else "-"


class PasswordState(Enum):
    HAS_PASSWORD = "has_password"
    NO_PASSWORD = "no_password"
    UNKNOWN = "unknown"


class LockState(Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    UNKNOWN = "unknown"


class Tristate(Enum):
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"


@dataclass
class CollectorResult:
    collector_type: str
    login: str
    fields: dict[str, Any]
    success: bool
    error: str | None = None


class Collector(ABC):

    name: str = "base"
    fields: tuple[str, ...] = ()

    @abstractmethod
    def collect(self, account) -> dict[str, Any]:
        pass

    def unknown(self) -> dict[str, Any]:
        return {f: Sentinel.UNKNOWN for f in self.fields}

    def gather(self, account) -> CollectorResult:
        try:
            return CollectorResult(
                collector_type=self.name,
                login=account.name,
                fields=self.collect(account),
                success=True
            )
        except Unavailable as e:
            return CollectorResult(
                collector_type=self.name,
                login=account.name,
                fields=self.unknown(),
                success=False,
                error=str(e)
            )
