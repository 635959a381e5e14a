from .base import (
    AccessDenied,
    Collector,
    CollectorResult,
    ConfigError,
    CorruptLog,
    EmitError,
    FatalLookup,
    GroupResolutionError,
    LockState,
    LogReadError,
    LsloginsError,
    NotFound,
    PasswordState,
    Sentinel,
    Tristate,
    Unavailable,
)
from .accounts import AccountSource, FileAccountSource, GroupEntry, PasswdEntry, ShadowEntry
from .context import ContextCollector
from .groups import GroupCollector
from .logindefs import LoginDefs
from .sessions import FailedLoginCollector, LastLoginCollector, SessionLog, SessionRecord
from .shadow import ShadowCollector
from .status import HushCollector, NoLoginCollector

__all__ = [
    "AccessDenied",
    "AccountSource",
    "Collector",
    "CollectorResult",
    "ConfigError",
    "ContextCollector",
    "CorruptLog",
    "EmitError",
    "FailedLoginCollector",
    "FatalLookup",
    "FileAccountSource",
    "GroupCollector",
    "GroupEntry",
    "GroupResolutionError",
    "HushCollector",
    "LastLoginCollector",
    "LockState",
    "LogReadError",
    "LoginDefs",
    "LsloginsError",
    "NoLoginCollector",
    "NotFound",
    "PasswdEntry",
    "PasswordState",
    "Sentinel",
    "SessionLog",
    "SessionRecord",
    "ShadowCollector",
    "ShadowEntry",
    "Tristate",
    "Unavailable",
]

COLLECTORS = {
    "groups": GroupCollector,
    "last_login": LastLoginCollector,
    "failed_login": FailedLoginCollector,
    "shadow": ShadowCollector,
    "hushed": HushCollector,
    "nologin": NoLoginCollector,
    "context": ContextCollector,
}
