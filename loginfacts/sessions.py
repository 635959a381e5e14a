# Session Collector - last login and last failed login from wtmp/btmp.
#
# Both logs are arrays of glibc `struct utmp` (x86_64, 384 bytes):
#
#   short   ut_type; (2 bytes padding)
#   pid_t   ut_pid;
#   char    ut_line[32];
#   char    ut_id[4];
#   char    ut_user[32];
#   char    ut_host[256];
#   struct  exit_status ut_exit;   (2 x short)
#   int32_t ut_session;
#   struct  timeval ut_tv;         (2 x int32)
#   int32_t ut_addr_v6[4];
#   char    __unused[20];

import logging
import struct
from dataclasses import dataclass
from typing import Any, Sequence

from .base import AccessDenied, Collector, CorruptLog, LogReadError, NotFound, Sentinel

logger = logging.getLogger(__name__)

WTMP_PATH = "/var/log/wtmp"
BTMP_PATH = "/var/log/btmp"

UT_NAMESIZE = 32
UTMP_STRUCT = struct.Struct(
    "<"
    "h"      # ut_type
    "2x"     # padding
    "i"      # ut_pid
    "32s"    # ut_line
    "4s"     # ut_id
    "32s"    # ut_user
    "256s"   # ut_host
    "h"      # ut_exit.e_termination
    "h"      # ut_exit.e_exit
    "i"      # ut_session
    "i"      # ut_tv.tv_sec
    "i"      # ut_tv.tv_usec
    "16s"    # ut_addr_v6
    "20x"    # __unused
)
UTMP_STRUCT_SIZE = UTMP_STRUCT.size

# EMPTY .. ACCOUNTING
UT_TYPES = range(0, 10)


@dataclass(frozen=True)
class SessionRecord:
    user: str
    timestamp: int
    terminal: str
    host: str
    ut_type: int = 7


def _decode(field: bytes) -> str:
    return field.split(b"\x00", 1)[0].decode("utf-8", errors="surrogateescape")


def parse_sessions(data: bytes, path: str = "<memory>") -> list[SessionRecord]:
    records = []
    usable = len(data) - len(data) % UTMP_STRUCT_SIZE
    if usable != len(data):
        logger.warning("%s: ignoring %d trailing bytes", path, len(data) - usable)

    for offset in range(0, usable, UTMP_STRUCT_SIZE):
        (ut_type, _pid, line, _id, user, host,
         _term, _exit, _session, tv_sec, _tv_usec, _addr) = UTMP_STRUCT.unpack_from(data, offset)
        if ut_type not in UT_TYPES:
            raise CorruptLog(
                f"{path}: record {offset // UTMP_STRUCT_SIZE} has invalid type {ut_type}"
            )
        records.append(SessionRecord(
            user=_decode(user),
            timestamp=tv_sec,
            terminal=_decode(line),
            host=_decode(host),
            ut_type=ut_type,
        ))
    return records


def read_sessions(path: str) -> list[SessionRecord]:
    """Read a whole wtmp/btmp file, oldest record first.

    Missing files and permission problems raise the recoverable NotFound and
    AccessDenied; any other failure raises LogReadError and ends the run.
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except FileNotFoundError as e:
        raise NotFound(f"{path}: {e.strerror}") from e
    except PermissionError as e:
        raise AccessDenied(f"{path}: {e.strerror}") from e
    except OSError as e:
        raise LogReadError(f"{path}: {e.strerror or e}") from e
    return parse_sessions(data, path)


def find_last(records: Sequence[SessionRecord], name: str) -> SessionRecord | None:
    """Most recent record for name.

    The query is cut to the width of ut_user and compared as a prefix, the
    way strncmp(3) does it, so "bob" also matches a session of "bobby".
    """
    query = name.encode("utf-8", errors="surrogateescape")[:UT_NAMESIZE]
    if not query:
        return None
    for record in reversed(records):
        if record.user.encode("utf-8", errors="surrogateescape").startswith(query):
            return record
    return None


class SessionLog:
    """One login-history log, read once; `records` is None when unreadable."""

    def __init__(self, path: str, records: list[SessionRecord] | None = None):
        self.path = path
        self.records = records

    @classmethod
    def open(cls, path: str) -> "SessionLog":
        try:
            return cls(path, read_sessions(path))
        except (NotFound, AccessDenied) as e:
            logger.info("login history not available: %s", e)
            return cls(path, None)

    @property
    def available(self) -> bool:
        return self.records is not None

    def last(self, name: str) -> SessionRecord | None:
        if self.records is None:
            raise AccessDenied(f"{self.path} was not readable")
        return find_last(self.records, name)


class LastLoginCollector(Collector):
    name = "last_login"
    fields = ("last_login",)

    def __init__(self, log: SessionLog):
        self.log = log

    def collect(self, account) -> dict[str, Any]:
        record = self.log.last(account.name)
        return {"last_login": record if record is not None else Sentinel.NONE}


class FailedLoginCollector(LastLoginCollector):
    name = "failed_login"
    fields = ("last_failed_login",)

    def collect(self, account) -> dict[str, Any]:
        record = self.log.last(account.name)
        return {"last_failed_login": record if record is not None else Sentinel.NONE}
