# Account source adapters - passwd, group and shadow lookups.
#
# AccountSource talks to the host databases (NSS through pwd/grp, shadow
# read from file under the passwd lock). FileAccountSource reads explicit
# passwd/group/shadow files, which is also what the tests use.

import errno
import fcntl
import grp
import logging
import os
import pwd
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .base import AccessDenied, FatalLookup, NotFound

logger = logging.getLogger(__name__)

SHADOW_PATH = "/etc/shadow"
PWD_LOCK_PATH = "/etc/.pwd.lock"
LOCK_TIMEOUT = 15


@dataclass(frozen=True)
class PasswdEntry:
    name: str
    uid: int
    gid: int
    gecos: str
    home: str
    shell: str


@dataclass(frozen=True)
class GroupEntry:
    name: str
    gid: int
    members: tuple[str, ...] = ()


@dataclass(frozen=True)
class ShadowEntry:
    name: str
    password: str
    last_change: int | None = None
    min_days: int | None = None
    max_days: int | None = None
    warn_days: int | None = None


@contextmanager
def pwd_lock(path: str = PWD_LOCK_PATH, timeout: float = LOCK_TIMEOUT):
    """Hold the advisory passwd lock, like lckpwdf(3).

    Yields whether the lock was actually taken. Not being able to take it
    (usually: not root) is not an error, the caller reads anyway.
    """
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_CLOEXEC, 0o600)
    except OSError as e:
        logger.debug("passwd lock %s not taken: %s", path, e)
        yield False
        return

    locked = False
    try:
        deadline = time.monotonic() + timeout
        while True:
            try:
                fcntl.lockf(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                locked = True
                break
            except OSError as e:
                if e.errno not in (errno.EAGAIN, errno.EACCES) or time.monotonic() >= deadline:
                    logger.warning("passwd lock %s not taken: %s", path, e)
                    break
                time.sleep(0.1)
        yield locked
    finally:
        if locked:
            fcntl.lockf(fd, fcntl.LOCK_UN)
        os.close(fd)


def _days(value: str) -> int | None:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_shadow_line(line: str) -> ShadowEntry | None:
    parts = line.rstrip("\n").split(":")
    if len(parts) < 2 or not parts[0] or parts[0].startswith(("#", "+", "-")):
        return None
    parts += [""] * (9 - len(parts))
    return ShadowEntry(
        name=parts[0],
        password=parts[1],
        last_change=_days(parts[2]),
        min_days=_days(parts[3]),
        max_days=_days(parts[4]),
        warn_days=_days(parts[5]),
    )


def parse_passwd_line(line: str) -> PasswdEntry | None:
    parts = line.rstrip("\n").split(":")
    if len(parts) != 7 or not parts[0] or parts[0].startswith(("#", "+", "-")):
        return None
    try:
        uid, gid = int(parts[2]), int(parts[3])
    except ValueError:
        return None
    return PasswdEntry(
        name=parts[0],
        uid=uid,
        gid=gid,
        gecos=parts[4],
        home=parts[5],
        shell=parts[6],
    )


def parse_group_line(line: str) -> GroupEntry | None:
    parts = line.rstrip("\n").split(":")
    if len(parts) != 4 or not parts[0] or parts[0].startswith(("#", "+", "-")):
        return None
    try:
        gid = int(parts[2])
    except ValueError:
        return None
    members = tuple(m for m in parts[3].split(",") if m)
    return GroupEntry(name=parts[0], gid=gid, members=members)


class AccountSource:
    """Host account, group and shadow databases."""

    def __init__(self, shadow_path: str = SHADOW_PATH, lock_path: str = PWD_LOCK_PATH):
        self.shadow_path = shadow_path
        self.lock_path = lock_path

    @staticmethod
    def _passwd(pw) -> PasswdEntry:
        return PasswdEntry(
            name=pw.pw_name,
            uid=pw.pw_uid,
            gid=pw.pw_gid,
            gecos=pw.pw_gecos,
            home=pw.pw_dir,
            shell=pw.pw_shell,
        )

    @staticmethod
    def _group(gr) -> GroupEntry:
        return GroupEntry(name=gr.gr_name, gid=gr.gr_gid, members=tuple(gr.gr_mem))

    def lookup(self, name: str) -> PasswdEntry | None:
        try:
            return self._passwd(pwd.getpwnam(name))
        except KeyError:
            return None
        except OSError as e:
            raise FatalLookup(f"passwd lookup for {name}: {e}") from e

    def entries(self) -> Iterator[PasswdEntry]:
        try:
            database = pwd.getpwall()
        except OSError as e:
            raise FatalLookup(f"passwd enumeration: {e}") from e
        for pw in database:
            yield self._passwd(pw)

    def group(self, gid: int) -> GroupEntry | None:
        try:
            return self._group(grp.getgrgid(gid))
        except (KeyError, OverflowError):
            return None
        except OSError as e:
            raise FatalLookup(f"group lookup for {gid}: {e}") from e

    def group_named(self, name: str) -> GroupEntry | None:
        try:
            return self._group(grp.getgrnam(name))
        except KeyError:
            return None
        except OSError as e:
            raise FatalLookup(f"group lookup for {name}: {e}") from e

    def grouplist(self, name: str, gid: int) -> list[int]:
        try:
            return list(os.getgrouplist(name, gid))
        except OSError as e:
            raise FatalLookup(f"group list for {name}: {e}") from e

    def shadow(self, name: str) -> ShadowEntry:
        """Read one shadow entry while holding the passwd lock.

        Raises AccessDenied or NotFound for recoverable absence and
        FatalLookup for any other I/O failure.
        """
        with pwd_lock(self.lock_path):
            try:
                with open(self.shadow_path, encoding="utf-8", errors="surrogateescape") as f:
                    for line in f:
                        entry = parse_shadow_line(line)
                        if entry is not None and entry.name == name:
                            return entry
            except PermissionError as e:
                raise AccessDenied(f"{self.shadow_path}: {e.strerror}") from e
            except FileNotFoundError as e:
                raise NotFound(f"{self.shadow_path}: {e.strerror}") from e
            except OSError as e:
                raise FatalLookup(f"{self.shadow_path}: {e}") from e
        raise NotFound(f"no shadow entry for {name}")


class FileAccountSource(AccountSource):
    """Account databases read from explicit passwd/group files."""

    def __init__(self, passwd_path: str = "/etc/passwd", group_path: str = "/etc/group",
                 shadow_path: str = SHADOW_PATH, lock_path: str = PWD_LOCK_PATH):
        super().__init__(shadow_path=shadow_path, lock_path=lock_path)
        self.passwd_path = Path(passwd_path)
        self.group_path = Path(group_path)
        self._passwd_cache: list[PasswdEntry] | None = None
        self._group_cache: list[GroupEntry] | None = None

    def _read(self, path: Path, parse) -> list:
        try:
            text = path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            raise FatalLookup(f"{path}: {e.strerror or e}") from e
        entries = []
        for line in text.splitlines():
            entry = parse(line)
            if entry is not None:
                entries.append(entry)
        return entries

    def _users(self) -> list[PasswdEntry]:
        if self._passwd_cache is None:
            self._passwd_cache = self._read(self.passwd_path, parse_passwd_line)
        return self._passwd_cache

    def _groups(self) -> list[GroupEntry]:
        if self._group_cache is None:
            self._group_cache = self._read(self.group_path, parse_group_line)
        return self._group_cache

    def lookup(self, name: str) -> PasswdEntry | None:
        return next((u for u in self._users() if u.name == name), None)

    def entries(self) -> Iterator[PasswdEntry]:
        yield from self._users()

    def group(self, gid: int) -> GroupEntry | None:
        return next((g for g in self._groups() if g.gid == gid), None)

    def group_named(self, name: str) -> GroupEntry | None:
        return next((g for g in self._groups() if g.name == name), None)

    def grouplist(self, name: str, gid: int) -> list[int]:
        # getgrouplist(3): the primary gid first, then every group naming the user
        gids = [gid]
        for group in self._groups():
            if name in group.members and group.gid not in gids:
                gids.append(group.gid)
        return gids
