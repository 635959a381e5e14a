"""Shared pytest fixtures for lslogins tests.

Nothing here reads the host's account databases or login logs: accounts
come from FakeAccountSource or from passwd/group/shadow files written to
tmp_path, session logs are real utmp records written to tmp_path.
"""

from pathlib import Path

import pytest

from loginfacts import GroupEntry, NotFound, PasswdEntry, ShadowEntry
from loginfacts.sessions import UTMP_STRUCT

USER_PROCESS = 7


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no host databases)")


def utmp_record(user: str, timestamp: int, line: str = "pts/0", host: str = "",
                ut_type: int = USER_PROCESS, pid: int = 1000) -> bytes:
    """Pack one 384-byte glibc utmp record."""
    return UTMP_STRUCT.pack(
        ut_type,
        pid,
        line.encode(),
        b"ts/0",
        user.encode(),
        host.encode(),
        0,
        0,
        0,
        timestamp,
        0,
        b"\x00" * 16,
    )


def write_log(path: Path, records: list[bytes]) -> str:
    path.write_bytes(b"".join(records))
    return str(path)


class FakeAccountSource:
    """In-memory stand-in for AccountSource."""

    def __init__(self, users=(), groups=(), shadows=(), shadow_error=None, grouplists=None):
        self.users = list(users)
        self.groups = list(groups)
        self.shadows = {s.name: s for s in shadows}
        self.shadow_error = shadow_error
        self.grouplists = dict(grouplists or {})
        self.shadow_calls = []

    def lookup(self, name):
        return next((u for u in self.users if u.name == name), None)

    def entries(self):
        yield from self.users

    def group(self, gid):
        return next((g for g in self.groups if g.gid == gid), None)

    def group_named(self, name):
        return next((g for g in self.groups if g.name == name), None)

    def grouplist(self, name, gid):
        if name in self.grouplists:
            return list(self.grouplists[name])
        return [gid] + [g.gid for g in self.groups if name in g.members and g.gid != gid]

    def shadow(self, name):
        self.shadow_calls.append(name)
        if self.shadow_error is not None:
            raise self.shadow_error
        if name not in self.shadows:
            raise NotFound(f"no shadow entry for {name}")
        return self.shadows[name]


@pytest.fixture
def users():
    return [
        PasswdEntry("root", 0, 0, "root", "/root", "/bin/bash"),
        PasswdEntry("daemon", 1, 1, "daemon", "/usr/sbin", "/usr/sbin/nologin"),
        PasswdEntry("sshd", 105, 65534, "", "/run/sshd", "/usr/sbin/nologin"),
        PasswdEntry("alice", 1000, 1000, "Alice Liddell,,,", "/home/alice", "/bin/bash"),
        PasswdEntry("bob", 1001, 1001, "Bob", "/home/bob", "/bin/zsh"),
        PasswdEntry("nfsnobody", 65534, 65534, "Anonymous NFS User", "/nonexistent", "/sbin/nologin"),
    ]


@pytest.fixture
def groups():
    return [
        GroupEntry("root", 0),
        GroupEntry("daemon", 1),
        GroupEntry("wheel", 10, ("alice",)),
        GroupEntry("audio", 29, ("alice", "bob")),
        GroupEntry("alice", 1000),
        GroupEntry("bob", 1001),
        GroupEntry("nogroup", 65534),
    ]


@pytest.fixture
def shadows():
    return [
        ShadowEntry("root", "$6$salt$hash", 19000, 0, 99999, 7),
        ShadowEntry("daemon", "*", 19000, 0, 99999, 7),
        ShadowEntry("alice", "$6$salt$hash", 19500, 1, 90, 14),
        ShadowEntry("bob", "!$6$salt$hash", None, None, None, None),
        ShadowEntry("nfsnobody", "", 19000, None, None, None),
    ]


@pytest.fixture
def source(users, groups, shadows):
    return FakeAccountSource(users, groups, shadows)


@pytest.fixture
def account_files(tmp_path):
    """passwd, group and shadow files plus a private lock path."""
    passwd = tmp_path / "passwd"
    passwd.write_text(
        "root:x:0:0:root:/root:/bin/bash\n"
        "daemon:x:1:1:daemon:/usr/sbin:/usr/sbin/nologin\n"
        "# a comment\n"
        "alice:x:1000:1000:Alice Liddell,,,:/home/alice:/bin/bash\n"
        "bob:x:1001:1001:Bob:/home/bob:/bin/zsh\n"
        "orphan:x:1002:4242:No Group:/home/orphan:/bin/sh\n"
    )
    group = tmp_path / "group"
    group.write_text(
        "root:x:0:\n"
        "daemon:x:1:\n"
        "wheel:x:10:alice\n"
        "audio:x:29:alice,bob\n"
        "alice:x:1000:\n"
        "bob:x:1001:\n"
    )
    shadow = tmp_path / "shadow"
    shadow.write_text(
        "root:$6$salt$hash:19000:0:99999:7:::\n"
        "alice:$6$salt$hash:19500:1:90:14:::\n"
        "bob:!$6$salt$hash::::::\n"
    )
    return {
        "passwd": str(passwd),
        "group": str(group),
        "shadow": str(shadow),
        "lock": str(tmp_path / ".pwd.lock"),
    }
