#!/usr/bin/env python3
"""
List information about the user and system accounts on this host.

Every account is enriched with group membership, password state and login
history, deduplicated, ordered by UID (or login) and printed as a table.

Usage:
    python lslogins.py                      # all accounts, default columns
    python lslogins.py -u --last --failed   # regular accounts and their logins
    python lslogins.py -l root,bin -o LOGIN,UID,SEC_GRPS
"""

import argparse
import datetime
import logging
import sys
import time
from dataclasses import dataclass, field
from operator import attrgetter
from typing import Any, Callable, Iterator

import yaml
from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError
from tqdm import tqdm

from loginfacts import (
    COLLECTORS,
    AccountSource,
    Collector,
    ConfigError,
    EmitError,
    FileAccountSource,
    LockState,
    LoginDefs,
    LsloginsError,
    PasswdEntry,
    PasswordState,
    Sentinel,
    SessionLog,
    SessionRecord,
    Tristate,
)
from loginfacts.accounts import SHADOW_PATH
from loginfacts.context import selinux_enabled
from loginfacts.logindefs import LOGIN_DEFS_PATH
from loginfacts.sessions import BTMP_PATH, WTMP_PATH

logger = logging.getLogger("lslogins")

# "nobody" on NFS hosts; stays visible under the regular-account bounds
NOBODY_UID = 65534


@dataclass(frozen=True)
class Column:
    name: str
    help: str
    field: str
    collector: str | None = None
    attr: str | None = None

    def extract(self, record: "AccountRecord") -> str:
        value = getattr(record, self.field)
        if self.attr is not None and isinstance(value, SessionRecord):
            value = getattr(value, self.attr)
            if self.attr == "timestamp":
                try:
                    return time.asctime(time.localtime(value))
                except (OverflowError, OSError, ValueError) as e:
                    raise EmitError(f"{self.name} for {record.login}: bad timestamp {value}") from e
            return value
        try:
            return cell(value)
        except EmitError as e:
            raise EmitError(f"{self.name} for {record.login}: {e}") from e


COLUMNS = {c.name: c for c in (
    Column("LOGIN", "user/system login", "login"),
    Column("UID", "user UID", "uid"),
    Column("GRP", "primary group name", "primary_group_name"),
    Column("GID", "primary group GID", "primary_gid"),
    Column("SEC_GRPS", "secondary group names and GIDs", "supplementary_groups", "groups"),
    Column("HOMEDIR", "home directory", "home_directory"),
    Column("SHELL", "login shell", "shell"),
    Column("FULLNAME", "full user name", "full_name"),
    Column("LAST_LOGIN", "date of last login", "last_login", "last_login", "timestamp"),
    Column("LAST_TTY", "last tty used", "last_login", "last_login", "terminal"),
    Column("LAST_HOSTNAME", "hostname during the last session", "last_login", "last_login", "host"),
    Column("FAILED_LOGIN", "date of last failed login", "last_failed_login", "failed_login", "timestamp"),
    Column("FAILED_TTY", "where did the login fail?", "last_failed_login", "failed_login", "terminal"),
    Column("HUSHED", "user's hush settings", "hushed_login", "hushed"),
    Column("NOLOGIN", "log in disabled by nologin(8) or pam_nologin(8)", "no_login_flag", "nologin"),
    Column("LOCKED", "password defined, but locked", "lock_state", "shadow"),
    Column("NOPASSWD", "password not required", "password_state", "shadow"),
    Column("PWD_WARN", "password warn interval", "warn_days", "shadow"),
    Column("PWD_CHANGE", "date of last password change", "last_change_date", "shadow"),
    Column("PWD_MIN", "number of days required between changes", "min_days", "shadow"),
    Column("PWD_MAX", "max number of days a password may remain unchanged", "max_days", "shadow"),
    Column("CONTEXT", "the user's security context", "security_context", "context"),
)}

FLAG_CELLS = {
    True: "1",
    False: "0",
    Tristate.YES: "1",
    Tristate.NO: "0",
    Tristate.UNKNOWN: "-",
    LockState.LOCKED: "1",
    LockState.UNLOCKED: "0",
    LockState.UNKNOWN: "-",
    PasswordState.NO_PASSWORD: "1",
    PasswordState.HAS_PASSWORD: "0",
    PasswordState.UNKNOWN: "-",
}


def cell(value: Any) -> str:
    """Text the renderer gets for one field value."""
    if isinstance(value, Sentinel):
        return str(value)
    if isinstance(value, (bool, Tristate, LockState, PasswordState)):
        return FLAG_CELLS[value]
    if isinstance(value, datetime.date):
        return value.strftime("%a %b %d %Y")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    raise EmitError(f"cannot render {value!r}")


def parse_columns(wanted: str | list[str]) -> tuple[Column, ...]:
    names = wanted.split(",") if isinstance(wanted, str) else list(wanted)
    columns = []
    for name in names:
        column = COLUMNS.get(str(name).strip().upper())
        if column is None:
            raise ConfigError(f"unknown column: {name}")
        columns.append(column)
    if not columns:
        raise ConfigError("no columns requested")
    return tuple(columns)


def default_columns(supp_groups: bool = False, expiration: bool = False, last: bool = False,
                    failed: bool = False, extra: bool = False, context: bool = False) -> tuple[Column, ...]:
    names = ["LOGIN", "UID", "GRP", "GID", "FULLNAME"]
    if supp_groups:
        names.append("SEC_GRPS")
    if expiration:
        names += ["PWD_CHANGE", "PWD_WARN"]
    if last:
        names += ["LAST_LOGIN", "LAST_TTY", "LAST_HOSTNAME"]
    if failed:
        names += ["FAILED_LOGIN", "FAILED_TTY"]
    if extra:
        names += ["HOMEDIR", "SHELL", "NOPASSWD", "NOLOGIN", "LOCKED", "HUSHED", "PWD_MIN", "PWD_MAX"]
    if context:
        names.append("CONTEXT")
    return tuple(COLUMNS[n] for n in names)


@dataclass(frozen=True)
class AccountRecord:
    login: str
    uid: int
    primary_group_name: str | None = None
    primary_gid: int | None = None
    full_name: str | None = None
    home_directory: str | None = None
    shell: str | None = None
    supplementary_groups: str | Sentinel | None = None
    password_state: PasswordState | None = None
    lock_state: LockState | None = None
    last_change_date: datetime.date | Sentinel | None = None
    min_days: int | Sentinel | None = None
    max_days: int | Sentinel | None = None
    warn_days: int | Sentinel | None = None
    last_login: SessionRecord | Sentinel | None = None
    last_failed_login: SessionRecord | Sentinel | None = None
    hushed_login: Tristate | None = None
    no_login_flag: bool | None = None
    security_context: str | Sentinel | None = None


@dataclass(frozen=True)
class AccountFilter:
    kind: str = "all"
    uid_min: int = 0
    uid_max: int = 0

    def selects(self, account: PasswdEntry) -> bool:
        if self.kind == "all":
            return True
        if self.kind == "user" and account.uid == NOBODY_UID:
            return True
        return self.uid_min <= account.uid <= self.uid_max


SORT_KEYS: dict[str, Callable[[AccountRecord], Any]] = {
    "uid": attrgetter("uid"),
    "login": attrgetter("login"),
}

OUTPUT_MODES = ("table", "colon", "export", "newline", "raw", "nul")

CONFIG_KEYS = {
    "uid_min", "uid_max", "sys_uid_min", "sys_uid_max",
    "path_wtmp", "path_btmp", "path_login_defs", "output", "sort",
}


def load_config_file(path: str) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"{path}: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")
    unknown = set(data) - CONFIG_KEYS
    if unknown:
        raise ConfigError(f"{path}: unknown keys: {', '.join(sorted(unknown))}")
    for key in ("uid_min", "uid_max", "sys_uid_min", "sys_uid_max"):
        if key in data and (not isinstance(data[key], int) or data[key] < 0):
            raise ConfigError(f"{path}: {key} must be a non-negative integer")
    if data.get("sort", "uid") not in SORT_KEYS:
        raise ConfigError(f"{path}: sort must be one of {', '.join(SORT_KEYS)}")
    return data


@dataclass(frozen=True)
class Config:
    columns: tuple[Column, ...]
    account_filter: AccountFilter = field(default_factory=AccountFilter)
    sort: str = "uid"
    mode: str = "table"
    headings: bool = True
    logins: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()
    wtmp_path: str = WTMP_PATH
    btmp_path: str = BTMP_PATH
    passwd_file: str | None = None
    group_file: str | None = None
    shadow_file: str = SHADOW_PATH
    hushlogin_file: str | None = None
    progress: bool = False

    @property
    def selection(self) -> bool:
        return bool(self.logins or self.groups)

    @classmethod
    def from_args(cls, args: argparse.Namespace, login_defs: LoginDefs | None = None) -> "Config":
        settings = load_config_file(args.config) if args.config else {}
        if login_defs is None:
            login_defs = LoginDefs.load(settings.get("path_login_defs", LOGIN_DEFS_PATH))

        if args.output:
            columns = parse_columns(args.output)
        elif "output" in settings:
            columns = parse_columns(settings["output"])
        else:
            columns = default_columns(
                supp_groups=args.supp_groups,
                expiration=args.acc_expiration,
                last=args.last,
                failed=args.failed,
                extra=args.extra,
                context=args.context,
            )

        # -s and -u together select everything
        if args.system_accs and not args.user_accs:
            account_filter = AccountFilter(
                "system",
                settings.get("sys_uid_min", login_defs.get_num("SYS_UID_MIN")),
                settings.get("sys_uid_max", login_defs.get_num("SYS_UID_MAX")),
            )
        elif args.user_accs and not args.system_accs:
            account_filter = AccountFilter(
                "user",
                settings.get("uid_min", login_defs.get_num("UID_MIN")),
                settings.get("uid_max", login_defs.get_num("UID_MAX")),
            )
        else:
            account_filter = AccountFilter()

        return cls(
            columns=columns,
            account_filter=account_filter,
            sort="login" if args.sort_by_name else settings.get("sort", "uid"),
            mode=args.mode or "table",
            headings=not args.noheadings,
            logins=_split(args.logins),
            groups=_split(args.groups),
            wtmp_path=args.wtmp_file or settings.get("path_wtmp", WTMP_PATH),
            btmp_path=args.btmp_file or settings.get("path_btmp", BTMP_PATH),
            passwd_file=args.passwd_file,
            group_file=args.group_file,
            shadow_file=args.shadow_file or SHADOW_PATH,
            hushlogin_file=login_defs.get_str("HUSHLOGIN_FILE"),
            progress=args.progress,
        )


def _split(values: list[str] | None) -> tuple[str, ...]:
    names = []
    for value in values or []:
        names.extend(n for n in value.split(",") if n)
    return tuple(names)


class _Node:
    __slots__ = ("record", "key", "left", "right", "height")

    def __init__(self, record: AccountRecord, key: Any):
        self.record = record
        self.key = key
        self.left: "_Node | None" = None
        self.right: "_Node | None" = None
        self.height = 1


def _height(node: _Node | None) -> int:
    return node.height if node is not None else 0


def _update(node: _Node) -> None:
    node.height = 1 + max(_height(node.left), _height(node.right))


def _rotate_right(node: _Node) -> _Node:
    pivot = node.left
    node.left = pivot.right
    pivot.right = node
    _update(node)
    _update(pivot)
    return pivot


def _rotate_left(node: _Node) -> _Node:
    pivot = node.right
    node.right = pivot.left
    pivot.left = node
    _update(node)
    _update(pivot)
    return pivot


def _rebalance(node: _Node) -> _Node:
    _update(node)
    balance = _height(node.left) - _height(node.right)
    if balance > 1:
        if _height(node.left.left) < _height(node.left.right):
            node.left = _rotate_left(node.left)
        return _rotate_right(node)
    if balance < -1:
        if _height(node.right.right) < _height(node.right.left):
            node.right = _rotate_right(node.right)
        return _rotate_left(node)
    return node


class AccountCollection:
    """Ordered set of account records, backed by an AVL tree.

    The sort key is fixed at construction. Inserting a record whose key is
    already present is a no-op: the first record seen is kept.
    """

    def __init__(self, key: Callable[[AccountRecord], Any] = SORT_KEYS["uid"]):
        self.key = key
        self._root: _Node | None = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[AccountRecord]:
        return self.traverse()

    def __contains__(self, record: AccountRecord) -> bool:
        key = self.key(record)
        node = self._root
        while node is not None:
            if key == node.key:
                return True
            node = node.left if key < node.key else node.right
        return False

    def insert(self, record: AccountRecord) -> bool:
        """Add a record; returns False when an equal key was already there."""
        size = self._size
        self._root = self._insert(self._root, record, self.key(record))
        return self._size != size

    def _insert(self, node: _Node | None, record: AccountRecord, key: Any) -> _Node:
        if node is None:
            self._size += 1
            return _Node(record, key)
        if key == node.key:
            return node
        if key < node.key:
            node.left = self._insert(node.left, record, key)
        else:
            node.right = self._insert(node.right, record, key)
        return _rebalance(node)

    def traverse(self) -> Iterator[AccountRecord]:
        stack: list[_Node] = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node.record
            node = node.right

    def clear(self) -> None:
        self._root = None
        self._size = 0


class RecordBuilder:
    def __init__(self, source, columns: tuple[Column, ...], account_filter: AccountFilter,
                 collectors: list[Collector] | None = None):
        self.source = source
        self.columns = columns
        self.account_filter = account_filter
        self.collectors = collectors or []
        self._wanted = {c.field for c in columns}

    def build(self, account: PasswdEntry) -> AccountRecord | None:
        """Record for one passwd entry, or None when it is not selected
        or its primary group does not resolve."""
        if not self.account_filter.selects(account):
            return None

        group = self.source.group(account.gid)
        if group is None:
            logger.debug("%s: primary group %d does not resolve, skipped", account.name, account.gid)
            return None

        base = {
            "primary_group_name": group.name,
            "primary_gid": account.gid,
            "full_name": account.gecos,
            "home_directory": account.home,
            "shell": account.shell,
        }
        fields = {k: v for k, v in base.items() if k in self._wanted}
        for collector in self.collectors:
            result = collector.gather(account)
            if not result.success:
                logger.debug("%s: %s unavailable: %s", result.login, result.collector_type, result.error)
            fields.update(result.fields)

        return AccountRecord(login=account.name, uid=account.uid, **fields)

    def lookup(self, login: str) -> AccountRecord | None:
        account = self.source.lookup(login)
        if account is None:
            logger.debug("%s: no such account", login)
            return None
        return self.build(account)


def emit(collection: AccountCollection, columns: tuple[Column, ...], reporter: "Reporter") -> int:
    """Hand every record to the reporter, in collection order."""
    rows = 0
    for record in collection.traverse():
        reporter.add_row([column.extract(record) for column in columns])
        rows += 1
    return rows


def _pad(value: str, width: int) -> str:
    return value + " " * (width - len(value))


def _hex(ch: str) -> str:
    return "".join(f"\\x{b:02x}" for b in ch.encode("utf-8", errors="surrogateescape"))


def _safe_escape(value: str) -> str:
    # undecodable bytes come back as lone surrogates
    return "".join(ch if ch.isprintable() else _hex(ch) for ch in value)


def _raw_escape(value: str) -> str:
    return "".join(_hex(ch) if ch in " \\" or not ch.isprintable() else ch for ch in value)


def _export_quote(value: str) -> str:
    out = []
    for ch in value:
        if ch in '"\\`$':
            out.append("\\" + ch)
        elif not ch.isprintable():
            out.append(_hex(ch))
        else:
            out.append(ch)
    return "".join(out)


class Reporter:
    MODES = {
        "table": ("table.txt.j2", " ", "\n", True),
        "colon": ("raw.txt.j2", ":", "\n", True),
        "raw": ("raw.txt.j2", " ", "\n", True),
        "nul": ("raw.txt.j2", " ", "\0", True),
        "export": ("export.txt.j2", " ", "\n", False),
        "newline": ("export.txt.j2", "\n", "\n", False),
    }

    def __init__(self, columns: tuple[Column, ...], mode: str = "table", headings: bool = True):
        if mode not in self.MODES:
            raise ConfigError(f"unknown output mode: {mode}")
        self.columns = columns
        self.mode = mode
        self.headings = headings
        self.rows: list[list[str]] = []
        self.env = Environment(
            loader=PackageLoader("loginfacts", "templates"),
            undefined=StrictUndefined,
            trim_blocks=True,
            autoescape=False
        )
        self.env.filters['pad'] = _pad
        self.env.filters['raw_escape'] = _raw_escape
        self.env.filters['export_quote'] = _export_quote

    def add_row(self, values: list[str]) -> None:
        if len(values) != len(self.columns):
            raise EmitError(f"row has {len(values)} cells for {len(self.columns)} columns")
        for value in values:
            if not isinstance(value, str):
                raise EmitError(f"cell {value!r} is not text")
        self.rows.append(values)

    def render(self) -> str:
        template_name, separator, line_end, has_header = self.MODES[self.mode]
        names = [c.name for c in self.columns]
        rows = self.rows
        if has_header and self.headings:
            rows = [names] + rows
        if self.mode == "table":
            # widths are measured on the escaped text
            rows = [[_safe_escape(cell) for cell in row] for row in rows]
        widths = [max(len(row[i]) for row in rows) if rows else 0 for i in range(len(names))]
        try:
            template = self.env.get_template(template_name)
            return template.render(
                rows=rows,
                columns=names,
                widths=widths,
                separator=separator,
                line_end=line_end,
            )
        except TemplateError as e:
            raise EmitError(f"rendering {self.mode} output: {e}") from e

    def write(self, out) -> None:
        out.write(self.render())
        out.flush()


class Inspector:
    def __init__(self, config: Config, source=None):
        self.config = config
        self.source = source if source is not None else self._make_source()
        self.wtmp: SessionLog | None = None
        self.btmp: SessionLog | None = None

    def _make_source(self):
        if self.config.passwd_file or self.config.group_file:
            return FileAccountSource(
                passwd_path=self.config.passwd_file or "/etc/passwd",
                group_path=self.config.group_file or "/etc/group",
                shadow_path=self.config.shadow_file,
            )
        return AccountSource(shadow_path=self.config.shadow_file)

    def _wants(self, collector: str) -> bool:
        return any(c.collector == collector for c in self.config.columns)

    def open_logs(self) -> None:
        if self._wants("last_login") and self.wtmp is None:
            self.wtmp = SessionLog.open(self.config.wtmp_path)
        if self._wants("failed_login") and self.btmp is None:
            self.btmp = SessionLog.open(self.config.btmp_path)

    def make_collectors(self) -> list[Collector]:
        collectors = []
        for name, collector_cls in COLLECTORS.items():
            if not self._wants(name):
                continue
            if name == "last_login":
                collectors.append(collector_cls(self.wtmp))
            elif name == "failed_login":
                collectors.append(collector_cls(self.btmp))
            elif name in ("groups", "shadow"):
                collectors.append(collector_cls(self.source))
            elif name == "hushed":
                collectors.append(collector_cls(self.config.hushlogin_file))
            else:
                collectors.append(collector_cls())
        return collectors

    def select_logins(self) -> list[str] | None:
        """Explicit login list from -l and -g, or None to enumerate all."""
        if not self.config.selection:
            return None
        logins = list(self.config.logins)
        for name in self.config.groups:
            group = self.source.group_named(name)
            if group is None:
                logger.debug("%s: no such group", name)
                continue
            logins.extend(group.members)
        return logins

    def collect(self) -> AccountCollection:
        self.open_logs()
        builder = RecordBuilder(
            self.source,
            self.config.columns,
            self.config.account_filter,
            self.make_collectors(),
        )
        collection = AccountCollection(SORT_KEYS[self.config.sort])

        logins = self.select_logins()
        if logins is not None:
            items = tqdm(logins, desc="logins", unit="acct", disable=not self.config.progress, file=sys.stderr)
            for login in items:
                record = builder.lookup(login)
                if record is not None:
                    collection.insert(record)
        else:
            items = tqdm(self.source.entries(), desc="accounts", unit="acct",
                         disable=not self.config.progress, file=sys.stderr)
            for account in items:
                record = builder.build(account)
                if record is not None:
                    collection.insert(record)

        logger.info("%d account(s) collected", len(collection))
        return collection

    def report(self, out=None) -> int:
        collection = self.collect()
        reporter = Reporter(self.config.columns, self.config.mode, self.config.headings)
        rows = emit(collection, self.config.columns, reporter)
        reporter.write(out if out is not None else sys.stdout)
        return rows


def build_parser() -> argparse.ArgumentParser:
    columns = "\n".join(f"  {c.name:>14}  {c.help}" for c in COLUMNS.values())
    parser = argparse.ArgumentParser(
        prog="lslogins",
        description="Display information about known users in the system",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available columns:
{columns}

Examples:
  # Regular accounts with their last logins
  lslogins -u --last

  # Two accounts, explicit columns, sorted by login
  lslogins -t -l root,daemon -o LOGIN,UID,SEC_GRPS

  # Members of the wheel group in /etc/passwd-like output
  lslogins -g wheel -c
        """
    )

    parser.add_argument("-a", "--acc-expiration", action="store_true",
                        help="Display data about the password aging")
    parser.add_argument("-f", "--failed", action="store_true",
                        help="Display data about the users' last failed logins")
    parser.add_argument("-g", "--groups", action="append", metavar="GROUPS",
                        help="Display users belonging to a group in GROUPS")
    parser.add_argument("-l", "--logins", action="append", metavar="LOGINS",
                        help="Display only users from LOGINS")
    parser.add_argument("--last", action="store_true",
                        help="Show info about the users' last login sessions")
    parser.add_argument("-m", "--supp-groups", action="store_true",
                        help="Display supplementary groups as well")
    parser.add_argument("-o", "--output", metavar="LIST",
                        help="Define the columns to output")
    parser.add_argument("-s", "--system-accs", action="store_true",
                        help="Display system accounts")
    parser.add_argument("-t", "--sort-by-name", action="store_true",
                        help="Sort output by login instead of UID")
    parser.add_argument("-u", "--user-accs", action="store_true",
                        help="Display user accounts")
    parser.add_argument("-x", "--extra", action="store_true",
                        help="Display extra information")
    parser.add_argument("-Z", "--context", action="store_true",
                        help="Display the users' security context")
    parser.add_argument("--noheadings", action="store_true",
                        help="Don't print headings")

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("-c", "--colon-separate", dest="mode", action="store_const", const="colon",
                       help="Display data in a format similar to /etc/passwd")
    modes.add_argument("-e", "--export", dest="mode", action="store_const", const="export",
                       help="Display in an export-able output format")
    modes.add_argument("-n", "--newline", dest="mode", action="store_const", const="newline",
                       help="Display each piece of information on a new line")
    modes.add_argument("-r", "--raw", dest="mode", action="store_const", const="raw",
                       help="Display the raw table")
    modes.add_argument("-z", "--print0", dest="mode", action="store_const", const="nul",
                       help="Delimit user entries with a nul character")

    parser.add_argument("--wtmp-file", "--path-wtmp", dest="wtmp_file", metavar="PATH",
                        help=f"Set an alternate path for wtmp (default: {WTMP_PATH})")
    parser.add_argument("--btmp-file", "--path-btmp", dest="btmp_file", metavar="PATH",
                        help=f"Set an alternate path for btmp (default: {BTMP_PATH})")
    parser.add_argument("--passwd-file", metavar="PATH",
                        help="Read accounts from PATH instead of the system database")
    parser.add_argument("--group-file", metavar="PATH",
                        help="Read groups from PATH instead of the system database")
    parser.add_argument("--shadow-file", metavar="PATH",
                        help=f"Read password data from PATH (default: {SHADOW_PATH})")
    parser.add_argument("--config", metavar="PATH",
                        help="YAML file with UID ranges, log paths and columns")
    parser.add_argument("--progress", action="store_true",
                        help="Show a progress bar on stderr while collecting")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log diagnostics to stderr (repeat for debug)")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(name)s: %(levelname)s: %(message)s", stream=sys.stderr)

    if args.context and not selinux_enabled():
        logger.warning("--context only works on a system with SELinux enabled")
        args.context = False

    try:
        config = Config.from_args(args)
        Inspector(config).report()
        return 0

    except LsloginsError as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
