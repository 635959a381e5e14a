# Status Collectors - hushed logins and nologin(8) state.

import os
from typing import Any

from .base import AccessDenied, Collector, Tristate

HUSHLOGINS_PATH = "/etc/hushlogins"
HUSHLOGIN_FILE = ".hushlogin"
NOLOGIN_PATH = "/etc/nologin"


def hushlogin_status(account, setting: str | None = None,
                     global_path: str = HUSHLOGINS_PATH) -> Tristate:
    """Whether login(1) would be quiet for this account.

    `setting` is HUSHLOGIN_FILE from login.defs. An absolute path names a
    global file listing logins (or shells, for lines starting with "/");
    an empty global file hushes everybody. A relative name is looked up in
    the home directory.
    """
    if setting == "":
        return Tristate.NO
    files = [setting] if setting is not None else [global_path, HUSHLOGIN_FILE]

    for file in files:
        if file.startswith("/"):
            try:
                if os.stat(file).st_size == 0:
                    return Tristate.YES
                with open(file, encoding="utf-8", errors="replace") as f:
                    lines = f.read().splitlines()
            except OSError:
                continue
            for line in lines:
                if line == (account.shell if line.startswith("/") else account.name):
                    return Tristate.YES
            # a global file overrides the per-account ones
            return Tristate.NO

        if not account.home:
            continue
        try:
            os.stat(os.path.join(account.home, file))
            return Tristate.YES
        except PermissionError as e:
            raise AccessDenied(f"{account.home}: {e.strerror}") from e
        except OSError:
            continue
    return Tristate.NO


class HushCollector(Collector):
    name = "hushed"
    fields = ("hushed_login",)

    def __init__(self, setting: str | None = None, global_path: str = HUSHLOGINS_PATH):
        self.setting = setting
        self.global_path = global_path

    def unknown(self) -> dict[str, Any]:
        return {"hushed_login": Tristate.UNKNOWN}

    def collect(self, account) -> dict[str, Any]:
        return {"hushed_login": hushlogin_status(account, self.setting, self.global_path)}


class NoLoginCollector(Collector):
    name = "nologin"
    fields = ("no_login_flag",)

    def __init__(self, nologin_path: str = NOLOGIN_PATH):
        self.nologin_path = nologin_path

    def collect(self, account) -> dict[str, Any]:
        disabled = "nologin" in account.shell or (
            account.uid != 0 and os.access(self.nologin_path, os.R_OK)
        )
        return {"no_login_flag": disabled}
