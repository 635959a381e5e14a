# login.defs reader - UID ranges and the hushlogin setting.

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

LOGIN_DEFS_PATH = "/etc/login.defs"

DEFAULTS = {
    "UID_MIN": "1000",
    "UID_MAX": "60000",
    "SYS_UID_MIN": "201",
    "SYS_UID_MAX": "999",
}


class LoginDefs:
    def __init__(self, values: dict[str, str] | None = None, path: str | None = None):
        self.path = path
        self.values = dict(values or {})

    @classmethod
    def load(cls, path: str = LOGIN_DEFS_PATH) -> "LoginDefs":
        try:
            text = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            # a missing login.defs just means built-in defaults
            logger.debug("%s not read: %s", path, e)
            return cls(path=path)
        return cls(cls.parse(text), path=path)

    @staticmethod
    def parse(text: str) -> dict[str, str]:
        values = {}
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split(None, 1)
            value = parts[1].strip() if len(parts) > 1 else ""
            if len(value) >= 2 and value[0] == value[-1] == '"':
                value = value[1:-1]
            values[parts[0]] = value
        return values

    def get_str(self, name: str, default: str | None = None) -> str | None:
        if name in self.values:
            return self.values[name]
        return DEFAULTS.get(name, default)

    def get_num(self, name: str, default: int | None = None) -> int | None:
        value = self.get_str(name)
        if value is None:
            return default
        try:
            # strtoul(..., 0): hex and octal prefixes are honoured
            if len(value) > 1 and value[0] == "0" and value.isdigit():
                return int(value, 8)
            return int(value, 0)
        except ValueError:
            logger.warning("%s: ignoring bad numeric value %s=%r", self.path, name, value)
            fallback = DEFAULTS.get(name)
            return int(fallback) if fallback is not None else default
