# Context Collector - SELinux security context.

from pathlib import Path
from typing import Any

from .base import AccessDenied, Collector, NotFound

SELINUX_ENFORCE_PATH = "/sys/fs/selinux/enforce"
PROC_CONTEXT_PATH = "/proc/self/attr/current"


def selinux_enabled(enforce_path: str = SELINUX_ENFORCE_PATH) -> bool:
    return Path(enforce_path).exists()


def current_context(path: str = PROC_CONTEXT_PATH) -> str:
    """Security context of this process, as getcon(3) reports it."""
    try:
        raw = Path(path).read_bytes()
    except PermissionError as e:
        raise AccessDenied(f"{path}: {e.strerror}") from e
    except OSError as e:
        raise NotFound(f"{path}: {e.strerror or e}") from e
    context = raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace").strip()
    if not context:
        raise NotFound(f"{path}: no security context")
    return context


class ContextCollector(Collector):
    name = "context"
    fields = ("security_context",)

    def __init__(self, path: str = PROC_CONTEXT_PATH, enforce_path: str = SELINUX_ENFORCE_PATH):
        self.path = path
        self.enforce_path = enforce_path

    def collect(self, account) -> dict[str, Any]:
        # other LSMs answer through the same proc file
        if not selinux_enabled(self.enforce_path):
            raise NotFound("SELinux is not enabled")
        return {"security_context": current_context(self.path)}
