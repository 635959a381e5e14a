# Group Collector - supplementary group membership.

from typing import Any

from .base import Collector, GroupResolutionError, Sentinel


def supplementary_gids(source, account) -> list[int]:
    """Group list of the account without its primary group.

    One occurrence of the primary gid is dropped by moving the last gid into
    its slot, so the order of what remains is not meaningful.
    """
    gids = source.grouplist(account.name, account.gid)
    if account.gid in gids:
        n = gids.index(account.gid)
        gids[n] = gids[-1]
        gids.pop()
    return gids


def resolve(source, account) -> str | None:
    gids = supplementary_gids(source, account)
    if not gids:
        return None

    pairs = []
    for gid in gids:
        group = source.group(gid)
        if group is None:
            raise GroupResolutionError(f"gid {gid} of {account.name} has no group entry")
        pairs.append(f"{gid}({group.name})")
    return ",".join(pairs)


class GroupCollector(Collector):
    name = "groups"
    fields = ("supplementary_groups",)

    def __init__(self, source):
        self.source = source

    def collect(self, account) -> dict[str, Any]:
        groups = resolve(self.source, account)
        return {"supplementary_groups": groups if groups is not None else Sentinel.NONE}
