"""Tests for supplementary group resolution."""

import pytest

from loginfacts import FatalLookup, GroupEntry, GroupResolutionError, PasswdEntry, Sentinel
from loginfacts.groups import GroupCollector, resolve, supplementary_gids
from tests.conftest import FakeAccountSource

ACCOUNT = PasswdEntry("carol", 1002, 10, "", "/home/carol", "/bin/sh")
GROUPS = [GroupEntry("name10", 10), GroupEntry("name20", 20), GroupEntry("name30", 30)]


def source_with(gids, groups=GROUPS):
    return FakeAccountSource([ACCOUNT], groups, grouplists={"carol": gids})


@pytest.mark.unit
def test_primary_group_excluded():
    """Primary gid 10 is dropped, both remaining pairs are present."""
    value = resolve(source_with([10, 20, 30]), ACCOUNT)

    pairs = value.split(",")
    assert sorted(pairs) == ["20(name20)", "30(name30)"]


@pytest.mark.unit
def test_primary_gid_swapped_with_last():
    assert supplementary_gids(source_with([10, 20, 30]), ACCOUNT) == [30, 20]


@pytest.mark.unit
def test_only_one_primary_occurrence_removed():
    assert sorted(supplementary_gids(source_with([10, 20, 10]), ACCOUNT)) == [10, 20]


@pytest.mark.unit
def test_primary_not_in_list():
    assert supplementary_gids(source_with([20, 30]), ACCOUNT) == [20, 30]


@pytest.mark.unit
def test_no_supplementary_groups():
    assert resolve(source_with([10]), ACCOUNT) is None


@pytest.mark.unit
def test_unresolvable_gid_fails_whole_resolution():
    with pytest.raises(GroupResolutionError) as exc_info:
        resolve(source_with([10, 20, 999]), ACCOUNT)
    assert "999" in str(exc_info.value)


@pytest.mark.unit
class TestGroupCollector:

    def test_pairs(self):
        result = GroupCollector(source_with([10, 20])).gather(ACCOUNT)
        assert result.fields == {"supplementary_groups": "20(name20)"}

    def test_empty_is_none_not_unknown(self):
        result = GroupCollector(source_with([10])).gather(ACCOUNT)
        assert result.success
        assert result.fields == {"supplementary_groups": Sentinel.NONE}

    def test_unresolvable_is_unknown(self):
        result = GroupCollector(source_with([10, 999])).gather(ACCOUNT)
        assert not result.success
        assert result.fields == {"supplementary_groups": Sentinel.UNKNOWN}

    def test_grouplist_failure_is_fatal(self):
        source = source_with([10])

        def broken(name, gid):
            raise FatalLookup("group list for carol: I/O error")

        source.grouplist = broken
        with pytest.raises(FatalLookup):
            GroupCollector(source).gather(ACCOUNT)
