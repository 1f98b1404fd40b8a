import json

import pytest

from cmdpad.utils.helpers import atomic_write_json, format_duration, parse_assignments


def test_parse_assignments():
    assert parse_assignments(["branch=main", "msg=a=b", "empty="]) == {
        "branch": "main", "msg": "a=b", "empty": "",
    }


@pytest.mark.parametrize("item", ["novalue", "=value"])
def test_parse_assignments_rejects_malformed(item):
    with pytest.raises(ValueError):
        parse_assignments([item])


@pytest.mark.parametrize("seconds, expected", [
    (5, "5s"),
    (65, "1m05s"),
    (3725, "1h02m05s"),
])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_atomic_write_json(tmp_path):
    path = tmp_path / "nested" / "data.json"
    assert atomic_write_json(path, [{"id": "a"}]) is True
    assert json.loads(path.read_text()) == [{"id": "a"}]
    assert list(path.parent.iterdir()) == [path]
