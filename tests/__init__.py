import difflib
import json
import os


def build_absolute_file_path(relative_path):
    return os.path.join(
        os.path.dirname(os.path.dirname(os.path.realpath(__file__))),
        relative_path
    )


def assert_equal(actual, expected):
    if not isinstance(actual, str):
        actual = json.dumps(actual, indent=4, sort_keys=True)
    if not isinstance(expected, str):
        expected = json.dumps(expected, indent=4, sort_keys=True)
    diff = difflib.unified_diff(
        expected.splitlines(True),
        actual.splitlines(True),
    )
    diff = ''.join(diff)
    assert actual == expected and not diff, diff