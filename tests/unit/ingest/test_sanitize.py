import re

import pytest

from src.giffy.ingest.sanitize import sanitize_filename

SAFE = re.compile(r"^[A-Za-z0-9._-]+$")


@pytest.mark.parametrize(
    "name",
    [
        'evil"; rm -rf / #.mp4',
        "$(whoami).mov",
        "`id`.mkv",
        "name with spaces.webm",
        "../../etc/passwd",
        "clip|tee>out.mp4",
        "кино.mp4",
        "tab\tnew\nline.avi",
    ],
)
def test_sanitize_strips_shell_metacharacters(name: str) -> None:
    result = sanitize_filename(name)

    assert SAFE.match(result)
    assert len(result) == len(name)


def test_sanitize_keeps_safe_names_unchanged() -> None:
    assert sanitize_filename("My_Clip-01.final.mp4") == "My_Clip-01.final.mp4"


def test_sanitize_replaces_with_placeholder() -> None:
    assert sanitize_filename("a b;c.mp4") == "a_b_c.mp4"


@pytest.mark.parametrize("name", ["", None])
def test_sanitize_empty_name_falls_back(name) -> None:
    assert sanitize_filename(name) == "upload"
