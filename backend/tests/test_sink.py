"""
test_sink.py — the local output sink under ``<data>/reports``.
"""

import re
from pathlib import Path

import pytest

from app.services.report.sink import LocalOutputSink


def test_save_writes_file_and_returns_data_url(tmp_path):
    sink = LocalOutputSink(tmp_path, "http://testserver/")
    stored = sink.save(b"xlsx", "reports/Acme_竣工図書_20240501T093015250Z.xlsx")

    assert (tmp_path / "reports" / "Acme_竣工図書_20240501T093015250Z.xlsx").read_bytes() == b"xlsx"
    assert stored.url.startswith("http://testserver/data/reports/Acme_")
    assert "竣工図書" not in stored.url  # percent-encoded
    assert stored.expires_at is None


def test_same_name_twice_keeps_both_files(tmp_path):
    sink = LocalOutputSink(tmp_path)
    first = sink.save(b"one", "reports/Acme.xlsx")
    second = sink.save(b"two", "reports/Acme.xlsx")

    assert first.path != second.path
    assert re.fullmatch(r"Acme-[0-9a-f]{6}\.xlsx", Path(second.path).name)
    assert (tmp_path / "reports" / "Acme.xlsx").read_bytes() == b"one"
    assert Path(second.path).read_bytes() == b"two"
    assert second.url.endswith(Path(second.path).name)


@pytest.mark.parametrize("path", ["/etc/passwd", "reports/../../escape.xlsx"])
def test_paths_outside_data_dir_are_rejected(tmp_path, path):
    with pytest.raises(ValueError):
        LocalOutputSink(tmp_path).save(b"x", path)
