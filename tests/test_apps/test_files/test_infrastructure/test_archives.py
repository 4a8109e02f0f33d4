"""Tests for zip archive helpers."""

import zipfile
from io import BytesIO

from server.apps.files.infrastructure.archives import (
    build_archive,
    entry_segment,
    folder_entries,
    unique_entry_name,
)


def _names(archive):
    with zipfile.ZipFile(BytesIO(archive)) as zip_file:
        return zip_file.namelist()


def test_build_archive_skips_missing_files(tmp_path):
    """Test missing sources are left out instead of failing."""
    present = tmp_path / 'a.txt'
    present.write_bytes(b'a')

    archive = build_archive([
        ('Rack1/a.txt', present),
        ('Rack1/b.txt', tmp_path / 'b.txt'),
    ])

    assert _names(archive) == ['Rack1/a.txt']


def test_build_archive_suffixes_duplicates(tmp_path):
    """Test two entries with one name are both kept."""
    first = tmp_path / 'first.png'
    second = tmp_path / 'second.png'
    first.write_bytes(b'1')
    second.write_bytes(b'2')

    archive = build_archive([
        ('diagram.png', first),
        ('diagram.png', second),
    ])

    assert _names(archive) == ['diagram.png', 'diagram (1).png']


def test_folder_entries(tmp_path):
    """Test folder contents become prefixed entries."""
    (tmp_path / 'diagram.png').write_bytes(b'png')
    (tmp_path / 'diagram_qr.pdf').write_bytes(b'pdf')

    entries = [name for name, _ in folder_entries(tmp_path, 'diagram')]

    assert entries == ['diagram/diagram.png', 'diagram/diagram_qr.pdf']


def test_folder_entries_missing_directory(tmp_path):
    """Test a missing directory yields nothing."""
    assert list(folder_entries(tmp_path / 'missing')) == []


def test_entry_segment():
    """Test display names cannot create nested entries."""
    assert entry_segment('a/b') == 'a_b'
    assert entry_segment('..') == '_'


def test_unique_entry_name():
    """Test suffixes keep counting up."""
    used = {'a.txt', 'a (1).txt'}

    assert unique_entry_name('a.txt', used) == 'a (2).txt'
    assert 'a (2).txt' in used
