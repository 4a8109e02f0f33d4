"""Tests for path mapper."""

from pathlib import Path

import pytest
from django.core.exceptions import ValidationError

from server.apps.files.infrastructure.path_mapper import PathMapper


class TestEffectiveSegment:
    """Tests for effective_segment method."""

    def test_prefers_folder_name(self):
        """Test opaque folder wins over display name."""
        assert PathMapper.effective_segment('ab12', 'Server') == 'ab12'

    @pytest.mark.parametrize('folder_name', ['', None])
    def test_falls_back_to_display_name(self, folder_name):
        """Test legacy rows use their display name."""
        assert PathMapper.effective_segment(folder_name, 'Server') == 'Server'

    @pytest.mark.parametrize('name', ['', '.', '..', 'a/b', 'a\\b'])
    def test_rejects_unsafe_segments(self, name):
        """Test unsafe names cannot become directories."""
        with pytest.raises(ValidationError):
            PathMapper.effective_segment('', name)


class TestDirectories:
    """Tests for directory resolution."""

    def test_opaque_chain(self, mapper, app_root, project, section):
        """Test directories are built from opaque folders."""
        file_dir = mapper.resolve_file_dir(project, section, 'c' * 32)

        assert file_dir.parts[-4:] == ('uploads', 'a' * 32, 'b' * 32, 'c' * 32)
        assert file_dir.is_dir()

    def test_legacy_chain_uses_names(self, mapper, legacy_project, legacy_section):
        """Test legacy rows resolve to display-name directories."""
        section_dir = mapper.section_dir(legacy_project, legacy_section)

        assert section_dir.parts[-3:] == ('uploads', 'Legacy', 'Shelf')
        assert not section_dir.exists()

    def test_raw_names_are_joined_verbatim(self, mapper):
        """Test callers may pass directory names directly."""
        section_dir = mapper.section_dir('Old', 'Rack', create=True)

        assert section_dir.parts[-2:] == ('Old', 'Rack')
        assert section_dir.is_dir()

    def test_create_is_idempotent(self, mapper, project, section):
        """Test resolving an existing directory again succeeds."""
        first = mapper.resolve_file_dir(project, section, 'c' * 32)
        second = mapper.resolve_file_dir(project, section, 'c' * 32)

        assert first == second

    def test_project_image_dir(self, mapper):
        """Test thumbnails live in uploads/project_img."""
        image_dir = mapper.project_image_dir(create=True)

        assert image_dir.parts[-2:] == ('uploads', 'project_img')
        assert image_dir.is_dir()

    def test_project_dir_rejects_thumbnails_dir(self, mapper):
        """Test no project can resolve to the thumbnails directory."""
        with pytest.raises(ValidationError):
            mapper.project_dir('project_img')

        with pytest.raises(ValidationError):
            mapper.section_dir('project_img', 'Shelf')


class TestDbPaths:
    """Tests for DB path conversion."""

    def test_to_db_relative_uses_forward_slashes(self, mapper, app_root):
        """Test stored paths are relative with '/' separators."""
        abs_path = Path(app_root) / 'uploads' / 'p' / 's' / 'f' / 'a b.png'

        assert mapper.to_db_relative(abs_path) == 'uploads/p/s/f/a b.png'

    def test_to_db_relative_rejects_outside_paths(self, mapper, tmp_path):
        """Test paths outside the application root are refused."""
        with pytest.raises(ValidationError):
            mapper.to_db_relative(tmp_path.parent / 'elsewhere.txt')

    def test_to_absolute_accepts_backslashes(self, mapper, app_root):
        """Test rows written on Windows hosts still resolve."""
        absolute = mapper.to_absolute('uploads\\p\\s\\file.txt')

        expected = Path(app_root).resolve() / 'uploads' / 'p' / 's'
        assert absolute == expected / 'file.txt'

    @pytest.mark.parametrize('db_path', ['', '/etc/passwd', 'uploads/../../x'])
    def test_to_absolute_rejects_escapes(self, mapper, db_path):
        """Test stored paths cannot leave the application root."""
        with pytest.raises(ValidationError):
            mapper.to_absolute(db_path)

    def test_round_trip(self, mapper):
        """Test absolute and stored forms convert into each other."""
        db_path = 'uploads/p/s/f/diagram.png'

        assert mapper.to_db_relative(mapper.to_absolute(db_path)) == db_path

    def test_to_db_dir_ends_with_slash(self, mapper, app_root):
        """Test directory prefixes end with a separator."""
        assert mapper.to_db_dir(Path(app_root) / 'uploads' / 'Old') == 'uploads/Old/'

    def test_replace_prefix(self):
        """Test only paths under the old prefix are rewritten."""
        assert PathMapper.replace_prefix(
            'uploads/Old/s/a.png', 'uploads/Old/', 'uploads/New/',
        ) == 'uploads/New/s/a.png'
        assert PathMapper.replace_prefix(
            'uploads/Older/s/a.png', 'uploads/Old/', 'uploads/New/',
        ) == 'uploads/Older/s/a.png'

    def test_join_db(self):
        """Test joining skips empty parts and duplicate separators."""
        assert PathMapper.join_db('uploads/', '', '/p', 'f.txt') == 'uploads/p/f.txt'


class TestLabelFilename:
    """Tests for label_filename method."""

    def test_suffix(self):
        """Test label names follow <name>_qr.pdf."""
        assert PathMapper.label_filename('diagram') == 'diagram_qr.pdf'

    def test_separators_are_replaced(self):
        """Test display names cannot escape the file folder."""
        assert PathMapper.label_filename('a/b\\c') == 'a_b_c_qr.pdf'

    @pytest.mark.parametrize('name', ['', '..', '  '])
    def test_degenerate_names(self, name):
        """Test empty-ish names get a generic label name."""
        assert PathMapper.label_filename(name) == 'label_qr.pdf'
