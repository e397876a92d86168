"""
Unit tests for the query, settings and vault data models.
"""

import json

import pytest
from pydantic import ValidationError

from random_note.models.query import OpenType, Query
from random_note.models.settings import DEFAULT_SETTINGS, Settings
from random_note.models.vault import VaultFile, VaultFolder, normalize_vault_path


class TestQuery:
    """Test cases for the Query model."""

    def test_defaults(self):
        """Test default values of a new query."""
        query = Query(name="New")

        assert query.id
        assert query.query == ""
        assert query.open_type is OpenType.DEFAULT
        assert query.create_command is False
        assert query.use_disabled_folders is True

    def test_ids_are_unique(self):
        """Test that every new query gets a fresh id."""
        ids = {Query().id for _ in range(100)}
        assert len(ids) == 100

    def test_id_is_immutable(self):
        """Test that the id cannot be reassigned."""
        query = Query(name="q")
        with pytest.raises(ValidationError):
            query.id = "other"

    def test_name_and_criteria_are_mutable(self):
        """Test that name and query expression can be edited."""
        query = Query(name="q")
        query.name = "renamed"
        query.query = "  ext:md  "

        assert query.name == "renamed"
        assert query.query == "ext:md"

    def test_open_type_from_string(self):
        """Test parsing open types from their labels."""
        assert Query(openType="New Window").open_type is OpenType.NEW_WINDOW
        assert Query(open_type="Active Leaf").open_type is OpenType.ACTIVE_LEAF

        with pytest.raises(ValidationError, match="Invalid open type"):
            Query(openType="Sideways")

    def test_to_dict_uses_persisted_keys(self):
        """Test the persisted dictionary layout."""
        query = Query(id="q1", name="Ideas", query="folder:ideas", open_type=OpenType.NEW_LEAF,
                      create_command=True)

        assert query.to_dict() == {
            "id": "q1",
            "name": "Ideas",
            "query": "folder:ideas",
            "openType": "New Leaf",
            "createCommand": True,
            "useDisabledFolders": True,
        }

    def test_round_trip(self):
        """Test dict round-trip."""
        query = Query(name="Ideas", query="tag:#idea", open_type=OpenType.NEW_WINDOW)
        assert Query.from_dict(query.to_dict()) == query

    def test_open_type_labels(self):
        """Test the labels offered in the settings UI."""
        assert OpenType.labels() == ["Default", "Active Leaf", "New Leaf", "New Window"]
        assert OpenType.labels(include_default=False) == ["Active Leaf", "New Leaf", "New Window"]


class TestSettings:
    """Test cases for the Settings model."""

    def test_defaults(self):
        """Test the default settings."""
        settings = Settings.from_dict(DEFAULT_SETTINGS)

        assert settings.queries == []
        assert settings.disabled_folders == ""
        assert settings.debug is False
        assert settings.open_type is OpenType.ACTIVE_LEAF
        assert settings.set_active is True
        assert settings.default_query is None

    def test_round_trip(self):
        """Test that settings with queries and a default survive serialization."""
        queries = [
            Query(name="Ideas", query="folder:ideas", create_command=True),
            Query(name="Images", query="ext:png,jpg", open_type=OpenType.NEW_LEAF, use_disabled_folders=False),
        ]
        settings = Settings(
            queries=queries,
            disabled_folders="templates/\narchive/",
            open_type=OpenType.NEW_WINDOW,
            set_active=False,
            default_query=queries[1].id,
        )

        restored = Settings.from_dict(json.loads(json.dumps(settings.to_dict())))

        assert restored == settings
        assert [q.id for q in restored.queries] == [q.id for q in queries]
        assert restored.get_default_query().name == "Images"

    def test_dangling_default_is_reset(self):
        """Test that a default pointing at a missing query becomes none."""
        settings = Settings.from_dict({"queries": [], "defaultQuery": "gone"})
        assert settings.default_query is None

    def test_legacy_default_query_object(self):
        """Test that a stored query object is reduced to its id."""
        query = Query(name="q")
        settings = Settings.from_dict({"queries": [query.to_dict()], "defaultQuery": query.to_dict()})

        assert settings.default_query == query.id

    @pytest.mark.parametrize("value", [False, None, "", "None"])
    def test_no_default_query(self, value):
        """Test the different ways of storing 'no default'."""
        assert Settings.from_dict({"defaultQuery": value}).default_query is None

    def test_invalid_default_query(self):
        """Test that a nonsense default reference is rejected."""
        with pytest.raises(ValidationError):
            Settings.from_dict({"defaultQuery": 42})

    def test_global_open_type_cannot_be_default(self):
        """Test that the global open type must be concrete."""
        with pytest.raises(ValidationError, match="cannot be 'Default'"):
            Settings.from_dict({"openType": "Default"})

    def test_duplicate_query_ids(self):
        """Test that duplicate ids are rejected."""
        query = Query(name="q").to_dict()
        with pytest.raises(ValidationError, match="Duplicate query ids"):
            Settings.from_dict({"queries": [query, dict(query, name="copy")]})

    def test_disabled_folders_list(self):
        """Test that a list of disabled folders is joined into text."""
        settings = Settings.from_dict({"disabledFolders": ["templates/", "archive/"]})
        assert settings.disabled_folders == "templates/\narchive/"

    def test_disabled_folders_trimmed(self):
        """Test that surrounding whitespace is trimmed."""
        assert Settings.from_dict({"disabledFolders": "  templates/ \n"}).disabled_folders == "templates/"

    def test_partial_data_gets_defaults(self):
        """Test that missing keys are filled from the defaults."""
        settings = Settings.from_dict({"setActive": False})

        assert settings.set_active is False
        assert settings.open_type is OpenType.ACTIVE_LEAF

    def test_snake_case_keys(self):
        """Test that field names are accepted as well as persisted keys."""
        settings = Settings.from_dict({"open_type": "New Leaf", "set_active": False})

        assert settings.open_type is OpenType.NEW_LEAF
        assert settings.set_active is False


class TestVaultModels:
    """Test cases for the vault file tree models."""

    @pytest.mark.parametrize("path,expected", [
        ("a/b.md", "a/b.md"),
        ("/a//b.md/", "a/b.md"),
        ("./a\\b.md", "a/b.md"),
        ("", ""),
    ])
    def test_normalize_vault_path(self, path, expected):
        """Test path normalization."""
        assert normalize_vault_path(path) == expected

    def test_file_properties(self):
        """Test derived file properties."""
        file = VaultFile.from_path("notes/Daily.Note.MD")

        assert file.extension == "md"
        assert file.name == "Daily.Note.MD"
        assert file.basename == "Daily.Note"
        assert file.parent_path == "notes"
        assert file.is_markdown()

    def test_file_without_extension(self):
        """Test files without an extension."""
        assert VaultFile.from_path("README").extension == ""
        assert VaultFile.from_path(".gitignore").extension == ""

    def test_tags_normalized(self):
        """Test that tags lose their '#' and duplicates."""
        file = VaultFile(path="a.md", extension="md", tags=["#a", "a", " b ", ""])
        assert file.tags == ("a", "b")

    def test_empty_path_rejected(self):
        """Test that a file needs a path."""
        with pytest.raises(ValidationError):
            VaultFile(path="/")

    def test_file_is_read_only(self):
        """Test that file entries cannot be modified."""
        file = VaultFile.from_path("a.md")
        with pytest.raises(ValidationError):
            file.path = "b.md"

    def test_folder(self):
        """Test folder helpers."""
        child = VaultFile.from_path("notes/a.md")
        folder = VaultFolder(path="notes/", children=[child])

        assert folder.path == "notes"
        assert folder.name == "notes"
        assert not folder.is_root()
        assert folder.get_child("a.md") == child
        assert folder.get_child("missing") is None
        assert VaultFolder().is_root()

    def test_entries_are_hashable(self):
        """Test that files with front matter and folders can be used in sets."""
        file = VaultFile.from_path("notes/a.md", frontmatter={"status": "draft"}, tags=["x"])
        same = VaultFile.from_path("notes/a.md", frontmatter={"status": "draft"}, tags=["x"])
        folder = VaultFolder(path="notes", children=[file])

        assert hash(file) == hash(same)
        assert {file, same} == {file}
        assert folder in {folder}
        assert hash(folder) != hash(VaultFolder())
