"""
Unit tests for the vault walker module.

Tests tree flattening, reading a vault from disk, and markdown metadata
extraction.
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from random_note.models.vault import VaultFile, VaultFolder
from random_note.tools.vault_walker import Vault, flatten_file, parse_markdown_metadata


def build_tree():
    """Build the tree {a.md, notes/b.md, notes/c.png, notes/deep/e.md, templates/d.md}."""
    return VaultFolder(path="", children=[
        VaultFile.from_path("a.md"),
        VaultFolder(path="notes", children=[
            VaultFile.from_path("notes/b.md"),
            VaultFile.from_path("notes/c.png"),
            VaultFolder(path="notes/deep", children=[
                VaultFile.from_path("notes/deep/e.md"),
            ]),
        ]),
        VaultFolder(path="templates", children=[
            VaultFile.from_path("templates/d.md"),
        ]),
        VaultFolder(path="empty"),
    ])


class TestFlattenFile:
    """Test cases for flatten_file."""

    def test_flatten_returns_all_leaf_files_in_order(self):
        """Test that every reachable file is returned depth-first."""
        files = flatten_file(build_tree())

        assert [f.path for f in files] == [
            "a.md",
            "notes/b.md",
            "notes/c.png",
            "notes/deep/e.md",
            "templates/d.md",
        ]
        assert all(isinstance(f, VaultFile) for f in files)

    def test_flatten_has_no_duplicates(self):
        """Test that no file appears twice."""
        paths = [f.path for f in flatten_file(build_tree())]
        assert len(paths) == len(set(paths))

    def test_flatten_subtree(self):
        """Test flattening a subfolder only."""
        notes = build_tree().get_child("notes")
        assert [f.path for f in flatten_file(notes)] == [
            "notes/b.md",
            "notes/c.png",
            "notes/deep/e.md",
        ]

    def test_flatten_single_file(self):
        """Test that a file flattens to itself."""
        file = VaultFile.from_path("a.md")
        assert flatten_file(file) == [file]

    def test_flatten_empty_tree(self):
        """Test that an empty folder gives no files."""
        assert flatten_file(VaultFolder()) == []
        assert flatten_file(VaultFolder(path="x", children=[VaultFolder(path="x/y")])) == []

    def test_flatten_deep_tree(self):
        """Test that very deep trees do not hit the recursion limit."""
        node = VaultFolder(path="/".join(["d"] * 2000), children=[VaultFile.from_path("leaf.md")])
        for depth in range(1999, 0, -1):
            node = VaultFolder(path="/".join(["d"] * depth), children=[node])

        assert [f.path for f in flatten_file(node)] == ["leaf.md"]


class TestMarkdownMetadata:
    """Test cases for front matter and tag extraction."""

    def test_frontmatter_and_tags(self):
        """Test parsing front matter properties and tag lists."""
        content = "---\nstatus: draft\ntags: [project, idea]\n---\n# Title\nBody #inline/nested text\n"
        frontmatter, tags = parse_markdown_metadata(content)

        assert frontmatter["status"] == "draft"
        assert tags == ("project", "idea", "inline/nested")

    def test_tags_as_string(self):
        """Test a comma separated tags property."""
        frontmatter, tags = parse_markdown_metadata("---\ntags: \"a, #b\"\n---\n")
        assert tags == ("a", "b")

    def test_no_frontmatter(self):
        """Test plain markdown without front matter."""
        frontmatter, tags = parse_markdown_metadata("Just text with #tag and #123.")
        assert frontmatter == {}
        assert tags == ("tag",)

    def test_tags_in_code_are_ignored(self):
        """Test that tags inside code spans and blocks are skipped."""
        content = "Real #kept\n```\n#notatag\n```\nand `#inline` code\n"
        _, tags = parse_markdown_metadata(content)
        assert tags == ("kept",)

    def test_invalid_frontmatter(self):
        """Test that broken YAML front matter is ignored."""
        frontmatter, tags = parse_markdown_metadata("---\nkey: [unclosed\n---\n#ok\n")
        assert frontmatter == {}
        assert tags == ("ok",)

    def test_heading_is_not_a_tag(self):
        """Test that markdown headings are not tags."""
        _, tags = parse_markdown_metadata("# Heading\n## Sub\n")
        assert tags == ()


class TestVault:
    """Test cases for the filesystem backed Vault."""

    def setup_method(self):
        """Set up a temporary vault."""
        self.temp_dir = tempfile.mkdtemp()
        self.vault_root = Path(self.temp_dir)

        test_files = {
            "a.md": "---\nstatus: done\n---\n#project\n",
            "notes/b.md": "Note b",
            "notes/c.png": "png",
            "templates/d.md": "Template",
            ".obsidian/app.json": "{}",
            "notes/.hidden.md": "hidden",
        }
        for file_path, content in test_files.items():
            full_path = self.vault_root / file_path
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(content, encoding="utf-8")

        self.vault = Vault(self.vault_root)

    def teardown_method(self):
        """Clean up the temporary vault."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_get_files(self):
        """Test that all visible files are found in sorted order."""
        assert [f.path for f in self.vault.get_files()] == [
            "a.md",
            "notes/b.md",
            "notes/c.png",
            "templates/d.md",
        ]

    def test_get_markdown_files(self):
        """Test restricting to markdown files."""
        assert [f.path for f in self.vault.get_markdown_files()] == [
            "a.md",
            "notes/b.md",
            "templates/d.md",
        ]

    def test_markdown_metadata_is_read(self):
        """Test that front matter and tags are attached to files."""
        a = self.vault.get_abstract_file("a.md")
        assert a.frontmatter == {"status": "done"}
        assert a.tags == ("project",)

        png = self.vault.get_abstract_file("notes/c.png")
        assert png.extension == "png"
        assert png.tags == ()

    def test_get_abstract_file(self):
        """Test looking up folders and files by path."""
        notes = self.vault.get_abstract_file("notes")
        assert isinstance(notes, VaultFolder)
        assert notes.path == "notes"
        assert self.vault.get_abstract_file("") is self.vault.root
        assert self.vault.get_abstract_file("missing/x.md") is None
        assert self.vault.get_abstract_file("a.md/x") is None

    def test_refresh_sees_new_files(self):
        """Test that refresh re-reads the directory."""
        assert len(self.vault.get_files()) == 4
        (self.vault_root / "new.md").write_text("new")

        assert len(self.vault.get_files()) == 4
        self.vault.refresh()
        assert len(self.vault.get_files()) == 5

    def test_stats(self):
        """Test read statistics."""
        self.vault.refresh()
        stats = self.vault.get_stats()
        assert stats["files_read"] == 4
        assert stats["folders_read"] == 3
        assert stats["errors"] == 0

    def test_missing_vault(self):
        """Test that a missing vault directory raises."""
        with pytest.raises(FileNotFoundError):
            Vault(self.vault_root / "missing").refresh()

    def test_vault_path_is_file(self):
        """Test that a file is not accepted as vault root."""
        with pytest.raises(NotADirectoryError):
            Vault(self.vault_root / "a.md").refresh()
