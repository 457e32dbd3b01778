"""Unit tests for reading and writing project files."""

import tomllib
from pathlib import Path

import pytest

from cmdstash.errors import StorageError
from cmdstash.models import Command, Environment, Project
from cmdstash.storage import ProjectStorage, serialize_project, with_trailing_newline


class TestSerializeProject:
    def test_commands_sorted_by_name(self):
        """
        Given a project whose commands were added out of order
        When it is serialized
        Then commands appear sorted by name
        """
        project = Project(
            name="p",
            commands=[Command(name="zeta", body="z"), Command(name="alpha", body="a")],
        )
        doc = serialize_project(project)
        assert [c["name"] for c in doc["commands"]] == ["alpha", "zeta"]

    def test_bodies_get_trailing_newline(self):
        doc = serialize_project(Project(name="p", commands=[Command(name="a", body="ls")]))
        assert doc["commands"][0]["body"] == "ls\n"

    def test_existing_newline_is_not_doubled(self):
        assert with_trailing_newline("ls\n") == "ls\n"

    def test_optional_fields_omitted_when_unset(self):
        doc = serialize_project(Project(name="p", commands=[Command(name="a", body="ls")]))
        assert "path" not in doc
        assert "active_environment" not in doc
        assert "working_dir" not in doc["commands"][0]


class TestProjectStorage:
    def test_round_trip(self, tmp_path: Path):
        """
        Given a project with commands, environments and an active environment
        When it is saved and all projects are loaded
        Then the loaded project is equal field for field, bodies newline-terminated
        """
        storage = ProjectStorage(tmp_path)
        project = Project(
            name="webapp",
            path="/srv/webapp",
            commands=[
                Command(name="test", body="pytest -q", tag="ci"),
                Command(name="deploy", body="cd {{dir}}\nmake deploy\n", working_dir="/srv"),
            ],
            environments=[Environment(name="dev", values={"dir": "/tmp"})],
            active_environment="dev",
        )
        storage.save(project)

        [loaded] = storage.load_all()

        assert loaded.name == "webapp"
        assert loaded.path == "/srv/webapp"
        assert loaded.active_environment == "dev"
        assert [c.name for c in loaded.commands] == ["deploy", "test"]
        assert loaded.commands[0] == Command(
            name="deploy", body="cd {{dir}}\nmake deploy\n", working_dir="/srv"
        )
        assert loaded.commands[1] == Command(name="test", body="pytest -q\n", tag="ci")
        assert loaded.environments == [Environment(name="dev", values={"dir": "/tmp"})]

    def test_round_trip_keeps_crlf_line_endings(self, tmp_path: Path):
        """
        Given a project whose body and environment value use CRLF line endings
        When it is saved and loaded back
        Then every carriage return survives
        """
        storage = ProjectStorage(tmp_path)
        storage.save(
            Project(
                name="win",
                commands=[
                    Command(name="batch", body="echo a\r\necho b\r\n"),
                    Command(name="plain", body="echo c\necho d\n"),
                ],
                environments=[Environment(name="dev", values={"banner": "hi\r\nthere"})],
            )
        )

        [loaded] = storage.load_all()

        assert loaded.commands[0].body == "echo a\r\necho b\r\n"
        assert loaded.commands[1].body == "echo c\necho d\n"
        assert loaded.environments[0].values == {"banner": "hi\r\nthere"}

    def test_lone_carriage_return_survives_multiline_write(self, tmp_path: Path):
        storage = ProjectStorage(tmp_path)
        storage.save(Project(name="p", commands=[Command(name="a", body="printf 'x\rY'\nls\n")]))
        [loaded] = storage.load_all()
        assert loaded.commands[0].body == "printf 'x\rY'\nls\n"

    def test_bodies_written_as_multiline_strings(self, tmp_path: Path):
        storage = ProjectStorage(tmp_path)
        storage.save(Project(name="p", commands=[Command(name="a", body="echo one\necho two")]))
        assert '"""' in storage.path_for("p").read_text()

    def test_missing_directory_loads_nothing(self, tmp_path: Path):
        assert ProjectStorage(tmp_path / "absent").load_all() == []

    def test_non_toml_entries_ignored(self, tmp_path: Path):
        """
        Given the projects directory holds a README and a subdirectory
        When load_all runs
        Then only .toml files are loaded
        """
        storage = ProjectStorage(tmp_path)
        storage.save(Project(name="real"))
        (storage.directory / "notes.md").write_text("# hi")
        (storage.directory / "sub.toml").mkdir()
        assert [p.name for p in storage.load_all()] == ["real"]

    def test_empty_name_falls_back_to_file_stem(self, tmp_path: Path):
        storage = ProjectStorage(tmp_path)
        storage.directory.mkdir(parents=True)
        storage.path_for("fromfile").write_text('name = ""\n')
        assert storage.load_all()[0].name == "fromfile"

    def test_missing_name_falls_back_to_file_stem(self, tmp_path: Path):
        storage = ProjectStorage(tmp_path)
        storage.directory.mkdir(parents=True)
        storage.path_for("bare").write_text("")
        assert storage.load_all()[0].name == "bare"

    def test_corrupt_file_fails_whole_load(self, tmp_path: Path):
        """
        Given one valid and one malformed project file
        When load_all runs
        Then StorageError is raised naming the bad file
        """
        storage = ProjectStorage(tmp_path)
        storage.save(Project(name="good"))
        storage.path_for("bad").write_text("[[commands]\n")
        with pytest.raises(StorageError, match="bad.toml"):
            storage.load_all()

    def test_invalid_shape_raises_storage_error(self, tmp_path: Path):
        storage = ProjectStorage(tmp_path)
        storage.directory.mkdir(parents=True)
        storage.path_for("odd").write_text('commands = "nope"\n')
        with pytest.raises(StorageError, match="Invalid project file"):
            storage.load_all()

    def test_delete_removes_file(self, tmp_path: Path):
        storage = ProjectStorage(tmp_path)
        storage.save(Project(name="gone"))
        storage.delete("gone")
        assert not storage.path_for("gone").exists()

    def test_delete_missing_is_noop(self, tmp_path: Path):
        ProjectStorage(tmp_path).delete("never")

    def test_written_file_is_valid_toml(self, tmp_path: Path):
        storage = ProjectStorage(tmp_path)
        storage.save(Project(name="p", environments=[Environment(name="dev", values={"k": "v"})]))
        data = tomllib.loads(storage.path_for("p").read_text())
        assert data["environments"] == [{"name": "dev", "values": {"k": "v"}}]
