import threading
from unittest.mock import patch

import pytest

from pg_dbstruct.config import ConfigError, Settings, Tag
from pg_dbstruct.db.introspect import Column
from pg_dbstruct.generator import NameCollisionError, generate, render_tables
from pg_dbstruct.naming import CasingMode
from pg_dbstruct.output import OutputError
from pg_dbstruct.render import RenderError

from conftest import FakeSchemaSource

DSN = "postgresql://localhost/app"


def _no_format(path, command):
    pass


@pytest.fixture
def settings(tmp_path):
    return Settings(
        dsn=DSN,
        struct_case=CasingMode.SNAKE_TO_UPPER_CAMEL,
        field_case=CasingMode.SNAKE_TO_UPPER_CAMEL,
        tags=[Tag(name="json", case=CasingMode.SNAKE_TO_LOWER_CAMEL)],
        gen_accessor=True,
        output_path=tmp_path / "model",
        formatter=(),
    )


class TestGenerateMultiFile:
    def test_one_file_per_table(self, settings, fake_source, tmp_path):
        report = generate(settings, source=fake_source, fmt=_no_format)

        out = tmp_path / "model"
        assert report.tables == ["audit_log", "player_info", "user_group"]
        assert sorted(p.name for p in out.iterdir()) == [
            "audit_log.go",
            "player_info.go",
            "user_group.go",
        ]
        assert sorted(report.files) == sorted(out.iterdir())

    def test_each_file_is_complete(self, settings, fake_source, tmp_path):
        generate(settings, source=fake_source, fmt=_no_format)

        user_group = (tmp_path / "model" / "user_group.go").read_text(encoding="utf-8")
        assert user_group == (
            "package model\n"
            "\n"
            'import "time"\n'
            "\n"
            "type UserGroup struct {\n"
            '\tId int64 `json:"id"`\n'
            "\t// display name\n"
            '\tUserName string `json:"userName"`\n'
            '\tCreatedAt time.Time `json:"createdAt"`\n'
            "}\n"
            "\n"
            "func (u *UserGroup) TableName() string {\n"
            '\treturn "user_group"\n'
            "}\n"
        )
        player = (tmp_path / "model" / "player_info.go").read_text(encoding="utf-8")
        assert "import" not in player
        assert player.startswith("package model\n\ntype PlayerInfo struct {\n")

    def test_allow_list(self, settings, fake_source, tmp_path):
        settings = settings.model_copy(update={"tables": ("user_group",)})
        report = generate(settings, source=fake_source, fmt=_no_format)
        assert report.tables == ["user_group"]
        assert [p.name for p in (tmp_path / "model").iterdir()] == ["user_group.go"]

    def test_file_name_casing_and_suffix(self, settings, fake_source, tmp_path):
        settings = settings.model_copy(
            update={"file_case": CasingMode.SNAKE_TO_UPPER_CAMEL, "file_suffix": "Gen"}
        )
        generate(settings, source=fake_source, fmt=_no_format)
        assert (tmp_path / "model" / "UserGroupGen.go").exists()

    def test_write_failure_is_fatal(self, settings, fake_source):
        written = []
        lock = threading.Lock()

        def flaky_write(path, content):
            if path.name == "player_info.go":
                raise OutputError("disk full")
            with lock:
                written.append(path.name)

        with pytest.raises(OutputError, match="disk full"):
            generate(settings, source=fake_source, write=flaky_write, fmt=_no_format)
        assert sorted(written) == ["audit_log.go", "user_group.go"]

    def test_file_name_collision(self, settings, tmp_path):
        columns = [
            Column(name="id", data_type="int", nullable=False, table="UserGroup"),
            Column(name="id", data_type="int", nullable=False, table="user_group"),
        ]
        settings = settings.model_copy(
            update={"struct_case": CasingMode.AS_IS, "file_case": CasingMode.CAMEL_TO_SNAKE}
        )
        with pytest.raises(NameCollisionError, match="file name 'user_group.go'"):
            generate(settings, source=FakeSchemaSource(columns), fmt=_no_format)
        assert not (tmp_path / "model").exists()


class TestGenerateSingleFile:
    def test_single_file_layout(self, settings, fake_source, tmp_path):
        target = tmp_path / "out" / "models.go"
        settings = settings.model_copy(
            update={"single_file": True, "output_path": target}
        )
        report = generate(settings, source=fake_source, fmt=_no_format)

        assert report.files == [target]
        content = target.read_text(encoding="utf-8")
        assert content.count('import "time"') == 1
        assert content.startswith('package model\n\nimport "time"\n\ntype AuditLog struct {')
        assert content.index("type AuditLog") < content.index("type PlayerInfo")
        assert content.index("type PlayerInfo") < content.index("type UserGroup")
        assert "}\n\n\ntype PlayerInfo struct {" in content

    def test_type_name_collision(self, settings):
        columns = [
            Column(name="id", data_type="int", nullable=False, table="user_group"),
            Column(name="id", data_type="int", nullable=False, table="user__group"),
        ]
        settings = settings.model_copy(update={"single_file": True})
        with pytest.raises(NameCollisionError, match="struct name 'UserGroup'"):
            generate(settings, source=FakeSchemaSource(columns), fmt=_no_format)

    def test_deterministic_output(self, settings, sample_columns, tmp_path):
        class UnorderedSource(FakeSchemaSource):
            def fetch_columns(self, tables):
                return list(self.columns)

        outputs = []
        for reverse in (False, True):
            target = tmp_path / f"run_{reverse}.go"
            run_settings = settings.model_copy(
                update={"single_file": True, "output_path": target}
            )
            # Stable sort: table order flips, column order within a table stays.
            rows = sorted(sample_columns, key=lambda c: c.table, reverse=reverse)
            generate(run_settings, source=UnorderedSource(rows), fmt=_no_format)
            outputs.append(target.read_text(encoding="utf-8"))
        assert outputs[0] == outputs[1]


class TestGenerateErrors:
    def test_missing_dsn(self, settings, fake_source):
        settings = settings.model_copy(update={"dsn": ""})
        with pytest.raises(ConfigError):
            generate(settings, source=fake_source, fmt=_no_format)
        assert fake_source.calls == []

    def test_formatter_failure_is_ignored(self, settings, fake_source):
        def broken_format(path, command):
            raise RuntimeError("formatter crashed")

        report = generate(settings, source=fake_source, fmt=broken_format)
        assert len(report.files) == 3

    def test_formatter_called_per_file(self, settings, fake_source):
        calls = []
        generate(
            settings,
            source=fake_source,
            fmt=lambda path, command: calls.append((path, tuple(command))),
        )
        assert sorted(path.name for path, _ in calls) == [
            "audit_log.go",
            "player_info.go",
            "user_group.go",
        ]
        assert all(command == () for _, command in calls)

    @patch("pg_dbstruct.generator.render_table")
    def test_render_failure_is_fatal(self, mock_render, settings, fake_source):
        mock_render.side_effect = KeyError("boom")
        with pytest.raises(RenderError, match="audit_log"):
            generate(settings, source=fake_source, fmt=_no_format)

    @patch("pg_dbstruct.generator.PostgresSchemaSource")
    def test_default_source_is_postgres(self, mock_source_cls, settings, sample_columns):
        instance = mock_source_cls.return_value.__enter__.return_value
        instance.fetch_columns.return_value = sample_columns
        settings = settings.model_copy(update={"db_schema": "billing"})

        generate(settings, fmt=_no_format)
        mock_source_cls.assert_called_once_with(DSN, "billing")
        instance.fetch_columns.assert_called_once_with([])


class TestRenderTables:
    def test_empty_schema(self, settings):
        assert render_tables({}, settings) == []

    def test_results_in_table_order(self, settings, sample_columns):
        schema = {}
        for column in sample_columns:
            schema.setdefault(column.table, []).append(column)
        results = render_tables(schema, settings)
        assert [r.table_name for r in results] == sorted(schema)

    def test_single_file_ignores_file_name_collisions(self, settings):
        settings = settings.model_copy(
            update={"single_file": True, "file_case": CasingMode.CAMEL_TO_SNAKE}
        )
        schema = {
            "UserGroup": [Column(name="id", data_type="int", nullable=False, table="UserGroup")],
            "user_group": [Column(name="id", data_type="int", nullable=False, table="user_group")],
        }
        settings = settings.model_copy(update={"struct_case": CasingMode.AS_IS})
        assert len(render_tables(schema, settings)) == 2
