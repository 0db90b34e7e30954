# quizmend/tests/test_cli.py
"""
Tests for CLI interface and export loading
"""
import zipfile

import pytest
from click.testing import CliRunner

from quizmend.cli import cli
from quizmend.course import (
    CourseContext,
    ExportArchiveFile,
    ExportFile,
    load_export,
    select_source_files,
)
from quizmend.errors import QuizmendError


@pytest.fixture
def export_dir(tmp_path, make_quiz_document, make_bank_document, make_item):
    """An unzipped D2L export with one quiz, the bank and a manifest"""
    root = tmp_path / "export"
    root.mkdir()
    (root / "quiz_d2l_100.xml").write_text(
        make_quiz_document("Quiz 1", make_item("<p>Pick all even numbers</p>", title="Q1")),
        encoding="utf-8",
    )
    (root / "questiondb.xml").write_text(
        make_bank_document(make_item("<p>Pick all primes</p>")),
        encoding="utf-8",
    )
    (root / "imsmanifest.xml").write_text("<manifest/>", encoding="utf-8")
    return root


class TestExportLoading:
    """Tests for reading export files"""

    def test_load_directory(self, export_dir):
        files = load_export(export_dir)

        assert all(isinstance(f, ExportFile) for f in files)
        assert [f.name for f in files] == ["imsmanifest.xml", "questiondb.xml", "quiz_d2l_100.xml"]

    def test_load_zip(self, export_dir, tmp_path):
        archive = tmp_path / "export.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            for path in export_dir.iterdir():
                zf.write(path, arcname=path.name)

        files = load_export(archive)

        assert all(isinstance(f, ExportArchiveFile) for f in files)
        quiz = [f for f in files if f.name == "quiz_d2l_100.xml"][0]
        assert b'title="Quiz 1"' in quiz.xml()

    def test_load_other_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(QuizmendError):
            load_export(path)

    def test_select_by_prefix(self, export_dir):
        selected = select_source_files(load_export(export_dir))

        assert [f.name for f in selected] == ["questiondb.xml", "quiz_d2l_100.xml"]

    def test_course_context_records_entries(self):
        course = CourseContext(course_id=1)
        err = RuntimeError("x")

        course.log("tag", {"status": "ok"})
        course.error(err)
        course.error("plain message")

        assert course.logs == [("tag", {"status": "ok"})]
        assert course.errors == [err, "plain message"]


class TestCLI:
    """Tests for CLI commands"""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert "quizmend" in result.output

    def test_version_command(self, runner):
        result = runner.invoke(cli, ['version'])
        assert result.exit_code == 0
        assert "quizmend v" in result.output

    def test_scan_lists_records(self, runner, export_dir):
        result = runner.invoke(cli, ['scan', str(export_dir)])

        assert result.exit_code == 0
        assert "Found 2 multi-select question(s)" in result.output
        assert "[Quiz 1] Q1" in result.output
        assert "[Question Database] unknown title" in result.output

    def test_scan_malformed(self, runner, tmp_path):
        (tmp_path / "quiz_d2l_1.xml").write_text("<broken")

        result = runner.invoke(cli, ['scan', str(tmp_path)])

        assert result.exit_code == 1

    def test_scan_latin1_export(self, runner, tmp_path, make_quiz_document, make_item):
        """Exports are decoded by their XML declaration, not as UTF-8"""
        xml = make_quiz_document("Quiz é", make_item("<p>Café</p>", title="Q1"))
        xml = xml.replace('encoding="UTF-8"', 'encoding="ISO-8859-1"')
        (tmp_path / "quiz_d2l_1.xml").write_bytes(xml.encode("latin-1"))

        result = runner.invoke(cli, ['scan', str(tmp_path)])

        assert result.exit_code == 0
        assert "[Quiz é] Q1" in result.output

    def test_scan_undecodable_bytes(self, runner, tmp_path):
        """Garbage bytes give a clean error exit, not a traceback"""
        (tmp_path / "quiz_d2l_1.xml").write_bytes(b"\xff\xfe<not\xffxml")

        result = runner.invoke(cli, ['scan', str(tmp_path)])

        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert "ParseError" in result.output

    def test_fix_without_course_id(self, runner, export_dir, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(cli, ['fix', str(export_dir)])

        assert result.exit_code == 1

    def test_fix_runs_pipeline(self, runner, export_dir, tmp_path, monkeypatch, mocker):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CANVAS_API_URL", "https://canvas.test.edu")
        monkeypatch.setenv("CANVAS_API_KEY", "token")
        canvas = mocker.Mock()
        mocker.patch("quizmend.cli.make_canvas_api_obj", return_value=canvas)
        run = mocker.patch("quizmend.cli.run_fix")
        run.return_value.state.value = "done"

        result = runner.invoke(cli, ['fix', str(export_dir), '--course-id', '55', '--dry-run'])

        assert result.exit_code == 0
        course, passed_canvas, config = run.call_args.args
        assert course.course_id == 55
        assert passed_canvas is canvas
        assert config.dry_run is True

    def test_init_writes_template(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(cli, ['init', '--course-id', '999'])

        assert result.exit_code == 0
        assert "course_id: 999" in (tmp_path / "quizmend.yaml").read_text()

    def test_init_refuses_overwrite(self, runner, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "quizmend.yaml").write_text("course_id: 1\n")

        result = runner.invoke(cli, ['init'])

        assert result.exit_code == 1
        assert (tmp_path / "quizmend.yaml").read_text() == "course_id: 1\n"
