"""
tests/test_cli.py

Tests for the command-line driver: reporting, --fix, --diff and exit codes.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from injection_analyzer.cli import find_sources, fix_document, main
from injection_analyzer.source_parser import SourceParser


HOST_SOURCE = """\
namespace App
{
    public class Host
    {
        private readonly IService _service;
        private readonly ILogger _logger;
    }
}
"""

HOST_FIXED = """\
namespace App
{
    public class Host
    {
        private readonly IService _service;
        private readonly ILogger _logger;

        public Host(IService service, ILogger logger)
        {
            _service = service;
            _logger = logger;
        }
    }
}
"""


@pytest.fixture
def project(tmp_path):
    src = tmp_path / "src"
    (src / "Services").mkdir(parents=True)
    (src / "Services" / "Host.cs").write_text(HOST_SOURCE)
    (src / "Clean.cs").write_text("class Clean { private int _x; }\n")
    (src / "notes.txt").write_text("not C#")
    return src


class TestFindSources:

    def test_directory_expanded(self, project):
        names = [p.name for p in find_sources([project])]
        assert names == ["Clean.cs", "Host.cs"]

    def test_file_kept(self, project):
        path = project / "Clean.cs"
        assert find_sources([path]) == [path]


class TestFixDocument:

    def test_all_fields_injected(self):
        parser = SourceParser()
        document = parser.parse_source(HOST_SOURCE)
        fixed, applied = fix_document(document, parser)
        assert applied == 2
        assert fixed.text == HOST_FIXED

    def test_nothing_to_fix(self):
        parser = SourceParser()
        document = parser.parse_source("class Clean { }")
        fixed, applied = fix_document(document, parser)
        assert applied == 0
        assert fixed is document


class TestMain:

    def test_report(self, project, capsys):
        assert main([str(project)]) == 0
        out = capsys.readouterr().out.splitlines()
        assert len(out) == 2
        assert out[0].endswith(
            ":5:35: info InjectionAnalyzer: "
            "Readonly Field '_service' is injected in none of the constructors."
        )
        assert "'_logger'" in out[1]
        assert (project / "Services" / "Host.cs").read_text() == HOST_SOURCE

    def test_quiet(self, project, capsys):
        assert main(["--quiet", str(project)]) == 0
        assert capsys.readouterr().out == ""

    def test_fix_writes_files(self, project):
        assert main(["--fix", "-q", str(project)]) == 0
        assert (project / "Services" / "Host.cs").read_text() == HOST_FIXED
        assert (project / "Clean.cs").read_text() == "class Clean { private int _x; }\n"

    def test_diff_does_not_write(self, project, capsys):
        assert main(["--diff", "-q", str(project)]) == 0
        out = capsys.readouterr().out
        assert "+        public Host(IService service, ILogger logger)" in out
        assert (project / "Services" / "Host.cs").read_text() == HOST_SOURCE

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "Missing.cs")]) == 1

    def test_empty_directory(self, tmp_path):
        assert main([str(tmp_path)]) == 1

    def test_requires_paths(self):
        with pytest.raises(SystemExit):
            main([])
