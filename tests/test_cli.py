"""Tests for the coverbots command line."""

from __future__ import annotations

import pytest

from coverbots.cli import build_parser, main
from coverbots.runner import Library


class TestParser:
    def test_run_all_defaults(self):
        args = build_parser().parse_args(["run-all"])
        assert (args.start, args.end, args.workers) == (1, 300, None)

    def test_verbosity_counts(self):
        args = build_parser().parse_args(["-vv", "run", "--id", "3"])
        assert args.verbose == 2
        assert args.id == 3

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestMain:
    def test_run(self, library: Library, capsys):
        assert main(["--contest-dir", str(library.root), "run", "--id", "1"]) == 0
        assert library.lastrun(1).read_text() == "DDD"
        assert "> Done: id: 001, score: 3" in capsys.readouterr().out

    def test_missing_arena(self, library: Library, capsys):
        assert main(["--contest-dir", str(library.root), "run", "--id", "42"]) == 1
        assert "ERROR" in capsys.readouterr().err

    def test_bad_config(self, library: Library, capsys):
        assert main(["--contest-dir", str(library.root), "--config", "http://x", "run", "--id", "1"]) == 2
        assert "scheme" in capsys.readouterr().err

    def test_run_all_exit_code(self, library: Library):
        root = str(library.root)
        assert main(["--contest-dir", root, "run-all", "--start", "1", "--end", "1", "--workers", "1"]) == 0
        assert main(["--contest-dir", root, "run-all", "--start", "1", "--end", "2", "--workers", "1"]) == 1

    def test_update_best_then_report(self, library: Library, capsys):
        main(["--contest-dir", str(library.root), "run", "--id", "1"])
        submit = library.submit(1)
        submit.parent.mkdir(parents=True)
        submit.write_text(library.lastrun(1).read_text())
        assert main(["--contest-dir", str(library.root), "update-best", "--start", "1", "--end", "1"]) == 0
        assert library.best(1).read_text() == "DDD"
        capsys.readouterr()
        assert main(["--contest-dir", str(library.root), "report", "--start", "1", "--end", "1"]) == 0
        assert "id: 001, score: 3 (best: 3) (*)" in capsys.readouterr().out

    def test_verbose_traces_to_stderr(self, library: Library, capsys):
        assert main(["--contest-dir", str(library.root), "-v", "test-run", "--id", "1"]) == 0
        assert "[coverbots:debug]" in capsys.readouterr().err
