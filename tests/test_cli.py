"""Tests for the command line entry point."""

import xml.etree.ElementTree as ET

import pytest

from slingshot.__main__ import build_parser, main, parse_parameters, usage_text


class TestUsage:
    """Tests for usage output."""

    def test_no_arguments_prints_usage(self, capsys):
        """Test that running without arguments prints usage and fails."""
        assert main([]) == 1

        err = capsys.readouterr().err
        assert err.startswith("usage: slingshot -<format>")
        assert "formats: -nant, -nmake" in err

    def test_usage_lists_parameters(self):
        """Test that every format parameter appears with its flag."""
        text = usage_text()

        assert "    nant:\n" in text
        assert "      build.basedir: directory receiving the built assemblies (REQUIRED)" in text
        assert "      csc: C# compiler command (default csc) (OPTIONAL)" in text


class TestArguments:
    """Tests for argument parsing."""

    def test_parameters_keep_order(self):
        """Test that name=value pairs stay ordered and split at the first '='."""
        parser = build_parser()
        params = parse_parameters(parser, ["b=1", "a=x=y"])

        assert list(params.items()) == [("b", "1"), ("a", "x=y")]

    def test_invalid_parameter(self, chain_solution, capsys):
        """Test that a parameter without '=' is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            main(["-nant", "-sln", str(chain_solution), "basedir"])

        assert exc_info.value.code == 2
        assert "expected name=value" in capsys.readouterr().err

    def test_no_format(self, chain_solution, capsys):
        """Test that omitting the format is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            main(["-sln", str(chain_solution), "build.basedir=bin"])

        assert exc_info.value.code == 2
        assert "no output format specified" in capsys.readouterr().err

    def test_two_formats(self, chain_solution):
        """Test that formats are mutually exclusive."""
        with pytest.raises(SystemExit) as exc_info:
            main(["-nant", "-nmake", "-sln", str(chain_solution)])

        assert exc_info.value.code == 2

    def test_unknown_format(self, chain_solution, capsys):
        """Test that an unregistered format flag is rejected."""
        with pytest.raises(SystemExit) as exc_info:
            main(["-xyz", "-sln", str(chain_solution)])

        assert exc_info.value.code == 2
        assert "-xyz" in capsys.readouterr().err

    def test_map_pairs(self):
        """Test that -map collects ordered pairs."""
        args = build_parser().parse_intermixed_args(
            ["-nmake", "-map", "http://a/", "/srv/a/", "-map", "http://b/", "/srv/b/"]
        )

        assert args.mappings == [["http://a/", "/srv/a/"], ["http://b/", "/srv/b/"]]


class TestConversion:
    """Tests for running conversions."""

    def test_nant_to_stdout(self, chain_solution, capsys):
        """Test that the script goes to stdout."""
        assert main(["-nant", "-sln", str(chain_solution), "build.basedir=bin"]) == 0

        root = ET.fromstring(capsys.readouterr().out)
        assert [t.get("name") for t in root.findall("target")][:3] == ["A", "B", "C"]

    def test_parameters_before_options(self, chain_solution, capsys):
        """Test that parameters and options may be intermixed."""
        assert main(["build.basedir=bin", "-nmake", "-sln", str(chain_solution)]) == 0

        assert "BUILD_BASEDIR = bin" in capsys.readouterr().out

    def test_discovers_solution_in_cwd(self, chain_solution, tmp_path, monkeypatch, capsys):
        """Test that the only .sln in the current directory is used."""
        monkeypatch.chdir(tmp_path)

        assert main(["-nmake", "build.basedir=bin"]) == 0
        assert "$(BUILD_BASEDIR)\\A.dll" in capsys.readouterr().out

    def test_output_file(self, chain_solution, tmp_path, capsys):
        """Test that -out writes the script to a file instead of stdout."""
        target = tmp_path / "build.xml"

        assert main(["-nant", "-sln", str(chain_solution), "-out", str(target), "build.basedir=bin"]) == 0

        assert capsys.readouterr().out == ""
        assert ET.fromstring(target.read_text(encoding="utf-8")).tag == "project"

    def test_missing_parameter(self, chain_solution, capsys):
        """Test that a missing required parameter is reported."""
        assert main(["-nant", "-sln", str(chain_solution)]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "slingshot: error: format 'nant' requires parameter(s): build.basedir" in captured.err

    def test_parameters_checked_before_solution(self, tmp_path, monkeypatch, capsys):
        """Test that the command line checks required parameters itself."""
        monkeypatch.chdir(tmp_path)

        assert main(["-nmake"]) == 1
        assert "requires parameter(s): build.basedir" in capsys.readouterr().err

    def test_ambiguous_solution(self, tmp_path, monkeypatch, capsys):
        """Test that two solutions in the current directory are an error."""
        (tmp_path / "A.sln").touch()
        (tmp_path / "B.sln").touch()
        monkeypatch.chdir(tmp_path)

        assert main(["-nant", "build.basedir=bin"]) == 1
        assert "too many '.sln' files" in capsys.readouterr().err

    def test_failed_conversion_leaves_output_untouched(self, solution_builder, tmp_path, capsys):
        """Test that a failing run does not create or replace -out."""
        solution_builder.add("A", depends_on=["B"])
        solution_builder.add("B", depends_on=["A"])
        path = solution_builder.write()
        target = tmp_path / "Makefile"
        target.write_text("previous")

        assert main(["-nmake", "-sln", str(path), "-out", str(target), "build.basedir=bin"]) == 1

        assert target.read_text() == "previous"
        assert "cyclic project dependency: A -> B -> A" in capsys.readouterr().err

    def test_unwritable_output(self, chain_solution, tmp_path, capsys):
        """Test that an output file in a missing directory is reported."""
        target = tmp_path / "missing" / "Makefile"

        assert main(["-nmake", "-sln", str(chain_solution), "-out", str(target), "build.basedir=bin"]) == 1
        assert "cannot write" in capsys.readouterr().err
