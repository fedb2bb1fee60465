"""Tests for the unit assembler and the BuildRequest model."""

import pytest

from hooksbuild.assembler import UnitAssembler, artifact_base_name
from hooksbuild.config import CompileDefaults
from hooksbuild.errors import InvalidInputError
from hooksbuild.models import BuildRequest, SourceFile, SourceKind


def make_unit(name: str = "main.c", src: str = "int hook() { return 0; }", options: str | None = "-O3") -> SourceFile:
    return SourceFile(kind=SourceKind.COMPILATION_UNIT, name=name, content=src, options=options)


def make_header(name: str, src: str = "") -> SourceFile:
    return SourceFile(kind=SourceKind.HEADER_UNIT, name=name, content=src)


class TestArtifactBaseName:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("main.c", "main"),
            ("main.c.c", "main"),
            ("token_hook.c", "token_hook"),
            ("a.config.c", "a"),
        ],
    )
    def test_split_at_first_marker(self, name, expected):
        """The name is split at the first occurrence of '.c'."""
        assert artifact_base_name(name) == expected


class TestUnitAssembler:
    def test_single_unit_and_all_headers(self):
        """A request carries exactly one unit and exactly the given headers."""
        headers = [make_header("a.h"), make_header("b.h"), make_header("c.h")]
        request = UnitAssembler().assemble(make_unit(), headers)

        assert len(request.units) == 1
        assert request.unit.name == "main.c"
        assert list(request.headers) == headers

    def test_no_headers(self):
        request = UnitAssembler().assemble(make_unit(), [])
        assert request.headers == ()

    def test_fixed_policy(self):
        """Output format, compression and stripping are always set."""
        request = UnitAssembler().assemble(make_unit(), [])

        assert request.output_format == "wasm"
        assert request.compress is True
        assert request.strip is True

    def test_base_name_is_derived(self):
        request = UnitAssembler().assemble(make_unit("main.c.c"), [])
        assert request.base_name == "main"

    def test_missing_options_get_defaults(self):
        """A unit created without options gets the default compiler flags."""
        request = UnitAssembler(CompileDefaults(options="-Os")).assemble(make_unit(options=None), [])
        assert request.unit.options == "-Os"

    def test_existing_options_are_kept(self):
        request = UnitAssembler().assemble(make_unit(options="-O0 -g"), [])
        assert request.unit.options == "-O0 -g"

    def test_header_as_unit_is_rejected(self):
        with pytest.raises(InvalidInputError, match="not a compilation unit"):
            UnitAssembler().assemble(make_header("x.h"), [])

    def test_unit_in_headers_is_rejected(self):
        with pytest.raises(InvalidInputError, match="not a header unit"):
            UnitAssembler().assemble(make_unit(), [make_unit("other.c")])

    def test_wire_format(self):
        """to_dict produces the JSON body expected by /api/build."""
        request = UnitAssembler().assemble(make_unit(src="int x;"), [make_header("hookapi.h", "#define X")])

        assert request.to_dict() == {
            "output": "wasm",
            "compress": True,
            "strip": True,
            "files": [{"type": "c", "name": "main.c", "options": "-O3", "src": "int x;"}],
            "headers": [{"type": "h", "name": "hookapi.h", "src": "#define X"}],
        }


class TestBuildRequestInvariant:
    def test_zero_units_rejected(self):
        with pytest.raises(InvalidInputError, match="exactly one"):
            BuildRequest(units=(), headers=(), base_name="x")

    def test_multiple_units_rejected(self):
        with pytest.raises(InvalidInputError, match="exactly one"):
            BuildRequest(units=(make_unit("a.c"), make_unit("b.c")), headers=(), base_name="a")

    def test_empty_base_name_rejected(self):
        """A unit named '.c.c' would produce an empty artifact name."""
        with pytest.raises(InvalidInputError, match="artifact name"):
            UnitAssembler().assemble(make_unit(".c.c"), [])
