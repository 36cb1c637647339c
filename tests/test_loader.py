"""Tests for the Tree-sitter Go source loader."""

from pathlib import Path

import pytest

from goaster.errors import GoSyntaxError
from goaster.loader import GoSourceLoader, comment_text
from goaster.models import RawFuncDecl, RawTypeDecl, Shape


def _decl(raw, name):
    return next(d for d in raw.decls if d.name == name)


def test_load_dir_sorted_and_filtered(sample_module_path: Path):
    loader = GoSourceLoader()
    files = loader.load_dir(sample_module_path)
    assert [Path(f.filename).name for f in files] == ["shapes.go", "shapes_test.go", "sphere.go"]

    no_tests = GoSourceLoader(include_tests=False).load_dir(sample_module_path)
    assert [Path(f.filename).name for f in no_tests] == ["shapes.go", "sphere.go"]

    only_sphere = GoSourceLoader(file_filter=lambda p: p.name.startswith("sphere")).load_dir(sample_module_path)
    assert [Path(f.filename).name for f in only_sphere] == ["sphere.go"]


def test_package_and_imports(sample_module_path: Path):
    raw = GoSourceLoader().parse_file(sample_module_path / "shapes.go")
    assert raw.pkg_name == "shapes"
    assert [(i.name, i.path) for i in raw.imports] == [("", "fmt"), ("m", "math")]
    assert raw.imports[0].local_name == "fmt"
    assert raw.imports[1].local_name == "m"


def test_declarations_in_source_order(sample_module_path: Path):
    raw = GoSourceLoader().parse_file(sample_module_path / "shapes.go")
    positions = [d.pos for d in raw.decls]
    assert positions == sorted(positions)
    names = [d.name for d in raw.decls]
    assert names[:4] == ["Shape", "Solid", "Point", "Circle"]
    assert "Divide" in names


def test_doc_comments(sample_module_path: Path):
    raw = GoSourceLoader().parse_file(sample_module_path / "shapes.go")
    assert _decl(raw, "Shape").doc == "Shape is anything with an area."
    assert _decl(raw, "Meters").doc == "Meters measures length."
    assert _decl(raw, "Distance").doc == "Distance is Meters by another name."
    assert _decl(raw, "Path").doc == ""
    assert _decl(raw, "Divide").doc == ""
    assert _decl(raw, "Sum").doc == "Sum adds everything."


def test_grouped_spec_text_gets_type_keyword(sample_module_path: Path):
    raw = GoSourceLoader().parse_file(sample_module_path / "shapes.go")
    meters = _decl(raw, "Meters")
    assert isinstance(meters, RawTypeDecl)
    assert meters.text == "type Meters float64"
    assert _decl(raw, "Distance").is_assign is True
    assert meters.is_assign is False


def test_type_shapes(sample_module_path: Path):
    raw = GoSourceLoader().parse_file(sample_module_path / "shapes.go")
    assert _decl(raw, "Path").type.shape == Shape.SLICE
    assert _decl(raw, "Grid").type.shape == Shape.ARRAY
    assert _decl(raw, "Lookup").type.shape == Shape.MAP
    events = _decl(raw, "Events").type
    assert events.shape == Shape.CHAN
    assert events.chan_dir == "send"
    assert _decl(raw, "Ref").type.shape == Shape.POINTER
    remote = _decl(raw, "Remote").type
    assert remote.shape == Shape.QUALIFIED
    assert (remote.package, remote.name) == ("fmt", "Stringer")

    solid = _decl(raw, "Solid").type
    assert solid.shape == Shape.INTERFACE
    assert [m.name for m in solid.methods] == ["Volume"]
    assert [e.name for e in solid.embeds] == ["Shape"]


def test_struct_fields_and_tags(sample_module_path: Path):
    raw = GoSourceLoader().parse_file(sample_module_path / "shapes.go")
    circle = _decl(raw, "Circle").type
    assert circle.shape == Shape.STRUCT
    embedded, radius, label = circle.fields
    assert embedded.embedded and embedded.names == []
    assert radius.names == ["Radius"]
    assert radius.tag == '`json:"radius"`'
    assert label.names == ["label"]


def test_receivers_and_variadics(sample_module_path: Path):
    raw = GoSourceLoader().parse_file(sample_module_path / "shapes.go")
    scale = next(d for d in raw.decls if isinstance(d, RawFuncDecl) and d.name == "Scale")
    assert scale.recv is not None
    assert scale.recv.names == ["c"]
    assert scale.recv.type.shape == Shape.POINTER

    total = _decl(raw, "Sum")
    assert [p.variadic for p in total.params] == [False, True]


def test_parse_source_string():
    raw = GoSourceLoader().parse_file(Path("inline.go"), source="package inline\n\ntype ID int\n")
    assert raw.pkg_name == "inline"
    assert raw.decls[0].name == "ID"
    assert raw.position(raw.decls[0].pos) == (3, 6)


def test_syntax_error_is_raised(temp_dir: Path):
    bad = temp_dir / "bad.go"
    bad.write_text("package bad\n\nfunc (\n", encoding="utf-8")
    with pytest.raises(GoSyntaxError) as info:
        GoSourceLoader().load_dir(temp_dir)
    assert "bad.go" in str(info.value)


def test_missing_file_propagates(temp_dir: Path):
    with pytest.raises(OSError):
        GoSourceLoader().parse_file(temp_dir / "missing.go")


def test_comment_text_strips_markers_and_directives():
    assert comment_text(["// Hello", "//", "// world"]) == "Hello\n\nworld"
    assert comment_text(["//go:generate stringer", "// Kept"]) == "Kept"
    assert comment_text(["/*\nblock\n*/"]) == "block"
