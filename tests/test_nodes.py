"""Tests for the TypeNode / FuncNode facades."""

import pytest

from goaster.errors import PreconditionError
from goaster.kinds import Kind
from goaster.nodes import FuncField, FuncNode, NodeCore, StructField, TypeNode


def _core(kind: Kind, name: str = "T") -> NodeCore:
    return NodeCore(kind, name, "p", "p.go")


class TestConstruction:
    def test_type_node_rejects_func_kind(self):
        with pytest.raises(PreconditionError):
            TypeNode(_core(Kind.FUNC))

    def test_func_node_requires_func_kind(self):
        with pytest.raises(PreconditionError):
            FuncNode(_core(Kind.STRUCT))

    def test_precondition_error_is_a_type_error(self):
        with pytest.raises(TypeError):
            TypeNode(_core(Kind.FUNC))


class TestStructReflection:
    """Field index over struct declarations."""

    def test_fields_in_declaration_order(self, go_module):
        module = go_module(a="""package p

type S struct {
	A int
	B string
}
""")
        s = module.lookup("p", "S")
        assert s.num_field() == 2
        assert s.field(0) == StructField("A", "int")
        assert s.field(1) == StructField("B", "string")
        assert s.field(2) is None
        assert s.field(-1) is None
        assert s.field_by_name("B").type_name == "string"
        assert s.field_by_name("C") is None

    def test_shared_type_and_tags(self, go_module):
        module = go_module(a="""package p

import "net/http"

type S struct {
	X, Y   float64
	*http.Client
	Tagged []byte `json:"tagged,omitempty"`
}
""")
        s = module.lookup("p", "S")
        assert [f.name for f in s.fields()] == ["X", "Y", "Client", "Tagged"]
        assert s.field(2) == StructField("Client", "*http.Client", embedded=True)
        assert s.field(3).tag == '`json:"tagged,omitempty"`'
        assert s.field(3).type_name == "[]byte"

    def test_empty_struct(self, go_module):
        module = go_module(a="package p\n\ntype Empty struct{}\n")
        empty = module.lookup("p", "Empty")
        assert empty.num_field() == 0
        assert empty.field(0) is None

    def test_fixture_circle(self, shapes):
        circle = shapes.type_node("Circle")
        assert circle.num_field() == 3
        assert circle.field(0) == StructField("Point", "Point", embedded=True)
        assert circle.field_by_name("Radius").tag == '`json:"radius"`'
        assert circle.field_by_name("label").type_name == "string"
        # fields of embedded structs are not promoted
        assert circle.field_by_name("X") is None

    @pytest.mark.parametrize("name", ["Meters", "Shape", "Path", "Remote"])
    def test_non_struct_rejects_field_ops(self, shapes, name):
        node = shapes.type_node(name)
        with pytest.raises(PreconditionError):
            node.num_field()
        with pytest.raises(PreconditionError):
            node.field(0)
        with pytest.raises(PreconditionError):
            node.field_by_name("X")


class TestFuncReflection:
    """Parameter and result reflection over FuncNodes."""

    def test_sum_is_variadic(self, shapes):
        total = shapes.func_node("Sum")
        assert total.num_param() == 2
        assert total.is_variadic is True
        assert total.param(0) == FuncField("base", "int")
        assert total.param(1) == FuncField("rest", "[]int")
        assert total.num_result() == 1
        assert total.result(0) == FuncField("", "int")
        assert total.recv is None
        assert total.is_method is False

    def test_grouped_params_and_named_results(self, shapes):
        divide = shapes.func_node("Divide")
        assert [(p.name, p.type_name) for p in divide.params()] == [("a", "float64"), ("b", "float64")]
        assert [(r.name, r.type_name) for r in divide.results()] == [("q", "float64"), ("err", "error")]
        assert divide.is_variadic is False

    def test_out_of_range(self, shapes):
        divide = shapes.func_node("Divide")
        assert divide.param(2) is None
        assert divide.param(-1) is None
        assert divide.result(5) is None

    def test_func_type_declaration(self, shapes):
        handler = shapes.func_node("Handler")
        assert handler.kind is Kind.FUNC
        assert [p.type_name for p in handler.params()] == ["string", "[]int"]
        assert [r.type_name for r in handler.results()] == ["int", "error"]
        assert handler.is_variadic is True

    def test_no_params_no_results(self, go_module):
        module = go_module(a="package p\n\nfunc Noop() {}\n")
        noop = module.lookup("p", "Noop")
        assert noop.num_param() == 0
        assert noop.num_result() == 0
        assert noop.param(0) is None

    def test_unnamed_params(self, go_module):
        module = go_module(a="package p\n\ntype Cb func(int, *string) bool\n")
        cb = module.lookup("p", "Cb")
        assert cb.params() == [FuncField("", "int"), FuncField("", "*string")]

    def test_complex_type_names(self, go_module):
        module = go_module(a="""package p

func F(m map[string][]int, c <-chan error, fn func(int) (bool, error), a [3]*T) {}

type T struct{}
""")
        f = module.lookup("p", "F")
        assert [p.type_name for p in f.params()] == [
            "map[string][]int",
            "<-chan error",
            "func(int) (bool, error)",
            "[3]*T",
        ]

    def test_method_receiver(self, shapes):
        scale = shapes.type_node("Circle").method_by_name("Scale")
        assert scale.is_method
        assert scale.recv == FuncField("c", "Circle", is_pointer=True)
        assert repr(scale) == "<FuncNode (*Circle).Scale>"

    @pytest.mark.parametrize("op", ["num_method", "method_set", "fields", "is_assign"])
    def test_func_rejects_type_ops(self, shapes, op):
        with pytest.raises(PreconditionError):
            getattr(shapes.func_node("Sum"), op)

    @pytest.mark.parametrize("op", ["num_param", "params", "is_variadic", "recv"])
    def test_type_rejects_func_ops(self, shapes, op):
        with pytest.raises(PreconditionError):
            getattr(shapes.type_node("Circle"), op)

    def test_unknown_attribute_is_attribute_error(self, shapes):
        with pytest.raises(AttributeError):
            shapes.type_node("Circle").nonexistent


class TestCommonAttributes:
    def test_identity(self, shapes):
        meters = shapes.type_node("Meters")
        assert meters.name == "Meters"
        assert meters.kind is Kind.FLOAT64
        assert meters.pkg_name == "shapes"
        assert meters.text == "type Meters float64"
        assert meters.doc == "Meters measures length."

    def test_method_text_and_doc(self, shapes):
        area = shapes.type_node("Circle").method_by_name("Area")
        assert area.doc == "Area of the circle."
        assert area.text.startswith("func (c Circle) Area() float64 {")
