from __future__ import annotations

import pytest

from resolver_sync.golang import (
    Basic,
    Field,
    GoSyntaxError,
    MethodSignature,
    Named,
    Pointer,
    Slice,
    parse_file,
)

CONTRACT_SOURCE = """// Code generated, DO NOT EDIT.

package gql

import (
	"context"
	m "example.com/app/model"
)

type ResolverRoot interface {
	Query() QueryResolver
}

type QueryResolver interface {
	Widget(ctx context.Context, id string) (*Widget, error)
	Widgets(ctx context.Context, first, after int) ([]*m.Widget, error)
	Ping(context.Context)
	Subscribe(ctx context.Context, names ...string) error
	fmt.Stringer
}

type Widget struct {
	ID   string
	Tags []string
}

type ID = string

var schema = `type Query { widget: Widget }`

const (
	a = iota
	b
)
"""


def test_parse_file_reads_package_imports_and_types() -> None:
    parsed = parse_file(CONTRACT_SOURCE)

    assert parsed.package == "gql"
    assert [(spec.name, spec.path, spec.explicit_alias) for spec in parsed.imports] == [
        ("context", "context", False),
        ("m", "example.com/app/model", True),
    ]
    assert parsed.import_names() == {"context": "context", "m": "example.com/app/model"}
    assert [(decl.name, decl.kind) for decl in parsed.types] == [
        ("ResolverRoot", "interface"),
        ("QueryResolver", "interface"),
        ("Widget", "struct"),
        ("ID", "other"),
    ]
    assert parsed.funcs == ()


def test_parse_file_reads_interface_methods_in_order() -> None:
    parsed = parse_file(CONTRACT_SOURCE)
    query = next(decl for decl in parsed.types if decl.name == "QueryResolver")

    assert [method.name for method in query.methods] == ["Widget", "Widgets", "Ping", "Subscribe"]
    assert query.embedded == ("fmt . Stringer",)

    widget = query.methods[0]
    assert widget.signature == MethodSignature(
        params=(
            Field("ctx", Named("context", "Context")),
            Field("id", Basic("string")),
        ),
        results=(
            Field("", Pointer(Named("gql", "Widget"))),
            Field("", Basic("error")),
        ),
    )
    assert widget.line == 15

    widgets = query.methods[1]
    assert widgets.signature is not None
    assert [item.name for item in widgets.signature.params] == ["ctx", "first", "after"]
    assert widgets.signature.params[2].type == Basic("int")
    assert widgets.signature.results is not None
    assert widgets.signature.results[0].type == Slice(Pointer(Named("m", "Widget")))

    ping = query.methods[2]
    assert ping.signature == MethodSignature(params=(Field("", Named("context", "Context")),))


def test_parse_file_marks_unsupported_interface_method() -> None:
    parsed = parse_file(CONTRACT_SOURCE)
    query = next(decl for decl in parsed.types if decl.name == "QueryResolver")

    subscribe = query.methods[3]
    assert subscribe.signature is None
    assert subscribe.unsupported is not None


IMPLEMENTATION_SOURCE = """package resolver

import "example.com/app/gql"

type queryResolver struct{ *Resolver }

func init() {
	register()
}

func (r *queryResolver) Widget(ctx context.Context, id string) (*gql.Widget, error) {
	panic("not implemented")
}

func (r queryResolver) Name() string { return "query" }

func (queryResolver) Reset() {
	r.count = 0
}

func (r *queryResolver) Stream(ctx context.Context) (<-chan *gql.Widget, error) {
	// comment before the first statement
	panic(fmt.Sprintf("todo %d", 1))
}

func (r *queryResolver) Handler() func() error {
	return nil
}
"""


def test_parse_file_reads_method_receivers_and_spans() -> None:
    parsed = parse_file(IMPLEMENTATION_SOURCE)
    by_key = {decl.key: decl for decl in parsed.funcs}

    assert list(by_key) == [
        "init",
        "queryResolver.Widget",
        "queryResolver.Name",
        "queryResolver.Reset",
        "queryResolver.Stream",
        "queryResolver.Handler",
    ]

    widget = by_key["queryResolver.Widget"]
    text = IMPLEMENTATION_SOURCE
    assert text[widget.params_span.start : widget.params_span.end] == (
        "(ctx context.Context, id string)"
    )
    assert text[widget.results_span.start : widget.results_span.end] == " (*gql.Widget, error)"
    assert widget.body_open is not None
    assert widget.body_close is not None
    assert text[widget.body_open] == "{"
    assert text[widget.body_close] == "}"
    assert widget.starts_with_panic is True

    name = by_key["queryResolver.Name"]
    assert text[name.results_span.start : name.results_span.end] == " string"
    assert name.starts_with_panic is False


def test_parse_file_results_span_is_empty_without_results() -> None:
    parsed = parse_file(IMPLEMENTATION_SOURCE)
    reset = next(decl for decl in parsed.funcs if decl.name == "Reset")

    assert reset.receiver == "queryResolver"
    assert reset.results_span.start == reset.results_span.end == reset.params_span.end
    assert reset.signature == MethodSignature(params=())


def test_parse_file_detects_any_leading_panic_call() -> None:
    parsed = parse_file(IMPLEMENTATION_SOURCE)
    stream = next(decl for decl in parsed.funcs if decl.name == "Stream")

    assert stream.starts_with_panic is True


def test_parse_file_keeps_unmodeled_function_signature_as_none() -> None:
    parsed = parse_file(IMPLEMENTATION_SOURCE)
    handler = next(decl for decl in parsed.funcs if decl.name == "Handler")

    assert handler.signature is None
    assert handler.unsupported is not None
    assert handler.body_open is not None


@pytest.mark.parametrize(
    "source",
    [
        "type X struct{}\n",
        "package\n",
        "package p\nfunc (r *x) {}\n",
        "package p\nfunc f() {\n",
        "package p\nfunc f() (]\n",
        "package p\nreturn x\n",
    ],
)
def test_parse_file_rejects_malformed_source(source: str) -> None:
    with pytest.raises(GoSyntaxError):
        parse_file(source)
