"""TemplateResolver: {{object.field}} interpolation against an ExecutionContext."""

from automation.application.services.template_resolver import TemplateResolver


def test_reserved_object_reads_new_values(make_context) -> None:
    context = make_context(new_values={"owner": "Alice"})
    resolver = TemplateResolver()
    assert (
        resolver.resolve("Send congratulations to {{deal.owner}}", context)
        == "Send congratulations to Alice"
    )


def test_missing_field_is_left_verbatim(make_context) -> None:
    context = make_context(new_values={"stage": "Won"})
    resolver = TemplateResolver()
    assert (
        resolver.resolve("Send congratulations to {{deal.owner}}", context)
        == "Send congratulations to {{deal.owner}}"
    )


def test_other_objects_read_variables(make_context) -> None:
    context = make_context()
    context.set_variable("task.id", "t-42")
    resolver = TemplateResolver()
    assert resolver.resolve("Created {{task.id}} / {{task.title}}", context) == (
        "Created t-42 / {{task.title}}"
    )


def test_resolution_is_single_pass(make_context) -> None:
    context = make_context(new_values={"owner": "{{deal.name}}", "name": "Big deal"})
    resolver = TemplateResolver()
    assert resolver.resolve("{{deal.owner}}", context) == "{{deal.name}}"


def test_scalars_are_stringified(make_context) -> None:
    context = make_context(new_values={"amount": 1500, "won": True, "tags": ["a"]})
    resolver = TemplateResolver()
    assert resolver.resolve("{{deal.amount}} {{deal.won}} {{deal.tags}}", context) == (
        '1500 true ["a"]'
    )


def test_custom_record_objects(make_context) -> None:
    context = make_context(new_values={"name": "Lead A"})
    resolver = TemplateResolver(record_objects=["lead"])
    assert resolver.resolve("{{lead.name}} {{deal.name}}", context) == "Lead A {{deal.name}}"


def test_resolve_value_recurses_into_documents(make_context) -> None:
    context = make_context(new_values={"owner": "Alice"})
    resolver = TemplateResolver()
    value = {"title": "Hi {{deal.owner}}", "tags": ["{{deal.owner}}", 3], "done": False}
    assert resolver.resolve_value(value, context) == {
        "title": "Hi Alice",
        "tags": ["Alice", 3],
        "done": False,
    }
