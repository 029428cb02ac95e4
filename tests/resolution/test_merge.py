"""Argument merge and coercion tests."""

from __future__ import annotations

from storybox.models import ArgumentSpec, ArgumentType, ArgValue, StoryVariant
from storybox.resolution.merge import coerce, merge_args, passthrough_params


def _spec(name: str, value: ArgValue) -> ArgumentSpec:
    return ArgumentSpec(name=name, type=value.type, default=value, default_text=value.as_text())


def _story() -> StoryVariant:
    return StoryVariant(
        key="Primary",
        title="Primary",
        args={
            "size": _spec("size", ArgValue.string("large")),
            "disabled": _spec("disabled", ArgValue.boolean(True)),
            "count": _spec("count", ArgValue.number(2)),
            "body": _spec("body", ArgValue.markup("<p>hi</p>")),
        },
    )


def test_query_override_of_a_boolean() -> None:
    merged = merge_args(_story().args, {"disabled": "false"})

    assert merged.values["size"] == ArgValue.string("large")
    assert merged.values["disabled"] == ArgValue.boolean(False)


def test_absent_boolean_is_false_whatever_the_default() -> None:
    merged = merge_args(_story().args, {})

    assert merged.values["disabled"] == ArgValue.boolean(False)
    assert merged.values["count"] == ArgValue.number(2)
    assert merged.text["disabled"] == "false"


def test_boolean_coercion_is_case_insensitive() -> None:
    assert coerce(ArgumentType.BOOLEAN, "TRUE") == ArgValue.boolean(True)
    assert coerce(ArgumentType.BOOLEAN, "yes") == ArgValue.boolean(False)


def test_boolean_round_trip_is_stable() -> None:
    for flag in (True, False):
        value = coerce(ArgumentType.BOOLEAN, ArgValue.boolean(flag).as_text())
        assert coerce(ArgumentType.BOOLEAN, value.as_text()) == value
        assert value.value is flag


def test_number_coercion_falls_back_to_text() -> None:
    assert coerce(ArgumentType.NUMBER, "3.5") == ArgValue.number(3.5)
    assert coerce(ArgumentType.NUMBER, "wide") == ArgValue.string("wide")


def test_markup_from_query_is_plain_text() -> None:
    merged = merge_args(_story().args, {"body": "<script>x</script>"})

    assert merged.values["body"] == ArgValue.string("<script>x</script>")
    assert not hasattr(merged.native()["body"], "__html__")


def test_default_markup_stays_trusted() -> None:
    merged = merge_args(_story().args, {})

    assert merged.native()["body"].__html__() == "<p>hi</p>"


def test_text_forms_use_canonical_numbers() -> None:
    merged = merge_args(_story().args, {"count": "4"})

    assert merged.values["count"] == ArgValue.number(4.0)
    assert merged.text["count"] == "4"
    assert ("count", "4") in merged.query_items()


def test_merged_values_are_a_fresh_mapping() -> None:
    story = _story()
    merged = merge_args(story.args, {})
    merged.values["size"] = ArgValue.string("tiny")

    assert story.args["size"].default == ArgValue.string("large")
    assert merge_args(story.args, {}).values["size"] == ArgValue.string("large")


def test_unknown_query_names_are_ignored_for_stories() -> None:
    merged = merge_args(_story().args, {"embed": "1"})

    assert "embed" not in merged.values
    assert merged.extra == []


def test_passthrough_skips_routing_parameters() -> None:
    items = [("renderMode", "csr"), ("embed", "1"), ("theme", "dark"), ("embed", "2"), ("storyKey", "x")]

    assert passthrough_params(items) == [("embed", "1")]


def test_non_finite_and_separated_numbers_stay_text() -> None:
    for raw in ("nan", "inf", "-Infinity", "1_000"):
        assert coerce(ArgumentType.NUMBER, raw) == ArgValue.string(raw)
    assert coerce(ArgumentType.NUMBER, "-2.5") == ArgValue.number(-2.5)
