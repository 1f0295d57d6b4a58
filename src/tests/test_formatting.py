import pytest

from ingest.formatting import format_slack_text, parse_user_mentions


def test_mentions_bold_and_channel() -> None:
    text = "<@U123> said *hi* to <#C1|general>"
    assert format_slack_text(text) == "@U123 said **hi** to #general"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("see <https://example.com|the docs>", "see the docs (https://example.com)"),
        ("see <https://example.com/a?b=1>", "see https://example.com/a?b=1"),
        ("_soft_ words", "*soft* words"),
        ("~gone~", "~~gone~~"),
        ("run `make test` now", "run `make test` now"),
        ("*bold* and _it_", "**bold** and *it*"),
        ("plain text", "plain text"),
    ],
)
def test_substitutions(raw: str, expected: str) -> None:
    assert format_slack_text(raw) == expected


def test_total_on_empty_and_unbalanced_input() -> None:
    assert format_slack_text("") == ""
    assert format_slack_text(None) == ""
    assert format_slack_text("a * b _ c ~ d ` <@") == "a * b _ c ~ d ` <@"


def test_channel_without_label_is_left_alone() -> None:
    assert format_slack_text("<#C1>") == "<#C1>"


def test_parse_user_mentions_keeps_order() -> None:
    assert parse_user_mentions("<@U2> and <@U1> and <@U2>") == ["U2", "U1", "U2"]
    assert parse_user_mentions("nobody") == []
    assert parse_user_mentions(None) == []
