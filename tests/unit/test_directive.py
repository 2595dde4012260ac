import pytest

from script_signer.script.directive import (
    extract_parameters,
    find_directive,
    remove_directives,
)


def test_flat_object() -> None:
    assert extract_parameters('EXECUTE({"Target":"Server1"})\nGet-Process\n') == {"Target": "Server1"}


def test_nested_object_is_captured_whole() -> None:
    text = 'EXECUTE({"Target":{"Host":"srv","Port":5985},"Mode":"fast"})\ncode'
    directive = find_directive(text)
    assert directive is not None
    assert directive.arguments == '{"Target":{"Host":"srv","Port":5985},"Mode":"fast"}'
    assert extract_parameters(text) == {"Target": '{"Host":"srv","Port":5985}', "Mode": "fast"}


@pytest.mark.parametrize(
    "text, expected",
    [
        ('EXECUTE({"q":"x)y}"})', {"q": "x)y}"}),
        (r'EXECUTE({"q":"a\"b)"})', {"q": 'a"b)'}),
        ('EXECUTE({"n":1,"flag":true})', {"n": "1", "flag": "true"}),
        ('EXECUTE({\n  "a": "b",\n  "c": "d"\n})\ncode', {"a": "b", "c": "d"}),
    ],
)
def test_argument_blob_variants(text: str, expected: dict) -> None:
    assert extract_parameters(text) == expected


@pytest.mark.parametrize(
    "text",
    [
        "Get-Process\n",
        "",
        "EXECUTE something else",
        "EXECUTE({not json})",
        'EXECUTE(["a", "b"])',
        'EXECUTE({"a": "b"}',
        "EXECUTE()",
    ],
)
def test_missing_or_malformed_directive_yields_empty_mapping(text: str) -> None:
    assert extract_parameters(text) == {}


def test_custom_keyword() -> None:
    text = 'PSEXECUTE({"a":"1"})\ncode'
    assert extract_parameters(text, keyword="PSEXECUTE") == {"a": "1"}
    assert extract_parameters("RUN({\"a\":\"1\"})", keyword="RUN") == {"a": "1"}


def test_remove_directive_line() -> None:
    assert remove_directives("a\nEXECUTE({})\nb") == "a\nb"
    assert remove_directives('x = EXECUTE({"k":"v"})\ncode') == "code"
    assert remove_directives("code\nEXECUTE({})") == "code\n"


def test_remove_multiline_directive() -> None:
    text = 'before\nEXECUTE({\n  "a": {"b": "c"}\n})\nafter\n'
    assert remove_directives(text) == "before\nafter\n"


def test_remove_leaves_unbalanced_text_alone() -> None:
    text = "EXECUTE({\ncode"
    assert remove_directives(text) == text


def test_remove_every_directive() -> None:
    text = 'EXECUTE({"a":"1"})\none\nEXECUTE({"b":"2"})\ntwo'
    assert remove_directives(text) == "one\ntwo"
