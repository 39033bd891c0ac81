from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

from hclkit.hcl_deserialize import deserialize_into
from hclkit.hcl_errors import DeserializeError, IllegalMultipleEntriesError
from hclkit.hcl_parser import parse


@dataclass
class Rule:
    name: str
    cidrs: list[str]


@dataclass
class Group:
    name: str
    allow: list[Rule] = field(default_factory=list)
    deny: list[Rule] = field(default_factory=list)


@dataclass
class User:
    root: bool


@dataclass
class Instance:
    name: str
    image_name: str = field(metadata={"hcl": "image"})
    user: dict[str, User] = field(default_factory=dict)


@dataclass
class SimpleMap:
    foo: str
    bar: str
    index: int


@dataclass
class Scalars:
    count: int
    ratio: float
    enabled: bool
    label: str
    missing: Optional[int]
    pair: tuple[int, str]
    rest: tuple[int, ...]
    tags: dict[str, str]
    extra: Any = None
    fallback: str = "default"


def test_security_group(security_group_hcl: str) -> None:
    @dataclass
    class Document:
        resource: dict[str, dict[str, Group]]

    document = deserialize_into(parse(security_group_hcl), Document)
    group = document.resource["security/group"]["foobar"]
    assert group.name == "foobar"
    assert group.allow == [
        Rule("localhost", ["127.0.0.1/32"]),
        Rule("lan", ["192.168.0.0/16"]),
    ]
    assert group.deny == []


def test_map_fixture(map_hcl: str) -> None:
    @dataclass
    class Document:
        simple_map: list[SimpleMap]
        resource: dict[str, Any]

    document = deserialize_into(parse(map_hcl), Document)
    assert [m.index for m in document.simple_map] == [1, 0]
    assert sorted(document.resource) == ["instance", "security/group"]


def test_nested_labeled_dataclasses(map_hcl: str) -> None:
    body = parse(map_hcl).merge()

    @dataclass
    class Document:
        resource: dict[str, dict[str, Any]]

    groups = deserialize_into(body, Document).resource["security/group"]
    assert sorted(groups) == ["foobar", "second"]


def test_labeled_block_dicts_and_field_names(map_hcl: str) -> None:
    @dataclass
    class Typed:
        resource: dict[str, dict[str, Instance | Group]]

    with pytest.raises(DeserializeError, match="ambiguous"):
        deserialize_into(parse(map_hcl), Typed)

    @dataclass
    class Instances:
        resource: dict[str, dict[str, Instance]]

    with pytest.raises(DeserializeError, match="Missing required field"):
        deserialize_into(parse(map_hcl), Instances)

    source = 'resource "instance" "web" {\n  name = "web"\n  image = "ubuntu"\n  user "ops" {\n    root = false\n  }\n}\n'
    instance = deserialize_into(parse(source), Instances).resource["instance"]["web"]
    assert instance == Instance("web", "ubuntu", {"ops": User(False)})


def test_scalar_fields() -> None:
    source = (
        "count = 3\n"
        "ratio = 2\n"
        "enabled = true\n"
        'label = "x"\n'
        'pair = [1, "one"]\n'
        "rest = [1, 2, 3]\n"
        'tags = { env = "prod" }\n'
        'extra = { a = [1, "b"] }\n'
    )
    scalars = deserialize_into(parse(source), Scalars)
    assert scalars == Scalars(
        count=3,
        ratio=2.0,
        enabled=True,
        label="x",
        missing=None,
        pair=(1, "one"),
        rest=(1, 2, 3),
        tags={"env": "prod"},
        extra=[{"a": [1, "b"]}],
    )
    assert isinstance(scalars.ratio, float)


def test_nested_dataclass_from_object() -> None:
    @dataclass
    class Outer:
        rule: Rule
        rules: list[Rule]

    source = 'rule = { name = "a", cidrs = [] }\nrules = { name = "b", cidrs = ["c"] }\n'
    outer = deserialize_into(parse(source), Outer)
    assert outer.rule == Rule("a", [])
    assert outer.rules == [Rule("b", ["c"])]


def test_optional_null() -> None:
    @dataclass
    class Holder:
        value: Optional[str]

    assert deserialize_into(parse("value = null\n"), Holder).value is None
    assert deserialize_into(parse('value = "v"\n'), Holder).value == "v"


@pytest.mark.parametrize(
    "source,message",
    [
        ("name = 1\n", "Rule.name"),
        ('name = "a"\n', "Missing required field Rule.cidrs"),
        ('name = "a"\ncidrs = "x"\n', "Rule.cidrs"),
        ('name = "a"\ncidrs = [1]\n', r"Rule.cidrs\[0\]"),
    ],
)  # type: ignore[misc]
def test_deserialize_errors(source: str, message: str) -> None:
    with pytest.raises(DeserializeError, match=message):
        deserialize_into(parse(source), Rule)


def test_requires_dataclass_type() -> None:
    with pytest.raises(DeserializeError):
        deserialize_into(parse(""), dict)  # type: ignore[type-var]


def test_merge_errors_propagate() -> None:
    with pytest.raises(IllegalMultipleEntriesError):
        deserialize_into(parse('name = "a"\nname = "b"\ncidrs = []\n'), Rule)


def test_single_block_field_rejects_many() -> None:
    @dataclass
    class Holder:
        rule: Rule

    source = 'rule {\n  name = "a"\n  cidrs = []\n}\nrule {\n  name = "b"\n  cidrs = []\n}\n'
    with pytest.raises(DeserializeError, match="exactly one block"):
        deserialize_into(parse(source), Holder)

    holder = deserialize_into(parse(source.split("rule {\n  name = \"b\"")[0]), Holder)
    assert holder.rule == Rule("a", [])



def test_any_block_field_lists_labels_and_bodies() -> None:
    @dataclass
    class Holder:
        rule: Any
        groups: dict = field(default_factory=dict)

    source = 'rule "x" {\n  a = 1\n}\nrule {\n  b = [true]\n}\ngroups "g" {\n  c = "d"\n}\n'
    holder = deserialize_into(parse(source), Holder)
    assert holder.rule == [
        {"labels": [], "body": {"b": [True]}},
        {"labels": ["x"], "body": {"a": 1}},
    ]
    assert holder.groups == {"g": [{"labels": [], "body": {"c": "d"}}]}
