import pytest

from chordmap.keymaps import BindingRecord, KeyChord, LeafNode, MalformedRecordError


def test_keychord_requires_tokens() -> None:
    with pytest.raises(ValueError):
        KeyChord(())
    with pytest.raises(ValueError):
        KeyChord(("a", ""))


def test_keychord_equality_is_sequence_equality() -> None:
    assert KeyChord.of("C-x", "b") == KeyChord.parse("C-x b")
    assert KeyChord.of("a", "b") != KeyChord.of("b", "a")
    assert KeyChord.of("a").append("b") == KeyChord.of("a", "b")


@pytest.mark.parametrize(
    "left, right",
    [
        (("a-b",), ("a", "b")),
        (("a", "b-c"), ("a-b", "c")),
        (("%2D",), ("-",)),
        (("a b",), ("a", "b")),
    ],
)
def test_slug_distinguishes_chords(left: tuple[str, ...], right: tuple[str, ...]) -> None:
    assert KeyChord(left).slug() != KeyChord(right).slug()


def test_slug_is_readable_for_plain_keys() -> None:
    assert KeyChord.of("C-c", "b").slug() == "C%2Dc-b"
    assert KeyChord.of("g", "h").slug() == "g-h"


def test_record_dict_shape() -> None:
    record = BindingRecord(
        keys=("b", "c"), kind="bookmark", name="bc", fields={"bookmark": "x"}
    )

    assert record.to_dict() == {
        "type": "bookmark",
        "keys": ["b", "c"],
        "name": "bc",
        "bookmark": "x",
    }
    assert BindingRecord.from_dict(record.to_dict()) == record


def test_record_name_defaults_only_when_absent() -> None:
    missing = BindingRecord.from_dict({"type": "prefix", "keys": ["w", "m"]})
    empty = BindingRecord.from_dict({"type": "prefix", "keys": ["w"], "name": ""})

    assert missing.name == "w m"
    assert empty.name == ""


@pytest.mark.parametrize(
    "raw",
    [
        {"keys": ["a"], "name": "no type"},
        {"type": "tab", "keys": [], "name": "empty keys"},
        {"type": "tab", "keys": "a", "name": "keys not a list"},
        {"type": "tab", "keys": ["a", 3], "name": "non-string key"},
        {"type": "tab", "keys": ["a"], "name": 7},
        ["not", "a", "dict"],
    ],
)
def test_record_from_dict_rejects_malformed(raw: object) -> None:
    with pytest.raises(MalformedRecordError):
        BindingRecord.from_dict(raw)  # type: ignore[arg-type]


def test_record_fields_cannot_shadow_reserved_keys() -> None:
    with pytest.raises(MalformedRecordError):
        BindingRecord(keys=("a",), kind="tab", name="x", fields={"keys": ["b"]})


def test_leaf_equality_ignores_bound_behaviour() -> None:
    first = LeafNode(kind="tab", name="t", metadata={"tab": "t"}, invoke=lambda: 1)
    second = LeafNode(kind="tab", name="t", metadata={"tab": "t"})

    assert first == second
    assert first() == 1
    with pytest.raises(RuntimeError):
        second()
