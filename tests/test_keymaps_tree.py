import pytest

from chordmap.keymaps import (
    BindingTree,
    ConflictError,
    KeyChord,
    LeafNode,
    PrefixNode,
    TreeBusyError,
)


def leaf(name: str, kind: str = "bookmark") -> LeafNode:
    return LeafNode(kind=kind, name=name, metadata={"bookmark": name})


def chord(text: str) -> KeyChord:
    return KeyChord.parse(text)


def summary(tree: BindingTree) -> list[tuple[tuple[str, ...], str, str]]:
    return [(c.tokens, node.kind, node.name) for c, node in tree.enumerate()]


def build_tree() -> BindingTree:
    tree = BindingTree()
    tree.insert(chord("a"), leaf("alpha"))
    tree.insert(chord("b"), PrefixNode(label="buffers"))
    tree.insert(chord("b c"), leaf("bc"))
    tree.insert(chord("b d e"), leaf("bde"))
    return tree


def test_lookup_reports_prefix_leaf_and_missing() -> None:
    tree = build_tree()

    assert tree.lookup(("a",)).status == "leaf"
    assert tree.lookup(("b",)).status == "prefix"
    assert tree.lookup(("b", "c")).node == leaf("bc")

    miss = tree.lookup(("b", "x", "y"))
    assert miss.status == "missing"
    assert miss.consumed == 1


def test_lookup_through_leaf_is_missing() -> None:
    tree = build_tree()

    result = tree.lookup(("a", "b"))

    assert result.status == "missing"
    assert result.consumed == 1


def test_lookup_is_deterministic_without_mutation() -> None:
    tree = build_tree()

    first = [tree.lookup(path) for path in (("b", "d"), ("a",), ("z",))]
    second = [tree.lookup(path) for path in (("z",), ("a",), ("b", "d"))]

    assert first == list(reversed(second))


def test_insert_creates_intermediate_prefixes() -> None:
    tree = BindingTree()

    tree.insert(chord("x y z"), leaf("deep"))

    assert summary(tree) == [
        (("x",), "prefix", "x"),
        (("x", "y"), "prefix", "y"),
        (("x", "y", "z"), "bookmark", "deep"),
    ]


def test_insert_overwrites_leaf_last_write_wins() -> None:
    tree = build_tree()

    tree.insert(chord("a"), leaf("replacement"))

    assert tree.lookup(("a",)).node == leaf("replacement")
    assert summary(tree)[0] == (("a",), "bookmark", "replacement")


def test_insert_leaf_over_non_empty_prefix_conflicts_without_mutation() -> None:
    tree = build_tree()
    before = summary(tree)
    revision = tree.revision()

    with pytest.raises(ConflictError):
        tree.insert(chord("b"), leaf("clobber"))

    assert summary(tree) == before
    assert tree.revision() == revision


def test_insert_below_leaf_conflicts_without_mutation() -> None:
    tree = build_tree()
    before = summary(tree)

    with pytest.raises(ConflictError):
        tree.insert(chord("a q r"), leaf("nested"))

    assert summary(tree) == before


def test_insert_leaf_over_empty_prefix_replaces_it() -> None:
    tree = BindingTree()
    tree.insert(chord("p"), PrefixNode(label="empty"))

    tree.insert(chord("p"), leaf("now-a-leaf"))

    assert tree.lookup(("p",)).status == "leaf"


def test_redeclaring_prefix_relabels_and_keeps_children() -> None:
    tree = build_tree()

    tree.insert(chord("b"), PrefixNode(label="renamed"))

    assert tree.lookup(("b",)).node.name == "renamed"
    assert tree.lookup(("b", "c")).status == "leaf"


def test_remove_keeps_empty_ancestor_prefixes() -> None:
    tree = BindingTree()
    tree.insert(chord("g h"), leaf("gh"))

    removed = tree.remove(chord("g h"))

    assert removed == leaf("gh")
    assert summary(tree) == [(("g",), "prefix", "g")]


def test_remove_missing_path_returns_none() -> None:
    tree = build_tree()
    revision = tree.revision()

    assert tree.remove(chord("nope")) is None
    assert tree.remove(chord("a b")) is None
    assert tree.revision() == revision


def test_enumerate_is_preorder_in_declared_order() -> None:
    tree = build_tree()

    assert [c.render() for c, _ in tree.enumerate()] == [
        "a",
        "b",
        "b c",
        "b d",
        "b d e",
    ]
    assert len(tree) == 5


def test_candidates_follow_declared_order() -> None:
    tree = build_tree()

    root = tree.candidates()
    nested = tree.candidates(("b",))

    assert [c.token for c in root] == ["a", "b"]
    assert [(c.token, c.is_prefix) for c in nested] == [("c", False), ("d", True)]
    assert tree.candidates(("a",)) == ()


def test_mutation_refused_while_reading() -> None:
    tree = build_tree()

    with tree.reading():
        with pytest.raises(TreeBusyError):
            tree.insert(chord("z"), leaf("z"))
        with pytest.raises(TreeBusyError):
            tree.remove(chord("a"))
        with pytest.raises(TreeBusyError):
            tree.clear()

    tree.insert(chord("z"), leaf("z"))
    assert tree.lookup(("z",)).status == "leaf"


def test_leaves_filters_by_kind() -> None:
    tree = build_tree()
    tree.insert(chord("t"), LeafNode(kind="tab", name="work", metadata={"tab": "work"}))

    assert [c.render() for c, _ in tree.leaves("tab")] == ["t"]
    assert len(tree.leaves()) == 4
