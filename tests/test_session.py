from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from chordmap.host import (
    MemoryContextStore,
    MemoryLocationStore,
    RecordingDisplay,
    ScriptedInput,
    ScriptedPrompter,
)
from chordmap.keymaps import KeyChord, LeafNode, ProfileStoreError
from chordmap.session import ChordSession, describe


def make_session(
    tmp_path: Path,
    *,
    units: tuple[str, ...] = (),
    answers: tuple[str, ...] = (),
    choices: tuple[Optional[str], ...] = (),
    locations: Optional[MemoryLocationStore] = None,
    contexts: Optional[MemoryContextStore] = None,
) -> ChordSession:
    return ChordSession(
        locations=locations or MemoryLocationStore(),
        contexts=contexts or MemoryContextStore(["main", "notes"]),
        input_source=ScriptedInput(units),
        display=RecordingDisplay(),
        prompter=ScriptedPrompter(answers=answers, choices=choices),
        store_path=tmp_path / "profiles.json",
    )


def feed(session: ChordSession, *units: str) -> None:
    source = session.reader.input_source
    assert isinstance(source, ScriptedInput)
    source.feed(*units)


def notices(session: ChordSession) -> list[str]:
    prompter = session.prompter
    assert isinstance(prompter, ScriptedPrompter)
    return prompter.notices


def test_bind_bookmark_chord(tmp_path: Path) -> None:
    locations = MemoryLocationStore(position="src/app.py:42")
    session = make_session(tmp_path, units=("g", "a"), locations=locations)

    chord = session.bind_new_chord()

    assert chord == KeyChord.of("g")
    assert session.tree.lookup(("g",)).status == "leaf"
    assert locations.names() == ("chordmap:g",)
    assert notices(session)[-1] == "Bound g  [bookmark] g"


def test_bind_nested_chord_under_prefix(tmp_path: Path) -> None:
    session = make_session(tmp_path, units=("w", "w", "1"), answers=("windows",))

    session.bind_new_chord("prefix")
    chord = session.bind_new_chord("bookmark")

    assert chord == KeyChord.of("w", "1")
    assert session.list_bindings() == [
        "w  [prefix] windows",
        "w 1  [bookmark] w 1",
    ]


def test_bind_choose_kind_interactively(tmp_path: Path) -> None:
    contexts = MemoryContextStore(["main"])
    session = make_session(
        tmp_path,
        units=("t",),
        answers=("project",),
        choices=("tab",),
        contexts=contexts,
    )

    session.bind_new_chord(choose_kind=True)

    assert contexts.current == "project"
    node = session.tree.lookup(("t",)).node
    assert isinstance(node, LeafNode)
    assert node.metadata == {"tab": "project"}


def test_bind_cancelled_leaves_tree_untouched(tmp_path: Path) -> None:
    locations = MemoryLocationStore()
    session = make_session(tmp_path, units=("a", "C-g"), locations=locations)
    session.tree.insert(KeyChord.of("a", "b"), LeafNode("tab", "ab", {"tab": "main"}))
    before = session.list_bindings()

    assert session.bind_new_chord() is None

    assert session.list_bindings() == before
    assert locations.names() == ()
    assert notices(session)[-1] == "Cancelled"


def test_bind_extends_existing_prefix(tmp_path: Path) -> None:
    locations = MemoryLocationStore()
    session = make_session(tmp_path, units=("a",), locations=locations)
    session.tree.insert(KeyChord.of("a", "c"), LeafNode("tab", "ac", {"tab": "main"}))

    feed(session, "z")
    chord = session.bind_new_chord()

    assert chord == KeyChord.of("a", "z")
    assert locations.names() == ("chordmap:a-z",)


def test_overwriting_bookmark_drops_its_location(tmp_path: Path) -> None:
    locations = MemoryLocationStore()
    session = make_session(
        tmp_path, units=("x", "x"), answers=("journal",), locations=locations
    )
    session.bind_new_chord("bookmark")
    assert locations.names() == ("chordmap:x",)

    session.bind_new_chord("tab")

    assert locations.names() == ()
    assert session.list_bindings() == ["x  [tab] journal"]


def test_bind_unknown_kind_is_reported(tmp_path: Path) -> None:
    session = make_session(tmp_path, units=("a",))

    assert session.bind_new_chord("plugin") is None

    assert "plugin" in notices(session)[-1]
    assert session.list_bindings() == []


def test_rebinding_replaced_bookmark_keeps_location(tmp_path: Path) -> None:
    locations = MemoryLocationStore()
    session = make_session(tmp_path, units=("m", "m"), locations=locations)

    session.bind_new_chord()
    session.bind_new_chord()

    assert locations.names() == ("chordmap:m",)


def test_unbind_bookmark_cascades(tmp_path: Path) -> None:
    locations = MemoryLocationStore()
    session = make_session(
        tmp_path, units=("m",), choices=("m  [bookmark] m",), locations=locations
    )
    session.bind_new_chord()
    location_id = "chordmap:m"
    assert locations.exists(location_id)

    removed = session.unbind_chord()

    assert removed == KeyChord.of("m")
    assert not locations.exists(location_id)
    assert session.list_bindings() == []


def test_unbind_backing_out_changes_nothing(tmp_path: Path) -> None:
    session = make_session(tmp_path, units=("m",), choices=(None,))
    session.bind_new_chord()

    assert session.unbind_chord() is None
    assert len(session.tree) == 1


def test_visit_bound_location_jumps(tmp_path: Path) -> None:
    locations = MemoryLocationStore(position="README.md:1")
    session = make_session(
        tmp_path, units=("r",), choices=("r  [bookmark] r",), locations=locations
    )
    session.bind_new_chord()
    locations.move_to("somewhere")

    assert session.visit_bound_location() == KeyChord.of("r")
    assert locations.position == "README.md:1"


def test_visit_dangling_location_is_reported(tmp_path: Path) -> None:
    locations = MemoryLocationStore()
    session = make_session(
        tmp_path, units=("r",), choices=("r  [bookmark] r",), locations=locations
    )
    session.bind_new_chord()
    locations.delete("chordmap:r")

    assert session.visit_bound_location() is None
    assert "no longer exists" in notices(session)[-1]


def test_activate_chord_switches_tab(tmp_path: Path) -> None:
    contexts = MemoryContextStore(["main", "notes"])
    session = make_session(
        tmp_path,
        units=("t", "t", "n", "t", "n"),
        answers=("tabs", "tn"),
        contexts=contexts,
    )
    session.bind_new_chord("prefix")
    contexts.switch_to("notes")
    session.bind_new_chord("tab")
    contexts.switch_to("main")

    assert session.activate_chord() == KeyChord.of("t", "n")
    assert contexts.current == "tn"


def test_activate_missing_tab_is_not_fatal(tmp_path: Path) -> None:
    contexts = MemoryContextStore(["main"])
    session = make_session(tmp_path, units=("t", "t"), answers=("work",), contexts=contexts)
    session.bind_new_chord("tab")
    contexts.close("work")

    assert session.activate_chord() is None
    assert notices(session)[-1] == "Workspace tab 'work' no longer exists"


def test_activate_unbound_chord_notifies(tmp_path: Path) -> None:
    session = make_session(tmp_path, units=("q",))

    assert session.activate_chord() == KeyChord.of("q")
    assert notices(session)[-1] == "q is not bound"


def test_save_and_load_named_profile(tmp_path: Path) -> None:
    session = make_session(tmp_path, units=("a", "b"))
    session.bind_new_chord()
    session.save_profile("work")
    session.bind_new_chord()

    session.load_profile("work")

    assert session.list_bindings() == ["a  [bookmark] a"]
    assert session.list_profiles() == ("work",)
    assert session.reader.tree is session.tree


def test_load_missing_profile_keeps_current_tree(tmp_path: Path) -> None:
    session = make_session(tmp_path, units=("a",))
    session.bind_new_chord()

    assert session.load_profile("ghost") is None

    assert session.list_bindings() == ["a  [bookmark] a"]
    assert "ghost" in notices(session)[-1]


def test_start_without_saved_profile_is_a_notice(tmp_path: Path) -> None:
    session = make_session(tmp_path)

    assert session.start() is False
    assert "starting with no bindings" in notices(session)[-1]


def test_start_with_corrupt_store_still_starts(tmp_path: Path) -> None:
    (tmp_path / "profiles.json").write_text("[]", encoding="utf-8")
    session = make_session(tmp_path)

    assert session.start() is False
    assert "Could not load bindings" in notices(session)[-1]


def test_running_saves_default_profile_on_exit(tmp_path: Path) -> None:
    session = make_session(tmp_path, units=("k",))
    with session.running():
        session.bind_new_chord()

    restored = make_session(tmp_path)
    assert restored.start() is True
    assert restored.list_bindings() == ["k  [bookmark] k"]


def test_running_saves_even_when_block_raises(tmp_path: Path) -> None:
    session = make_session(tmp_path, units=("k",))

    with pytest.raises(RuntimeError):
        with session.running():
            session.bind_new_chord()
            raise RuntimeError("host crashed")

    assert session.store.names() == ("default",)


def test_shutdown_failure_is_raised(tmp_path: Path) -> None:
    (tmp_path / "profiles.json").write_text("{oops", encoding="utf-8")
    session = make_session(tmp_path)

    with pytest.raises(ProfileStoreError):
        session.shutdown()


def test_delete_profile_and_reset(tmp_path: Path) -> None:
    session = make_session(tmp_path, units=("a",))
    session.bind_new_chord()
    session.save_profile("scratch")

    assert session.delete_profile("scratch") is True
    assert session.delete_profile("scratch") is False

    session.reset()
    assert session.list_bindings() == []


def test_describe_renders_chord_kind_and_name() -> None:
    node = LeafNode("tab", "notes", {"tab": "notes"})

    assert describe(KeyChord.of("C-c", "n"), node) == "C-c n  [tab] notes"


def test_bind_tab_reuses_existing_tab_name(tmp_path: Path) -> None:
    contexts = MemoryContextStore(["main", "notes"])
    session = make_session(
        tmp_path, units=("t", "t"), answers=("notes",), contexts=contexts
    )

    assert session.bind_new_chord("tab") == KeyChord.of("t")

    assert contexts.names() == ("main", "notes")
    assert contexts.current == "main"
    assert session.list_bindings() == ["t  [tab] notes"]

    assert session.activate_chord() == KeyChord.of("t")
    assert contexts.current == "notes"


def test_unbind_tells_apart_chords_that_render_alike(tmp_path: Path) -> None:
    session = make_session(tmp_path, choices=("a b  [tab] same (2)",))
    session.tree.insert(KeyChord.of("a b"), LeafNode("tab", "same", {"tab": "main"}))
    session.tree.insert(KeyChord.of("a", "b"), LeafNode("tab", "same", {"tab": "main"}))

    assert session.unbind_chord() == KeyChord.of("a", "b")

    assert session.tree.lookup(("a b",)).status == "leaf"
    assert session.tree.lookup(("a", "b")).status == "missing"
    prompter = session.prompter
    assert isinstance(prompter, ScriptedPrompter)
    assert prompter.offered[-1] == (
        "a b  [tab] same",
        "a  [prefix] a",
        "a b  [tab] same (2)",
    )
