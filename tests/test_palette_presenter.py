"""Tests for the palette presenter state machine."""

import asyncio

import pytest

from cmdk.config.palette_config import PaletteOptions
from cmdk.ui.command_palette.palette_commands import Command
from cmdk.ui.command_palette.palette_presenter import (
    Direction,
    PalettePresenter,
    PaletteState,
    PaletteStatus,
    first_enabled_index,
)


class Recorder:
    """Collects outbound events in order."""

    def __init__(self):
        self.events: list[tuple[str, str | None]] = []
        self.updates: list[PaletteState] = []

    def on_close(self) -> None:
        self.events.append(("close", None))

    def on_command_selected(self, command: Command) -> None:
        self.events.append(("selected", command.id))

    def on_state_update(self, state: PaletteState) -> None:
        self.updates.append(state)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def presenter(recorder):
    return PalettePresenter(
        on_close=recorder.on_close,
        on_command_selected=recorder.on_command_selected,
        on_state_update=recorder.on_state_update,
    )


def _active_id(presenter: PalettePresenter) -> str | None:
    command = presenter.state.active_command
    return command.id if command else None


class TestPaletteState:
    def test_defaults(self) -> None:
        state = PaletteState()
        assert state.query == ""
        assert state.visible_items == ()
        assert state.active_index is None
        assert state.active_command is None
        assert state.is_empty is True
        assert state.is_searching is False
        assert state.is_loading is False

    def test_first_enabled_index(self) -> None:
        items = (
            Command(id="a", label="A", disabled=True),
            Command(id="b", label="B"),
        )
        assert first_enabled_index(items) == 1
        assert first_enabled_index(items[:1]) is None
        assert first_enabled_index(()) is None


class TestLifecycle:
    def test_starts_closed(self, presenter) -> None:
        assert presenter.status is PaletteStatus.CLOSED
        assert presenter.state is None

    def test_open_initializes_session(self, presenter, recorder, commands, groups) -> None:
        presenter.open(commands, groups)

        assert presenter.status is PaletteStatus.OPEN
        state = presenter.state
        assert state.query == ""
        assert [c.id for c in state.visible_items] == ["home", "settings", "new-file", "premium", "docs"]
        assert state.active_index == 0
        assert recorder.updates[-1] is state

    def test_open_skips_disabled_first_command(self, presenter) -> None:
        presenter.open(
            [
                Command(id="a", label="Alpha", disabled=True),
                Command(id="b", label="Beta"),
            ]
        )

        assert _active_id(presenter) == "b"

    def test_open_all_disabled_has_no_active(self, presenter) -> None:
        presenter.open([Command(id="a", label="Alpha", disabled=True)])

        assert presenter.state.active_index is None

    def test_open_empty_catalogue(self, presenter) -> None:
        presenter.open([])

        assert presenter.state.is_empty
        assert presenter.state.active_index is None

    def test_open_while_open_is_ignored(self, presenter, commands) -> None:
        presenter.open(commands)
        presenter.set_query("doc")
        presenter.open([Command(id="x", label="X")])

        assert presenter.state.query == "doc"
        assert "x" not in presenter.catalogue

    def test_recent_first_on_open(self, presenter) -> None:
        presenter.open(
            [Command(id="a", label="Alpha"), Command(id="b", label="Beta")],
            recent_ids=["b"],
        )

        assert [c.label for c in presenter.state.visible_items] == ["Beta", "Alpha"]
        assert presenter.state.sections[0].label == "Recent"
        assert _active_id(presenter) == "b"

    def test_reopen_starts_fresh(self, presenter, commands) -> None:
        presenter.open(commands)
        presenter.set_query("doc")
        presenter.cancel()
        presenter.open(commands)

        assert presenter.state.query == ""
        assert presenter.state.active_index == 0

    def test_recent_ids_are_not_mutated(self, presenter, commands) -> None:
        recent = ["docs", "home"]
        presenter.open(commands, recent_ids=recent)
        presenter.confirm()

        assert recent == ["docs", "home"]


class TestQueryChanges:
    def test_prefix_filter(self, presenter) -> None:
        presenter.open([Command(id="a", label="Alpha"), Command(id="b", label="Beta")])
        presenter.set_query("al")

        assert [c.label for c in presenter.state.visible_items] == ["Alpha"]
        assert presenter.state.query == "al"

    def test_selection_kept_by_id(self, presenter, commands, groups) -> None:
        presenter.open(commands, groups)
        presenter.move_selection(Direction.NEXT)
        assert _active_id(presenter) == "settings"

        # Every label contains "e", so the list keeps catalogue order
        presenter.set_query("e")
        assert _active_id(presenter) == "settings"
        presenter.set_query("set")
        assert _active_id(presenter) == "settings"

    def test_selection_falls_back_to_first_enabled(self, presenter, commands, groups) -> None:
        presenter.open(commands, groups)
        presenter.set_query("pre")

        # premium is ranked first but disabled
        assert [c.id for c in presenter.state.visible_items] == ["premium", "settings"]
        assert _active_id(presenter) == "settings"

    def test_no_results(self, presenter, commands) -> None:
        presenter.open(commands)
        presenter.set_query("zzz")

        assert presenter.state.is_empty
        assert presenter.state.active_index is None

        presenter.clear_query()
        assert presenter.state.query == ""
        assert presenter.state.active_index == 0

    def test_replace_catalogue_keeps_query_and_selection(self, presenter, commands, groups) -> None:
        presenter.open(commands, groups)
        presenter.set_query("o")
        assert _active_id(presenter) == "home"

        presenter.replace_catalogue(
            [Command(id="zeta", label="Zoom Out"), *commands],
            groups,
        )

        assert presenter.state.query == "o"
        assert _active_id(presenter) == "home"
        assert "zeta" in presenter.catalogue

    def test_replace_catalogue_updates_recent(self, presenter, commands, groups) -> None:
        presenter.open(commands, groups, recent_ids=["docs"])
        presenter.replace_catalogue(commands, groups, recent_ids=["new-file"])

        assert presenter.state.visible_items[0].id == "new-file"

    def test_replace_catalogue_drops_vanished_selection(self, presenter, commands) -> None:
        presenter.open(commands)
        presenter.move_selection(Direction.NEXT)
        presenter.replace_catalogue([Command(id="x", label="X"), Command(id="y", label="Y")])

        assert _active_id(presenter) == "x"

    def test_loading_flag(self, presenter, recorder, commands) -> None:
        presenter.open(commands)
        presenter.set_loading(True)

        assert presenter.state.is_loading is True
        assert recorder.updates[-1].is_loading is True


class TestMoveSelection:
    def test_skips_disabled(self, presenter, commands, groups) -> None:
        presenter.open(commands, groups)
        # home, settings, new-file, premium (disabled), docs
        presenter.move_selection("next")
        presenter.move_selection("next")
        assert _active_id(presenter) == "new-file"

        presenter.move_selection("next")
        assert _active_id(presenter) == "docs"

    def test_wraps_forward(self, presenter, commands, groups) -> None:
        presenter.open(commands, groups)
        presenter.move_selection(Direction.PREVIOUS)
        assert _active_id(presenter) == "docs"

        presenter.move_selection(Direction.NEXT)
        assert _active_id(presenter) == "home"

    def test_wraps_past_disabled_edges(self, presenter) -> None:
        presenter.open(
            [
                Command(id="a", label="A", disabled=True),
                Command(id="b", label="B"),
                Command(id="c", label="C"),
                Command(id="d", label="D", disabled=True),
            ]
        )
        assert _active_id(presenter) == "b"

        presenter.move_selection(Direction.PREVIOUS)
        assert _active_id(presenter) == "c"
        presenter.move_selection(Direction.NEXT)
        assert _active_id(presenter) == "b"

    def test_single_enabled_item_stays(self, presenter) -> None:
        presenter.open([Command(id="a", label="A"), Command(id="b", label="B", disabled=True)])
        presenter.move_selection(Direction.NEXT)
        assert _active_id(presenter) == "a"

    def test_no_enabled_items(self, presenter) -> None:
        presenter.open([Command(id="a", label="A", disabled=True)])
        presenter.move_selection(Direction.NEXT)
        presenter.move_selection(Direction.PREVIOUS)

        assert presenter.state.active_index is None

    def test_disabled_never_active(self, presenter, commands, groups) -> None:
        presenter.open(commands, groups)
        for _ in range(12):
            presenter.move_selection(Direction.NEXT)
            assert not presenter.state.active_command.disabled

    def test_set_active(self, presenter, commands, groups) -> None:
        presenter.open(commands, groups)

        presenter.set_active(2)
        assert _active_id(presenter) == "new-file"
        presenter.set_active(3)  # disabled
        assert _active_id(presenter) == "new-file"
        presenter.set_active(99)
        assert _active_id(presenter) == "new-file"


class TestConfirmAndCancel:
    def test_confirm_emits_selected_then_close(self, presenter, recorder, commands) -> None:
        presenter.open(commands)
        presenter.confirm()

        assert recorder.events == [("selected", "home"), ("close", None)]
        assert presenter.status is PaletteStatus.CLOSED
        assert presenter.state is None

    def test_confirm_runs_command_action(self, presenter, recorder) -> None:
        ran = []
        presenter.open([Command(id="a", label="A", action=lambda: ran.append("a"))])
        presenter.confirm()

        assert ran == ["a"]
        assert recorder.events == [("selected", "a"), ("close", None)]

    def test_close_fires_even_if_action_raises(self, presenter, recorder) -> None:
        def boom() -> None:
            raise RuntimeError("boom")

        presenter.open([Command(id="a", label="A", action=boom)])
        with pytest.raises(RuntimeError):
            presenter.confirm()

        assert recorder.events == [("close", None)]
        assert presenter.status is PaletteStatus.CLOSED

    def test_confirm_without_active_is_noop(self, presenter, recorder) -> None:
        presenter.open([Command(id="a", label="A", disabled=True)])
        presenter.confirm()

        assert recorder.events == []
        assert presenter.is_open

    def test_confirm_on_empty_results_is_noop(self, presenter, recorder, commands) -> None:
        presenter.open(commands)
        presenter.set_query("zzz")
        presenter.confirm()

        assert recorder.events == []
        assert presenter.is_open

    def test_select_by_id(self, presenter, recorder, commands) -> None:
        presenter.open(commands)
        presenter.select("docs")

        assert recorder.events == [("selected", "docs"), ("close", None)]

    def test_select_disabled_is_noop(self, presenter, recorder, commands) -> None:
        presenter.open(commands)
        presenter.select("premium")
        presenter.select("missing")

        assert recorder.events == []
        assert _active_id(presenter) == "home"

    def test_cancel_then_confirm(self, presenter, recorder, commands) -> None:
        presenter.open(commands)
        presenter.cancel()
        presenter.confirm()

        assert recorder.events == [("close", None)]
        assert presenter.status is PaletteStatus.CLOSED

    def test_close_is_host_cancel(self, presenter, recorder, commands) -> None:
        presenter.open(commands)
        presenter.close()
        presenter.close()

        assert recorder.events == [("close", None)]

    def test_calls_while_closed_are_ignored(self, presenter, recorder, commands) -> None:
        presenter.set_query("x")
        presenter.move_selection(Direction.NEXT)
        presenter.set_active(0)
        presenter.select("home")
        presenter.set_loading(True)
        presenter.replace_catalogue(commands)
        presenter.confirm()
        presenter.cancel()

        assert recorder.events == []
        assert recorder.updates == []
        assert presenter.state is None

    def test_reopen_from_close_callback(self, commands) -> None:
        presenter = PalettePresenter()
        presenter.on_close = lambda: presenter.open(commands)
        presenter.open(commands)
        presenter.cancel()

        assert presenter.is_open
        assert presenter.state.query == ""


class TestHandleKey:
    def test_navigation_keys(self, presenter, recorder, commands, groups) -> None:
        presenter.open(commands, groups)

        assert presenter.handle_key("down") is True
        assert _active_id(presenter) == "settings"
        assert presenter.handle_key("ctrl+n") is True
        assert _active_id(presenter) == "new-file"
        assert presenter.handle_key("up") is True
        assert presenter.handle_key("ctrl+p") is True
        assert _active_id(presenter) == "home"

        assert presenter.handle_key("enter") is True
        assert recorder.events == [("selected", "home"), ("close", None)]

    def test_escape_cancels(self, presenter, recorder, commands) -> None:
        presenter.open(commands)

        assert presenter.handle_key("escape") is True
        assert recorder.events == [("close", None)]

    def test_other_keys_pass_through(self, presenter, commands) -> None:
        presenter.open(commands)

        assert presenter.handle_key("a") is False
        assert presenter.handle_key("backspace") is False
        assert presenter.handle_key("tab") is False
        assert presenter.is_open

    def test_keys_pass_through_while_closed(self, presenter) -> None:
        assert presenter.handle_key("enter") is False


class TestAsyncSearch:
    @pytest.mark.asyncio
    async def test_small_catalogue_searches_inline(self, presenter, commands) -> None:
        presenter.open(commands)
        await presenter.search("doc")

        assert [c.id for c in presenter.state.visible_items] == ["docs"]
        assert presenter.state.is_searching is False

    @pytest.mark.asyncio
    async def test_large_catalogue_searches_in_thread(self, recorder) -> None:
        presenter = PalettePresenter(
            options=PaletteOptions(async_threshold=1),
            on_state_update=recorder.on_state_update,
        )
        presenter.open([Command(id="a", label="Alpha"), Command(id="b", label="Beta")])

        await presenter.search("be")

        assert [c.id for c in presenter.state.visible_items] == ["b"]
        assert presenter.state.query == "be"
        assert presenter.state.is_searching is False

    @pytest.mark.asyncio
    async def test_newer_query_wins(self) -> None:
        presenter = PalettePresenter(options=PaletteOptions(async_threshold=1))
        presenter.open([Command(id="a", label="Alpha"), Command(id="b", label="Beta")])

        first = asyncio.create_task(presenter.search("al"))
        second = asyncio.create_task(presenter.search("be"))
        await asyncio.gather(first, second)

        assert [c.id for c in presenter.state.visible_items] == ["b"]
        assert presenter.state.query == "be"

    @pytest.mark.asyncio
    async def test_sync_query_supersedes_pending_search(self) -> None:
        presenter = PalettePresenter(options=PaletteOptions(async_threshold=1))
        presenter.open([Command(id="a", label="Alpha"), Command(id="b", label="Beta")])

        pending = asyncio.create_task(presenter.search("al"))
        await asyncio.sleep(0)
        presenter.set_query("be")
        await pending

        assert [c.id for c in presenter.state.visible_items] == ["b"]

    @pytest.mark.asyncio
    async def test_confirm_waits_for_running_search(self, recorder) -> None:
        presenter = PalettePresenter(
            options=PaletteOptions(async_threshold=1),
            on_close=recorder.on_close,
            on_command_selected=recorder.on_command_selected,
        )
        presenter.open([Command(id="a", label="Alpha"), Command(id="b", label="Beta")])

        pending = asyncio.create_task(presenter.search("be"))
        await asyncio.sleep(0)
        assert presenter.state.is_searching is True

        # The visible list still belongs to the empty query
        presenter.confirm()
        assert recorder.events == []
        assert presenter.is_open

        await pending
        presenter.confirm()
        assert recorder.events == [("selected", "b"), ("close", None)]

    @pytest.mark.asyncio
    async def test_results_after_close_are_dropped(self, recorder) -> None:
        presenter = PalettePresenter(
            options=PaletteOptions(async_threshold=1),
            on_close=recorder.on_close,
        )
        presenter.open([Command(id="a", label="Alpha")])

        pending = asyncio.create_task(presenter.search("al"))
        await asyncio.sleep(0)
        presenter.cancel()
        await pending

        assert presenter.state is None
        assert recorder.events == [("close", None)]

    @pytest.mark.asyncio
    async def test_search_while_closed(self, presenter) -> None:
        await presenter.search("al")

        assert presenter.state is None
