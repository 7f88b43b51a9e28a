from __future__ import annotations

import asyncio

from fakes import HOME, FakeBackend, wait_until
from notedesk.actions import Action
from notedesk.links import parse_cross_references
from notedesk.workspace import PromptKind, Workspace

DRAFT = f"{HOME}/draft.md"
NOTES = f"{HOME}/notes.md"


def test_dirty_check_blocks_switch_until_confirmed(workspace: Workspace) -> None:
    async def scenario() -> None:
        await workspace.start()
        assert await workspace.open_file(DRAFT) is True
        workspace.update_content("# Draft\nedited\n")

        assert await workspace.open_file(NOTES) is False
        assert workspace.conflict is not None
        assert workspace.conflict.path == DRAFT
        assert workspace.conflict.requested == NOTES
        assert workspace.editor.file_path == DRAFT

        assert await workspace.open_file(NOTES, discard_changes=True) is True
        assert workspace.conflict is None
        assert workspace.editor.file_path == NOTES
        assert workspace.editor.is_dirty is False

    asyncio.run(scenario())


def test_save_then_switch_needs_no_confirmation(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()
        await workspace.open_file(DRAFT)
        workspace.update_content("saved body")

        result = await workspace.save()

        assert result.ok is True
        assert backend.files[DRAFT] == "saved body"
        assert await workspace.open_file(NOTES) is True

    asyncio.run(scenario())


def test_back_and_forward_reopen_without_pushing(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()
        await workspace.open_file(DRAFT)
        await workspace.open_file(NOTES)

        assert await workspace.go_back() == DRAFT
        assert workspace.editor.file_path == DRAFT
        assert await workspace.go_forward() == NOTES
        assert workspace.history.entries == (DRAFT, NOTES)
        assert backend.count("read_file") == 4

        workspace.update_content("unsaved")
        assert await workspace.go_back() is None
        assert workspace.history.cursor == 1
        assert await workspace.go_back(discard_changes=True) == DRAFT

    asyncio.run(scenario())


def test_read_failure_opens_session_without_content(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()
        backend.failures["read_file"] = "File is not valid UTF-8"

        assert await workspace.open_file(DRAFT) is False
        assert workspace.error == "File is not valid UTF-8"
        assert workspace.editor.file_path == DRAFT
        assert workspace.editor.content is None
        assert workspace.history.entries == ()

        result = await workspace.save()
        assert result.ok is False
        assert workspace.editor.error == "No content to save"

    asyncio.run(scenario())


def test_slow_read_never_overwrites_newer_open(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()
        gate = backend.gate("read_file", DRAFT)

        slow = asyncio.create_task(workspace.open_file(DRAFT))
        await wait_until(lambda: backend.count("read_file") == 1)
        assert await workspace.open_file(NOTES) is True
        gate.set()

        assert await slow is False
        assert workspace.editor.file_path == NOTES
        assert workspace.history.entries == (NOTES,)

    asyncio.run(scenario())


def test_edit_during_slow_read_blocks_the_switch(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()
        assert await workspace.open_file(DRAFT) is True
        gate = backend.gate("read_file", NOTES)

        switching = asyncio.create_task(workspace.open_file(NOTES))
        await wait_until(lambda: backend.count("read_file") == 2)
        workspace.update_content("unsaved typing")
        gate.set()

        assert await switching is False
        assert workspace.conflict is not None
        assert workspace.conflict.path == DRAFT
        assert workspace.conflict.requested == NOTES
        assert workspace.editor.file_path == DRAFT
        assert workspace.editor.content == "unsaved typing"
        assert workspace.history.entries == (DRAFT,)

        assert await workspace.open_file(NOTES, discard_changes=True) is True
        assert workspace.editor.file_path == NOTES

    asyncio.run(scenario())


def test_edit_during_failing_read_keeps_the_session(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()
        await workspace.open_file(DRAFT)
        gate = backend.gate("read_file", NOTES)
        backend.failures["read_file"] = "File is not valid UTF-8"

        switching = asyncio.create_task(workspace.open_file(NOTES))
        await wait_until(lambda: backend.count("read_file") == 2)
        workspace.update_content("unsaved typing")
        gate.set()

        assert await switching is False
        assert workspace.conflict is not None
        assert workspace.conflict.path == DRAFT
        assert workspace.editor.file_path == DRAFT
        assert workspace.editor.content == "unsaved typing"
        assert workspace.error is None

    asyncio.run(scenario())


def test_edit_during_history_read_is_not_discarded(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()
        await workspace.open_file(DRAFT)
        await workspace.open_file(NOTES)
        gate = backend.gate("read_file", DRAFT)

        going_back = asyncio.create_task(workspace.go_back())
        await wait_until(lambda: backend.count("read_file") == 3)
        workspace.update_content("typed while going back")
        gate.set()

        assert await going_back is None
        assert workspace.conflict is not None
        assert workspace.conflict.path == NOTES
        assert workspace.editor.file_path == NOTES
        assert workspace.editor.content == "typed while going back"
        assert workspace.history.cursor == 1

    asyncio.run(scenario())


def test_edit_during_slow_listing_keeps_the_open_file(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()
        await workspace.startup.join()
        await workspace.open_file(DRAFT)
        images = f"{HOME}/img.png"
        gate = backend.gate("list_directory", images)

        loading = asyncio.create_task(workspace.load_directory(images))
        await wait_until(lambda: (images,) in backend.arguments("list_directory"))
        workspace.update_content("unsaved typing")
        gate.set()

        assert await loading is False
        await workspace.startup.join()
        assert workspace.conflict is not None
        assert workspace.conflict.path == DRAFT
        assert workspace.conflict.requested == images
        assert workspace.editor.file_path == DRAFT
        assert workspace.editor.content == "unsaved typing"
        assert workspace.listing.current_directory == images
        assert backend.arguments("index_directory")[-1] == (images,)

        assert await workspace.load_directory(images, discard_changes=True) is True
        assert workspace.editor.session is None

    asyncio.run(scenario())


def test_directory_navigation_closes_file(workspace: Workspace, backend: FakeBackend) -> None:
    async def scenario() -> None:
        await workspace.start()
        await workspace.startup.join()
        await workspace.open_file(DRAFT)

        sub = workspace.listing.find(f"{HOME}/img.png")
        assert sub is not None
        assert await workspace.select_entry(sub) is True
        await workspace.startup.join()

        assert workspace.listing.current_directory == f"{HOME}/img.png"
        assert workspace.editor.session is None
        assert backend.arguments("index_directory")[-1] == (f"{HOME}/img.png",)

        assert await workspace.navigate_to_parent() is True
        assert workspace.listing.current_directory == HOME

    asyncio.run(scenario())


def test_failed_listing_keeps_previous_directory(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()

        assert await workspace.load_directory("/missing") is False

        assert workspace.listing.current_directory == HOME
        assert workspace.listing.error == "Directory not found: /missing"
        assert len(workspace.listing.entries) == 3

    asyncio.run(scenario())


def test_new_file_action_prompts_and_creates(workspace: Workspace, backend: FakeBackend) -> None:
    async def scenario() -> None:
        await workspace.start()

        assert workspace.bus.dispatch(Action.NEW_FILE) == 1
        assert workspace.pending_prompt is not None
        assert workspace.pending_prompt.kind is PromptKind.FILE

        assert await workspace.submit_prompt("../escape.md") is None
        assert workspace.error == "Name contains a path separator."
        assert workspace.pending_prompt is not None

        created = await workspace.submit_prompt("idea.md")

        assert created == f"{HOME}/idea.md"
        assert workspace.pending_prompt is None
        assert workspace.listing.find(created) is not None
        assert workspace.editor.file_path == created

    asyncio.run(scenario())


def test_new_folder_without_directory_is_an_error(workspace: Workspace) -> None:
    workspace.bus.dispatch(Action.NEW_FOLDER)

    assert workspace.pending_prompt is None
    assert workspace.error == "No directory selected"


def test_sidebar_close_and_about_actions(workspace: Workspace) -> None:
    async def scenario() -> None:
        await workspace.start()
        await workspace.open_file(DRAFT)

        workspace.bus.dispatch(Action.TOGGLE_SIDEBAR)
        workspace.bus.dispatch("about")
        assert workspace.sidebar_visible is False
        assert workspace.about_visible is True

        workspace.update_content("dirty")
        workspace.bus.dispatch(Action.CLOSE_FILE)
        assert workspace.editor.session is not None
        assert workspace.conflict is not None

        assert workspace.close_file(discard_changes=True) is True
        assert workspace.editor.session is None

    asyncio.run(scenario())


def test_command_palette_save_and_follow_link(
    workspace: Workspace, backend: FakeBackend
) -> None:
    async def scenario() -> None:
        await workspace.start()
        await workspace.open_file(NOTES)
        workspace.update_content("See [[draft]] and [[missing|later]].\nmore\n")

        workspace.open_command_palette()
        workspace.search.palette.type("save")
        await workspace.search.palette.select()
        assert backend.files[NOTES].endswith("more\n")
        assert workspace.editor.is_dirty is False

        draft_link, missing_link = parse_cross_references(workspace.editor.content or "")
        assert await workspace.follow_link(missing_link) is None
        assert workspace.error is None
        assert await workspace.follow_link(draft_link) == DRAFT
        assert workspace.editor.file_path == DRAFT
        assert backend.arguments("resolve_cross_reference")[0] == ("missing", HOME)

    asyncio.run(scenario())
