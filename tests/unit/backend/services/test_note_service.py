"""
Unit Tests for Note Service.

Business rules are tested with the repository mocked out; hierarchy
behaviour that depends on real queries runs against the in-memory
database from the root conftest.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from modules.backend.core.config_schema import NotesSchema
from modules.backend.core.exceptions import (
    CycleError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from modules.backend.schemas.note import NoteCreate, NoteUpdate
from modules.backend.services.note import NoteService


class TestNoteServiceCreate:
    """Tests for note creation."""

    @pytest.fixture
    def service(self, mock_db_session, notes_config):
        return NoteService(mock_db_session, notes_config)

    @pytest.mark.asyncio
    async def test_create_note_passes_fields_to_repository(self, service):
        mock_note = MagicMock(id=7)

        with patch.object(service.repo, "create", return_value=mock_note) as mock_create:
            result = await service.create_note(
                NoteCreate(name="Algebra", parent_id=3, content="<p>x</p>")
            )

        mock_create.assert_called_once_with(
            name="Algebra", parent_id=3, content="<p>x</p>"
        )
        assert result.id == 7

    @pytest.mark.asyncio
    async def test_create_note_uses_default_content(self, service):
        with patch.object(service.repo, "create", return_value=MagicMock(id=1)) as mock_create:
            await service.create_note(NoteCreate(name="Untitled"))

        assert mock_create.call_args.kwargs["content"] == "This is a new note"
        assert mock_create.call_args.kwargs["parent_id"] is None

    @pytest.mark.asyncio
    async def test_create_note_keeps_explicit_empty_content(self, service):
        with patch.object(service.repo, "create", return_value=MagicMock(id=1)) as mock_create:
            await service.create_note(NoteCreate(name="Blank", content=""))

        assert mock_create.call_args.kwargs["content"] == ""

    @pytest.mark.asyncio
    async def test_create_note_rejects_blank_name(self, service):
        with patch.object(service.repo, "create") as mock_create:
            with pytest.raises(ValidationError) as exc_info:
                await service.create_note(NoteCreate(name="   "))

        assert exc_info.value.details == {"name": "required"}
        mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_note_enforces_configured_name_length(self, mock_db_session):
        service = NoteService(
            mock_db_session,
            NotesSchema(default_content="", max_name_length=5),
        )

        with pytest.raises(ValidationError, match="name too long"):
            await service.create_note(NoteCreate(name="Too long a name"))

    @pytest.mark.asyncio
    async def test_create_note_wraps_database_errors(self, service):
        error = OperationalError("INSERT", {}, Exception("disk I/O error"))

        with patch.object(service.repo, "create", side_effect=error):
            with pytest.raises(StoreError):
                await service.create_note(NoteCreate(name="Algebra"))


class TestNoteServiceUpdate:

    @pytest.fixture
    def service(self, mock_db_session, notes_config):
        return NoteService(mock_db_session, notes_config)

    @pytest.mark.asyncio
    async def test_update_note_replaces_name_and_content(self, service):
        updated = MagicMock(id=2, name="Renamed", content="<p>new</p>")

        with patch.object(service.repo, "update", return_value=updated) as mock_update:
            result = await service.update_note(
                2, NoteUpdate(name="Renamed", content="<p>new</p>")
            )

        mock_update.assert_called_once_with(2, name="Renamed", content="<p>new</p>")
        assert result is updated

    @pytest.mark.asyncio
    async def test_update_missing_note_raises_not_found(self, service):
        with patch.object(service.repo, "update", side_effect=NotFoundError("Note not found")):
            with pytest.raises(NotFoundError):
                await service.update_note(99, NoteUpdate(name="A", content=""))


class TestNoteServiceMoveWithMocks:
    """Cycle detection walks parent ids through the repository."""

    @pytest.fixture
    def service(self, mock_db_session, notes_config):
        service = NoteService(mock_db_session, notes_config)
        service.repo = MagicMock()
        service.repo.get_by_id = AsyncMock(return_value=MagicMock(id=1))
        service.repo.set_parent = AsyncMock(return_value=MagicMock(id=1))
        return service

    @pytest.mark.asyncio
    async def test_move_onto_self_raises_cycle_error(self, service):
        service.repo.get_parent_id = AsyncMock()

        with pytest.raises(CycleError):
            await service.move_note(1, 1)

        service.repo.set_parent.assert_not_called()

    @pytest.mark.asyncio
    async def test_move_under_descendant_raises_cycle_error(self, service):
        # 3 -> 2 -> 1
        parents = {3: 2, 2: 1}
        service.repo.get_parent_id = AsyncMock(side_effect=parents.get)

        with pytest.raises(CycleError) as exc_info:
            await service.move_note(1, 3)

        assert exc_info.value.code == "RES_CYCLE"
        service.repo.set_parent.assert_not_called()

    @pytest.mark.asyncio
    async def test_move_to_root_skips_walk(self, service):
        service.repo.get_parent_id = AsyncMock()

        await service.move_note(1, None)

        service.repo.get_parent_id.assert_not_called()
        service.repo.set_parent.assert_awaited_once_with(1, None)

    @pytest.mark.asyncio
    async def test_move_terminates_on_existing_cycle_above_target(self, service):
        # 5 <-> 6 already cyclic and unrelated to note 1
        parents = {5: 6, 6: 5}
        service.repo.get_parent_id = AsyncMock(side_effect=parents.get)

        await service.move_note(1, 5)

        service.repo.set_parent.assert_awaited_once_with(1, 5)

    @pytest.mark.asyncio
    async def test_move_missing_note_raises_not_found(self, service):
        service.repo.get_by_id = AsyncMock(side_effect=NotFoundError("Note not found"))

        with pytest.raises(NotFoundError):
            await service.move_note(42, None)


class TestNoteServiceWithDatabase:
    """Hierarchy queries against a real session."""

    @pytest.fixture
    def service(self, db_session, notes_config):
        return NoteService(db_session, notes_config)

    async def _tree(self, service):
        root = await service.create_note(NoteCreate(name="Root"))
        child = await service.create_note(NoteCreate(name="Child", parent_id=root.id))
        grandchild = await service.create_note(
            NoteCreate(name="Grandchild", parent_id=child.id)
        )
        other = await service.create_note(NoteCreate(name="Other"))
        return root, child, grandchild, other

    @pytest.mark.asyncio
    async def test_get_children_of_root_level(self, service):
        root, _, _, other = await self._tree(service)

        roots = await service.get_children(None)

        assert {n.id for n in roots} == {root.id, other.id}

    @pytest.mark.asyncio
    async def test_get_children_of_note(self, service):
        root, child, _, _ = await self._tree(service)

        children = await service.get_children(root.id)

        assert [n.id for n in children] == [child.id]

    @pytest.mark.asyncio
    async def test_get_children_of_unknown_parent_is_empty(self, service):
        await self._tree(service)

        assert await service.get_children(9999) == []

    @pytest.mark.asyncio
    async def test_search_matches_substring(self, service):
        await self._tree(service)

        found = await service.search_notes("hild")

        assert {n.name for n in found} == {"Child", "Grandchild"}

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, service):
        await service.create_note(NoteCreate(name="100% done"))
        await service.create_note(NoteCreate(name="1000 items"))

        found = await service.search_notes("0%")

        assert [n.name for n in found] == ["100% done"]

    @pytest.mark.asyncio
    async def test_delete_removes_whole_subtree(self, service):
        root, child, grandchild, other = await self._tree(service)

        deleted = await service.delete_note(root.id)

        assert deleted.id == root.id
        assert deleted.name == "Root"
        remaining = await service.list_notes()
        assert [n.id for n in remaining] == [other.id]

    @pytest.mark.asyncio
    async def test_delete_leaf_keeps_ancestors(self, service):
        root, child, grandchild, _ = await self._tree(service)

        await service.delete_note(grandchild.id)

        ids = {n.id for n in await service.list_notes()}
        assert root.id in ids
        assert child.id in ids
        assert grandchild.id not in ids

    @pytest.mark.asyncio
    async def test_delete_missing_note_raises_not_found(self, service):
        with pytest.raises(NotFoundError):
            await service.delete_note(12345)

    @pytest.mark.asyncio
    async def test_move_reparents_subtree(self, service):
        root, child, grandchild, other = await self._tree(service)

        moved = await service.move_note(child.id, other.id)

        assert moved.parent_id == other.id
        assert [n.id for n in await service.get_children(other.id)] == [child.id]
        assert (await service.get_note(grandchild.id)).parent_id == child.id

    @pytest.mark.asyncio
    async def test_move_under_own_grandchild_is_rejected(self, service):
        root, _, grandchild, _ = await self._tree(service)

        with pytest.raises(CycleError):
            await service.move_note(root.id, grandchild.id)

        assert (await service.get_note(root.id)).parent_id is None

    @pytest.mark.asyncio
    async def test_move_under_missing_parent_makes_orphan(self, service):
        _, child, _, _ = await self._tree(service)

        moved = await service.move_note(child.id, 9999)

        assert moved.parent_id == 9999

    @pytest.mark.asyncio
    async def test_get_path_is_root_first(self, service):
        root, child, grandchild, _ = await self._tree(service)

        path = await service.get_path(grandchild.id)

        assert [n.id for n in path] == [root.id, child.id, grandchild.id]

    @pytest.mark.asyncio
    async def test_get_path_stops_at_missing_parent(self, service):
        orphan = await service.create_note(NoteCreate(name="Orphan", parent_id=777))

        path = await service.get_path(orphan.id)

        assert [n.id for n in path] == [orphan.id]
