"""Tests for the SQLite picker directories."""

import pytest

from anchor.domain.entities import EntityType, LinkableEntity, User
from anchor.infrastructure.persistence import (
    SQLiteCollaboratorDirectory,
    SQLiteLinkableEntityDirectory,
    SQLiteUserRepository,
)


@pytest.fixture
def collaborators(session_factory) -> SQLiteCollaboratorDirectory:
    return SQLiteCollaboratorDirectory(session_factory)


@pytest.fixture
def entities(session_factory) -> SQLiteLinkableEntityDirectory:
    return SQLiteLinkableEntityDirectory(session_factory)


class TestSQLiteCollaboratorDirectory:
    """SQLiteCollaboratorDirectory tests."""

    async def test_list_collaborators(
        self, collaborators: SQLiteCollaboratorDirectory, session_factory
    ) -> None:
        """Test that only the child's collaborators are listed, by name."""
        users = SQLiteUserRepository(session_factory)
        await users.save(User(id="u1", name="Zoe"))
        await users.save(User(id="u2", name="Ann"))
        await users.save(User(id="u3", name="Max"))
        await collaborators.add_collaborator("c1", "u1", role="parent")
        await collaborators.add_collaborator("c1", "u2", role="clinician")
        await collaborators.add_collaborator("c2", "u3")

        result = await collaborators.list_collaborators("c1")

        assert [user.name for user in result] == ["Ann", "Zoe"]

    async def test_add_collaborator_twice(
        self, collaborators: SQLiteCollaboratorDirectory, session_factory
    ) -> None:
        await SQLiteUserRepository(session_factory).save(User(id="u1", name="Ann"))

        await collaborators.add_collaborator("c1", "u1")
        await collaborators.add_collaborator("c1", "u1", role="parent")

        assert len(await collaborators.list_collaborators("c1")) == 1

    async def test_no_collaborators(
        self, collaborators: SQLiteCollaboratorDirectory
    ) -> None:
        assert await collaborators.list_collaborators("c1") == []


class TestSQLiteLinkableEntityDirectory:
    """SQLiteLinkableEntityDirectory tests."""

    async def test_list_by_type_and_child(
        self, entities: SQLiteLinkableEntityDirectory
    ) -> None:
        tylenol = LinkableEntity(id="e1", name="Tylenol", description="500mg")
        ibuprofen = LinkableEntity(id="e2", name="Ibuprofen")
        await entities.save(EntityType.MEDICATION, "c1", tylenol)
        await entities.save(EntityType.MEDICATION, "c1", ibuprofen)
        await entities.save(EntityType.MEDICATION, "c2", LinkableEntity(id="e3", name="X"))
        await entities.save(EntityType.ENTRY, "c1", LinkableEntity(id="n1", title="Log"))

        result = await entities.list_linkable_entities(EntityType.MEDICATION, "c1")

        assert result == [tylenol, ibuprofen]

    async def test_save_updates_existing(
        self, entities: SQLiteLinkableEntityDirectory
    ) -> None:
        """Test that saving the same entity again replaces its fields."""
        await entities.save(EntityType.ENTRY, "c1", LinkableEntity(id="n1", title="Log"))

        await entities.save(
            EntityType.ENTRY,
            "c1",
            LinkableEntity(id="n1", title="Morning log", content="Slept well"),
        )

        result = await entities.list_linkable_entities(EntityType.ENTRY, "c1")
        assert result == [
            LinkableEntity(id="n1", title="Morning log", content="Slept well")
        ]

    async def test_same_id_different_type(
        self, entities: SQLiteLinkableEntityDirectory
    ) -> None:
        await entities.save(EntityType.CONTACT, "c1", LinkableEntity(id="x", name="Dr. Lee"))
        await entities.save(EntityType.REMINDER, "c1", LinkableEntity(id="x", title="Call"))

        contacts = await entities.list_linkable_entities(EntityType.CONTACT, "c1")
        reminders = await entities.list_linkable_entities(EntityType.REMINDER, "c1")

        assert [e.label for e in contacts] == ["Dr. Lee"]
        assert [e.label for e in reminders] == ["Call"]
