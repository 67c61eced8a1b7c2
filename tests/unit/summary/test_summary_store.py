"""SummaryService behaviour over stored data: search results, page concatenation, sharing."""

from uuid import UUID

import pytest

from synopsis.core.modules.summary import service as summary_service_module
from synopsis.core.modules.summary.models import SummaryUpdate
from synopsis.core.modules.summary.service import SummaryService
from synopsis.core.pagination import PageResult
from synopsis.errors import ConflictError, NotFoundError

OWNER_ID = UUID("87654321-4321-8765-4321-876543218765")

RECORDS = [
    ("apple pie recipe", "bake it", ["food"]),
    ("meeting notes", "discuss Pineapple budget", ["work"]),
    ("grocery list", "milk, eggs", ["APPLE", "shopping"]),
    ("c++ templates", "generic code", ["cpp"]),
    ("trip plan", "pack bags", []),
    ("ideas", "App launch", ["startup"]),
    ("bread", "flour and water", ["food"]),
]


@pytest.fixture
async def service(memory_database):
    service = SummaryService(memory_database)
    await service.on_start()
    return service


@pytest.fixture
async def stored(service):
    return [await service.create_summary(OWNER_ID, note, summary, tags) for note, summary, tags in RECORDS]


def _contains(record, text: str) -> bool:
    needle = text.lower()
    fields = [record.note, record.summary, *record.tags]
    return any(needle in field.lower() for field in fields)


class TestSearch:
    """Search returns exactly the records containing the text in note, summary or a tag."""

    @pytest.mark.parametrize("q", ["apple", "APPLE", "app", "c++", "food", "milk, eggs", "nothing-matches"])
    async def test_matches_exactly_the_containing_records(self, service, stored, q):
        result = await service.list_summaries(q=q)

        assert {s.id for s in result} == {s.id for s in stored if _contains(s, q)}

    async def test_tag_match_counts(self, service, stored):
        result = await service.list_summaries(q="shopping")
        assert [s.note for s in result] == ["grocery list"]

    async def test_blank_query_returns_everything(self, service, stored):
        assert len(await service.list_summaries(q="   ")) == len(RECORDS)


class TestPagination:
    """Concatenating every page gives the same sequence as the unpaginated list."""

    @pytest.mark.parametrize("sort", [None, "createdAt", "-note", "starred", "-starred"])
    @pytest.mark.parametrize("limit", [1, 2, 3, 7, 10])
    async def test_pages_concatenate_to_full_list(self, service, stored, sort, limit):
        await service.set_starred(stored[1].id, True)
        await service.set_starred(stored[4].id, True)

        full = await service.list_summaries(sort=sort)
        first = await service.list_summaries(page=1, limit=limit, sort=sort)
        assert isinstance(first, PageResult)

        pages = [first] + [
            await service.list_summaries(page=n, limit=limit, sort=sort) for n in range(2, first.pages + 1)
        ]

        assert [s.id for page in pages for s in page.items] == [s.id for s in full]
        assert all(page.total == len(RECORDS) for page in pages)

    async def test_page_past_the_end_is_empty(self, service, stored):
        result = await service.list_summaries(page=5, limit=3)

        assert result.items == []
        assert result.pages == 3
        assert result.total == len(RECORDS)

    async def test_paginated_search(self, service, stored):
        result = await service.list_summaries(q="food", page=1, limit=1)

        assert result.total == 2
        assert result.pages == 2
        assert len(result.items) == 1

    async def test_default_order_is_newest_first(self, service, stored):
        result = await service.list_summaries()
        created = [s.created_at for s in result]
        assert created == sorted(created, reverse=True)


class TestStoredState:
    """Updates, stars and deletes as seen by later reads."""

    async def test_toggle_flips_stored_value(self, service, stored):
        target = stored[0].id

        assert (await service.set_starred(target)).starred is True
        assert (await service.set_starred(target)).starred is False
        assert (await service.get_summary(target)).starred is False

    async def test_partial_update_keeps_other_fields(self, service, stored):
        updated = await service.update_summary(stored[0].id, SummaryUpdate(summary="short"))

        assert updated.summary == "short"
        assert updated.note == stored[0].note
        assert updated.tags == stored[0].tags
        assert updated.created_at == stored[0].created_at

    async def test_deleted_summary_is_gone(self, service, stored):
        await service.delete_summary(stored[0].id)

        with pytest.raises(NotFoundError):
            await service.get_summary(stored[0].id)
        with pytest.raises(NotFoundError):
            await service.delete_summary(stored[0].id)
        assert len(await service.list_summaries()) == len(RECORDS) - 1


class TestSharing:
    """Slug assignment and public lookup over stored records."""

    async def test_new_slug_resolves_to_the_summary(self, service, stored):
        slug = await service.share_summary(stored[2].id)

        shared = await service.get_shared_summary(slug)

        assert shared.note == "grocery list"
        assert shared.tags == ["APPLE", "shopping"]

    async def test_resharing_retires_the_old_slug(self, service, stored):
        first = await service.share_summary(stored[0].id)
        second = await service.share_summary(stored[0].id)

        assert first != second
        with pytest.raises(NotFoundError):
            await service.get_shared_summary(first)
        assert (await service.get_shared_summary(second)).note == stored[0].note
        assert (await service.get_summary(stored[0].id)).slug == second

    async def test_colliding_slug_leaves_both_records_unchanged(self, service, stored, monkeypatch):
        monkeypatch.setattr(summary_service_module, "generate_slug", lambda: "fixedSlug1")
        await service.share_summary(stored[0].id)

        with pytest.raises(ConflictError):
            await service.share_summary(stored[1].id)

        assert (await service.get_shared_summary("fixedSlug1")).note == stored[0].note
        assert (await service.get_summary(stored[1].id)).slug is None

    async def test_unshared_summaries_do_not_collide(self, service, stored):
        assert all(s.slug is None for s in await service.list_summaries())
