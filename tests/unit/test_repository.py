from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator

import pytest

from passport_office.domain.models import PersonRecord, SearchCriteria, SortMode
from passport_office.errors import RecordStoreError, StoreClosedError
from passport_office.query.composer import PersonQuery
from passport_office.repository import PersonRepository
from passport_office.stores.memory import InMemoryRecordStore

PAGE_SIZE = 7


class TestScenario:
    """The two-Smiths-and-a-Jones store."""

    def test_search_by_last_name_with_full_sort(self, repository: PersonRepository) -> None:
        result = repository.search_all(SearchCriteria(last_name="Smith"), SortMode.FULL)

        assert [r.id for r in result] == [1, 2]
        assert [r.first_name for r in result] == ["Ann", "Bob"]

    def test_second_page_of_size_one_in_id_order(self, repository: PersonRepository) -> None:
        result = repository.get_page(1, 2, SearchCriteria(), SortMode.ID)

        assert [r.id for r in result] == [2]

    def test_get_all_default_is_id_order(self, repository: PersonRepository) -> None:
        assert [r.id for r in repository.get_all()] == [1, 2, 3]

    def test_get_all_full_sort_puts_jones_first(self, repository: PersonRepository) -> None:
        assert [r.id for r in repository.get_all(SortMode.FULL)] == [3, 1, 2]

    def test_get_by_id(self, repository: PersonRepository) -> None:
        record = repository.get_by_id(3)

        assert record is not None
        assert record.last_name == "Jones"

    def test_get_by_unknown_id_is_none(self, repository: PersonRepository) -> None:
        assert repository.get_by_id(42) is None

    def test_remove_all_then_get_all_is_empty(self, repository: PersonRepository) -> None:
        repository.remove_all()

        assert repository.get_all() == []
        assert repository.get_by_id(1) is None


class TestSearchProperties:
    @pytest.mark.parametrize("sort_mode", list(SortMode))
    def test_empty_criteria_matches_get_all(
        self, crowd_repository: PersonRepository, sort_mode: SortMode
    ) -> None:
        expected = crowd_repository.get_all(sort_mode)

        assert crowd_repository.search_all(SearchCriteria(), sort_mode) == expected
        assert crowd_repository.search_all(None, sort_mode) == expected
        assert crowd_repository.search_all(SearchCriteria(first_name="", passport_number=""), sort_mode) == expected

    @pytest.mark.parametrize(
        "field_name, prefix",
        [("last_name", "Smi"), ("first_name", "Bo"), ("passport_series", "ab"), ("passport_number", "2")],
    )
    def test_single_field_search_is_exact(
        self,
        crowd_repository: PersonRepository,
        crowd: list[PersonRecord],
        field_name: str,
        prefix: str,
    ) -> None:
        result = crowd_repository.search_all(SearchCriteria(**{field_name: prefix}))

        expected_ids = sorted(r.id for r in crowd if getattr(r, field_name).startswith(prefix))
        assert [r.id for r in result] == expected_ids

    def test_birth_date_search_ignores_time_of_day(
        self, crowd_repository: PersonRepository, crowd: list[PersonRecord]
    ) -> None:
        target = date(1980, 1, 3)

        result = crowd_repository.search_all(SearchCriteria(birth_date=target))

        expected_ids = sorted(r.id for r in crowd if r.birth_date.date() == target)
        assert [r.id for r in result] == expected_ids
        assert any(r.birth_date.time() != datetime.min.time() for r in result)


class TestPaging:
    @pytest.mark.parametrize("sort_mode", list(SortMode))
    def test_every_page_is_the_matching_window(
        self, crowd_repository: PersonRepository, sort_mode: SortMode
    ) -> None:
        criteria = SearchCriteria(last_name="S")
        everything = crowd_repository.search_all(criteria, sort_mode)
        last_page = -(-len(everything) // PAGE_SIZE)

        pages = [
            crowd_repository.get_page(PAGE_SIZE, number, criteria, sort_mode)
            for number in range(1, last_page + 1)
        ]

        for number, page in enumerate(pages, start=1):
            assert len(page) <= PAGE_SIZE
            assert page == everything[(number - 1) * PAGE_SIZE : number * PAGE_SIZE]
        assert [r for page in pages for r in page] == everything

    def test_page_past_the_end_is_empty(self, crowd_repository: PersonRepository) -> None:
        assert crowd_repository.get_page(PAGE_SIZE, 100, SearchCriteria()) == []

    @pytest.mark.parametrize("page_size, page_number", [(0, 1), (5, 0), (-1, -1)])
    def test_invalid_paging_returns_search_all(
        self, crowd_repository: PersonRepository, page_size: int, page_number: int
    ) -> None:
        criteria = SearchCriteria(first_name="A")

        result = crowd_repository.get_page(page_size, page_number, criteria, SortMode.FULL)

        assert result == crowd_repository.search_all(criteria, SortMode.FULL)


class TestWrites:
    def test_save_assigns_ids_and_persists(self, person_factory) -> None:
        repo = PersonRepository(InMemoryRecordStore())
        repo.add(person_factory(last="Orlov", first="Ivan"))
        repo.add(person_factory(last="Petrov", first="Oleg"))

        assert repo.get_all() == []

        saved = repo.save()

        assert [r.id for r in saved] == [1, 2]
        assert repo.get_all() == saved
        assert repo.get_by_id(2).last_name == "Petrov"
        assert repo.save() == []

    def test_ids_continue_after_existing_records(
        self, repository: PersonRepository, person_factory
    ) -> None:
        repository.add(person_factory(last="Brown"))

        (saved,) = repository.save()

        assert saved.id == 4

    def test_failed_save_keeps_pending_records(
        self, repository: PersonRepository, person_factory
    ) -> None:
        repository.add(person_factory(1, last="Duplicate"))

        with pytest.raises(RecordStoreError):
            repository.save()

        assert [r.id for r in repository.get_all()] == [1, 2, 3]
        assert repository.get_by_id(1).last_name == "Smith"
        assert repository._pending


class _FaultySession:
    def fetch(self, query: PersonQuery) -> list[PersonRecord]:
        raise RecordStoreError("disk on fire")

    def find_by_id(self, record_id: int):
        raise RecordStoreError("disk on fire")

    def insert(self, records):
        raise RecordStoreError("disk on fire")

    def delete_all(self) -> int:
        raise RecordStoreError("disk on fire")

    def commit(self) -> None:
        raise RecordStoreError("disk on fire")


class _FaultyStore:
    name = "faulty"
    description = "test store whose every operation fails"

    def __init__(self) -> None:
        self.opened = 0
        self.released = 0
        self.closed = False

    @contextmanager
    def session(self) -> Iterator[_FaultySession]:
        self.opened += 1
        try:
            yield _FaultySession()
        finally:
            self.released += 1

    def close(self) -> None:
        self.closed = True


class TestFailures:
    @pytest.mark.parametrize(
        "operation",
        [
            lambda repo: repo.get_all(),
            lambda repo: repo.search_all(SearchCriteria(last_name="S"), SortMode.FULL),
            lambda repo: repo.get_page(10, 1, None),
            lambda repo: repo.get_by_id(1),
            lambda repo: repo.remove_all(),
            lambda repo: repo.save(),
        ],
    )
    def test_store_failure_propagates_and_session_is_released(self, operation) -> None:
        store = _FaultyStore()
        repo = PersonRepository(store)

        with pytest.raises(RecordStoreError, match="disk on fire"):
            operation(repo)

        assert store.opened == 1
        assert store.released == 1

    def test_context_manager_closes_store(self) -> None:
        store = _FaultyStore()

        with PersonRepository(store):
            pass

        assert store.closed

    def test_closed_memory_store_rejects_sessions(self, repository: PersonRepository) -> None:
        repository.close()

        with pytest.raises(StoreClosedError):
            repository.get_all()

    def test_closing_memory_store_keeps_its_records(self, memory_store: InMemoryRecordStore) -> None:
        with PersonRepository(memory_store):
            pass

        assert len(memory_store) == 3
        with pytest.raises(StoreClosedError):
            with memory_store.session():
                pass
