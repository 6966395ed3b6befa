import pytest
from sqlalchemy import select

from app.core.errors import BulkTooLargeError, EmptyIdSetError, InvalidStatusError, ValidationError
from app.models import FormSubmission, Review
from app.services.abstract_validation import validate_abstract
from app.services.taxonomy import default_taxonomy
from tests.factories import abstract_payload, review_payload


async def _seed(store, count):
    submission = validate_abstract(abstract_payload(), default_taxonomy()).submission
    return [(await store.create(submission, abstract_payload())).id for _ in range(count)]


class TestBulkSetStatus:
    def test_missing_ids_are_not_counted(self, run_services):
        async def scenario(store, reviews, bulk):
            ids = await _seed(store, 3)
            result = await bulk.bulk_set_status(ids + [9001, 9002], "accepted", admin_notes="Batch accept")
            return ids, result, [await store.get(i) for i in ids]

        ids, result, abstracts = run_services(scenario)
        assert result.count == 3
        assert result.ids == ids
        assert result.requested == 5
        assert result.partial
        assert {a.status for a in abstracts} == {"accepted"}
        assert {a.admin_notes for a in abstracts} == {"Batch accept"}

    def test_shadow_rows_follow(self, run_services):
        async def scenario(store, reviews, bulk):
            ids = await _seed(store, 2)
            await bulk.bulk_set_status(ids, "rejected", review_comments="Outside conference scope")
            async with store.session_factory() as session:
                return (await session.scalars(select(FormSubmission))).all()

        shadows = run_services(scenario)
        assert {s.status for s in shadows} == {"rejected"}
        assert {s.review_comments for s in shadows} == {"Outside conference scope"}

    def test_duplicate_ids_collapse(self, run_services):
        async def scenario(store, reviews, bulk):
            ids = await _seed(store, 1)
            return await bulk.bulk_set_status(ids * 3, "approved")

        result = run_services(scenario)
        assert result.count == 1
        assert result.requested == 1
        assert not result.partial

    def test_non_canonical_status(self, run_services):
        async def scenario(store, reviews, bulk):
            await bulk.bulk_set_status([1], "pending")

        with pytest.raises(InvalidStatusError):
            run_services(scenario)


class TestBulkDelete:
    def test_deletes_abstracts_and_their_reviews(self, run_services):
        async def scenario(store, reviews, bulk):
            ids = await _seed(store, 3)
            await reviews.submit_review(ids[0], review_payload())
            result = await bulk.bulk_delete(ids[:2] + [555])
            async with store.session_factory() as session:
                left_reviews = (await session.scalars(select(Review))).all()
            listing = await store.list_abstracts()
            return ids, result, left_reviews, listing

        ids, result, left_reviews, listing = run_services(scenario)
        assert result.count == 2
        assert result.ids == ids[:2]
        assert left_reviews == []
        assert [a.id for a in listing.items] == [ids[2]]


class TestIdChecks:
    @pytest.mark.parametrize("ids", [None, []])
    def test_empty(self, run_services, ids):
        async def scenario(store, reviews, bulk):
            await bulk.bulk_delete(ids)

        with pytest.raises(EmptyIdSetError):
            run_services(scenario)

    def test_too_many(self, run_services):
        async def scenario(store, reviews, bulk):
            await bulk.bulk_set_status(list(range(1, 12)), "accepted")

        with pytest.raises(BulkTooLargeError):
            run_services(scenario, max_ids=10)

    @pytest.mark.parametrize("ids", [["1"], [True], [1.5]])
    def test_non_integer_ids(self, run_services, ids):
        async def scenario(store, reviews, bulk):
            await bulk.bulk_delete(ids)

        with pytest.raises(ValidationError, match="IDs must be integers"):
            run_services(scenario)
