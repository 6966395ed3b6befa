import pytest
from sqlalchemy import func, select

from app.core.errors import AbstractNotFoundError, InvalidStatusError
from app.models import FormSubmission, Review
from app.services.abstract_validation import validate_abstract
from app.services.submission_store import AbstractFilters, normalize_paging, substring_pattern
from app.services.taxonomy import default_taxonomy
from tests.factories import abstract_payload, review_payload


def _submission(**overrides):
    report = validate_abstract(abstract_payload(**overrides), default_taxonomy())
    assert report.ok, report.to_dict()
    return report.submission


class TestCreateAndGet:
    def test_round_trip(self, run_services):
        async def scenario(store, reviews, bulk):
            created = await store.create(_submission(), abstract_payload())
            return created, await store.get(created.id)

        created, fetched = run_services(scenario)
        assert fetched.status == "submitted"
        for attr in ("title", "abstract", "authors", "track", "subcategory", "format"):
            assert getattr(fetched, attr) == getattr(created, attr)
        assert fetched.updated_at == fetched.created_at
        assert fetched.reviews == []

    def test_shadow_row_written_with_the_abstract(self, run_services):
        async def scenario(store, reviews, bulk):
            created = await store.create(_submission(), abstract_payload())
            async with store.session_factory() as session:
                return created, (await session.scalars(select(FormSubmission))).all()

        created, shadows = run_services(scenario)
        assert len(shadows) == 1
        assert shadows[0].form_type == "abstract"
        assert shadows[0].entity_id == created.id
        assert shadows[0].submission_data["title"] == created.title

    def test_get_missing(self, run_services):
        async def scenario(store, reviews, bulk):
            await store.get(999)

        with pytest.raises(AbstractNotFoundError):
            run_services(scenario)


class TestUpdates:
    def test_full_replace(self, run_services):
        async def scenario(store, reviews, bulk):
            created = await store.create(_submission(), abstract_payload())
            return await store.update(created.id, _submission(title="A revised title", format="poster"))

        updated = run_services(scenario)
        assert updated.title == "A revised title"
        assert updated.format == "poster"
        assert updated.status == "submitted"

    def test_update_missing(self, run_services):
        async def scenario(store, reviews, bulk):
            await store.update(404, _submission())

        with pytest.raises(AbstractNotFoundError):
            run_services(scenario)

    def test_set_status_keeps_notes_unless_given(self, run_services):
        async def scenario(store, reviews, bulk):
            created = await store.create(_submission(), abstract_payload())
            await store.set_status(created.id, "revision_required", admin_notes="Shorten the methods")
            return await store.set_status(created.id, "accepted")

        abstract = run_services(scenario)
        assert abstract.status == "accepted"
        assert abstract.admin_notes == "Shorten the methods"

    @pytest.mark.parametrize("status", ["pending", "", None, "ACCEPTED"])
    def test_set_status_rejects_non_canonical(self, run_services, status):
        async def scenario(store, reviews, bulk):
            created = await store.create(_submission(), abstract_payload())
            await store.set_status(created.id, status)

        with pytest.raises(InvalidStatusError):
            run_services(scenario)

    def test_status_change_is_mirrored_to_shadow_row(self, run_services):
        async def scenario(store, reviews, bulk):
            created = await store.create(_submission(), abstract_payload())
            await store.set_status(created.id, "rejected", reviewer_comments="Out of scope")
            async with store.session_factory() as session:
                return await session.scalar(select(FormSubmission))

        shadow = run_services(scenario)
        assert shadow.status == "rejected"
        assert shadow.review_comments == "Out of scope"
        assert shadow.reviewed_at is not None


class TestDelete:
    def test_delete_cascades_reviews_and_keeps_shadow(self, run_services):
        async def scenario(store, reviews, bulk):
            created = await store.create(_submission(), abstract_payload())
            await reviews.submit_review(created.id, review_payload())
            await store.delete(created.id)
            async with store.session_factory() as session:
                review_count = await session.scalar(select(func.count(Review.id)))
                shadow_count = await session.scalar(select(func.count(FormSubmission.id)))
            return created.id, review_count, shadow_count

        abstract_id, review_count, shadow_count = run_services(scenario)
        assert review_count == 0
        assert shadow_count == 1

    def test_delete_missing(self, run_services):
        async def scenario(store, reviews, bulk):
            await store.delete(12345)

        with pytest.raises(AbstractNotFoundError):
            run_services(scenario)


class TestListing:
    @staticmethod
    async def _seed(store):
        first = await store.create(_submission(title="Alpha diagnostics network"), abstract_payload())
        second = await store.create(
            _submission(
                title="Beta digital surveillance",
                track="track_2",
                subcategory=default_taxonomy().resolve_track("track_2").topics[0],
            ),
            abstract_payload(),
        )
        third = await store.create(_submission(title="Gamma referral study"), abstract_payload())
        await store.set_status(third.id, "accepted")
        return first, second, third

    def test_filters_and_pagination(self, run_services):
        async def scenario(store, reviews, bulk):
            await self._seed(store)
            by_track = await store.list_abstracts(AbstractFilters(track="track_1"))
            by_status = await store.list_abstracts(AbstractFilters(status="accepted"))
            searched = await store.list_abstracts(AbstractFilters(search="surveillance"))
            paged = await store.list_abstracts(page=2, limit=2, sort_by="title", sort_order="asc")
            return by_track, by_status, searched, paged

        by_track, by_status, searched, paged = run_services(scenario)
        assert by_track.total == 2
        assert [a.title for a in by_status.items] == ["Gamma referral study"]
        assert [a.title for a in searched.items] == ["Beta digital surveillance"]
        assert paged.pagination() == {"total": 3, "page": 2, "limit": 2, "pages": 2}
        assert [a.title for a in paged.items] == ["Gamma referral study"]

    def test_unknown_sort_falls_back_to_newest_first(self, run_services):
        async def scenario(store, reviews, bulk):
            seeded = await self._seed(store)
            page = await store.list_abstracts(sort_by="password; DROP TABLE", sort_order="sideways")
            return seeded, page

        seeded, page = run_services(scenario)
        assert [a.id for a in page.items] == sorted((a.id for a in seeded), reverse=True)

    def test_list_by_track_and_pending(self, run_services):
        async def scenario(store, reviews, bulk):
            await self._seed(store)
            return await store.list_by_track("track_1"), await store.list_pending()

        accepted, pending = run_services(scenario)
        assert [a.title for a in accepted] == ["Gamma referral study"]
        assert {a.title for a in pending} == {"Alpha diagnostics network", "Beta digital surveillance"}

    def test_stats_overview(self, run_services):
        async def scenario(store, reviews, bulk):
            await self._seed(store)
            return await store.stats_overview()

        stats = run_services(scenario)
        assert stats.total == 3
        assert stats.by_status["submitted"] == 2
        assert stats.by_status["accepted"] == 1
        assert stats.by_status["approved"] == 0
        assert stats.by_submission_type == {"abstract": 3, "full_paper": 0, "poster": 0, "demo": 0}
        assert stats.by_track == [("track_1", 2), ("track_2", 1)]


@pytest.mark.parametrize("page, limit, expected", [
    (1, 20, (1, 20)),
    ("3", "5", (3, 5)),
    (0, 0, (1, 1)),
    ("abc", None, (1, 20)),
    (2, 1000, (2, 100)),
])
def test_normalize_paging(page, limit, expected):
    assert normalize_paging(page, limit) == expected


def test_timestamps_read_back_in_utc(run_services):
    async def scenario(store, reviews, bulk):
        created = await store.create(_submission(), abstract_payload())
        return created, await store.get(created.id)

    created, fetched = run_services(scenario)
    assert fetched.created_at.tzinfo is not None
    assert fetched.created_at.utcoffset().total_seconds() == 0
    assert fetched.created_at == created.created_at


def test_search_matches_wildcard_characters_literally(run_services):
    async def scenario(store, reviews, bulk):
        await store.create(_submission(title="Cutting referral delays by 50% in district labs"), abstract_payload())
        await store.create(_submission(title="Sample_ID tracking across referral networks"), abstract_payload())
        await store.create(_submission(title="Plain diagnostics study"), abstract_payload())
        return [
            (await store.list_abstracts(AbstractFilters(search=term))).items
            for term in ("50%", "%", "_", "sample_id")
        ]

    percent, bare_percent, underscore, mixed_case = run_services(scenario)
    assert [a.title for a in percent] == ["Cutting referral delays by 50% in district labs"]
    assert [a.title for a in bare_percent] == ["Cutting referral delays by 50% in district labs"]
    assert [a.title for a in underscore] == ["Sample_ID tracking across referral networks"]
    assert [a.title for a in mixed_case] == ["Sample_ID tracking across referral networks"]


@pytest.mark.parametrize("term, expected", [
    ("abc", "%abc%"),
    ("50%", "%50\\%%"),
    ("a_b", "%a\\_b%"),
    ("c:\\tmp", "%c:\\\\tmp%"),
])
def test_substring_pattern(term, expected):
    assert substring_pattern(term) == expected
