"""Tests for combined text and tag search."""
import time

import pytest

from kb.errors import ValidationError
from kb.notes import service as notes
from kb.search.service import search_notes
from kb.tags import service as tags


@pytest.fixture
def tagged(db, owner):
    """N1 carries work+urgent, N2 only work, N3 nothing."""
    n1 = notes.create_note(db, owner, "Quarterly plan", "Budget and hiring")
    time.sleep(0.001)
    n2 = notes.create_note(db, owner, "Groceries", "milk, eggs")
    time.sleep(0.001)
    n3 = notes.create_note(db, owner, "Journal", "Today I planned nothing")
    work = tags.create_tag(db, owner, "work")
    urgent = tags.create_tag(db, owner, "urgent")
    other = tags.create_tag(db, owner, "other")
    tags.assign_tag(db, owner, n1.id, work.id)
    tags.assign_tag(db, owner, n1.id, urgent.id)
    tags.assign_tag(db, owner, n2.id, work.id)
    return {
        "n1": n1.id, "n2": n2.id, "n3": n3.id,
        "work": work.id, "urgent": urgent.id, "other": other.id,
    }


def ids(found):
    return [n.id for n in found]


class TestSearchService:

    def test_case_insensitive_substring_over_title_and_content(self, db, owner, tagged):
        assert ids(search_notes(db, owner, "PLAN")) == [tagged["n3"], tagged["n1"]]
        assert ids(search_notes(db, owner, "eggs")) == [tagged["n2"]]
        assert search_notes(db, owner, "nonexistent") == []

    def test_tag_filter_uses_and_semantics(self, db, owner, tagged):
        assert set(ids(search_notes(db, owner, tag_ids=[tagged["work"]]))) == {tagged["n1"], tagged["n2"]}
        assert ids(search_notes(db, owner, tag_ids=[tagged["work"], tagged["urgent"]])) == [tagged["n1"]]
        assert search_notes(db, owner, tag_ids=[tagged["work"], tagged["other"]]) == []

    def test_text_and_tags_combined(self, db, owner, tagged):
        assert ids(search_notes(db, owner, "plan", [tagged["work"]])) == [tagged["n1"]]
        assert search_notes(db, owner, "milk", [tagged["urgent"]]) == []

    def test_archived_excluded_unless_requested(self, db, owner, tagged):
        notes.archive_note(db, owner, tagged["n2"])
        assert search_notes(db, owner, "eggs") == []
        assert ids(search_notes(db, owner, "eggs", include_archived=True)) == [tagged["n2"]]

    def test_results_ordered_by_recency(self, db, owner, tagged):
        time.sleep(0.001)
        notes.update_note(db, owner, tagged["n1"], content="Budget and hiring, revised")
        assert ids(search_notes(db, owner, "plan")) == [tagged["n1"], tagged["n3"]]

    def test_wildcards_match_literally(self, db, owner):
        hit = notes.create_note(db, owner, "Discount", "save 50% today")
        notes.create_note(db, owner, "Plain", "save 50 dollars")
        assert ids(search_notes(db, owner, "50%")) == [hit.id]
        assert search_notes(db, owner, "_") == []

    def test_query_is_matched_as_given(self, db, owner):
        notes.create_note(db, owner, "planned work")
        spaced = notes.create_note(db, owner, "a plan for today")
        assert ids(search_notes(db, owner, "plan ")) == [spaced.id]
        assert ids(search_notes(db, owner, " plan")) == [spaced.id]

    def test_requires_query_or_tags(self, db, owner):
        with pytest.raises(ValidationError):
            search_notes(db, owner, "   ")
        with pytest.raises(ValidationError):
            search_notes(db, owner, "", [])

    def test_scoped_to_owner(self, db, owner, stranger, tagged):
        notes.create_note(db, stranger, "Stranger plan")
        assert set(ids(search_notes(db, owner, "plan"))) == {tagged["n1"], tagged["n3"]}
        assert search_notes(db, stranger, tag_ids=[tagged["work"]]) == []


class TestSearchApi:

    def test_example_flow(self, client):
        note = client.post("/notes", json={"title": "Test"}).json()
        resp = client.post("/search/notes", json={"query": "tes"})
        assert resp.status_code == 200
        assert [n["id"] for n in resp.json()] == [note["id"]]

    def test_tag_example(self, client):
        n1 = client.post("/notes", json={"title": "N1"}).json()["id"]
        work = client.post("/tags", json={"name": "work"}).json()["id"]
        urgent = client.post("/tags", json={"name": "urgent"}).json()["id"]
        other = client.post("/tags", json={"name": "other"}).json()["id"]
        for tag in (work, urgent):
            client.post("/tags/assign", json={"note_id": n1, "tag_id": tag})

        def search(tag_ids):
            return [n["id"] for n in client.post("/search/notes", json={"query": "N", "tags": tag_ids}).json()]

        assert search([work]) == [n1]
        assert search([work, urgent]) == [n1]
        assert search([work, other]) == []

    def test_results_carry_tags(self, client):
        n1 = client.post("/notes", json={"title": "Tagged"}).json()["id"]
        work = client.post("/tags", json={"name": "work"}).json()["id"]
        client.post("/tags/assign", json={"note_id": n1, "tag_id": work})
        [hit] = client.post("/search/notes", json={"query": "tagged"}).json()
        assert hit["tags"] == [{"id": work, "name": "work"}]

    def test_empty_search_rejected(self, client):
        resp = client.post("/search/notes", json={"query": ""})
        assert resp.status_code == 422
