"""
Tests for keyword and semantic search.

Semantic tests use fixed vectors so the expected ranking is known exactly.
"""

import pytest

from conftest import FAKE_MODEL, FailingEmbeddingGenerator, FakeEmbeddingGenerator
from pkb.core.errors import GeneratorFailure, ValidationError
from pkb.core.models.content import Content, ContentType
from pkb.core.schemas.search import SearchQuery
from pkb.core.services.embedding_service import encode_vector
from pkb.core.services.search_service import SearchService


async def _add(repo, store, *, body, vector=None, title="", tags=(), type=ContentType.NOTE, model=FAKE_MODEL):
    content_id = await repo.create(Content(type=type, title=title, body=body, tags=list(tags)))
    if vector is not None:
        await store.upsert(content_id, encode_vector(vector), model, len(vector))
    return content_id


@pytest.fixture
def service(repo, fake_generator):
    return SearchService(repo, fake_generator)


class TestValidation:

    async def test_empty_query_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.search(SearchQuery(query="   "))

    async def test_empty_semantic_query_rejected(self, service, fake_generator):
        with pytest.raises(ValidationError):
            await service.search(SearchQuery(query="", semantic=True))
        assert fake_generator.calls == []


class TestKeywordSearch:

    async def test_case_varied_substring_of_body_matches(self, repo, store, service):
        content_id = await _add(repo, store, body="Notes on the Quick Brown Fox")
        results = await service.search(SearchQuery(query="qUICK bROWN"))
        assert [r.content.id for r in results] == [content_id]
        assert results[0].score == 0.0
        assert "Quick Brown" in results[0].snippet

    async def test_snippet_centred_after_length_changing_fold(self, repo, store, service):
        body = "İ" * 100 + "needle"
        content_id = await _add(repo, store, body=body)
        results = await service.search(SearchQuery(query="needle"))
        assert [r.content.id for r in results] == [content_id]
        assert results[0].snippet == "..." + "İ" * 75 + "needle"

    async def test_title_matches(self, repo, store, service):
        content_id = await _add(repo, store, title="Kubernetes cheatsheet", body="kubectl get pods")
        results = await service.search(SearchQuery(query="cheatsheet"))
        assert [r.content.id for r in results] == [content_id]

    async def test_absent_query_returns_empty(self, repo, store, service):
        await _add(repo, store, body="something else entirely")
        assert await service.search(SearchQuery(query="zebra")) == []

    async def test_like_wildcards_are_literal(self, repo, store, service):
        await _add(repo, store, body="plain text")
        literal_id = await _add(repo, store, body="100% done")
        results = await service.search(SearchQuery(query="%"))
        assert [r.content.id for r in results] == [literal_id]
        results = await service.search(SearchQuery(query="0% d"))
        assert [r.content.id for r in results] == [literal_id]
        assert await service.search(SearchQuery(query="_")) == []

    async def test_requires_every_tag(self, repo, store, service):
        await _add(repo, store, body="tagged note", tags=["x"])
        full_id = await _add(repo, store, body="tagged note", tags=["x", "y", "z"])
        results = await service.search(SearchQuery(query="tagged", tags=["x", "y"]))
        assert [r.content.id for r in results] == [full_id]
        assert results[0].content.tags == ["x", "y", "z"]

    async def test_type_filter(self, repo, store, service):
        await _add(repo, store, body="shared words", type=ContentType.NOTE)
        doc_id = await _add(repo, store, body="shared words", type=ContentType.DOCUMENT)
        results = await service.search(SearchQuery(query="shared", type=ContentType.DOCUMENT))
        assert [r.content.id for r in results] == [doc_id]

    async def test_newest_first_and_pagination(self, repo, store, service):
        ids = [await _add(repo, store, body=f"entry {i} common") for i in range(5)]
        page = await service.search(SearchQuery(query="common", limit=2, offset=1))
        assert [r.content.id for r in page] == [ids[3], ids[2]]
        assert await service.search(SearchQuery(query="common", offset=5)) == []

    async def test_default_limit(self, repo, store, service):
        for i in range(12):
            await _add(repo, store, body=f"row {i} match")
        assert len(await service.search(SearchQuery(query="match"))) == 10


class TestSemanticSearch:

    @pytest.fixture
    def generator(self):
        return FakeEmbeddingGenerator(vectors={"databases": [1.0, 0.0, 0.0]})

    @pytest.fixture
    def service(self, repo, generator):
        return SearchService(repo, generator)

    async def test_ranked_by_similarity(self, repo, store, service):
        near = await _add(repo, store, body="sqlite tuning", vector=[0.9, 0.1, 0.0])
        mid = await _add(repo, store, body="postgres replicas", vector=[0.5, 0.5, 0.0])
        far = await _add(repo, store, body="gardening", vector=[0.0, 0.0, 1.0])

        results = await service.search(SearchQuery(query="databases", semantic=True))

        assert [r.content.id for r in results] == [near, mid, far]
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert scores[-1] == pytest.approx(0.0)

    async def test_identical_vector_scores_one(self, repo, store, service):
        await _add(repo, store, body="exact", vector=[1.0, 0.0, 0.0])
        results = await service.search(SearchQuery(query="databases", semantic=True))
        assert results[0].score == pytest.approx(1.0)

    async def test_zero_and_mismatched_vectors_rank_lowest(self, repo, store, service):
        good = await _add(repo, store, body="good", vector=[0.2, 0.1, 0.0])
        zero = await _add(repo, store, body="zero", vector=[0.0, 0.0, 0.0])
        short = await _add(repo, store, body="short", vector=[1.0, 0.0])
        results = await service.search(SearchQuery(query="databases", semantic=True))
        assert results[0].content.id == good
        assert {r.content.id for r in results[1:]} == {zero, short}
        assert all(r.score == 0.0 for r in results[1:])

    async def test_content_without_embedding_is_excluded(self, repo, store, service):
        await _add(repo, store, body="no vector yet")
        embedded = await _add(repo, store, body="has vector", vector=[1.0, 0.0, 0.0])
        results = await service.search(SearchQuery(query="databases", semantic=True))
        assert [r.content.id for r in results] == [embedded]

    async def test_other_models_are_ignored(self, repo, store, service):
        await _add(repo, store, body="old model", vector=[1.0, 0.0, 0.0], model="legacy")
        assert await service.search(SearchQuery(query="databases", semantic=True)) == []

    async def test_tag_and_type_filters(self, repo, store, service):
        await _add(repo, store, body="a", vector=[1.0, 0.0, 0.0], tags=["x"])
        keep = await _add(repo, store, body="b", vector=[0.5, 0.5, 0.0], tags=["x", "y", "z"])
        await _add(repo, store, body="c", vector=[1.0, 0.0, 0.0], tags=["x", "y"], type=ContentType.SNIPPET)

        results = await service.search(
            SearchQuery(query="databases", semantic=True, tags=["x", "y"], type=ContentType.NOTE)
        )
        assert [r.content.id for r in results] == [keep]

    async def test_pagination_over_sorted_results(self, repo, store, service):
        ids = []
        for i in range(5):
            # Decreasing similarity with i
            ids.append(await _add(repo, store, body=f"doc {i}", vector=[1.0, float(i), 0.0]))

        page = await service.search(SearchQuery(query="databases", semantic=True, limit=2, offset=1))
        assert [r.content.id for r in page] == [ids[1], ids[2]]

        tail = await service.search(SearchQuery(query="databases", semantic=True, limit=10, offset=3))
        assert [r.content.id for r in tail] == [ids[3], ids[4]]

        assert await service.search(SearchQuery(query="databases", semantic=True, offset=5)) == []

    async def test_snippet_uses_raw_query(self, repo, store, service):
        await _add(repo, store, body="All about Databases and indexes", vector=[1.0, 0.0, 0.0])
        results = await service.search(SearchQuery(query="databases", semantic=True))
        assert results[0].snippet == "All about Databases and indexes"

    async def test_generator_failure_is_fatal(self, repo, store):
        await _add(repo, store, body="anything", vector=[1.0, 0.0, 0.0])
        service = SearchService(repo, FailingEmbeddingGenerator())
        with pytest.raises(GeneratorFailure):
            await service.search(SearchQuery(query="anything", semantic=True))
