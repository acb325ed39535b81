"""
Tests for content, embedding and summarize services and the background
embedding job.
"""

import asyncio
from types import SimpleNamespace

import pytest

from conftest import FAKE_MODEL, FailingEmbeddingGenerator, FakeSummarizer
from pkb.background import generate_and_store_content_embedding
from pkb.core.errors import GeneratorFailure, GeneratorTimeout, NotFound, ValidationError
from pkb.core.models.content import Content, ContentType
from pkb.core.services.content_service import ContentService
from pkb.core.services.embedding_service import EmbeddingService, OpenAIEmbeddingGenerator
from pkb.core.services.summarize_service import SummarizeService


def _payload(**overrides):
    fields = {
        "type": ContentType.NOTE,
        "title": "",
        "body": "",
        "source_url": None,
        "file_path": None,
        "tags": [],
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestContentService:

    async def test_create_returns_stored_content(self, repo):
        service = ContentService(repo)
        content = await service.create_content(_payload(title="  Title  ", body="Body", tags=["b", "a"]))
        assert content.id is not None
        assert content.title == "Title"
        assert content.tags == ["a", "b"]

    async def test_title_and_body_trimmed_alike(self, repo):
        service = ContentService(repo)
        created = await service.create_content(_payload(title=" T ", body="\n  body text  \n"))
        assert (created.title, created.body) == ("T", "body text")
        updated = await service.update_content(created.id, _payload(title="T2 ", body="  new body "))
        assert (updated.title, updated.body) == ("T2", "new body")

    async def test_create_requires_title_or_body(self, repo):
        service = ContentService(repo)
        with pytest.raises(ValidationError):
            await service.create_content(_payload(title="  ", body="   "))

    async def test_update_missing_raises_not_found(self, repo):
        service = ContentService(repo)
        with pytest.raises(NotFound):
            await service.update_content(99, _payload(body="x"))

    async def test_update_full_replace(self, repo):
        service = ContentService(repo)
        created = await service.create_content(_payload(body="v1", tags=["a", "b"], source_url="https://a"))
        updated = await service.update_content(created.id, _payload(body="v2", tags=["b", "c"]))
        assert updated.body == "v2"
        assert updated.tags == ["b", "c"]
        assert updated.source_url is None

    async def test_delete_missing_raises_not_found(self, repo):
        service = ContentService(repo)
        with pytest.raises(NotFound):
            await service.delete_content(5)


class TestBackgroundEmbedding:

    async def test_stores_embedding(self, repo, store, fake_generator):
        content_id = await repo.create(Content(body="background body"))
        await generate_and_store_content_embedding(
            content_id=content_id, body="background body", generator=fake_generator, store=store
        )
        embedding = await store.get(content_id, FAKE_MODEL)
        assert embedding.dimensions == fake_generator.dimension
        assert fake_generator.calls == ["background body"]

    async def test_regeneration_replaces(self, repo, store, fake_generator):
        content_id = await repo.create(Content(body="v1"))
        for body in ("v1", "v2"):
            await generate_and_store_content_embedding(
                content_id=content_id, body=body, generator=fake_generator, store=store
            )
        assert await store.count(content_id, FAKE_MODEL) == 1
        assert (await store.get(content_id, FAKE_MODEL)).vector == await fake_generator.generate("v2")

    async def test_generator_failure_is_swallowed(self, repo, store, caplog):
        content_id = await repo.create(Content(body="body"))
        generator = FailingEmbeddingGenerator()
        await generate_and_store_content_embedding(
            content_id=content_id, body="body", generator=generator, store=store
        )
        assert generator.calls == 1
        assert await store.count(content_id) == 0
        assert "Embedding job failed" in caplog.text

    async def test_deleted_content_is_swallowed(self, store, fake_generator):
        await generate_and_store_content_embedding(
            content_id=31337, body="orphan", generator=fake_generator, store=store
        )
        assert await store.count(31337) == 0

    async def test_empty_body_skips_generation(self, repo, store, fake_generator):
        content_id = await repo.create(Content(title="title only"))
        await generate_and_store_content_embedding(
            content_id=content_id, body="  ", generator=fake_generator, store=store
        )
        assert fake_generator.calls == []


class TestEmbeddingService:

    async def test_embed_content(self, repo, store, fake_generator):
        content_id = await repo.create(Content(body="embed this"))
        service = EmbeddingService(repo, store, fake_generator)
        embedding = await service.embed_content(content_id)
        assert embedding.content_id == content_id
        assert embedding.model == FAKE_MODEL
        assert (await store.get(content_id, FAKE_MODEL)).id == embedding.id

    async def test_missing_content(self, repo, store, fake_generator):
        service = EmbeddingService(repo, store, fake_generator)
        with pytest.raises(NotFound):
            await service.embed_content(1)

    async def test_empty_body(self, repo, store, fake_generator):
        content_id = await repo.create(Content(title="no body"))
        service = EmbeddingService(repo, store, fake_generator)
        with pytest.raises(ValidationError):
            await service.embed_content(content_id)

    async def test_generator_failure_propagates(self, repo, store):
        content_id = await repo.create(Content(body="x"))
        service = EmbeddingService(repo, store, FailingEmbeddingGenerator())
        with pytest.raises(GeneratorFailure):
            await service.embed_content(content_id)
        assert await store.count(content_id) == 0


class TestOpenAIEmbeddingGenerator:

    async def test_returns_first_vector(self):
        async def create(**kwargs):
            assert kwargs == {"model": "m", "input": "hello"}
            return SimpleNamespace(data=[SimpleNamespace(embedding=[0.5, 0.25])])

        client = SimpleNamespace(embeddings=SimpleNamespace(create=create))
        generator = OpenAIEmbeddingGenerator(client, model="m", timeout=1.0)
        assert await generator.generate("hello") == [0.5, 0.25]

    async def test_empty_response_fails(self):
        async def create(**kwargs):
            return SimpleNamespace(data=[])

        client = SimpleNamespace(embeddings=SimpleNamespace(create=create))
        generator = OpenAIEmbeddingGenerator(client, model="m", timeout=1.0)
        with pytest.raises(GeneratorFailure):
            await generator.generate("hello")

    async def test_deadline_exceeded(self):
        async def create(**kwargs):
            await asyncio.sleep(5)

        client = SimpleNamespace(embeddings=SimpleNamespace(create=create))
        generator = OpenAIEmbeddingGenerator(client, model="m", timeout=0.01)
        with pytest.raises(GeneratorTimeout):
            await generator.generate("hello")


class TestSummarizeService:

    async def test_summarizes_body(self, repo):
        content_id = await repo.create(Content(body="First sentence. Second sentence."))
        service = SummarizeService(repo, FakeSummarizer())
        assert await service.summarize_content(content_id) == "First sentence."

    async def test_empty_body(self, repo):
        content_id = await repo.create(Content(title="only a title"))
        service = SummarizeService(repo, FakeSummarizer())
        with pytest.raises(ValidationError):
            await service.summarize_content(content_id)
