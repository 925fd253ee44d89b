"""Shared pytest fixtures for the bookforge test suite."""

import pytest


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------

@pytest.fixture
def settings(tmp_path):
    """Return a Settings instance with all paths pointing to tmp_path."""
    from config.settings import Settings
    return Settings(
        snapshot_db_path=tmp_path / "projects.db",
        log_dir=tmp_path / "logs",
        user_id=None,
        auth_enabled=False,
        edit_debounce_seconds=0.05,
    )


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------

class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeProvider:
    """Scripted GenerationProvider.

    ``stream_scripts`` holds one entry per generate_stream call: either an
    exception (raised while opening) or a list of fragments, where an
    exception inside the list is raised mid-stream. ``once_responses`` works
    the same way for generate_once.
    """

    def __init__(self):
        self.stream_scripts: list = []
        self.once_responses: list = []
        self.requests: list = []
        self.image_prompts: list[str] = []

    async def generate_stream(self, request):
        self.requests.append(request)
        script = self.stream_scripts.pop(0) if self.stream_scripts else []
        if isinstance(script, Exception):
            raise script

        async def _fragments():
            for item in script:
                if isinstance(item, Exception):
                    raise item
                yield item

        return _fragments()

    async def generate_once(self, request):
        self.requests.append(request)
        response = self.once_responses.pop(0) if self.once_responses else ""
        if isinstance(response, Exception):
            raise response
        return response

    async def generate_image(self, prompt):
        from tools.image_client import ImagePayload
        self.image_prompts.append(prompt)
        return ImagePayload(data=b"\x89PNG-fake")


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def retry_policy(recording_sleep):
    """RetryPolicy with production delays but a non-blocking sleep."""
    from tools.retry import RetryPolicy
    return RetryPolicy(max_retries=5, initial_delay=61.0, jitter=1.0, sleep=recording_sleep)


# ---------------------------------------------------------------------------
# Document store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def adapter():
    from models.database import MemorySnapshotStore
    return MemorySnapshotStore()


@pytest.fixture
def store(adapter, settings):
    """DocumentStore in the guest namespace backed by memory."""
    from models.document_store import DocumentStore
    from models.identity import StaticIdentity
    return DocumentStore(adapter, StaticIdentity(), settings)


SAMPLE_STRUCTURE = {
    "chapters": [
        {
            "id": "ch_a",
            "title": "Chapter A",
            "subchapters": [{"id": "sub_a1", "title": "Sub A1"}],
        },
        {"id": "ch_b", "title": "Chapter B", "subchapters": []},
    ]
}


@pytest.fixture
def sample_store(store):
    """Store with an active project: Chapter A (Sub A1) and Chapter B."""
    store.start_new_project("Mediterranean Cooking")
    store.set_book_structure(SAMPLE_STRUCTURE)
    return store


@pytest.fixture
def writer(provider, settings, retry_policy):
    from agents.writer_agent import WriterAgent
    return WriterAgent(provider=provider, settings=settings, retry=retry_policy)


@pytest.fixture
def orchestrator(sample_store, writer, settings):
    from workflow.generation import GenerationOrchestrator
    return GenerationOrchestrator(sample_store, writer=writer, settings=settings)
