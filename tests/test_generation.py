"""Tests for GenerationOrchestrator: streaming, error markers and edits."""

import asyncio

import pytest
from unittest.mock import patch


def _content(store, node_id):
    node, _ = store.find_node(node_id)
    return node.content


class TestGenerate:
    @pytest.mark.asyncio
    async def test_streams_and_commits(self, orchestrator, provider, sample_store):
        provider.stream_scripts = [["Olive ", "trees ", "live long."]]
        seen = []

        def on_fragment(buffer):
            seen.append((buffer, orchestrator.is_generating, orchestrator.live_text))
            # Nothing committed while streaming
            assert _content(sample_store, "sub_a1") == ""

        text = await orchestrator.generate("sub_a1", on_fragment=on_fragment)

        assert text == "Olive trees live long."
        assert _content(sample_store, "sub_a1") == "Olive trees live long."
        assert [s[0] for s in seen] == ["Olive ", "Olive trees ", "Olive trees live long."]
        assert all(s[1] for s in seen)
        assert seen[-1][2] == "Olive trees live long."
        assert not orchestrator.is_generating
        assert orchestrator.live_text is None

    @pytest.mark.asyncio
    async def test_subchapter_prompt_names_both_levels(self, orchestrator, provider):
        provider.stream_scripts = [["x"], ["y"]]
        await orchestrator.generate("sub_a1")
        await orchestrator.generate("ch_b")
        assert 'Chapter "Chapter A" - Subchapter "Sub A1"' in provider.requests[0].prompt
        assert 'Chapter "Chapter B".' in provider.requests[1].prompt
        assert "Subchapter" not in provider.requests[1].prompt

    @pytest.mark.asyncio
    async def test_regenerate_keeps_previous_on_job(self, orchestrator, provider, sample_store):
        from agents.writer_agent import GenerationParams
        sample_store.update_node_content("ch_b", "First draft")
        provider.stream_scripts = [["Second draft"]]
        await orchestrator.generate("ch_b", GenerationParams(existing_text="First draft"))
        assert _content(sample_store, "ch_b") == "Second draft"
        assert orchestrator.job.previous_content == "First draft"
        assert "First draft" in provider.requests[0].prompt

    @pytest.mark.asyncio
    async def test_mid_stream_failure_commits_marker(self, orchestrator, provider, sample_store):
        from config.exceptions import ProviderFailureError
        provider.stream_scripts = [["partial text", ProviderFailureError("connection lost")]]
        with pytest.raises(ProviderFailureError):
            await orchestrator.generate("sub_a1")
        assert _content(sample_store, "sub_a1") == "// ERROR: connection lost"
        assert not orchestrator.is_generating

    @pytest.mark.asyncio
    async def test_unwrapped_mid_stream_error_commits_marker(self, orchestrator, provider, sample_store):
        from config.exceptions import ProviderFailureError
        provider.stream_scripts = [["partial ", ConnectionError("socket reset")]]
        with pytest.raises(ProviderFailureError) as exc_info:
            await orchestrator.generate("sub_a1")
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert _content(sample_store, "sub_a1") == "// ERROR: Stream failed: socket reset"
        assert not orchestrator.is_generating

    @pytest.mark.asyncio
    async def test_unwrapped_open_error_commits_marker(self, orchestrator, provider, sample_store):
        from config.exceptions import ProviderFailureError
        provider.stream_scripts = [ConnectionError("refused")]
        with pytest.raises(ProviderFailureError):
            await orchestrator.generate("ch_b")
        assert _content(sample_store, "ch_b") == "// ERROR: Stream failed: refused"

    @pytest.mark.asyncio
    async def test_exhausted_rate_limit_commits_marker(self, orchestrator, provider, sample_store, recording_sleep):
        from config.exceptions import RateLimitedError
        provider.stream_scripts = [RateLimitedError() for _ in range(6)]
        with pytest.raises(RateLimitedError):
            await orchestrator.generate("ch_b")
        assert len(recording_sleep.delays) == 5
        assert _content(sample_store, "ch_b").startswith("// ERROR:")
        # Other nodes untouched
        assert _content(sample_store, "sub_a1") == ""

    @pytest.mark.asyncio
    async def test_unknown_node(self, orchestrator, provider):
        from config.exceptions import UnresolvedNodeIdError
        with pytest.raises(UnresolvedNodeIdError):
            await orchestrator.generate("id_ghost")
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_topic_required(self, orchestrator, sample_store):
        from config.exceptions import InvalidInputError
        sample_store.update_project(topic="  ")
        with pytest.raises(InvalidInputError):
            await orchestrator.generate("ch_b")

    @pytest.mark.asyncio
    async def test_second_job_rejected_while_streaming(self, sample_store, settings, retry_policy):
        from agents.writer_agent import WriterAgent
        from config.exceptions import GenerationInProgressError
        from workflow.generation import GenerationOrchestrator

        release = asyncio.Event()

        class SlowProvider:
            async def generate_stream(self, request):
                async def _fragments():
                    yield "start "
                    await release.wait()
                    yield "end"
                return _fragments()

        writer = WriterAgent(provider=SlowProvider(), settings=settings, retry=retry_policy)
        orchestrator = GenerationOrchestrator(sample_store, writer=writer, settings=settings)

        first = asyncio.create_task(orchestrator.generate("sub_a1"))
        while orchestrator.live_text != "start ":
            await asyncio.sleep(0)

        with pytest.raises(GenerationInProgressError):
            await orchestrator.generate("ch_b")
        with pytest.raises(GenerationInProgressError):
            orchestrator.edit("ch_b", "typing")

        release.set()
        assert await first == "start end"


class TestManualEdits:
    @pytest.mark.asyncio
    async def test_edit_committed_after_quiet_period(self, orchestrator, sample_store):
        orchestrator.edit("ch_b", "Draft")
        assert orchestrator.live_text == "Draft"
        assert _content(sample_store, "ch_b") == ""
        await asyncio.sleep(0.15)
        assert _content(sample_store, "ch_b") == "Draft"

    @pytest.mark.asyncio
    async def test_burst_commits_once(self, orchestrator, sample_store):
        with patch.object(sample_store, "update_node_content", wraps=sample_store.update_node_content) as commit:
            for text in ("D", "Dr", "Dra", "Draft"):
                orchestrator.edit("ch_b", text)
            await asyncio.sleep(0.15)
        assert commit.call_count == 1
        assert _content(sample_store, "ch_b") == "Draft"

    @pytest.mark.asyncio
    async def test_generate_flushes_pending_edit(self, orchestrator, provider, sample_store):
        orchestrator.edit("ch_b", "Typed by hand")
        provider.stream_scripts = [["Generated"]]
        await orchestrator.generate("sub_a1")
        assert _content(sample_store, "ch_b") == "Typed by hand"
        assert _content(sample_store, "sub_a1") == "Generated"

    @pytest.mark.asyncio
    async def test_commit_error_recorded(self, orchestrator, sample_store):
        sample_store.delete_chapter("ch_b")
        orchestrator.edit("ch_b", "orphan")
        orchestrator.flush_edits()
        assert orchestrator.last_commit_error is not None

    @pytest.mark.asyncio
    async def test_discard_edits(self, orchestrator, sample_store):
        orchestrator.edit("ch_b", "Throwaway")
        orchestrator.discard_edits()
        await asyncio.sleep(0.1)
        assert _content(sample_store, "ch_b") == ""
        assert orchestrator.live_text is None
