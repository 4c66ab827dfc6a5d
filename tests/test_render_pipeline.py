"""Tests for mews.collection.pipeline — hook sequencing, writes and batches."""

from __future__ import annotations

import asyncio
import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from mews._errors import WriteBatchError
from mews.collection.pipeline import (
    RENDER_ACTIVITY,
    WRITE_ACTIVITY,
    RenderPipeline,
    WrittenUnit,
)
from mews.observability import ActivityReport, BuildCollector, UnitSkipped, UnitWritten
from mews.plugin.events import Event
from mews.plugin.registry import PluginRegistry
from tests.conftest import MemoryStorage, StubRenderer, make_file


@pytest.fixture
def pipeline(registry: PluginRegistry, storage: MemoryStorage, collector: BuildCollector) -> RenderPipeline:
    return RenderPipeline("blog", registry, storage, collector=collector)


def _record_all(registry: PluginRegistry, order: list[str]) -> None:
    """Register one recording handler on every built-in event."""
    for event in Event:
        if event in (Event.COLLECTION_BEFORE_WRITE, Event.COLLECTION_AFTER_WRITE):
            registry.add_handler(event, lambda unit, content, e=event: order.append(e.value))
        else:
            registry.add_handler(event, lambda value, e=event: order.append(e.value))


class TestWriteUnit:
    """One unit through render, hooks and storage."""

    @pytest.mark.asyncio
    async def test_renders_and_writes(
        self, pipeline: RenderPipeline, storage: MemoryStorage, renderer: StubRenderer,
    ) -> None:
        file = make_file("hello.md", renderer=renderer)

        result = await pipeline.write_unit(file, "post.html", {"site": {}})

        assert storage.writes == {Path("/out/hello/index.html"): "<post.html>hello.md</post.html>"}
        assert isinstance(result, WrittenUnit)
        assert result.skipped is False
        assert result.size_bytes == len("<post.html>hello.md</post.html>")
        assert result.destination == Path("/out/hello/index.html")

    @pytest.mark.asyncio
    async def test_hook_order(
        self, registry: PluginRegistry, pipeline: RenderPipeline, renderer: StubRenderer,
    ) -> None:
        order: list[str] = []
        _record_all(registry, order)
        file = make_file("a.md", renderer=renderer)

        await pipeline.write_unit(
            file, "post.html", {},
            before_render=Event.FILE_BEFORE_RENDER,
            after_render=Event.FILE_AFTER_RENDER,
        )

        assert order == [
            "file.beforeRender",
            "file.afterRender",
            "collection.beforeWrite",
            "collection.afterWrite",
        ]

    @pytest.mark.asyncio
    async def test_render_hooks_optional(
        self, registry: PluginRegistry, pipeline: RenderPipeline, renderer: StubRenderer,
    ) -> None:
        order: list[str] = []
        _record_all(registry, order)

        await pipeline.write_unit(make_file("a.md", renderer=renderer), "post.html", {})

        assert order == ["collection.beforeWrite", "collection.afterWrite"]

    @pytest.mark.asyncio
    async def test_before_render_sees_unit(
        self, registry: PluginRegistry, pipeline: RenderPipeline, renderer: StubRenderer,
    ) -> None:
        seen = []
        registry.add_handler(Event.FILE_BEFORE_RENDER, seen.append)
        file = make_file("a.md", renderer=renderer)

        await pipeline.write_unit(file, "post.html", {}, before_render=Event.FILE_BEFORE_RENDER)

        assert seen == [file]

    @pytest.mark.asyncio
    async def test_after_render_replaces_content(
        self, registry: PluginRegistry, pipeline: RenderPipeline,
        storage: MemoryStorage, renderer: StubRenderer,
    ) -> None:
        registry.add_handler(Event.FILE_AFTER_RENDER, lambda html: html.upper())

        await pipeline.write_unit(
            make_file("a.md", renderer=renderer), "post.html", {},
            after_render=Event.FILE_AFTER_RENDER,
        )

        assert list(storage.writes.values()) == ["<POST.HTML>A.MD</POST.HTML>"]

    @pytest.mark.asyncio
    async def test_before_write_replaces_content(
        self, registry: PluginRegistry, pipeline: RenderPipeline,
        storage: MemoryStorage, renderer: StubRenderer,
    ) -> None:
        async def minify(unit, content):
            return unit, content.replace("post.html", "p")

        registry.add_handler(Event.COLLECTION_BEFORE_WRITE, minify)

        await pipeline.write_unit(make_file("a.md", renderer=renderer), "post.html", {})

        assert list(storage.writes.values()) == ["<p>a.md</p>"]

    @pytest.mark.asyncio
    async def test_after_write_sees_final_content(
        self, registry: PluginRegistry, pipeline: RenderPipeline, renderer: StubRenderer,
    ) -> None:
        seen: list[str] = []
        registry.add_handler(Event.COLLECTION_BEFORE_WRITE, lambda u, c: [u, c + "!"])
        registry.add_handler(Event.COLLECTION_AFTER_WRITE, lambda u, c: seen.append(c))

        await pipeline.write_unit(make_file("a.md", renderer=renderer), "post.html", {})

        assert seen == ["<post.html>a.md</post.html>!"]

    @pytest.mark.asyncio
    async def test_encoding_passed_to_storage(
        self, registry: PluginRegistry, storage: MemoryStorage, renderer: StubRenderer,
    ) -> None:
        pipeline = RenderPipeline("blog", registry, storage, encoding="latin-1")
        await pipeline.write_unit(make_file("a.md", renderer=renderer), "post.html", {})
        assert storage.calls[0][2] == "latin-1"

    @pytest.mark.asyncio
    async def test_records_write(
        self, pipeline: RenderPipeline, collector: BuildCollector, renderer: StubRenderer,
    ) -> None:
        await pipeline.write_unit(make_file("a.md", renderer=renderer), "post.html", {})

        records = collector.log.query(event_type=UnitWritten)
        assert len(records) == 1
        assert records[0].collection == "blog"
        assert records[0].unit_id == "a.md"


class TestMissingTemplate:
    """Units without a template are skipped, not failed."""

    @pytest.mark.asyncio
    async def test_skips_without_hooks_or_write(
        self, registry: PluginRegistry, pipeline: RenderPipeline,
        storage: MemoryStorage, renderer: StubRenderer,
    ) -> None:
        order: list[str] = []
        _record_all(registry, order)

        with patch.object(sys, "stderr", io.StringIO()) as err:
            result = await pipeline.write_unit(
                make_file("a.md", renderer=renderer), None, {},
                before_render=Event.FILE_BEFORE_RENDER,
            )

        assert result.skipped is True
        assert result.size_bytes == 0
        assert order == []
        assert storage.writes == {}
        assert renderer.calls == []
        assert "No template found" in err.getvalue()

    @pytest.mark.asyncio
    async def test_records_skip(
        self, pipeline: RenderPipeline, collector: BuildCollector, renderer: StubRenderer,
    ) -> None:
        with patch.object(sys, "stderr", io.StringIO()):
            await pipeline.write_unit(make_file("a.md", renderer=renderer), None, {})

        skipped = collector.log.query(event_type=UnitSkipped)
        assert len(skipped) == 1
        assert skipped[0].unit_id == "a.md"


class TestRunBatch:
    """Concurrent units, join-all, one report per activity name."""

    @pytest.mark.asyncio
    async def test_all_units_written(
        self, pipeline: RenderPipeline, storage: MemoryStorage, renderer: StubRenderer,
    ) -> None:
        files = [make_file(f"f{i}.md", renderer=renderer) for i in range(4)]

        results = await pipeline.run_batch(
            (f.id, pipeline.write_unit(f, "post.html", {})) for f in files
        )

        assert [r.unit_id for r in results] == ["f0.md", "f1.md", "f2.md", "f3.md"]
        assert len(storage.writes) == 4

    @pytest.mark.asyncio
    async def test_units_interleave(
        self, registry: PluginRegistry, pipeline: RenderPipeline, renderer: StubRenderer,
    ) -> None:
        order: list[str] = []

        async def slow_before_write(unit, content):
            order.append(f"start:{unit.id}")
            await asyncio.sleep(0.01)
            order.append(f"end:{unit.id}")

        registry.add_handler(Event.COLLECTION_BEFORE_WRITE, slow_before_write)
        files = [make_file("a.md", renderer=renderer), make_file("b.md", renderer=renderer)]

        await pipeline.run_batch((f.id, pipeline.write_unit(f, "post.html", {})) for f in files)

        assert order[:2] == ["start:a.md", "start:b.md"]

    @pytest.mark.asyncio
    async def test_reports_once_per_name(
        self, registry: PluginRegistry, pipeline: RenderPipeline,
        collector: BuildCollector, renderer: StubRenderer,
    ) -> None:
        registry.add_handler(Event.FILE_BEFORE_RENDER, lambda f: None)
        files = [make_file(f"f{i}.md", renderer=renderer) for i in range(3)]

        await pipeline.run_batch(
            (f.id, pipeline.write_unit(
                f, "post.html", {}, before_render=Event.FILE_BEFORE_RENDER,
            ))
            for f in files
        )

        reports = collector.log.query(event_type=ActivityReport)
        names = sorted(r.name for r in reports)
        assert names == sorted([
            "file.beforeRender",
            RENDER_ACTIVITY,
            "collection.beforeWrite",
            WRITE_ACTIVITY,
            "collection.afterWrite",
        ])
        assert all(r.samples == 3 for r in reports)
        assert all(r.collection == "blog" for r in reports)

    @pytest.mark.asyncio
    async def test_activities_do_not_persist(
        self, pipeline: RenderPipeline, renderer: StubRenderer,
    ) -> None:
        f = make_file("a.md", renderer=renderer)
        await pipeline.run_batch([(f.id, pipeline.write_unit(f, "post.html", {}))])
        assert pipeline.timer.names == ()

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_others(
        self, registry: PluginRegistry, pipeline: RenderPipeline,
        storage: MemoryStorage, renderer: StubRenderer,
    ) -> None:
        def fail_on_b(unit, content):
            if unit.id == "b.md":
                raise RuntimeError("disk on fire")

        registry.add_handler(Event.COLLECTION_BEFORE_WRITE, fail_on_b)
        files = [make_file(n, renderer=renderer) for n in ("a.md", "b.md", "c.md")]

        with pytest.raises(WriteBatchError) as info:
            await pipeline.run_batch(
                (f.id, pipeline.write_unit(f, "post.html", {})) for f in files
            )

        error = info.value
        assert [unit_id for unit_id, _ in error.failures] == ["b.md"]
        assert isinstance(error.failures[0][1], RuntimeError)
        assert sorted(r.unit_id for r in error.results) == ["a.md", "c.md"]
        assert len(storage.writes) == 2

    @pytest.mark.asyncio
    async def test_failures_aggregated_and_timings_reported(
        self, registry: PluginRegistry, pipeline: RenderPipeline,
        collector: BuildCollector, renderer: StubRenderer,
    ) -> None:
        registry.add_handler(Event.COLLECTION_BEFORE_WRITE, lambda u, c: [u])
        files = [make_file(n, renderer=renderer) for n in ("a.md", "b.md")]

        with pytest.raises(WriteBatchError) as info:
            await pipeline.run_batch(
                (f.id, pipeline.write_unit(f, "post.html", {})) for f in files
            )

        assert len(info.value.failures) == 2
        assert collector.log.query(event_type=ActivityReport)

    @pytest.mark.asyncio
    async def test_skipped_units_in_results(
        self, pipeline: RenderPipeline, renderer: StubRenderer,
    ) -> None:
        f = make_file("a.md", renderer=renderer)
        with patch.object(sys, "stderr", io.StringIO()):
            results = await pipeline.run_batch([(f.id, pipeline.write_unit(f, None, {}))])
        assert results[0].skipped is True

    @pytest.mark.asyncio
    async def test_empty_batch(self, pipeline: RenderPipeline) -> None:
        assert await pipeline.run_batch([]) == []
