"""End-to-end orchestrator runs against fake collaborators."""
import asyncio
from comicgen.core.engine import PipelineOrchestrator
from comicgen.core.errors import FetchError
from comicgen.core.submission import submit_generation
from comicgen.core.workflow import StepStatus, served_from_cache, steps_from_json
from comicgen.services.base import ContentGenerator
from conftest import FakeFetcher, FakeScraper, FakeSynthesizer


def _submit(store, part_count=3, url="https://example.com/a"):
    launched = []
    submission = submit_generation(store, launched.append, source_url=url, part_count=part_count)
    return submission.job_id, launched


def _run(store, registry, cache_id, stage_timeout=5):
    return asyncio.run(PipelineOrchestrator(store, registry, stage_timeout=stage_timeout).run(cache_id))


def _record_snapshots(store):
    """Capture the step list after every persisted transition, like a poller would."""
    snapshots = []
    original = store.mutate_steps

    def recording(cache_id, mutator):
        steps = original(cache_id, mutator)
        snapshots.append([(s.name, s.status) for s in steps])
        return steps

    store.mutate_steps = recording
    return snapshots


def test_successful_run_fills_every_part(store, make_registry):
    job_id, launched = _submit(store)
    assert launched == [job_id]

    outcome = _run(store, make_registry(), job_id)

    assert outcome.ok and not outcome.from_cache
    job = store.get(job_id)
    steps = steps_from_json(job.steps)
    assert all(s.status == StepStatus.COMPLETE for s in steps)
    assert job.title
    assert len(job.summaries) == len(job.image_refs) == 3
    assert not served_from_cache(steps)


def test_steps_progress_monotonically(store, make_registry):
    job_id, _ = _submit(store, part_count=2)
    snapshots = _record_snapshots(store)
    fetcher = FakeFetcher(FetchError("flaky"), "x" * 200)

    _run(store, make_registry(fetcher=fetcher), job_id)

    previous_complete = set()
    for snapshot in snapshots:
        in_progress = [name for name, status in snapshot if status == StepStatus.IN_PROGRESS]
        complete = {name for name, status in snapshot if status == StepStatus.COMPLETE}
        assert len(in_progress) <= 1
        assert previous_complete <= complete
        # No gaps: completed steps always form a prefix of the list
        statuses = [status for _, status in snapshot]
        assert statuses[:len(complete)] == [StepStatus.COMPLETE] * len(complete)
        previous_complete = complete


def test_non_html_url_fails_validation_without_retries(store, make_registry):
    job_id, _ = _submit(store)
    scraper = FakeScraper(content_type="application/pdf")
    fetcher = FakeFetcher()

    outcome = _run(store, make_registry(scraper=scraper, fetcher=fetcher), job_id)

    assert not outcome.ok
    steps = steps_from_json(store.get(job_id).steps)
    errors = [s for s in steps if s.status == StepStatus.ERROR]
    assert [s.name for s in errors] == ["Validating URL"]
    assert errors[0].detail == "Error: URL must point to an HTML page"
    assert all(s.status == StepStatus.PENDING for s in steps[2:])
    assert len(scraper.probes) == 1
    assert fetcher.calls == 0


def test_exhausted_retries_mark_step_error(store, make_registry):
    job_id, _ = _submit(store, part_count=2)
    synth = FakeSynthesizer()
    fetcher = FakeFetcher(FetchError("down"))

    outcome = _run(store, make_registry(fetcher=fetcher, synthesizer=synth), job_id)

    assert not outcome.ok
    assert fetcher.calls == 3
    steps = steps_from_json(store.get(job_id).steps)
    assert steps[2].status == StepStatus.ERROR
    assert steps[2].detail == "Error: down"
    assert [s.status for s in steps].count(StepStatus.IN_PROGRESS) == 0
    assert synth.calls == []


def test_unexpected_exception_is_not_retried(store, make_registry):
    job_id, _ = _submit(store, part_count=2)
    synth = FakeSynthesizer(failures=[RuntimeError("kaboom")])

    outcome = _run(store, make_registry(synthesizer=synth), job_id)

    assert not outcome.ok
    assert len(synth.calls) == 1
    job = store.get(job_id)
    steps = steps_from_json(job.steps)
    failed = [s for s in steps if s.status == StepStatus.ERROR]
    assert [s.name for s in failed] == ["Generating Image for Part 1"]
    assert failed[0].detail == "Error: kaboom"
    assert job.image_refs == []


def test_image_failure_keeps_earlier_panels(store, make_registry):
    job_id, _ = _submit(store, part_count=3)
    synth = FakeSynthesizer()

    async def flaky_resolver(image_ref):
        return not image_ref.endswith(("/2.png", "/3.png", "/4.png"))

    outcome = _run(store, make_registry(synthesizer=synth, resolver=flaky_resolver), job_id)

    assert not outcome.ok
    job = store.get(job_id)
    assert job.image_refs == ["https://images.example.com/1.png"]
    steps = steps_from_json(job.steps)
    assert steps[5].status == StepStatus.ERROR
    assert steps[5].detail == "Error: Generated image not accessible"
    assert steps[6].status == StepStatus.PENDING


class SlowGenerator(ContentGenerator):
    async def summarize(self, text, part_count, prompt_override=None):
        await asyncio.sleep(5)


def test_stage_timeout_forces_error(store, make_registry):
    job_id, _ = _submit(store, part_count=1)

    outcome = _run(store, make_registry(generator=SlowGenerator()), job_id, stage_timeout=0.2)

    assert not outcome.ok
    steps = steps_from_json(store.get(job_id).steps)
    assert steps[3].name == "Generating Summary"
    assert steps[3].status == StepStatus.ERROR
    assert steps[3].detail == "Error: Stage timed out after 0.2s"


def test_rerun_of_finished_job_is_served_from_cache(store, make_registry):
    job_id, _ = _submit(store, part_count=1)
    _run(store, make_registry(), job_id)
    synth = FakeSynthesizer()

    outcome = _run(store, make_registry(synthesizer=synth), job_id)

    assert outcome.ok and outcome.from_cache
    assert synth.calls == []
    assert served_from_cache(steps_from_json(store.get(job_id).steps))


def test_unknown_job_reports_failure(store, make_registry):
    outcome = _run(store, make_registry(), "missing")
    assert not outcome.ok
    assert "not found" in outcome.message


def test_corrupted_step_list_is_surfaced_as_failure(store, make_registry):
    store.create(cache_id="broken", source_url="https://example.com/a", part_count=1, steps=[])
    outcome = _run(store, make_registry(), "broken")
    assert not outcome.ok
    assert outcome.message == "Comic generation failed"
