"""Tests for report drafts: image selection, verification and submission."""
import random

import pytest

from app.domain.common.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.domain.common.images import IMAGE_TOO_LARGE, NOT_AN_IMAGE
from app.domain.reports.drafts import VERIFY_FIRST, DraftRegistry, DraftState, ReportSubmissionFlow
from app.domain.reports.verification import WASTE_ANALYSES, ReportVerifier


@pytest.fixture
def registry():
    return DraftRegistry(ttl_minutes=30)


@pytest.fixture
def flow(registry, services):
    return ReportSubmissionFlow(registry, ReportVerifier(delay_seconds=0, rng=random.Random(3)), services.reports)


class BrokenVerifier:
    async def analyze(self, image_url):
        raise RuntimeError("model offline")


@pytest.mark.asyncio
async def test_draft_walks_through_every_state(flow, make_user, png, services):
    user = await make_user()

    draft = await flow.start(user.id, png)
    assert draft.state == DraftState.FILE_SELECTED

    draft = await flow.verify(draft.id, user.id)
    assert draft.state == DraftState.VERIFIED
    assert draft.analysis in WASTE_ANALYSES

    report = await flow.submit(draft.id, user.id, "Riverside Walk")

    assert report.waste_type == draft.analysis.waste_type
    assert report.amount == draft.analysis.quantity
    assert report.image_url == png
    assert '"wasteType"' in report.verification_result
    stored = await flow.registry.get(draft.id, user.id)
    assert stored.state == DraftState.SUBMITTED
    assert stored.report_id == report.id
    assert await services.rewards.get_user_balance(user.id) == 10


@pytest.mark.asyncio
async def test_form_fields_override_analysis(flow, make_user, png):
    user = await make_user()
    draft = await flow.start(user.id, png)
    await flow.verify(draft.id, user.id)

    report = await flow.submit(draft.id, user.id, "Riverside Walk", waste_type="Metal Cans", amount="5 kg")

    assert (report.waste_type, report.amount) == ("Metal Cans", "5 kg")


@pytest.mark.asyncio
async def test_submit_requires_verification(flow, make_user, png):
    user = await make_user()
    draft = await flow.start(user.id, png)

    with pytest.raises(ValidationError) as exc:
        await flow.submit(draft.id, user.id, "Riverside Walk")

    assert exc.value.message == VERIFY_FIRST


@pytest.mark.asyncio
async def test_submit_requires_location(flow, make_user, png):
    user = await make_user()
    draft = await flow.start(user.id, png)
    await flow.verify(draft.id, user.id)

    with pytest.raises(ValidationError) as exc:
        await flow.submit(draft.id, user.id, "  ")

    assert exc.value.message == "Please enter a location"
    assert (await flow.registry.get(draft.id, user.id)).state == DraftState.VERIFIED


@pytest.mark.asyncio
async def test_draft_is_submitted_once(flow, make_user, png, services):
    user = await make_user()
    draft = await flow.start(user.id, png)
    await flow.verify(draft.id, user.id)
    await flow.submit(draft.id, user.id, "Riverside Walk")

    with pytest.raises(ConflictError):
        await flow.submit(draft.id, user.id, "Riverside Walk")
    with pytest.raises(ConflictError):
        await flow.verify(draft.id, user.id)

    assert len(await services.reports.get_reports_by_user_id(user.id)) == 1


@pytest.mark.asyncio
async def test_rejects_non_images(flow, make_user):
    user = await make_user()

    with pytest.raises(ValidationError) as exc:
        await flow.start(user.id, "data:application/pdf;base64,JVBERi0=")

    assert exc.value.message == NOT_AN_IMAGE


@pytest.mark.asyncio
async def test_rejects_oversized_images(flow, make_user, make_image, override_settings):
    override_settings(max_image_bytes=100)
    user = await make_user()

    with pytest.raises(ValidationError) as exc:
        await flow.start(user.id, make_image(size=101))

    assert exc.value.message == IMAGE_TOO_LARGE
    assert len(flow.registry) == 0


@pytest.mark.asyncio
async def test_draft_belongs_to_its_owner(flow, make_user, png):
    owner = await make_user("Owner")
    other = await make_user("Other")
    draft = await flow.start(owner.id, png)

    with pytest.raises(AuthorizationError):
        await flow.verify(draft.id, other.id)
    with pytest.raises(NotFoundError):
        await flow.registry.get("missing", owner.id)


@pytest.mark.asyncio
async def test_failed_verification_can_be_retried(registry, services, make_user, png):
    user = await make_user()
    broken = ReportSubmissionFlow(registry, BrokenVerifier(), services.reports)
    draft = await broken.start(user.id, png)

    with pytest.raises(RuntimeError):
        await broken.verify(draft.id, user.id)

    failed = await registry.get(draft.id, user.id)
    assert failed.state == DraftState.FAILED
    assert failed.error

    working = ReportSubmissionFlow(registry, ReportVerifier(delay_seconds=0), services.reports)
    assert (await working.verify(draft.id, user.id)).state == DraftState.VERIFIED


@pytest.mark.asyncio
async def test_selecting_a_new_file_discards_analysis(flow, make_user, png):
    user = await make_user()
    draft = await flow.start(user.id, png)
    await flow.verify(draft.id, user.id)

    draft = await flow.registry.select_file(draft.id, user.id, png)

    assert draft.state == DraftState.FILE_SELECTED
    assert draft.analysis is None


@pytest.mark.asyncio
async def test_expired_drafts_are_purged(png):
    registry = DraftRegistry(ttl_minutes=0)
    draft = await registry.create(1, png)

    assert await registry.purge_expired() == 1
    with pytest.raises(NotFoundError):
        await registry.get(draft.id, 1)
