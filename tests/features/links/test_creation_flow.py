import io
import re
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from ribbon.features.links.flows.creation import CreationFlow, LinkForm, build_share_message
from ribbon.platform.exceptions import PersistenceError, RateLimitError, UploadError, ValidationError
from ribbon.platform.utils.file_upload import ImageUpload


def _flow(clock, store=None, storage=None, clipboard=None) -> CreationFlow:
    if store is None:
        store = AsyncMock()
    if storage is None:
        storage = AsyncMock()
        storage.upload.return_value = "http://testserver/static/icons/icon.jpg"
    return CreationFlow(
        store,
        storage,
        origin="https://ribbon.test",
        clipboard=clipboard,
        clock=clock,
        min_interval=3.0,
        max_image_bytes=5 * 1024 * 1024,
    )


def _jpeg_upload(width=640, height=480) -> ImageUpload:
    out = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 60)).save(out, "JPEG")
    return ImageUpload(filename="me.jpg", content_type="image/jpeg", data=out.getvalue())


@pytest.mark.asyncio
async def test_create_link_returns_share_url(clock):
    flow = _flow(clock)

    created = await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))

    assert re.fullmatch(r"https://ribbon\.test/be-mine/[A-Za-z0-9_-]{8}", created.url)
    assert created.url.endswith(created.slug)
    assert created.icon_url is None
    assert flow.result == created
    assert flow.is_generating is False


@pytest.mark.asyncio
async def test_create_link_inserts_trimmed_sanitized_names(clock):
    store = AsyncMock()
    flow = _flow(clock, store=store)

    created = await flow.create_link(
        LinkForm(recipient_name="  <Sam>  ", creator_name=' "Alex" ', theme_id=2, is_anonymous=True)
    )

    store.insert.assert_awaited_once_with(
        slug=created.slug,
        recipient_name="Sam",
        creator_name="Alex",
        theme_id=2,
        icon_url=None,
        is_anonymous=True,
    )


@pytest.mark.parametrize(
    "form, message",
    [
        (LinkForm(recipient_name="", creator_name=""), "Please enter a recipient name"),
        (LinkForm(recipient_name="   ", creator_name="Alex"), "Please enter a recipient name"),
        (LinkForm(recipient_name="Sam", creator_name="  "), "Please enter your name"),
        (LinkForm(recipient_name="S" * 16, creator_name="A" * 21), "Recipient name must be 15 characters or less"),
        (LinkForm(recipient_name="Sam", creator_name="A" * 21), "Your name must be 20 characters or less"),
        (LinkForm(recipient_name="Sam", creator_name="Alex", theme_id=99), "Please pick one of the available themes"),
        (LinkForm(recipient_name="<>", creator_name="Alex"), "Please enter a recipient name"),
    ],
)
@pytest.mark.asyncio
async def test_validation_reports_first_violation_without_network(clock, form, message):
    store, storage = AsyncMock(), AsyncMock()
    flow = _flow(clock, store=store, storage=storage)

    with pytest.raises(ValidationError) as exc:
        await flow.create_link(form)

    assert exc.value.message == message
    assert flow.error_message == message
    store.insert.assert_not_called()
    storage.upload.assert_not_called()


@pytest.mark.asyncio
async def test_names_at_the_length_limits_are_accepted(clock):
    flow = _flow(clock)
    created = await flow.create_link(LinkForm(recipient_name="S" * 15, creator_name="A" * 20))
    assert created.slug


@pytest.mark.asyncio
async def test_second_submission_within_three_seconds_is_rate_limited(clock):
    store = AsyncMock()
    flow = _flow(clock, store=store)
    await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))

    clock.advance(2.999)
    with pytest.raises(RateLimitError) as exc:
        await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))

    assert exc.value.retry_after == pytest.approx(0.001)
    assert store.insert.await_count == 1


@pytest.mark.asyncio
async def test_rate_limit_takes_priority_over_missing_names(clock):
    flow = _flow(clock)
    await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))

    with pytest.raises(RateLimitError):
        await flow.create_link(LinkForm(recipient_name="", creator_name=""))


@pytest.mark.asyncio
async def test_submissions_three_seconds_apart_both_succeed(clock):
    flow = _flow(clock)
    first = await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))

    clock.advance(3.0)
    second = await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))

    assert first.slug != second.slug


@pytest.mark.asyncio
async def test_failed_validation_does_not_start_the_timer(clock):
    flow = _flow(clock)
    with pytest.raises(ValidationError):
        await flow.create_link(LinkForm(recipient_name="", creator_name="Alex"))

    created = await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))
    assert created.slug


@pytest.mark.asyncio
async def test_image_is_cropped_and_uploaded_under_slug_key(clock):
    store = AsyncMock()
    storage = AsyncMock()
    storage.upload.return_value = "http://testserver/static/icons/x.jpg"
    flow = _flow(clock, store=store, storage=storage)

    created = await flow.create_link(
        LinkForm(recipient_name="Sam", creator_name="Alex", image=_jpeg_upload())
    )

    storage.upload.assert_awaited_once()
    key, data = storage.upload.await_args.args
    kwargs = storage.upload.await_args.kwargs
    assert re.fullmatch(rf"{re.escape(created.slug)}-\d+-[a-z0-9]{{6}}\.jpg", key)
    assert kwargs == {"content_type": "image/jpeg", "cache_control": 3600, "upsert": False}
    with Image.open(io.BytesIO(data)) as im:
        assert im.size == (400, 400)

    assert created.icon_url == "http://testserver/static/icons/x.jpg"
    assert store.insert.await_args.kwargs["icon_url"] == created.icon_url


@pytest.mark.asyncio
async def test_non_image_upload_is_a_validation_error(clock):
    flow = _flow(clock)
    upload = ImageUpload(filename="a.pdf", content_type="application/pdf", data=b"%PDF")

    with pytest.raises(ValidationError, match="Please upload an image file"):
        await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex", image=upload))


@pytest.mark.asyncio
async def test_upload_failure_aborts_before_insert(clock):
    store = AsyncMock()
    storage = AsyncMock()
    storage.upload.side_effect = UploadError("Upload failed: bucket unavailable")
    flow = _flow(clock, store=store, storage=storage)

    with pytest.raises(UploadError):
        await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex", image=_jpeg_upload()))

    store.insert.assert_not_called()
    assert flow.error_message == "Upload failed: bucket unavailable"


@pytest.mark.asyncio
async def test_unexpected_storage_errors_become_upload_errors(clock):
    store = AsyncMock()
    storage = AsyncMock()
    storage.upload.side_effect = ConnectionResetError("peer went away")
    flow = _flow(clock, store=store, storage=storage)

    with pytest.raises(UploadError, match="peer went away"):
        await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex", image=_jpeg_upload()))

    store.insert.assert_not_called()


@pytest.mark.asyncio
async def test_undecodable_image_aborts_before_upload(clock):
    store, storage = AsyncMock(), AsyncMock()
    flow = _flow(clock, store=store, storage=storage)
    upload = ImageUpload(filename="x.png", content_type="image/png", data=b"garbage")

    with pytest.raises(UploadError, match="Failed to load image"):
        await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex", image=upload))

    storage.upload.assert_not_called()
    store.insert.assert_not_called()


@pytest.mark.asyncio
async def test_image_with_too_many_pixels_is_an_upload_error(clock, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    store, storage = AsyncMock(), AsyncMock()
    flow = _flow(clock, store=store, storage=storage)

    with pytest.raises(UploadError, match="Failed to load image"):
        await flow.create_link(
            LinkForm(recipient_name="Sam", creator_name="Alex", image=_jpeg_upload(200, 200))
        )

    assert flow.error_message == "Failed to load image"
    assert flow.is_generating is False
    storage.upload.assert_not_called()
    store.insert.assert_not_called()


@pytest.mark.asyncio
async def test_insert_failure_propagates_as_persistence_error(clock):
    store = AsyncMock()
    store.insert.side_effect = PersistenceError("Database error: could not save your link")
    flow = _flow(clock, store=store)

    with pytest.raises(PersistenceError):
        await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))

    assert flow.result is None
    assert store.insert.await_count == 1


@pytest.mark.asyncio
async def test_share_message_is_copied_to_clipboard(clock):
    clipboard = MagicMock()
    flow = _flow(clock, clipboard=clipboard)

    created = await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex", is_anonymous=True))

    clipboard.assert_called_once_with(created.share_message)
    assert created.share_message.startswith("Someone made you something special 💝\n")
    assert created.url in created.share_message


@pytest.mark.asyncio
async def test_clipboard_failure_is_ignored(clock):
    clipboard = MagicMock(side_effect=RuntimeError("no clipboard"))
    flow = _flow(clock, clipboard=clipboard)

    created = await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))

    assert created.url


def test_share_message_for_named_sender():
    assert build_share_message("https://r.test/be-mine/abc", False) == "Hey! I made you something 💝\nhttps://r.test/be-mine/abc"


@pytest.mark.asyncio
async def test_reset_clears_result_and_error(clock):
    flow = _flow(clock)
    await flow.create_link(LinkForm(recipient_name="Sam", creator_name="Alex"))

    flow.reset()

    assert flow.result is None
    assert flow.error_message is None
