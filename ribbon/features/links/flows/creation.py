"""
Link creation flow.

One CreationFlow belongs to one browser session. It validates the form,
optionally processes and uploads the icon, inserts the link and builds the
share URL and message.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from ribbon.features.links.services.link_store import LinkStore
from ribbon.features.links.services.themes import DEFAULT_THEME_ID, is_known_theme
from ribbon.features.links.utils.image import square_icon
from ribbon.features.links.utils.sanitize import sanitize_name
from ribbon.features.links.utils.slug_generator import generate_slug, generate_suffix
from ribbon.platform.config import settings
from ribbon.platform.exceptions import RateLimitError, RibbonError, UploadError, ValidationError
from ribbon.platform.logger import get_logger
from ribbon.platform.utils.file_upload import IconStorage, ImageUpload, validate_image_file

logger = get_logger(__name__)

MAX_RECIPIENT_LENGTH = 15
MAX_CREATOR_LENGTH = 20

Clipboard = Callable[[str], object]


@dataclass
class LinkForm:
    recipient_name: str
    creator_name: str
    theme_id: Union[int, str] = DEFAULT_THEME_ID
    is_anonymous: bool = False
    image: Optional[ImageUpload] = None


@dataclass(frozen=True)
class CreatedLink:
    slug: str
    url: str
    share_message: str
    icon_url: Optional[str]


def build_share_message(url: str, is_anonymous: bool) -> str:
    if is_anonymous:
        return (
            f"Someone made you something special 💝\n{url}\n\n"
            "(I don't know who sent this, just passing it along!)"
        )
    return f"Hey! I made you something 💝\n{url}"


class CreationFlow:
    def __init__(
        self,
        store: LinkStore,
        storage: IconStorage,
        *,
        origin: str = settings.PUBLIC_ORIGIN,
        clipboard: Optional[Clipboard] = None,
        clock: Callable[[], float] = time.monotonic,
        min_interval: float = settings.MIN_SUBMIT_INTERVAL_SECONDS,
        max_image_bytes: int = settings.MAX_IMAGE_BYTES,
    ):
        self.store = store
        self.storage = storage
        self.origin = origin.rstrip("/")
        self.clipboard = clipboard
        self.clock = clock
        self.min_interval = min_interval
        self.max_image_bytes = max_image_bytes

        self.is_generating = False
        self.last_submitted_at: Optional[float] = None
        self.result: Optional[CreatedLink] = None
        self.error_message: Optional[str] = None

    async def create_link(self, form: LinkForm) -> CreatedLink:
        if self.is_generating:
            raise RateLimitError("Your link is still being created")

        self.error_message = None
        try:
            recipient, creator = self.validate(form)
            self.last_submitted_at = self.clock()
            self.is_generating = True
            self.result = await self._create(form, recipient, creator)
            return self.result
        except RibbonError as exc:
            self.error_message = exc.message
            raise
        finally:
            self.is_generating = False

    def validate(self, form: LinkForm) -> tuple[str, str]:
        """
        Raise the first violated constraint, otherwise return the sanitized
        recipient and creator names. Nothing here touches the network.
        """
        if self.last_submitted_at is not None:
            elapsed = self.clock() - self.last_submitted_at
            if elapsed < self.min_interval:
                raise RateLimitError(retry_after=self.min_interval - elapsed)

        recipient = form.recipient_name.strip()
        creator = form.creator_name.strip()

        if not recipient:
            raise ValidationError("Please enter a recipient name")
        if not creator:
            raise ValidationError("Please enter your name")
        if len(recipient) > MAX_RECIPIENT_LENGTH:
            raise ValidationError(f"Recipient name must be {MAX_RECIPIENT_LENGTH} characters or less")
        if len(creator) > MAX_CREATOR_LENGTH:
            raise ValidationError(f"Your name must be {MAX_CREATOR_LENGTH} characters or less")
        if not is_known_theme(form.theme_id):
            raise ValidationError("Please pick one of the available themes")

        if form.image is not None:
            validate_image_file(form.image, self.max_image_bytes)

        recipient, creator = sanitize_name(recipient), sanitize_name(creator)
        if not recipient.strip():
            raise ValidationError("Please enter a recipient name")
        if not creator.strip():
            raise ValidationError("Please enter your name")
        return recipient, creator

    async def _create(self, form: LinkForm, recipient: str, creator: str) -> CreatedLink:
        slug = generate_slug()

        icon_url = None
        if form.image is not None:
            icon_url = await self._upload_icon(slug, form.image)

        record = await self.store.insert(
            slug=slug,
            recipient_name=recipient,
            creator_name=creator,
            theme_id=int(form.theme_id),
            icon_url=icon_url,
            is_anonymous=form.is_anonymous,
        )
        logger.info(f"Created link {record.slug} (theme {record.theme_id}, anonymous={record.is_anonymous})")

        url = f"{self.origin}/be-mine/{slug}"
        share_message = build_share_message(url, form.is_anonymous)
        self._copy_to_clipboard(share_message)

        return CreatedLink(slug=slug, url=url, share_message=share_message, icon_url=icon_url)

    async def _upload_icon(self, slug: str, image: ImageUpload) -> str:
        icon = await asyncio.to_thread(
            square_icon, image.data, size=settings.ICON_SIZE, quality=settings.ICON_JPEG_QUALITY
        )
        key = f"{slug}-{int(time.time() * 1000)}-{generate_suffix()}.jpg"
        try:
            return await self.storage.upload(
                key,
                icon,
                content_type="image/jpeg",
                cache_control=settings.ICON_CACHE_CONTROL_SECONDS,
                upsert=False,
            )
        except UploadError:
            raise
        except Exception as exc:
            logger.exception(f"Icon upload failed for link {slug}", exc_info=exc)
            raise UploadError(f"Upload failed: {exc}") from exc

    def _copy_to_clipboard(self, message: str) -> None:
        if self.clipboard is None:
            return
        try:
            self.clipboard(message)
        except Exception as exc:
            # Clipboard access is best-effort
            logger.debug(f"Clipboard write skipped: {exc}")

    def reset(self) -> None:
        self.result = None
        self.error_message = None
