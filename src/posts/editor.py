"""Authoring state for a single post: fields, preview mode and submission.

``PostEditor`` is what an authoring screen drives. It keeps the draft
fields, toggles between editing and a sanitized preview, attaches images
through an uploader and hands a validated payload to a submit handler.
Outcomes are reported as notifications instead of exceptions.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from core.exceptions import BlogError
from core.validation import validate_payload

from . import services
from .rendering import sanitize_html
from .serializers import PostInputSerializer

logger = logging.getLogger(__name__)

LISTING_URL = "/dashboard/posts"
SAVE_FAILED_MESSAGE = "The post could not be saved."
EDITABLE_FIELDS = ("title", "content", "slug", "published")

SubmitHandler = Callable[[dict[str, Any], Any], Any]
Uploader = Callable[[Any], str]


class Mode(str, Enum):
    EDIT = "edit"
    PREVIEW = "preview"


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


@dataclass(frozen=True)
class SubmitOutcome:
    ok: bool
    post: Any = None
    error: str | None = None
    redirect_to: str | None = None
    refresh: bool = False


class PostEditor:
    def __init__(self, submit_handler: SubmitHandler, initial: Mapping[str, Any] | None = None, post_id=None):
        initial = initial or {}
        self.title: str = initial.get("title", "")
        self.content: str = initial.get("content", "")
        self.slug: str = initial.get("slug", "")
        self.published: bool = initial.get("published", False)
        self.post_id = post_id if post_id is not None else initial.get("id")
        self.mode = Mode.EDIT
        self.is_uploading = False
        self.notifications: list[Notification] = []
        self._submit_handler = submit_handler

    @property
    def is_editing(self) -> bool:
        return self.post_id is not None

    @property
    def data(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in EDITABLE_FIELDS}

    def change(self, name: str, value: Any) -> None:
        if name not in EDITABLE_FIELDS:
            raise KeyError(name)
        setattr(self, name, value)

    def toggle_preview(self) -> Mode:
        self.mode = Mode.EDIT if self.mode is Mode.PREVIEW else Mode.PREVIEW
        return self.mode

    def preview_html(self) -> str:
        return sanitize_html(self.content)

    def attach_image(self, upload, uploader: Uploader) -> str | None:
        """Upload ``upload`` and append a Markdown image reference to the content.

        The reference stays in the content even if the post is never saved.
        """
        self.is_uploading = True
        try:
            url = uploader(upload)
        except Exception:
            logger.exception("Image upload failed")
            self._notify("error", "Image upload failed.")
            return None
        finally:
            self.is_uploading = False

        name = getattr(upload, "name", "image")
        self.content = f"{self.content}\n![{name}]({url})"
        self._notify("success", "Image uploaded.")
        return url

    def submit(self) -> SubmitOutcome:
        result = validate_payload(PostInputSerializer, self.data)
        if not result.ok:
            message = result.first_error.message
            self._notify("error", message)
            return SubmitOutcome(ok=False, error=message)

        try:
            post = self._submit_handler(result.data, self.post_id)
        except BlogError as exc:
            message = str(exc.detail)
            self._notify("error", message)
            return SubmitOutcome(ok=False, error=message)
        except Exception:
            logger.exception("Post submission failed")
            self._notify("error", SAVE_FAILED_MESSAGE)
            return SubmitOutcome(ok=False, error=SAVE_FAILED_MESSAGE)

        self._notify("success", "Post saved.")
        return SubmitOutcome(ok=True, post=post, redirect_to=LISTING_URL, refresh=True)

    def _notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level, message))


def service_submit_handler(user) -> SubmitHandler:
    """Submit handler that calls the post services in-process as ``user``."""

    def _submit(payload: dict[str, Any], post_id) -> Any:
        if post_id is None:
            return services.create_post(user, payload)
        return services.update_post(user, post_id, payload)

    return _submit


__all__ = ["LISTING_URL", "Mode", "Notification", "PostEditor", "SubmitOutcome", "service_submit_handler"]
