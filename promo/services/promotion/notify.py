"""Promotion notifications.

Four events bracket a run: started, then one of skipped / succeeded / failed.
Messages use the Slack incoming-webhook format (one coloured attachment),
which Mattermost and Rocket.Chat accept as well.

Delivery is best effort. A notification that cannot be delivered is reported
as a console warning and never changes the outcome of the promotion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from promo.core.result import Err, Ok, Result
from promo.output.console import ConsoleProtocol, Style
from promo.platform.http import HttpClient
from promo.services.promotion.model import PromotionEvent, PromotionStep, RunInfo

EVENT_COLORS: dict[PromotionEvent, str] = {
    "started": "#439FE0",
    "skipped": "#9E9E9E",
    "succeeded": "good",
    "failed": "danger",
}

EVENT_TITLES: dict[PromotionEvent, str] = {
    "started": "Promotion started",
    "skipped": "Promotion skipped",
    "succeeded": "Promotion succeeded",
    "failed": "Promotion failed",
}


@dataclass(frozen=True, slots=True)
class Notification:
    event: PromotionEvent
    title: str
    text: str

    @property
    def color(self) -> str:
        return EVENT_COLORS[self.event]


@dataclass(frozen=True, slots=True)
class NotifyError:
    message: str


class Notifier(Protocol):
    def send(self, notification: Notification) -> Result[None, NotifyError]: ...


def build_notification(
    event: PromotionEvent,
    *,
    run: RunInfo,
    source_branch: str,
    tag: str | None = None,
    step: PromotionStep | None = None,
    reason: str | None = None,
) -> Notification:
    subject = f"{source_branch} as {tag}" if tag else source_branch
    match event:
        case "started":
            text = f"Promoting {subject}"
        case "skipped":
            text = f"Not promoting {subject}: {reason or 'gate refused'}"
        case "succeeded":
            text = f"Promoted {subject}"
        case "failed":
            text = f"Promotion of {subject} failed at step {step or 'unknown'}"
            if reason:
                text += f": {reason}"
        case _:
            raise AssertionError(f"unexpected event: {event}")
    return Notification(event=event, title=EVENT_TITLES[event], text=f"{text}\nRun: {run.label()}")


def slack_payload(
    notification: Notification, *, channel: str | None, username: str
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "username": username,
        "attachments": [
            {
                "color": notification.color,
                "title": notification.title,
                "text": notification.text,
                "fallback": f"{notification.title}: {notification.text}",
            }
        ],
    }
    if channel:
        payload["channel"] = channel
    return payload


class WebhookNotifier:
    """Posts notifications to an incoming webhook."""

    def __init__(
        self,
        http: HttpClient,
        url: str,
        *,
        channel: str | None = None,
        username: str = "promo",
    ) -> None:
        self._http = http
        self._url = url
        self._channel = channel
        self._username = username

    def send(self, notification: Notification) -> Result[None, NotifyError]:
        payload = slack_payload(notification, channel=self._channel, username=self._username)
        result = self._http.post_json(self._url, payload)
        if isinstance(result, Err):
            return Err(NotifyError(message=str(result.error)))
        return Ok(None)


class ConsoleNotifier:
    """Fallback when no webhook is configured: notifications go to the log."""

    _STYLES: dict[PromotionEvent, Style] = {
        "started": Style.INFO,
        "skipped": Style.DIM,
        "succeeded": Style.SUCCESS,
        "failed": Style.ERROR,
    }

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def send(self, notification: Notification) -> Result[None, NotifyError]:
        style = self._STYLES[notification.event]
        self._console.print(f"[notify] {notification.title}: {notification.text}", style)
        return Ok(None)


def _empty_sent() -> list[Notification]:
    return []


@dataclass
class MockNotifier:
    """Notifier that records notifications for tests."""

    sent: list[Notification] = field(default_factory=_empty_sent)
    error: NotifyError | None = None

    def send(self, notification: Notification) -> Result[None, NotifyError]:
        self.sent.append(notification)
        if self.error is not None:
            return Err(self.error)
        return Ok(None)

    @property
    def events(self) -> list[PromotionEvent]:
        return [n.event for n in self.sent]


class NotificationDispatcher:
    """Sends promotion events for one run and swallows delivery failures."""

    def __init__(
        self,
        notifier: Notifier,
        console: ConsoleProtocol,
        *,
        run: RunInfo,
        source_branch: str,
    ) -> None:
        self._notifier = notifier
        self._console = console
        self._run = run
        self._source_branch = source_branch

    def notify(
        self,
        event: PromotionEvent,
        *,
        tag: str | None = None,
        step: PromotionStep | None = None,
        reason: str | None = None,
    ) -> None:
        notification = build_notification(
            event,
            run=self._run,
            source_branch=self._source_branch,
            tag=tag,
            step=step,
            reason=reason,
        )
        sent = self._notifier.send(notification)
        if isinstance(sent, Err):
            self._console.warning(f"{event} notification not delivered: {sent.error.message}")
