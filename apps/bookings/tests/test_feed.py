"""Tests for the live booking feed."""

from __future__ import annotations

import asyncio
import json
from datetime import date

import pytest
from asgiref.sync import async_to_sync
from django.core.handlers.asgi import ASGIHandler
from django.core.signals import request_finished, request_started
from django.db import close_old_connections
from django.urls import reverse
from rest_framework_simplejwt.tokens import RefreshToken

from apps.bookings.application.command_handlers import SubmitBookingCommand, SubmitBookingHandler
from apps.bookings.application.queries import booking_snapshot
from apps.bookings.domain.events import BookingCancelled
from apps.bookings.feed import BookingFeed, SnapshotQueue, astream_snapshots, format_sse, stream_snapshots
from apps.bookings.handlers import refresh_booking_feed
from apps.bookings.repositories import DjangoBookingRepository


def parse_sse(chunk: str):
    lines = chunk.strip().splitlines()
    assert lines[0] == "event: snapshot"
    assert lines[1].startswith("data: ")
    return json.loads(lines[1][len("data: "):])


def test_subscribers_get_every_snapshot_until_unsubscribed():
    version = iter(range(1, 100))
    feed = BookingFeed(snapshot=lambda: [{"version": next(version)}])
    received = []

    unsubscribe = feed.subscribe(received.append)
    assert feed.publish() == 1
    assert feed.publish() == 1
    unsubscribe()
    unsubscribe()
    assert feed.publish() == 0

    assert received == [[{"version": 1}], [{"version": 2}]]
    assert feed.subscriber_count == 0


def test_no_snapshot_is_taken_without_subscribers():
    def explode():
        raise AssertionError("snapshot taken")

    assert BookingFeed(snapshot=explode).publish() == 0


def test_failing_subscriber_does_not_block_others():
    feed = BookingFeed(snapshot=lambda: [])
    received = []

    def broken(snapshot):
        raise RuntimeError("socket closed")

    feed.subscribe(broken)
    feed.subscribe(received.append)

    assert feed.publish() == 1
    assert received == [[]]


def test_snapshot_queue_keeps_the_latest():
    mailbox = SnapshotQueue(maxsize=2)
    for n in range(5):
        mailbox([{"n": n}])

    assert mailbox.get(timeout=0) == [{"n": 3}]
    assert mailbox.get(timeout=0) == [{"n": 4}]
    assert mailbox.get(timeout=0.01) is None


def test_format_sse():
    assert format_sse([{"checkIn": date(2025, 6, 1)}]) == (
        'event: snapshot\ndata: [{"checkIn": "2025-06-01"}]\n\n'
    )


def test_stream_sends_initial_snapshot_then_updates():
    state = {"items": [{"applicationId": "HPU-0000-AAAAA"}]}
    feed = BookingFeed(snapshot=lambda: list(state["items"]))

    stream = stream_snapshots(feed, keepalive=0.01)
    assert feed.subscriber_count == 0

    assert parse_sse(next(stream)) == [{"applicationId": "HPU-0000-AAAAA"}]
    assert feed.subscriber_count == 1

    state["items"].insert(0, {"applicationId": "HPU-0000-BBBBB"})
    feed.publish()
    assert [item["applicationId"] for item in parse_sse(next(stream))] == ["HPU-0000-BBBBB", "HPU-0000-AAAAA"]

    assert next(stream) == ": keepalive\n\n"

    stream.close()
    assert feed.subscriber_count == 0


@pytest.mark.django_db
def test_snapshot_is_newest_first_and_refreshed_on_change(monkeypatch):
    handler = SubmitBookingHandler(DjangoBookingRepository())
    command = SubmitBookingCommand(
        name="A. Singh",
        email="a@x.com",
        phone="+91 98160 00000",
        address="Summer Hill, Shimla",
        check_in=date(2025, 6, 1),
        check_out=date(2025, 6, 3),
        guest_count=2,
    )
    older = handler.handle(command)
    newer = handler.handle(command)

    feed = BookingFeed()
    monkeypatch.setattr("apps.bookings.handlers.booking_feed", feed)
    received = []
    feed.subscribe(received.append)

    refresh_booking_feed(BookingCancelled(application_id=older.application_id))

    snapshot = received[0]
    assert [item["applicationId"] for item in snapshot] == [newer.application_id, older.application_id]
    assert snapshot == booking_snapshot()
    assert snapshot[0]["status"] == "Pending"
    json.dumps(snapshot)


def test_async_stream_sends_snapshots_and_detaches_on_close():
    feed = BookingFeed(snapshot=lambda: [{"applicationId": "HPU-0000-AAAAA"}])

    async def consume():
        stream = astream_snapshots(feed, keepalive=0.01)
        chunks = [await stream.__anext__()]
        attached = feed.subscriber_count
        feed.publish()
        chunks.append(await stream.__anext__())
        chunks.append(await stream.__anext__())
        await stream.aclose()
        return chunks, attached

    chunks, attached = async_to_sync(consume)()

    assert attached == 1
    assert parse_sse(chunks[0]) == parse_sse(chunks[1]) == [{"applicationId": "HPU-0000-AAAAA"}]
    assert chunks[2] == ": keepalive\n\n"
    assert feed.subscriber_count == 0


@pytest.fixture
def keep_db_connection():
    # ASGIHandler closes "old" connections around each request, which would
    # drop the test transaction.
    request_started.disconnect(close_old_connections)
    request_finished.disconnect(close_old_connections)
    yield
    request_started.connect(close_old_connections)
    request_finished.connect(close_old_connections)


@pytest.mark.django_db
def test_stream_over_asgi_delivers_snapshot_and_detaches_on_disconnect(
    monkeypatch, django_user_model, keep_db_connection
):
    staff = django_user_model.objects.create_user(username="warden", password="WardenPass123", is_staff=True)
    token = str(RefreshToken.for_user(staff).access_token)
    feed = BookingFeed(snapshot=lambda: [{"applicationId": "HPU-0000-AAAAA", "status": "Pending"}])
    monkeypatch.setattr("apps.bookings.views.booking_feed", feed)

    path = reverse("bookings-admin:booking-stream")
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [
            (b"host", b"testserver"),
            (b"accept", b"text/event-stream"),
            (b"authorization", f"Bearer {token}".encode()),
        ],
        "client": ("127.0.0.1", 50000),
        "server": ("testserver", 80),
    }

    async def open_stream():
        inbox: asyncio.Queue = asyncio.Queue()
        await inbox.put({"type": "http.request", "body": b"", "more_body": False})
        sent = []
        first_snapshot = asyncio.Event()

        async def receive():
            return await inbox.get()

        async def send(message):
            sent.append(message)
            if message["type"] == "http.response.body" and b"event: snapshot" in message.get("body", b""):
                first_snapshot.set()

        request = asyncio.ensure_future(ASGIHandler()(scope, receive, send))
        await asyncio.wait_for(first_snapshot.wait(), timeout=5)
        attached = feed.subscriber_count

        await inbox.put({"type": "http.disconnect"})
        await asyncio.wait_for(request, timeout=5)
        for _ in range(100):
            if feed.subscriber_count == 0:
                break
            await asyncio.sleep(0.01)
        return sent, attached

    sent, attached = async_to_sync(open_stream)()

    start = sent[0]
    assert start["type"] == "http.response.start"
    assert start["status"] == 200
    headers = {name.lower(): value for name, value in start["headers"]}
    assert headers[b"content-type"] == b"text/event-stream"
    body = b"".join(message.get("body", b"") for message in sent[1:]).decode()
    assert parse_sse(body.split("\n\n")[0]) == [{"applicationId": "HPU-0000-AAAAA", "status": "Pending"}]
    assert attached == 1
    assert feed.subscriber_count == 0
