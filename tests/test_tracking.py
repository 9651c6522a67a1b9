from __future__ import annotations

import time

import pytest

from pymixpanel import MixpanelClient

from .conftest import FakeTransport


@pytest.mark.asyncio
async def test_track_fills_token_and_time(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)
    before = int(time.time())

    result = await client.track("Signed Up", {"plan": "pro"})

    assert result.ok
    sent = transport.last
    assert sent.path == "/track"
    assert sent.payload["event"] == "Signed Up"
    props = sent.payload["properties"]
    assert props["plan"] == "pro"
    assert props["token"] == "tok-1"
    assert before <= props["time"] <= int(time.time()) + 1


@pytest.mark.asyncio
async def test_track_without_properties(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)

    await client.track("Opened")

    assert set(transport.last.payload["properties"]) == {"token", "time"}


@pytest.mark.asyncio
async def test_track_preserves_caller_token_and_time(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)

    await client.track("Imported", {"token": "other", "time": 1234567890})

    props = transport.last.payload["properties"]
    assert props["token"] == "other"
    assert props["time"] == 1234567890


@pytest.mark.asyncio
async def test_track_does_not_mutate_caller_properties(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)
    client.identify("u1")
    props = {"plan": "pro"}

    await client.track("Signed Up", props)

    assert props == {"plan": "pro"}


@pytest.mark.asyncio
async def test_identify_is_sticky_and_wins(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)
    client.identify("u1")

    await client.track("first")
    await client.track("second", {"distinct_id": "someone-else"})

    assert [r.payload["properties"]["distinct_id"] for r in transport.requests] == ["u1", "u1"]

    client.identify("u2")
    await client.track("third")
    assert transport.last.payload["properties"]["distinct_id"] == "u2"


@pytest.mark.asyncio
async def test_caller_distinct_id_kept_when_not_identified(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)

    await client.track("anon", {"distinct_id": "from-caller"})

    assert transport.last.payload["properties"]["distinct_id"] == "from-caller"


@pytest.mark.asyncio
async def test_name_tag_is_sticky(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)

    await client.track("before")
    client.set_name_tag("Bob")
    await client.track("after")
    await client.track("again", {"mp_name_tag": "Alice"})

    assert "mp_name_tag" not in transport.requests[0].payload["properties"]
    assert transport.requests[1].payload["properties"]["mp_name_tag"] == "Bob"
    assert transport.requests[2].payload["properties"]["mp_name_tag"] == "Bob"


@pytest.mark.asyncio
async def test_engage_fills_only_token(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)

    result = await client.engage({})

    assert result.ok
    assert transport.last.path == "/engage"
    assert transport.last.payload == {"$token": "tok-1"}


@pytest.mark.asyncio
async def test_engage_sends_mapping_unwrapped(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)
    client.identify("ignored-for-engage")

    await client.engage({"$distinct_id": "u1", "$set": {"name": "Bob"}, "$token": "explicit"})

    assert transport.last.payload == {
        "$distinct_id": "u1",
        "$set": {"name": "Bob"},
        "$token": "explicit",
    }


@pytest.mark.asyncio
async def test_track_funnel(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)

    await client.track_funnel("signup", 2, "confirmed", {"step": 99, "source": "ad"})

    payload = transport.last.payload
    assert payload["event"] == "mp_funnel"
    props = payload["properties"]
    assert props["funnel"] == "signup"
    assert props["step"] == 2
    assert props["goal"] == "confirmed"
    assert props["source"] == "ad"
    assert props["token"] == "tok-1"


@pytest.mark.asyncio
async def test_query_fields(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)

    await client.track("plain")

    assert set(transport.last.query) == {"data", "ip"}
    assert transport.last.query["ip"] == "0"


@pytest.mark.asyncio
async def test_test_mode_adds_test_flag(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)

    client.set_config({"test": True})
    await client.track("one")
    await client.engage({"$distinct_id": "u1"})

    assert all(r.query["test"] == "1" for r in transport.requests)

    client.set_config({"test": False})
    await client.track("two")
    assert "test" not in transport.last.query


@pytest.mark.asyncio
async def test_request_captures_state_at_call_time(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)
    client.identify("u1")

    task = client.track("queued")
    client.identify("u2")
    client.set_config(test=True)
    await task

    assert transport.last.payload["properties"]["distinct_id"] == "u1"
    assert "test" not in transport.last.query


@pytest.mark.asyncio
async def test_non_ascii_properties_round_trip(transport: FakeTransport) -> None:
    client = MixpanelClient("tok-1", transport=transport)

    await client.track("Größe", {"city": "Zürich"})

    assert transport.last.payload["event"] == "Größe"
    assert transport.last.payload["properties"]["city"] == "Zürich"
