"""End-to-end tests of the query pipeline against an in-memory transport."""

from __future__ import annotations

import pytest

from helpers import (
    DATASOURCE_UID,
    FakeTransport,
    echo_batch,
    make_query,
    raw_query,
    summary_content,
    webid_of,
)
from piweb.datasource import PIWebAPIDatasource
from piweb.datasource.core import TransportError
from piweb.datasource.runtime.frames import NO_RESPONSE_MESSAGE

WEB_IDS = {
    "Base|Seg1": "W1",
    "Base|Seg2": "W2",
    "\\\\PISRV\\sinusoid": "P1",
}


class TestQueryData:
    @pytest.mark.asyncio
    async def test_single_segment(self, settings):
        """One resolved segment yields one frame with the batch value."""
        transport = FakeTransport(web_ids=WEB_IDS)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([make_query("A", target="Base;Seg1")])

        (frame,) = result["A"].frames
        assert frame.name == "Seg1"
        assert frame.values == [12.3]
        assert frame.points[0].units == "psi"
        assert frame.points[0].good is True
        assert frame.meta.web_id == "W1"
        assert frame.meta.executed_query_string.startswith(
            "https://pi.example.com/piwebapi/streamsets/plot?"
        )
        assert frame.meta.executed_query_string.endswith("&webid=W1")
        assert not frame.has_errors

    @pytest.mark.asyncio
    async def test_raw_mappings_accepted(self, settings):
        transport = FakeTransport(web_ids=WEB_IDS)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([raw_query("A", target="Base;Seg1")])

        assert result["A"].frames[0].values == [12.3]

    @pytest.mark.asyncio
    async def test_frames_follow_target_order(self, settings):
        bodies = []

        def handler(body):
            bodies.append(body)
            return dict(reversed(list(echo_batch(body).items())))

        transport = FakeTransport(web_ids=WEB_IDS, batch_handler=handler)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([make_query("A", target="Base;Seg1;Seg2")])

        assert [f.name for f in result["A"].frames] == ["Seg1", "Seg2"]
        assert [f.meta.web_id for f in result["A"].frames] == ["W1", "W2"]
        assert [webid_of(r["Resource"]) for r in bodies[0].values()] == ["W1", "W2"]

    @pytest.mark.asyncio
    async def test_point_targets(self, settings):
        transport = FakeTransport(web_ids=WEB_IDS)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data(
                [make_query("A", target="\\\\PISRV;sinusoid", isPiPoint=True)]
            )

        assert result["A"].frames[0].meta.web_id == "P1"
        transport.get.assert_awaited_once_with(
            "/points", params={"path": "\\\\PISRV\\sinusoid"}
        )

    @pytest.mark.asyncio
    async def test_one_batch_per_ref_id(self, settings):
        transport = FakeTransport(web_ids=WEB_IDS)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data(
                [make_query("A", target="Base;Seg1"), make_query("B", target="Base;Seg1;Seg2")]
            )

        assert transport.post.await_count == 2
        assert len(result["A"].frames) == 1
        assert len(result["B"].frames) == 2

    @pytest.mark.asyncio
    async def test_summary_query(self, settings):
        """Summary values come back wrapped per type and still yield data."""

        def handler(body):
            return {
                key: {
                    "Status": 200,
                    "Content": summary_content(
                        webid_of(request["Resource"]), "psi", {"Average": 4.2, "Maximum": 9.0}
                    ),
                }
                for key, request in body.items()
            }

        transport = FakeTransport(web_ids=WEB_IDS, batch_handler=handler)
        summary = {
            "basis": "TimeWeighted",
            "types": [
                {"label": "Average", "value": {"value": "Average"}},
                {"label": "Maximum", "value": {"value": "Maximum"}},
            ],
        }

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([make_query("A", target="Base;Seg1", summary=summary)])

        frame = result["A"].frames[0]
        assert "/streamsets/summary?" in frame.meta.executed_query_string
        assert not frame.has_errors
        assert frame.values == [4.2, 9.0]
        assert [p.summary_type for p in frame.points] == ["Average", "Maximum"]
        assert frame.points[0].units == "psi"

    @pytest.mark.asyncio
    async def test_digital_states_and_point_type(self, settings):
        def handler(body):
            state = {"Name": "Active", "Value": 1, "IsSystem": False}
            item = {"Timestamp": "2024-01-01T00:00:00Z", "Value": state}
            content = {"Items": [{"WebId": "P1", "Items": [item]}]}
            return {key: {"Status": 200, "Content": content} for key in body}

        transport = FakeTransport(batch_handler=handler)
        transport.get.side_effect = lambda path, params=None: {
            "WebId": "P1",
            "PointType": "Digital",
        }

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data(
                [
                    make_query("A", target="\\\\PISRV;pump", isPiPoint=True),
                    make_query(
                        "B",
                        target="\\\\PISRV;pump",
                        isPiPoint=True,
                        digitalStates={"enable": True},
                    ),
                ]
            )

        assert result["A"].frames[0].values == [1]
        assert result["B"].frames[0].values == ["Active"]
        assert result["B"].frames[0].meta.point_type == "Digital"

    @pytest.mark.asyncio
    async def test_webid_cache_reused_across_calls(self, settings):
        transport = FakeTransport(web_ids=WEB_IDS)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            await ds.query_data([make_query("A", target="Base;Seg1")])
            await ds.query_data([make_query("A", target="Base;Seg1")])

        assert transport.get.await_count == 1
        assert transport.post.await_count == 2


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_unresolved_sibling(self, settings):
        """A 404 on one segment leaves its siblings untouched."""
        bodies = []

        def handler(body):
            bodies.append(body)
            return echo_batch(body)

        transport = FakeTransport(web_ids=WEB_IDS, batch_handler=handler)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([make_query("A", target="Base;Seg1;Missing;Seg2")])

        frames = result["A"].frames
        assert [f.name for f in frames] == ["Seg1", "Missing", "Seg2"]
        assert frames[0].values == [12.3]
        assert frames[2].values == [12.3]
        assert len(frames[1]) == 0
        assert frames[1].has_errors
        assert "Base|Missing" in frames[1].notices[0].text
        # Only resolved segments are sent, indexed contiguously
        assert list(bodies[0]) == ["0", "1"]

    @pytest.mark.asyncio
    async def test_nothing_resolved_makes_no_batch_call(self, settings):
        transport = FakeTransport()

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([make_query("A", target="Base;Seg1")])

        transport.post.assert_not_awaited()
        assert result["A"].frames[0].has_errors

    @pytest.mark.asyncio
    async def test_batch_failure_isolated_to_ref_id(self, settings):
        def handler(body):
            if webid_of(body["0"]["Resource"]) == "W2":
                raise TransportError("POST /batch returned HTTP 500", status_code=500)
            return echo_batch(body)

        transport = FakeTransport(web_ids=WEB_IDS, batch_handler=handler)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data(
                [make_query("A", target="Base;Seg1"), make_query("B", target="Base;Seg2")]
            )

        assert result["A"].frames[0].values == [12.3]
        failed = result["B"].frames[0]
        assert len(failed) == 0
        assert "HTTP 500" in failed.notices[0].text

    @pytest.mark.asyncio
    async def test_error_sub_response(self, settings):
        def handler(body):
            return {"0": {"Status": 404, "Content": {"Errors": ["Unknown WebId"]}}}

        transport = FakeTransport(web_ids=WEB_IDS, batch_handler=handler)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([make_query("A", target="Base;Seg1")])

        frame = result["A"].frames[0]
        assert len(frame) == 0
        assert [n.text for n in frame.notices] == ["Unknown WebId"]

    @pytest.mark.asyncio
    async def test_missing_sub_response(self, settings):
        transport = FakeTransport(web_ids=WEB_IDS, batch_handler=lambda body: {})

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([make_query("A", target="Base;Seg1")])

        assert [n.text for n in result["A"].frames[0].notices] == [NO_RESPONSE_MESSAGE]

    @pytest.mark.asyncio
    async def test_undecodable_query(self, settings):
        transport = FakeTransport(web_ids=WEB_IDS)
        broken = {"RefID": "Z", "MaxDataPoints": "many", "JSON": {"target": "Base;Seg1"}}

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([broken, make_query("A", target="Base;Seg1")])

        assert "Z" in result
        assert result["Z"].frames == []
        assert result["Z"].error.startswith("Invalid query")
        assert result["A"].frames[0].values == [12.3]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("entry", [None, "A", ["RefID", "A"]])
    async def test_non_object_query(self, settings, entry):
        transport = FakeTransport(web_ids=WEB_IDS)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data([entry, make_query("A", target="Base;Seg1")])

        assert result[""].frames == []
        assert "expected an object" in result[""].error
        assert result["A"].frames[0].values == [12.3]


class TestStreaming:
    @pytest.mark.asyncio
    async def test_channel_minted_for_streamable_query(self, settings):
        transport = FakeTransport(web_ids=WEB_IDS)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data(
                [make_query("A", target="Base;Seg1", EnableStreaming={"enable": True})]
            )
            channel = result["A"].frames[0].meta.channel
            construct = await ds.channels.get(channel)

        assert channel.startswith(f"ds/{DATASOURCE_UID}/")
        assert construct.web_id == "W1"
        assert construct.interval_ns == 60_000_000_000

    @pytest.mark.asyncio
    async def test_uid_override(self, settings):
        transport = FakeTransport(web_ids=WEB_IDS)

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data(
                [make_query("A", target="Base;Seg1", EnableStreaming={"enable": True})],
                datasource_uid="other",
            )

        assert result["A"].frames[0].meta.channel.startswith("ds/other/")

    @pytest.mark.asyncio
    async def test_expression_never_streams(self, settings):
        transport = FakeTransport(web_ids={"Base": "E1"})

        async with PIWebAPIDatasource(settings, transport=transport) as ds:
            result = await ds.query_data(
                [
                    make_query(
                        "A",
                        target="Base",
                        expression="'sinusoid' * 2",
                        EnableStreaming={"enable": True},
                    )
                ]
            )

        frame = result["A"].frames[0]
        assert frame.meta.channel is None
        assert "/calculation/intervals?" in frame.meta.executed_query_string
        assert len(ds.channels) == 0


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_dispose_releases_state(self, settings):
        transport = FakeTransport(web_ids=WEB_IDS)
        ds = PIWebAPIDatasource(settings, transport=transport)

        await ds.query_data([make_query("A", target="Base;Seg1", EnableStreaming={"enable": True})])
        assert ds.eviction.running
        assert len(ds.channels) == 1
        assert len(ds.cache) == 1

        await ds.dispose()

        assert not ds.eviction.running
        assert len(ds.channels) == 0
        assert len(ds.cache) == 0
        transport.close.assert_awaited_once()
