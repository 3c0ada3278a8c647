"""Frame assembly from processed queries."""

from __future__ import annotations

from collections.abc import Sequence

from ..models.frame import DataPoint, DataResponse, Frame, FrameMeta, Notice
from ..models.processed import ProcessedQuery
from .channels import StreamChannelRegistry

NO_RESPONSE_MESSAGE = "No response received from PI Web API"


class FrameAssembler:
    """Builds one frame per processed query, in submission order.

    A failed segment still produces a frame (empty, with an error notice) so
    the host can show a per-query error without failing the request.
    """

    def __init__(self, channels: StreamChannelRegistry) -> None:
        self._channels = channels

    async def assemble(self, ref_id: str, processed: Sequence[ProcessedQuery]) -> DataResponse:
        frames = [await self.build_frame(ref_id, q) for q in processed]
        return DataResponse(frames=frames)

    async def build_frame(self, ref_id: str, query: ProcessedQuery) -> Frame:
        points: list[DataPoint] = []
        notices: list[Notice] = []
        units = ""

        if query.error is not None:
            notices.append(Notice(text=query.error))
        elif query.response is None:
            notices.append(Notice(text=NO_RESPONSE_MESSAGE))
        else:
            content = query.response.content
            units = content.units
            points = [
                DataPoint.from_item(item, units, digital_states=query.digital_states)
                for item in content.items
            ]
            notices.extend(Notice(text=message) for message in content.errors)

        channel = None
        if query.streamable and query.web_id:
            channel = await self._channels.register(query.uid, query.web_id, query.interval_ns)

        return Frame(
            name=query.label,
            ref_id=ref_id,
            points=points,
            notices=notices,
            meta=FrameMeta(
                executed_query_string=query.executed_query_string,
                channel=channel,
                units=units,
                web_id=query.web_id,
                point_type=query.point_type,
                path=query.full_target_path,
            ),
        )
