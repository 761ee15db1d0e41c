"""Event store — append-only audit log.

Learn: Every state change made through the API also appends an immutable
event in the same transaction, e.g.
{type: "auth.login", stream_id: "student:<uuid>", data: {"email": ...}}.
If the business write is rolled back, so is the event.

read_stream() is the read side of the audit log: it returns one entity's
history in write order. No HTTP route exposes it; operators read it with
`fypms audit <stream_id>`.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fypms.db.models import Event


class EventStore:
    """Append-only event store backed by the main database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(
        self,
        stream_id: str,
        event_type: str,
        data: dict,
        metadata: dict | None = None,
    ) -> Event:
        """Append an event to a stream. Does not commit."""
        event = Event(
            stream_id=stream_id,
            type=event_type,
            data=data,
            meta=metadata or {},
        )
        self.db.add(event)
        await self.db.flush()  # get the auto-generated id
        return event

    async def read_stream(
        self,
        stream_id: str,
        after_id: int = 0,
        limit: int = 100,
    ) -> list[Event]:
        """Read one stream's events in append order.

        Pages with after_id: pass the last id seen to get the next batch.
        """
        result = await self.db.execute(
            select(Event)
            .where(Event.stream_id == stream_id, Event.id > after_id)
            .order_by(Event.id)
            .limit(limit)
        )
        return list(result.scalars().all())
