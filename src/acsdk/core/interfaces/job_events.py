from typing import List, Protocol

from acsdk.core.models.job_event import JobEvent


class JobEventsPort(Protocol):
    """Source of a job's event log, read from a given offset.

    Implementations raise on failure; an exception's `status` attribute (if
    any) decides whether the poller retries.
    """

    async def get_job_events(self, job_id: str, offset: int = 0) -> List[JobEvent]:  # pragma: no cover - protocol
        ...
