from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

JOB_EVENT_OBJECT = "job-event"

# Event names that end a job's lifecycle
TERMINAL_EVENT_NAMES = frozenset({"success", "fail"})


class JobEvent(BaseModel):
    """A named, timestamped entry of a job's append-only server-side event log.

    Unknown fields are kept so callers see the full server payload.
    """

    model_config = ConfigDict(extra="allow")

    object: Literal["job-event"] = JOB_EVENT_OBJECT
    name: str
    createdAt: Union[int, float]

    @property
    def is_terminal(self) -> bool:
        return self.name in TERMINAL_EVENT_NAMES


class JobEventList(BaseModel):
    """Body of `GET jobs/{jobId}/events`; the server does not sort `data`."""

    data: list[JobEvent] = []
