from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

import pytest

from pymixpanel._codec import decode_query_data
from pymixpanel.exceptions import MixpanelTransportError


@dataclass
class SentRequest:
    path: str
    query: dict[str, str]

    @property
    def payload(self) -> Any:
        return decode_query_data(self.query["data"])


@dataclass
class FakeTransport:
    """Records every GET and answers with a canned body or failure."""

    body: str = "1"
    status: int = 200
    failure: Exception | None = None
    requests: list[SentRequest] = field(default_factory=list)

    async def get(self, path: str, query: str) -> tuple[int, str]:
        parsed = {key: values[0] for key, values in parse_qs(query).items()}
        self.requests.append(SentRequest(path=path, query=parsed))
        if self.failure is not None:
            raise MixpanelTransportError(
                f"Request to {path} failed: {self.failure}",
                endpoint=path,
                cause=self.failure,
            )
        return self.status, self.body

    @property
    def last(self) -> SentRequest:
        return self.requests[-1]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
