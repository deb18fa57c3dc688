"""Test doubles shared by the PowerFlex client tests."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from urllib.parse import urlparse

ENDPOINT = "https://gateway.test"


class FakeResponse:
    """Minimal requests.Response look-alike"""

    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        if text is not None:
            self.text = text
        elif body is None:
            self.text = ""
        else:
            self.text = json.dumps(body)

    def json(self):
        return json.loads(self.text)


Answer = Union[FakeResponse, Exception, Callable[..., FakeResponse]]


class FakeHTTPSession:
    """Routes (method, path) to queued answers and records every call"""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Answer]] = {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def add(self, method: str, path: str, *answers: Answer) -> "FakeHTTPSession":
        self.routes.setdefault((method.upper(), path), []).extend(answers)
        return self

    def replace(self, method: str, path: str, *answers: Answer) -> "FakeHTTPSession":
        self.routes[(method.upper(), path)] = list(answers)
        return self

    def request(self, method, url, **kwargs):
        path = urlparse(url).path
        self.calls.append({"method": method, "url": url, "path": path, **kwargs})
        queue = self.routes.get((method.upper(), path))
        if not queue:
            raise AssertionError(f"unexpected request {method} {path}")
        # The last answer repeats
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, FakeResponse):
            return answer
        return answer(method, url, **kwargs)

    def calls_to(self, path: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["path"] == path]

    def close(self):
        self.closed = True


def login_ok(token: str = "TOKEN-1") -> FakeResponse:
    return FakeResponse(200, text=f'"{token}"')
