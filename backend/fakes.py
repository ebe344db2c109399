"""Stand-ins for a requests.Session, used by the client tests."""

import json


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        if text is not None:
            self.content = text.encode()
        else:
            self.content = json.dumps(body).encode() if body is not None else b""

    def json(self):
        return json.loads(self.content)


class FakeSession:
    """Records every request and replies with queued responses."""

    def __init__(self, *responses, error=None, on_request=None):
        self.responses = list(responses)
        self.error = error
        self.on_request = on_request
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.on_request is not None:
            self.on_request()
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)
