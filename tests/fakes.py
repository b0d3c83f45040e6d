import json as jsonlib
from urllib.parse import urlsplit

import requests

API_BASE = "http://storefront.test"


class FakeResponse:
    def __init__(self, status_code, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload

    def iter_content(self, chunk_size=1):
        if self._payload is not None:
            body = jsonlib.dumps(self._payload).encode("utf-8")
        else:
            body = (self.text or "").encode("utf-8")
        for start in range(0, len(body), chunk_size):
            yield body[start:start + chunk_size]

    def close(self):
        self.closed = True

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FlaskClientSession:
    """Routes gateway calls into a Flask test client."""

    def __init__(self, test_client):
        self.test_client = test_client
        self.calls = []

    def request(self, method, url, json=None, timeout=None, stream=False):
        path = urlsplit(url).path
        self.calls.append({"method": method, "path": path, "json": json, "timeout": timeout})
        response = self.test_client.open(path, method=method, json=json)
        return FakeResponse(response.status_code, response.get_json(silent=True))


class UnreachableSession:
    def __init__(self, exc_type=requests.ConnectionError):
        self.exc_type = exc_type
        self.calls = []

    def request(self, method, url, json=None, timeout=None, stream=False):
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        raise self.exc_type(f"cannot reach {url}")

    def get(self, url, **kwargs):
        self.calls.append({"method": "GET", "url": url, **kwargs})
        raise self.exc_type(f"cannot reach {url}")


class CannedSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def request(self, method, url, json=None, timeout=None, stream=False):
        self.calls.append({"method": method, "url": url, "json": json, "timeout": timeout})
        return self.response

    def get(self, url, **kwargs):
        self.calls.append({"method": "GET", "url": url, **kwargs})
        return self.response
