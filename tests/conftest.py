import json
from datetime import timedelta

import pytest
import requests

FULL_REPORT = {
    "score": 72,
    "label": "Good",
    "summary": "Solid storefront with thin structured data.",
    "categories": [
        {
            "name": "E-Commerce Fundamentals",
            "score": 80,
            "details": "Clear catalogue navigation.",
            "items": [{"label": "Cart", "status": "pass", "message": "Cart is reachable."}],
        },
        {
            "name": "Performance & Speed",
            "score": 65,
            "details": "Heavy scripts.",
            "items": [{"label": "Scripts", "status": "warning", "message": "12 external scripts."}],
        },
        {"name": "SEO Visibility", "score": 70, "details": "Title ok.", "items": []},
        {
            "name": "Conversion Optimization",
            "score": 74,
            "details": "Good CTAs.",
            "items": [{"label": "Reviews", "status": "fail", "message": "No reviews shown."}],
        },
    ],
    "benchmark": {
        "overallScore": 58,
        "verdict": "Behind AI-ready leaders.",
        "metrics": [
            {
                "title": "AI Discovery & Visibility",
                "score": "60/100",
                "status": "Competitive",
                "implementedItems": ["Sitemap"],
                "missingItems": [{"label": "llms.txt", "description": "No llms.txt.", "fix": "Publish one."}],
            },
            {"title": "Semantic Structure", "score": "55/100", "status": "Laggard"},
            {"title": "Conversational Readiness", "score": "50/100", "status": "Laggard"},
            {"title": "AI Technical Hygiene", "score": "67/100", "status": "Competitive"},
        ],
    },
    "recommendations": ["Add Product schema.", "Trim third-party scripts."],
}


@pytest.fixture
def full_report() -> dict:
    return json.loads(json.dumps(FULL_REPORT))


@pytest.fixture
def report_text(full_report) -> str:
    return json.dumps(full_report)


def make_response(
    body: str | bytes = "", status: int = 200, reason: str = "OK", content_type: str = "text/html; charset=utf-8"
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response._content = body if isinstance(body, bytes) else body.encode("utf-8")
    response.headers["Content-Type"] = content_type
    response.encoding = requests.utils.get_encoding_from_headers(response.headers)
    response.elapsed = timedelta(milliseconds=5)
    return response


class StubVariant:
    """Model variant double: returns its reply or raises it when it is an exception."""

    def __init__(self, name: str, reply="", calls: list | None = None) -> None:
        self.name = name
        self.reply = reply
        self.calls = calls if calls is not None else []

    def generate(self, prompt: str) -> str:
        self.calls.append(self.name)
        if isinstance(self.reply, BaseException):
            raise self.reply
        return self.reply
