import json

import pytest

from errors import MalformedReply
from models import AuditReport
from reply_parser import extract_json, normalize


def test_bare_json_reply(report_text, full_report):
    report = normalize(report_text)

    assert report.score == 72
    assert [c.name for c in report.categories] == [c["name"] for c in full_report["categories"]]
    assert report.benchmark.overall_score == 58
    assert report.benchmark.metrics[0].score == "60/100"
    assert report.benchmark.metrics[0].missing_items[0].fix == "Publish one."
    assert report.model_dump(by_alias=True)["benchmark"]["metrics"][0]["implementedItems"] == ["Sitemap"]


def test_wrapped_reply_parses_to_same_report(report_text):
    fenced = f"Here is the audit you asked for:\n```json\n{report_text}\n```\nLet me know if you need more."

    assert normalize(fenced) == normalize(report_text)


def test_missing_categories_default_to_empty():
    report = normalize('{"score": 40, "summary": "Thin page"}')

    assert report.categories == []
    assert report.recommendations == []
    assert report.benchmark.metrics == []
    assert report.benchmark.overall_score is None
    assert report.label == "Poor"


def test_null_fields_take_defaults():
    report = normalize('{"score": 90, "label": null, "benchmark": {"overallScore": null, "verdict": null}}')

    assert report.label == "Excellent"
    assert report.benchmark.overall_score is None
    assert report.benchmark.verdict == ""


@pytest.mark.parametrize("text", ["The site looks fine to me.", "", "[1, 2, 3]", "}{"])
def test_unlocatable_object_is_malformed(text):
    with pytest.raises(MalformedReply):
        normalize(text)


def test_unbalanced_object_is_malformed():
    with pytest.raises(MalformedReply) as info:
        normalize('Result: {"score": 70, "summary": "cut off')

    assert "no JSON object" in info.value.reason


def test_unknown_category_name_fails_validation(full_report):
    full_report["categories"][0]["name"] = "Brand Vibes"

    with pytest.raises(MalformedReply) as info:
        normalize(json.dumps(full_report))

    assert "categories" in info.value.reason


def test_duplicate_metric_title_fails_validation(full_report):
    full_report["benchmark"]["metrics"][1]["title"] = "AI Discovery & Visibility"

    with pytest.raises(MalformedReply):
        normalize(json.dumps(full_report))


def test_out_of_range_score_fails_validation():
    with pytest.raises(MalformedReply):
        normalize('{"score": 140}')


def test_lenient_scalars():
    text = json.dumps(
        {
            "score": "81/100",
            "label": "good",
            "categories": [{"name": "seo visibility", "score": 66.6, "items": [{"status": "PASS"}]}],
            "benchmark": {"overallScore": 0, "metrics": [{"title": "Semantic Structure", "score": 45}]},
        }
    )

    report = normalize(text)

    assert report.score == 81
    assert report.label == "Good"
    assert report.categories[0].name == "SEO Visibility"
    assert report.categories[0].score == 67
    assert report.categories[0].items[0].status == "pass"
    assert report.benchmark.overall_score == 0
    assert report.benchmark.metrics[0].score == "45"


def test_repairs_smart_and_inner_quotes():
    text = '{"score": 55, "summary": “Hero says "Shop now" twice”}'

    assert extract_json(text) == {"score": 55, "summary": 'Hero says "Shop now" twice'}


def test_report_is_frozen(report_text):
    report = normalize(report_text)

    with pytest.raises(Exception):
        report.score = 1
    assert isinstance(report, AuditReport)


@pytest.mark.parametrize(
    "text",
    [
        '{"score": 1e999}',
        '{"score": NaN}',
        '{"score": 50, "categories": [{"name": "SEO Visibility", "score": -Infinity}]}',
        '{"score": 50, "benchmark": {"overallScore": Infinity}}',
        '{"score": "9' + "9" * 400 + '"}',
    ],
)
def test_non_finite_scores_are_malformed(text):
    with pytest.raises(MalformedReply) as info:
        normalize(text)

    assert "score" in info.value.reason.lower()


def test_item_without_status_defaults_to_warning():
    report = normalize('{"categories": [{"name": "SEO Visibility", "items": [{"label": "x", "message": "y"}]}]}')

    item = report.categories[0].items[0]
    assert item.status == "warning"
    assert item.label == "x"


def test_unknown_item_status_still_fails():
    with pytest.raises(MalformedReply):
        normalize('{"categories": [{"name": "SEO Visibility", "items": [{"status": "meh"}]}]}')


def test_array_wrapping_report_is_unwrapped(report_text):
    assert normalize(f"[{report_text}]") == normalize(report_text)


def test_array_of_scalars_reports_type():
    with pytest.raises(MalformedReply) as info:
        normalize("[1, 2, 3]")

    assert "list" in info.value.reason
