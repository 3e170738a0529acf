import json

import pytest
from fastapi.testclient import TestClient

from paperinsights.api import create_app
from paperinsights.exceptions import UpstreamUnavailableError
from paperinsights.models import PdfUpload, PmcSummary
from paperinsights.pipeline import PaperInsightsPipeline

COMPLETION = json.dumps(
    {
        "authors": None,
        "date_published": None,
        "journal": None,
        "location_constraint": "Dhaka, Bangladesh",
        "sdg_primary": 13,
        "sdg_secondary": [11, 13],
        "summary": "Flood early warnings save lives.",
        "lesson": {
            "title": "Warnings work",
            "main_summary": "SMS alerts cut flood deaths.",
            "why_it_matters": "Floods are getting worse.",
        },
        "challenges": [
            {"title": "Sign up", "description": "Join alerts.", "location": "Dhaka, Bangladesh"},
            {"title": "Plan", "description": "Make a plan.", "location": "Anywhere"},
            {"title": "Share", "description": "Tell neighbours.", "location": "Anywhere"},
        ],
    }
)


class FakeExtractor:
    def __init__(self):
        self.calls = []

    def extract(self, prompt, payload=None):
        self.calls.append({"prompt": prompt, "payload": payload})
        return COMPLETION


class FakePmcClient:
    def __init__(self, xml="", papers=None, error=None):
        self.xml = xml
        self.papers = papers or []
        self.error = error
        self.fetch_calls = []
        self.search_calls = []

    def fetch_full_text_xml(self, numeric_id):
        self.fetch_calls.append(numeric_id)
        if self.error is not None:
            raise self.error
        return self.xml

    def search_by_sdg(self, sdg, keywords="", max_results=10):
        self.search_calls.append((sdg, keywords, max_results))
        return self.papers


@pytest.fixture
def fakes():
    extractor = FakeExtractor()
    pmc_client = FakePmcClient(xml="<body>" + "flood " * 40 + "</body>")
    pipeline = PaperInsightsPipeline(extractor=extractor, pmc_client=pmc_client)
    client = TestClient(create_app(pipeline=pipeline))
    return client, extractor, pmc_client


def test_generate_with_text(fakes):
    client, extractor, _ = fakes

    response = client.post("/api/generate", data={"text": "paper body", "title": "Floods"})

    assert response.status_code == 200
    assert response.json()["sdg_secondary"] == [11, 13]
    assert "Title: Floods\n" in extractor.calls[0]["prompt"]


def test_generate_with_pdf(fakes):
    client, extractor, _ = fakes

    response = client.post(
        "/api/generate",
        files={"file": ("floods.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert response.status_code == 200
    assert extractor.calls[0]["payload"].content == b"%PDF-1.4"


def test_generate_rejects_non_pdf(fakes):
    client, extractor, _ = fakes

    response = client.post(
        "/api/generate",
        files={"file": ("chart.png", b"\x89PNG", "image/png")},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Only PDF files are accepted."}
    assert extractor.calls == []


def test_generate_rejects_unparseable_form_field(fakes):
    client, extractor, _ = fakes

    response = client.post("/api/generate", data={"file": "not-a-file"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body - expected form data."}
    assert extractor.calls == []


def test_generate_reads_at_most_one_byte_past_the_pdf_limit(fakes, monkeypatch):
    client, extractor, _ = fakes
    monkeypatch.setattr("paperinsights.api.MAX_PDF_BYTES", 4)
    monkeypatch.setattr("paperinsights.sources.MAX_PDF_BYTES", 4)
    read_sizes = []

    def recording_upload(**kwargs):
        read_sizes.append(len(kwargs["data"]))
        return PdfUpload(**kwargs)

    monkeypatch.setattr("paperinsights.api.PdfUpload", recording_upload)

    response = client.post(
        "/api/generate",
        files={"file": ("big.pdf", b"%PDF" + b"\0" * 1024, "application/pdf")},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "PDF must be under 20 MB."}
    assert read_sizes == [5]
    assert extractor.calls == []


def test_generate_without_content_is_bad_request(fakes):
    client, extractor, _ = fakes

    response = client.post("/api/generate", data={"text": "   "})

    assert response.status_code == 400
    assert "Please provide a PDF file" in response.json()["error"]
    assert extractor.calls == []


def test_fetch_pmc_end_to_end(fakes):
    client, _, pmc_client = fakes

    response = client.get("/api/fetch-pmc", params={"pmcid": "PMC7654321"})

    assert response.status_code == 200
    body = response.json()
    assert 1 <= body["sdg_primary"] <= 17
    assert len(body["challenges"]) == 3
    assert pmc_client.fetch_calls == ["7654321"]


@pytest.mark.parametrize(
    "params", [{}, {"pmcid": "12345"}, {"pmcid": "PMCabc"}, {"pmcid": "PMC\u0661\u0662"}]
)
def test_fetch_pmc_rejects_bad_ids(fakes, params):
    client, _, pmc_client = fakes

    response = client.get("/api/fetch-pmc", params=params)

    assert response.status_code == 400
    assert pmc_client.fetch_calls == []


def test_fetch_pmc_upstream_failure_is_bad_gateway():
    pmc_client = FakePmcClient(error=UpstreamUnavailableError("Failed to fetch paper from PMC"))
    pipeline = PaperInsightsPipeline(extractor=FakeExtractor(), pmc_client=pmc_client)
    client = TestClient(create_app(pipeline=pipeline))

    response = client.get("/api/fetch-pmc", params={"pmcid": "PMC1"})

    assert response.status_code == 502
    assert response.json()["error"].startswith("Failed to fetch paper from PMC")


def test_fetch_pmc_insufficient_content():
    pmc_client = FakePmcClient(xml="<body>tiny</body>")
    pipeline = PaperInsightsPipeline(extractor=FakeExtractor(), pmc_client=pmc_client)
    client = TestClient(create_app(pipeline=pipeline))

    response = client.get("/api/fetch-pmc", params={"pmcid": "PMC1"})

    assert response.status_code == 422
    assert "open-access full text" in response.json()["error"]


def test_search_pmc_returns_papers(fakes):
    client, _, pmc_client = fakes
    pmc_client.papers = [
        PmcSummary(pmcid="PMC1", title="T", authors="A", journal="J", date="2024")
    ]

    response = client.get("/api/search-pmc", params={"sdg": "13", "keywords": "flood"})

    assert response.status_code == 200
    assert response.json() == {
        "papers": [
            {"pmcid": "PMC1", "title": "T", "authors": "A", "journal": "J", "date": "2024"}
        ]
    }
    assert pmc_client.search_calls == [(13, "flood", 10)]


def test_search_pmc_rejects_non_numeric_sdg(fakes):
    client, _, _ = fakes

    response = client.get("/api/search-pmc", params={"sdg": "water"})

    assert response.status_code == 400


def test_missing_credential_reports_misconfiguration(tmp_path, monkeypatch):
    for key in ("OPENAI_API_KEY", "API_KEY"):
        monkeypatch.delenv(key, raising=False)
    pmc_client = FakePmcClient()
    client = TestClient(create_app(pmc_client=pmc_client, dotenv_path=tmp_path / "missing.env"))

    response = client.get("/api/fetch-pmc", params={"pmcid": "PMC1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Server misconfiguration: missing OPENAI_API_KEY"}
    assert pmc_client.fetch_calls == []
