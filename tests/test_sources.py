import pytest

from paperinsights.exceptions import (
    InsufficientContentError,
    InvalidInputError,
    UpstreamUnavailableError,
)
from paperinsights.models import AnalysisRequest, PayloadKind, PdfUpload
from paperinsights.sources import (
    MAX_PDF_BYTES,
    MAX_REMOTE_TEXT_CHARS,
    TRUNCATION_MARKER,
    PastedTextSource,
    PdfSource,
    PmcRecordSource,
    build_source,
)


class FakePmcClient:
    def __init__(self, xml="", error=None):
        self.xml = xml
        self.error = error
        self.calls = []

    def fetch_full_text_xml(self, numeric_id):
        self.calls.append(numeric_id)
        if self.error is not None:
            raise self.error
        return self.xml


def _body_xml(text):
    return f"<article><front>Header</front><body><p>{text}</p></body></article>"


def test_pdf_at_size_limit_is_accepted():
    upload = PdfUpload(data=b"\0" * MAX_PDF_BYTES, content_type="application/pdf")

    payload = PdfSource(upload).acquire()

    assert payload.kind is PayloadKind.BINARY
    assert payload.content is upload.data
    assert payload.media_type == "application/pdf"


def test_pdf_over_size_limit_is_rejected():
    upload = PdfUpload(data=b"\0" * (MAX_PDF_BYTES + 1), content_type="application/pdf")

    with pytest.raises(InvalidInputError, match="under 20 MB"):
        PdfSource(upload).acquire()


def test_non_pdf_content_type_is_rejected_regardless_of_size():
    upload = PdfUpload(data=b"png", content_type="image/png", filename="figure.png")

    with pytest.raises(InvalidInputError, match="Only PDF files"):
        PdfSource(upload).acquire()


def test_pasted_text_is_trimmed():
    payload = PastedTextSource("  some paper text \n").acquire()

    assert payload.kind is PayloadKind.TEXT
    assert payload.content == "some paper text"


def test_pasted_whitespace_is_rejected():
    with pytest.raises(InvalidInputError):
        PastedTextSource("   \n\t").acquire()


@pytest.mark.parametrize(
    "pmcid", ["12345", "pmc123", "PMC", "PMC12a", "PMC123\n", " PMC123", "PMC\u0661\u0662\u0663"]
)
def test_malformed_pmcid_fails_without_network_call(pmcid):
    client = FakePmcClient(xml=_body_xml("x" * 500))

    with pytest.raises(InvalidInputError):
        PmcRecordSource(pmcid=pmcid, client=client).acquire()

    assert client.calls == []


def test_pmc_fetch_uses_numeric_suffix():
    client = FakePmcClient(xml=_body_xml("word " * 50))

    payload = PmcRecordSource(pmcid="PMC7654321", client=client).acquire()

    assert client.calls == ["7654321"]
    assert payload.kind is PayloadKind.TEXT
    assert "Header" not in payload.content


def test_short_pmc_text_is_insufficient_content():
    client = FakePmcClient(xml=_body_xml("a" * 40))

    with pytest.raises(InsufficientContentError, match="open-access full text"):
        PmcRecordSource(pmcid="PMC123", client=client).acquire()


def test_text_at_minimum_length_is_accepted():
    client = FakePmcClient(xml=_body_xml("a" * 100))

    payload = PmcRecordSource(pmcid="PMC123", client=client).acquire()

    assert payload.content == "a" * 100


def test_long_pmc_text_is_truncated_before_marker():
    client = FakePmcClient(xml=_body_xml("b" * 150_000))

    payload = PmcRecordSource(pmcid="PMC1", client=client).acquire()

    assert payload.content == "b" * MAX_REMOTE_TEXT_CHARS + TRUNCATION_MARKER
    assert payload.content.endswith("\n\n[Text truncated]")


def test_text_at_maximum_length_is_not_truncated():
    client = FakePmcClient(xml=_body_xml("c" * MAX_REMOTE_TEXT_CHARS))

    payload = PmcRecordSource(pmcid="PMC1", client=client).acquire()

    assert payload.content == "c" * MAX_REMOTE_TEXT_CHARS


def test_upstream_errors_propagate():
    client = FakePmcClient(error=UpstreamUnavailableError("Failed to fetch paper from PMC"))

    with pytest.raises(UpstreamUnavailableError):
        PmcRecordSource(pmcid="PMC1", client=client).acquire()


def test_build_source_selects_variant_by_mode():
    client = FakePmcClient()
    pdf = PdfUpload(data=b"%PDF", content_type="application/pdf")

    assert isinstance(build_source(AnalysisRequest.from_inputs(pdf=pdf), client), PdfSource)
    assert isinstance(build_source(AnalysisRequest.from_inputs(text="t"), client), PastedTextSource)
    source = build_source(AnalysisRequest.from_inputs(pmcid="PMC1"), client)
    assert isinstance(source, PmcRecordSource)
    assert source.client is client
