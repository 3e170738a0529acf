"""PubMed Central E-utilities client."""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urljoin

import requests

from .exceptions import InvalidInputError, UpstreamUnavailableError
from .models import PmcSummary
from .sdg import SDG_QUERIES

DEFAULT_EUTILS_BASE_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"

LOGGER = logging.getLogger(__name__)


class PmcClient:
    """Thin wrapper for the PMC full-text fetch and search endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_EUTILS_BASE_URL,
        timeout_sec: int = 30,
        api_key: str | None = None,
        trust_env: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.api_key = api_key
        self.session = session or requests.Session()
        self.session.trust_env = trust_env

    def _build_url(self, path: str) -> str:
        return urljoin(f"{self.base_url}/", path.lstrip("/"))

    def _get(self, path: str, params: dict[str, Any], context: str) -> requests.Response:
        if self.api_key:
            params = {**params, "api_key": self.api_key}

        try:
            response = self.session.get(
                self._build_url(path),
                params=params,
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            raise UpstreamUnavailableError(f"{context}: {exc}") from exc

        if not response.ok:
            raise UpstreamUnavailableError(
                f"{context}: PMC HTTP error {response.status_code} on {path}"
            )
        return response

    def _get_json(self, path: str, params: dict[str, Any], context: str) -> dict[str, Any]:
        response = self._get(path, {**params, "retmode": "json"}, context)
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            raise UpstreamUnavailableError(f"{context}: non-JSON response on {path}") from exc
        if not isinstance(payload, dict):
            raise UpstreamUnavailableError(f"{context}: unexpected response shape on {path}")
        return payload

    def fetch_full_text_xml(self, numeric_id: str) -> str:
        """Fetch the full-text article XML for a numeric PMC id."""

        LOGGER.debug("Fetching PMC full text for id=%s", numeric_id)
        response = self._get(
            "/efetch.fcgi",
            {"db": "pmc", "id": numeric_id, "rettype": "xml"},
            context="Failed to fetch paper from PMC",
        )
        return response.text

    def search_by_sdg(
        self,
        sdg: int,
        keywords: str = "",
        max_results: int = 10,
    ) -> list[PmcSummary]:
        """Search open-access PMC articles related to one SDG, newest first."""

        if sdg not in SDG_QUERIES:
            raise InvalidInputError("Provide a valid SDG number (1-17).")

        keywords = keywords.strip()
        keyword_clause = f" AND ({keywords})" if keywords else ""
        term = f"{SDG_QUERIES[sdg]}{keyword_clause} AND open access[filter]"

        search = self._get_json(
            "/esearch.fcgi",
            {"db": "pmc", "term": term, "retmax": max_results, "sort": "date"},
            context="PMC search failed",
        )
        ids = [str(item) for item in (search.get("esearchresult") or {}).get("idlist") or []]
        LOGGER.info("PMC search for SDG %s returned %d ids", sdg, len(ids))
        if not ids:
            return []

        summary = self._get_json(
            "/esummary.fcgi",
            {"db": "pmc", "id": ",".join(ids)},
            context="PMC summary failed",
        )
        records = summary.get("result") or {}

        papers: list[PmcSummary] = []
        for pmc_id in ids:
            record = records.get(pmc_id)
            if not isinstance(record, dict):
                continue
            papers.append(self._to_summary(pmc_id, record))
        return papers

    def _to_summary(self, pmc_id: str, record: dict[str, Any]) -> PmcSummary:
        names = [
            str(author.get("name"))
            for author in record.get("authors") or []
            if isinstance(author, dict) and author.get("name")
        ]
        return PmcSummary(
            pmcid=f"PMC{pmc_id}",
            title=str(record.get("title") or ""),
            authors=", ".join(names) or str(record.get("sortfirstauthor") or "") or "Unknown",
            journal=str(record.get("fulljournalname") or "") or "Unknown",
            date=str(record.get("pubdate") or "") or "Unknown",
        )
