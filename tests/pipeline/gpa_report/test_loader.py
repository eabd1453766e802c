"""Tests for the CSV loader: local reads, HTTP downloads and error mapping.

HTTP is exercised with fake aiohttp-style sessions; no network is used.
"""

import asyncio
from pathlib import Path

import aiohttp
import pandas as pd
import pytest

from src.exceptions import MalformedInputError, SourceUnavailableError
from src.pipeline.gpa_report import loader


class FakeResponse:
    def __init__(self, status: int, body: bytes = b"", enter_error=None):
        self.status = status
        self._body = body
        self._enter_error = enter_error

    async def read(self):
        return self._body

    async def __aenter__(self):
        if self._enter_error is not None:
            raise self._enter_error
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, response: FakeResponse):
        self._response = response
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self._response


CSV_TEXT = "Period,Ethnicity,GPA\n20188,A,3.0-3.4\n20191,,Unknown\n"


def test_fetch_local_path_reads_strings(write_csv):
    path = write_csv(CSV_TEXT)
    table = loader.fetch(path)
    assert list(table.columns) == ["Period", "Ethnicity", "GPA"]
    assert table["Period"].tolist() == ["20188", "20191"]
    assert pd.isna(table.loc[1, "Ethnicity"])


def test_fetch_file_uri_and_bom(write_csv):
    path = write_csv("\ufeff" + CSV_TEXT)
    table = loader.fetch(path.as_uri())
    assert list(table.columns) == ["Period", "Ethnicity", "GPA"]


def test_fetch_custom_delimiter(write_csv):
    path = write_csv("Period;GPA\n20188;3.0-3.4\n")
    table = loader.fetch(str(path), delimiter=";")
    assert table.to_dict("records") == [{"Period": "20188", "GPA": "3.0-3.4"}]


def test_fetch_missing_file_is_source_unavailable(tmp_path: Path):
    with pytest.raises(SourceUnavailableError) as excinfo:
        loader.fetch(tmp_path / "nope.csv")
    assert excinfo.value.transient is True
    assert excinfo.value.code == "SOURCE_UNAVAILABLE"


def test_fetch_empty_file_is_malformed(write_csv):
    with pytest.raises(MalformedInputError):
        loader.fetch(write_csv(""))


def test_fetch_ragged_rows_is_malformed(write_csv):
    with pytest.raises(MalformedInputError) as excinfo:
        loader.fetch(write_csv("a,b\n1,2\n1,2,3,4\n"))
    assert excinfo.value.code == "MALFORMED_INPUT"


def test_fetch_invalid_utf8_is_malformed(tmp_path: Path):
    path = tmp_path / "binary.csv"
    path.write_bytes(b"a,b\n\xff\xfe,1\n")
    with pytest.raises(MalformedInputError):
        loader.fetch(path)


def test_is_remote_source():
    assert loader.is_remote_source("https://example.invalid/x.csv")
    assert loader.is_remote_source("HTTP://example.invalid/x.csv")
    assert not loader.is_remote_source("file:///tmp/x.csv")
    assert not loader.is_remote_source(Path("https.csv"))


def test_fetch_remote_uses_download(monkeypatch):
    seen = {}

    async def fake_download(url, timeout):
        seen["url"] = url
        seen["timeout"] = timeout
        return CSV_TEXT

    monkeypatch.setattr(loader, "_download", fake_download)
    table = loader.fetch("https://example.invalid/students.csv", timeout=5)
    assert seen == {"url": "https://example.invalid/students.csv", "timeout": 5}
    assert len(table) == 2


@pytest.mark.asyncio
async def test_download_success_passes_timeout():
    session = FakeSession(FakeResponse(200, CSV_TEXT.encode("utf-8")))
    text = await loader.download_csv_text(session, "https://example.invalid/a.csv", 7)
    assert text == CSV_TEXT
    url, kwargs = session.calls[0]
    assert url == "https://example.invalid/a.csv"
    assert kwargs["timeout"].total == 7


@pytest.mark.asyncio
async def test_download_http_error_status():
    session = FakeSession(FakeResponse(404, b"not found"))
    with pytest.raises(SourceUnavailableError) as excinfo:
        await loader.download_csv_text(session, "https://example.invalid/a.csv")
    assert excinfo.value.context["status_code"] == 404


@pytest.mark.asyncio
async def test_download_client_error():
    class ErrorSession:
        def get(self, *args, **kwargs):
            raise aiohttp.ClientError("network down")

    with pytest.raises(SourceUnavailableError, match="network down"):
        await loader.download_csv_text(ErrorSession(), "https://example.invalid/a.csv")


@pytest.mark.asyncio
async def test_download_timeout():
    session = FakeSession(FakeResponse(200, enter_error=asyncio.TimeoutError()))
    with pytest.raises(SourceUnavailableError) as excinfo:
        await loader.download_csv_text(session, "https://example.invalid/a.csv", 0.5)
    assert excinfo.value.context["timeout"] == 0.5


@pytest.mark.asyncio
async def test_download_invalid_utf8():
    session = FakeSession(FakeResponse(200, b"\xff\xfe\xfa"))
    with pytest.raises(MalformedInputError):
        await loader.download_csv_text(session, "https://example.invalid/a.csv")


def test_fetch_keeps_repeated_headers_verbatim(write_csv):
    table = loader.fetch(write_csv("Period,GPA,GPA\n20188,3.0-3.4,Unknown\n"))
    assert list(table.columns) == ["Period", "GPA", "GPA"]
    assert table.iloc[0].tolist() == ["20188", "3.0-3.4", "Unknown"]


def test_fetch_names_blank_headers_by_position(write_csv):
    table = loader.fetch(write_csv("Period,,GPA\n20188,x,3.0-3.4\n"))
    assert list(table.columns) == ["Period", "Unnamed: 1", "GPA"]


def test_fetch_header_only_gives_empty_table(write_csv):
    table = loader.fetch(write_csv("Period,Ethnicity,GPA\n"))
    assert list(table.columns) == ["Period", "Ethnicity", "GPA"]
    assert table.empty
