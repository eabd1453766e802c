"""Loader for the tabular GPA source.

This module is the only network/IO boundary of the GPA report pipeline. It
retrieves a single CSV resource from an HTTP(S) URL, a ``file://`` URI or a
plain filesystem path and parses it into a :class:`pandas.DataFrame` whose
cells are all strings.

Failure modes map onto the project error taxonomy (see ``src/exceptions.py``):

- retrieval problems (network error, non-200 status, timeout, missing file)
  raise :class:`~src.exceptions.SourceUnavailableError`;
- content that is not decodable UTF-8 or not delimited tabular data raises
  :class:`~src.exceptions.MalformedInputError`.

There is no retry policy: the first failure propagates to the caller.

Examples
--------
>>> from src.pipeline.gpa_report.loader import fetch
>>> table = fetch("data/students_by_gpa.csv")  # doctest: +SKIP
>>> sorted(table.columns)  # doctest: +SKIP
['Ethnicity', 'GPA', 'Gender', 'Period']
"""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import aiohttp
import pandas as pd

from src.config import CSV_DELIMITER, REQUEST_TIMEOUT_SECONDS
from src.exceptions import MalformedInputError, SourceUnavailableError

logger = logging.getLogger(__name__)

_HTTP_SCHEMES = frozenset({"http", "https"})


def is_remote_source(source: str | Path) -> bool:
    """Return True if ``source`` is an HTTP(S) URL."""
    if isinstance(source, Path):
        return False
    return urlparse(source).scheme.lower() in _HTTP_SCHEMES


def _local_path(source: str | Path) -> Path:
    if isinstance(source, Path):
        return source
    parsed = urlparse(source)
    if parsed.scheme.lower() == "file":
        return Path(unquote(parsed.path))
    return Path(source)


def _decode(payload: bytes, source: str) -> str:
    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise MalformedInputError(
            "Source content is not valid UTF-8 text",
            context={"source": source, "position": exc.start},
        ) from exc


async def download_csv_text(
    session: aiohttp.ClientSession,
    url: str,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> str:
    """Download ``url`` with ``session`` and return its body as text.

    Parameters
    ----------
    session : aiohttp.ClientSession
        Session used for the GET request. Used and not closed by this function.
    url : str
        HTTP(S) address of the CSV resource.
    timeout : float, optional
        Total request timeout in seconds.

    Returns
    -------
    str
        The decoded response body.

    Raises
    ------
    SourceUnavailableError
        On connection errors, timeout expiry or a non-200 status.
    MalformedInputError
        If the body is not valid UTF-8.
    """
    try:
        async with session.get(
            url, timeout=aiohttp.ClientTimeout(total=timeout)
        ) as response:
            status = response.status
            payload = await response.read()
    except aiohttp.ClientError as exc:
        raise SourceUnavailableError(
            f"Could not retrieve {url}: {exc}", context={"source": url}
        ) from exc
    except TimeoutError as exc:
        raise SourceUnavailableError(
            f"Timed out after {timeout:g}s retrieving {url}",
            context={"source": url, "timeout": timeout},
        ) from exc

    if status != 200:
        raise SourceUnavailableError(
            f"Unexpected HTTP status {status} retrieving {url}",
            context={"source": url, "status_code": status},
        )
    logger.debug("Downloaded %d bytes from %s", len(payload), url)
    return _decode(payload, url)


async def _download(url: str, timeout: float) -> str:
    async with aiohttp.ClientSession() as session:
        return await download_csv_text(session, url, timeout)


def read_source_text(
    source: str | Path, timeout: float = REQUEST_TIMEOUT_SECONDS
) -> str:
    """Return the raw text of ``source``, remote or local."""
    if is_remote_source(source):
        return asyncio.run(_download(str(source), timeout))

    path = _local_path(source)
    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise SourceUnavailableError(
            f"Could not read {path}: {exc.strerror or exc}",
            context={"source": str(path)},
        ) from exc
    return _decode(payload, str(path))


def parse_csv_text(text: str, *, delimiter: str = CSV_DELIMITER) -> pd.DataFrame:
    """Parse delimited ``text`` into a DataFrame of string columns.

    Empty cells become missing values; every other cell is kept verbatim as a
    string so that codes such as ``"20218"`` are never reinterpreted. Header
    names are kept exactly as written, repeats included, so that collisions
    reach the normalizer unchanged.

    Raises
    ------
    MalformedInputError
        If the text is empty or cannot be tokenized as delimited rows.
    """
    try:
        rows = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            header=None,
            dtype=str,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise MalformedInputError("Source contains no tabular data") from exc
    except pd.errors.ParserError as exc:
        raise MalformedInputError(
            f"Source is not valid delimited data: {exc}",
            context={"delimiter": delimiter},
        ) from exc
    if rows.empty:
        raise MalformedInputError("Source has no header row")

    # pandas suffixes repeated names (GPA, GPA.1); promote row 0 instead
    header = [
        f"Unnamed: {position}" if pd.isna(name) else name
        for position, name in enumerate(rows.iloc[0])
    ]
    table = rows.iloc[1:].reset_index(drop=True)
    table.columns = header
    return table


def fetch(
    source: str | Path,
    *,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    delimiter: str = CSV_DELIMITER,
) -> pd.DataFrame:
    """Fetch ``source`` and return it as a table.

    Parameters
    ----------
    source : str or Path
        HTTP(S) URL, ``file://`` URI or filesystem path of a CSV resource.
    timeout : float, optional
        Network timeout in seconds; ignored for local sources.
    delimiter : str, optional
        Field delimiter.

    Returns
    -------
    pandas.DataFrame
        Table with header-derived columns and string cells.

    Raises
    ------
    SourceUnavailableError
        If the resource cannot be retrieved.
    MalformedInputError
        If the content cannot be parsed as delimited tabular data.
    """
    text = read_source_text(source, timeout)
    table = parse_csv_text(text, delimiter=delimiter)
    logger.info(
        "Loaded %d rows x %d columns from %s",
        len(table),
        len(table.columns),
        source,
    )
    return table


__all__ = [
    "download_csv_text",
    "fetch",
    "is_remote_source",
    "parse_csv_text",
    "read_source_text",
]
