#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Document sinks: newline-delimited JSON on stdout, or one HTTP POST per
document to an Elasticsearch-compatible indexing endpoint.
Uses Python 3.10+ type annotations.
"""

import json
import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, TextIO

import requests
from requests.auth import HTTPBasicAuth

from haproxyStats.config import DEFAULT_HEADERS, DEFAULT_TIMEOUT, RunConfig
from haproxyStats.errors import ConfigurationError
from haproxyStats.filename import CaptureMetadata
from haproxyStats.records import TypedRecord
from haproxyStats.shaper import Shaper, shape_flat, shape_metricset

# Configure logger
logger = logging.getLogger(__name__)

# Status codes at or above this are reported as failures
ERROR_STATUS = 299


@dataclass(frozen=True)
class IndexTarget:
    """Index family and document type for one HTTP output mode."""
    index_prefix: str
    doc_type: str
    shape: Shaper


INDEX_TARGETS = {
    "elasticsearch": IndexTarget("stats", "stat", shape_flat),
    "metricbeat": IndexTarget("metricbeat", "doc", shape_metricset),
}


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of sending one document."""
    url: str
    status_code: int
    ok: bool

    def status_line(self) -> str:
        return f"{self.url}: {self.status_code} {'OK' if self.ok else 'ERROR'}"


class DocumentSink(ABC):
    """Receives typed records in input order, one at a time."""

    def __init__(self, shape: Shaper, stream: Optional[TextIO] = None):
        self.shape = shape
        self.stream = stream or sys.stdout

    @abstractmethod
    def send(self, record: TypedRecord) -> Optional[DeliveryResult]:
        """Shape and deliver one record."""


class StdoutSink(DocumentSink):
    """
    Prints one JSON document per line.
    """

    def send(self, record: TypedRecord) -> None:
        print(json.dumps(self.shape(record)), file=self.stream)
        return None


class HttpSink(DocumentSink):
    """
    POSTs each document to <base_url>/<index>/<doc_type>.

    Every request is independent: a failure is reported and the next
    document is still sent.
    """

    def __init__(
        self,
        base_url: str,
        index: str,
        doc_type: str,
        shape: Shaper,
        auth: Optional[tuple[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        stream: Optional[TextIO] = None
    ):
        """
        Initialize the HTTP sink.

        Args:
            base_url: Indexing endpoint without trailing slash
            index: Index name, e.g. stats-2024.03.01
            doc_type: Document type path segment
            shape: Function turning a record into the posted document
            auth: Optional (username, password) for basic auth
            timeout: Request timeout in seconds
            stream: Where status lines are printed (defaults to stdout)
        """
        super().__init__(shape, stream)
        self.url = f"{base_url.rstrip('/')}/{index}/{doc_type}"
        self.auth = HTTPBasicAuth(*auth) if auth else None
        self.timeout = timeout
        self.headers = dict(DEFAULT_HEADERS)

        logger.debug("HttpSink posting to %s (auth: %s)", self.url, "yes" if auth else "no")

    def send(self, record: TypedRecord) -> DeliveryResult:
        body = json.dumps(self.shape(record))

        try:
            response = requests.post(
                self.url,
                data=body,
                headers=self.headers,
                auth=self.auth,
                timeout=self.timeout
            )
            result = DeliveryResult(
                url=response.url or self.url,
                status_code=response.status_code,
                ok=response.status_code < ERROR_STATUS
            )
        except requests.exceptions.RequestException as e:
            logger.error("Request to %s failed: %s", self.url, e)
            result = DeliveryResult(url=self.url, status_code=0, ok=False)

        if result.ok:
            logger.debug("Indexed document at %s (%d)", result.url, result.status_code)
        else:
            logger.warning("Indexing failed at %s (%d)", result.url, result.status_code)

        print(result.status_line(), file=self.stream)
        return result


def build_sink(
    config: RunConfig,
    capture: CaptureMetadata,
    stream: Optional[TextIO] = None
) -> DocumentSink:
    """
    Select the sink for the configured output mode.

    Args:
        config: Run configuration
        capture: Capture metadata, used for the daily index name
        stream: Output stream (defaults to stdout)

    Returns:
        StdoutSink with the flat shape when output is unset, HttpSink for
        elasticsearch/metricbeat, StdoutSink with the metricset shape otherwise
    """
    if config.output is None:
        return StdoutSink(shape_flat, stream)

    target = INDEX_TARGETS.get(config.output)
    if target is None:
        logger.debug("Output '%s' has no HTTP target, printing metricset documents", config.output)
        return StdoutSink(shape_metricset, stream)

    if not config.elasticsearch:
        raise ConfigurationError(f"output '{config.output}' requires the 'elasticsearch' base URL")
    return HttpSink(
        base_url=config.elasticsearch,
        index=capture.date_index(target.index_prefix),
        doc_type=target.doc_type,
        shape=target.shape,
        auth=config.credentials,
        timeout=config.timeout,
        stream=stream
    )
