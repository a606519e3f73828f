"""
Typed client for the Apify REST API.

This package provides:
- ApifyClient: facade handing out resource clients (actors, datasets, runs, ...)
- HTTPClient: single-call HTTP executor returning Result values
- pagination: lazy offset/limit iteration (stream, collect_all) and helpers
- ChunkStream: lazy reader for streamed response bodies
- ApifyError / ErrorKind: closed error taxonomy and classifier
"""

__version__ = "0.1.0"

from apify_rest.client import ApifyClient as ApifyClient
from apify_rest.config import ClientConfig as ClientConfig
from apify_rest.errors import ApifyError as ApifyError
from apify_rest.errors import ErrorKind as ErrorKind
from apify_rest.errors import classify as classify
from apify_rest.http import HTTPClient as HTTPClient
from apify_rest.pagination import PageRequestOptions as PageRequestOptions
from apify_rest.pagination import PageStream as PageStream
from apify_rest.pagination import PaginatedResponse as PaginatedResponse
from apify_rest.pagination import collect_all as collect_all
from apify_rest.pagination import stream as stream
from apify_rest.result import Result as Result
from apify_rest.retry import RetryConfig as RetryConfig
from apify_rest.streaming import ChunkStream as ChunkStream
