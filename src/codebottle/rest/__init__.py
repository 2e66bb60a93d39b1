"""REST layer for codebottle.

Turns an endpoint descriptor into a decoded, status-validated result
delivered through a :class:`concurrent.futures.Future`.

Classes:
    :class:`Endpoint` -- URL templates with their path-parameter arity.
    :class:`Transport` -- :class:`httpx.Client` wrapper adding the API headers.
    :class:`Request` -- fluent builder that executes on a thread pool.

The :mod:`codebottle.rest.futures` module holds the composition helpers
(``then``, ``compose``, ``gather``, ``sequence``) used to chain requests
without blocking pool threads.
"""

from codebottle.rest.endpoint import Endpoint
from codebottle.rest.request import Request
from codebottle.rest.transport import Transport

__all__ = ["Endpoint", "Request", "Transport"]
