"""Assertion helpers shared by the gateway scenarios."""

from contextlib import contextmanager
from typing import Iterator

import pytest

from pinstack_e2e.core.exceptions import ErrorKind, GatewayError


@contextmanager
def raises_kind(*kinds: ErrorKind) -> Iterator[pytest.ExceptionInfo]:
    """Expect a GatewayError whose kind is one of ``kinds``."""
    with pytest.raises(GatewayError) as excinfo:
        yield excinfo
    assert excinfo.value.kind in kinds, (
        f"expected one of {[k.value for k in kinds]}, got {excinfo.value!r}"
    )


def run_parallel(pool, *subcases):
    """Run zero-argument sub-cases on ``pool`` and re-raise the first failure."""
    futures = [pool.submit(subcase) for subcase in subcases]
    return [future.result() for future in futures]
