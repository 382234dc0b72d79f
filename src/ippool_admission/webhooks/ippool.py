"""
Validating admission webhook for IPPool resources.

This webhook validates IP pools before they are accepted by Kubernetes,
enforcing:
- Non-empty, well-formed, non-overlapping address ranges
- Allocated addresses staying inside the ranges on update
- Unambiguous selectors (single global pool, unique priorities, disjoint scopes)
- No deletion while addresses are still allocated
"""

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any

import kopf
from pydantic import ValidationError

from ippool_admission.constants import (
    ADMISSION_OPERATIONS,
    IPPOOL_GROUP,
    IPPOOL_PLURAL,
    IPPOOL_VERSION,
    OPERATION_CREATE,
    OPERATION_DELETE,
    OPERATION_UPDATE,
)
from ippool_admission.errors import IPPoolAdmissionError
from ippool_admission.models.ippool import IPPool
from ippool_admission.observability.logging import AdmissionLogger
from ippool_admission.observability.metrics import metrics_collector
from ippool_admission.services.ippool_validator import IPPoolValidator
from ippool_admission.utils.kubernetes import KubernetesIPPoolRepository

logger = logging.getLogger(__name__)
admission_logger = AdmissionLogger(__name__)

_validator: IPPoolValidator | None = None


def get_validator() -> IPPoolValidator:
    """Return the process-wide validator, backed by the Kubernetes API."""
    global _validator
    if _validator is None:
        _validator = IPPoolValidator(KubernetesIPPoolRepository())
    return _validator


def parse_ippool(obj: Mapping[str, Any] | None) -> IPPool:
    """
    Parse an admission object into an IPPool model.

    Raises:
        kopf.AdmissionError: If the object is not a valid IPPool
    """
    try:
        return IPPool.model_validate(dict(obj or {}))
    except ValidationError as e:
        error_msg = f"Invalid IP pool specification: {e}"
        logger.warning(error_msg)
        raise kopf.AdmissionError(error_msg) from e


def review_ippool(
    validator: IPPoolValidator,
    operation: str,
    pool: IPPool,
    old_pool: IPPool | None = None,
) -> None:
    """
    Run the validator entry point matching the admission operation.

    Raises:
        IPPoolAdmissionError: If the request must be rejected
    """
    if operation == OPERATION_CREATE:
        validator.create(pool)
    elif operation == OPERATION_UPDATE:
        validator.update(old_pool, pool)
    elif operation == OPERATION_DELETE:
        validator.delete(pool)
    else:
        logger.debug(f"No IPPool checks for operation {operation}")


@kopf.on.validate(
    IPPOOL_GROUP,
    IPPOOL_VERSION,
    IPPOOL_PLURAL,
    id="validate-ippool",
    operations=ADMISSION_OPERATIONS,
)
async def validate_ippool(
    body: Mapping[str, Any],
    operation: str,
    dryrun: bool = False,
    old: Mapping[str, Any] | None = None,
    **kwargs,
) -> dict:
    """
    Validate IPPool resource before admission.

    Args:
        body: Object under admission (the new object, or the old one on DELETE)
        operation: CREATE, UPDATE or DELETE
        dryrun: Whether this is a dry-run request
        old: Stored object on UPDATE and DELETE

    Returns:
        Empty dict when the request is allowed

    Raises:
        kopf.AdmissionError: If validation fails
    """
    if operation == OPERATION_DELETE:
        pool = parse_ippool(old or body)
        old_pool = None
    else:
        pool = parse_ippool(body)
        old_pool = parse_ippool(old) if old else None

    admission_logger.log_admission_start(operation, pool.name, dryrun)
    start_time = time.time()

    try:
        async with metrics_collector.track_admission(operation):
            # listing pools blocks on the Kubernetes API
            await asyncio.to_thread(
                review_ippool, get_validator(), operation, pool, old_pool
            )
    except IPPoolAdmissionError as e:
        admission_logger.log_admission_rejected(
            operation, pool.name, e, time.time() - start_time
        )
        raise e.as_kopf_error() from e

    admission_logger.log_admission_allowed(
        operation, pool.name, time.time() - start_time
    )
    return {}
