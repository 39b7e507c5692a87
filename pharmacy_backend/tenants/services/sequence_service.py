# tenants/services/sequence_service.py

"""
DOCUMENT NUMBER SEQUENCES

next_document_number() hands out tenant-unique, monotonically increasing
numbers such as SAL00000001 or RET00000042.

The counter row is locked for the rest of the caller's transaction, so
concurrent sales in the same tenant serialise on it and never collide.
"""

from __future__ import annotations

from django.db import IntegrityError, transaction

from tenants.models import DocumentSequence
from tenants.services.tenant_scope import require_tenant_id

SALE_NUMBER_PREFIX = "SAL"
RETURN_NUMBER_PREFIX = "RET"
NUMBER_WIDTH = 8


def _locked_sequence(*, tenant_id, kind) -> DocumentSequence:
    seq = (
        DocumentSequence.objects
        .select_for_update()
        .filter(tenant_id=tenant_id, kind=kind)
        .first()
    )
    if seq is not None:
        return seq

    # First document of this kind for the tenant. A concurrent creator
    # may win the insert; the unique constraint makes that safe.
    try:
        with transaction.atomic():
            DocumentSequence.objects.create(tenant_id=tenant_id, kind=kind)
    except IntegrityError:
        pass

    return DocumentSequence.objects.select_for_update().get(
        tenant_id=tenant_id, kind=kind
    )


@transaction.atomic
def next_document_number(*, tenant_id, kind: str, prefix: str) -> str:
    require_tenant_id(tenant_id)

    seq = _locked_sequence(tenant_id=tenant_id, kind=kind)
    seq.last_value = int(seq.last_value or 0) + 1
    seq.save(update_fields=["last_value", "updated_at"])

    return f"{prefix}{seq.last_value:0{NUMBER_WIDTH}d}"


def next_sale_number(*, tenant_id) -> str:
    return next_document_number(
        tenant_id=tenant_id,
        kind=DocumentSequence.Kind.SALE,
        prefix=SALE_NUMBER_PREFIX,
    )


def next_return_number(*, tenant_id) -> str:
    return next_document_number(
        tenant_id=tenant_id,
        kind=DocumentSequence.Kind.RETURN,
        prefix=RETURN_NUMBER_PREFIX,
    )
