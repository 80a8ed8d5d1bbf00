"""
Drug catalogue, stock and the restock workflow.

Stock is only ever changed with ``F()`` updates on the drug row, so
concurrent restocks and dispenses add up instead of overwriting each
other.  Restock requests go PENDING -> APPROVED -> FULFILLED, or are
REJECTED while still pending.
"""
import logging

from django.db import transaction
from django.utils import timezone

from .. import repositories
from ..exceptions import ConflictError, ValidationError
from ..lifecycle import RESTOCK_TRANSITIONS, ensure_transition
from ..models import AuditAction, RestockStatus
from .audit import record_audit

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Drugs
# ---------------------------------------------------------------------

def create_drug(actor, *, name, request=None, **fields):
    name = (name or '').strip()
    if repositories.drugs.name_taken(name):
        raise ConflictError('Drug with this name already exists')
    drug = repositories.drugs.create(name=name, **fields)
    record_audit(
        user=actor, action=AuditAction.CREATE, entity_type='Drug', entity_id=drug.pk,
        description=f'Added drug {name}', new_value={'stock': drug.stock_quantity}, request=request,
    )
    logger.info('drug created id=%s name=%s stock=%s', drug.pk, name, drug.stock_quantity)
    return drug


def get_drug(drug_id):
    return repositories.drugs.get_or_404(drug_id, include_inactive=False)


def list_drugs(*, q=None, category=None, page=1, limit=None):
    qs = repositories.drugs.search(q)
    if category:
        qs = qs.filter(category=category)
    return repositories.drugs.list(queryset=qs, page=page, limit=limit)


def low_stock_drugs():
    return list(repositories.drugs.low_stock())


def expired_drugs():
    return list(repositories.drugs.expired())


def add_stock(actor, drug_id, quantity: int, *, request=None):
    if quantity is None or quantity <= 0:
        raise ValidationError('Quantity must be greater than 0')
    drug = get_drug(drug_id)
    before = drug.stock_quantity
    repositories.drugs.adjust_stock(drug.pk, quantity)
    drug.refresh_from_db(fields=['stock_quantity', 'updated_at'])
    record_audit(
        user=actor, action=AuditAction.UPDATE, entity_type='Drug', entity_id=drug.pk,
        description=f'Added {quantity} to {drug.name}', old_value={'stock': before},
        new_value={'stock': drug.stock_quantity}, request=request,
    )
    logger.info('stock +%s for drug=%s now=%s', quantity, drug.pk, drug.stock_quantity)
    return drug


# ---------------------------------------------------------------------
# Restock requests
# ---------------------------------------------------------------------

def create_restock_request(actor, *, drug_id, requested_quantity, reason, notes='', request=None):
    drug = get_drug(drug_id)
    restock = repositories.restocks.create(
        drug=drug, requested_quantity=requested_quantity, reason=reason, notes=notes or '',
        requested_by=actor,
    )
    record_audit(
        user=actor, action=AuditAction.CREATE, entity_type='RestockRequest', entity_id=restock.pk,
        description=f'Requested {requested_quantity} of {drug.name}', request=request,
    )
    logger.info('restock %s requested drug=%s qty=%s', restock.pk, drug.pk, requested_quantity)
    return repositories.restocks.get(restock.pk)


def get_restock_request(restock_id):
    return repositories.restocks.get_or_404(restock_id)


def list_restock_requests(*, status=None, drug_id=None, page=1, limit=None):
    return repositories.restocks.list(filters={'status': status, 'drug_id': drug_id}, page=page, limit=limit)


def pending_restock_requests():
    return list(repositories.restocks.pending())


def _move(actor, restock_id, new_status, *, request=None, description='', **changes):
    with transaction.atomic():
        restock = repositories.restocks.get_or_404(restock_id, lock=True)
        old_status = restock.status
        ensure_transition(RESTOCK_TRANSITIONS, 'Restock request', old_status, new_status)
        restock.status = new_status
        for key, value in changes.items():
            setattr(restock, key, value)
        repositories.restocks.save(restock, ['status', *changes.keys()])
        record_audit(
            user=actor, action=AuditAction.UPDATE, entity_type='RestockRequest', entity_id=restock.pk,
            description=description or f'{old_status} -> {new_status}',
            old_value={'status': old_status}, new_value={'status': new_status}, request=request,
        )
    logger.info('restock %s %s -> %s', restock.pk, old_status, new_status)
    return restock


def approve_restock(actor, restock_id, *, request=None):
    restock = _move(
        actor, restock_id, RestockStatus.APPROVED, request=request,
        approved_by=actor, approved_at=timezone.now(),
    )
    return repositories.restocks.get(restock.pk)


def reject_restock(actor, restock_id, *, reason, request=None):
    reason = (reason or '').strip()
    if not reason:
        raise ValidationError('Rejection reason is required')
    restock = _move(
        actor, restock_id, RestockStatus.REJECTED, request=request,
        approved_by=actor, approved_at=timezone.now(), rejection_reason=reason,
    )
    return repositories.restocks.get(restock.pk)


def fulfill_restock(actor, restock_id, *, quantity=None, request=None):
    with transaction.atomic():
        restock = repositories.restocks.get_or_404(restock_id, lock=True)
        if restock.status != RestockStatus.APPROVED:
            raise ConflictError('Request must be approved before fulfillment')
        quantity = restock.requested_quantity if quantity is None else quantity
        if quantity <= 0:
            raise ValidationError('Quantity must be greater than 0')
        if repositories.drugs.adjust_stock(restock.drug_id, quantity) != 1:
            raise ValidationError('Drug not found')
        _move(
            actor, restock.pk, RestockStatus.FULFILLED, request=request,
            description=f'Fulfilled with {quantity}',
            fulfilled_quantity=quantity, fulfilled_at=timezone.now(),
        )
    return repositories.restocks.get(restock.pk)
