"""
Prescriptions: creation, payment and dispensing.

Fulfilment and payment are tracked separately.  Payment only moves
forward; dispensing needs a fully paid prescription and touches stock
under row locks inside one transaction.  In the default mode every line
is dispensed or nothing is; ``allow_partial`` dispenses the lines that
can be covered and leaves the rest for a later call.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from .. import repositories, sequences
from ..exceptions import ConflictError, InsufficientStock, ValidationError
from ..lifecycle import PRESCRIPTION_TRANSITIONS, ensure_transition, payment_status_for
from ..models import AuditAction, PaymentStatus, PrescriptionItem, PrescriptionStatus
from .audit import record_audit

logger = logging.getLogger(__name__)

DISPENSED_STATES = (PrescriptionStatus.DISPENSED, PrescriptionStatus.PARTIALLY_DISPENSED)


def _to_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError('Payment amount must be a number')
    if not amount.is_finite():
        raise ValidationError('Payment amount must be a number')
    return amount.quantize(Decimal('0.01'))


def recalculate_total(prescription) -> Decimal:
    total = prescription.items.aggregate(total=Sum('total_price'))['total'] or Decimal('0')
    prescription.total_amount = total
    prescription.payment_status = payment_status_for(
        prescription.amount_paid, total, prescription.payment_status
    )
    repositories.prescriptions.save(prescription, ['total_amount', 'payment_status'])
    return total


def create_prescription(actor, *, patient_id, items, consultation_id=None, notes='', request=None):
    if not items:
        raise ValidationError('Prescription must contain at least one item')
    patient = repositories.patients.get(patient_id, include_inactive=False)
    if patient is None:
        raise ValidationError('Patient not found')
    consultation = None
    if consultation_id:
        consultation = repositories.consultations.get(consultation_id)
        if consultation is None:
            raise ValidationError('Consultation not found')
        if consultation.patient_id != patient.pk:
            raise ValidationError('Consultation belongs to a different patient')

    drug_ids = {item['drug_id'] for item in items}
    drugs = {d.pk: d for d in repositories.drugs.filter(pk__in=drug_ids)}
    for drug_id in drug_ids:
        drug = drugs.get(drug_id)
        if drug is None:
            raise ValidationError(f'Drug {drug_id} not found')
        if drug.is_expired:
            raise ValidationError(f'{drug.name} is expired')

    with transaction.atomic():
        number = sequences.next_number(sequences.PRESCRIPTION)
        prescription = repositories.prescriptions.create(
            prescription_number=number, patient=patient, consultation=consultation,
            entered_by=actor, notes=notes or '',
        )
        lines = []
        for item in items:
            drug = drugs[item['drug_id']]
            unit_price = item.get('unit_price')
            unit_price = drug.unit_price if unit_price is None else Decimal(str(unit_price))
            lines.append(PrescriptionItem(
                prescription=prescription, drug=drug, quantity=item['quantity'],
                dosage=item['dosage'], unit_price=unit_price,
                total_price=unit_price * item['quantity'],
            ))
        PrescriptionItem.objects.bulk_create(lines)
        total = recalculate_total(prescription)
        record_audit(
            user=actor, action=AuditAction.CREATE, entity_type='Prescription', entity_id=prescription.pk,
            description=f'Prescription {number} for {patient.patient_number}',
            new_value={'items': len(lines), 'totalAmount': total}, request=request,
        )
    logger.info('prescription %s created items=%s total=%s', number, len(lines), total)
    return repositories.prescriptions.get(prescription.pk)


def get_prescription(prescription_id):
    return repositories.prescriptions.get_or_404(prescription_id)


def list_prescriptions(*, status=None, payment_status=None, patient_id=None, page=1, limit=None):
    filters = {'status': status, 'payment_status': payment_status, 'patient_id': patient_id}
    return repositories.prescriptions.list(filters=filters, page=page, limit=limit)


def pending_prescriptions():
    return list(repositories.prescriptions.pending())


def unpaid_prescriptions():
    return list(repositories.prescriptions.unpaid())


def mark_paid(actor, prescription_id, amount, *, request=None):
    amount = _to_amount(amount)
    if amount <= 0:
        raise ValidationError('Payment amount must be greater than 0')
    with transaction.atomic():
        prescription = repositories.prescriptions.get_or_404(prescription_id, lock=True)
        if prescription.status == PrescriptionStatus.CANCELLED:
            raise ConflictError('Cannot pay a cancelled prescription')
        old = {'amountPaid': prescription.amount_paid, 'paymentStatus': prescription.payment_status}
        prescription.amount_paid += amount
        prescription.payment_status = payment_status_for(
            prescription.amount_paid, prescription.total_amount, prescription.payment_status
        )
        repositories.prescriptions.save(prescription, ['amount_paid', 'payment_status'])
        record_audit(
            user=actor, action=AuditAction.UPDATE, entity_type='Prescription', entity_id=prescription.pk,
            description=f'Payment of {amount} on {prescription.prescription_number}', old_value=old,
            new_value={'amountPaid': prescription.amount_paid, 'paymentStatus': prescription.payment_status},
            request=request,
        )
    logger.info('payment %s on %s -> %s', amount, prescription.prescription_number, prescription.payment_status)
    return repositories.prescriptions.get(prescription.pk)


def _plan_full(items, drugs):
    """Every pending line or nothing; returns ``(lines, deductions)``."""
    required = OrderedDict()
    for item in items:
        required[item.drug_id] = required.get(item.drug_id, 0) + item.quantity
    short = []
    for drug_id, quantity in required.items():
        drug = drugs.get(drug_id)
        if drug is None or not drug.is_active or drug.stock_quantity < quantity:
            short.append(drug.name if drug is not None else f'#{drug_id}')
    if short:
        raise InsufficientStock(f"Insufficient stock for {', '.join(short)}")
    return list(items), required


def _plan_partial(items, drugs):
    """Lines whose drug can still cover them, in item order."""
    available = {pk: (d.stock_quantity if d.is_active else 0) for pk, d in drugs.items()}
    lines, deductions = [], OrderedDict()
    for item in items:
        if available.get(item.drug_id, 0) >= item.quantity:
            available[item.drug_id] -= item.quantity
            deductions[item.drug_id] = deductions.get(item.drug_id, 0) + item.quantity
            lines.append(item)
    if not lines:
        raise InsufficientStock('Insufficient stock for every item on the prescription')
    return lines, deductions


def dispense(actor, prescription_id, *, allow_partial=False, request=None):
    with transaction.atomic():
        prescription = repositories.prescriptions.get_or_404(prescription_id, lock=True)
        if prescription.status == PrescriptionStatus.DISPENSED:
            raise ConflictError('Prescription already dispensed')
        if prescription.status == PrescriptionStatus.CANCELLED:
            raise ConflictError('Cannot dispense a cancelled prescription')
        if prescription.payment_status != PaymentStatus.PAID:
            raise ConflictError('Prescription must be fully paid before dispensing')

        items = list(prescription.items.filter(dispensed=False).order_by('id'))
        drugs = repositories.drugs.lock_many({item.drug_id for item in items})
        planner = _plan_partial if allow_partial else _plan_full
        lines, deductions = planner(items, drugs)

        remaining = len(items) - len(lines)
        new_status = PrescriptionStatus.PARTIALLY_DISPENSED if remaining else PrescriptionStatus.DISPENSED
        ensure_transition(PRESCRIPTION_TRANSITIONS, 'Prescription', prescription.status, new_status)

        for drug_id, quantity in deductions.items():
            repositories.drugs.adjust_stock(drug_id, -quantity)
        PrescriptionItem.objects.filter(pk__in=[line.pk for line in lines]).update(dispensed=True)

        old_status = prescription.status
        prescription.status = new_status
        prescription.dispensed_by = actor
        prescription.dispensed_at = timezone.now()
        repositories.prescriptions.save(prescription, ['status', 'dispensed_by', 'dispensed_at'])
        record_audit(
            user=actor, action=AuditAction.UPDATE, entity_type='Prescription', entity_id=prescription.pk,
            description=f'Dispensed {len(lines)} of {len(items)} pending items',
            old_value={'status': old_status},
            new_value={'status': new_status, 'deducted': {str(k): v for k, v in deductions.items()}},
            request=request,
        )
    logger.info(
        'prescription %s dispensed lines=%s remaining=%s status=%s',
        prescription.prescription_number, len(lines), remaining, new_status,
    )
    return repositories.prescriptions.get(prescription.pk)


def cancel(actor, prescription_id, *, request=None):
    with transaction.atomic():
        prescription = repositories.prescriptions.get_or_404(prescription_id, lock=True)
        if prescription.status in DISPENSED_STATES:
            raise ConflictError('Cannot cancel a dispensed prescription')
        old_status = prescription.status
        ensure_transition(PRESCRIPTION_TRANSITIONS, 'Prescription', old_status, PrescriptionStatus.CANCELLED)
        prescription.status = PrescriptionStatus.CANCELLED
        repositories.prescriptions.save(prescription, ['status'])
        record_audit(
            user=actor, action=AuditAction.UPDATE, entity_type='Prescription', entity_id=prescription.pk,
            description=f'Cancelled {prescription.prescription_number}',
            old_value={'status': old_status}, new_value={'status': PrescriptionStatus.CANCELLED},
            request=request,
        )
    logger.info('prescription %s cancelled', prescription.prescription_number)
    return repositories.prescriptions.get(prescription.pk)
