import datetime
from decimal import Decimal

import pytest
from django.urls import reverse

from clinic.exceptions import ConflictError, InsufficientStock, ValidationError
from clinic.lifecycle import payment_status_for
from clinic.models import Drug, PaymentStatus, PrescriptionStatus
from clinic.services import prescriptions as prescription_service

pytestmark = pytest.mark.django_db


@pytest.fixture
def paracetamol(db):
    return Drug.objects.create(name='Paracetamol', unit_price=Decimal('1.00'), stock_quantity=5, reorder_level=2)


def prescribe(doctor, patient, *lines):
    items = [{'drug_id': d.pk, 'quantity': q, 'dosage': '1x3'} for d, q in lines]
    return prescription_service.create_prescription(doctor, patient_id=patient.pk, items=items)


def test_create_over_api_totals_items(doctor, patient, drug, client_for):
    r = client_for(doctor).post(reverse('prescriptions'), {
        'patientId': patient.pk,
        'items': [{'drugId': drug.pk, 'quantity': 4, 'dosage': '500mg twice daily'}],
    }, format='json')
    assert r.status_code == 201
    data = r.json()['data']
    assert data['prescriptionNumber'] == 'PRE-00001'
    assert data['totalAmount'] == '10.00'
    assert data['paymentStatus'] == PaymentStatus.AWAITING_PAYMENT
    assert data['status'] == PrescriptionStatus.PENDING


def test_prescription_needs_items(doctor, patient, client_for):
    r = client_for(doctor).post(reverse('prescriptions'), {'patientId': patient.pk, 'items': []}, format='json')
    assert r.status_code == 400
    assert r.json()['message'] == 'Prescription must contain at least one item'


def test_only_doctors_prescribe(nurse, patient, drug, client_for):
    r = client_for(nurse).post(reverse('prescriptions'), {
        'patientId': patient.pk, 'items': [{'drugId': drug.pk, 'quantity': 1, 'dosage': 'x'}],
    }, format='json')
    assert r.status_code == 403


def test_expired_drug_cannot_be_prescribed(doctor, patient, drug):
    drug.expiry_date = datetime.date(2000, 1, 1)
    drug.save()
    with pytest.raises(ValidationError):
        prescribe(doctor, patient, (drug, 1))


def test_payments_accumulate_and_never_go_back(doctor, cashier, patient, drug):
    rx = prescribe(doctor, patient, (drug, 4))  # 10.00
    rx = prescription_service.mark_paid(cashier, rx.pk, '4.00')
    assert rx.payment_status == PaymentStatus.PARTIALLY_PAID
    rx = prescription_service.mark_paid(cashier, rx.pk, Decimal('6.00'))
    assert rx.amount_paid == Decimal('10.00')
    assert rx.payment_status == PaymentStatus.PAID
    rx = prescription_service.mark_paid(cashier, rx.pk, '1.00')
    assert rx.amount_paid == Decimal('11.00')
    assert rx.payment_status == PaymentStatus.PAID


def test_payment_status_is_monotonic():
    assert payment_status_for(Decimal('0'), Decimal('10'), PaymentStatus.PAID) == PaymentStatus.PAID
    assert payment_status_for(Decimal('5'), Decimal('10'), PaymentStatus.AWAITING_PAYMENT) == PaymentStatus.PARTIALLY_PAID
    assert payment_status_for(Decimal('0'), Decimal('10')) == PaymentStatus.AWAITING_PAYMENT


@pytest.mark.parametrize('amount', ['0', '-5'])
def test_non_positive_payment_rejected(doctor, cashier, patient, drug, client_for, amount):
    rx = prescribe(doctor, patient, (drug, 1))
    r = client_for(cashier).post(reverse('prescription-pay', kwargs={'prescription_id': rx.pk}),
                                 {'amount': amount}, format='json')
    assert r.status_code == 400
    assert r.json()['message'] == 'Payment amount must be greater than 0'


def test_unpaid_prescription_cannot_be_dispensed(doctor, pharmacist, patient, drug, client_for):
    rx = prescribe(doctor, patient, (drug, 1))
    r = client_for(pharmacist).post(reverse('prescription-dispense', kwargs={'prescription_id': rx.pk}))
    assert r.status_code == 409
    assert r.json()['message'] == 'Prescription must be fully paid before dispensing'
    drug.refresh_from_db()
    assert drug.stock_quantity == 100


def test_dispense_deducts_exact_stock(doctor, cashier, pharmacist, patient, drug, client_for):
    rx = prescribe(doctor, patient, (drug, 4))
    prescription_service.mark_paid(cashier, rx.pk, '10.00')
    r = client_for(pharmacist).post(reverse('prescription-dispense', kwargs={'prescription_id': rx.pk}))
    assert r.status_code == 200
    assert r.json()['data']['status'] == PrescriptionStatus.DISPENSED
    drug.refresh_from_db()
    assert drug.stock_quantity == 96

    with pytest.raises(ConflictError):
        prescription_service.dispense(pharmacist, rx.pk)
    drug.refresh_from_db()
    assert drug.stock_quantity == 96


def test_insufficient_stock_changes_nothing(doctor, cashier, pharmacist, patient, drug, paracetamol):
    rx = prescribe(doctor, patient, (drug, 2), (paracetamol, 6))
    prescription_service.mark_paid(cashier, rx.pk, rx.total_amount)
    with pytest.raises(InsufficientStock):
        prescription_service.dispense(pharmacist, rx.pk)
    drug.refresh_from_db()
    paracetamol.refresh_from_db()
    assert (drug.stock_quantity, paracetamol.stock_quantity) == (100, 5)
    rx.refresh_from_db()
    assert rx.status == PrescriptionStatus.PENDING
    assert not rx.items.filter(dispensed=True).exists()


def test_same_drug_on_two_lines_is_summed(doctor, cashier, pharmacist, patient, paracetamol):
    rx = prescribe(doctor, patient, (paracetamol, 3), (paracetamol, 3))
    prescription_service.mark_paid(cashier, rx.pk, rx.total_amount)
    with pytest.raises(InsufficientStock):
        prescription_service.dispense(pharmacist, rx.pk)
    paracetamol.refresh_from_db()
    assert paracetamol.stock_quantity == 5


def test_partial_dispense_then_complete(doctor, cashier, pharmacist, patient, drug, paracetamol):
    rx = prescribe(doctor, patient, (drug, 2), (paracetamol, 6))
    prescription_service.mark_paid(cashier, rx.pk, rx.total_amount)

    rx = prescription_service.dispense(pharmacist, rx.pk, allow_partial=True)
    assert rx.status == PrescriptionStatus.PARTIALLY_DISPENSED
    drug.refresh_from_db()
    assert drug.stock_quantity == 98
    assert [p.pk for p in prescription_service.pending_prescriptions()] == [rx.pk]

    paracetamol.stock_quantity = 10
    paracetamol.save()
    rx = prescription_service.dispense(pharmacist, rx.pk, allow_partial=True)
    assert rx.status == PrescriptionStatus.DISPENSED
    paracetamol.refresh_from_db()
    assert paracetamol.stock_quantity == 4
    drug.refresh_from_db()
    assert drug.stock_quantity == 98


def test_dispensed_prescription_cannot_be_cancelled(doctor, cashier, pharmacist, patient, drug, client_for):
    rx = prescribe(doctor, patient, (drug, 1))
    prescription_service.mark_paid(cashier, rx.pk, rx.total_amount)
    prescription_service.dispense(pharmacist, rx.pk)
    r = client_for(doctor).patch(reverse('prescription-cancel', kwargs={'prescription_id': rx.pk}))
    assert r.status_code == 409
    assert r.json()['message'] == 'Cannot cancel a dispensed prescription'


def test_cancelled_prescription_rejects_payment_and_dispense(doctor, cashier, pharmacist, patient, drug):
    rx = prescribe(doctor, patient, (drug, 1))
    prescription_service.cancel(doctor, rx.pk)
    with pytest.raises(ConflictError):
        prescription_service.mark_paid(cashier, rx.pk, '1.00')
    with pytest.raises(ConflictError):
        prescription_service.dispense(pharmacist, rx.pk)


def test_pending_and_unpaid_queues(doctor, cashier, pharmacist, admin_user, patient, drug, client_for):
    paid = prescribe(doctor, patient, (drug, 1))
    unpaid = prescribe(doctor, patient, (drug, 2))
    prescription_service.mark_paid(cashier, paid.pk, paid.total_amount)

    r = client_for(pharmacist).get(reverse('prescriptions-pending'))
    assert [p['id'] for p in r.json()['data']] == [paid.pk]
    r = client_for(cashier).get(reverse('prescriptions-unpaid'))
    assert [p['id'] for p in r.json()['data']] == [unpaid.pk]
    assert client_for(cashier).get(reverse('prescriptions-pending')).status_code == 403
    assert client_for(admin_user).get(reverse('prescriptions')).json()['data']['total'] == 2
