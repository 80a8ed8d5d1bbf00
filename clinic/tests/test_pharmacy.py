import datetime
from decimal import Decimal

import pytest
from django.urls import reverse

from clinic.models import Drug, RestockRequest, RestockStatus

pytestmark = pytest.mark.django_db


@pytest.fixture
def restock(pharmacist, drug, client_for):
    r = client_for(pharmacist).post(reverse('restock-requests'), {
        'drugId': drug.pk, 'requestedQuantity': 50, 'reason': 'Flu season',
    }, format='json')
    assert r.status_code == 201
    return RestockRequest.objects.get(pk=r.json()['data']['id'])


def test_pharmacy_adds_drug_and_names_are_unique(pharmacist, nurse, client_for):
    payload = {'name': 'Ibuprofen', 'unitPrice': '0.75', 'stockQuantity': 40, 'category': 'PAINKILLER'}
    assert client_for(nurse).post(reverse('drugs'), payload, format='json').status_code == 403

    r = client_for(pharmacist).post(reverse('drugs'), payload, format='json')
    assert r.status_code == 201
    assert r.json()['data']['unitPrice'] == '0.75'

    r = client_for(pharmacist).post(reverse('drugs'), {**payload, 'name': 'ibuprofen'}, format='json')
    assert r.status_code == 409
    assert r.json()['message'] == 'Drug with this name already exists'


def test_drug_search(nurse, drug, client_for):
    Drug.objects.create(name='Metformin', unit_price=Decimal('1.20'), stock_quantity=30)
    r = client_for(nurse).get(reverse('drugs'), {'q': 'amox'})
    assert r.status_code == 200
    assert [d['name'] for d in r.json()['data']['items']] == ['Amoxicillin']


def test_low_stock_includes_reorder_level(pharmacist, drug, client_for):
    at_level = Drug.objects.create(name='Zinc', unit_price=Decimal('0.10'), stock_quantity=10, reorder_level=10)
    Drug.objects.create(name='Iron', unit_price=Decimal('0.10'), stock_quantity=11, reorder_level=10)
    r = client_for(pharmacist).get(reverse('drugs-low-stock'))
    assert [d['id'] for d in r.json()['data']] == [at_level.pk]
    assert r.json()['data'][0]['isLowStock'] is True


def test_expired_listing(pharmacist, drug, client_for):
    drug.expiry_date = datetime.date(2001, 1, 1)
    drug.save()
    r = client_for(pharmacist).get(reverse('drugs-expired'))
    assert [d['id'] for d in r.json()['data']] == [drug.pk]


def test_add_stock(pharmacist, front_desk, drug, client_for):
    url = reverse('drug-stock', kwargs={'drug_id': drug.pk})
    r = client_for(pharmacist).post(url, {'quantity': 25}, format='json')
    assert r.status_code == 200
    assert r.json()['data']['stockQuantity'] == 125
    assert client_for(pharmacist).post(url, {'quantity': 0}, format='json').status_code == 400
    assert client_for(front_desk).post(url, {'quantity': 5}, format='json').status_code == 403


def test_add_stock_clears_low_stock(pharmacist, client_for):
    paracetamol = Drug.objects.create(name='Paracetamol', unit_price=Decimal('0.50'), stock_quantity=10, reorder_level=20)
    client = client_for(pharmacist)
    assert [d['id'] for d in client.get(reverse('drugs-low-stock')).json()['data']] == [paracetamol.pk]

    r = client.post(reverse('drug-stock', kwargs={'drug_id': paracetamol.pk}), {'quantity': 50}, format='json')
    assert r.json()['data']['stockQuantity'] == 60
    assert r.json()['data']['isLowStock'] is False
    assert client.get(reverse('drugs-low-stock')).json()['data'] == []


def test_two_restocks_for_one_drug_both_land(admin_user, pharmacist, drug, client_for):
    pharmacy = client_for(pharmacist)
    for quantity in (40, 60):
        r = pharmacy.post(reverse('restock-requests'), {
            'drugId': drug.pk, 'requestedQuantity': quantity, 'reason': 'Ward demand',
        }, format='json')
        restock_id = r.json()['data']['id']
        client_for(admin_user).post(reverse('restock-approve', kwargs={'restock_id': restock_id}))
        r = pharmacy.post(reverse('restock-fulfill', kwargs={'restock_id': restock_id}), {}, format='json')
        assert r.status_code == 200
    drug.refresh_from_db()
    assert drug.stock_quantity == 100 + 40 + 60


def test_restock_approve_then_fulfill_once(admin_user, pharmacist, drug, restock, client_for):
    assert client_for(pharmacist).post(
        reverse('restock-approve', kwargs={'restock_id': restock.pk})).status_code == 403

    r = client_for(admin_user).post(reverse('restock-approve', kwargs={'restock_id': restock.pk}))
    assert r.status_code == 200
    assert r.json()['data']['status'] == RestockStatus.APPROVED
    assert r.json()['data']['approvedBy']['id'] == admin_user.pk

    fulfill = reverse('restock-fulfill', kwargs={'restock_id': restock.pk})
    r = client_for(pharmacist).post(fulfill, {}, format='json')
    assert r.status_code == 200
    assert r.json()['data']['fulfilledQuantity'] == 50
    drug.refresh_from_db()
    assert drug.stock_quantity == 150

    r = client_for(pharmacist).post(fulfill, {}, format='json')
    assert r.status_code == 409
    drug.refresh_from_db()
    assert drug.stock_quantity == 150


def test_fulfill_with_delivered_quantity(admin_user, pharmacist, drug, restock, client_for):
    client_for(admin_user).post(reverse('restock-approve', kwargs={'restock_id': restock.pk}))
    r = client_for(pharmacist).post(reverse('restock-fulfill', kwargs={'restock_id': restock.pk}),
                                    {'quantity': 30}, format='json')
    assert r.json()['data']['fulfilledQuantity'] == 30
    drug.refresh_from_db()
    assert drug.stock_quantity == 130


def test_fulfill_requires_approval(pharmacist, restock, client_for):
    r = client_for(pharmacist).post(reverse('restock-fulfill', kwargs={'restock_id': restock.pk}))
    assert r.status_code == 409
    assert r.json()['message'] == 'Request must be approved before fulfillment'


def test_reject_needs_reason_and_is_final(admin_user, restock, client_for):
    client = client_for(admin_user)
    url = reverse('restock-reject', kwargs={'restock_id': restock.pk})
    r = client.post(url, {}, format='json')
    assert r.status_code == 400
    assert r.json()['message'] == 'Rejection reason is required'

    r = client.post(url, {'reason': 'Budget exhausted'}, format='json')
    assert r.status_code == 200
    assert r.json()['data']['rejectionReason'] == 'Budget exhausted'

    r = client.post(reverse('restock-approve', kwargs={'restock_id': restock.pk}))
    assert r.status_code == 409


def test_pending_restock_queue(pharmacist, admin_user, restock, client_for):
    r = client_for(pharmacist).get(reverse('restock-requests-pending'))
    assert [x['id'] for x in r.json()['data']] == [restock.pk]
    client_for(admin_user).post(reverse('restock-approve', kwargs={'restock_id': restock.pk}))
    r = client_for(pharmacist).get(reverse('restock-requests-pending'))
    assert r.json()['data'] == []


def test_only_pharmacy_requests_restock(admin_user, drug, client_for):
    r = client_for(admin_user).post(reverse('restock-requests'), {
        'drugId': drug.pk, 'requestedQuantity': 5, 'reason': 'x',
    }, format='json')
    assert r.status_code == 403
