import pytest
from django.urls import reverse

from clinic.models import AuditAction, AuditLog, AuditStatus, Role, User
from clinic.services.audit import record_audit

pytestmark = pytest.mark.django_db


def new_user_payload(**overrides):
    payload = {
        'firstName': 'Efua', 'lastName': 'Owusu', 'email': 'Efua.Owusu@Hospital.test',
        'password': 'LongEnough1', 'role': 'nurse',
    }
    payload.update(overrides)
    return payload


def test_admin_creates_user(admin_user, department, client_for):
    r = client_for(admin_user).post(reverse('admin-users'),
                                    new_user_payload(departmentId=department.pk), format='json')
    assert r.status_code == 201
    data = r.json()['data']
    assert data['email'] == 'efua.owusu@hospital.test'
    assert data['role'] == Role.NURSE
    assert 'password' not in data
    user = User.objects.get(pk=data['id'])
    assert user.check_password('LongEnough1')
    assert AuditLog.objects.filter(action=AuditAction.CREATE, entity_type='User', user=admin_user).exists()


def test_duplicate_email_is_conflict(admin_user, front_desk, client_for):
    r = client_for(admin_user).post(reverse('admin-users'),
                                    new_user_payload(email='FRONT_DESK@hospital.test', role='BILLING'),
                                    format='json')
    assert r.status_code == 409
    assert r.json()['message'] == 'User with this email already exists'


@pytest.mark.parametrize('overrides, message', [
    ({'password': 'short'}, 'Password must be at least 8 characters'),
    ({'role': 'JANITOR'}, 'Invalid role'),
    ({'firstName': ''}, 'Required fields missing'),
    ({'role': 'DOCTOR'}, 'Department is required for role DOCTOR'),
])
def test_create_user_validation(admin_user, client_for, overrides, message):
    r = client_for(admin_user).post(reverse('admin-users'), new_user_payload(**overrides), format='json')
    assert r.status_code == 400
    assert r.json()['message'] == message


def test_users_are_paginated(admin_user, client_for, make_staff):
    for i in range(12):
        make_staff(Role.FRONT_DESK, email=f'desk{i}@hospital.test')
    r = client_for(admin_user).get(reverse('admin-users'), {'page': 2, 'limit': 5})
    data = r.json()['data']
    assert data['currentPage'] == 2
    assert data['totalUsers'] == 13
    assert data['totalPages'] == 3
    assert len(data['users']) == 5

    r = client_for(admin_user).get(reverse('admin-users'), {'role': 'front_desk'})
    assert r.json()['data']['totalUsers'] == 12


def test_deactivate_user_once(admin_user, nurse, client_for):
    url = reverse('admin-user-deactivate', kwargs={'user_id': nurse.pk})
    client = client_for(admin_user)
    assert client.delete(url).status_code == 200
    nurse.refresh_from_db()
    assert nurse.is_active is False

    r = client.delete(url)
    assert r.status_code == 404
    assert r.json()['message'] == 'User not found or already deactivated'


def test_admin_endpoints_need_admin(doctor, client_for):
    client = client_for(doctor)
    assert client.get(reverse('admin-users')).status_code == 403
    assert client.get(reverse('admin-audit-logs')).status_code == 403


def test_audit_log_filters(admin_user, doctor, client_for):
    record_audit(user=doctor, action=AuditAction.UPDATE, entity_type='Patient', entity_id=7)
    record_audit(user=doctor, action=AuditAction.UPDATE, entity_type='Patient', entity_id=8,
                 status=AuditStatus.FAILURE, error_message='boom')
    record_audit(user=admin_user, action=AuditAction.CREATE, entity_type='Ward', entity_id=1)

    client = client_for(admin_user)
    r = client.get(reverse('admin-audit-logs'), {'entityType': 'Patient', 'entityId': '7'})
    items = r.json()['data']['items']
    assert len(items) == 1
    assert items[0]['userId'] == doctor.pk

    r = client.get(reverse('admin-audit-logs'), {'userId': doctor.pk, 'status': AuditStatus.FAILURE})
    items = r.json()['data']['items']
    assert [i['errorMessage'] for i in items] == ['boom']


def test_audit_entries_are_immutable(doctor):
    entry = record_audit(user=doctor, action=AuditAction.UPDATE, entity_type='Patient', entity_id=1)
    entry.description = 'tampered'
    with pytest.raises(ValueError):
        entry.save()
    with pytest.raises(ValueError):
        entry.delete()
    assert AuditLog.objects.filter(pk=entry.pk).exists()
