from unittest import mock

import pytest
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from clinic.authentication import issue_access_token
from clinic.models import AuditLog, AuditStatus, Role, User

from .conftest import PASSWORD

pytestmark = pytest.mark.django_db


def login(actor, email, password=PASSWORD):
    return APIClient().post(reverse('login', kwargs={'actor': actor}),
                            {'email': email, 'password': password}, format='json')


def test_login_returns_token_with_role_claims(doctor):
    r = login('doctor', doctor.email)
    assert r.status_code == 200
    body = r.json()
    assert body['success'] is True
    assert body['data']['role'] == Role.DOCTOR
    assert body['data']['user']['email'] == doctor.email

    token = AccessToken(body['data']['accessToken'])
    assert token['sub'] == str(doctor.pk)
    assert token['role'] == Role.DOCTOR
    assert token['departmentId'] == doctor.department_id
    assert token['exp'] - token['iat'] == 15 * 60


def test_login_normalises_actor_and_email(front_desk):
    r = login('Front-Desk', '  FRONT_DESK@Hospital.test ')
    assert r.status_code == 200
    front_desk.refresh_from_db()
    assert front_desk.last_login is not None


def test_unknown_actor_is_rejected(doctor):
    r = login('janitor', doctor.email)
    assert r.status_code == 400
    assert r.json() == {'success': False, 'message': 'Invalid Actor'}


@pytest.mark.parametrize('email,password', [
    ('nobody@hospital.test', PASSWORD),
    ('doctor@hospital.test', 'wrong-password'),
])
def test_bad_credentials_share_one_message(doctor, email, password):
    r = login('doctor', email, password)
    assert r.status_code == 401
    assert r.json()['message'] == 'Invalid Credentials'


def test_unknown_email_still_hashes_the_password(doctor):
    with mock.patch.object(User, 'set_password', autospec=True) as hasher:
        r = login('doctor', 'nobody@hospital.test')
    assert r.status_code == 401
    hasher.assert_called_once_with(mock.ANY, PASSWORD)


def test_inactive_account_cannot_log_in(doctor):
    doctor.is_active = False
    doctor.save()
    r = login('doctor', doctor.email)
    assert r.status_code == 401
    assert r.json()['message'] == 'Invalid Credentials'


def test_role_mismatch_is_forbidden(nurse):
    r = login('doctor', nurse.email)
    assert r.status_code == 403
    assert r.json()['message'] == 'Role mismatch'


def test_every_attempt_is_audited(doctor):
    login('doctor', doctor.email, 'nope')
    login('doctor', doctor.email)
    rows = list(AuditLog.objects.filter(action='LOGIN').order_by('id'))
    assert [r.status for r in rows] == [AuditStatus.FAILURE, AuditStatus.SUCCESS]
    assert rows[1].user_id == doctor.pk


def test_missing_token_is_unauthorised():
    r = APIClient().get(reverse('departments'))
    assert r.status_code == 401
    assert r.json()['success'] is False


def test_garbage_token_is_unauthorised():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
    assert client.get(reverse('departments')).status_code == 401


def test_token_of_deactivated_user_is_rejected(doctor, client_for):
    client = client_for(doctor)
    doctor.is_active = False
    doctor.save()
    assert client.get(reverse('departments')).status_code == 401


def test_token_with_stale_role_is_rejected(doctor, client_for):
    client = client_for(doctor)
    doctor.role = Role.NURSE
    doctor.save()
    r = client.get(reverse('departments'))
    assert r.status_code == 401


def test_role_comes_from_token(doctor, client_for):
    token = issue_access_token(doctor)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    # admin-only endpoint
    assert client.get(reverse('admin-users')).status_code == 403
