import datetime
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from clinic.authentication import issue_access_token
from clinic.models import Bed, Department, Drug, Patient, Role, User, Ward

PASSWORD = 'Str0ngPass!'


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def department(db):
    return Department.objects.create(name='Cardiology', description='Heart care', code='CARD')


def make_user(role, email=None, department=None, **extra):
    return User.objects.create_user(
        email=email or f'{role.lower()}@hospital.test',
        password=PASSWORD,
        first_name=role.title(),
        last_name='Staff',
        role=role,
        department=department,
        **extra,
    )


@pytest.fixture
def admin_user(db):
    return make_user(Role.ADMIN)


@pytest.fixture
def doctor(department):
    return make_user(Role.DOCTOR, department=department)


@pytest.fixture
def nurse(department):
    return make_user(Role.NURSE, department=department)


@pytest.fixture
def front_desk(db):
    return make_user(Role.FRONT_DESK)


@pytest.fixture
def pharmacist(db):
    return make_user(Role.PHARMACY)


@pytest.fixture
def cashier(db):
    return make_user(Role.BILLING)


@pytest.fixture
def client_for():
    """``client_for(user)`` returns an APIClient carrying that user's bearer token."""
    def _client(user):
        client = APIClient()
        if user is not None:
            client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_access_token(user)}')
        return client
    return _client


@pytest.fixture
def patient(db):
    return Patient.objects.create(
        patient_number='PAT-90001',
        first_name='Ama',
        last_name='Mensah',
        date_of_birth=datetime.date(1990, 5, 17),
        gender='FEMALE',
        phone='0244000001',
    )


@pytest.fixture
def other_patient(db):
    return Patient.objects.create(
        patient_number='PAT-90002',
        first_name='Kofi',
        last_name='Boateng',
        date_of_birth=datetime.date(1985, 1, 2),
        gender='MALE',
        phone='0244000002',
    )


@pytest.fixture
def ward(db):
    return Ward.objects.create(name='General A', ward_type='GENERAL', capacity=4)


@pytest.fixture
def beds(ward):
    return [Bed.objects.create(ward=ward, bed_number=f'B{i}') for i in range(1, 4)]


@pytest.fixture
def drug(db):
    return Drug.objects.create(
        name='Amoxicillin', unit_price=Decimal('2.50'), stock_quantity=100, reorder_level=10,
        category='ANTIBIOTIC',
    )


@pytest.fixture
def tomorrow():
    return timezone.localdate() + datetime.timedelta(days=1)


@pytest.fixture
def make_staff(db):
    return make_user
