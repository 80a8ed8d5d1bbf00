import datetime

import pytest
from django.urls import reverse
from django.utils import timezone

from clinic.exceptions import ConflictError, ValidationError
from clinic.models import Admission, AdmissionStatus, AdmissionType, Bed, BedStatus, Ward, WardType
from clinic.services import admissions as admission_service
from clinic.services import vitals as vitals_service

pytestmark = pytest.mark.django_db


@pytest.fixture
def icu(db):
    ward = Ward.objects.create(name='ICU', ward_type=WardType.ICU, capacity=2)
    Bed.objects.create(ward=ward, bed_number='I1')
    return ward


@pytest.fixture
def admitted(doctor, patient, ward, beds):
    return admission_service.admit(doctor, patient_id=patient.pk, doctor_id=doctor.pk,
                                   ward_id=ward.pk, bed_id=beds[0].pk, reason='Pneumonia')


def test_admin_creates_ward_and_duplicate_is_conflict(admin_user, nurse, client_for):
    payload = {'name': 'Maternity', 'wardType': 'maternity', 'capacity': 2}
    assert client_for(nurse).post(reverse('wards'), payload, format='json').status_code == 403

    r = client_for(admin_user).post(reverse('wards'), payload, format='json')
    assert r.status_code == 201
    assert r.json()['data']['wardType'] == WardType.MATERNITY

    r = client_for(admin_user).post(reverse('wards'), {**payload, 'name': 'maternity'}, format='json')
    assert r.status_code == 409


def test_ward_capacity_limits_beds(admin_user, client_for):
    ward = Ward.objects.create(name='Side Room', ward_type=WardType.PRIVATE, capacity=1)
    url = reverse('ward-beds', kwargs={'ward_id': ward.pk})
    client = client_for(admin_user)
    assert client.post(url, {'bedNumber': 'S1'}, format='json').status_code == 201
    r = client.post(url, {'bedNumber': 'S2'}, format='json')
    assert r.status_code == 409
    assert r.json()['message'] == 'Ward is at full capacity'


def test_duplicate_bed_number_in_ward(admin_user, ward, beds, client_for):
    r = client_for(admin_user).post(reverse('ward-beds', kwargs={'ward_id': ward.pk}),
                                    {'bedNumber': 'B1'}, format='json')
    assert r.status_code == 409


def test_available_beds_by_type(nurse, ward, beds, icu, client_for):
    client = client_for(nurse)
    r = client.get(reverse('wards-available-beds'), {'wardType': 'general'})
    assert r.status_code == 200
    assert r.json()['data'] == [
        {'wardId': ward.pk, 'name': 'General A', 'wardType': WardType.GENERAL, 'availableBeds': 3},
    ]

    r = client.get(reverse('wards-available-beds'))
    assert r.status_code == 400
    assert r.json()['message'] == 'Ward Type is required'


def test_admission_occupies_bed(doctor, patient, ward, beds, client_for):
    r = client_for(doctor).post(reverse('admissions'), {
        'patientId': patient.pk, 'doctorId': doctor.pk, 'wardId': ward.pk, 'bedId': beds[0].pk,
    }, format='json')
    assert r.status_code == 201
    data = r.json()['data']
    assert data['admissionNumber'] == 'ADM-00001'
    assert data['status'] == AdmissionStatus.ACTIVE
    beds[0].refresh_from_db()
    assert beds[0].status == BedStatus.OCCUPIED

    r = client_for(doctor).get(reverse('ward-admissions', kwargs={'ward_id': ward.pk}))
    assert [a['id'] for a in r.json()['data']] == [data['id']]


def test_nurse_cannot_admit(nurse, patient, doctor, ward, client_for):
    r = client_for(nurse).post(reverse('admissions'), {
        'patientId': patient.pk, 'doctorId': doctor.pk, 'wardId': ward.pk,
    }, format='json')
    assert r.status_code == 403


def test_one_active_admission_per_patient(doctor, patient, ward, beds, admitted):
    with pytest.raises(ConflictError) as exc:
        admission_service.admit(doctor, patient_id=patient.pk, doctor_id=doctor.pk,
                                ward_id=ward.pk, bed_id=beds[1].pk)
    assert exc.value.detail == 'Patient already has an active admission'
    beds[1].refresh_from_db()
    assert beds[1].status == BedStatus.AVAILABLE


def test_occupied_bed_is_conflict(doctor, other_patient, ward, beds, admitted, client_for):
    r = client_for(doctor).post(reverse('admissions'), {
        'patientId': other_patient.pk, 'doctorId': doctor.pk, 'wardId': ward.pk, 'bedId': beds[0].pk,
    }, format='json')
    assert r.status_code == 409
    assert Admission.objects.filter(patient=other_patient).count() == 0


def test_bed_from_another_ward_rejected(doctor, patient, ward, icu):
    icu_bed = icu.beds.get()
    with pytest.raises(ValidationError) as exc:
        admission_service.admit(doctor, patient_id=patient.pk, doctor_id=doctor.pk,
                                ward_id=ward.pk, bed_id=icu_bed.pk)
    assert exc.value.status_code == 400


def test_length_of_stay_rounds_partial_days_up(admitted):
    admitted.admission_date = timezone.now() - datetime.timedelta(days=1, hours=3)
    admitted.discharge_date = admitted.admission_date + datetime.timedelta(days=1, hours=3)
    assert admitted.length_of_stay == 2
    admitted.discharge_date = admitted.admission_date + datetime.timedelta(days=1)
    assert admitted.length_of_stay == 1


def test_discharge_frees_bed_and_is_final(doctor, admitted, beds, client_for):
    url = reverse('admission-discharge', kwargs={'admission_id': admitted.pk})
    r = client_for(doctor).post(url, {'dischargeSummary': 'Recovered'}, format='json')
    assert r.status_code == 200
    data = r.json()['data']
    assert data['status'] == AdmissionStatus.DISCHARGED
    assert data['dischargeSummary'] == 'Recovered'
    beds[0].refresh_from_db()
    assert beds[0].status == BedStatus.AVAILABLE

    assert client_for(doctor).post(url, {}, format='json').status_code == 409


def test_transfer_opens_new_admission(doctor, admitted, beds, icu, client_for):
    icu_bed = icu.beds.get()
    r = client_for(doctor).post(reverse('admission-transfer', kwargs={'admission_id': admitted.pk}), {
        'wardId': icu.pk, 'bedId': icu_bed.pk, 'reason': 'Deteriorating',
    }, format='json')
    assert r.status_code == 200
    data = r.json()['data']
    assert data['admissionType'] == AdmissionType.TRANSFER
    assert data['transferredFrom'] == admitted.pk
    assert data['wardId'] == icu.pk

    admitted.refresh_from_db()
    assert admitted.status == AdmissionStatus.TRANSFERRED
    beds[0].refresh_from_db()
    icu_bed.refresh_from_db()
    assert beds[0].status == BedStatus.AVAILABLE
    assert icu_bed.status == BedStatus.OCCUPIED


def test_transfer_to_occupied_bed_rolls_back(doctor, admitted, other_patient, ward, beds):
    admission_service.admit(doctor, patient_id=other_patient.pk, doctor_id=doctor.pk,
                            ward_id=ward.pk, bed_id=beds[1].pk)
    with pytest.raises(ConflictError):
        admission_service.transfer(doctor, admitted.pk, ward_id=ward.pk, bed_id=beds[1].pk)
    admitted.refresh_from_db()
    beds[0].refresh_from_db()
    assert admitted.status == AdmissionStatus.ACTIVE
    assert beds[0].status == BedStatus.OCCUPIED


def test_bed_status_rules(nurse, front_desk, admitted, beds, client_for):
    url = reverse('bed-status', kwargs={'bed_id': beds[1].pk})
    r = client_for(nurse).patch(url, {'status': BedStatus.OCCUPIED}, format='json')
    assert r.status_code == 400

    r = client_for(nurse).patch(url, {'status': BedStatus.MAINTENANCE}, format='json')
    assert r.status_code == 200
    assert r.json()['data']['lastMaintenance'] is not None

    occupied = reverse('bed-status', kwargs={'bed_id': beds[0].pk})
    assert client_for(nurse).patch(occupied, {'status': BedStatus.AVAILABLE}, format='json').status_code == 409
    assert client_for(front_desk).patch(url, {'status': BedStatus.AVAILABLE}, format='json').status_code == 403


def test_vitals_recorded_and_trended(nurse, admitted, client_for):
    client = client_for(nurse)
    url = reverse('admission-vitals', kwargs={'admission_id': admitted.pk})
    r = client.post(url, {'temperature': 38.5, 'systolic': 120, 'diastolic': 80, 'pulse': 92}, format='json')
    assert r.status_code == 201
    assert r.json()['data']['bloodPressure'] == '120/80'

    earlier = timezone.now() - datetime.timedelta(hours=2)
    vitals_service.record_vitals(nurse, admitted.pk, temperature=37.2, recorded_at=earlier)
    old = timezone.now() - datetime.timedelta(hours=30)
    vitals_service.record_vitals(nurse, admitted.pk, temperature=39.9, recorded_at=old)

    r = client.get(reverse('admission-vitals-trend', kwargs={'admission_id': admitted.pk}),
                   {'vital': 'temperature', 'hours': 24})
    assert r.status_code == 200
    data = r.json()['data']
    assert data['vital'] == 'temperature'
    assert [p['value'] for p in data['points']] == [37.2, 38.5]

    r = client.get(reverse('admission-vitals-trend', kwargs={'admission_id': admitted.pk}),
                   {'vital': 'bloodPressure'})
    assert [p['value'] for p in r.json()['data']['points']] == ['120/80']


def test_vitals_need_a_measurement_and_both_pressures(nurse, admitted, client_for):
    url = reverse('admission-vitals', kwargs={'admission_id': admitted.pk})
    r = client_for(nurse).post(url, {'notes': 'resting'}, format='json')
    assert r.status_code == 400
    r = client_for(nurse).post(url, {'systolic': 120}, format='json')
    assert r.status_code == 400


def test_vitals_rejected_after_discharge(doctor, nurse, admitted, client_for):
    admission_service.discharge(doctor, admitted.pk)
    r = client_for(nurse).post(reverse('admission-vitals', kwargs={'admission_id': admitted.pk}),
                               {'pulse': 70}, format='json')
    assert r.status_code == 409
