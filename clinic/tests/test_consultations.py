import pytest
from django.urls import reverse

from clinic.models import AppointmentType, AuditLog, Consultation, ConsultationOutcome

pytestmark = pytest.mark.django_db


def consultation_payload(patient, **overrides):
    payload = {
        'patientId': patient.pk,
        'diagnosis': 'Acute bronchitis',
        'symptoms': ['cough', ' fever '],
        'outcome': ConsultationOutcome.PHARMACY,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def consultation(doctor, patient, client_for):
    r = client_for(doctor).post(reverse('consultations'), consultation_payload(patient), format='json')
    assert r.status_code == 201
    return Consultation.objects.get(pk=r.json()['data']['id'])


def test_doctor_records_consultation_for_self(doctor, consultation):
    assert consultation.doctor_id == doctor.pk
    assert consultation.symptoms == ['cough', 'fever']
    assert AuditLog.objects.filter(entity_type='Consultation', entity_id=str(consultation.pk)).exists()


def test_nurse_must_name_the_doctor(nurse, doctor, patient, client_for):
    client = client_for(nurse)
    r = client.post(reverse('consultations'), consultation_payload(patient), format='json')
    assert r.status_code == 400

    r = client.post(reverse('consultations'), consultation_payload(patient, doctorId=doctor.pk), format='json')
    assert r.status_code == 201
    assert r.json()['data']['doctor']['id'] == doctor.pk


def test_symptoms_are_required(doctor, patient, client_for):
    payload = consultation_payload(patient)
    del payload['symptoms']
    r = client_for(doctor).post(reverse('consultations'), payload, format='json')
    assert r.status_code == 400
    assert r.json()['success'] is False


def test_referral_needs_department(doctor, patient, client_for):
    r = client_for(doctor).post(
        reverse('consultations'),
        consultation_payload(patient, outcome=ConsultationOutcome.REFERRED), format='json',
    )
    assert r.status_code == 400
    assert r.json()['message'] == 'Referral department is required for a referred outcome'


def test_outcome_cannot_change(doctor, consultation, client_for):
    url = reverse('consultation-detail', kwargs={'consultation_id': consultation.pk})
    r = client_for(doctor).put(url, {'outcome': ConsultationOutcome.ADMITTED}, format='json')
    assert r.status_code == 400
    assert r.json()['message'] == 'Consultation outcome cannot be changed'

    r = client_for(doctor).put(url, {'diagnosis': 'Viral bronchitis'}, format='json')
    assert r.status_code == 200
    assert r.json()['data']['diagnosis'] == 'Viral bronchitis'
    assert r.json()['data']['outcome'] == ConsultationOutcome.PHARMACY


def test_only_admin_deletes(doctor, admin_user, consultation, client_for):
    url = reverse('consultation-detail', kwargs={'consultation_id': consultation.pk})
    assert client_for(doctor).delete(url).status_code == 403
    assert client_for(admin_user).delete(url).status_code == 200
    assert not Consultation.objects.filter(pk=consultation.pk).exists()
    assert client_for(admin_user).get(url).status_code == 404


def test_pharmacy_reads_but_cannot_write(pharmacist, patient, consultation, client_for):
    client = client_for(pharmacist)
    r = client.get(reverse('consultations'), {'patientId': patient.pk})
    assert r.status_code == 200
    assert r.json()['data']['total'] == 1
    r = client.post(reverse('consultations'), consultation_payload(patient), format='json')
    assert r.status_code == 403


def test_front_desk_cannot_read(front_desk, client_for):
    assert client_for(front_desk).get(reverse('consultations')).status_code == 403


def test_follow_up_books_first_free_slot(doctor, patient, tomorrow, client_for):
    client = client_for(doctor)
    r = client.post(reverse('consultations'), consultation_payload(
        patient, outcome=ConsultationOutcome.FOLLOW_UP, followUpDate=tomorrow.isoformat(),
    ), format='json')
    assert r.status_code == 201
    consultation_id = r.json()['data']['id']

    r = client.post(reverse('consultation-follow-up', kwargs={'consultation_id': consultation_id}))
    assert r.status_code == 201
    data = r.json()['data']
    assert data['type'] == AppointmentType.FOLLOW_UP
    assert data['timeSlot'] == '09:00'
    assert data['appointmentDate'] == tomorrow.isoformat()


def test_follow_up_requires_date(doctor, consultation, client_for):
    r = client_for(doctor).post(reverse('consultation-follow-up', kwargs={'consultation_id': consultation.pk}))
    assert r.status_code == 400
    assert r.json()['message'] == 'Consultation has no follow-up date'


def test_follow_up_date_must_be_given_for_follow_up_outcome(doctor, patient, client_for):
    r = client_for(doctor).post(reverse('consultations'), consultation_payload(
        patient, outcome=ConsultationOutcome.FOLLOW_UP,
    ), format='json')
    assert r.status_code == 400
    assert r.json()['message'] == 'Follow-up date is required for a follow-up outcome'
