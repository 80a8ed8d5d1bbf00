import datetime

import pytest
from django.urls import reverse
from django.utils import timezone

from clinic.exceptions import ConflictError, ValidationError
from clinic.models import Appointment, AppointmentStatus, Department
from clinic.services import appointments as appointment_service

pytestmark = pytest.mark.django_db


def book(client, patient, doctor, day, slot='10:00', **extra):
    payload = {
        'patientId': patient.pk,
        'doctorId': doctor.pk,
        'appointmentDate': day.isoformat(),
        'timeSlot': slot,
        **extra,
    }
    return client.post(reverse('appointments'), payload, format='json')


def test_booking_assigns_sequential_numbers(front_desk, patient, other_patient, doctor, tomorrow, client_for):
    client = client_for(front_desk)
    first = book(client, patient, doctor, tomorrow, '09:00')
    second = book(client, other_patient, doctor, tomorrow, '09:30')
    assert first.status_code == 201
    assert first.json()['data']['appointmentId'] == 'APT-00001'
    assert second.json()['data']['appointmentId'] == 'APT-00002'
    assert first.json()['data']['status'] == AppointmentStatus.SCHEDULED
    assert first.json()['data']['departmentId'] == doctor.department_id


def test_double_booking_is_a_conflict(front_desk, patient, other_patient, doctor, tomorrow, client_for):
    client = client_for(front_desk)
    assert book(client, patient, doctor, tomorrow).status_code == 201
    r = book(client, other_patient, doctor, tomorrow)
    assert r.status_code == 409
    assert r.json()['message'] == appointment_service.DOUBLE_BOOKED
    assert Appointment.objects.count() == 1


def test_cancelled_slot_can_be_rebooked(front_desk, patient, other_patient, doctor, tomorrow, client_for):
    client = client_for(front_desk)
    appt_id = book(client, patient, doctor, tomorrow).json()['data']['id']
    r = client.delete(reverse('appointment-detail', kwargs={'appointment_id': appt_id}))
    assert r.status_code == 200
    assert r.json()['data']['cancellationReason'] == 'Cancelled by front desk'
    assert book(client, other_patient, doctor, tomorrow).status_code == 201


def test_past_date_is_rejected(front_desk, patient, doctor, client_for):
    yesterday = timezone.localdate() - datetime.timedelta(days=1)
    r = book(client_for(front_desk), patient, doctor, yesterday)
    assert r.status_code == 400
    assert r.json()['message'] == 'Appointment date cannot be in the past'


def test_bad_time_slot_format(front_desk, patient, doctor, tomorrow, client_for):
    r = book(client_for(front_desk), patient, doctor, tomorrow, '25:00')
    assert r.status_code == 400
    assert 'Invalid time format' in r.json()['message']


def test_doctor_from_other_department(front_desk, patient, doctor, tomorrow, client_for):
    other = Department.objects.create(name='Neurology', description='Brain')
    r = book(client_for(front_desk), patient, doctor, tomorrow, departmentId=other.pk)
    assert r.status_code == 400
    assert r.json()['message'] == 'Doctor does not belong to this department'


def test_lifecycle_is_strict(front_desk, patient, doctor, tomorrow):
    appt = appointment_service.create_appointment(
        front_desk, patient_id=patient.pk, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot='11:00',
    )
    with pytest.raises(ConflictError):
        appointment_service.complete_appointment(doctor, appt.pk)
    appointment_service.start_appointment(doctor, appt.pk)
    done = appointment_service.complete_appointment(doctor, appt.pk)
    assert done.status == AppointmentStatus.COMPLETED
    with pytest.raises(ConflictError):
        appointment_service.cancel_appointment(front_desk, appt.pk)


def test_no_show_releases_slot(front_desk, patient, other_patient, doctor, tomorrow):
    appt = appointment_service.create_appointment(
        front_desk, patient_id=patient.pk, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot='12:00',
    )
    appointment_service.mark_no_show(front_desk, appt.pk)
    assert '12:00' in appointment_service.available_slots(doctor.pk, tomorrow)
    again = appointment_service.create_appointment(
        front_desk, patient_id=other_patient.pk, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot='12:00',
    )
    assert again.status == AppointmentStatus.SCHEDULED


def test_update_cannot_touch_status(front_desk, patient, doctor, tomorrow, client_for):
    client = client_for(front_desk)
    appt_id = book(client, patient, doctor, tomorrow).json()['data']['id']
    url = reverse('appointment-detail', kwargs={'appointment_id': appt_id})
    r = client.put(url, {'status': 'COMPLETED'}, format='json')
    assert r.status_code == 400
    r = client.put(url, {'timeSlot': '14:30', 'notes': 'moved'}, format='json')
    assert r.status_code == 200
    assert r.json()['data']['timeSlot'] == '14:30'


def test_reschedule_into_taken_slot(front_desk, patient, other_patient, doctor, tomorrow):
    appointment_service.create_appointment(
        front_desk, patient_id=patient.pk, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot='09:00',
    )
    second = appointment_service.create_appointment(
        front_desk, patient_id=other_patient.pk, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot='09:30',
    )
    with pytest.raises(ConflictError):
        appointment_service.update_appointment(front_desk, second.pk, time_slot='09:00')


def test_available_slots(front_desk, patient, doctor, tomorrow, client_for):
    appointment_service.create_appointment(
        front_desk, patient_id=patient.pk, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot='09:30',
    )
    r = client_for(front_desk).get(
        reverse('doctor-slots', kwargs={'doctor_id': doctor.pk}), {'date': tomorrow.isoformat()},
    )
    assert r.status_code == 200
    slots = r.json()['data']['slots']
    assert slots[0] == '09:00'
    assert '09:30' not in slots
    assert slots[-1] == '16:30'
    assert len(slots) == 15


def test_available_slots_within_custom_hours(front_desk, patient, doctor, tomorrow, client_for):
    appointment_service.create_appointment(
        front_desk, patient_id=patient.pk, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot='09:30',
    )
    url = reverse('doctor-slots', kwargs={'doctor_id': doctor.pk})
    client = client_for(front_desk)

    r = client.get(url, {'date': tomorrow.isoformat(), 'slots': '09:00, 9:30,10:00,09:00'})
    assert r.status_code == 200
    assert r.json()['data']['slots'] == ['09:00', '10:00']

    r = client.get(url, {'date': tomorrow.isoformat(), 'slots': '09:00,25:00'})
    assert r.status_code == 400
    assert 'Invalid time format' in r.json()['message']


def test_default_slots_grid():
    assert appointment_service.default_slots('09:00', '10:00') == ['09:00', '09:30', '10:00']


def test_doctor_day_listing(front_desk, patient, other_patient, doctor, tomorrow, client_for):
    for p, slot in ((patient, '15:00'), (other_patient, '09:00')):
        appointment_service.create_appointment(
            front_desk, patient_id=p.pk, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot=slot,
        )
    r = client_for(doctor).get(
        reverse('doctor-appointments', kwargs={'doctor_id': doctor.pk}), {'date': tomorrow.isoformat()},
    )
    assert [a['timeSlot'] for a in r.json()['data']] == ['09:00', '15:00']


def test_unknown_doctor_for_slots(front_desk, client_for):
    r = client_for(front_desk).get(reverse('doctor-slots', kwargs={'doctor_id': 9999}))
    assert r.status_code == 404


def test_unknown_patient_on_booking(front_desk, doctor, tomorrow):
    with pytest.raises(ValidationError):
        appointment_service.create_appointment(
            front_desk, patient_id=9999, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot='10:00',
        )


def test_pharmacy_cannot_start_appointment(front_desk, pharmacist, patient, doctor, tomorrow, client_for):
    appt = appointment_service.create_appointment(
        front_desk, patient_id=patient.pk, doctor_id=doctor.pk, appointment_date=tomorrow, time_slot='10:00',
    )
    r = client_for(pharmacist).post(reverse('appointment-start', kwargs={'appointment_id': appt.pk}))
    assert r.status_code == 403
