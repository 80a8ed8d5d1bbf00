"""
End-to-end walk through the outpatient flow.

A patient is registered at the front desk, seen by a doctor, billed and
finally served at the pharmacy.  Every step goes through the HTTP API
with tokens obtained from the login endpoint.
"""
import datetime
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import AuditLog, Department, Drug, Role, User

PASSWORD = 'Outpatient9!'


class OutpatientFlowTests(APITestCase):
    def setUp(self) -> None:
        self.department = Department.objects.create(name='General Medicine', description='GP clinic')
        self.staff = {}
        for role in (Role.FRONT_DESK, Role.DOCTOR, Role.BILLING, Role.PHARMACY):
            self.staff[role] = User.objects.create_user(
                email=f'{role.lower()}@flow.test', password=PASSWORD, first_name=role.title(),
                last_name='Flow', role=role,
                department=self.department if role == Role.DOCTOR else None,
            )
        self.drug = Drug.objects.create(name='Paracetamol', unit_price=Decimal('1.50'), stock_quantity=20)

    def client_as(self, role: str) -> APIClient:
        actor = role.lower().replace('_', '-')
        r = self.client.post(reverse('login', kwargs={'actor': actor}),
                             {'email': self.staff[role].email, 'password': PASSWORD}, format='json')
        self.assertEqual(r.status_code, status.HTTP_200_OK, r.content)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {r.json()['data']['accessToken']}")
        return client

    def test_register_consult_bill_and_dispense(self):
        desk = self.client_as(Role.FRONT_DESK)
        doctor = self.client_as(Role.DOCTOR)
        cashier = self.client_as(Role.BILLING)
        pharmacy = self.client_as(Role.PHARMACY)
        doctor_id = self.staff[Role.DOCTOR].pk

        r = desk.post(reverse('patients'), {
            'firstName': 'Abena', 'lastName': 'Darko', 'dateOfBirth': '2001-07-21',
            'gender': 'FEMALE', 'phone': '0551234567',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        patient_id = r.json()['data']['id']

        day = timezone.localdate() + datetime.timedelta(days=2)
        r = desk.post(reverse('appointments'), {
            'patientId': patient_id, 'doctorId': doctor_id,
            'appointmentDate': day.isoformat(), 'timeSlot': '10:30',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        appointment_id = r.json()['data']['id']

        r = desk.get(reverse('doctor-slots', kwargs={'doctor_id': doctor_id}), {'date': day.isoformat()})
        self.assertNotIn('10:30', r.json()['data']['slots'])

        r = doctor.post(reverse('appointment-start', kwargs={'appointment_id': appointment_id}))
        self.assertEqual(r.status_code, status.HTTP_200_OK)

        r = doctor.post(reverse('consultations'), {
            'patientId': patient_id, 'appointmentId': appointment_id, 'diagnosis': 'Malaria',
            'symptoms': ['fever', 'chills'], 'outcome': 'PHARMACY',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        consultation_id = r.json()['data']['id']

        r = doctor.post(reverse('appointment-complete', kwargs={'appointment_id': appointment_id}))
        self.assertEqual(r.json()['data']['status'], 'COMPLETED')

        r = doctor.post(reverse('prescriptions'), {
            'patientId': patient_id, 'consultationId': consultation_id,
            'items': [{'drugId': self.drug.pk, 'quantity': 6, 'dosage': '2 tabs tds'}],
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        prescription = r.json()['data']
        self.assertEqual(prescription['totalAmount'], '9.00')

        r = cashier.post(reverse('prescription-pay', kwargs={'prescription_id': prescription['id']}),
                         {'amount': '9.00'}, format='json')
        self.assertEqual(r.json()['data']['paymentStatus'], 'PAID')

        r = pharmacy.get(reverse('prescriptions-pending'))
        self.assertEqual([p['id'] for p in r.json()['data']], [prescription['id']])

        r = pharmacy.post(reverse('prescription-dispense', kwargs={'prescription_id': prescription['id']}))
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual(r.json()['data']['status'], 'DISPENSED')
        self.drug.refresh_from_db()
        self.assertEqual(self.drug.stock_quantity, 14)

        r = desk.get(reverse('patient-history', kwargs={'patient_id': patient_id}))
        history = r.json()['data']
        self.assertEqual(len(history['appointments']), 1)
        self.assertEqual(len(history['consultations']), 1)
        self.assertEqual(len(history['prescriptions']), 1)

        self.assertEqual(AuditLog.objects.filter(action='LOGIN', status='SUCCESS').count(), 4)

    def test_pharmacy_cannot_take_payment(self):
        pharmacy = self.client_as(Role.PHARMACY)
        r = pharmacy.post(reverse('prescription-pay', kwargs={'prescription_id': 1}),
                          {'amount': '1.00'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(r.json()['success'])
