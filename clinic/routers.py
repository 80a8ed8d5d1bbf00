"""
URL mappings for the hospital API.

Paths carry no trailing slash.  Literal segments (``pending``,
``low-stock`` ...) are listed before the ``<int:...>`` routes they
would otherwise shadow.
"""
from django.urls import path

from .views import (
    admin,
    admissions,
    appointments,
    auth,
    consultations,
    departments,
    emergency,
    health,
    patients,
    pharmacy,
    prescriptions,
    wards,
)

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),
    path('<str:actor>/login', auth.login, name='login'),

    # administration
    path('admin/users', admin.users, name='admin-users'),
    path('admin/users/<int:user_id>', admin.deactivate_user, name='admin-user-deactivate'),
    path('admin/audit-logs', admin.audit_logs, name='admin-audit-logs'),

    # departments
    path('departments', departments.departments, name='departments'),
    path('departments/<int:department_id>', departments.department_detail, name='department-detail'),
    path('departments/<int:department_id>/doctors', departments.department_doctors, name='department-doctors'),

    # patients
    path('patients', patients.patients, name='patients'),
    path('patients/<int:patient_id>', patients.patient_detail, name='patient-detail'),
    path('patients/<int:patient_id>/history', patients.patient_history, name='patient-history'),

    # appointments
    path('appointments', appointments.appointments, name='appointments'),
    path('appointments/doctor/<int:doctor_id>', appointments.doctor_appointments, name='doctor-appointments'),
    path('appointments/doctor/<int:doctor_id>/slots', appointments.available_slots, name='doctor-slots'),
    path('appointments/<int:appointment_id>', appointments.appointment_detail, name='appointment-detail'),
    path('appointments/<int:appointment_id>/start', appointments.start_appointment, name='appointment-start'),
    path('appointments/<int:appointment_id>/complete', appointments.complete_appointment,
         name='appointment-complete'),
    path('appointments/<int:appointment_id>/no-show', appointments.no_show, name='appointment-no-show'),

    # consultations
    path('consultations', consultations.consultations, name='consultations'),
    path('consultations/<int:consultation_id>', consultations.consultation_detail, name='consultation-detail'),
    path('consultations/<int:consultation_id>/follow-up', consultations.follow_up, name='consultation-follow-up'),

    # prescriptions
    path('prescriptions', prescriptions.prescriptions, name='prescriptions'),
    path('prescriptions/pending', prescriptions.pending, name='prescriptions-pending'),
    path('prescriptions/unpaid', prescriptions.unpaid, name='prescriptions-unpaid'),
    path('prescriptions/<int:prescription_id>', prescriptions.prescription_detail, name='prescription-detail'),
    path('prescriptions/<int:prescription_id>/pay', prescriptions.pay, name='prescription-pay'),
    path('prescriptions/<int:prescription_id>/dispense', prescriptions.dispense, name='prescription-dispense'),
    path('prescriptions/<int:prescription_id>/cancel', prescriptions.cancel, name='prescription-cancel'),

    # wards and beds
    path('wards', wards.wards, name='wards'),
    path('wards/available-beds', wards.available_beds, name='wards-available-beds'),
    path('wards/<int:ward_id>/beds', wards.ward_beds, name='ward-beds'),
    path('wards/<int:ward_id>/admissions', wards.ward_admissions, name='ward-admissions'),
    path('beds/<int:bed_id>/status', wards.bed_status, name='bed-status'),

    # admissions and vitals
    path('admissions', admissions.admissions, name='admissions'),
    path('admissions/<int:admission_id>', admissions.admission_detail, name='admission-detail'),
    path('admissions/<int:admission_id>/discharge', admissions.discharge, name='admission-discharge'),
    path('admissions/<int:admission_id>/transfer', admissions.transfer, name='admission-transfer'),
    path('admissions/<int:admission_id>/vitals', admissions.vitals, name='admission-vitals'),
    path('admissions/<int:admission_id>/vitals/trend', admissions.vitals_trend, name='admission-vitals-trend'),

    # pharmacy
    path('drugs', pharmacy.drugs, name='drugs'),
    path('drugs/low-stock', pharmacy.low_stock, name='drugs-low-stock'),
    path('drugs/expired', pharmacy.expired, name='drugs-expired'),
    path('drugs/<int:drug_id>', pharmacy.drug_detail, name='drug-detail'),
    path('drugs/<int:drug_id>/stock', pharmacy.add_stock, name='drug-stock'),
    path('restock-requests', pharmacy.restock_requests, name='restock-requests'),
    path('restock-requests/pending', pharmacy.pending_restock_requests, name='restock-requests-pending'),
    path('restock-requests/<int:restock_id>', pharmacy.restock_detail, name='restock-detail'),
    path('restock-requests/<int:restock_id>/approve', pharmacy.approve_restock, name='restock-approve'),
    path('restock-requests/<int:restock_id>/reject', pharmacy.reject_restock, name='restock-reject'),
    path('restock-requests/<int:restock_id>/fulfill', pharmacy.fulfill_restock, name='restock-fulfill'),

    # emergency
    path('emergency-cases', emergency.emergency_cases, name='emergency-cases'),
    path('emergency-cases/critical', emergency.critical_cases, name='emergency-critical'),
    path('emergency-cases/<int:case_id>', emergency.case_detail, name='emergency-detail'),
    path('emergency-cases/<int:case_id>/identify', emergency.identify, name='emergency-identify'),
    path('emergency-cases/<int:case_id>/admit', emergency.admit, name='emergency-admit'),
    path('emergency-cases/<int:case_id>/resolve', emergency.resolve, name='emergency-resolve'),
]
