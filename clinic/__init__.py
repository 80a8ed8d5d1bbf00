"""Hospital management application.

Models, services, serializers and views for staff authentication,
appointments, consultations, prescriptions, wards and admissions,
pharmacy stock, emergency triage and the audit trail.
"""
