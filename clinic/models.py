"""
Database models for the hospital management backend.

Each entity is a self-contained table.  Human-readable numbers
(``PAT-00001``, ``APT-00001`` ...) are assigned by the service layer from
:class:`SequenceCounter` rows, and every status change is performed by
the services in :mod:`clinic.services`; models only hold data, field
validation and derived read-only values.
"""
from __future__ import annotations

import math
from decimal import Decimal

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

TIME_SLOT_VALIDATOR = RegexValidator(
    regex=r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$',
    message='Invalid time format, Use HH:MM format',
)
PHONE_VALIDATOR = RegexValidator(
    regex=r'^[0-9]{10,15}$',
    message='Please provide a valid phone number',
)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Role(models.TextChoices):
    ADMIN = 'ADMIN', 'Administrator'
    DOCTOR = 'DOCTOR', 'Doctor'
    FRONT_DESK = 'FRONT_DESK', 'Front desk'
    NURSE = 'NURSE', 'Nurse'
    PHARMACY = 'PHARMACY', 'Pharmacy'
    BILLING = 'BILLING', 'Billing'


class Gender(models.TextChoices):
    MALE = 'MALE', 'Male'
    FEMALE = 'FEMALE', 'Female'
    OTHER = 'OTHER', 'Other'


class BloodGroup(models.TextChoices):
    A_POS = 'A+', 'A+'
    A_NEG = 'A-', 'A-'
    B_POS = 'B+', 'B+'
    B_NEG = 'B-', 'B-'
    AB_POS = 'AB+', 'AB+'
    AB_NEG = 'AB-', 'AB-'
    O_POS = 'O+', 'O+'
    O_NEG = 'O-', 'O-'


class AppointmentType(models.TextChoices):
    NORMAL = 'NORMAL', 'Normal'
    EMERGENCY = 'EMERGENCY', 'Emergency'
    FOLLOW_UP = 'FOLLOW_UP', 'Follow-up'


class AppointmentStatus(models.TextChoices):
    SCHEDULED = 'SCHEDULED', 'Scheduled'
    IN_PROGRESS = 'IN_PROGRESS', 'In progress'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'
    NO_SHOW = 'NO_SHOW', 'No show'


class ConsultationOutcome(models.TextChoices):
    DISCHARGED = 'DISCHARGED', 'Discharged'
    PHARMACY = 'PHARMACY', 'Pharmacy'
    ADMITTED = 'ADMITTED', 'Admitted'
    REFERRED = 'REFERRED', 'Referred'
    FOLLOW_UP = 'FOLLOW_UP', 'Follow-up'


class WardType(models.TextChoices):
    GENERAL = 'GENERAL', 'General'
    PRIVATE = 'PRIVATE', 'Private'
    ICU = 'ICU', 'ICU'
    EMERGENCY = 'EMERGENCY', 'Emergency'
    PEDIATRIC = 'PEDIATRIC', 'Pediatric'
    MATERNITY = 'MATERNITY', 'Maternity'


class BedStatus(models.TextChoices):
    AVAILABLE = 'AVAILABLE', 'Available'
    OCCUPIED = 'OCCUPIED', 'Occupied'
    MAINTENANCE = 'MAINTENANCE', 'Maintenance'
    RESERVED = 'RESERVED', 'Reserved'


class BedFeature(models.TextChoices):
    OXYGEN = 'OXYGEN', 'Oxygen'
    MONITOR = 'MONITOR', 'Monitor'
    ADJUSTABLE = 'ADJUSTABLE', 'Adjustable'
    SIDE_RAILS = 'SIDE_RAILS', 'Side rails'


class AdmissionType(models.TextChoices):
    NORMAL = 'NORMAL', 'Normal'
    EMERGENCY = 'EMERGENCY', 'Emergency'
    TRANSFER = 'TRANSFER', 'Transfer'


class AdmissionStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    DISCHARGED = 'DISCHARGED', 'Discharged'
    TRANSFERRED = 'TRANSFERRED', 'Transferred'


class DrugCategory(models.TextChoices):
    ANTIBIOTIC = 'ANTIBIOTIC', 'Antibiotic'
    PAINKILLER = 'PAINKILLER', 'Painkiller'
    ANTISEPTIC = 'ANTISEPTIC', 'Antiseptic'
    VITAMIN = 'VITAMIN', 'Vitamin'
    INJECTION = 'INJECTION', 'Injection'
    OTHER = 'OTHER', 'Other'


class DosageForm(models.TextChoices):
    TABLET = 'TABLET', 'Tablet'
    CAPSULE = 'CAPSULE', 'Capsule'
    SYRUP = 'SYRUP', 'Syrup'
    INJECTION = 'INJECTION', 'Injection'
    OINTMENT = 'OINTMENT', 'Ointment'
    DROPS = 'DROPS', 'Drops'
    OTHER = 'OTHER', 'Other'


class PaymentStatus(models.TextChoices):
    AWAITING_PAYMENT = 'AWAITING_PAYMENT', 'Awaiting payment'
    PARTIALLY_PAID = 'PARTIALLY_PAID', 'Partially paid'
    PAID = 'PAID', 'Paid'


class PrescriptionStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    DISPENSED = 'DISPENSED', 'Dispensed'
    PARTIALLY_DISPENSED = 'PARTIALLY_DISPENSED', 'Partially dispensed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class RestockStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'
    FULFILLED = 'FULFILLED', 'Fulfilled'


class Severity(models.TextChoices):
    LOW = 'LOW', 'Low'
    MODERATE = 'MODERATE', 'Moderate'
    CRITICAL = 'CRITICAL', 'Critical'


class EmergencyStatus(models.TextChoices):
    REGISTERED = 'REGISTERED', 'Registered'
    ADMITTED = 'ADMITTED', 'Admitted'
    DISCHARGED = 'DISCHARGED', 'Discharged'
    REFERRED = 'REFERRED', 'Referred'
    DECEASED = 'DECEASED', 'Deceased'


class AuditAction(models.TextChoices):
    CREATE = 'CREATE', 'Create'
    UPDATE = 'UPDATE', 'Update'
    DELETE = 'DELETE', 'Delete'
    LOGIN = 'LOGIN', 'Login'
    LOGOUT = 'LOGOUT', 'Logout'
    VIEW = 'VIEW', 'View'


class AuditStatus(models.TextChoices):
    SUCCESS = 'SUCCESS', 'Success'
    FAILURE = 'FAILURE', 'Failure'


# ---------------------------------------------------------------------------
# Staff & departments
# ---------------------------------------------------------------------------

class Department(models.Model):
    """A clinical or administrative department staff members belong to."""
    name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=500, blank=True)
    code = models.CharField(max_length=10, blank=True, db_index=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.name} ({self.code or self.pk})"


class UserManager(BaseUserManager):
    """Manager for email-identified staff accounts."""
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email).strip().lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', Role.ADMIN)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Staff account.  Logs in with email; ``role`` drives authorisation.

    Accounts are deactivated (``is_active=False``) rather than deleted so
    that audit history and foreign keys stay intact.
    """
    username = None
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=15, blank=True, validators=[PHONE_VALIDATOR])
    role = models.CharField(max_length=20, choices=Role.choices)
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='staff'
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    objects = UserManager()

    class Meta:
        indexes = [
            models.Index(fields=['role', 'department'], name='user_role_dept_idx'),
            models.Index(fields=['is_active'], name='user_active_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ---------------------------------------------------------------------------
# Patients
# ---------------------------------------------------------------------------

class Patient(models.Model):
    """A registered patient.  ``patient_number`` is the public identifier."""
    patient_number = models.CharField(max_length=20, unique=True)
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=10, choices=Gender.choices)
    phone = models.CharField(max_length=15, validators=[PHONE_VALIDATOR], db_index=True)
    email = models.EmailField(blank=True)
    address = models.CharField(max_length=200, blank=True)
    emergency_contact_name = models.CharField(max_length=100, blank=True)
    emergency_contact_phone = models.CharField(max_length=15, blank=True, validators=[PHONE_VALIDATOR])
    emergency_contact_relation = models.CharField(max_length=50, blank=True)
    blood_group = models.CharField(max_length=3, choices=BloodGroup.choices, blank=True)
    allergies = models.JSONField(default=list, blank=True)
    card_issued = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['last_name', 'first_name'], name='patient_name_idx')]

    def __str__(self) -> str:
        return f"{self.patient_number} {self.full_name}"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def age(self) -> int | None:
        if not self.date_of_birth:
            return None
        today = timezone.localdate()
        dob = self.date_of_birth
        return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))


# ---------------------------------------------------------------------------
# Appointments & consultations
# ---------------------------------------------------------------------------

class Appointment(models.Model):
    appointment_number = models.CharField(max_length=20, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='appointments')
    doctor = models.ForeignKey(User, on_delete=models.PROTECT, related_name='doctor_appointments')
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name='appointments')
    appointment_date = models.DateField()
    time_slot = models.CharField(max_length=5, validators=[TIME_SLOT_VALIDATOR])
    type = models.CharField(max_length=12, choices=AppointmentType.choices, default=AppointmentType.NORMAL)
    status = models.CharField(
        max_length=12, choices=AppointmentStatus.choices, default=AppointmentStatus.SCHEDULED, db_index=True
    )
    reason_for_visit = models.CharField(max_length=500, blank=True)
    notes = models.CharField(max_length=500, blank=True)
    cancellation_reason = models.CharField(max_length=300, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'appointment_date'], name='appt_doctor_date_idx'),
            models.Index(fields=['patient', 'appointment_date'], name='appt_patient_date_idx'),
            models.Index(fields=['department', 'appointment_date'], name='appt_dept_date_idx'),
        ]
        constraints = [
            # One live booking per doctor slot; cancelled/no-show rows free it.
            models.UniqueConstraint(
                fields=['doctor', 'appointment_date', 'time_slot'],
                condition=~Q(status__in=['CANCELLED', 'NO_SHOW']),
                name='uniq_active_doctor_slot',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.appointment_number} {self.appointment_date} {self.time_slot}"

    @property
    def full_datetime(self):
        if not self.appointment_date or not self.time_slot:
            return None
        hours, minutes = (int(x) for x in self.time_slot.split(':'))
        naive = timezone.datetime(
            self.appointment_date.year, self.appointment_date.month, self.appointment_date.day, hours, minutes
        )
        return timezone.make_aware(naive)

    @property
    def is_today(self) -> bool:
        return self.appointment_date == timezone.localdate()

    @property
    def is_upcoming(self) -> bool:
        start = self.full_datetime
        return bool(start and start > timezone.now() and self.status == AppointmentStatus.SCHEDULED)


class Consultation(models.Model):
    appointment = models.ForeignKey(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='consultations'
    )
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='consultations')
    doctor = models.ForeignKey(User, on_delete=models.PROTECT, related_name='consultations')
    diagnosis = models.TextField()
    notes = models.TextField(blank=True)
    symptoms = models.JSONField(default=list)
    lab_requests = models.JSONField(default=list, blank=True)
    outcome = models.CharField(max_length=12, choices=ConsultationOutcome.choices)
    referred_department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    referred_doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    referral_reason = models.CharField(max_length=300, blank=True)
    follow_up_date = models.DateField(null=True, blank=True)
    consultation_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'consultation_date'], name='consult_patient_date_idx'),
            models.Index(fields=['doctor', 'consultation_date'], name='consult_doctor_date_idx'),
        ]

    def __str__(self) -> str:
        return f"consultation {self.pk} p={self.patient_id} d={self.doctor_id}"


# ---------------------------------------------------------------------------
# Wards, beds, admissions, vitals
# ---------------------------------------------------------------------------

class Ward(models.Model):
    name = models.CharField(max_length=100, unique=True)
    ward_type = models.CharField(max_length=12, choices=WardType.choices, db_index=True)
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    floor = models.PositiveSmallIntegerField(null=True, blank=True)
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='wards'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.ward_type})"


class Bed(models.Model):
    ward = models.ForeignKey(Ward, on_delete=models.CASCADE, related_name='beds')
    bed_number = models.CharField(max_length=20)
    status = models.CharField(
        max_length=12, choices=BedStatus.choices, default=BedStatus.AVAILABLE, db_index=True
    )
    features = models.JSONField(default=list, blank=True)
    last_maintenance = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['ward_id', 'bed_number']
        constraints = [
            models.UniqueConstraint(fields=['ward', 'bed_number'], name='uniq_bed_number_per_ward'),
        ]

    def __str__(self) -> str:
        return f"{self.ward.name} - {self.bed_number}"


class Admission(models.Model):
    admission_number = models.CharField(max_length=20, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='admissions')
    doctor = models.ForeignKey(User, on_delete=models.PROTECT, related_name='admissions')
    ward = models.ForeignKey(Ward, on_delete=models.PROTECT, related_name='admissions')
    bed = models.ForeignKey(Bed, null=True, blank=True, on_delete=models.PROTECT, related_name='admissions')
    admission_type = models.CharField(
        max_length=12, choices=AdmissionType.choices, default=AdmissionType.NORMAL
    )
    status = models.CharField(
        max_length=12, choices=AdmissionStatus.choices, default=AdmissionStatus.ACTIVE, db_index=True
    )
    admission_reason = models.TextField(blank=True)
    admission_date = models.DateTimeField(default=timezone.now)
    expected_discharge_date = models.DateField(null=True, blank=True)
    discharge_date = models.DateTimeField(null=True, blank=True)
    discharge_summary = models.TextField(blank=True)
    transferred_from = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.SET_NULL, related_name='transfers'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['patient', 'admission_date'], name='adm_patient_date_idx'),
            models.Index(fields=['ward', 'status'], name='adm_ward_status_idx'),
            models.Index(fields=['doctor', 'status'], name='adm_doctor_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['bed'], condition=Q(status='ACTIVE'), name='uniq_active_admission_per_bed'
            ),
            models.UniqueConstraint(
                fields=['patient'], condition=Q(status='ACTIVE'), name='uniq_active_admission_per_patient'
            ),
        ]

    def __str__(self) -> str:
        return f"{self.admission_number} ({self.status})"

    @property
    def length_of_stay(self) -> int:
        """Whole days in hospital, rounded up; open admissions count to now."""
        end = self.discharge_date or timezone.now()
        seconds = abs((end - self.admission_date).total_seconds())
        return math.ceil(seconds / 86400)


class VitalSigns(models.Model):
    admission = models.ForeignKey(Admission, on_delete=models.CASCADE, related_name='vital_signs')
    recorded_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='+')
    temperature = models.FloatField(
        null=True, blank=True, validators=[MinValueValidator(30), MaxValueValidator(45)]
    )
    systolic = models.PositiveSmallIntegerField(null=True, blank=True)
    diastolic = models.PositiveSmallIntegerField(null=True, blank=True)
    pulse = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MaxValueValidator(300)])
    respiratory_rate = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MaxValueValidator(100)]
    )
    oxygen_saturation = models.FloatField(
        null=True, blank=True, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    blood_glucose = models.FloatField(null=True, blank=True, validators=[MinValueValidator(0)])
    weight = models.FloatField(null=True, blank=True, validators=[MinValueValidator(0)])
    height = models.FloatField(null=True, blank=True, validators=[MinValueValidator(0)])
    notes = models.TextField(blank=True)
    recorded_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = 'vital signs'
        indexes = [models.Index(fields=['admission', 'recorded_at'], name='vitals_adm_time_idx')]

    @property
    def bmi(self) -> float | None:
        if not self.weight or not self.height:
            return None
        meters = self.height / 100
        return round(self.weight / (meters * meters), 2)

    @property
    def blood_pressure(self) -> str | None:
        if not self.systolic or not self.diastolic:
            return None
        return f"{self.systolic}/{self.diastolic}"


# ---------------------------------------------------------------------------
# Pharmacy
# ---------------------------------------------------------------------------

class Drug(models.Model):
    name = models.CharField(max_length=200, unique=True)
    generic_name = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=12, choices=DrugCategory.choices, blank=True, db_index=True)
    stock_quantity = models.PositiveIntegerField(default=0, db_index=True)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    reorder_level = models.PositiveIntegerField(default=10)
    manufacturer = models.CharField(max_length=200, blank=True)
    batch_number = models.CharField(max_length=100, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    dosage_form = models.CharField(max_length=12, choices=DosageForm.choices, blank=True)
    strength = models.CharField(max_length=50, blank=True)
    requires_prescription = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.reorder_level

    @property
    def is_expired(self) -> bool:
        return bool(self.expiry_date and self.expiry_date < timezone.localdate())


class Prescription(models.Model):
    prescription_number = models.CharField(max_length=20, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='prescriptions')
    consultation = models.ForeignKey(
        Consultation, null=True, blank=True, on_delete=models.SET_NULL, related_name='prescriptions'
    )
    entered_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.AWAITING_PAYMENT, db_index=True
    )
    status = models.CharField(
        max_length=20, choices=PrescriptionStatus.choices, default=PrescriptionStatus.PENDING, db_index=True
    )
    dispensed_at = models.DateTimeField(null=True, blank=True)
    dispensed_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    notes = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'created_at'], name='rx_patient_created_idx')]

    def __str__(self) -> str:
        return f"{self.prescription_number} ({self.status}/{self.payment_status})"

    @property
    def balance_due(self) -> Decimal:
        return self.total_amount - self.amount_paid


class PrescriptionItem(models.Model):
    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name='items')
    drug = models.ForeignKey(Drug, on_delete=models.PROTECT, related_name='prescription_items')
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    dosage = models.CharField(max_length=200)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    total_price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    dispensed = models.BooleanField(default=False)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f"{self.drug_id} x{self.quantity}"


class RestockRequest(models.Model):
    drug = models.ForeignKey(Drug, on_delete=models.PROTECT, related_name='restock_requests')
    requested_quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    reason = models.CharField(max_length=500)
    status = models.CharField(
        max_length=10, choices=RestockStatus.choices, default=RestockStatus.PENDING, db_index=True
    )
    requested_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='restock_requests')
    approved_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True)
    fulfilled_at = models.DateTimeField(null=True, blank=True)
    fulfilled_quantity = models.PositiveIntegerField(null=True, blank=True)
    notes = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['drug', 'status'], name='restock_drug_status_idx'),
            models.Index(fields=['status', 'created_at'], name='restock_status_created_idx'),
        ]

    def __str__(self) -> str:
        return f"restock {self.pk} drug={self.drug_id} ({self.status})"


# ---------------------------------------------------------------------------
# Emergency
# ---------------------------------------------------------------------------

class EmergencyCase(models.Model):
    temporary_patient_name = models.CharField(max_length=100, blank=True)
    patient = models.ForeignKey(
        Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='emergency_cases'
    )
    severity_level = models.CharField(max_length=10, choices=Severity.choices)
    triage_notes = models.TextField()
    chief_complaint = models.CharField(max_length=500, blank=True)
    vital_signs = models.JSONField(default=dict, blank=True)
    status = models.CharField(
        max_length=12, choices=EmergencyStatus.choices, default=EmergencyStatus.REGISTERED, db_index=True
    )
    handled_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    admission = models.ForeignKey(
        Admission, null=True, blank=True, on_delete=models.SET_NULL, related_name='emergency_cases'
    )
    referred_facility = models.CharField(max_length=200, blank=True)
    referral_reason = models.CharField(max_length=500, blank=True)
    referred_at = models.DateTimeField(null=True, blank=True)
    arrived_at = models.DateTimeField(default=timezone.now)
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['severity_level', 'status'], name='er_severity_status_idx'),
            models.Index(fields=['status', 'arrived_at'], name='er_status_arrived_idx'),
        ]

    def __str__(self) -> str:
        return f"emergency {self.pk} {self.severity_level} ({self.status})"

    @property
    def display_name(self) -> str:
        if self.patient_id:
            return self.patient.full_name
        return self.temporary_patient_name or 'Unidentified'


# ---------------------------------------------------------------------------
# Audit & sequences
# ---------------------------------------------------------------------------

class AuditLog(models.Model):
    """Append-only record of who did what to which entity."""
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='audit_logs')
    action = models.CharField(max_length=10, choices=AuditAction.choices)
    entity_type = models.CharField(max_length=64)
    entity_id = models.CharField(max_length=64, blank=True)
    description = models.CharField(max_length=500, blank=True)
    old_value = models.JSONField(null=True, blank=True)
    new_value = models.JSONField(null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=10, choices=AuditStatus.choices, default=AuditStatus.SUCCESS)
    error_message = models.TextField(blank=True)
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        indexes = [
            models.Index(fields=['user', 'timestamp'], name='audit_user_time_idx'),
            models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
            models.Index(fields=['action', 'timestamp'], name='audit_action_time_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.entity_type}/{self.entity_id} by {self.user_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('audit log entries are immutable')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError('audit log entries are immutable')


class SequenceCounter(models.Model):
    """Last issued number per human-readable identifier prefix."""
    name = models.CharField(max_length=10, primary_key=True)
    value = models.PositiveBigIntegerField(default=0)

    def __str__(self) -> str:
        return f"{self.name}={self.value}"
