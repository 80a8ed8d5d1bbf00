"""
Data access for every entity.

A :class:`Repository` wraps one model with its default joins, base filter
and ordering, and exposes get / list / count / create / save.  Queries
are described by explicit keyword criteria rather than ad-hoc querysets
built in views.  Entity subclasses add the named queries the services
need (pending prescriptions, low-stock drugs, active emergencies ...).
"""
from __future__ import annotations

from datetime import timedelta
from typing import Any, Iterable

from django.db.models import Case, Count, F, IntegerField, Q, QuerySet, Value, When
from django.utils import timezone

from .exceptions import NotFoundError
from .models import (
    Admission,
    AdmissionStatus,
    Appointment,
    AppointmentStatus,
    AuditLog,
    Bed,
    BedStatus,
    Consultation,
    Department,
    Drug,
    EmergencyCase,
    EmergencyStatus,
    Patient,
    PaymentStatus,
    Prescription,
    PrescriptionStatus,
    RestockRequest,
    RestockStatus,
    Role,
    Severity,
    User,
    VitalSigns,
    Ward,
)


MAX_PAGE_SIZE = 100

# Appointment states that no longer hold their slot.
RELEASED_APPOINTMENT_STATES = (AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)


class Repository:
    """Generic access to one model."""

    def __init__(
        self,
        model,
        *,
        related: Iterable[str] = (),
        prefetch: Iterable[str] = (),
        ordering: Iterable[str] = ('-id',),
        base_filter: dict[str, Any] | None = None,
        not_found: str | None = None,
    ):
        self.model = model
        self.related = tuple(related)
        self.prefetch = tuple(prefetch)
        self.ordering = tuple(ordering)
        self.base_filter = dict(base_filter or {})
        self.not_found = not_found or f'{model._meta.verbose_name.capitalize()} not found'

    # -- querysets ---------------------------------------------------------
    def all(self) -> QuerySet:
        """Every row, joined and ordered, ignoring the base filter."""
        qs = self.model.objects.all()
        if self.related:
            qs = qs.select_related(*self.related)
        if self.prefetch:
            qs = qs.prefetch_related(*self.prefetch)
        return qs.order_by(*self.ordering)

    def queryset(self) -> QuerySet:
        return self.all().filter(**self.base_filter)

    def filter(self, *args, **criteria) -> QuerySet:
        return self.queryset().filter(*args, **criteria)

    # -- single rows -------------------------------------------------------
    def get(self, pk, *, lock: bool = False, include_inactive: bool = True):
        if lock:
            # Row locks and outer joins do not mix on every backend.
            qs = self.model.objects.select_for_update()
        else:
            qs = self.all()
        if not include_inactive:
            qs = qs.filter(**self.base_filter)
        return qs.filter(pk=pk).first()

    def get_or_404(self, pk, *, lock: bool = False, include_inactive: bool = True, message: str | None = None):
        obj = self.get(pk, lock=lock, include_inactive=include_inactive)
        if obj is None:
            raise NotFoundError(message or self.not_found)
        return obj

    # -- listing -----------------------------------------------------------
    def list(
        self,
        *,
        filters: dict[str, Any] | None = None,
        ordering: Iterable[str] | None = None,
        page: int | None = None,
        limit: int | None = None,
        queryset: QuerySet | None = None,
    ) -> tuple[list, int]:
        """Return ``(items, total)``.  ``page`` is 1-based; no limit returns all rows."""
        qs = queryset if queryset is not None else self.queryset()
        if filters:
            qs = qs.filter(**{k: v for k, v in filters.items() if v is not None})
        if ordering:
            qs = qs.order_by(*ordering)
        total = qs.count()
        if limit:
            limit = max(1, min(int(limit), MAX_PAGE_SIZE))
            page = max(1, int(page or 1))
            start = (page - 1) * limit
            qs = qs[start:start + limit]
        return list(qs), total

    def count(self, **criteria) -> int:
        return self.filter(**criteria).count()

    def exists(self, **criteria) -> bool:
        return self.filter(**criteria).exists()

    # -- writes ------------------------------------------------------------
    def create(self, **fields):
        return self.model.objects.create(**fields)

    def save(self, obj, fields: Iterable[str] | None = None):
        if fields is not None:
            fields = list(fields)
            if any(f.name == 'updated_at' for f in obj._meta.fields) and 'updated_at' not in fields:
                fields.append('updated_at')
            obj.save(update_fields=fields)
        else:
            obj.save()
        return obj


class UserRepository(Repository):
    def __init__(self):
        super().__init__(
            User, related=('department',), ordering=('-date_joined',),
            base_filter={'is_active': True}, not_found='User not found',
        )

    def by_email(self, email: str):
        return self.all().filter(email__iexact=(email or '').strip()).first()

    def doctors_in(self, department) -> QuerySet:
        return self.filter(role=Role.DOCTOR, department=department).order_by('last_name', 'first_name')

    def active_doctor(self, pk):
        return self.filter(pk=pk, role=Role.DOCTOR).first()


class DepartmentRepository(Repository):
    def __init__(self):
        super().__init__(
            Department, ordering=('name',), base_filter={'is_active': True},
            not_found='Department not found',
        )

    def name_taken(self, name: str) -> bool:
        return self.all().filter(name__iexact=name.strip()).exists()

    def with_staff_count(self) -> QuerySet:
        return self.queryset().annotate(staff_count=Count('staff', filter=Q(staff__is_active=True)))


class PatientRepository(Repository):
    def __init__(self):
        super().__init__(
            Patient, ordering=('-created_at',), base_filter={'is_active': True},
            not_found='Patient not found',
        )

    def search(self, term: str | None) -> QuerySet:
        qs = self.queryset()
        term = (term or '').strip()
        if term:
            qs = qs.filter(
                Q(first_name__icontains=term)
                | Q(last_name__icontains=term)
                | Q(patient_number__icontains=term)
                | Q(phone__icontains=term)
            )
        return qs


class AppointmentRepository(Repository):
    def __init__(self):
        super().__init__(
            Appointment, related=('patient', 'doctor', 'department'),
            ordering=('appointment_date', 'time_slot'), not_found='Appointment not found',
        )

    def holding_slot(self) -> QuerySet:
        return self.queryset().exclude(status__in=RELEASED_APPOINTMENT_STATES)

    def slot_taken(self, doctor, day, time_slot, *, exclude_id=None) -> bool:
        qs = self.holding_slot().filter(doctor=doctor, appointment_date=day, time_slot=time_slot)
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()

    def for_doctor_on(self, doctor, day) -> QuerySet:
        return (
            self.queryset()
            .filter(doctor=doctor, appointment_date=day)
            .exclude(status=AppointmentStatus.CANCELLED)
            .order_by('time_slot')
        )

    def booked_slots(self, doctor, day) -> set[str]:
        return set(
            self.holding_slot().filter(doctor=doctor, appointment_date=day).values_list('time_slot', flat=True)
        )

    def for_patient(self, patient) -> QuerySet:
        return self.filter(patient=patient).order_by('-appointment_date', '-time_slot')


class ConsultationRepository(Repository):
    def __init__(self):
        super().__init__(
            Consultation,
            related=('patient', 'doctor', 'appointment', 'referred_department', 'referred_doctor'),
            ordering=('-consultation_date',), not_found='Consultation not found',
        )


class PrescriptionRepository(Repository):
    def __init__(self):
        super().__init__(
            Prescription, related=('patient', 'consultation', 'entered_by', 'dispensed_by'),
            prefetch=('items__drug',), ordering=('-created_at',), not_found='Prescription not found',
        )

    def pending(self) -> QuerySet:
        """Paid prescriptions waiting at the pharmacy, oldest first."""
        return self.filter(
            status__in=[PrescriptionStatus.PENDING, PrescriptionStatus.PARTIALLY_DISPENSED],
            payment_status=PaymentStatus.PAID,
        ).order_by('created_at', 'id')

    def unpaid(self) -> QuerySet:
        return self.filter(
            payment_status__in=[PaymentStatus.AWAITING_PAYMENT, PaymentStatus.PARTIALLY_PAID],
        ).exclude(status=PrescriptionStatus.CANCELLED).order_by('-created_at', '-id')

    def for_patient(self, patient) -> QuerySet:
        return self.filter(patient=patient)


class WardRepository(Repository):
    def __init__(self):
        super().__init__(
            Ward, related=('department',), ordering=('name',), base_filter={'is_active': True},
            not_found='Ward not found',
        )

    def with_bed_counts(self) -> QuerySet:
        return self.queryset().annotate(
            available_beds=Count('beds', filter=Q(beds__status=BedStatus.AVAILABLE)),
            total_beds=Count('beds'),
        )

    def with_available_beds(self, ward_type: str) -> QuerySet:
        return self.with_bed_counts().filter(ward_type=ward_type, available_beds__gt=0)


class BedRepository(Repository):
    def __init__(self):
        super().__init__(Bed, related=('ward',), ordering=('ward_id', 'bed_number'), not_found='Bed not found')

    def for_ward(self, ward) -> QuerySet:
        return self.filter(ward=ward)


class AdmissionRepository(Repository):
    def __init__(self):
        super().__init__(
            Admission, related=('patient', 'doctor', 'ward', 'bed'),
            ordering=('-admission_date',), not_found='Admission not found',
        )

    def active_for_ward(self, ward) -> QuerySet:
        return self.filter(ward=ward, status=AdmissionStatus.ACTIVE)

    def for_patient(self, patient) -> QuerySet:
        return self.filter(patient=patient)

    def patient_has_active(self, patient) -> bool:
        return self.queryset().filter(patient=patient, status=AdmissionStatus.ACTIVE).exists()


class VitalSignsRepository(Repository):
    def __init__(self):
        super().__init__(
            VitalSigns, related=('recorded_by',), ordering=('-recorded_at',),
            not_found='Vital signs not found',
        )

    def for_admission(self, admission) -> QuerySet:
        return self.filter(admission=admission)

    def trend(self, admission, field: str, hours: int) -> QuerySet:
        since = timezone.now() - timedelta(hours=hours)
        return (
            self.filter(admission=admission, recorded_at__gte=since)
            .exclude(**{f'{field}__isnull': True})
            .order_by('recorded_at')
        )


class DrugRepository(Repository):
    def __init__(self):
        super().__init__(
            Drug, ordering=('name',), base_filter={'is_active': True}, not_found='Drug not found',
        )

    def name_taken(self, name: str) -> bool:
        return self.all().filter(name__iexact=name.strip()).exists()

    def low_stock(self) -> QuerySet:
        return self.filter(stock_quantity__lte=F('reorder_level')).order_by('stock_quantity', 'name')

    def expired(self) -> QuerySet:
        return self.filter(expiry_date__lt=timezone.localdate()).order_by('expiry_date')

    def search(self, term: str | None) -> QuerySet:
        qs = self.queryset()
        term = (term or '').strip()
        if term:
            qs = qs.filter(
                Q(name__icontains=term) | Q(generic_name__icontains=term) | Q(manufacturer__icontains=term)
            )
        return qs

    def lock_many(self, ids) -> dict:
        """Lock drug rows in primary key order and return them by id."""
        qs = self.model.objects.select_for_update().filter(pk__in=list(ids)).order_by('pk')
        return {drug.pk: drug for drug in qs}

    def adjust_stock(self, drug_id, delta: int) -> int:
        return self.model.objects.filter(pk=drug_id).update(
            stock_quantity=F('stock_quantity') + delta, updated_at=timezone.now()
        )


class RestockRepository(Repository):
    def __init__(self):
        super().__init__(
            RestockRequest, related=('drug', 'requested_by', 'approved_by'),
            ordering=('-created_at',), not_found='Restock request not found',
        )

    def pending(self) -> QuerySet:
        return self.filter(status=RestockStatus.PENDING).order_by('created_at', 'id')


class EmergencyRepository(Repository):
    def __init__(self):
        super().__init__(
            EmergencyCase, related=('patient', 'handled_by', 'admission'),
            ordering=('-arrived_at',), not_found='Emergency case not found',
        )

    def active(self) -> QuerySet:
        """Open cases, most severe first, then by arrival."""
        rank = Case(
            When(severity_level=Severity.CRITICAL, then=Value(0)),
            When(severity_level=Severity.MODERATE, then=Value(1)),
            When(severity_level=Severity.LOW, then=Value(2)),
            default=Value(3),
            output_field=IntegerField(),
        )
        return (
            self.filter(status__in=[EmergencyStatus.REGISTERED, EmergencyStatus.ADMITTED])
            .annotate(severity_rank=rank)
            .order_by('severity_rank', 'arrived_at', 'id')
        )

    def critical(self) -> QuerySet:
        return self.active().filter(severity_level=Severity.CRITICAL)


class AuditLogRepository(Repository):
    def __init__(self):
        super().__init__(AuditLog, related=('user',), ordering=('-timestamp', '-id'), not_found='Audit log not found')


users = UserRepository()
departments = DepartmentRepository()
patients = PatientRepository()
appointments = AppointmentRepository()
consultations = ConsultationRepository()
prescriptions = PrescriptionRepository()
wards = WardRepository()
beds = BedRepository()
admissions = AdmissionRepository()
vitals = VitalSignsRepository()
drugs = DrugRepository()
restocks = RestockRepository()
emergencies = EmergencyRepository()
audit_logs = AuditLogRepository()
