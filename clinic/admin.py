"""
Django admin registrations.

Mounted at ``/django-admin/`` for superusers who need to inspect or
correct records by hand.  Audit log rows are read-only here as well.
"""

from django.contrib import admin

from .models import (
    Admission,
    Appointment,
    AuditLog,
    Bed,
    Consultation,
    Department,
    Drug,
    EmergencyCase,
    Patient,
    Prescription,
    PrescriptionItem,
    RestockRequest,
    User,
    VitalSigns,
    Ward,
)


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'code', 'is_active', 'created_at')
    search_fields = ('name', 'code')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'first_name', 'last_name', 'role', 'department', 'is_active')
    list_filter = ('role', 'department', 'is_active')
    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('email',)
    exclude = ('password',)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('patient_number', 'first_name', 'last_name', 'gender', 'phone', 'is_active')
    list_filter = ('gender', 'blood_group', 'is_active')
    search_fields = ('patient_number', 'first_name', 'last_name', 'phone')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('appointment_number', 'patient', 'doctor', 'appointment_date', 'time_slot', 'status')
    list_filter = ('status', 'type', 'department')
    search_fields = ('appointment_number', 'patient__patient_number', 'doctor__email')


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'outcome', 'consultation_date')
    list_filter = ('outcome',)
    search_fields = ('patient__patient_number', 'diagnosis')


class PrescriptionItemInline(admin.TabularInline):
    model = PrescriptionItem
    extra = 0


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('prescription_number', 'patient', 'total_amount', 'amount_paid', 'payment_status', 'status')
    list_filter = ('status', 'payment_status')
    search_fields = ('prescription_number', 'patient__patient_number')
    inlines = [PrescriptionItemInline]


@admin.register(Ward)
class WardAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'ward_type', 'capacity', 'floor', 'is_active')
    list_filter = ('ward_type', 'is_active')
    search_fields = ('name',)


@admin.register(Bed)
class BedAdmin(admin.ModelAdmin):
    list_display = ('id', 'ward', 'bed_number', 'status')
    list_filter = ('status', 'ward')
    search_fields = ('bed_number', 'ward__name')


@admin.register(Admission)
class AdmissionAdmin(admin.ModelAdmin):
    list_display = ('admission_number', 'patient', 'ward', 'bed', 'admission_type', 'status', 'admission_date')
    list_filter = ('status', 'admission_type', 'ward')
    search_fields = ('admission_number', 'patient__patient_number')


@admin.register(VitalSigns)
class VitalSignsAdmin(admin.ModelAdmin):
    list_display = ('admission', 'temperature', 'systolic', 'diastolic', 'pulse', 'recorded_at')
    search_fields = ('admission__admission_number',)


@admin.register(Drug)
class DrugAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'stock_quantity', 'reorder_level', 'unit_price', 'expiry_date', 'is_active')
    list_filter = ('category', 'dosage_form', 'is_active')
    search_fields = ('name', 'generic_name', 'batch_number')


@admin.register(RestockRequest)
class RestockRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'drug', 'requested_quantity', 'status', 'requested_by', 'created_at')
    list_filter = ('status',)
    search_fields = ('drug__name',)


@admin.register(EmergencyCase)
class EmergencyCaseAdmin(admin.ModelAdmin):
    list_display = ('id', 'display_name', 'severity_level', 'status', 'arrived_at')
    list_filter = ('severity_level', 'status')
    search_fields = ('temporary_patient_name', 'patient__patient_number')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'user', 'action', 'entity_type', 'entity_id', 'status')
    list_filter = ('action', 'status', 'entity_type')
    search_fields = ('entity_id', 'description', 'user__email')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
