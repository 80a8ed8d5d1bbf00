from rest_framework import serializers

from ..models import PaymentStatus, PrescriptionStatus
from .common import CleanCharField, iso, money, patient_brief, user_brief


class PrescriptionItemSerializer(serializers.Serializer):
    drugId = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    dosage = CleanCharField(max_length=200)
    unitPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)


class PrescriptionCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    consultationId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    items = PrescriptionItemSerializer(many=True, required=False)
    notes = CleanCharField(max_length=500, required=False, allow_blank=True, default='')

    def to_service_kwargs(self) -> dict:
        vd = self.validated_data
        return {
            'patient_id': vd['patientId'],
            'consultation_id': vd.get('consultationId'),
            'notes': vd['notes'],
            'items': [
                {
                    'drug_id': item['drugId'],
                    'quantity': item['quantity'],
                    'dosage': item['dosage'],
                    'unit_price': item.get('unitPrice'),
                }
                for item in vd.get('items') or []
            ],
        }


class PaymentSerializer(serializers.Serializer):
    # Sign and range are judged by the service so the message stays the same.
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class DispenseSerializer(serializers.Serializer):
    allowPartial = serializers.BooleanField(required=False, default=False)


class PrescriptionListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PrescriptionStatus.choices, required=False)
    paymentStatus = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    patientId = serializers.IntegerField(min_value=1, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


def item_data(item):
    return {
        'id': item.id,
        'drugId': item.drug_id,
        'drugName': item.drug.name,
        'quantity': item.quantity,
        'dosage': item.dosage,
        'unitPrice': money(item.unit_price),
        'totalPrice': money(item.total_price),
        'dispensed': item.dispensed,
    }


def prescription_data(prescription):
    return {
        'id': prescription.id,
        'prescriptionNumber': prescription.prescription_number,
        'patient': patient_brief(prescription.patient),
        'consultationId': prescription.consultation_id,
        'enteredBy': user_brief(prescription.entered_by),
        'items': [item_data(i) for i in prescription.items.all()],
        'totalAmount': money(prescription.total_amount),
        'amountPaid': money(prescription.amount_paid),
        'balanceDue': money(prescription.balance_due),
        'paymentStatus': prescription.payment_status,
        'status': prescription.status,
        'dispensedAt': iso(prescription.dispensed_at),
        'dispensedBy': user_brief(prescription.dispensed_by),
        'notes': prescription.notes,
        'createdAt': iso(prescription.created_at),
    }
