from rest_framework import serializers

from ..models import DosageForm, DrugCategory, RestockStatus
from .common import CleanCharField, iso, money, user_brief


class DrugCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=200)
    genericName = CleanCharField(max_length=200, required=False, allow_blank=True)
    description = CleanCharField(max_length=2000, required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=DrugCategory.choices, required=False, allow_blank=True)
    stockQuantity = serializers.IntegerField(min_value=0, required=False, default=0)
    unitPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    reorderLevel = serializers.IntegerField(min_value=0, required=False, default=10)
    manufacturer = CleanCharField(max_length=200, required=False, allow_blank=True)
    batchNumber = CleanCharField(max_length=100, required=False, allow_blank=True)
    expiryDate = serializers.DateField(required=False, allow_null=True)
    dosageForm = serializers.ChoiceField(choices=DosageForm.choices, required=False, allow_blank=True)
    strength = CleanCharField(max_length=50, required=False, allow_blank=True)
    requiresPrescription = serializers.BooleanField(required=False, default=True)

    FIELD_MAP = {
        'name': 'name',
        'genericName': 'generic_name',
        'description': 'description',
        'category': 'category',
        'stockQuantity': 'stock_quantity',
        'unitPrice': 'unit_price',
        'reorderLevel': 'reorder_level',
        'manufacturer': 'manufacturer',
        'batchNumber': 'batch_number',
        'expiryDate': 'expiry_date',
        'dosageForm': 'dosage_form',
        'strength': 'strength',
        'requiresPrescription': 'requires_prescription',
    }

    def to_service_kwargs(self) -> dict:
        return {self.FIELD_MAP[k]: v for k, v in self.validated_data.items()}


class DrugListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(max_length=64, required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=DrugCategory.choices, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


class StockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class RestockCreateSerializer(serializers.Serializer):
    drugId = serializers.IntegerField(min_value=1)
    requestedQuantity = serializers.IntegerField(min_value=1)
    reason = CleanCharField(max_length=500)
    notes = CleanCharField(max_length=500, required=False, allow_blank=True, default='')


class RestockRejectSerializer(serializers.Serializer):
    reason = CleanCharField(max_length=500, required=False, allow_blank=True, default='')


class RestockFulfillSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class RestockListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=RestockStatus.choices, required=False)
    drugId = serializers.IntegerField(min_value=1, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


def drug_data(drug):
    return {
        'id': drug.id,
        'name': drug.name,
        'genericName': drug.generic_name,
        'description': drug.description,
        'category': drug.category or None,
        'stockQuantity': drug.stock_quantity,
        'unitPrice': money(drug.unit_price),
        'reorderLevel': drug.reorder_level,
        'manufacturer': drug.manufacturer,
        'batchNumber': drug.batch_number,
        'expiryDate': iso(drug.expiry_date),
        'dosageForm': drug.dosage_form or None,
        'strength': drug.strength,
        'requiresPrescription': drug.requires_prescription,
        'isLowStock': drug.is_low_stock,
        'isExpired': drug.is_expired,
    }


def restock_data(restock):
    return {
        'id': restock.id,
        'drug': {'id': restock.drug_id, 'name': restock.drug.name},
        'requestedQuantity': restock.requested_quantity,
        'reason': restock.reason,
        'status': restock.status,
        'requestedBy': user_brief(restock.requested_by),
        'approvedBy': user_brief(restock.approved_by),
        'approvedAt': iso(restock.approved_at),
        'rejectionReason': restock.rejection_reason or None,
        'fulfilledAt': iso(restock.fulfilled_at),
        'fulfilledQuantity': restock.fulfilled_quantity,
        'notes': restock.notes,
        'createdAt': iso(restock.created_at),
    }
