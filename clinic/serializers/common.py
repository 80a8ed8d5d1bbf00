import bleach
from rest_framework import serializers


def clean(value):
    """Strip markup from free text."""
    if value is None:
        return value
    return bleach.clean(str(value).strip(), tags=[], strip=True)


class CleanCharField(serializers.CharField):
    """CharField whose value is passed through :func:`clean`."""

    def to_internal_value(self, data):
        return clean(super().to_internal_value(data))


class CleanListField(serializers.ListField):
    def __init__(self, **kwargs):
        kwargs.setdefault('child', CleanCharField(max_length=200))
        super().__init__(**kwargs)


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)


def iso(value):
    return value.isoformat() if value else None


def money(value):
    return str(value) if value is not None else None


def user_brief(user):
    if user is None:
        return None
    return {
        'id': user.id,
        'name': user.full_name,
        'email': user.email,
        'role': user.role,
    }


def patient_brief(patient):
    if patient is None:
        return None
    return {
        'id': patient.id,
        'patientId': patient.patient_number,
        'name': patient.full_name,
    }


def paginated(items, total, page, limit, render):
    """Standard listing payload."""
    return {
        'items': [render(i) for i in items],
        'total': total,
        'page': page,
        'limit': limit or total,
    }
