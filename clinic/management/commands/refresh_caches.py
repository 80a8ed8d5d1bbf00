from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.services.departments import invalidate_department_cache, list_departments


class Command(BaseCommand):
    help = "Drop and re-warm the cached API listings."

    def handle(self, *args, **options):
        now = timezone.now()
        invalidate_department_cache()
        departments = list_departments()
        self.stdout.write(self.style.SUCCESS(f"Refreshed departments ({len(departments)} active) at {now}"))
