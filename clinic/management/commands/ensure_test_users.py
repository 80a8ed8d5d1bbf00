# clinic/management/commands/ensure_test_users.py
from django.core.management.base import BaseCommand
from django.db import transaction

from clinic.models import Department, Role, User

DEFAULT_PASSWORD = "Password123!"
TEST_DEPARTMENT = ("General Medicine", "GEN")


class Command(BaseCommand):
    help = "Ensure one active staff account per role exists (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default=DEFAULT_PASSWORD)
        parser.add_argument("--domain", default="hospital.test")

    @transaction.atomic
    def handle(self, *args, **opts):
        name, code = TEST_DEPARTMENT
        department, _ = Department.objects.get_or_create(
            name=name, defaults={"code": code, "description": "Default department for test accounts"},
        )
        for role in Role.values:
            email = f"{role.lower().replace('_', '-')}@{opts['domain']}"
            dept = department if role in (Role.DOCTOR, Role.NURSE) else None
            user, created = User.objects.get_or_create(
                email=email,
                defaults={"role": role, "first_name": role.title(), "last_name": "Test", "department": dept},
            )
            # reset password, role and active flag on every run
            user.set_password(opts["password"])
            user.role = role
            user.is_active = True
            user.department = dept
            user.save(update_fields=["password", "role", "is_active", "department"])
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
