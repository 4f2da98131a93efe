# care/management/commands/seed_demo.py
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand

from care.models import Hospital, User
from care.services.visits import register_visit

STAFF = [
    ("admin", "admin"),
    ("doctor", "doctor"),
    ("reception", "reception"),
    ("pharmacy", "pharmacy"),
    ("lab", "lab"),
]


class Command(BaseCommand):
    help = "Create a demo hospital and one user per role (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--email", default="demo@medflow.local")
        parser.add_argument("--name", default="MedFlow Demo Hospital")
        parser.add_argument("--password", default="medflow123")
        parser.add_argument("--patients", type=int, default=0, help="also register N waiting visits")

    def handle(self, *args, **opts):
        hospital, created = Hospital.objects.get_or_create(
            email=opts["email"],
            defaults={"name": opts["name"], "phone": "", "address": ""},
        )
        self.stdout.write(self.style.SUCCESS(
            f"{'created' if created else 'exists'}: hospital {hospital.name} (id={hospital.id})"
        ))

        password = make_password(opts["password"])
        for prefix, role in STAFF:
            username = f"{prefix}{hospital.id}"
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"role": role, "hospital": hospital, "password": password, "is_active": True},
            )
            if not created:
                # reset password, role and binding
                u.password = password
                u.role = role
                u.hospital = hospital
                u.is_active = True
                u.save(update_fields=["password", "role", "hospital", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        for i in range(opts["patients"]):
            visit = register_visit(hospital.id, {"name": f"Demo Patient {i + 1}", "department": "General"})
            self.stdout.write(f"registered {visit.name} token #{visit.token}")
        self.stdout.write(self.style.SUCCESS("Demo data ready."))
