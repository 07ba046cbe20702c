from django.core.management.base import BaseCommand

from clinic.models import Profile, User

DEMO_SET = [
    ("doctor@example.com", "doctor", "Sarah Johnson", "Cardiology"),
    ("patient@example.com", "patient", "John Smith", None),
]


class Command(BaseCommand):
    help = "Ensure demo users exist with a known password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="demo-pass-123")

    def handle(self, *args, **opts):
        password = opts["password"]
        for email, role, full_name, specialization in DEMO_SET:
            u, created = User.objects.get_or_create(
                username=email, defaults={"email": email, "role": role, "is_active": True},
            )
            u.email = email
            u.role = role
            u.is_active = True
            u.set_password(password)
            u.save()
            Profile.objects.update_or_create(
                user=u, defaults={"full_name": full_name, "specialization": specialization},
            )
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))
