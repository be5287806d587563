from django.db import migrations, models

import apps.bookings.models
import shared.infrastructure.fields


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("namespace", models.CharField(default=apps.bookings.models.default_namespace, editable=False, max_length=64)),
                ("application_id", models.CharField(editable=False, max_length=32)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(max_length=32)),
                ("address", models.TextField()),
                (
                    "id_proof",
                    models.CharField(
                        choices=[
                            ("aadhar", "Aadhar Card"),
                            ("passport", "Passport"),
                            ("driving_license", "Driving License"),
                            ("voter_id", "Voter ID"),
                        ],
                        default="aadhar",
                        max_length=32,
                    ),
                ),
                ("id_number", shared.infrastructure.fields.EncryptedCharField(blank=True)),
                ("check_in", models.DateField()),
                ("check_out", models.DateField()),
                ("guest_count", models.PositiveSmallIntegerField(default=1)),
                (
                    "purpose",
                    models.CharField(
                        choices=[
                            ("official", "Official"),
                            ("personal", "Personal"),
                            ("event", "Event/Conference"),
                            ("other", "Other"),
                        ],
                        default="official",
                        max_length=32,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Approved", "Approved"),
                            ("Rejected", "Rejected"),
                            ("Cancelled", "Cancelled"),
                        ],
                        default="Pending",
                        max_length=16,
                    ),
                ),
                ("rejection_reason", models.TextField(blank=True)),
                ("submitted_at", models.DateTimeField(editable=False)),
                ("status_changed_at", models.DateTimeField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=1)),
            ],
            options={
                "verbose_name": "Booking",
                "verbose_name_plural": "Bookings",
                "ordering": ["-submitted_at"],
                "indexes": [
                    models.Index(fields=["namespace", "status"], name="booking_ns_status_idx"),
                    models.Index(fields=["namespace", "-submitted_at"], name="booking_ns_submitted_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("namespace", "application_id"), name="booking_unique_application_id"),
                    models.CheckConstraint(
                        condition=models.Q(("check_out__gt", models.F("check_in"))),
                        name="booking_valid_dates",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("guest_count__gte", 1)),
                        name="booking_positive_guest_count",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StatusLookup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("namespace", models.CharField(default=apps.bookings.models.default_namespace, editable=False, max_length=64)),
                ("application_id", models.CharField(editable=False, max_length=32)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("Approved", "Approved"),
                            ("Rejected", "Rejected"),
                            ("Cancelled", "Cancelled"),
                        ],
                        default="Pending",
                        max_length=16,
                    ),
                ),
                ("check_in", models.DateField()),
            ],
            options={
                "verbose_name": "Status lookup",
                "verbose_name_plural": "Status lookups",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("namespace", "application_id"), name="status_lookup_unique_application_id"
                    ),
                ],
            },
        ),
    ]
