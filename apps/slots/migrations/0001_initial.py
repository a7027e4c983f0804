from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Slot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("creator_handle", models.CharField(db_index=True, max_length=64)),
                ("team_member_id", models.CharField(blank=True, max_length=64, null=True)),
                ("team_member_name", models.CharField(blank=True, max_length=120)),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField()),
                ("is_available", models.BooleanField(default=True)),
                (
                    "claimed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the slot was last reserved; cleared on release.",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Slot",
                "verbose_name_plural": "Slots",
                "ordering": ["start_time", "id"],
                "indexes": [
                    models.Index(fields=["creator_handle", "start_time"], name="slots_slot_creator_2f6a1e_idx"),
                    models.Index(fields=["is_available", "claimed_at"], name="slots_slot_is_avai_8c1d3b_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_time__gt", models.F("start_time"))),
                        name="slot_end_after_start",
                    ),
                ],
            },
        ),
    ]
