import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("slotbook")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Release slots claimed by a reservation whose booking was never written
    "release-stranded-slots": {
        "task": "bookings.release_stranded_slots",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
}
