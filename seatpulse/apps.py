from django.apps import AppConfig


class SeatpulseConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "seatpulse"
    verbose_name = "SeatPulse position history"
