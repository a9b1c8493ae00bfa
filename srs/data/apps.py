from django.apps import AppConfig
from django.conf import settings
from django.core.signals import setting_changed

from ..config import SchedulerParameters
from ..domain.logic import ReviewScheduler


class SrsDataConfig(AppConfig):
    name = "srs.data"
    label = "srs"
    verbose_name = "Spaced repetition"

    scheduler = None

    def ready(self):
        self.build_scheduler()
        setting_changed.connect(self._on_setting_changed, dispatch_uid="srs-scheduler")

    def build_scheduler(self):
        """Replace the scheduler with one built from settings.SRS_SCHEDULER."""
        params = SchedulerParameters.from_mapping(getattr(settings, "SRS_SCHEDULER", None))
        self.scheduler = ReviewScheduler(params)
        return self.scheduler

    def _on_setting_changed(self, setting, **kwargs):
        if setting == "SRS_SCHEDULER":
            self.build_scheduler()
