from dataclasses import dataclass
from typing import Optional

from sheetdash.config.model import AppSettings
from sheetdash.services.dataset_service import DatasetManager
from sheetdash.services.error_report import ErrorReportExporter
from sheetdash.services.job_runner import JobRunner


@dataclass
class AppConfig:
    settings: AppSettings
    dataset_manager: Optional[DatasetManager] = None
    job_runner: Optional[JobRunner] = None
    exporter: Optional[ErrorReportExporter] = None

    @property
    def global_config(self):
        return self.settings.global_config

    @property
    def credentials(self):
        return self.settings.credentials

    def validate(self) -> None:
        """Ensure all required services are attached before the app starts."""
        if self.dataset_manager is None:
            raise RuntimeError("AppConfig.dataset_manager must be initialized.")
        if self.job_runner is None:
            raise RuntimeError("AppConfig.job_runner must be initialized.")
        if self.exporter is None:
            raise RuntimeError("AppConfig.exporter must be initialized.")
