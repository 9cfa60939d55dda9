"""
Configuration for the Litigation Intelligence Engine
====================================================

Environment variables (prefix LITIGATION_):
- LITIGATION_LOG_LEVEL: Logging level for scripts (default: INFO)
- LITIGATION_RULES_PATH: Alternative rule-table YAML (default: bundled rules.yaml)
- LITIGATION_ROLE_MARGIN: Defendant lead needed to flip the role (default: 2)
- LITIGATION_SILENCE_*_DAYS: Opponent silence thresholds
- LITIGATION_DISCLOSURE_*_DAYS: Post-issue disclosure thresholds
- LITIGATION_MERITS_OVERRIDE_THRESHOLD: Merits total that forces strong momentum (default: 50)
"""

from typing import Optional, List
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Engine settings from environment variables"""

    log_level: str = "INFO"

    # Rule tables
    rules_path: Optional[str] = None

    # Role classification
    role_margin: int = 2

    # Opponent silence (days)
    silence_notice_days: int = 14
    silence_escalation_days: int = 21
    silence_costs_days: int = 28
    silence_critical_days: int = 42
    default_response_days: int = 21

    # Pre-action / disclosure (days)
    pre_action_grace_days: int = 30
    disclosure_due_days: int = 28
    disclosure_critical_days: int = 56

    # Deadlines (days)
    overdue_deadline_critical_days: int = 14
    deadline_warning_days: int = 7
    deadline_urgent_days: int = 3

    # Hearings (days)
    hearing_preparation_days: int = 21
    hearing_urgent_days: int = 7

    # Weak spots
    timeline_gap_days: int = 90
    timeline_gap_high_days: int = 180

    # Awaab's Law (days)
    awaab_investigation_days: int = 14
    awaab_work_start_days: int = 7
    awaab_warning_days: int = 7

    # Practice-area viability
    viability_alternative_min_hits: int = 3

    # Momentum
    recent_document_days: int = 30
    merits_override_threshold: int = 50

    class Config:
        env_prefix = "LITIGATION_"
        case_sensitive = False
        env_file = ".env"
        env_file_encoding = "utf-8"

    def validate_thresholds(self) -> List[str]:
        """Validate threshold ordering, return list of warnings"""
        warnings = []

        if not self.silence_notice_days <= self.silence_escalation_days <= self.silence_critical_days:
            warnings.append(
                "Silence thresholds should satisfy notice <= escalation <= critical "
                f"(got {self.silence_notice_days}/{self.silence_escalation_days}/{self.silence_critical_days})"
            )

        if self.disclosure_critical_days <= self.disclosure_due_days:
            warnings.append("LITIGATION_DISCLOSURE_CRITICAL_DAYS should exceed LITIGATION_DISCLOSURE_DUE_DAYS")

        if self.timeline_gap_high_days <= self.timeline_gap_days:
            warnings.append("LITIGATION_TIMELINE_GAP_HIGH_DAYS should exceed LITIGATION_TIMELINE_GAP_DAYS")

        if self.deadline_urgent_days > self.deadline_warning_days:
            warnings.append("LITIGATION_DEADLINE_URGENT_DAYS should not exceed LITIGATION_DEADLINE_WARNING_DAYS")

        if self.awaab_investigation_days <= 0 or self.awaab_work_start_days <= 0:
            warnings.append("Awaab's Law deadlines must be positive day counts")

        if self.role_margin < 0:
            warnings.append("LITIGATION_ROLE_MARGIN is negative; every tie will resolve to defendant")

        return warnings


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
