"""Member onboarding use cases."""

from app.application.use_cases.onboarding.onboarding_workflow import (
    OnboardingWorkflow,
    plan_steps,
)

__all__ = ["OnboardingWorkflow", "plan_steps"]
