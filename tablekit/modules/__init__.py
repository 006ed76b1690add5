"""Domain modules package."""

from tablekit.modules.audit import models as audit_models  # noqa: F401
