import logging
from typing import Optional, Any, Dict

from django.contrib.auth import get_user_model

from clinic.models import AuditEvent

User = get_user_model()
logger = logging.getLogger(__name__)


def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> Optional[AuditEvent]:
    """Persist an audit row; failures are logged and never reach the caller."""
    try:
        return AuditEvent.objects.create(
            user=user if getattr(user, 'pk', None) else None,
            action=action,
            object_type=object_type, object_id=object_id,
            detail=detail or {},
        )
    except Exception:
        logger.exception('audit write failed for %s', action)
        return None
