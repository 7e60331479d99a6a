"""Audit trail helpers"""
import logging

from .models import AuditLog, User

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First address of X-Forwarded-For, else REMOTE_ADDR"""
    meta = getattr(request, 'META', None) or {}
    forwarded = meta.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return meta.get('REMOTE_ADDR') or None


def _actor(request, user):
    actor = user or getattr(request, 'user', None)
    # homestay owners authenticate without a User row
    if not isinstance(actor, User) or not actor.is_authenticated:
        return None
    return actor


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Record who did `action` to which registry object.

    `user` overrides `request.user`. The acting account's tenant is stored
    under `changes['tenant']` so a tenant's trail can be read back without a
    join. Failures are logged and never propagate to the caller.
    """
    if not (action and model_name and object_id):
        logger.warning(
            f"Audit log skipped: missing required fields "
            f"(action={action}, model_name={model_name}, object_id={object_id})"
        )
        return None

    try:
        actor = _actor(request, user)
        details = dict(changes or {})
        if actor is not None and actor.tenant_username:
            details.setdefault('tenant', actor.tenant_username)
        return AuditLog.objects.create(
            user=actor,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=details,
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Failed to create audit log for {action} on {model_name} {object_id}: {str(e)}")
        return None
