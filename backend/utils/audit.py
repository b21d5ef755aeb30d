# backend/utils/audit.py
import logging

from sqlalchemy.orm import Session
from models.log import Log

logger = logging.getLogger("audit")


def write_log(db: Session, *, user_id, action, resource, resource_id=None, status="SUCCESS",
              ip=None, meta=None, commit=True):
    """Persist an audit entry.

    Workflows that own a transaction pass ``commit=False`` so the entry is
    committed (or rolled back) together with the change it describes.
    """
    entry = Log(user_id=user_id, action=action, resource=resource, resource_id=resource_id,
                status=status, ip=ip, meta=meta or {})
    db.add(entry)
    logger.info("%s %s/%s user=%s status=%s", action, resource, resource_id, user_id, status)
    if commit:
        db.commit()
    return entry


# Client address of the request, when the transport exposes one
def client_ip(request):
    if request is None or request.client is None:
        return None
    return request.client.host
