# backend/utils/audit.py
from sqlalchemy.orm import Session
from models.log import Log

# Persist one audit row; the caller's pending changes are committed with it
def write_log(db: Session, *, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(user_id=user_id, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()
    return entry
