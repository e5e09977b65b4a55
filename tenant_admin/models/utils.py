# tenant_admin/models/utils.py
from typing import Any, Dict, Optional
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId


def str_to_objid(s: str) -> Optional[ObjectId]:
    try:
        return ObjectId(s)
    except (InvalidId, TypeError):
        return None


def serialize_mongo_doc(doc: Dict) -> Dict:
    """
    Convert a MongoDB document to a JSON-serializable dict:
    - Convert ObjectId values to strings
    - Convert datetimes to ISO strings
    - Drop secrets (password_hash)
    """
    out: Dict = {}
    for k, v in doc.items():
        if k == "password_hash":
            continue
        if isinstance(v, ObjectId):
            out[k] = str(v)
        elif isinstance(v, datetime):
            out[k] = v.isoformat()
        elif isinstance(v, dict):
            out[k] = serialize_mongo_doc(v)
        else:
            out[k] = v
    return out


def compact(values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None values, used when building hub attribute payloads."""
    return {k: v for k, v in values.items() if v is not None}
