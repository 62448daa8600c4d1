"""
Typed records decoded from aidchain ledger objects.

Each decode function takes the raw ``sui_getObject`` response and returns a
validated record, or raises DecodeError. Field presence is never assumed.
"""
from enum import IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from .exceptions import DecodeError


class PackageStatus(IntEnum):
    CREATED = 0
    IN_TRANSIT = 1
    DELIVERED = 2


_STATUS_LABELS = {
    PackageStatus.CREATED: "Created",
    PackageStatus.IN_TRANSIT: "In transit",
    PackageStatus.DELIVERED: "Delivered",
}


class AidRegistry(BaseModel):
    id: str
    packages: List[str] = Field(default_factory=list)
    recipient_profiles: List[str] = Field(default_factory=list)


class AidPackage(BaseModel):
    id: str
    description: str
    location: str
    status: int
    donor: str
    coordinator: str
    recipient: Optional[str] = None
    proof_url: str = ""
    created_at_epoch: int
    updated_at_epoch: int
    donation_amount: int = 0
    is_locked: bool = False

    @property
    def status_label(self) -> str:
        try:
            return _STATUS_LABELS[PackageStatus(self.status)]
        except ValueError:
            return "Unknown"

    @property
    def delivered(self) -> bool:
        return self.status == PackageStatus.DELIVERED


class RecipientProfile(BaseModel):
    id: str
    owner: Optional[str] = None
    name: str
    location: str
    need_category: str
    is_verified: bool
    registered_at_epoch: int


def _move_fields(response: Dict[str, Any], kind: str) -> Dict[str, Any]:
    if not isinstance(response, dict):
        raise DecodeError(f"{kind}: expected an object response, got {type(response).__name__}")
    if response.get("error"):
        raise DecodeError(f"{kind}: ledger returned error {response['error']}")
    content = (response.get("data") or {}).get("content")
    if not isinstance(content, dict) or content.get("dataType") != "moveObject":
        raise DecodeError(f"{kind}: object is not a Move object")
    fields = content.get("fields")
    if not isinstance(fields, dict):
        raise DecodeError(f"{kind}: object has no fields")
    return fields


def _uid(fields: Dict[str, Any], response: Dict[str, Any]) -> Optional[str]:
    uid = fields.get("id")
    if isinstance(uid, dict):
        return uid.get("id")
    return uid or (response.get("data") or {}).get("objectId")


def _validate(model: type, kind: str, values: Dict[str, Any]):
    try:
        return model.model_validate(values)
    except PydanticValidationError as e:
        raise DecodeError(f"{kind}: {e.error_count()} invalid field(s): {e.errors()[0]['loc']}")


def decode_aid_registry(response: Dict[str, Any]) -> AidRegistry:
    fields = _move_fields(response, "AidRegistry")
    return _validate(AidRegistry, "AidRegistry", {
        "id": _uid(fields, response),
        "packages": fields.get("packages") or [],
        "recipient_profiles": fields.get("recipient_profiles") or [],
    })


def decode_aid_package(response: Dict[str, Any]) -> AidPackage:
    """
    Decode an AidPackage.

    ``locked_donation`` is an Option; the package is locked (its donation
    still in escrow) when that option is populated.
    """
    fields = _move_fields(response, "AidPackage")
    locked = fields.get("locked_donation")
    values = {key: fields.get(key) for key in (
        "description", "location", "status", "donor", "coordinator",
        "created_at_epoch", "updated_at_epoch",
    )}
    values.update({
        "id": _uid(fields, response),
        "recipient": fields.get("recipient"),
        "proof_url": fields.get("proof_url") or "",
        "donation_amount": fields.get("donation_amount") or 0,
        "is_locked": bool(locked) and (not isinstance(locked, dict) or locked.get("type") != "none"),
    })
    return _validate(AidPackage, "AidPackage", values)


def decode_recipient_profile(response: Dict[str, Any]) -> RecipientProfile:
    fields = _move_fields(response, "RecipientProfile")
    owner = (response.get("data") or {}).get("owner")
    values = {key: fields.get(key) for key in (
        "name", "location", "need_category", "is_verified", "registered_at_epoch",
    )}
    values["id"] = _uid(fields, response)
    values["owner"] = owner.get("AddressOwner") if isinstance(owner, dict) else None
    return _validate(RecipientProfile, "RecipientProfile", values)
