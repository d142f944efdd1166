from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

"""CameraRecord domain model.

A CameraRecord is the canonical, normalized representation of one camera
registration. It is created once per accepted spreadsheet row and persisted as
a single insert into the cameras collection. Field names follow the
spreadsheet header (camelCase) so that ``to_document()`` maps 1:1 onto the
stored document / table columns.
"""

__all__ = [
    "CAMERA_FIELDS",
    "CameraRecord",
    "Submitter",
    "WorkingCondition",
]

# Template / storage column order
CAMERA_FIELDS: tuple[str, ...] = (
    "ownerName",
    "phoneNumber",
    "deviceName",
    "deviceType",
    "latitude",
    "longitude",
    "address",
    "city",
    "organization",
    "workingCondition",
    "policeId",
    "dateChecked",
    "username",
)


class WorkingCondition(Enum):
    """Camera status as recorded by the submitting officer."""
    WORKING = "Working"
    NOT_WORKING = "Not Working"

    @classmethod
    def values(cls) -> set[str]:
        return {member.value for member in cls}


@dataclass(frozen=True)
class Submitter:
    """Authenticated user on whose behalf an import runs."""
    username: str
    police_id: str | None = None


@dataclass(frozen=True)
class CameraRecord:
    """Normalized camera registration (all strings trimmed, defaults applied)."""
    ownerName: str
    phoneNumber: str  # 10 digits
    deviceName: str
    deviceType: str
    latitude: str  # decimal degrees, kept as entered
    longitude: str
    address: str
    city: str
    organization: str
    workingCondition: str  # "Working" | "Not Working"
    policeId: str
    dateChecked: str  # YYYY-MM-DD
    username: str = ""

    @property
    def duplicate_key(self) -> tuple[str, str, str]:
        """(deviceName, latitude, longitude) identity used for existence checks."""
        return (self.deviceName, self.latitude, self.longitude)

    def to_document(self) -> dict[str, str]:
        """Return the field-name keyed mapping written to the store."""
        return asdict(self)
