from logging import getLogger
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator

from asr_eval.utils.errors import VendorNotFoundError


class VendorConfig(BaseModel):
    id: int
    name: str
    vendor_type: str = Field(
        description="Registry key selecting the recognizer implementation, e.g. 'mock'"
    )
    api_type: str = "ASR"
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    api_endpoint: Optional[str] = None
    supported_models: List[Dict[str, Any]] = Field(default_factory=list)
    other_configs: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("vendor_type")
    @classmethod
    def _normalize_vendor_type(cls, value: str) -> str:
        return value.strip().lower()


class VendorStore:
    """In-memory vendor config lookup, keyed by vendor id."""

    def __init__(self, vendors: Iterable[VendorConfig] = ()):
        self._log = getLogger(__name__)
        self._vendors: Dict[int, VendorConfig] = {}
        for vendor in vendors:
            self.add(vendor)

    def add(self, vendor: VendorConfig) -> None:
        if vendor.id in self._vendors:
            self._log.warning(f"Replacing vendor config {vendor.id} ({vendor.name})")
        self._vendors[vendor.id] = vendor

    def get(self, vendor_id: int) -> VendorConfig:
        try:
            return self._vendors[vendor_id]
        except KeyError:
            raise VendorNotFoundError(vendor_id) from None

    def ids(self) -> List[int]:
        return list(self._vendors)

    def __len__(self) -> int:
        return len(self._vendors)
