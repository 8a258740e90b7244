"""Checkout input — the customer's delivery details and payment proof."""

import re
from dataclasses import dataclass
from datetime import datetime

from storefront.delivery.resolver import normalize_area, normalize_postal_code


@dataclass(frozen=True)
class CheckoutDraft:
    """Everything the customer typed into the checkout form."""

    full_name: str = ""
    email: str = ""
    phone: str = ""
    placed_for_someone_else: bool = False
    attention_to: str = ""
    line1: str = ""
    line2: str = ""
    barangay: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    country: str = "Philippines"
    notes: str = ""
    delivery_date: str = ""  # YYYY-MM-DD
    delivery_slot: str = ""  # HH:MM
    express_delivery: bool = False
    add_thermal_bag: bool = False

    @property
    def normalized_postal_code(self) -> str:
        return normalize_postal_code(self.postal_code)

    @property
    def area_text(self) -> str:
        return normalize_area(self.barangay, self.city)

    def address_text(self) -> str:
        """Single-line delivery address as stored on the order."""
        parts = [
            self.attention_to,
            self.line1,
            self.line2,
            self.barangay,
            self.city,
            self.province,
            self.postal_code,
            self.country,
        ]
        return ", ".join(part.strip() for part in parts if part and part.strip())

    def profile_address(self) -> dict:
        return {
            "attention_to": self.attention_to.strip(),
            "line1": self.line1.strip(),
            "line2": self.line2.strip(),
            "barangay": self.barangay.strip(),
            "city": self.city.strip(),
            "province": self.province.strip(),
            "postal_code": self.postal_code.strip(),
            "country": self.country.strip() or "Philippines",
        }


_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


@dataclass(frozen=True)
class PaymentProof:
    """An uploaded screenshot or file asserting payment. Never verified."""

    filename: str
    content: bytes
    content_type: str = "image/jpeg"

    @property
    def extension(self) -> str:
        ext = self.filename.rsplit(".", 1)[-1].lower() if "." in self.filename else "jpg"
        return re.sub(r"[^a-z0-9]", "", ext) or "jpg"

    @property
    def safe_name(self) -> str:
        return _UNSAFE_NAME_CHARS.sub("_", self.filename) or f"proof.{self.extension}"

    def object_path(self, folder: str, at: datetime) -> str:
        """Storage path ``<folder>/<epoch millis>-<safe name>``."""
        return f"{folder}/{int(at.timestamp() * 1000)}-{self.safe_name}"
