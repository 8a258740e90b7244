"""Customer profile — the saved delivery address of a signed-in customer.

Checkout can save the address it was given so the next checkout starts
pre-filled. Only authenticated users have a profile.
"""

from datetime import UTC, datetime

from protean import handle
from protean.fields import DateTime, String
from protean.utils.globals import current_domain

from storefront.domain import storefront

_DEFAULT_COUNTRY = "Philippines"

_ADDRESS_FIELDS = (
    "attention_to",
    "line1",
    "line2",
    "barangay",
    "city",
    "province",
    "postal_code",
    "country",
)


@storefront.event(part_of="CustomerProfile")
class ProfileAddressSaved:
    __version__ = 1

    user_id = String(required=True)
    postal_code = String()
    saved_at = DateTime(required=True)


@storefront.aggregate
class CustomerProfile:
    user_id = String(required=True, max_length=255, unique=True)
    attention_to = String(max_length=255)
    line1 = String(max_length=255)
    line2 = String(max_length=255)
    barangay = String(max_length=255)
    city = String(max_length=255)
    province = String(max_length=255)
    postal_code = String(max_length=20)
    country = String(max_length=100, default=_DEFAULT_COUNTRY)
    updated_at = DateTime()

    def save_address(self, **address):
        """Replace the saved address. A blank country falls back to the default."""
        for name in _ADDRESS_FIELDS:
            if name not in address:
                continue
            if name == "country":
                self.country = (address[name] or "").strip() or _DEFAULT_COUNTRY
            else:
                setattr(self, name, address[name] or None)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProfileAddressSaved(
                user_id=self.user_id,
                postal_code=self.postal_code,
                saved_at=self.updated_at,
            )
        )


@storefront.repository(part_of=CustomerProfile)
class CustomerProfileRepository:
    def for_user(self, user_id) -> CustomerProfile | None:
        profiles = self._dao.query.filter(user_id=user_id).all().items
        return profiles[0] if profiles else None


@storefront.command(part_of="CustomerProfile")
class SaveProfileAddress:
    user_id = String(required=True, max_length=255)
    attention_to = String(max_length=255)
    line1 = String(max_length=255)
    line2 = String(max_length=255)
    barangay = String(max_length=255)
    city = String(max_length=255)
    province = String(max_length=255)
    postal_code = String(max_length=20)
    country = String(max_length=100)


@storefront.command_handler(part_of=CustomerProfile)
class CustomerProfileHandler:
    @handle(SaveProfileAddress)
    def save_profile_address(self, command):
        repo = current_domain.repository_for(CustomerProfile)
        profile = repo.for_user(command.user_id) or CustomerProfile(user_id=command.user_id)
        profile.save_address(**{name: getattr(command, name) for name in _ADDRESS_FIELDS})
        repo.add(profile)
        return str(profile.id)


def get_profile(user_id) -> CustomerProfile | None:
    return current_domain.repository_for(CustomerProfile).for_user(user_id)
