"""Store identity printed at the top of every receipt."""

from dataclasses import dataclass, replace

from pharmabill import config


@dataclass(frozen=True)
class StoreProfile:
    name: str = config.STORE_NAME
    subtitle: str = config.STORE_SUBTITLE
    phone: str = config.STORE_PHONE
    address: str = config.STORE_ADDRESS
    gstin: str = config.STORE_GSTIN

    def merged_with(self, settings: dict) -> "StoreProfile":
        """Overlay non-empty values from the /settings payload."""
        return replace(
            self,
            name=settings.get("storeName") or self.name,
            subtitle=settings.get("storeSubtitle") or self.subtitle,
            phone=settings.get("storePhone") or self.phone,
            address=settings.get("storeAddress") or self.address,
            gstin=settings.get("storeGstin") or self.gstin,
        )
