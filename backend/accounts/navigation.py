from __future__ import annotations

from dataclasses import asdict, dataclass

from .app_mode import AppMode
from .models import User

NAV_SLOT_COUNT = 5
PLACEHOLDER_HREF = "#"


@dataclass(frozen=True)
class NavigationItem:
    """Route definition for one bottom-navigation slot."""

    label: str
    href: str
    icon: str
    active_prefixes: tuple[str, ...] = ()
    active_exact: bool = False

    def is_active(self, path: str) -> bool:
        if self.active_exact:
            return path == self.href
        return any(path.startswith(prefix) for prefix in self.active_prefixes)


@dataclass(frozen=True)
class NavItem:
    href: str
    icon: str
    label: str
    active: bool
    disabled: bool = False

    @property
    def is_placeholder(self) -> bool:
        return self.href == PLACEHOLDER_HREF

    def as_dict(self, index: int) -> dict[str, str | bool]:
        payload: dict[str, str | bool] = asdict(self)
        payload["key"] = f"placeholder-{index}" if self.is_placeholder else self.href
        return payload


SELLER_NAV_ITEMS: tuple[NavigationItem, ...] = (
    NavigationItem("Dashboard", "/seller/dashboard", "home", active_prefixes=("/seller/dashboard",)),
    NavigationItem("Store", "/seller/store", "store", active_prefixes=("/seller/store",)),
    NavigationItem("Orders", "/seller/orders", "shopping-cart", active_prefixes=("/seller/orders",)),
    NavigationItem("Inventory", "/seller/inventory", "package", active_prefixes=("/seller/inventory",)),
    NavigationItem("Account", "/account", "user", active_prefixes=("/account",)),
)

HOME_ITEM = NavigationItem("Home", "/", "home", active_exact=True)

SHOPPING_NAV_ITEMS: tuple[NavigationItem, ...] = (
    NavigationItem("Products", "/products", "package", active_prefixes=("/products",)),
    NavigationItem("Stores", "/stores", "store", active_prefixes=("/stores",)),
    NavigationItem("Map", "/store-maps", "map-pin", active_exact=True),
)

FOOD_NAV_ITEMS: tuple[NavigationItem, ...] = (
    NavigationItem(
        "Menu",
        "/food-categories",
        "utensils-crossed",
        active_prefixes=("/food-categories", "/categories"),
    ),
    NavigationItem("Restaurants", "/restaurants", "chef-hat", active_prefixes=("/restaurants",)),
    NavigationItem("Map", "/restaurant-maps", "map-pin", active_exact=True),
)

ACCOUNT_ACTIVE_PREFIXES = ("/account", "/customer-dashboard")


def _authenticated(user) -> bool:
    if user is None:
        return False
    return bool(getattr(user, "is_authenticated", True))


def _account_item(user) -> NavigationItem:
    href = "/account" if _authenticated(user) else "/login"
    return NavigationItem("Account", href, "user", active_prefixes=ACCOUNT_ACTIVE_PREFIXES)


def nav_definitions(*, user, mode: str | None) -> list[NavigationItem]:
    role = getattr(user, "role", None) if _authenticated(user) else None
    if role == User.Role.SHOPKEEPER.value:
        return list(SELLER_NAV_ITEMS)

    mode_items = SHOPPING_NAV_ITEMS if mode == AppMode.SHOPPING.value else FOOD_NAV_ITEMS
    return [HOME_ITEM, *mode_items, _account_item(user)]


def placeholder_item() -> NavItem:
    return NavItem(href=PLACEHOLDER_HREF, icon="", label="", active=False, disabled=True)


def normalize_navigation(items: list[NavItem], size: int = NAV_SLOT_COUNT) -> list[NavItem]:
    padded = list(items)
    while len(padded) < size:
        padded.append(placeholder_item())
    return padded[:size]


def build_navigation_items(*, user, mode: str | None, path: str | None) -> list[NavItem]:
    """Resolve the bottom-navigation entries for a user, app mode and route.

    Shopkeepers get the seller set; everyone else (including anonymous
    visitors and unknown roles) gets the customer set, whose middle three
    slots follow the app mode. The result always has NAV_SLOT_COUNT entries.
    """
    current_path = path or ""
    resolved = [
        NavItem(
            href=item.href,
            icon=item.icon,
            label=item.label,
            active=item.is_active(current_path),
        )
        for item in nav_definitions(user=user, mode=mode)
    ]
    return normalize_navigation(resolved)


def serialize_navigation(items: list[NavItem]) -> list[dict[str, str | bool]]:
    return [item.as_dict(index) for index, item in enumerate(items)]
