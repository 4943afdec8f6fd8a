from __future__ import annotations

from io import StringIO
from types import SimpleNamespace
from unittest import mock

from django.contrib.auth.models import AnonymousUser
from django.contrib.sessions.backends.signed_cookies import SessionStore
from django.core.management import call_command
from django.db import OperationalError
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings

from .app_mode import SESSION_KEY, AppMode, get_app_mode, set_app_mode
from .bootstrap import bootstrap_default_admin, ensure_default_admin
from .models import User
from .navigation import (
    NAV_SLOT_COUNT,
    NavItem,
    build_navigation_items,
    normalize_navigation,
    placeholder_item,
    serialize_navigation,
)


def _user(role: str):
    return SimpleNamespace(role=role, is_authenticated=True)


def _active_hrefs(items) -> list[str]:
    return [item.href for item in items if item.active]


class NavigationRoleSelectionTests(SimpleTestCase):
    def test_shopkeeper_gets_seller_items(self):
        items = build_navigation_items(user=_user("shopkeeper"), mode="shopping", path="/")

        self.assertEqual(
            [item.label for item in items],
            ["Dashboard", "Store", "Orders", "Inventory", "Account"],
        )
        self.assertEqual(items[-1].href, "/account")

    def test_seller_items_ignore_app_mode(self):
        shopping = build_navigation_items(user=_user("shopkeeper"), mode="shopping", path="/seller/orders")
        food = build_navigation_items(user=_user("shopkeeper"), mode="food", path="/seller/orders")

        self.assertEqual(shopping, food)
        self.assertEqual(_active_hrefs(shopping), ["/seller/orders"])

    def test_other_roles_get_customer_items(self):
        for role in ("customer", "admin", "Shopkeeper", "SHOPKEEPER", "shop_keeper", ""):
            with self.subTest(role=role):
                items = build_navigation_items(user=_user(role), mode="shopping", path="/")
                self.assertEqual(items[0].label, "Home")
                self.assertEqual(items[1].label, "Products")

    def test_user_without_role_gets_customer_items(self):
        user = SimpleNamespace(is_authenticated=True)
        items = build_navigation_items(user=user, mode="food", path="/")

        self.assertEqual([item.label for item in items], ["Home", "Menu", "Restaurants", "Map", "Account"])
        self.assertEqual(items[-1].href, "/account")

    def test_seller_prefix_matching(self):
        items = build_navigation_items(user=_user("shopkeeper"), mode=None, path="/seller/inventory/42/edit")

        self.assertEqual(_active_hrefs(items), ["/seller/inventory"])


class NavigationLengthTests(SimpleTestCase):
    def test_every_branch_yields_exactly_five_items(self):
        users = [None, AnonymousUser(), _user("customer"), _user("shopkeeper"), _user("admin")]
        modes = [None, "", "shopping", "food", "Shopping", "unknown"]
        paths = [None, "", "/", "/products", "/restaurant-maps", "/account/settings"]
        for user in users:
            for mode in modes:
                for path in paths:
                    with self.subTest(user=user, mode=mode, path=path):
                        items = build_navigation_items(user=user, mode=mode, path=path)
                        self.assertEqual(len(items), NAV_SLOT_COUNT)
                        self.assertFalse(any(item.disabled for item in items))

    def test_normalize_pads_short_lists_with_placeholders(self):
        items = [NavItem(href="/", icon="home", label="Home", active=True)]

        normalized = normalize_navigation(items)

        self.assertEqual(len(normalized), NAV_SLOT_COUNT)
        self.assertEqual(normalized[0], items[0])
        for placeholder in normalized[1:]:
            self.assertTrue(placeholder.disabled)
            self.assertFalse(placeholder.active)
            self.assertEqual(placeholder.label, "")
            self.assertEqual(placeholder.icon, "")

    def test_normalize_truncates_long_lists(self):
        items = [NavItem(href=f"/{index}", icon="", label=str(index), active=False) for index in range(8)]

        normalized = normalize_navigation(items)

        self.assertEqual([item.href for item in normalized], ["/0", "/1", "/2", "/3", "/4"])

    def test_placeholders_use_positional_keys(self):
        items = normalize_navigation([NavItem(href="/", icon="home", label="Home", active=False)])

        payload = serialize_navigation(items)

        self.assertEqual(payload[0]["key"], "/")
        self.assertEqual([entry["key"] for entry in payload[1:]], [f"placeholder-{index}" for index in range(1, 5)])
        self.assertTrue(all(entry["href"] == "#" for entry in payload[1:]))

    def test_placeholder_never_matches_current_path(self):
        self.assertFalse(placeholder_item().active)
        self.assertTrue(placeholder_item().disabled)


class NavigationActiveStateTests(SimpleTestCase):
    def test_products_is_only_active_mode_item_in_shopping_mode(self):
        items = build_navigation_items(user=_user("customer"), mode="shopping", path="/products")

        self.assertEqual(_active_hrefs(items), ["/products"])
        self.assertEqual([item.label for item in items[1:4]], ["Products", "Stores", "Map"])

    def test_home_requires_exact_root(self):
        self.assertTrue(build_navigation_items(user=None, mode="shopping", path="/")[0].active)
        self.assertFalse(build_navigation_items(user=None, mode="shopping", path="/products")[0].active)

    def test_restaurant_map_uses_exact_match(self):
        exact = build_navigation_items(user=None, mode="food", path="/restaurant-maps")
        nested = build_navigation_items(user=None, mode="food", path="/restaurant-maps/extra")

        self.assertTrue(exact[3].active)
        self.assertEqual(exact[3].label, "Map")
        self.assertFalse(nested[3].active)

    def test_store_map_uses_exact_match(self):
        exact = build_navigation_items(user=None, mode="shopping", path="/store-maps")
        nested = build_navigation_items(user=None, mode="shopping", path="/store-maps/1")

        self.assertTrue(exact[3].active)
        self.assertFalse(nested[3].active)

    def test_menu_matches_either_category_prefix(self):
        for path in ("/food-categories", "/food-categories/pizza", "/categories/3"):
            with self.subTest(path=path):
                items = build_navigation_items(user=None, mode="food", path=path)
                self.assertEqual(_active_hrefs(items), ["/food-categories"])

    def test_non_shopping_modes_fall_back_to_food_items(self):
        for mode in (None, "", "food", "Shopping", "shopping "):
            with self.subTest(mode=mode):
                items = build_navigation_items(user=None, mode=mode, path="/")
                self.assertEqual([item.label for item in items[1:4]], ["Menu", "Restaurants", "Map"])

    def test_account_active_on_customer_dashboard(self):
        for path in ("/account", "/account/orders", "/customer-dashboard"):
            with self.subTest(path=path):
                items = build_navigation_items(user=_user("customer"), mode="shopping", path=path)
                self.assertEqual(_active_hrefs(items), ["/account"])


class NavigationAccountLinkTests(SimpleTestCase):
    def test_anonymous_visitor_gets_login_link(self):
        for user in (None, AnonymousUser()):
            with self.subTest(user=user):
                items = build_navigation_items(user=user, mode="shopping", path="/")
                self.assertEqual(items[-1].href, "/login")
                self.assertEqual(items[-1].label, "Account")

    def test_authenticated_user_gets_account_link(self):
        items = build_navigation_items(user=_user("customer"), mode="shopping", path="/")

        self.assertEqual(items[-1].href, "/account")

    def test_login_link_still_active_on_account_paths(self):
        items = build_navigation_items(user=None, mode="food", path="/account")

        self.assertTrue(items[-1].active)


class NavigationWithStoredUsersTests(TestCase):
    def setUp(self):
        self.shopkeeper = User.objects.create_user(
            username="corner_shop",
            password="test12345",
            role=User.Role.SHOPKEEPER,
        )
        self.customer = User.objects.create_user(
            username="hungry_customer",
            password="test12345",
        )

    def test_default_role_is_customer(self):
        self.assertEqual(self.customer.role, User.Role.CUSTOMER)
        self.assertFalse(self.customer.is_shopkeeper())

    def test_stored_shopkeeper_gets_seller_items(self):
        items = build_navigation_items(user=self.shopkeeper, mode="food", path="/seller/store")

        self.assertTrue(self.shopkeeper.is_shopkeeper())
        self.assertEqual(items[0].href, "/seller/dashboard")
        self.assertEqual(_active_hrefs(items), ["/seller/store"])

    def test_stored_customer_gets_customer_items(self):
        items = build_navigation_items(user=self.customer, mode="shopping", path="/stores/5")

        self.assertEqual(_active_hrefs(items), ["/stores"])
        self.assertEqual(items[-1].href, "/account")


class AppModeTests(SimpleTestCase):
    def setUp(self):
        self.request = RequestFactory().get("/")
        self.request.session = SessionStore()

    def test_default_mode_is_shopping(self):
        self.assertEqual(get_app_mode(self.request), AppMode.SHOPPING)

    def test_mode_without_session_is_shopping(self):
        self.assertEqual(get_app_mode(RequestFactory().get("/")), AppMode.SHOPPING)

    def test_set_mode_is_stored_in_session(self):
        set_app_mode(self.request, "food")

        self.assertEqual(self.request.session[SESSION_KEY], "food")
        self.assertEqual(get_app_mode(self.request), AppMode.FOOD)

    def test_unknown_mode_is_rejected(self):
        with self.assertRaises(ValueError):
            set_app_mode(self.request, "groceries")
        self.assertNotIn(SESSION_KEY, self.request.session)

    def test_corrupt_stored_mode_reads_as_default(self):
        self.request.session[SESSION_KEY] = "nonsense"

        self.assertEqual(get_app_mode(self.request), AppMode.SHOPPING)


class DefaultAdminBootstrapTests(TestCase):
    @override_settings(DEFAULT_ADMIN_USERNAME="admin", DEFAULT_ADMIN_PASSWORD="admin123")
    def test_creates_admin_once(self):
        self.assertTrue(ensure_default_admin())
        self.assertFalse(ensure_default_admin())

        admin = User.objects.get(username="admin")
        self.assertEqual(admin.role, User.Role.ADMIN)
        self.assertTrue(admin.is_superuser)
        self.assertTrue(admin.check_password("admin123"))

    @override_settings(DEFAULT_ADMIN_PASSWORD="")
    def test_skips_without_password(self):
        self.assertFalse(ensure_default_admin())
        self.assertFalse(User.objects.exists())

    def test_management_command_creates_admin(self):
        stdout = StringIO()
        call_command("bootstrap_admin", "--username", "owner", "--password", "s3cret-pass", stdout=stdout)

        self.assertIn("Created default admin user: owner", stdout.getvalue())
        self.assertTrue(User.objects.filter(username="owner", role=User.Role.ADMIN).exists())

    def test_management_command_skips_existing_admin(self):
        User.objects.create_user(username="owner", password="x", role=User.Role.ADMIN)
        stdout = StringIO()
        call_command("bootstrap_admin", "--username", "owner", "--password", "s3cret-pass", stdout=stdout)

        self.assertIn("Admin user already exists", stdout.getvalue())


class StartupAdminBootstrapTests(SimpleTestCase):
    @mock.patch("accounts.bootstrap.connections")
    @mock.patch("accounts.bootstrap.ensure_default_admin", side_effect=OperationalError("no such table"))
    def test_database_errors_are_logged_not_raised(self, ensure, connections):
        with self.assertLogs("accounts.bootstrap", level="ERROR") as logs:
            bootstrap_default_admin()

        self.assertIn("default admin", logs.output[0])
        connections.close_all.assert_called_once_with()
