from __future__ import annotations

import json
from unittest import mock

from django.db import OperationalError
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APIRequestFactory

from accounts.app_mode import SESSION_KEY
from accounts.models import User

from .exceptions import ApiError, api_exception_handler
from .middleware import is_api_path, truncate_log_line


class NavigationEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.shopkeeper = User.objects.create_user(
            username="api_shopkeeper",
            password="test12345",
            role=User.Role.SHOPKEEPER,
        )
        self.customer = User.objects.create_user(
            username="api_customer",
            password="test12345",
            role=User.Role.CUSTOMER,
        )

    def test_anonymous_visitor_gets_customer_items_with_login_link(self):
        response = self.client.get(reverse("api:navigation"), {"path": "/products"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payload = response.json()
        self.assertEqual(payload["mode"], "shopping")
        self.assertIsNone(payload["role"])
        self.assertEqual(len(payload["items"]), 5)
        self.assertEqual(payload["items"][-1]["href"], "/login")
        self.assertEqual([item["href"] for item in payload["items"] if item["active"]], ["/products"])

    def test_shopkeeper_gets_seller_items(self):
        self.client.force_login(self.shopkeeper)
        response = self.client.get(reverse("api:navigation"), {"path": "/seller/dashboard"})

        payload = response.json()
        self.assertEqual(payload["role"], "shopkeeper")
        self.assertEqual(
            [item["label"] for item in payload["items"]],
            ["Dashboard", "Store", "Orders", "Inventory", "Account"],
        )
        self.assertTrue(payload["items"][0]["active"])

    def test_items_carry_keys_and_render_state(self):
        self.client.force_login(self.customer)
        response = self.client.get(reverse("api:navigation"))

        first = response.json()["items"][0]
        self.assertEqual(
            first,
            {"href": "/", "icon": "home", "label": "Home", "active": True, "disabled": False, "key": "/"},
        )

    def test_navigation_follows_session_mode(self):
        self.client.force_login(self.customer)
        self.client.post(reverse("api:app_mode"), {"mode": "food"}, format="json")

        response = self.client.get(reverse("api:navigation"), {"path": "/restaurant-maps"})

        payload = response.json()
        self.assertEqual(payload["mode"], "food")
        self.assertEqual([item["label"] for item in payload["items"][1:4]], ["Menu", "Restaurants", "Map"])
        self.assertTrue(payload["items"][3]["active"])
        self.assertEqual(payload["items"][-1]["href"], "/account")


class AppModeEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_default_mode(self):
        response = self.client.get(reverse("api:app_mode"))

        self.assertEqual(response.json(), {"mode": "shopping"})

    def test_switch_mode(self):
        response = self.client.post(reverse("api:app_mode"), {"mode": "food"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"mode": "food"})
        self.assertEqual(self.client.session[SESSION_KEY], "food")
        self.assertEqual(self.client.get(reverse("api:app_mode")).json(), {"mode": "food"})

    def test_unknown_mode_is_rejected(self):
        response = self.client.post(reverse("api:app_mode"), {"mode": "groceries"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        payload = response.json()
        self.assertEqual(payload["message"], "Invalid request.")
        self.assertIn("mode", payload["errors"])

    def test_missing_mode_is_rejected(self):
        response = self.client.post(reverse("api:app_mode"), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_object_body_is_rejected(self):
        response = self.client.post(reverse("api:app_mode"), ["food"], format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertNotIn(SESSION_KEY, self.client.session)

    def test_malformed_json_is_rejected(self):
        response = self.client.post(reverse("api:app_mode"), "{not json", content_type="application/json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("message", response.json())

    @override_settings(DATA_UPLOAD_MAX_MEMORY_SIZE=16)
    def test_oversized_body_is_rejected(self):
        body = json.dumps({"mode": "food", "padding": "x" * 64})
        response = self.client.post(reverse("api:app_mode"), body, content_type="application/json")

        self.assertEqual(response.status_code, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)
        self.assertEqual(response.json(), {"message": "Request body exceeds the configured size limit."})


class CurrentUserEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username="me_user",
            password="test12345",
            first_name="Asha",
            role=User.Role.SHOPKEEPER,
        )

    def test_anonymous_is_unauthorized(self):
        response = self.client.get(reverse("api:current_user"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json(), {"message": "Unauthorized"})

    def test_authenticated_user_payload(self):
        self.client.force_login(self.user)
        response = self.client.get(reverse("api:current_user"))

        payload = response.json()
        self.assertEqual(payload["username"], "me_user")
        self.assertEqual(
            payload,
            {
                "id": self.user.id,
                "username": "me_user",
                "first_name": "Asha",
                "last_name": "",
                "email": "",
                "role": "shopkeeper",
            },
        )


class HealthEndpointTests(TestCase):
    def test_healthy_database(self):
        response = APIClient().get(reverse("api:health"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"status": "ok", "database": True})

    @mock.patch("api.views.ping_database", side_effect=OperationalError("pool timeout"))
    def test_unreachable_database(self, ping):
        response = APIClient().get(reverse("api:health"))

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.json(), {"status": "degraded", "database": False})


class ApiRoutingTests(TestCase):
    def test_trailing_slash_is_optional(self):
        for url in ("/api/navigation", "/api/navigation/", "/api/health", "/api/app-mode"):
            with self.subTest(url=url):
                response = APIClient().get(url, {"path": "/"})
                self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_unknown_api_route_is_json_404(self):
        for url in ("/api/does-not-exist/", "/api/orders/42", "/api"):
            with self.subTest(url=url):
                response = APIClient().get(url)
                self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
                self.assertEqual(response.json(), {"message": "Not Found"})


class ApiExceptionHandlerTests(SimpleTestCase):
    def _context(self):
        return {"request": APIRequestFactory().get("/api/anything/"), "view": None}

    def test_plain_exception_maps_to_500(self):
        with self.assertLogs("api.exceptions", level="ERROR") as logs:
            response = api_exception_handler(RuntimeError("database exploded"), self._context())

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data, {"message": "Internal Server Error"})
        self.assertIn("Unhandled API error", logs.output[0])
        self.assertIn("RuntimeError", logs.output[0])

    @override_settings(DEBUG=True)
    def test_debug_exposes_server_error_message(self):
        with self.assertLogs("api.exceptions", level="ERROR"):
            response = api_exception_handler(RuntimeError("database exploded"), self._context())

        self.assertEqual(response.data, {"message": "database exploded"})

    def test_exception_status_attribute_is_used(self):
        error = ValueError("teapot")
        error.status = 418

        response = api_exception_handler(error, self._context())

        self.assertEqual(response.status_code, 418)
        self.assertEqual(response.data, {"message": "teapot"})

    def test_api_error_carries_status_code(self):
        response = api_exception_handler(ApiError("Store is closed", status_code=409), self._context())

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data, {"message": "Store is closed"})

    def test_out_of_range_status_falls_back_to_500(self):
        error = RuntimeError("odd")
        error.status_code = 200

        with self.assertLogs("api.exceptions", level="ERROR"):
            response = api_exception_handler(error, self._context())

        self.assertEqual(response.status_code, 500)


class ApiRequestLoggingTests(TestCase):
    def test_api_requests_are_logged_with_body(self):
        with self.assertLogs("api.middleware", level="INFO") as logs:
            APIClient().get("/api/app-mode/")

        self.assertEqual(len(logs.output), 1)
        self.assertRegex(logs.output[0], r"GET /api/app-mode/ 200 in \d+ms :: \{")

    def test_non_api_requests_are_not_logged(self):
        with self.assertNoLogs("api.middleware", level="INFO"):
            self.client.get("/products")

    def test_long_lines_are_truncated(self):
        line = "GET /api/navigation/ 200 in 3ms :: " + "x" * 200

        truncated = truncate_log_line(line)

        self.assertEqual(len(truncated), 80)
        self.assertTrue(truncated.endswith("…"))
        self.assertEqual(truncate_log_line("short"), "short")

    def test_api_prefix_matching(self):
        self.assertTrue(is_api_path("/api"))
        self.assertTrue(is_api_path("/api/health/"))
        self.assertFalse(is_api_path("/apiary"))
        self.assertFalse(is_api_path("/products"))


class CsrfProtectionTests(TestCase):
    def setUp(self):
        self.client = APIClient(enforce_csrf_checks=True)
        self.client.force_login(User.objects.create_user(username="csrf_customer", password="test12345"))

    def test_navigation_sets_csrf_cookie(self):
        response = self.client.get(reverse("api:navigation"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("csrftoken", response.cookies)

    def test_logged_in_mode_switch_needs_token(self):
        response = self.client.post(reverse("api:app_mode"), {"mode": "food"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("message", response.json())

    def test_logged_in_mode_switch_with_token_from_cookie(self):
        self.client.get(reverse("api:navigation"))
        token = self.client.cookies["csrftoken"].value

        response = self.client.post(
            reverse("api:app_mode"),
            {"mode": "food"},
            format="json",
            HTTP_X_CSRFTOKEN=token,
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json(), {"mode": "food"})
