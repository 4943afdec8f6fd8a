from __future__ import annotations

import tempfile
from pathlib import Path

from django.test import SimpleTestCase, override_settings

from .assets import find_asset, first_existing, inject_vite_client


def _body(response) -> bytes:
    try:
        if response.streaming:
            return b"".join(response.streaming_content)
        return response.content
    finally:
        response.close()


class FrontendDirsMixin:
    def setUp(self):
        super().setUp()
        self.temp_dir = tempfile.TemporaryDirectory()
        root = Path(self.temp_dir.name)
        self.dist = root / "dist" / "public"
        self.client_public = root / "client" / "public"
        self.client_root = root / "client"
        self.static_dirs = [self.dist, self.client_public, self.client_root]
        self.index_candidates = [directory / "index.html" for directory in self.static_dirs]
        self.dev_index_candidates = [
            self.client_root / "index.html",
            self.client_public / "index.html",
            self.dist / "index.html",
        ]

    def tearDown(self):
        self.temp_dir.cleanup()
        super().tearDown()

    def write(self, path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def frontend_settings(self, mode: str):
        return override_settings(
            FRONTEND_SERVE_MODE=mode,
            FRONTEND_STATIC_DIRS=self.static_dirs,
            FRONTEND_INDEX_CANDIDATES=self.index_candidates,
            FRONTEND_DEV_INDEX_CANDIDATES=self.dev_index_candidates,
            FRONTEND_DEV_SERVER_URL="http://localhost:3000",
            FRONTEND_ENTRY_SCRIPT="/src/main.tsx",
        )


class AssetResolutionTests(FrontendDirsMixin, SimpleTestCase):
    def test_first_existing_respects_order(self):
        self.write(self.client_public / "index.html", "public")
        self.write(self.client_root / "index.html", "root")

        self.assertEqual(first_existing(self.index_candidates), self.client_public / "index.html")

    def test_first_existing_returns_none_when_nothing_exists(self):
        self.assertIsNone(first_existing(self.index_candidates))

    def test_find_asset_prefers_earlier_directory(self):
        self.write(self.dist / "assets" / "app.js", "built")
        self.write(self.client_root / "assets" / "app.js", "source")

        self.assertEqual(find_asset("assets/app.js", self.static_dirs), self.dist)

    def test_find_asset_falls_through_to_later_directory(self):
        self.dist.mkdir(parents=True)
        self.write(self.client_public / "favicon.ico", "icon")

        self.assertEqual(find_asset("favicon.ico", self.static_dirs), self.client_public)

    def test_find_asset_rejects_traversal(self):
        self.write(Path(self.temp_dir.name) / "secret.txt", "secret")
        self.dist.mkdir(parents=True)

        self.assertIsNone(find_asset("../../secret.txt", self.static_dirs))

    def test_find_asset_ignores_directories_and_empty_paths(self):
        (self.dist / "assets").mkdir(parents=True)

        self.assertIsNone(find_asset("assets", self.static_dirs))
        self.assertIsNone(find_asset("", self.static_dirs))


class ProductionServingTests(FrontendDirsMixin, SimpleTestCase):
    # response.close() fires close_old_connections; let pytest-django allow it.
    databases = {"default"}

    def test_serves_static_asset(self):
        self.write(self.dist / "assets" / "main.abc123.js", "console.log('hi')")

        with self.frontend_settings("static"):
            response = self.client.get("/assets/main.abc123.js")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(_body(response), b"console.log('hi')")

    def test_unknown_route_falls_back_to_first_index(self):
        self.write(self.dist / "index.html", "<html>built</html>")
        self.write(self.client_root / "index.html", "<html>source</html>")

        with self.frontend_settings("static"):
            response = self.client.get("/restaurants/12")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(_body(response), b"<html>built</html>")

    def test_missing_index_is_diagnostic_404(self):
        with self.frontend_settings("static"):
            with self.assertLogs("frontend.views", level="WARNING"):
                response = self.client.get("/products")

        self.assertEqual(response.status_code, 404)
        self.assertIn(b"Could not find index.html", _body(response))

    def test_only_get_and_head_are_served(self):
        self.write(self.dist / "index.html", "<html></html>")

        with self.frontend_settings("static"):
            response = self.client.post("/products")

        self.assertEqual(response.status_code, 405)

    def test_page_load_sets_csrf_cookie(self):
        self.write(self.dist / "index.html", "<html></html>")

        with self.frontend_settings("static"):
            response = self.client.get("/")

        self.assertEqual(response.status_code, 200)
        self.assertIn("csrftoken", response.cookies)


class DevelopmentServingTests(FrontendDirsMixin, SimpleTestCase):
    template = '<html><head><title>Bazaar</title></head><body><script type="module" src="/src/main.tsx"></script></body></html>'

    def test_template_points_at_vite_dev_server(self):
        self.write(self.client_root / "index.html", self.template)

        with self.frontend_settings("vite"):
            response = self.client.get("/stores")

        body = response.content.decode()
        self.assertEqual(response.status_code, 200)
        self.assertIn('src="http://localhost:3000/src/main.tsx?v=', body)
        self.assertIn('src="http://localhost:3000/@vite/client"', body)
        self.assertIn("__vite_plugin_react_preamble_installed__", body)
        self.assertLess(body.index("@vite/client"), body.index("</head>"))

    def test_template_candidate_order(self):
        self.write(self.client_public / "index.html", "<html><head></head><body>public</body></html>")
        self.write(self.dist / "index.html", "<html><head></head><body>dist</body></html>")

        with self.frontend_settings("vite"):
            response = self.client.get("/")

        self.assertIn("public", response.content.decode())

    def test_missing_template_is_diagnostic_500(self):
        with self.frontend_settings("vite"):
            with self.assertLogs("frontend.views", level="ERROR"):
                response = self.client.get("/")

        self.assertEqual(response.status_code, 500)
        self.assertIn(str(self.client_root / "index.html"), response.content.decode())

    def test_cache_buster_changes_per_render(self):
        first = inject_vite_client(self.template, dev_server_url="http://dev", entry_script="/src/main.tsx")
        second = inject_vite_client(self.template, dev_server_url="http://dev", entry_script="/src/main.tsx")

        self.assertNotEqual(first, second)

    def test_template_without_head_gets_preamble_prepended(self):
        page = inject_vite_client("<div id=root></div>", dev_server_url="http://dev", entry_script="/src/main.tsx")

        self.assertTrue(page.startswith('<script type="module">'))
        self.assertTrue(page.endswith("<div id=root></div>"))
