"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import json
import logging
import os
import typing
import unittest
from typing import Any
from unittest.mock import MagicMock, patch

from md2csf.api import ConfluenceAPI, ConfluenceSession, PublishResult, build_url
from md2csf.environment import ArgumentError, ConfluenceConnectionProperties, ConfluenceError
from md2csf.extra import override
from tests.utility import TypedTestCase

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
)


def make_response(status_code: int, payload: Any = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = "Reason"
    response.text = json.dumps(payload) if payload is not None else ""
    response.json.return_value = payload
    return response


def page_payload(page_id: str, version: int) -> dict[str, Any]:
    return {
        "id": page_id,
        "type": "page",
        "title": "Title",
        "_links": {"base": "https://example.com/wiki", "webui": f"/spaces/KB/pages/{page_id}"},
        "version": {"number": version, "minorEdit": False},
    }


class TestSession(TypedTestCase):
    mock_session: MagicMock
    session: ConfluenceSession

    @override
    def setUp(self) -> None:
        self.mock_session = MagicMock()
        self.session = ConfluenceSession(self.mock_session, base_url="https://example.com/wiki", space_key="KB")

    def sent_json(self, method: MagicMock) -> dict[str, Any]:
        return typing.cast(dict[str, Any], json.loads(method.call_args.kwargs["data"]))

    def test_build_url(self) -> None:
        self.assertEqual(build_url("https://example.com/wiki/rest/api/space"), "https://example.com/wiki/rest/api/space")
        self.assertEqual(build_url("https://example.com/api", {"a": "1", "b": "x y"}), "https://example.com/api?a=1&b=x+y")
        with self.assertRaises(ValueError):
            build_url("https://example.com/api?a=1")

    def test_test_connection(self) -> None:
        self.mock_session.get.return_value = make_response(200, {"results": []})
        self.assertTrue(self.session.test_connection())
        self.assertEqual(self.mock_session.get.call_args.args[0], "https://example.com/wiki/rest/api/content?limit=1")

        self.mock_session.get.return_value = make_response(401)
        self.assertFalse(self.session.test_connection())

    def test_list_spaces(self) -> None:
        self.mock_session.get.return_value = make_response(
            200,
            {"results": [{"key": "KB", "name": "Knowledge Base", "type": "global"}], "size": 1},
        )
        spaces = self.session.list_spaces()
        self.assertEqual([(space.key, space.name) for space in spaces], [("KB", "Knowledge Base")])

    def test_get_page_version(self) -> None:
        self.mock_session.get.return_value = make_response(200, page_payload("123", 7))
        self.assertEqual(self.session.get_page_version("123"), 7)
        self.assertEqual(self.mock_session.get.call_args.args[0], "https://example.com/wiki/rest/api/content/123?expand=version")

    def test_get_page_space_key(self) -> None:
        self.mock_session.get.return_value = make_response(200, {"id": "123", "space": {"key": "OPS"}})
        self.assertEqual(self.session.get_page_space_key("123"), "OPS")

        self.mock_session.get.return_value = make_response(200, {"id": "123"})
        with self.assertRaises(ConfluenceError):
            self.session.get_page_space_key("123")

    def test_create_page(self) -> None:
        self.mock_session.post.return_value = make_response(200, page_payload("456", 1))

        result = self.session.create_page("KB", "New page", "<p>body</p>", ["vpn", "network"])
        self.assertEqual(result, PublishResult(page_id="456", url="https://example.com/wiki/spaces/KB/pages/456", space_key="KB"))

        self.assertEqual(self.mock_session.post.call_args.args[0], "https://example.com/wiki/rest/api/content")
        data = self.sent_json(self.mock_session.post)
        self.assertEqual(data["type"], "page")
        self.assertEqual(data["title"], "New page")
        self.assertEqual(data["space"], {"key": "KB"})
        self.assertEqual(data["body"], {"storage": {"value": "<p>body</p>", "representation": "storage"}})
        self.assertEqual(
            data["metadata"],
            {"labels": [{"name": "vpn", "prefix": "global"}, {"name": "network", "prefix": "global"}]},
        )

    def test_create_page_errors(self) -> None:
        for status, text in [
            (401, "Authentication failed"),
            (403, "No write access to space 'KB'"),
            (409, "A page titled 'Duplicate' already exists"),
        ]:
            with self.subTest(status=status):
                self.mock_session.post.return_value = make_response(status, {"message": "server says no"})
                with self.assertRaises(ConfluenceError) as cm:
                    self.session.create_page("KB", "Duplicate", "<p/>")
                self.assertEqual(cm.exception.status, status)
                self.assertIn(text, str(cm.exception))
                self.assertIn(f"(HTTP {status})", str(cm.exception))

    def test_create_page_other_error(self) -> None:
        self.mock_session.post.return_value = make_response(500, {"message": "boom"})
        with self.assertRaises(ConfluenceError) as cm:
            self.session.create_page("KB", "Title", "<p/>")
        self.assertIn("boom", str(cm.exception))

    def test_update_page(self) -> None:
        self.mock_session.put.return_value = make_response(200, page_payload("123", 8))
        self.mock_session.get.return_value = make_response(200, {"id": "123", "space": {"key": "OPS"}})

        result = self.session.update_page("123", "Updated", "<p>new</p>", 7)
        self.assertEqual(result, PublishResult(page_id="123", url="https://example.com/wiki/spaces/KB/pages/123", space_key="OPS"))

        self.assertEqual(self.mock_session.put.call_args.args[0], "https://example.com/wiki/rest/api/content/123")
        data = self.sent_json(self.mock_session.put)
        self.assertEqual(data["version"], {"number": 8})
        self.assertEqual(data["title"], "Updated")
        self.assertEqual(data["body"]["storage"]["value"], "<p>new</p>")

    def test_update_page_conflict(self) -> None:
        self.mock_session.put.return_value = make_response(409)
        with self.assertRaises(ConfluenceError) as cm:
            self.session.update_page("123", "Updated", "<p/>", 7)
        self.assertIn("version conflict", str(cm.exception))


class TestConnection(TypedTestCase):
    @patch.dict(os.environ, {}, clear=True)
    def test_bearer_token(self) -> None:
        properties = ConfluenceConnectionProperties(domain="example.com", api_key="secret", headers={"X-Trace": "1"})
        self.assertEqual(properties.base_url, "https://example.com/wiki/")

        api = ConfluenceAPI(properties)
        with api as session:
            self.assertEqual(session.base_url, "https://example.com/wiki/")
            self.assertEqual(session.session.headers["Authorization"], "Bearer secret")
            self.assertEqual(session.session.headers["X-Trace"], "1")
        self.assertIsNone(api.session)

    @patch.dict(os.environ, {}, clear=True)
    def test_basic_auth(self) -> None:
        properties = ConfluenceConnectionProperties(domain="example.com", base_path="/", user_name="me", api_key="secret", space_key="KB")
        with ConfluenceAPI(properties) as session:
            self.assertEqual(session.session.auth, ("me", "secret"))
            self.assertEqual(session.space_key, "KB")

    @patch.dict(
        os.environ,
        {"CONFLUENCE_DOMAIN": "wiki.example.com", "CONFLUENCE_API_KEY": "key", "CONFLUENCE_SPACE_KEY": "ENV"},
        clear=True,
    )
    def test_environment(self) -> None:
        properties = ConfluenceConnectionProperties()
        self.assertEqual(properties.domain, "wiki.example.com")
        self.assertEqual(properties.space_key, "ENV")
        self.assertIsNone(properties.user_name)

    @patch.dict(os.environ, {}, clear=True)
    def test_invalid(self) -> None:
        with self.assertRaises(ArgumentError):
            ConfluenceConnectionProperties(api_key="secret")
        with self.assertRaises(ArgumentError):
            ConfluenceConnectionProperties(domain="example.com")
        with self.assertRaises(ArgumentError):
            ConfluenceConnectionProperties(domain="https://example.com", api_key="secret")
        with self.assertRaises(ArgumentError):
            ConfluenceConnectionProperties(domain="example.com", base_path="wiki", api_key="secret")


if __name__ == "__main__":
    unittest.main()
