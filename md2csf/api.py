"""
Publish Markdown files to Confluence wiki.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import enum
import logging
import typing
from dataclasses import dataclass
from types import TracebackType
from typing import TypeVar
from urllib.parse import urlencode, urlparse, urlunparse

import requests
from strong_typing.core import JsonType
from strong_typing.serialization import DeserializerOptions, json_dump_string, json_to_object, object_to_json

from .environment import ConfluenceConnectionProperties, ConfluenceError

T = TypeVar("T")

LOGGER = logging.getLogger(__name__)


def _json_to_object(
    typ: type[T],
    data: JsonType,
) -> T:
    return json_to_object(typ, data, options=DeserializerOptions(skip_unassigned=True))


def build_url(base_url: str, query: dict[str, str] | None = None) -> str:
    "Builds a URL with scheme, host, port, path and query string parameters."

    scheme, netloc, path, params, query_str, fragment = urlparse(base_url)

    if params:
        raise ValueError("expected: url with no parameters")
    if query_str:
        raise ValueError("expected: url with no query string")
    if fragment:
        raise ValueError("expected: url with no fragment")

    url_parts = (scheme, netloc, path, None, urlencode(query) if query else None, None)
    return urlunparse(url_parts)


@enum.unique
class ConfluenceRepresentation(enum.Enum):
    STORAGE = "storage"


@enum.unique
class ConfluenceContentType(enum.Enum):
    PAGE = "page"


@dataclass(frozen=True)
class ConfluenceSpace:
    key: str
    name: str


@dataclass(frozen=True)
class ConfluenceSpaceList:
    results: list[ConfluenceSpace]


@dataclass(frozen=True)
class ConfluenceSpaceRef:
    key: str


@dataclass(frozen=True)
class ConfluencePageStorage:
    """
    Holds Confluence page content.

    :param value: Body of the content, in the format found in the representation field.
    :param representation: Type of content representation used (e.g. Confluence Storage Format).
    """

    value: str
    representation: ConfluenceRepresentation = ConfluenceRepresentation.STORAGE


@dataclass(frozen=True)
class ConfluencePageBody:
    storage: ConfluencePageStorage


@dataclass(frozen=True, eq=True, order=True)
class ConfluenceLabel:
    """
    Holds information about a single label.

    :param name: Name of the label.
    :param prefix: Prefix of the label.
    """

    name: str
    prefix: str = "global"


@dataclass(frozen=True)
class ConfluencePageMetadata:
    labels: list[ConfluenceLabel]


@dataclass(frozen=True)
class ConfluenceContentVersion:
    number: int


@dataclass(frozen=True)
class ConfluenceCreatePageRequest:
    type: ConfluenceContentType
    title: str
    space: ConfluenceSpaceRef
    body: ConfluencePageBody
    metadata: ConfluencePageMetadata | None = None


@dataclass(frozen=True)
class ConfluenceUpdatePageRequest:
    version: ConfluenceContentVersion
    title: str
    type: ConfluenceContentType
    body: ConfluencePageBody


@dataclass(frozen=True)
class ConfluenceLinks:
    base: str
    webui: str


@dataclass(frozen=True)
class ConfluencePageResponse:
    id: str
    _links: ConfluenceLinks
    version: ConfluenceContentVersion


@dataclass(frozen=True)
class PublishResult:
    """
    Outcome of creating or updating a Confluence page.

    :param page_id: Confluence page ID.
    :param url: Web UI address of the page.
    :param space_key: Confluence space the page belongs to.
    """

    page_id: str
    url: str
    space_key: str


class ConfluenceAPI:
    """
    Represents an active connection to a Confluence server.
    """

    properties: ConfluenceConnectionProperties
    session: "ConfluenceSession | None" = None

    def __init__(self, properties: ConfluenceConnectionProperties | None = None) -> None:
        self.properties = properties or ConfluenceConnectionProperties()

    def __enter__(self) -> "ConfluenceSession":
        session = requests.Session()
        if self.properties.user_name:
            session.auth = (self.properties.user_name, self.properties.api_key)
        else:
            session.headers.update({"Authorization": f"Bearer {self.properties.api_key}"})

        if self.properties.headers:
            session.headers.update(self.properties.headers)

        self.session = ConfluenceSession(
            session,
            base_url=self.properties.base_url,
            space_key=self.properties.space_key,
        )
        return self.session

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None


class ConfluenceSession:
    """
    Information about an open session to a Confluence server.

    Uses the REST API v1 content endpoints, which both Confluence Cloud and Confluence Data Center/Server offer.
    """

    session: requests.Session
    base_url: str
    space_key: str | None

    def __init__(self, session: requests.Session, *, base_url: str, space_key: str | None = None) -> None:
        self.session = session
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.space_key = space_key

    def close(self) -> None:
        self.session.close()
        self.session = requests.Session()

    def _build_url(self, path: str, query: dict[str, str] | None = None) -> str:
        """
        Builds a full URL for invoking the Confluence API.

        :param path: Path of API endpoint to invoke, relative to the REST API root.
        :param query: Query parameters to pass to the API endpoint.
        :returns: A full URL.
        """

        return build_url(f"{self.base_url}rest/api/{path}", query)

    def _check(self, response: requests.Response, messages: dict[int, str] | None = None) -> None:
        "Raises an exception with a human-readable message if the HTTP response signals an error."

        if response.text:
            LOGGER.debug("Received HTTP payload:\n%s", response.text)

        if response.ok:
            return

        message = (messages or {}).get(response.status_code) or response.text or response.reason
        raise ConfluenceError(message, response.status_code)

    def _invoke(self, path: str, query: dict[str, str] | None = None) -> JsonType:
        "Executes an HTTP request via Confluence API."

        url = self._build_url(path, query)
        response = self.session.get(url, headers={"Accept": "application/json"})
        self._check(response)
        return typing.cast(JsonType, response.json())

    def _publish_result(self, page: ConfluencePageResponse, space_key: str) -> PublishResult:
        return PublishResult(page_id=page.id, url=f"{page._links.base}{page._links.webui}", space_key=space_key)

    def test_connection(self) -> bool:
        "Checks whether the server accepts the credentials of this session."

        response = self.session.get(self._build_url("content", {"limit": "1"}), headers={"Accept": "application/json"})
        LOGGER.debug("Connection test returned HTTP %d", response.status_code)
        return response.ok

    def list_spaces(self) -> list[ConfluenceSpace]:
        "Lists global spaces visible to the user."

        payload = self._invoke("space", {"limit": "100", "type": "global"})
        return _json_to_object(ConfluenceSpaceList, payload).results

    def get_page_version(self, page_id: str) -> int:
        """
        Retrieves a Confluence wiki page version.

        :param page_id: The Confluence page ID.
        :returns: Confluence page version.
        """

        payload = self._invoke(f"content/{page_id}", {"expand": "version"})
        return _json_to_object(ConfluencePageResponse, payload).version.number

    def get_page_space_key(self, page_id: str) -> str:
        "Finds the key of the space a page belongs to."

        payload = self._invoke(f"content/{page_id}", {"expand": "space"})
        data = typing.cast(dict[str, JsonType], payload)
        space = data.get("space")
        if not isinstance(space, dict) or not isinstance(space.get("key"), str):
            raise ConfluenceError(f"failed to get space key for page: {page_id}")
        return typing.cast(str, space["key"])

    def create_page(self, space_key: str, title: str, new_content: str, labels: list[str] | None = None) -> PublishResult:
        """
        Creates a new page via Confluence API.

        :param space_key: Confluence space to create the page in.
        :param title: Page title. Needs to be unique within a space.
        :param new_content: Confluence Storage Format XHTML.
        :param labels: Labels to attach to the page.
        """

        LOGGER.info("Creating page: %s", title)

        request = ConfluenceCreatePageRequest(
            type=ConfluenceContentType.PAGE,
            title=title,
            space=ConfluenceSpaceRef(key=space_key),
            body=ConfluencePageBody(storage=ConfluencePageStorage(value=new_content)),
            metadata=ConfluencePageMetadata(labels=[ConfluenceLabel(name=label) for label in labels]) if labels else None,
        )

        response = self.session.post(
            self._build_url("content"),
            data=json_dump_string(object_to_json(request)),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        self._check(
            response,
            {
                401: "Authentication failed. Check your Confluence personal access token.",
                403: f"No write access to space '{space_key}'. Check permissions.",
                409: f"A page titled '{title}' already exists in this space.",
            },
        )
        page = _json_to_object(ConfluencePageResponse, response.json())
        return self._publish_result(page, space_key)

    def update_page(self, page_id: str, title: str, new_content: str, version: int) -> PublishResult:
        """
        Updates a page via the Confluence API.

        :param page_id: The Confluence page ID.
        :param title: New title to assign to the page. Needs to be unique within a space.
        :param new_content: Confluence Storage Format XHTML.
        :param version: Current version of the page; the update creates the next version.
        """

        LOGGER.info("Updating page: %s", page_id)

        request = ConfluenceUpdatePageRequest(
            version=ConfluenceContentVersion(number=version + 1),
            title=title,
            type=ConfluenceContentType.PAGE,
            body=ConfluencePageBody(storage=ConfluencePageStorage(value=new_content)),
        )

        response = self.session.put(
            self._build_url(f"content/{page_id}"),
            data=json_dump_string(object_to_json(request)),
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        self._check(
            response,
            {
                401: "Authentication failed. Check your Confluence personal access token.",
                409: f"Page version conflict for page {page_id}; the page has been modified concurrently.",
            },
        )
        page = _json_to_object(ConfluencePageResponse, response.json())
        return self._publish_result(page, self.get_page_space_key(page.id))
