"""
PocketBase schema introspection.

Fetches collections and expansion mapping records over the PocketBase REST
API and turns the raw JSON into the immutable schema snapshot the generator
works on. Both schema shapes are understood: ``fields`` with flat options
(v0.23+) and the legacy ``schema`` list with an ``options`` dict.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

import requests
from requests.adapters import HTTPAdapter, Retry

from pb_model_generator.constants import DefaultConfig, ExpansionRecordFields, PocketBaseEndpoints
from pb_model_generator.domain.models import (
    CollectionSchema,
    ExpansionMapping,
    FieldKind,
    FieldSchema,
    RelationExtra,
    SelectExtra,
)
from pb_model_generator.exceptions import AuthenticationError, SchemaIntrospectionError


logger = logging.getLogger(__name__)


# --- Parsing Helpers ---
def _field_option(raw_field: Dict[str, Any], key: str) -> Any:
    """Read a type option from either the flat or the legacy 'options' layout."""
    if key in raw_field:
        return raw_field[key]
    options = raw_field.get("options") or {}
    return options.get(key)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def parse_field(raw_field: Dict[str, Any], collection_name: Optional[str] = None) -> FieldSchema:
    """
    Parse one raw PocketBase field into a FieldSchema.

    The type-specific payload is resolved here once: select fields carry
    their values, relation fields their cardinality.

    Raises:
        SchemaIntrospectionError: Nameless field, or select field without values
    """
    name = raw_field.get("name")
    if not name:
        raise SchemaIntrospectionError("Field without a name", collection=collection_name)

    raw_type = raw_field.get("type")
    kind = FieldKind.from_type_string(raw_type)
    extra = None

    if kind is FieldKind.SELECT:
        values = _field_option(raw_field, "values") or []
        if not values:
            raise SchemaIntrospectionError(
                f"Select field '{name}' has no values",
                collection=collection_name,
                field=name,
            )
        extra = SelectExtra(values=tuple(str(value) for value in values))
    elif kind is FieldKind.RELATION:
        max_select = _field_option(raw_field, "maxSelect")
        extra = RelationExtra(
            max_select=int(max_select) if max_select is not None else None,
            collection_id=_field_option(raw_field, "collectionId"),
        )
    elif kind is FieldKind.UNKNOWN:
        logger.debug(f"Field '{collection_name}.{name}' has unrecognized type '{raw_type}'")

    return FieldSchema(
        name=name,
        kind=kind,
        required=_parse_bool(raw_field.get("required", False)),
        extra=extra,
        raw_type=raw_type,
    )


def parse_collection(raw_collection: Dict[str, Any]) -> CollectionSchema:
    """
    Parse one raw PocketBase collection into a CollectionSchema.

    Raises:
        SchemaIntrospectionError: Collection without a name
    """
    name = raw_collection.get("name")
    if not name:
        raise SchemaIntrospectionError(
            "Collection without a name",
            context={"collection_id": raw_collection.get("id")},
        )

    raw_fields = raw_collection.get("fields")
    if raw_fields is None:
        raw_fields = raw_collection.get("schema") or []

    return CollectionSchema(
        id=str(raw_collection.get("id", "")),
        name=name,
        fields=tuple(parse_field(raw_field, name) for raw_field in raw_fields),
        type=raw_collection.get("type", "base"),
        system=_parse_bool(raw_collection.get("system", False)),
    )


def parse_expansion_mapping(record: Dict[str, Any]) -> ExpansionMapping:
    """
    Parse one record of the expansion mapping collection.

    Raises:
        ValueError: A required record field is missing or empty
    """
    missing = [key for key in ExpansionRecordFields.REQUIRED if not record.get(key)]
    if missing:
        raise ValueError(f"Expansion record {record.get('id', '?')} is missing {', '.join(missing)}")

    return ExpansionMapping(
        source_collection_name=record[ExpansionRecordFields.SOURCE_COLLECTION],
        source_field_name=record[ExpansionRecordFields.SOURCE_FIELD],
        is_single=_parse_bool(record.get(ExpansionRecordFields.IS_SINGLE, False)),
        target_collection_name=record[ExpansionRecordFields.TARGET_COLLECTION],
    )


# --- HTTP Client ---
class PocketBaseClient:
    """
    Minimal PocketBase REST client: superuser authentication plus the two
    read-only listings the generator needs.
    """

    def __init__(self, domain: str, timeout: float = DefaultConfig.REQUEST_TIMEOUT, session: Optional[requests.Session] = None):
        self.domain = domain.rstrip("/")
        self.timeout = timeout
        self.session = session or self._create_session()
        self.token: Optional[str] = None

    @staticmethod
    def _create_session() -> requests.Session:
        session = requests.Session()
        retries = Retry(total=3, backoff_factor=0.3, status_forcelist=[502, 503, 504])
        adapter = HTTPAdapter(max_retries=retries)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"Accept": "application/json"})
        return session

    def _url(self, path: str) -> str:
        return f"{self.domain}{path}"

    def authenticate(self, email: str, password: str) -> str:
        """
        Sign in as a superuser and keep the token for later requests.

        Servers before v0.23 have no _superusers collection; a 404 there
        falls back to the legacy admins endpoint.

        Raises:
            AuthenticationError: Credentials rejected or server unreachable
        """
        payload = {"identity": email, "password": password}
        endpoints = (PocketBaseEndpoints.SUPERUSER_AUTH, PocketBaseEndpoints.LEGACY_ADMIN_AUTH)

        response = None
        for endpoint in endpoints:
            try:
                response = self.session.post(self._url(endpoint), json=payload, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                raise AuthenticationError(f"Could not reach PocketBase: {e}", domain=self.domain) from e
            if response.status_code != 404:
                break
            logger.debug(f"Auth endpoint {endpoint} not found, trying the next one")

        if response is None or not response.ok:
            status = response.status_code if response is not None else "no response"
            raise AuthenticationError(f"Authentication failed ({status})", domain=self.domain)

        try:
            token = response.json().get("token")
        except ValueError as e:
            raise AuthenticationError("Authentication response is not JSON", domain=self.domain) from e
        if not token:
            raise AuthenticationError("Authentication response has no token", domain=self.domain)

        self.token = token
        self.session.headers.update({"Authorization": token})
        logger.info(f"Authenticated with PocketBase at {self.domain}")
        return token

    def _paginate(self, path: str) -> Iterator[Dict[str, Any]]:
        """Yield every item of a paginated list endpoint, page by page."""
        page = 1
        while True:
            response = self.session.get(
                self._url(path),
                params={"page": page, "perPage": PocketBaseEndpoints.PAGE_SIZE},
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
            yield from body.get("items", [])

            total_pages = body.get("totalPages", 1) or 1
            if page >= total_pages:
                break
            page += 1

    def fetch_collections(self) -> List[CollectionSchema]:
        """
        Fetch every collection in server order.

        Raises:
            SchemaIntrospectionError: Request failed or the schema is malformed
        """
        logger.info("Fetching collections from PocketBase...")
        try:
            raw_collections = list(self._paginate(PocketBaseEndpoints.COLLECTIONS))
        except (requests.exceptions.RequestException, ValueError) as e:
            raise SchemaIntrospectionError(f"Could not fetch collections: {e}") from e

        collections = [parse_collection(raw) for raw in raw_collections]
        logger.info(f"Found {len(collections)} collections")
        return collections

    def fetch_expansion_mappings(self, collection_name: str = DefaultConfig.EXPANSION_COLLECTION) -> List[ExpansionMapping]:
        """
        Fetch the expansion mappings stored as records of ``collection_name``.

        Mapping data is optional: any failure is logged as a warning and
        yields an empty list.
        """
        path = PocketBaseEndpoints.RECORDS.format(collection=collection_name)
        try:
            mappings = [parse_expansion_mapping(record) for record in self._paginate(path)]
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Could not load expansion mappings from '{collection_name}': {e}. Continuing without expansions.")
            return []

        logger.info(f"Found {len(mappings)} expansion mappings in '{collection_name}'")
        return mappings
