"""
In-memory entity lists backed by the HTTP API.

Each store keeps the last list it loaded plus `loading`, `saving` and
`error` flags. Writes go to the server first and the returned entity is
merged into the local list; `invalidate()` marks the list stale so the next
`get_items()` reloads it.
"""
from collections import OrderedDict
from typing import Any, Dict, List, Optional

import httpx

from purifier.client.api_client import ApiError, PurifierClient
from purifier.lib.logging import get_logger


logger = get_logger(__name__)

SERVICE_STATUSES = ("AVAILABLE", "ASSIGNED", "IN_PROGRESS", "COMPLETED")


class EntityStore:
    path: str = ""
    entity_name: str = "items"
    create_path: Optional[str] = None
    prepend_created: bool = True

    def __init__(self, client: PurifierClient, params: Optional[Dict[str, Any]] = None):
        self.client = client
        self.params = params
        self.items: List[Dict[str, Any]] = []
        self.loading = False
        self.saving = False
        self.error: Optional[str] = None
        self._stale = True

    @property
    def stale(self) -> bool:
        return self._stale

    def refresh(self) -> List[Dict[str, Any]]:
        """Reload from the server; failures set `error` instead of raising."""
        self.loading = True
        try:
            self.items = list(self.client.get(self.path, params=self.params) or [])
            self.error = None
        except (ApiError, httpx.HTTPError) as e:
            logger.warning(
                f"Failed to load {self.entity_name}",
                extra={"path": self.path, "reason": str(e)},
            )
            self.error = f"Failed to load {self.entity_name}. Please try again."
        finally:
            self.loading = False
            self._stale = False
        return self.items

    def get_items(self) -> List[Dict[str, Any]]:
        if self._stale:
            self.refresh()
        return self.items

    def invalidate(self) -> None:
        self._stale = True

    def _created_entity(self, response: Dict[str, Any]) -> Dict[str, Any]:
        return response

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST the payload; errors propagate to the caller as ApiError."""
        self.saving = True
        try:
            response = self.client.post(self.create_path or self.path, payload)
        finally:
            self.saving = False

        entity = self._created_entity(response)
        if self.prepend_created:
            self.items.insert(0, entity)
        else:
            self.items.append(entity)
        return response

    def update(self, entity_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.saving = True
        try:
            entity = self.client.patch(f"{self.path}/{entity_id}", payload)
        finally:
            self.saving = False

        self._replace(entity)
        return entity

    def _replace(self, entity: Dict[str, Any]) -> None:
        for index, item in enumerate(self.items):
            if item.get("id") == entity.get("id"):
                self.items[index] = entity
                return
        self.items.insert(0, entity)

    def find(self, entity_id: str) -> Optional[Dict[str, Any]]:
        return next((item for item in self.items if item.get("id") == entity_id), None)


class CustomerStore(EntityStore):
    path = "/customers"
    entity_name = "customers"
    prepend_created = False


class ProductStore(EntityStore):
    path = "/products"
    entity_name = "products"


class OrderStore(EntityStore):
    """Orders; creating one also creates an invoice, so invoice stores go stale."""
    path = "/orders"
    entity_name = "orders"


class ServiceStore(EntityStore):
    path = "/services"
    entity_name = "services"

    def grouped_by_status(self) -> "OrderedDict[str, List[Dict[str, Any]]]":
        groups: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict(
            (status, []) for status in SERVICE_STATUSES
        )
        for item in self.get_items():
            groups.setdefault(item["status"], []).append(item)
        return groups


class InvoiceStore(EntityStore):
    path = "/invoices"
    entity_name = "invoices"
    create_path = "/invoices/service"

    def update(self, entity_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Invoices only accept status changes."""
        self.saving = True
        try:
            entity = self.client.patch(f"{self.path}/{entity_id}/status", payload)
        finally:
            self.saving = False

        self._replace(entity)
        return entity


class StaffStore(EntityStore):
    """Staff accounts; create returns {"staff": ..., "password": ...}."""
    path = "/staff"
    entity_name = "staff"
    prepend_created = False

    def _created_entity(self, response: Dict[str, Any]) -> Dict[str, Any]:
        return response["staff"]
