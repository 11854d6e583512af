"""Tests for the product library."""

import asyncio

from liva.services.products import ProductLibraryService, suggest_products
from liva.services.store import Collection
from tests.conftest import InMemoryRemoteStore


def test_remember_inserts_only_new_names() -> None:
    store = InMemoryRemoteStore()
    service = ProductLibraryService(store)

    first = asyncio.run(service.remember("dev-1", ["Appel", "Banaan", "Appel"]))
    second = asyncio.run(service.remember("dev-1", ["Appel", "Kaas"]))

    assert first == ["Appel", "Banaan"]
    assert second == ["Kaas"]
    assert asyncio.run(service.list_products("dev-1")) == ["Appel", "Banaan", "Kaas"]


def test_products_are_scoped_per_device() -> None:
    store = InMemoryRemoteStore()
    service = ProductLibraryService(store)
    asyncio.run(service.remember("dev-1", ["Appel"]))

    assert asyncio.run(service.list_products("dev-2")) == []


def test_list_products_degrades_to_empty_on_failure() -> None:
    store = InMemoryRemoteStore()
    store.fail("select", Collection.SAVED_PRODUCTS)

    assert asyncio.run(ProductLibraryService(store).list_products("dev-1")) == []


def test_suggestions_match_case_insensitive_substrings() -> None:
    products = ["Appelmoes", "Griekse yoghurt", "appel", "Ananas", "Peer"]

    assert suggest_products(products, "APP") == ["Appelmoes", "appel"]
    assert suggest_products(products, "e", limit=5) == []
    assert suggest_products(products, "er", limit=1) == ["Peer"]
