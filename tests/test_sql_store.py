"""Tests for the SQL-backed content store."""

import pytest

from blogsite.models import Author, Post
from blogsite.store import DocumentNotFound, DuplicateDocument, StoreRequestError


def test__create_author_if_absent__returns_existing_row_for_same_email(store) -> None:
    first = store.create_author_if_absent(Author(name="A", email="a@x.com"))
    second = store.create_author_if_absent(Author(name="Other", email="a@x.com"))

    assert second.id == first.id
    assert second.name == "A"


def test__fetch_author_by_email__is_exact_match(store) -> None:
    store.create_author_if_absent(Author(name="A", email="a@x.com"))

    assert store.fetch_author_by_email("A@X.COM") is None
    assert store.fetch_author_by_email("a@x.com").name == "A"


def test__patch_author__rejects_unknown_and_id_fields(store) -> None:
    author = store.create_author_if_absent(Author(name="A", email="a@x.com"))

    with pytest.raises(StoreRequestError):
        store.patch_author(author.id, shoe_size=9)
    with pytest.raises(StoreRequestError):
        store.patch_author(author.id, id="other")


def test__patch_author__missing_id_raises_not_found(store) -> None:
    with pytest.raises(DocumentNotFound):
        store.patch_author("missing", image="x")


def test__count_posts_by_author__matches_name_string(store) -> None:
    store.create_post(Post(title="1", slug="one", author="A"))
    store.create_post(Post(title="2", slug="two", author="A"))
    store.create_post(Post(title="3", slug="three", author="a"))

    assert store.count_posts_by_author("A") == 2
    assert store.count_posts_by_author("Nobody") == 0


def test__create_post__duplicate_slug_raises(store) -> None:
    store.create_post(Post(title="1", slug="same"))

    with pytest.raises(DuplicateDocument):
        store.create_post(Post(title="2", slug="same"))


def test__delete_post__missing_id_raises_not_found(store) -> None:
    with pytest.raises(DocumentNotFound):
        store.delete_post("missing")


def test__upload_image__rejects_unknown_type(store) -> None:
    with pytest.raises(StoreRequestError):
        store.upload_image(b"data", "x.bmp", "image/bmp")
