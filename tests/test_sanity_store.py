"""Tests for the Sanity HTTP client and the store built on it."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from blogsite.models import Author, Comment, Post
from blogsite.services.identity import (
    AuthSession,
    OAuthIdentity,
    SessionUser,
    enrich_session,
    reconcile_sign_in,
)
from blogsite.store import (
    DocumentNotFound,
    DuplicateDocument,
    SanityClient,
    SanityContentStore,
    StoreRequestError,
    StoreUnavailable,
)
from blogsite.store.sanity import author_document_id, post_document_id


class FakeSanity:
    """Record requests and answer them from a small in-memory dataset."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.documents: dict[str, dict] = {}
        self.query_results: list = []
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(
                self.status_code, json={"error": {"description": "boom"}}
            )

        path = request.url.path
        if "/data/query/" in path:
            query = request.url.params["query"]
            if query == "*[_id == $id][0]":
                doc_id = json.loads(request.url.params["$id"])
                return httpx.Response(200, json={"result": self.documents.get(doc_id)})
            result = self.query_results.pop(0) if self.query_results else None
            return httpx.Response(200, json={"result": result})

        if "/data/mutate/" in path:
            mutations = json.loads(request.content)["mutations"]
            for mutation in mutations:
                doc_id = mutation.get("create", {}).get("_id")
                if doc_id in self.documents:
                    description = f'Document by ID "{doc_id}" already exists'
                    return httpx.Response(409, json={"error": {"description": description}})
            results = [self._apply(mutation) for mutation in mutations]
            return httpx.Response(200, json={"transactionId": "tx1", "results": results})

        if "/assets/images/" in path:
            return httpx.Response(
                200,
                json={
                    "document": {
                        "_id": "image-abc-800x600-jpg",
                        "url": "https://cdn.sanity.io/images/p/production/abc.jpg",
                        "originalFilename": request.url.params["filename"],
                        "mimeType": request.headers["content-type"],
                    }
                },
            )
        return httpx.Response(404, json={"error": {"description": "no route"}})

    def _apply(self, mutation: dict) -> dict:
        if "create" in mutation:
            doc = dict(mutation["create"])
            doc.setdefault("_id", f"doc{len(self.documents) + 1}")
            self.documents[doc["_id"]] = doc
            return {"id": doc["_id"], "operation": "create", "document": doc}
        if "createIfNotExists" in mutation:
            doc = mutation["createIfNotExists"]
            self.documents.setdefault(doc["_id"], dict(doc))
            return {"id": doc["_id"], "operation": "create"}
        if "patch" in mutation:
            doc = self.documents.get(mutation["patch"]["id"])
            if doc is None:
                return {"id": mutation["patch"]["id"], "operation": "update"}
            doc.update(mutation["patch"]["set"])
            return {"id": doc["_id"], "operation": "update", "document": doc}
        if "delete" in mutation:
            self.documents.pop(mutation["delete"]["id"], None)
            return {"id": mutation["delete"]["id"], "operation": "delete"}
        raise AssertionError(f"unexpected mutation {mutation}")


@pytest.fixture
def fake() -> FakeSanity:
    return FakeSanity()


@pytest.fixture
def client(fake: FakeSanity) -> SanityClient:
    return SanityClient(
        "proj1",
        dataset="production",
        token="sk-test",
        transport=httpx.MockTransport(fake.handler),
    )


@pytest.fixture
def sanity_store(client: SanityClient) -> SanityContentStore:
    return SanityContentStore(client)


def test__fetch__encodes_params_as_json_and_reads_from_cdn(client, fake) -> None:
    fake.query_results.append({"_id": "x"})

    assert client.fetch('*[email == $email][0]', {"email": "a@x.com"}) == {"_id": "x"}

    request = fake.requests[0]
    assert request.url.host == "proj1.apicdn.sanity.io"
    assert request.url.path == "/v2023-01-01/data/query/production"
    assert request.url.params["$email"] == '"a@x.com"'
    assert request.headers["authorization"] == "Bearer sk-test"


def test__fetch__without_cdn_uses_live_api(client, fake) -> None:
    client.fetch("*[0]", use_cdn=False)

    assert fake.requests[0].url.host == "proj1.api.sanity.io"


def test__client__server_error_raises_store_unavailable(client, fake) -> None:
    fake.status_code = 503

    with pytest.raises(StoreUnavailable):
        client.fetch("*[0]")


def test__client__client_error_raises_request_error(client, fake) -> None:
    fake.status_code = 400

    with pytest.raises(StoreRequestError, match="boom"):
        client.create({"_type": "author"})


def test__client__transport_error_raises_store_unavailable() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = SanityClient("proj1", transport=httpx.MockTransport(refuse))

    with pytest.raises(StoreUnavailable):
        client.fetch("*[0]")


def test__create_author_if_absent__uses_deterministic_id(sanity_store, fake) -> None:
    joined = datetime(2024, 1, 2, tzinfo=timezone.utc)
    author = Author(name="A", email="a@x.com", image="img1", github_id="42", joined_at=joined)

    stored = sanity_store.create_author_if_absent(author)

    assert stored.id == author_document_id("a@x.com")
    assert stored.joined_at == joined
    assert stored.trusted is False
    mutate = next(r for r in fake.requests if "/data/mutate/" in r.url.path)
    assert mutate.url.host == "proj1.api.sanity.io"
    body = json.loads(mutate.content)
    assert body["mutations"][0]["createIfNotExists"]["githubId"] == "42"
    assert body["mutations"][0]["createIfNotExists"]["joinedAt"] == "2024-01-02T00:00:00Z"


def test__create_author_if_absent__second_create_returns_first_record(sanity_store, fake) -> None:
    sanity_store.create_author_if_absent(Author(name="B1", email="b@x.com", image="one"))
    stored = sanity_store.create_author_if_absent(Author(name="B2", email="b@x.com", image="two"))

    assert len(fake.documents) == 1
    assert stored.name == "B1"
    assert stored.image == "one"


def test__patch_author__maps_field_names(sanity_store, fake) -> None:
    created = sanity_store.create_author_if_absent(Author(name="A", email="a@x.com"))

    patched = sanity_store.patch_author(created.id, image="img2")

    assert patched.image == "img2"
    assert fake.documents[created.id]["image"] == "img2"


def test__patch_author__missing_document_raises_not_found(sanity_store) -> None:
    with pytest.raises(DocumentNotFound):
        sanity_store.patch_author("missing", image="x")


def test__patch_author__unknown_field_is_rejected(sanity_store) -> None:
    with pytest.raises(StoreRequestError):
        sanity_store.patch_author("a1", shoe_size=9)


def test__count_posts_by_author__passes_name(sanity_store, fake) -> None:
    fake.query_results.append(3)

    assert sanity_store.count_posts_by_author("A") == 3
    request = fake.requests[0]
    assert request.url.params["query"].startswith("count(")
    assert request.url.params["$name"] == '"A"'


def test__fetch_author_by_email__parses_studio_image_object(sanity_store, fake) -> None:
    fake.query_results.append(
        {
            "_id": "a1",
            "name": "A",
            "email": "a@x.com",
            "image": {"asset": {"url": "https://cdn/img.png"}},
            "trusted": True,
            "joinedAt": "2024-01-02T00:00:00Z",
        }
    )

    author = sanity_store.fetch_author_by_email("a@x.com")

    assert author.image == "https://cdn/img.png"
    assert author.trusted is True
    assert author.joined_at == datetime(2024, 1, 2, tzinfo=timezone.utc)


def test__list_posts__parses_documents(sanity_store, fake) -> None:
    fake.query_results.append(
        [
            {
                "_id": "p1",
                "title": "Hello",
                "slug": {"current": "hello"},
                "content": [{"_type": "block"}],
                "publishedAt": "2024-02-01T10:00:00Z",
                "author": "A",
                "category": "tech",
                "views": 5,
                "mainImage": {"asset": {"_id": "image-1", "url": "https://cdn/1.jpg"}},
            }
        ]
    )

    [post] = sanity_store.list_posts()

    assert post.slug == "hello"
    assert json.loads(post.content_json) == [{"_type": "block"}]
    assert post.comments_enabled is True
    assert post.main_image_url == "https://cdn/1.jpg"


def test__create_post__builds_blog_document(sanity_store, fake) -> None:
    post = Post(
        title="Hello",
        slug="hello",
        content_json="[]",
        author="A",
        category="food",
        main_image_asset_id="image-1",
    )

    sanity_store.create_post(post)

    mutate = next(r for r in fake.requests if "/data/mutate/" in r.url.path)
    document = json.loads(mutate.content)["mutations"][0]["create"]
    assert document["_type"] == "blog"
    assert document["_id"] == post_document_id("hello")
    assert document["slug"] == {"_type": "slug", "current": "hello"}
    assert document["mainImage"]["asset"] == {"_type": "reference", "_ref": "image-1"}
    assert "excerpt" not in document


def test__create_comment__references_post(sanity_store, fake) -> None:
    comment = Comment(post_id="p1", name="R", email="r@x.com", comment="Nice", rating=4)

    created = sanity_store.create_comment(comment)

    assert created.post_id == "p1"
    assert created.rating == 4
    stored = next(iter(fake.documents.values()))
    assert stored["blog"] == {"_type": "reference", "_ref": "p1"}


def test__upload_image__returns_asset_with_resized_url(sanity_store, fake) -> None:
    asset = sanity_store.upload_image(b"\xff\xd8", "cat.jpg", "image/jpeg")

    assert asset.id == "image-abc-800x600-jpg"
    assert asset.filename == "cat.jpg"
    assert sanity_store.image_url(asset, width=800).endswith("abc.jpg?w=800")
    request = fake.requests[0]
    assert request.url.path == "/v2023-01-01/assets/images/production"
    assert request.content == b"\xff\xd8"


def test__reconcile_sign_in__over_sanity_creates_then_patches(sanity_store, fake) -> None:
    identity = OAuthIdentity(
        provider="github", provider_account_id="7", name="A", email="a@x.com", image="img1"
    )
    # Lookup misses: the dataset has no author yet.
    fake.query_results.append(None)

    assert reconcile_sign_in(identity, sanity_store) is True
    author_id = author_document_id("a@x.com")
    assert fake.documents[author_id]["trusted"] is False

    fake.query_results.append(fake.documents[author_id])
    changed = OAuthIdentity(
        provider="github", provider_account_id="7", email="a@x.com", image="img2"
    )
    assert reconcile_sign_in(changed, sanity_store) is True
    assert fake.documents[author_id]["image"] == "img2"
    assert fake.documents[author_id]["name"] == "A"


def test__create_post__same_slug_twice_raises_duplicate(sanity_store, fake) -> None:
    sanity_store.create_post(Post(title="A", slug="same"))

    with pytest.raises(DuplicateDocument):
        sanity_store.create_post(Post(title="B", slug="same"))

    blogs = [doc for doc in fake.documents.values() if doc["_type"] == "blog"]
    assert [doc["title"] for doc in blogs] == ["A"]


def test__create_post__slug_taken_by_studio_document_raises_duplicate(sanity_store, fake) -> None:
    # The slug lookup finds a post created outside the API with a random id.
    fake.query_results.append({"_id": "studio-1", "title": "Old", "slug": {"current": "same"}})

    with pytest.raises(DuplicateDocument):
        sanity_store.create_post(Post(title="New", slug="same"))

    assert not any("/data/mutate/" in r.url.path for r in fake.requests)
    assert fake.requests[0].url.host == "proj1.api.sanity.io"


@pytest.fixture
def html_store() -> SanityContentStore:
    """A store whose every response is a proxy error page served with 200."""

    def gateway_page(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    return SanityContentStore(SanityClient("proj1", transport=httpx.MockTransport(gateway_page)))


def test__client__non_json_body_raises_store_unavailable(html_store) -> None:
    with pytest.raises(StoreUnavailable, match="non-JSON"):
        html_store.client.fetch("*[0]")


def test__client__non_object_body_raises_store_unavailable() -> None:
    client = SanityClient(
        "proj1", transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[1]))
    )

    with pytest.raises(StoreUnavailable):
        client.fetch("*[0]")


def test__enrich_session__malformed_store_body_returns_session_unchanged(html_store) -> None:
    session = AuthSession(user=SessionUser(name="A", email="a@x.com"))

    result = enrich_session(session, html_store)

    assert result is session
    assert result.user.id is None


def test__reconcile_sign_in__malformed_store_body_denies_sign_in(html_store) -> None:
    identity = OAuthIdentity(
        provider="github", provider_account_id="7", name="A", email="a@x.com", image="img1"
    )

    assert reconcile_sign_in(identity, html_store) is False
