import hashlib
import json

import httpx
import pytest

from giftcard_webhook.config.settings import MailchimpConfig
from giftcard_webhook.integrations.directory import ContactDirectoryError
from giftcard_webhook.integrations.mailchimp import MailchimpDirectory, subscriber_hash

CONFIG = MailchimpConfig(api_key="key-us1", server_prefix="us1", audience_id="aud123")


class FakeMailchimp:
    """Minimal Mailchimp members API keyed by subscriber hash."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.members = {}
        self.tags = {}
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"detail": "boom"})

        body = json.loads(request.content)
        parts = request.url.path.split("/")
        member_hash = parts[parts.index("members") + 1]

        if request.method == "PUT":
            member = self.members.setdefault(member_hash, {"status": body["status_if_new"]})
            member["email_address"] = body["email_address"]
            member["merge_fields"] = body["merge_fields"]
            return httpx.Response(200, json=member)

        if request.method == "POST" and parts[-1] == "tags":
            active = self.tags.setdefault(member_hash, set())
            for tag in body["tags"]:
                if tag["status"] == "active":
                    active.add(tag["name"])
            return httpx.Response(204)

        return httpx.Response(404)


def make_directory(fake: FakeMailchimp, config: MailchimpConfig = CONFIG) -> MailchimpDirectory:
    return MailchimpDirectory(config, transport=httpx.MockTransport(fake.handler))


def test_subscriber_hash_is_md5_of_lowercased_email():
    expected = hashlib.md5(b"ana@example.com").hexdigest()

    assert subscriber_hash("Ana@Example.COM") == expected
    assert subscriber_hash("ana@example.com") == expected


@pytest.mark.asyncio
async def test_upsert_sends_put_to_member_url():
    fake = FakeMailchimp()
    directory = make_directory(fake)

    assert await directory.upsert_contact("Ana@Example.com", {"RECIPIENT": "Ana"})

    request = fake.requests[0]
    assert request.method == "PUT"
    assert str(request.url) == (
        f"https://us1.api.mailchimp.com/3.0/lists/aud123/members/{subscriber_hash('ana@example.com')}"
    )
    assert request.headers["Authorization"].startswith("Basic ")
    assert json.loads(request.content) == {
        "email_address": "Ana@Example.com",
        "status_if_new": "subscribed",
        "merge_fields": {"RECIPIENT": "Ana"},
    }


@pytest.mark.asyncio
async def test_upsert_twice_is_idempotent():
    fake = FakeMailchimp()
    directory = make_directory(fake)
    fields = {"RECIPIENT": "Ana", "AMOUNT": "25.00 EUR"}

    await directory.upsert_contact("ana@example.com", fields)
    state_after_one = json.loads(json.dumps(fake.members))
    await directory.upsert_contact("ANA@example.com", fields)

    assert len(fake.members) == 1
    member = fake.members[subscriber_hash("ana@example.com")]
    assert member["merge_fields"] == state_after_one[subscriber_hash("ana@example.com")]["merge_fields"]
    assert member["status"] == "subscribed"


@pytest.mark.asyncio
async def test_tag_posts_active_tag():
    fake = FakeMailchimp()
    directory = make_directory(fake)

    assert await directory.tag_contact("ana@example.com", "gift_recipient")

    request = fake.requests[0]
    assert request.method == "POST"
    assert request.url.path.endswith("/tags")
    assert json.loads(request.content) == {"tags": [{"name": "gift_recipient", "status": "active"}]}
    assert fake.tags[subscriber_hash("ana@example.com")] == {"gift_recipient"}


@pytest.mark.asyncio
@pytest.mark.parametrize("email", [None, ""])
async def test_missing_email_is_a_noop(email):
    fake = FakeMailchimp()
    directory = make_directory(fake)

    assert await directory.upsert_contact(email, {"A": "b"}) is False
    assert await directory.tag_contact(email, "gift_buyer") is False
    assert fake.requests == []


@pytest.mark.asyncio
async def test_incomplete_config_disables_directory():
    fake = FakeMailchimp()
    directory = make_directory(fake, MailchimpConfig(api_key="key-us1", server_prefix="us1"))

    assert not directory.enabled
    assert await directory.upsert_contact("ana@example.com", {}) is False
    assert fake.requests == []


@pytest.mark.asyncio
async def test_error_response_raises_directory_error():
    directory = make_directory(FakeMailchimp(status_code=400))

    with pytest.raises(ContactDirectoryError, match="HTTP 400"):
        await directory.upsert_contact("ana@example.com", {})


@pytest.mark.asyncio
async def test_transport_error_raises_directory_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    directory = MailchimpDirectory(CONFIG, transport=httpx.MockTransport(handler))

    with pytest.raises(ContactDirectoryError, match="ConnectError"):
        await directory.tag_contact("ana@example.com", "gift_buyer")
