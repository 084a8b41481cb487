from middleware.rate_limiter import limiter
from core.config import settings


def test_rate_limiter_disabled_in_testing():
    """Verify rate limiter is disabled during tests."""

    assert settings.ENV == "testing"
    assert limiter.enabled is False


async def test_can_make_multiple_requests_in_tests(client, alice_headers, headphones):
    """Verify rate limiting doesn't interfere with tests."""
    for _ in range(12):
        response = await client.post("/cart/items", json={"product_id": headphones.id},
                                     headers=alice_headers)
        assert response.status_code == 200

    response = await client.get("/cart/count", headers=alice_headers)
    assert response.json()["item_count"] == 12
