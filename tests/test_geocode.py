#!/usr/bin/env python
# tests/test_geocode.py

import os
import sys
import unittest
from unittest.mock import MagicMock, patch

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import redis
from requests.exceptions import ConnectionError as RequestsConnectionError

from kalikascan_admin.adapters.geocoding import NominatimGeocoder
from kalikascan_admin.core.geocoding import GeocodeService
from kalikascan_admin.core.geocoding.geocode_service import parse_coordinate
from kalikascan_admin.infrastructure.cache import MemoryTTLCache, RedisTTLCache
from kalikascan_admin.infrastructure.database.redis_client import RedisClient
from kalikascan_admin.infrastructure.exceptions import ExternalServiceError, ValidationError


class FakeClock:

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestParseCoordinate(unittest.TestCase):

    def test_valid(self):
        self.assertEqual(parse_coordinate("14.5995"), 14.5995)
        self.assertEqual(parse_coordinate(-120), -120.0)

    def test_invalid(self):
        for raw in (None, "", "north", "nan", "inf"):
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError) as ctx:
                    parse_coordinate(raw)
                self.assertEqual(ctx.exception.message, "Invalid lat/lon")


class TestGeocodeService(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.cache = MemoryTTLCache(ttl=60, clock=self.clock)
        self.geocoder = MagicMock()
        self.geocoder.reverse.return_value = "Rizal Park, Manila"
        self.service = GeocodeService(self.geocoder, self.cache)

    def test_second_lookup_is_cached(self):
        first = self.service.reverse("14.5826", "120.9787")
        second = self.service.reverse("14.5826000", "120.9787")

        self.assertEqual(first, {"address": "Rizal Park, Manila", "cached": False})
        self.assertEqual(second, {"address": "Rizal Park, Manila", "cached": True})
        self.geocoder.reverse.assert_called_once_with(14.5826, 120.9787)

    def test_cache_entry_expires(self):
        self.service.reverse("14.5826", "120.9787")
        self.clock.now += 61

        result = self.service.reverse("14.5826", "120.9787")

        self.assertFalse(result["cached"])
        self.assertEqual(self.geocoder.reverse.call_count, 2)

    def test_no_match_is_not_cached(self):
        self.geocoder.reverse.return_value = None

        self.assertEqual(self.service.reverse("0", "0"), {"address": None})
        self.assertIsNone(self.cache.get(self.service.cache_key(0.0, 0.0)))

    def test_invalid_input_skips_geocoder(self):
        with self.assertRaises(ValidationError):
            self.service.reverse("abc", "120")
        self.geocoder.reverse.assert_not_called()

    def test_cache_key_rounds_to_precision(self):
        self.assertEqual(self.service.cache_key(14.12345678, -1.0), "14.123457,-1.000000")


class TestNominatimGeocoder(unittest.TestCase):

    def setUp(self):
        self.session = MagicMock()
        self.geocoder = NominatimGeocoder(
            url="https://nominatim.example/reverse",
            user_agent="kalikascan-admin/test",
            timeout=5,
            session=self.session,
        )

    def _response(self, ok=True, status_code=200, body=None):
        response = MagicMock(ok=ok, status_code=status_code)
        response.json.return_value = body
        return response

    def test_returns_display_name(self):
        self.session.get.return_value = self._response(body={"display_name": "Quezon City"})

        self.assertEqual(self.geocoder.reverse(14.65, 121.05), "Quezon City")

        _, kwargs = self.session.get.call_args
        self.assertEqual(kwargs["params"]["format"], "jsonv2")
        self.assertEqual(kwargs["params"]["lat"], "14.65")
        self.assertEqual(kwargs["headers"]["User-Agent"], "kalikascan-admin/test")
        self.assertEqual(kwargs["timeout"], 5)

    def test_no_match(self):
        self.session.get.return_value = self._response(body={"error": "Unable to geocode"})
        self.assertIsNone(self.geocoder.reverse(0, 0))

    def test_error_status_raises(self):
        self.session.get.return_value = self._response(ok=False, status_code=503)

        with self.assertRaises(ExternalServiceError) as ctx:
            self.geocoder.reverse(0, 0)
        self.assertEqual(ctx.exception.message, "Geocoding failed (503)")

    def test_connection_error_raises(self):
        self.session.get.side_effect = RequestsConnectionError("unreachable")

        with self.assertRaises(ExternalServiceError):
            self.geocoder.reverse(0, 0)


class TestRedisTTLCache(unittest.TestCase):

    def test_prefix_and_expiry(self):
        redis_client = MagicMock()
        redis_client.get.return_value = {"address": "Cebu"}
        cache = RedisTTLCache(redis_client, ttl=120, prefix="geocode:")

        cache.set("1.000000,2.000000", {"address": "Cebu"})

        redis_client.set.assert_called_once_with("geocode:1.000000,2.000000", {"address": "Cebu"}, expire=120)
        self.assertEqual(cache.get("1.000000,2.000000"), {"address": "Cebu"})
        redis_client.get.assert_called_once_with("geocode:1.000000,2.000000")


class TestRedisClient(unittest.TestCase):

    @patch("kalikascan_admin.infrastructure.database.redis_client.redis.Redis")
    def test_json_values(self, mock_redis_cls):
        backend = mock_redis_cls.return_value
        backend.set.return_value = True
        backend.get.return_value = '{"address": "Cebu"}'

        client = RedisClient(host="localhost", port=6379, password="pw")

        self.assertTrue(client.set("k", {"address": "Cebu"}, expire=60))
        backend.set.assert_called_once_with("k", '{"address": "Cebu"}', ex=60)
        self.assertEqual(client.get("k"), {"address": "Cebu"})
        _, kwargs = mock_redis_cls.call_args
        self.assertEqual(kwargs["password"], "pw")
        self.assertTrue(kwargs["decode_responses"])

    @patch("kalikascan_admin.infrastructure.database.redis_client.redis.Redis")
    def test_errors_are_misses(self, mock_redis_cls):
        backend = mock_redis_cls.return_value
        backend.get.side_effect = redis.RedisError("down")
        backend.set.side_effect = redis.RedisError("down")

        client = RedisClient(host="localhost", port=6379)

        self.assertIsNone(client.get("k"))
        self.assertFalse(client.set("k", "v"))


if __name__ == "__main__":
    unittest.main()
