'''
Unit tests for the quota reader.
'''

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from gemini_gateway.auth import OAuthClient
from gemini_gateway.core import APIError
from gemini_gateway.models import QuotaBucket
from gemini_gateway.services import QuotaCache, fetch_quota, format_reset_time, percent_left, summarize_buckets

from support import RecordingHandler, make_credentials, mock_client

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def bucket(model_id, fraction, reset_time=None) -> QuotaBucket:
    return QuotaBucket(model_id=model_id, remaining_fraction=fraction, reset_time=reset_time)


class TestFormatResetTime:
    def test_hours_and_minutes(self) -> None:
        reset = (NOW + timedelta(hours=2, minutes=5, seconds=30)).isoformat()
        assert format_reset_time(reset, NOW) == 'Resets in 2h 5m'

    def test_minutes_only(self) -> None:
        reset = (NOW + timedelta(minutes=42)).isoformat()
        assert format_reset_time(reset, NOW) == 'Resets in 42m'

    def test_due_or_past(self) -> None:
        assert format_reset_time(NOW.isoformat(), NOW) == 'Resetting...'
        assert format_reset_time('2025-06-01T11:00:00Z', NOW) == 'Resetting...'

    def test_zulu_with_nanoseconds(self) -> None:
        assert format_reset_time('2025-06-01T13:30:00.123456789Z', NOW) == 'Resets in 1h 30m'

    def test_missing_or_garbage(self) -> None:
        assert format_reset_time(None, NOW) == 'Unknown'
        assert format_reset_time('', NOW) == 'Unknown'
        assert format_reset_time('tomorrow-ish', NOW) == 'Unknown'


class TestSummarizeBuckets:
    '''
    Test per-model reduction of quota buckets.
    '''

    def test_lowest_fraction_wins_and_vertex_is_skipped(self) -> None:
        quotas = summarize_buckets([bucket('m', 0.8), bucket('m', 0.5), bucket('m_vertex', 0.9)], NOW)

        assert len(quotas) == 1
        assert quotas[0].model_id == 'm'
        assert quotas[0].percent_left == 50

    def test_sorted_by_model(self) -> None:
        quotas = summarize_buckets([bucket('gemini-2.5-pro', 1.0), bucket('gemini-2.0-flash', 0.2)], NOW)

        assert [q.model_id for q in quotas] == ['gemini-2.0-flash', 'gemini-2.5-pro']

    def test_reset_time_follows_binding_bucket(self) -> None:
        quotas = summarize_buckets(
            [
                bucket('m', 0.9, '2025-06-01T15:00:00Z'),
                bucket('m', 0.1, '2025-06-01T12:10:00Z'),
            ],
            NOW,
        )

        assert quotas[0].reset_time == '2025-06-01T12:10:00Z'
        assert quotas[0].reset_description == 'Resets in 10m'

    def test_missing_fields(self) -> None:
        quotas = summarize_buckets([bucket(None, 0.3), bucket('no-fraction', None)], NOW)

        assert [q.model_id for q in quotas] == ['unknown']
        assert quotas[0].reset_description == 'Unknown'

    def test_empty(self) -> None:
        assert summarize_buckets([], NOW) == []

    def test_percent_rounding(self) -> None:
        assert percent_left(0.125) == 13
        assert percent_left(0.994) == 99
        assert percent_left(0.0) == 0
        assert percent_left(1.5) == 100
        assert percent_left(-0.2) == 0


class TestFetchQuota:
    @pytest.mark.asyncio
    async def test_fetch(self, settings) -> None:
        handler = RecordingHandler([
            httpx.Response(200, json={
                'buckets': [
                    {'modelId': 'gemini-2.5-pro', 'remainingFraction': 0.75, 'tokenType': 'REQUESTS'},
                    {'modelId': 'gemini-2.5-pro_vertex', 'remainingFraction': 0.1},
                ],
            }),
        ])
        http_client = mock_client(handler)
        oauth = OAuthClient(settings.auth, http_client=http_client, credentials=make_credentials())

        quotas = await fetch_quota(oauth, 'test-project', http_client, settings.gemini.code_assist_base_url)

        assert [(q.model_id, q.percent_left) for q in quotas] == [('gemini-2.5-pro', 75)]
        request = handler.requests[0]
        assert str(request.url) == 'https://cloudcode.test/v1internal:retrieveUserQuota'
        assert request.headers['Authorization'] == 'Bearer access-1'
        assert handler.json_body() == {'project': 'test-project'}

    @pytest.mark.asyncio
    async def test_no_buckets(self, settings) -> None:
        http_client = mock_client(RecordingHandler([httpx.Response(200, json={})]))
        oauth = OAuthClient(settings.auth, http_client=http_client, credentials=make_credentials())

        assert await fetch_quota(oauth, 'p', http_client, settings.gemini.code_assist_base_url) == []

    @pytest.mark.asyncio
    async def test_backend_error(self, settings) -> None:
        http_client = mock_client(RecordingHandler([httpx.Response(403, text='denied')]))
        oauth = OAuthClient(settings.auth, http_client=http_client, credentials=make_credentials())

        with pytest.raises(APIError) as exc_info:
            await fetch_quota(oauth, 'p', http_client, settings.gemini.code_assist_base_url)

        assert exc_info.value.message == 'retrieveUserQuota failed (403)'


class TestQuotaCache:
    def test_hit_and_miss(self) -> None:
        cache = QuotaCache(ttl_seconds=60)
        quotas = summarize_buckets([bucket('m', 0.5)], NOW)

        assert cache.get('p') is None
        cache.put('p', quotas)
        assert cache.get('p') == quotas
        assert cache.get('other-project') is None

        cache.clear()
        assert cache.get('p') is None

    def test_expiry(self) -> None:
        cache = QuotaCache(ttl_seconds=0)
        cache.put('p', [])

        assert cache.get('p') is None
